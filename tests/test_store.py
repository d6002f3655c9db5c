"""Tests for the users table access layer."""

import pytest
from sqlalchemy.exc import IntegrityError

from portal.errors import ConflictError
from portal.store import MAX_USER_ID, UserStore


async def _add(store: UserStore, facebook_id: str, role: str = "member"):
    return await store.insert(
        facebook_id=facebook_id,
        name=facebook_id.upper(),
        email=None,
        picture=f"https://cdn.example.com/{facebook_id}.jpg",
        role=role,
    )


@pytest.mark.asyncio
async def test_insert_assigns_id_and_created_at(store: UserStore) -> None:
    user = await _add(store, "fb1")
    assert user.id is not None
    assert user.created_at is not None
    assert user.role == "member"


@pytest.mark.asyncio
async def test_lookups(store: UserStore) -> None:
    user = await _add(store, "fb1")
    assert (await store.get(user.id)).facebook_id == "fb1"
    assert (await store.get_by_facebook_id("fb1")).id == user.id
    assert await store.get(user.id + 100) is None
    assert await store.get_by_facebook_id("nobody") is None


@pytest.mark.asyncio
async def test_count(store: UserStore) -> None:
    assert await store.count() == 0
    await _add(store, "fb1")
    await _add(store, "fb2")
    assert await store.count() == 2


@pytest.mark.asyncio
async def test_duplicate_facebook_id_conflicts(store: UserStore) -> None:
    await _add(store, "fb1")
    with pytest.raises(ConflictError):
        await _add(store, "fb1")
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_second_admin_conflicts(store: UserStore) -> None:
    await _add(store, "fb1", role="admin")
    with pytest.raises(ConflictError):
        await _add(store, "fb2", role="admin")
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_list_all_newest_first(store: UserStore) -> None:
    first = await _add(store, "fb1")
    second = await _add(store, "fb2")
    third = await _add(store, "fb3")
    users = await store.list_all()
    assert [u.id for u in users] == [third.id, second.id, first.id]


@pytest.mark.asyncio
async def test_update_role_changes_non_admin(store: UserStore) -> None:
    user = await _add(store, "fb1")
    updated = await store.update_role(user.id, "convenor")
    assert updated.id == user.id
    assert updated.role == "convenor"
    assert (await store.get(user.id)).role == "convenor"


@pytest.mark.asyncio
async def test_update_role_skips_admin(store: UserStore) -> None:
    admin = await _add(store, "fb1", role="admin")
    assert await store.update_role(admin.id, "member") is None
    assert (await store.get(admin.id)).role == "admin"


@pytest.mark.asyncio
async def test_update_role_missing_user(store: UserStore) -> None:
    assert await store.update_role(999, "member") is None


@pytest.mark.asyncio
async def test_check_violation_is_not_a_conflict(store: UserStore) -> None:
    with pytest.raises(IntegrityError):
        await _add(store, "fb1", role="owner")
    assert await store.count() == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id", [0, -1, MAX_USER_ID + 1, 10**20])
async def test_ids_outside_serial_range_are_not_found(store: UserStore, user_id: int) -> None:
    await _add(store, "fb1")
    assert await store.get(user_id) is None
    assert await store.update_role(user_id, "convenor") is None
