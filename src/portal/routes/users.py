from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..guards import get_store, require_admin
from ..store import UserStore
from ..users import set_role

router = APIRouter(dependencies=[Depends(require_admin)], tags=["users"])


class UpdateRoleRequest(BaseModel):
    role: str


@router.get("/users")
async def list_users(store: UserStore = Depends(get_store)):
    """List all users for the admin panel, newest first."""
    return [u.to_dict() for u in await store.list_all()]


@router.get("/users/{user_id}")
async def get_user(user_id: int, store: UserStore = Depends(get_store)):
    user = await store.get(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user.to_dict()


@router.put("/users/{user_id}/role")
async def update_role(
    user_id: int,
    req: UpdateRoleRequest,
    store: UserStore = Depends(get_store),
):
    """Promote or demote a non-admin user between convenor and member."""
    user = await set_role(store, user_id, req.role)
    return user.to_dict()
