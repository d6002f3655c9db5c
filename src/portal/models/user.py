import enum

from sqlalchemy import CheckConstraint, Index, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, SerialPrimaryKey, TimestampMixin


class Role(str, enum.Enum):
    ADMIN = "admin"
    CONVENOR = "convenor"
    MEMBER = "member"


# Roles the admin panel may hand out. Admin is only ever granted at signup.
ASSIGNABLE_ROLES = frozenset({Role.CONVENOR.value, Role.MEMBER.value})


class User(SerialPrimaryKey, TimestampMixin, Base):
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("facebook_id", name="uq_users_facebook_id"),
        CheckConstraint(
            "role IN ('admin', 'convenor', 'member')", name="ck_users_role"
        ),
        # At most one admin row; closes the count-then-insert signup race.
        Index(
            "uq_users_single_admin",
            "role",
            unique=True,
            postgresql_where=text("role = 'admin'"),
            sqlite_where=text("role = 'admin'"),
        ),
    )

    facebook_id: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    picture: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(
        String(50), nullable=False, server_default=Role.MEMBER.value
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "facebook_id": self.facebook_id,
            "name": self.name,
            "email": self.email,
            "picture": self.picture,
            "created_at": self.created_at.isoformat(),
            "role": self.role,
        }
