"""Profile model: identity mirrored from the external auth provider."""

import uuid

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paxbnb.database import Base, TimestampMixin

USER_TYPES = ("guest", "host")


class Profile(TimestampMixin, Base):
    """Public profile of a guest or host.

    The primary key is the auth provider's user id (the JWT ``sub`` claim),
    so it has no client-side default.
    """

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    user_type: Mapped[str] = mapped_column(String(20), default="guest", nullable=False)

    # Relationships
    properties: Mapped[list["Property"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "Property", back_populates="host", lazy="selectin"
    )

    __table_args__ = (
        CheckConstraint("user_type IN ('guest', 'host')", name="ck_profiles_user_type"),
    )

    def __repr__(self) -> str:
        return f"<Profile id={self.id} email={self.email!r} user_type={self.user_type!r}>"
