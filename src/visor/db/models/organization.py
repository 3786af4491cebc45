"""Organization and member token tables for multi-tenancy."""

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from visor.db.base import Base, TimestampMixin


class OrganizationRow(Base, TimestampMixin):
    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(128), primary_key=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class OrganizationTokenRow(Base, TimestampMixin):
    __tablename__ = "organization_tokens"

    token_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    organization: Mapped[str] = mapped_column(
        String(128), ForeignKey("organizations.name"), nullable=False, index=True
    )
    handle: Mapped[str] = mapped_column(String(200), nullable=False)
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
