"""Report image metadata table."""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from visor.db.base import Base, TenantMixin, TimestampMixin


class ImageRow(Base, TenantMixin, TimestampMixin):
    __tablename__ = "images"

    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    # Weak reference: no foreign key, the report may be deleted independently
    report_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    filename: Mapped[str] = mapped_column(String(300), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
