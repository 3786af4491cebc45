"""VISOR report table."""

from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from visor.db.base import Base, TenantMixin, TimestampMixin


class ReportRow(Base, TenantMixin, TimestampMixin):
    __tablename__ = "reports"

    # Auto-increment key records creation order for stable listings
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    report_id: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    report_name: Mapped[str] = mapped_column(String(500), nullable=False)
    visor_location: Mapped[dict] = mapped_column(JSON, nullable=False)
    report_meta: Mapped[dict] = mapped_column(JSON, nullable=False)
    # Casefolded copies for name and keyword filters
    name_folded: Mapped[str] = mapped_column(Text, nullable=False)
    meta_folded: Mapped[str] = mapped_column(Text, nullable=False)
    location_details: Mapped[dict] = mapped_column(JSON, nullable=False)
    navigation: Mapped[dict] = mapped_column(JSON, nullable=False)
    nav_system: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    nav_stellar_object: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    nav_planet_level_object: Mapped[str | None] = mapped_column(String(200), nullable=True)
    om_markers: Mapped[list | None] = mapped_column(JSON(none_as_null=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
