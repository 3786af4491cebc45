"""SQLAlchemy ORM models - import all to register with Base.metadata."""

from visor.db.models.organization import OrganizationRow, OrganizationTokenRow
from visor.db.models.report import ReportRow
from visor.db.models.image import ImageRow

__all__ = [
    "OrganizationRow",
    "OrganizationTokenRow",
    "ReportRow",
    "ImageRow",
]
