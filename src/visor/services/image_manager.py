"""Image association manager: image blobs plus metadata tied to a report id."""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from visor.db.models.image import ImageRow
from visor.errors.exceptions import NotFoundError, PersistenceError, ValidationError
from visor.models.image import Image
from visor.repositories.image_repo import ImageRepository
from visor.repositories.report_repo import ReportRepository
from visor.services.id_generator import generate_image_key
from visor.services.image_storage import LocalImageStorage

logger = logging.getLogger(__name__)


def to_image(row: ImageRow) -> Image:
    return Image(
        key=row.key,
        report_id=row.report_id,
        description=row.description,
        filename=row.filename,
        content_type=row.content_type,
        size=row.size,
        created_at=row.created_at,
    )


class ImageManager:
    def __init__(self, session: AsyncSession, storage: LocalImageStorage, max_bytes: int):
        self.repo = ImageRepository(session)
        self.reports = ReportRepository(session)
        self.storage = storage
        self.max_bytes = max_bytes

    async def attach(
        self,
        organization: str,
        report_id: str,
        data: bytes,
        filename: str | None,
        content_type: str | None,
        description: str,
    ) -> Image:
        """Store an image for an existing report of the organization."""
        if not description or not description.strip():
            raise ValidationError("An image needs a non-empty description.")
        if not data:
            raise ValidationError("The uploaded image is empty.")
        if len(data) > self.max_bytes:
            raise ValidationError(
                f"The uploaded image exceeds the {self.max_bytes} byte limit.",
                {"size": len(data)},
            )
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("Only image uploads are supported.", {"contentType": content_type})

        await self.reports.get(organization, report_id)

        key = generate_image_key(filename)
        await asyncio.to_thread(self.storage.put, organization, key, data)
        try:
            row = await self.repo.add(
                "store the image metadata",
                key=key,
                report_id=report_id,
                organization=organization,
                description=description,
                filename=filename or key,
                content_type=content_type,
                size=len(data),
            )
        except PersistenceError:
            await asyncio.to_thread(self.storage.delete, organization, key)
            raise

        logger.info("Attached image %s to report %s (%d bytes)", key, report_id, len(data))
        return to_image(row)

    async def list_for(self, organization: str, report_id: str) -> list[Image]:
        rows = await self.repo.list_for_report(organization, report_id)
        return [to_image(row) for row in rows]

    async def open(self, organization: str, key: str) -> tuple[Image, bytes]:
        row = await self.repo.get(organization, key)
        if row is None:
            raise NotFoundError("Image", key)
        data = await asyncio.to_thread(self.storage.get, organization, key)
        return to_image(row), data

    async def update_description(self, organization: str, key: str, description: str) -> Image:
        row = await self.repo.get(organization, key)
        if row is None:
            raise NotFoundError("Image", key)
        await self.repo.change(row, "update the image description", description=description)
        return to_image(row)

    async def remove(self, organization: str, key: str) -> None:
        row = await self.repo.get(organization, key)
        if row is None:
            raise NotFoundError("Image", key)
        await self.repo.remove(row)
        await self._unlink(organization, [key])
        logger.info("Removed image %s of report %s", key, row.report_id)

    async def remove_for_report(self, organization: str, report_id: str) -> int:
        """Drop every image of a report; returns how many were removed.

        Metadata rows go first; blobs are unlinked only once those writes
        have gone through.
        """
        keys = await self.repo.remove_for_report(organization, report_id)
        await self._unlink(organization, keys)
        if keys:
            logger.info("Removed %d image(s) of deleted report %s", len(keys), report_id)
        return len(keys)

    async def _unlink(self, organization: str, keys: list[str]) -> None:
        for key in keys:
            try:
                await asyncio.to_thread(self.storage.delete, organization, key)
            except OSError as exc:
                logger.warning("Orphaned image blob %s/%s: %s", organization, key, exc)
