"""Image metadata repository."""

from sqlalchemy import delete, select

from visor.db.models.image import ImageRow
from visor.repositories.base import BaseRepository


class ImageRepository(BaseRepository[ImageRow]):
    model_class = ImageRow

    async def get(self, organization: str, key: str) -> ImageRow | None:
        stmt = select(ImageRow).where(
            ImageRow.key == key,
            ImageRow.organization == organization,
        )
        result = await self._execute(stmt, "read image metadata")
        return result.scalar_one_or_none()

    async def list_for_report(self, organization: str, report_id: str) -> list[ImageRow]:
        stmt = (
            select(ImageRow)
            .where(ImageRow.organization == organization, ImageRow.report_id == report_id)
            .order_by(ImageRow.created_at, ImageRow.key)
        )
        result = await self._execute(stmt, "list report images")
        return list(result.scalars().all())

    async def remove(self, row: ImageRow) -> None:
        await self.drop(row, "remove image metadata")

    async def remove_for_report(self, organization: str, report_id: str) -> list[str]:
        """Delete every image row of a report; returns the removed keys."""
        scope = (ImageRow.organization == organization, ImageRow.report_id == report_id)
        keys = await self._execute(select(ImageRow.key).where(*scope), "list report images")
        removed = list(keys.scalars().all())
        if removed:
            await self._execute(delete(ImageRow).where(*scope), "remove report images")
        return removed
