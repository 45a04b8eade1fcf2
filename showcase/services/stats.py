from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.models import Account, Project
from showcase.schemas import StatsResponse


class StatsService:
    """Aggregate counts for the landing page and admin dashboard"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_stats(self) -> StatsResponse:
        published = Project.is_published.is_(True)

        total_projects = await self.db.scalar(
            select(func.count(Project.id)).where(published)
        )
        total_users = await self.db.scalar(select(func.count(Account.id)))
        total_views = await self.db.scalar(
            select(func.coalesce(func.sum(Project.views), 0)).where(published)
        )

        return StatsResponse(
            total_projects=total_projects or 0,
            total_users=total_users or 0,
            total_views=total_views or 0,
        )
