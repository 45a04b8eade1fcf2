import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.exceptions import LikeConflict, ProjectNotFound
from showcase.models import Project, ProjectLike

logger = logging.getLogger(__name__)


class LikeService:
    """
    Like/unlike toggling.

    The membership row and the project's like counter change in the same
    transaction, so project.likes always equals the number of memberships.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def toggle(self, project_id: int, account_id: str) -> bool:
        """Flip the like state. Returns True if the project is now liked."""
        try:
            if not await self._project_exists(project_id):
                raise ProjectNotFound(project_id)

            if await self.is_liked(project_id, account_id):
                await self._unlike(project_id, account_id)
                liked = False
            else:
                try:
                    await self._like(project_id, account_id)
                except LikeConflict:
                    # A concurrent toggle inserted the same membership first
                    logger.info(f"Like race on project {project_id} by {account_id}")
                liked = True

            await self.db.commit()
        except (SQLAlchemyError, ProjectNotFound):
            await self.db.rollback()
            raise

        logger.info(f"Account {account_id} {'liked' if liked else 'unliked'} project {project_id}")
        return liked

    async def is_liked(self, project_id: int, account_id: str) -> bool:
        return await self._membership_exists(project_id, account_id)

    async def _membership_exists(self, project_id: int, account_id: str) -> bool:
        result = await self.db.execute(
            select(ProjectLike.id)
            .where(
                ProjectLike.project_id == project_id,
                ProjectLike.account_id == account_id
            )
            .limit(1)
        )
        return result.first() is not None

    async def _project_exists(self, project_id: int) -> bool:
        result = await self.db.execute(
            select(Project.id).where(Project.id == project_id)
        )
        return result.first() is not None

    async def _like(self, project_id: int, account_id: str) -> None:
        # Savepoint: a failed insert must not discard the caller's transaction
        try:
            async with self.db.begin_nested():
                self.db.add(ProjectLike(project_id=project_id, account_id=account_id))
                await self.db.flush()
        except IntegrityError:
            # Only a duplicate membership is a lost race
            if await self._membership_exists(project_id, account_id):
                raise LikeConflict(project_id, account_id)
            if not await self._project_exists(project_id):
                raise ProjectNotFound(project_id)
            raise

        await self.db.execute(
            update(Project)
            .where(Project.id == project_id)
            .values(likes=Project.likes + 1)
            .execution_options(synchronize_session=False)
        )

    async def _unlike(self, project_id: int, account_id: str) -> None:
        result = await self.db.execute(
            delete(ProjectLike).where(
                ProjectLike.project_id == project_id,
                ProjectLike.account_id == account_id
            )
        )

        # Only a removed row may move the counter
        if result.rowcount > 0:
            await self.db.execute(
                update(Project)
                .where(Project.id == project_id, Project.likes > 0)
                .values(likes=Project.likes - 1)
                .execution_options(synchronize_session=False)
            )
