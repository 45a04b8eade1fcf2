import logging
from typing import Any, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from showcase.config import get_settings
from showcase.exceptions import ProjectNotFound
from showcase.models import Account, Project, ProjectLike, utcnow
from showcase.schemas import ALL_CATEGORIES, ProjectFilter, validate_project_input
from showcase.services.admin import AdminGate

settings = get_settings()
logger = logging.getLogger(__name__)


def _escape_like(text: str) -> str:
    """Match LIKE wildcards in user input literally"""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class CatalogService:
    """Project catalog: CRUD, filtered listing and view counting"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.gate = AdminGate(db)

    # ============ Mutations (admin only) ============

    async def create(self, data: Any, author_id: str) -> Project:
        """
        Create a project owned by author_id.
        The admin check and input validation both run before anything is written.
        """
        await self.gate.require_admin(author_id)
        project_in = validate_project_input(data)

        project = Project(**project_in.model_dump(), author_id=author_id)
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)

        logger.info(f"Project {project.id} created by {author_id}: {project.title!r}")
        return project

    async def update(self, project_id: int, data: Any, caller_id: str) -> Project:
        """Partial update; counters, owner and timestamps are not writable"""
        await self.gate.require_admin(caller_id)
        changes = validate_project_input(data, partial=True).model_dump(exclude_unset=True)

        project = await self.db.get(Project, project_id, populate_existing=True)
        if project is None:
            raise ProjectNotFound(project_id)

        for field, value in changes.items():
            setattr(project, field, value)
        project.updated_at = utcnow()

        await self.db.commit()
        await self.db.refresh(project)

        logger.info(f"Project {project_id} updated by {caller_id}: {sorted(changes)}")
        return project

    async def delete(self, project_id: int, caller_id: str) -> None:
        """Hard delete; the project's likes go with it"""
        await self.gate.require_admin(caller_id)

        await self.db.execute(
            delete(ProjectLike).where(ProjectLike.project_id == project_id)
        )
        result = await self.db.execute(
            delete(Project).where(Project.id == project_id)
        )

        if result.rowcount == 0:
            await self.db.rollback()
            raise ProjectNotFound(project_id)

        await self.db.commit()
        logger.info(f"Project {project_id} deleted by {caller_id}")

    # ============ Reads ============

    async def list_projects(self, filters: Optional[ProjectFilter] = None) -> List[Project]:
        """Published projects, newest first"""
        filters = filters or ProjectFilter(limit=settings.DEFAULT_PAGE_SIZE)
        limit = max(1, min(filters.limit, settings.MAX_PAGE_SIZE))
        offset = max(0, filters.offset)

        query = select(Project).where(Project.is_published.is_(True))

        if filters.category and filters.category != ALL_CATEGORIES:
            query = query.where(Project.category == filters.category)

        if filters.search_text:
            pattern = f"%{_escape_like(filters.search_text)}%"
            query = query.where(Project.title.ilike(pattern, escape="\\"))

        query = (
            query
            .order_by(Project.created_at.desc(), Project.id.desc())
            .limit(limit)
            .offset(offset)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, project_id: int) -> Project:
        project = await self.db.get(Project, project_id, populate_existing=True)
        if project is None:
            raise ProjectNotFound(project_id)
        return project

    async def get_with_author(self, project_id: int) -> Project:
        """Project with its author loaded; a missing author counts as not found"""
        query = (
            select(Project)
            .join(Account, Project.author_id == Account.id)
            .options(contains_eager(Project.author))
            .where(Project.id == project_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        project = result.unique().scalar_one_or_none()

        if project is None:
            raise ProjectNotFound(project_id)
        return project

    async def increment_views(self, project_id: int) -> bool:
        """
        Add one view. Unknown ids are a no-op.
        Returns whether a project row was updated.
        """
        result = await self.db.execute(
            update(Project)
            .where(Project.id == project_id)
            .values(views=Project.views + 1)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount > 0
