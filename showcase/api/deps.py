from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.auth.github import GitHubOAuthClient
from showcase.database import get_db
from showcase.services.accounts import AccountService
from showcase.services.catalog import CatalogService
from showcase.services.likes import LikeService
from showcase.services.stats import StatsService
from showcase.services.uploads import UploadService


async def get_catalog_service(db: AsyncSession = Depends(get_db)) -> CatalogService:
    """Dependency for CatalogService."""
    return CatalogService(db)


async def get_like_service(db: AsyncSession = Depends(get_db)) -> LikeService:
    """Dependency for LikeService."""
    return LikeService(db)


async def get_stats_service(db: AsyncSession = Depends(get_db)) -> StatsService:
    """Dependency for StatsService."""
    return StatsService(db)


async def get_account_service(db: AsyncSession = Depends(get_db)) -> AccountService:
    """Dependency for AccountService."""
    return AccountService(db)


async def get_upload_service() -> UploadService:
    """Dependency for UploadService."""
    return UploadService()


async def get_oauth_client() -> GitHubOAuthClient:
    """Dependency for the GitHub OAuth client."""
    return GitHubOAuthClient()
