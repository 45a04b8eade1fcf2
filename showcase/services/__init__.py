from showcase.services.accounts import AccountService
from showcase.services.admin import AdminGate
from showcase.services.catalog import CatalogService
from showcase.services.likes import LikeService
from showcase.services.stats import StatsService
from showcase.services.uploads import UploadService

__all__ = [
    "AccountService",
    "AdminGate",
    "CatalogService",
    "LikeService",
    "StatsService",
    "UploadService",
]
