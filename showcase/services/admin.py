import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.exceptions import AuthorizationError
from showcase.models import Account

logger = logging.getLogger(__name__)


class AdminGate:
    """Single boolean authorization check in front of catalog mutations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def is_admin(self, account_id: str) -> bool:
        """Unknown accounts are simply not admins"""
        result = await self.db.execute(
            select(Account.is_admin).where(Account.id == account_id)
        )
        is_admin = result.scalar_one_or_none()
        return bool(is_admin)

    async def require_admin(self, account_id: str) -> None:
        if not await self.is_admin(account_id):
            logger.warning(f"Rejected admin operation for account {account_id}")
            raise AuthorizationError()
