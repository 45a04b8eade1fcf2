import logging
from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.exceptions import AccountConflict
from showcase.models import Account, utcnow
from showcase.schemas import AccountProfile

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class AccountService:
    """Accounts are created and refreshed by OAuth logins, never deleted"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, account_id: str) -> Optional[Account]:
        return await self.db.get(Account, account_id, populate_existing=True)

    async def upsert(self, profile: AccountProfile) -> Account:
        """
        Insert on first login; overwrite profile fields on later ones.
        One statement, so concurrent first logins cannot collide on the id.
        The admin flag is never written here.
        """
        fields = profile.model_dump(exclude={"id"})
        now = utcnow()

        insert = _UPSERT_INSERTS[self.db.get_bind().dialect.name]
        stmt = (
            insert(Account)
            .values(id=profile.id, created_at=now, updated_at=now, **fields)
            .on_conflict_do_update(
                index_elements=[Account.id],
                set_={**fields, "updated_at": now}
            )
        )

        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except IntegrityError:
            # Id conflicts are absorbed above; what is left is a taken email
            await self.db.rollback()
            logger.warning(f"Login for account {profile.id} rejected: email already in use")
            raise AccountConflict(profile.id)

        logger.info(f"Account {profile.id} signed in")
        return await self.get(profile.id)
