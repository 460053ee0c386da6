import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import dialect_insert
from app.exceptions import ConflictError
from app.models.address_book_entry import AddressBookEntry, DeviceStatus


def _entry_query(user_id: int, device_id: str):
    return (
        select(AddressBookEntry)
        .options(selectinload(AddressBookEntry.collection))
        .where(
            AddressBookEntry.user_id == user_id,
            AddressBookEntry.device_id == device_id,
        )
        .execution_options(populate_existing=True)
    )


class DeviceRegistry:
    """Address book entries keyed by (user_id, device_id)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists(self, user_id: int, device_id: str) -> bool:
        result = await self.db.execute(
            select(AddressBookEntry.id)
            .where(
                AddressBookEntry.user_id == user_id,
                AddressBookEntry.device_id == device_id,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def get(self, user_id: int, device_id: str) -> AddressBookEntry | None:
        result = await self.db.execute(_entry_query(user_id, device_id))
        return result.scalar_one_or_none()

    async def create(
        self,
        *,
        user_id: int,
        device_id: str,
        collection_id: uuid.UUID,
        hostname: str | None = None,
        platform: str = "unknown",
        status: DeviceStatus = DeviceStatus.OFFLINE,
    ) -> tuple[AddressBookEntry, bool]:
        """Store a new entry. Returns ``(entry, created)``.

        When another writer stored the same (user_id, device_id) first, the
        stored entry is returned with ``created=False`` instead of an error.
        """
        try:
            entry = await self._insert(
                user_id=user_id,
                device_id=device_id,
                collection_id=collection_id,
                hostname=hostname,
                platform=platform,
                status=int(status),
            )
        except ConflictError:
            # Lost the race; the row is there now
            result = await self.db.execute(_entry_query(user_id, device_id))
            return result.scalar_one(), False
        return entry, True

    async def _insert(self, **values) -> AddressBookEntry:
        insert = dialect_insert(self.db)
        stmt = (
            insert(AddressBookEntry)
            .values(id=uuid.uuid4(), created_at=datetime.now(timezone.utc), **values)
            .on_conflict_do_nothing(index_elements=["user_id", "device_id"])
            .returning(AddressBookEntry)
        )
        result = await self.db.execute(stmt)
        entry = result.scalar_one_or_none()
        if entry is None:
            raise ConflictError(
                f"Device {values['device_id']!r} already registered for user {values['user_id']}"
            )
        return entry
