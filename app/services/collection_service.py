import uuid
from datetime import date, datetime, timezone, tzinfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import dialect_insert
from app.models.collection import AddressBookCollection

LABEL_FORMAT = "%Y-%m-%d"


def today_label(tz: tzinfo, now: datetime | None = None) -> str:
    """Calendar date of ``now`` (default: the current instant) as seen in ``tz``."""
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    return now.astimezone(tz).strftime(LABEL_FORMAT)


def validate_label(label: str) -> str:
    try:
        parsed = date.fromisoformat(label)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid collection label {label!r}, expected YYYY-MM-DD") from None
    if parsed.strftime(LABEL_FORMAT) != label:
        raise ValueError(f"Invalid collection label {label!r}, expected YYYY-MM-DD")
    return label


def _collection_query(user_id: int, label: str):
    return select(AddressBookCollection).where(
        AddressBookCollection.user_id == user_id,
        AddressBookCollection.label == label,
    )


class CollectionProvisioner:
    """Lazily provisions one address book collection per user per day."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_or_create(self, user_id: int, label: str) -> AddressBookCollection:
        """Return the (user_id, label) collection, creating it if absent.

        The insert is a single INSERT ... ON CONFLICT DO NOTHING RETURNING, so
        concurrent first reports for the same user-day never store two rows.
        When the insert yields nothing the stored row is read back. Existing
        buckets are not written to, so no row lock is held on them for the
        rest of the ingest transaction.
        """
        validate_label(label)
        insert = dialect_insert(self.db)
        stmt = insert(AddressBookCollection).values(
            id=uuid.uuid4(),
            user_id=user_id,
            label=label,
            created_at=datetime.now(timezone.utc),
        )
        stmt = stmt.on_conflict_do_nothing(index_elements=["user_id", "label"])
        stmt = stmt.returning(AddressBookCollection)
        result = await self.db.execute(stmt)
        collection = result.scalar_one_or_none()
        if collection is not None:
            return collection

        # Another report created the bucket first
        result = await self.db.execute(
            _collection_query(user_id, label).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def get(self, user_id: int, label: str) -> AddressBookCollection | None:
        result = await self.db.execute(_collection_query(user_id, label))
        return result.scalar_one_or_none()
