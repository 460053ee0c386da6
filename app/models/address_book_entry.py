import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base


class DeviceStatus(enum.IntEnum):
    OFFLINE = 0
    ONLINE = 1


class AddressBookEntry(Base):
    __tablename__ = "address_book_entries"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    device_id: Mapped[str] = mapped_column(String(255), nullable=False)  # client supplied
    hostname: Mapped[str | None] = mapped_column(String(255))
    platform: Mapped[str] = mapped_column(
        String(20), nullable=False, default="unknown"
    )  # windows, linux, mac, android, ios, unknown
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    collection_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("address_book_collections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Only presence reporting moves an entry to ONLINE
    status: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DeviceStatus.OFFLINE, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    collection: Mapped["AddressBookCollection"] = relationship(back_populates="entries")  # noqa: F821

    __table_args__ = (
        UniqueConstraint("user_id", "device_id", name="uq_address_book_entries_user_device"),
    )
