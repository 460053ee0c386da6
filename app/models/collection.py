import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base


class AddressBookCollection(Base):
    """One date bucket of a user's address book."""

    __tablename__ = "address_book_collections"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    label: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="collections")  # noqa: F821
    entries: Mapped[list["AddressBookEntry"]] = relationship(  # noqa: F821
        back_populates="collection"
    )

    __table_args__ = (
        UniqueConstraint("user_id", "label", name="uq_address_book_collections_user_label"),
    )
