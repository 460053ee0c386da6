from app.models.address_book_entry import AddressBookEntry, DeviceStatus
from app.models.base import Base
from app.models.collection import AddressBookCollection
from app.models.user import User

__all__ = [
    "AddressBookCollection",
    "AddressBookEntry",
    "Base",
    "DeviceStatus",
    "User",
]
