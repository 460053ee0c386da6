from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.services.address_book_service import DeviceRegistry
from app.services.collection_service import CollectionProvisioner
from app.services.report_service import ReportIngestor
from app.services.user_directory import UserDirectory


async def get_report_ingestor(db: AsyncSession = Depends(get_db)) -> ReportIngestor:
    return ReportIngestor(
        db=db,
        users=UserDirectory(db),
        collections=CollectionProvisioner(db),
        registry=DeviceRegistry(db),
        tz=settings.report_tz,
    )
