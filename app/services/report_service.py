import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    OperationFailedError,
    ReportValidationError,
    UserNotFoundError,
    format_validation_errors,
)
from app.models.address_book_entry import AddressBookEntry, DeviceStatus
from app.models.collection import AddressBookCollection
from app.schemas.client_report import FirstInstallReport, normalize_platform
from app.services.address_book_service import DeviceRegistry
from app.services.collection_service import CollectionProvisioner, today_label
from app.services.user_directory import UserDirectory

OUTCOME_CREATED = "created"
OUTCOME_NOOP = "noop"


@dataclass
class IngestResult:
    outcome: str
    entry: AddressBookEntry
    collection: AddressBookCollection

    @property
    def created(self) -> bool:
        return self.outcome == OUTCOME_CREATED


def parse_report(payload: FirstInstallReport | dict[str, Any]) -> FirstInstallReport:
    if isinstance(payload, FirstInstallReport):
        return payload
    try:
        return FirstInstallReport.model_validate(payload)
    except ValidationError as exc:
        raise ReportValidationError(format_validation_errors(exc.errors())) from exc


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReportIngestor:
    """Registers a first-install report into the target user's address book.

    Validation and user lookup happen before anything is written. Re-reporting
    a device that is already registered is a successful no-op, including when
    a concurrent report for the same device wins the insert.
    """

    def __init__(
        self,
        db: AsyncSession,
        users: UserDirectory,
        collections: CollectionProvisioner,
        registry: DeviceRegistry,
        tz: tzinfo,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.db = db
        self.users = users
        self.collections = collections
        self.registry = registry
        self.tz = tz
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock

    async def ingest(self, report: FirstInstallReport | dict[str, Any]) -> IngestResult:
        report = parse_report(report)

        user = await self.users.resolve(report.target_user_id)
        if user is None:
            raise UserNotFoundError(report.target_user_id)

        try:
            existing = await self.registry.get(user.id, report.client_id)
            if existing is not None:
                self.logger.debug(
                    "Device %s already in address book of user %s", report.client_id, user.id
                )
                return IngestResult(OUTCOME_NOOP, existing, existing.collection)

            label = today_label(self.tz, self.clock())
            collection = await self.collections.get_or_create(user.id, label)
            entry, created = await self.registry.create(
                user_id=user.id,
                device_id=report.client_id,
                collection_id=collection.id,
                hostname=report.hostname,
                platform=normalize_platform(report.platform),
                status=DeviceStatus.OFFLINE,
            )
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            self.logger.exception(
                "Failed to register device %s for user %s", report.client_id, report.target_user_id
            )
            raise OperationFailedError(type(exc).__name__) from exc

        if not created:
            self.logger.debug(
                "Device %s was registered concurrently for user %s", report.client_id, user.id
            )
            return IngestResult(OUTCOME_NOOP, entry, entry.collection)

        self.logger.info(
            "Registered device %s for user %s in collection %s",
            report.client_id,
            user.id,
            collection.label,
        )
        return IngestResult(OUTCOME_CREATED, entry, collection)
