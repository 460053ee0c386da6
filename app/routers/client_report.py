from fastapi import APIRouter, Depends

from app.dependencies import get_report_ingestor
from app.models.address_book_entry import DeviceStatus
from app.schemas.client_report import FirstInstallReport, FirstInstallResult, ReportResponse
from app.services.report_service import IngestResult, ReportIngestor

router = APIRouter(prefix="/api/client", tags=["client-report"])


def _render(result: IngestResult) -> ReportResponse:
    entry = result.entry
    if result.created:
        message = f"Device added successfully to user {entry.user_id}'s address book"
    else:
        message = "Device already exists"
    return ReportResponse(
        message=message,
        data=FirstInstallResult(
            outcome=result.outcome,
            device_id=entry.device_id,
            user_id=entry.user_id,
            collection_id=result.collection.id,
            collection_label=result.collection.label,
            status=DeviceStatus(entry.status).name.lower(),
        ),
    )


@router.post("/first_install", response_model=ReportResponse)
async def first_install_report(
    report: FirstInstallReport,
    ingestor: ReportIngestor = Depends(get_report_ingestor),
):
    """Add a freshly installed client to the target user's address book for today.

    Re-reporting a known device is a no-op that still succeeds.
    """
    result = await ingestor.ingest(report)
    return _render(result)
