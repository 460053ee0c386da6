import uuid

from pydantic import BaseModel, Field, field_validator

from app.exceptions import CODE_OK

KNOWN_PLATFORMS = {"windows", "linux", "mac", "android", "ios"}

PLATFORM_ALIASES = {
    "macos": "mac",
    "darwin": "mac",
    "osx": "mac",
    "win": "windows",
    "win32": "windows",
    "win64": "windows",
    "iphone": "ios",
    "ipad": "ios",
    "ipados": "ios",
}


def normalize_platform(value: str | None) -> str:
    """Map a reported platform string onto the known platform tags."""
    if not value:
        return "unknown"
    tag = value.strip().lower()
    tag = PLATFORM_ALIASES.get(tag, tag)
    return tag if tag in KNOWN_PLATFORMS else "unknown"


class FirstInstallReport(BaseModel):
    client_id: str = Field(min_length=1, max_length=255)
    hostname: str | None = Field(default=None, max_length=255)
    platform: str | None = None  # unrecognised values are stored as "unknown"
    target_user_id: int = Field(gt=0, strict=True)

    @field_validator("client_id")
    @classmethod
    def _client_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("client_id must not be blank")
        return value


class FirstInstallResult(BaseModel):
    outcome: str  # "created" or "noop"
    device_id: str
    user_id: int
    collection_id: uuid.UUID
    collection_label: str
    status: str  # "offline" or "online"


class ReportResponse(BaseModel):
    code: int = CODE_OK
    message: str
    data: FirstInstallResult
