"""Data models for unfurler."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class UnfurlError(str, Enum):
    """Closed set of reasons an unfurl can fail."""

    BAD_PARAM = "bad-param"
    FAILED_FETCH = "failed-fetch"


class UnfurledData(BaseModel):
    """Preview metadata extracted from a page."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    favicon: Optional[str] = None

    def to_dict(self) -> dict[str, str]:
        """Serializable form with absent fields omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class UnfurlResult(BaseModel):
    """Outcome of a single unfurl: either data or an error, never both."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    value: Optional[UnfurledData] = None
    error: Optional[UnfurlError] = None

    @model_validator(mode="after")
    def _check_variant(self) -> "UnfurlResult":
        if self.ok and (self.value is None or self.error is not None):
            raise ValueError("successful result must carry a value and no error")
        if not self.ok and (self.error is None or self.value is not None):
            raise ValueError("failed result must carry an error and no value")
        return self

    @classmethod
    def success(cls, value: UnfurledData) -> "UnfurlResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: UnfurlError) -> "UnfurlResult":
        return cls(ok=False, error=error)

    def to_dict(self) -> dict:
        if self.ok:
            return {"ok": True, "value": self.value.to_dict()}
        return {"ok": False, "error": self.error.value}


class UnfurlConfig(BaseModel):
    """Configuration for fetching and extraction."""

    user_agent: str = Field(
        default="unfurler/0.1.0 (+link preview)",
        description="User agent string",
    )
    timeout: int = Field(default=10, ge=1, description="Total request timeout in seconds")
    max_retries: int = Field(default=1, ge=1, description="Connection attempts per fetch")
    chunk_size: int = Field(default=16384, ge=512, description="Bytes read per body chunk")
    max_concurrency: int = Field(
        default=10, ge=1, le=100, description="Max concurrent unfurls in batch mode"
    )
