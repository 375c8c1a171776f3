from dataclasses import dataclass, field
from typing import Literal, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from embed_adblocker.configs import settings
from embed_adblocker.utils.http_utils import is_absolute_http_url

VideoType = Literal["hls", "mp4", "unknown"]
EmbedMode = Literal["extract", "proxy", "wrapper"]


class InvalidRequestError(ValueError):
    """Raised when the embed request parameters are missing or malformed."""


class EmbedRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="The embed page to process.")
    timeout: int = Field(
        default_factory=lambda: settings.default_timeout_ms,
        description="Timeout for the embed page fetch in milliseconds.",
    )
    mode: EmbedMode = Field("extract", description="Whether to extract sources, proxy the page or wrap it.")

    @field_validator("url")
    def validate_url(cls, value: str):
        if not is_absolute_http_url(value):
            raise ValueError("Invalid URL format")
        return value


class ExtractedSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Absolute URL of the stream.")
    type: VideoType = Field(..., description="Stream type derived from the URL.")
    quality: Optional[str] = Field(None, description="Quality label such as 1080p or hd.")


class ExtractionDebug(BaseModel):
    model_config = ConfigDict(frozen=True)

    totalRequests: int = 1
    blockedRequests: int = 0
    detectedVideos: int = 0
    executionTimeMs: int = 0


class ExtractionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: bool
    sources: Optional[List[ExtractedSource]] = None
    error: Optional[str] = None
    debug: Optional[ExtractionDebug] = None

    def to_response(self) -> dict:
        """Serialize without the absent fields."""
        return self.model_dump(exclude_none=True)


@dataclass(frozen=True)
class RewrittenDocument:
    html: str
    headers: Dict[str, str] = field(default_factory=dict)
