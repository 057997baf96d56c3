"""Request schemas for the Proofchain API."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from config import settings

ALLOWED_ATTACHMENT_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/webp",
    "video/mp4",
    "video/quicktime",
)


# ── Flow inputs ────────────────────────────────────────────────────────

class ScamCheckRequest(BaseModel):
    """A message to be checked for scam content.  Any non-blank text is accepted."""

    message: str = Field(
        ...,
        min_length=1,
        max_length=50_000,
        description="The message to check for scam content.",
    )

    @field_validator("message")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("message must not be blank")
        return v


class ScamCheckForm(ScamCheckRequest):
    """The public scam-check form, which asks for at least 10 characters."""

    message: str = Field(
        ...,
        min_length=10,
        max_length=50_000,
        description="The message to check for scam content.",
    )


class NewsVerifyRequest(BaseModel):
    news_report: str = Field(
        ...,
        alias="newsReport",
        min_length=20,
        max_length=50_000,
        description="The news report to cross-verify.",
    )

    model_config = {"populate_by_name": True}


class TranslateRequest(BaseModel):
    """One transcript segment to translate.  Languages are display names ("Hindi")."""

    text: str = Field(..., min_length=1, max_length=10_000)
    source_language: str = Field(..., alias="sourceLanguage", min_length=1)
    target_language: str = Field(
        default_factory=lambda: settings.translation_target_language,
        alias="targetLanguage",
        min_length=1,
    )

    model_config = {"populate_by_name": True}

    @field_validator("source_language", "target_language")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("language must not be blank")
        return value.strip()


# ── Community reports ──────────────────────────────────────────────────

class Attachment(BaseModel):
    filename: str = Field(..., min_length=1)
    content_type: str = Field(..., alias="contentType")
    size: int = Field(..., ge=0)

    model_config = {"populate_by_name": True}

    @field_validator("content_type")
    @classmethod
    def _allowed_type(cls, value: str) -> str:
        if value not in ALLOWED_ATTACHMENT_TYPES:
            raise ValueError("Only .jpg, .png, .webp, .mp4, and .mov files are accepted.")
        return value

    @field_validator("size")
    @classmethod
    def _max_size(cls, value: int) -> int:
        if value > settings.max_upload_bytes:
            raise ValueError(f"Max file size is {settings.max_upload_bytes // (1024 * 1024)}MB.")
        return value


class ScamReport(BaseModel):
    description: str = Field(
        ...,
        min_length=20,
        description="Detailed description of the scam: what happened, which platform was used.",
    )
    attachments: list[Attachment] | None = Field(
        default=None,
        description="Evidence files; when supplied at least one is required.",
    )
    is_anonymous: bool = Field(default=False, alias="isAnonymous")

    model_config = {"populate_by_name": True}

    @field_validator("attachments")
    @classmethod
    def _at_least_one(cls, value: list[Attachment] | None) -> list[Attachment] | None:
        if value is not None and len(value) == 0:
            raise ValueError("At least one file is required.")
        return value


class NewsContentType(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"


class FakeNewsReport(BaseModel):
    content_type: NewsContentType = Field(..., alias="contentType")
    description: str = Field(
        ...,
        min_length=20,
        description="A description, URL, or the text of the news item.",
    )

    model_config = {"populate_by_name": True}


class AnomalyType(str, Enum):
    DUPLICATE_VOTER = "duplicate-voter"
    FAKE_CANDIDATE = "fake-candidate"
    MALICIOUS_LINK = "malicious-link"
    MISINFORMATION = "misinformation"
    OTHER = "other"


class VotingAnomalyReport(BaseModel):
    report_type: AnomalyType = Field(..., alias="reportType")
    details: str = Field(
        ...,
        min_length=20,
        description="Dates, locations, names, and URLs if applicable.",
    )
    evidence: str | None = Field(default=None, description="File name of attached evidence.")

    model_config = {"populate_by_name": True}
