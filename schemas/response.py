"""Response schemas for the Proofchain API."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


# ── Enums ──────────────────────────────────────────────────────────────

class VerificationStatus(str, Enum):
    IDLE = "idle"
    VERIFYING = "verifying"
    AUTHENTIC = "authentic"
    TAMPERED = "tampered"


class ReportKind(str, Enum):
    SCAM = "scam"
    FAKE_NEWS = "fake-news"
    VOTING_ANOMALY = "voting-anomaly"


# ── Flow outputs ───────────────────────────────────────────────────────

class ScamCheckResult(BaseModel):
    is_scam: bool = Field(alias="isScam", description="Whether the message is a scam or not.")
    confidence: float = Field(ge=0.0, le=1.0, description="Confidence of the detection (0 to 1).")
    reason: str = Field(description="The reason for the scam detection.")

    model_config = {"populate_by_name": True}

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> Any:
        # Out-of-range numbers are clamped; non-numeric values fail validation.
        if isinstance(value, bool):
            return value
        try:
            number = float(value)
        except (TypeError, ValueError):
            return value
        if number != number:  # NaN
            return value
        return max(0.0, min(1.0, number))


class NewsVerifyResult(BaseModel):
    verification_result: str = Field(
        alias="verificationResult",
        min_length=1,
        description="Whether the news report is likely accurate, with explanation.",
    )

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}


class TranslateResult(BaseModel):
    translated_text: str = Field(alias="translatedText")

    model_config = {"populate_by_name": True}


# ── Documents ──────────────────────────────────────────────────────────

class DocumentRecord(BaseModel):
    """A registered document.  ``hash`` is the hex digest of the original bytes."""

    id: str
    name: str
    hash: str
    qr_code_url: str = Field(alias="qrCodeUrl")
    filename: str
    content_type: str | None = Field(default=None, alias="contentType")
    size: int = Field(ge=0)
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True, "frozen": True}


class DocumentVerificationResponse(BaseModel):
    document_id: str = Field(alias="documentId")
    status: VerificationStatus
    computed_hash: str = Field(alias="computedHash")
    expected_hash: str = Field(alias="expectedHash")

    model_config = {"populate_by_name": True}


# ── Reports ────────────────────────────────────────────────────────────

class ReportReceipt(BaseModel):
    report_id: str = Field(alias="reportId")
    kind: ReportKind
    received_at: datetime = Field(alias="receivedAt")
    title: str
    message: str

    model_config = {"populate_by_name": True}


# ── Misc ───────────────────────────────────────────────────────────────

class FlowInfo(BaseModel):
    name: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")
    output_schema: dict[str, Any] = Field(alias="outputSchema")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None
