"""Proofchain — civic-safety verification service.

FastAPI application entry-point.
Serves the scam-detection, news cross-verification and translation flows,
document authenticity checks, community reports and voice-input sessions.
"""

from __future__ import annotations

import logging
import secrets
import sys
from contextlib import asynccontextmanager
from typing import Awaitable, TypeVar

from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, UploadFile, WebSocket, status
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from engine.document_verifier import AuthenticityDialog, UnsupportedDigestError
from engine.flow import FLOW_REGISTRY, FlowError
from engine.news_verifier import cross_verify_fake_news
from engine.reports import submit_report
from engine.scam_detector import detect_scam_message
from engine.translator import translate_text
from schemas.request import (
    FakeNewsReport,
    NewsVerifyRequest,
    ScamCheckForm,
    ScamReport,
    TranslateRequest,
    VotingAnomalyReport,
)
from schemas.response import (
    DocumentRecord,
    DocumentVerificationResponse,
    ErrorResponse,
    FlowInfo,
    NewsVerifyResult,
    ReportReceipt,
    ScamCheckResult,
    TranslateResult,
)
from services.document_registry import DocumentNotFoundError, DocumentRegistry
from services.voice_socket import VoiceSession

VERSION = "0.1.0"

# ── Logging ────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(name)-34s | %(levelname)-7s | %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger("proofchain")

T = TypeVar("T")

registry = DocumentRegistry()


# ── Internal-token auth dependency ─────────────────────────────────────

def _token_ok(supplied: str | None) -> bool:
    expected = settings.internal_token
    if not expected:
        return True  # no token configured → open access (dev only)
    return bool(supplied) and secrets.compare_digest(supplied, expected)


async def verify_internal_token(
    x_internal_token: str | None = Header(default=None),
) -> None:
    """Reject requests that don't carry the shared internal token.

    Skipped when ``INTERNAL_TOKEN`` is not configured (dev mode).
    """
    if not _token_ok(x_internal_token):
        raise HTTPException(status_code=401, detail="Invalid or missing internal token.")


# ── Helpers ────────────────────────────────────────────────────────────

async def _run_flow(call: Awaitable[T]) -> T:
    try:
        return await call
    except FlowError as exc:
        logger.warning("Flow failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Flow crashed")
        raise HTTPException(status_code=500, detail=str(exc)) from exc


async def _read_upload(file: UploadFile, *, allow_empty: bool = False) -> bytes:
    data = await file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Uploaded file is too large.")
    if not data and not allow_empty:
        raise HTTPException(status_code=422, detail="Uploaded file is empty.")
    return data


def _get_record(document_id: str) -> DocumentRecord:
    try:
        return registry.get(document_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail=f"Unknown document: {document_id}") from None


# ── Lifespan ───────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa: ARG001
    logger.info(
        "Proofchain starting — provider=%s model=%s flows=%s auth=%s",
        settings.llm_provider,
        settings.openai_model,
        ",".join(FLOW_REGISTRY),
        "enabled" if settings.internal_token else "disabled (dev)",
    )
    yield
    logger.info("Proofchain shutting down.")


# ── App ────────────────────────────────────────────────────────────────

app = FastAPI(
    title="Proofchain",
    description="Scam detection, fake-news cross-verification and document authenticity checks.",
    version=VERSION,
    lifespan=lifespan,
)

_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_FLOW_ERRORS = {401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 502: {"model": ErrorResponse}}


# ── Routes ─────────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {
        "status": "ok",
        "engine": "proofchain",
        "version": VERSION,
        "provider": settings.llm_provider,
    }


@app.get("/flows", response_model=list[FlowInfo], dependencies=[Depends(verify_internal_token)])
async def list_flows() -> list[FlowInfo]:
    return [FlowInfo(**flow.describe()) for flow in FLOW_REGISTRY.values()]


@app.post(
    "/scam/detect",
    response_model=ScamCheckResult,
    responses=_FLOW_ERRORS,
    summary="Analyze a message for scam content",
    dependencies=[Depends(verify_internal_token)],
)
async def scam_detect(payload: ScamCheckForm) -> ScamCheckResult:
    return await _run_flow(detect_scam_message(payload))


@app.post(
    "/news/verify",
    response_model=NewsVerifyResult,
    responses=_FLOW_ERRORS,
    summary="Cross-verify a news report with trusted sources",
    dependencies=[Depends(verify_internal_token)],
)
async def news_verify(payload: NewsVerifyRequest) -> NewsVerifyResult:
    return await _run_flow(cross_verify_fake_news(payload))


@app.post(
    "/translate",
    response_model=TranslateResult,
    responses=_FLOW_ERRORS,
    summary="Translate a transcript segment",
    dependencies=[Depends(verify_internal_token)],
)
async def translate(payload: TranslateRequest) -> TranslateResult:
    return await _run_flow(translate_text(payload))


@app.post(
    "/reports/scam",
    response_model=ReportReceipt,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(verify_internal_token)],
)
async def report_scam(payload: ScamReport) -> ReportReceipt:
    return submit_report(payload)


@app.post(
    "/reports/fake-news",
    response_model=ReportReceipt,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(verify_internal_token)],
)
async def report_fake_news(payload: FakeNewsReport) -> ReportReceipt:
    return submit_report(payload)


@app.post(
    "/reports/voting-anomaly",
    response_model=ReportReceipt,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(verify_internal_token)],
)
async def report_voting_anomaly(payload: VotingAnomalyReport) -> ReportReceipt:
    return submit_report(payload)


@app.post(
    "/documents",
    response_model=DocumentRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Register a document and record its content digest",
    dependencies=[Depends(verify_internal_token)],
)
async def register_document(
    file: UploadFile = File(...),
    name: str | None = Form(default=None),
) -> DocumentRecord:
    data = await _read_upload(file)
    return registry.register(
        data,
        filename=file.filename or "upload",
        name=name,
        content_type=file.content_type,
    )


@app.get("/documents", response_model=list[DocumentRecord], dependencies=[Depends(verify_internal_token)])
async def list_documents() -> list[DocumentRecord]:
    return registry.list_records()


@app.get("/documents/{document_id}", response_model=DocumentRecord, dependencies=[Depends(verify_internal_token)])
async def get_document(document_id: str) -> DocumentRecord:
    return _get_record(document_id)


@app.post(
    "/documents/{document_id}/verify",
    response_model=DocumentVerificationResponse,
    summary="Compare an uploaded file against a registered document",
    dependencies=[Depends(verify_internal_token)],
)
async def verify_document(document_id: str, file: UploadFile = File(...)) -> DocumentVerificationResponse:
    record = _get_record(document_id)
    # an empty upload is a legitimate (tampered) candidate
    data = await _read_upload(file, allow_empty=True)

    dialog = AuthenticityDialog(record)
    dialog.open()
    try:
        outcome = await dialog.select_file(data, auto_close=False)
    except UnsupportedDigestError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    computed = dialog.last_hash or ""
    dialog.close()

    return DocumentVerificationResponse(
        document_id=record.id,
        status=outcome,
        computed_hash=computed,
        expected_hash=record.hash,
    )


@app.websocket("/voice/ws")
async def voice_session(websocket: WebSocket) -> None:
    if not _token_ok(websocket.headers.get("x-internal-token")):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await VoiceSession(websocket).run()


# ── Dev runner ─────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=True,
    )
