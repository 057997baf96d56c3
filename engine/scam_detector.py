"""Scam-message detection flow."""

from __future__ import annotations

import logging

from engine.flow import Flow, register_flow
from prompts.system_prompt import SCAM_DETECTION_MESSAGE, SCAM_DETECTION_PROMPT
from schemas.request import ScamCheckRequest
from schemas.response import ScamCheckResult

logger = logging.getLogger("proofchain.engine.scam_detector")

detect_scam_message_flow = register_flow(
    Flow(
        "detectScamMessageFlow",
        input_model=ScamCheckRequest,
        output_model=ScamCheckResult,
        system_prompt=SCAM_DETECTION_PROMPT,
        user_template=SCAM_DETECTION_MESSAGE,
    )
)


async def detect_scam_message(request: ScamCheckRequest) -> ScamCheckResult:
    """Classify *request.message*; raises ``FlowError`` when the model call fails."""
    result = await detect_scam_message_flow(request)
    logger.info("Scam check — is_scam=%s confidence=%.2f", result.is_scam, result.confidence)
    return result
