"""Text translation flow, used by the voice-input pipeline."""

from __future__ import annotations

from engine.flow import Flow, register_flow
from prompts.system_prompt import TRANSLATION_MESSAGE, TRANSLATION_PROMPT
from schemas.request import TranslateRequest
from schemas.response import TranslateResult

translate_text_flow = register_flow(
    Flow(
        "translateTextFlow",
        input_model=TranslateRequest,
        output_model=TranslateResult,
        system_prompt=TRANSLATION_PROMPT,
        user_template=TRANSLATION_MESSAGE,
        temperature=0.0,
    )
)


async def translate_text(request: TranslateRequest) -> TranslateResult:
    return await translate_text_flow(request)
