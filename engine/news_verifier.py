"""Fake-news cross-verification flow."""

from __future__ import annotations

from engine.flow import Flow, register_flow
from prompts.system_prompt import NEWS_VERIFICATION_MESSAGE, NEWS_VERIFICATION_PROMPT
from schemas.request import NewsVerifyRequest
from schemas.response import NewsVerifyResult

cross_verify_fake_news_flow = register_flow(
    Flow(
        "crossVerifyFakeNewsFlow",
        input_model=NewsVerifyRequest,
        output_model=NewsVerifyResult,
        system_prompt=NEWS_VERIFICATION_PROMPT,
        user_template=NEWS_VERIFICATION_MESSAGE,
    )
)


async def cross_verify_fake_news(request: NewsVerifyRequest) -> NewsVerifyResult:
    """Return a free-text judgment of whether the report is likely accurate."""
    return await cross_verify_fake_news_flow(request)
