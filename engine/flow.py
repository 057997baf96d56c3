"""Declarative prompt flows.

A flow binds an input model, a prompt template and an output model.  Calling
it renders the templates from the input fields, makes one JSON-mode round trip
to the model and validates the reply.  Remote and schema failures surface as
``FlowError``; invalid input raises pydantic's ``ValidationError`` before any
call is made.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from services.llm_service import chat_completion_json

logger = logging.getLogger("proofchain.engine.flow")

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class FlowError(Exception):
    """Raised when a flow's remote call fails or its reply does not match the output schema."""

    def __init__(self, flow_name: str, message: str) -> None:
        super().__init__(f"{flow_name}: {message}")
        self.flow_name = flow_name
        self.message = message


def render_template(template: str, values: dict[str, Any]) -> str:
    """Substitute ``{name}`` placeholders in one pass; unknown names and other braces are left alone."""

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1)
        return str(values[key]) if key in values else match.group(0)

    return _PLACEHOLDER.sub(_sub, template)


class Flow(Generic[InputT, OutputT]):
    def __init__(
        self,
        name: str,
        *,
        input_model: type[InputT],
        output_model: type[OutputT],
        system_prompt: str,
        user_template: str,
        temperature: float | None = None,
    ) -> None:
        self.name = name
        self.input_model = input_model
        self.output_model = output_model
        self.system_prompt = system_prompt
        self.user_template = user_template
        self.temperature = temperature

    def render(self, payload: InputT) -> tuple[str, str]:
        values = payload.model_dump()
        return render_template(self.system_prompt, values), render_template(self.user_template, values)

    async def __call__(self, payload: InputT | dict[str, Any]) -> OutputT:
        if not isinstance(payload, self.input_model):
            payload = self.input_model.model_validate(payload)

        system_prompt, user_message = self.render(payload)
        t0 = time.perf_counter()

        try:
            data = await chat_completion_json(system_prompt, user_message, temperature=self.temperature)
        except Exception as exc:
            logger.error("Flow %s remote call failed: %s", self.name, exc)
            raise FlowError(self.name, f"remote call failed: {exc}") from exc

        try:
            result = self.output_model.model_validate(data)
        except ValidationError as exc:
            logger.error("Flow %s reply did not match %s: %s", self.name, self.output_model.__name__, exc)
            raise FlowError(self.name, f"reply did not match output schema: {exc}") from exc

        logger.info("Flow %s complete in %.2fs", self.name, time.perf_counter() - t0)
        return result

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "input_schema": self.input_model.model_json_schema(by_alias=True),
            "output_schema": self.output_model.model_json_schema(by_alias=True),
        }


FLOW_REGISTRY: dict[str, Flow[Any, Any]] = {}


def register_flow(flow: Flow[InputT, OutputT]) -> Flow[InputT, OutputT]:
    FLOW_REGISTRY[flow.name] = flow
    return flow
