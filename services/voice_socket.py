"""WebSocket transport for voice-input sessions.

The browser owns the speech engine, so the recognizer here only relays
start/stop commands to the client; the client sends back finalized segments,
errors and end-of-speech events.

Client → server messages::

    {"type": "start", "language": "hi-IN", "description": "Report: "}
    {"type": "segment", "text": "..."}
    {"type": "error", "error": "no-speech"}
    {"type": "end"} | {"type": "stop"} | {"type": "edit", "text": "..."}

Server → client messages: ``recognizer``, ``description``, ``notification``
and a ``state`` message after every handled event.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from engine.voice_pipeline import Translator, VoiceInputError, VoiceInputPipeline

logger = logging.getLogger("proofchain.voice")


class ClientSpeechRecognizer:
    """Queues recognizer commands for the connected client."""

    def __init__(self, outbox: list[dict[str, Any]]) -> None:
        self._outbox = outbox

    def start(self, language: str) -> None:
        self._outbox.append({"type": "recognizer", "action": "start", "language": language})

    def stop(self) -> None:
        self._outbox.append({"type": "recognizer", "action": "stop"})


class VoiceSession:
    def __init__(self, websocket: WebSocket, *, translator: Translator | None = None) -> None:
        self.websocket = websocket
        self.outbox: list[dict[str, Any]] = []
        self.pipeline = VoiceInputPipeline(
            ClientSpeechRecognizer(self.outbox),
            translator=translator,
            notifier=self._notify,
            on_update=self._update,
        )

    def _notify(self, title: str, description: str) -> None:
        self.outbox.append({"type": "notification", "title": title, "description": description})

    def _update(self, description: str) -> None:
        self.outbox.append({"type": "description", "description": description})

    async def handle(self, message: Any) -> None:
        if not isinstance(message, dict):
            raise VoiceInputError("messages must be JSON objects")
        kind = message.get("type")
        pipeline = self.pipeline

        if kind == "start":
            if pipeline.is_listening:
                raise VoiceInputError("already listening; stop before starting again")
            if "language" in message:
                pipeline.set_language(str(message["language"]))
            if "description" in message:
                pipeline.set_description(str(message["description"]))
            pipeline.start_listening()
        elif kind == "stop":
            pipeline.stop_listening()
        elif kind == "segment":
            await pipeline.on_segment(str(message.get("text", "")))
        elif kind == "error":
            pipeline.on_error(str(message.get("error", "unknown")))
        elif kind == "end":
            pipeline.on_end()
        elif kind == "edit":
            pipeline.set_description(str(message.get("text", "")))
        else:
            raise VoiceInputError(f"unknown message type: {kind!r}")

    async def flush(self) -> None:
        while self.outbox:
            await self.websocket.send_json(self.outbox.pop(0))
        await self.websocket.send_json(
            {
                "type": "state",
                "state": self.pipeline.state.value,
                "language": self.pipeline.language,
                "description": self.pipeline.description,
            }
        )

    async def run(self) -> None:
        await self.websocket.accept()
        logger.info("Voice session opened")
        try:
            while True:
                try:
                    message = await self.websocket.receive_json()
                except ValueError as exc:
                    # malformed frame; the session stays usable
                    self._notify("Voice Input Error", f"malformed message: {exc}")
                    await self.flush()
                    continue
                try:
                    await self.handle(message)
                except VoiceInputError as exc:
                    self._notify("Voice Input Error", str(exc))
                await self.flush()
        except WebSocketDisconnect:
            logger.info("Voice session closed")
