"""Voice-input transcription & translation pipeline.

The speech engine lives behind ``SpeechRecognizer``; it reports finalized
segments to ``on_segment``.  Each segment is appended to the description as it
was when listening started, translated to the target language first unless the
spoken language is English.  A failed translation falls back to the raw
segment so captured speech is never lost.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Protocol

from config import settings
from engine.translator import translate_text
from schemas.request import TranslateRequest
from schemas.response import TranslateResult

logger = logging.getLogger("proofchain.engine.voice")

SPEECH_LANGUAGES: dict[str, str] = {
    "en-US": "English (US)",
    "en-GB": "English (UK)",
    "hi-IN": "Hindi",
    "ta-IN": "Tamil",
    "te-IN": "Telugu",
    "kn-IN": "Kannada",
    "ml-IN": "Malayalam",
}

Translator = Callable[[TranslateRequest], Awaitable[TranslateResult]]
Notifier = Callable[[str, str], None]
UpdateListener = Callable[[str], None]


class ListeningState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    TRANSLATING = "translating"


class VoiceInputError(Exception):
    """Raised when the pipeline is asked to do something its current state forbids."""


class SpeechRecognizer(Protocol):
    def start(self, language: str) -> None: ...

    def stop(self) -> None: ...


def is_english(language: str) -> bool:
    return language.startswith("en-")


def _log_notification(title: str, description: str) -> None:
    logger.warning("%s: %s", title, description)


class VoiceInputPipeline:
    def __init__(
        self,
        recognizer: SpeechRecognizer,
        *,
        translator: Translator | None = None,
        notifier: Notifier | None = None,
        on_update: UpdateListener | None = None,
        language: str | None = None,
        target_language: str | None = None,
        description: str = "",
    ) -> None:
        self.recognizer = recognizer
        self.translator = translator or translate_text
        self.notifier = notifier or _log_notification
        self.on_update = on_update
        self.target_language = target_language or settings.translation_target_language
        self.description = description
        self.language = settings.default_speech_language
        self.snapshot = description
        self._listening = False
        self._translating = False
        self._lock = asyncio.Lock()
        if language is not None:
            self.set_language(language)

    @property
    def state(self) -> ListeningState:
        if self._translating:
            return ListeningState.TRANSLATING
        if self._listening:
            return ListeningState.LISTENING
        return ListeningState.IDLE

    @property
    def is_listening(self) -> bool:
        return self._listening

    def set_language(self, language: str) -> None:
        if language not in SPEECH_LANGUAGES:
            raise VoiceInputError(f"unsupported speech language: {language}")
        self.language = language

    def set_description(self, text: str) -> None:
        """Manual edit of the description field."""
        self.description = text

    # ── Listening control ─────────────────────────────────────────────

    def start_listening(self) -> None:
        if self._translating:
            raise VoiceInputError("cannot start listening while translating")
        if self._listening:
            raise VoiceInputError("already listening")
        self.snapshot = self.description
        self.recognizer.start(self.language)
        self._listening = True
        logger.info("Listening started (%s)", self.language)

    def stop_listening(self) -> None:
        if not self._listening:
            return
        self.recognizer.stop()
        self._listening = False
        logger.info("Listening stopped")

    def toggle_listening(self) -> ListeningState:
        if self._translating:
            raise VoiceInputError("microphone is disabled while translating")
        if self._listening:
            self.stop_listening()
        else:
            self.start_listening()
        return self.state

    # ── Recognizer callbacks ──────────────────────────────────────────

    async def on_segment(self, text: str) -> str:
        """Process one finalized segment and return the updated description.

        Segments are handled strictly one at a time in arrival order.
        """
        async with self._lock:
            if not text:
                return self.description
            resolved = await self._resolve(text)
            self.description = self.snapshot + resolved
            if self.on_update is not None:
                self.on_update(self.description)
            return self.description

    def on_error(self, error: str) -> None:
        logger.error("Speech recognition error: %s", error)
        self.notifier("Voice Input Error", f"An error occurred: {error}")
        self._listening = False

    def on_end(self) -> None:
        self._listening = False

    async def _resolve(self, text: str) -> str:
        source = SPEECH_LANGUAGES.get(self.language)
        if source is None or is_english(self.language):
            return text

        self._translating = True
        try:
            result = await self.translator(
                TranslateRequest(text=text, source_language=source, target_language=self.target_language)
            )
            return result.translated_text
        except Exception as exc:
            logger.warning("Translation from %s failed, keeping original text: %s", source, exc)
            self.notifier("Translation Failed", "Could not translate the text.")
            return text
        finally:
            self._translating = False
