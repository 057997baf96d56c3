"""Tests for the voice-input pipeline with a fake recognizer and translator."""

from __future__ import annotations

import asyncio

import pytest

from engine.flow import FlowError
from engine.voice_pipeline import (
    ListeningState,
    VoiceInputError,
    VoiceInputPipeline,
    is_english,
)
from schemas.request import TranslateRequest
from schemas.response import TranslateResult


class FakeRecognizer:
    def __init__(self):
        self.calls: list[tuple[str, str | None]] = []

    def start(self, language: str) -> None:
        self.calls.append(("start", language))

    def stop(self) -> None:
        self.calls.append(("stop", None))


class FakeTranslator:
    def __init__(self, answers: dict[str, str] | None = None, fail: bool = False, delays: dict[str, float] | None = None):
        self.answers = answers or {}
        self.fail = fail
        self.delays = delays or {}
        self.requests: list[TranslateRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, request: TranslateRequest) -> TranslateResult:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(request.text, 0))
            if self.fail:
                raise FlowError("translateTextFlow", "remote call failed: quota exceeded")
            return TranslateResult(translated_text=self.answers.get(request.text, request.text.upper()))
        finally:
            self.in_flight -= 1


def _pipeline(translator=None, language="hi-IN", description="Report: "):
    notes: list[tuple[str, str]] = []
    updates: list[str] = []
    pipeline = VoiceInputPipeline(
        FakeRecognizer(),
        translator=translator or FakeTranslator(),
        notifier=lambda title, desc: notes.append((title, desc)),
        on_update=updates.append,
        language=language,
        description=description,
    )
    return pipeline, notes, updates


class TestLanguages:
    def test_english_variants(self):
        assert is_english("en-US")
        assert is_english("en-GB")
        assert not is_english("hi-IN")

    def test_unsupported_language_rejected(self):
        pipeline, _, _ = _pipeline()
        with pytest.raises(VoiceInputError):
            pipeline.set_language("fr-FR")


class TestListening:
    def test_toggle_starts_and_stops_recognizer(self):
        pipeline, _, _ = _pipeline()
        assert pipeline.state is ListeningState.IDLE
        assert pipeline.toggle_listening() is ListeningState.LISTENING
        assert pipeline.toggle_listening() is ListeningState.IDLE
        assert pipeline.recognizer.calls == [("start", "hi-IN"), ("stop", None)]

    def test_snapshot_taken_when_listening_starts(self):
        pipeline, _, _ = _pipeline(language="en-US", description="Draft")
        pipeline.set_description("Report: ")
        pipeline.start_listening()
        assert pipeline.snapshot == "Report: "

    def test_recognition_error_returns_to_idle_without_restart(self):
        pipeline, notes, _ = _pipeline()
        pipeline.start_listening()
        pipeline.on_error("audio-capture")
        assert pipeline.state is ListeningState.IDLE
        assert notes == [("Voice Input Error", "An error occurred: audio-capture")]
        assert pipeline.recognizer.calls == [("start", "hi-IN")]

    def test_end_of_speech_returns_to_idle(self):
        pipeline, _, _ = _pipeline()
        pipeline.start_listening()
        pipeline.on_end()
        assert pipeline.state is ListeningState.IDLE

    def test_second_start_rejected_and_snapshot_kept(self):
        pipeline, _, _ = _pipeline(language="en-US")
        pipeline.start_listening()
        pipeline.set_description("Edited: ")
        with pytest.raises(VoiceInputError):
            pipeline.start_listening()
        assert pipeline.snapshot == "Report: "
        assert pipeline.recognizer.calls == [("start", "en-US")]


class TestSegments:
    def test_hindi_segment_translated(self):
        translator = FakeTranslator({"मुझे कॉल आया": "I received a call"})
        pipeline, notes, updates = _pipeline(translator)
        pipeline.start_listening()

        result = asyncio.run(pipeline.on_segment("मुझे कॉल आया"))

        assert result == "Report: I received a call"
        assert pipeline.description == "Report: I received a call"
        assert updates == ["Report: I received a call"]
        assert notes == []
        request = translator.requests[0]
        assert (request.source_language, request.target_language) == ("Hindi", "English")
        assert pipeline.state is ListeningState.LISTENING

    def test_translation_failure_falls_back_to_original(self):
        pipeline, notes, _ = _pipeline(FakeTranslator(fail=True))
        pipeline.start_listening()

        result = asyncio.run(pipeline.on_segment("मुझे कॉल आया"))

        assert result == "Report: मुझे कॉल आया"
        assert notes == [("Translation Failed", "Could not translate the text.")]
        assert pipeline.state is ListeningState.LISTENING

    def test_english_segment_not_translated(self):
        translator = FakeTranslator()
        pipeline, _, _ = _pipeline(translator, language="en-GB")
        pipeline.start_listening()

        assert asyncio.run(pipeline.on_segment("they asked for my OTP")) == "Report: they asked for my OTP"
        assert translator.requests == []

    def test_each_segment_builds_on_the_snapshot(self):
        pipeline, _, updates = _pipeline(language="en-US")
        pipeline.start_listening()

        async def speak():
            await pipeline.on_segment("first")
            await pipeline.on_segment("second")

        asyncio.run(speak())
        assert updates == ["Report: first", "Report: second"]

    def test_empty_segment_ignored(self):
        pipeline, _, updates = _pipeline()
        pipeline.start_listening()
        assert asyncio.run(pipeline.on_segment("")) == "Report: "
        assert updates == []

    def test_segments_processed_one_at_a_time_in_order(self):
        translator = FakeTranslator(
            {"एक": "one", "दो": "two", "तीन": "three"},
            delays={"एक": 0.03, "दो": 0.01, "तीन": 0},
        )
        pipeline, _, updates = _pipeline(translator)
        pipeline.start_listening()

        async def burst():
            await asyncio.gather(
                pipeline.on_segment("एक"),
                pipeline.on_segment("दो"),
                pipeline.on_segment("तीन"),
            )

        asyncio.run(burst())
        assert [r.text for r in translator.requests] == ["एक", "दो", "तीन"]
        assert updates == ["Report: one", "Report: two", "Report: three"]
        assert translator.max_in_flight == 1

    def test_microphone_disabled_while_translating(self):
        translator = FakeTranslator(delays={"रुको": 0.02})
        pipeline, _, _ = _pipeline(translator)
        pipeline.start_listening()

        async def scenario():
            task = asyncio.create_task(pipeline.on_segment("रुको"))
            await asyncio.sleep(0)
            assert pipeline.state is ListeningState.TRANSLATING
            with pytest.raises(VoiceInputError):
                pipeline.toggle_listening()
            await task

        asyncio.run(scenario())
        assert pipeline.state is ListeningState.LISTENING

    def test_segment_after_stop_still_applied(self):
        translator = FakeTranslator({"नमस्ते": "hello"})
        pipeline, _, _ = _pipeline(translator)
        pipeline.start_listening()
        pipeline.stop_listening()
        assert asyncio.run(pipeline.on_segment("नमस्ते")) == "Report: hello"
        assert pipeline.state is ListeningState.IDLE
