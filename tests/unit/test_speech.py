"""Unit tests for the voice input state and speech scripts."""

import json

import pytest
import pytest_check as check

from src.agent.text import strip_emojis
from src.ui.speech import (
    MIC_DENIED,
    NO_SPEECH,
    START_RECOGNITION_JS,
    UNSUPPORTED,
    VoiceInput,
    speak_js,
    speech_error_message,
)


class TestSpeechErrors:
    """Tests for recognition error messages."""

    @pytest.mark.parametrize("code", ["not-allowed", "service-not-allowed"])
    def test_permission_denied(self, code: str) -> None:
        assert speech_error_message(code) == MIC_DENIED

    def test_no_speech(self) -> None:
        assert speech_error_message("no-speech") == NO_SPEECH

    def test_unsupported_browser(self) -> None:
        assert speech_error_message("unsupported") == UNSUPPORTED

    def test_other_errors_name_the_code(self) -> None:
        assert speech_error_message("network") == "Speech recognition error: network"


class TestVoiceInput:
    """Tests for accumulating a recording."""

    def test_final_results_accumulate(self) -> None:
        """Final text is appended while interim text is replaced."""
        voice = VoiceInput()
        voice.start()

        voice.on_result(interim="how do", final="")
        check.equal(voice.display_text, "how do")
        voice.on_result(interim="", final="How do plants grow")
        voice.on_result(interim=" and", final="")

        check.equal(voice.transcript, "How do plants grow")
        check.equal(voice.display_text, "How do plants grow and")

    def test_finish_returns_text_and_resets(self) -> None:
        """Ending a recording hands over the recognised text once."""
        voice = VoiceInput()
        voice.start()
        voice.on_result(interim="", final=" Can I have a puppy? ")

        check.equal(voice.finish(), "Can I have a puppy?")
        check.is_false(voice.recording)
        check.is_none(voice.finish())

    def test_finish_without_speech_returns_none(self) -> None:
        voice = VoiceInput()
        voice.start()

        assert voice.finish() is None

    def test_error_stops_recording(self) -> None:
        voice = VoiceInput()
        voice.start()

        message = voice.on_error("no-speech")

        check.equal(message, NO_SPEECH)
        check.is_false(voice.recording)
        check.equal(voice.error, NO_SPEECH)

    def test_start_clears_previous_state(self) -> None:
        voice = VoiceInput()
        voice.on_error("not-allowed")
        voice.on_result(interim="x", final="y")

        voice.start()

        check.is_true(voice.recording)
        check.equal(voice.display_text, "")
        check.is_none(voice.error)


class TestScripts:
    """Tests for the browser scripts."""

    def test_speak_cancels_before_speaking(self) -> None:
        script = speak_js("Good night")

        check.less(script.index("cancel()"), script.index("speak("))
        check.is_in(json.dumps("Good night"), script)

    def test_speak_strips_emoji_and_escapes(self) -> None:
        script = speak_js('Say "hi" \U0001f44b')

        check.is_in(json.dumps('Say "hi" '), script)
        check.is_not_in("\U0001f44b", script)

    def test_recognition_reports_interim_results(self) -> None:
        check.is_in("interimResults = true", START_RECOGNITION_JS)
        check.is_in("emitEvent('speech_end'", START_RECOGNITION_JS)


class TestStripEmojis:
    def test_removes_pictographs_and_joiners(self) -> None:
        text = "Family \U0001f468\u200d\U0001f469\u200d\U0001f467 time \u2764\ufe0f"

        assert strip_emojis(text) == "Family  time "

    def test_keeps_plain_text(self) -> None:
        assert strip_emojis("Ça va? ¿Qué tal?") == "Ça va? ¿Qué tal?"
