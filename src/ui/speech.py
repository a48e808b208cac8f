"""Browser speech bridge for voice input and read-aloud.

Speech recognition and synthesis run in the browser. The scripts below are
sent with ``ui.run_javascript`` and report back through NiceGUI events:

    - speech_start: recognition started
    - speech_result: {"interim": str, "final": str}
    - speech_error: {"error": str}
    - speech_end: recognition stopped

``VoiceInput`` holds the Python side of one recording.
"""

import json

from src.agent.text import strip_emojis

SPEECH_LANG = "en-US"

MIC_DENIED = "Microphone access denied. Please allow microphone access in browser settings."
NO_SPEECH = "No speech detected. Please try again."
UNSUPPORTED = "Speech Recognition is not supported by your browser."
START_FAILED = "Could not start microphone. Check permissions."


def speech_error_message(code: str) -> str:
    """Translate a recognition error code into a short user-facing message."""
    if code in ("not-allowed", "service-not-allowed"):
        return MIC_DENIED
    if code == "no-speech":
        return NO_SPEECH
    if code == "unsupported":
        return UNSUPPORTED
    if code == "start-failed":
        return START_FAILED
    return f"Speech recognition error: {code}"


START_RECOGNITION_JS = f"""
(() => {{
    const Recognition = window.SpeechRecognition || window.webkitSpeechRecognition;
    if (!Recognition) {{
        emitEvent('speech_error', {{error: 'unsupported'}});
        return;
    }}
    if (!window.__parentRecognition) {{
        const recognition = new Recognition();
        recognition.continuous = false;
        recognition.interimResults = true;
        recognition.lang = '{SPEECH_LANG}';
        recognition.onresult = (event) => {{
            let interim = '';
            let final = '';
            for (let i = event.resultIndex; i < event.results.length; ++i) {{
                if (event.results[i].isFinal) {{
                    final += event.results[i][0].transcript;
                }} else {{
                    interim += event.results[i][0].transcript;
                }}
            }}
            emitEvent('speech_result', {{interim: interim, final: final}});
        }};
        recognition.onerror = (event) => emitEvent('speech_error', {{error: event.error}});
        recognition.onend = () => emitEvent('speech_end', {{}});
        window.__parentRecognition = recognition;
    }}
    try {{
        window.__parentRecognition.start();
        emitEvent('speech_start', {{}});
    }} catch (error) {{
        if (error.name !== 'InvalidStateError') {{
            emitEvent('speech_error', {{error: 'start-failed'}});
        }}
    }}
}})();
"""

STOP_RECOGNITION_JS = """
if (window.__parentRecognition) { window.__parentRecognition.stop(); }
"""


def speak_js(text: str) -> str:
    """Build a script that cancels any utterance in flight and reads ``text``."""
    return f"""
if (window.speechSynthesis) {{
    window.speechSynthesis.cancel();
    const utterance = new SpeechSynthesisUtterance({json.dumps(strip_emojis(text))});
    utterance.lang = '{SPEECH_LANG}';
    window.speechSynthesis.speak(utterance);
}}
"""


class VoiceInput:
    """Transcript state of a single recording.

    Final results accumulate in ``transcript``; ``interim`` holds the
    not-yet-final guess shown live in the input box.
    """

    def __init__(self) -> None:
        self.recording = False
        self.transcript = ""
        self.interim = ""
        self.error: str | None = None

    @property
    def display_text(self) -> str:
        return self.transcript + self.interim

    def start(self) -> None:
        self.recording = True
        self.transcript = ""
        self.interim = ""
        self.error = None

    def on_result(self, interim: str, final: str) -> None:
        self.transcript += final
        self.interim = interim

    def on_error(self, code: str) -> str:
        """Record a recognition failure and return the message to show."""
        self.recording = False
        self.error = speech_error_message(code)
        return self.error

    def finish(self) -> str | None:
        """Close the recording.

        Returns:
            The recognised text to send, or None when nothing was heard.
        """
        self.recording = False
        text = self.transcript.strip()
        self.transcript = ""
        self.interim = ""
        return text or None
