"""Text cleanup shared by the completion client and speech output."""

import re

_EMOJI_PATTERN = re.compile(
    "["
    "\U0001f1e6-\U0001f1ff"  # flags
    "\U0001f300-\U0001f5ff"  # symbols & pictographs
    "\U0001f600-\U0001f64f"  # emoticons
    "\U0001f680-\U0001f6ff"  # transport & map
    "\U0001f700-\U0001faff"  # extended pictographs
    "\u2600-\u27bf"  # misc symbols, dingbats
    "\u2b00-\u2bff"
    "\ue000-\uf8ff"  # private use
    "\ufe0f\u200d"  # variation selector, zero width joiner
    "]+"
)


def strip_emojis(text: str) -> str:
    """Remove emoji and pictographic symbols from text."""
    return _EMOJI_PATTERN.sub("", text)
