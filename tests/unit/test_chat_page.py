"""Unit tests for chat page key bindings."""

import pytest_check as check

from src.ui.chat_page import SEND_ON_ENTER


class TestSendBinding:
    """Tests for the textarea's send shortcut."""

    def test_enter_sends(self) -> None:
        event, *words = SEND_ON_ENTER.split(".")

        check.equal(event, "keydown")
        check.is_in("enter", words)

    def test_shift_enter_is_left_to_textarea(self) -> None:
        """Modified Enter is skipped before the default action is prevented."""
        words = SEND_ON_ENTER.split(".")

        check.is_in("exact", words)
        check.is_not_in("shift", words)
        check.less(words.index("exact"), words.index("prevent"))
