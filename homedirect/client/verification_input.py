"""
Fixed-length numeric code entry spread over one field per digit.
"""

from typing import Callable, List, Optional, Tuple
import re
from homedirect.client.errors import CodeFormatError

NON_DIGITS = re.compile(r"[^0-9]")

BACKSPACE = "Backspace"
ARROW_LEFT = "ArrowLeft"
ARROW_RIGHT = "ArrowRight"


def strip_non_digits(text: str) -> str:
    return NON_DIGITS.sub("", text or "")


def validate_verification_code(code: str, length: int = 6) -> str:
    """
    Check a code before submission.

    Returns:
        The code itself

    Raises:
        CodeFormatError: If the code is not exactly ``length`` decimal digits
    """
    if code is None or len(code) != length or not code.isascii() or not code.isdigit():
        raise CodeFormatError(f"Verification code must be exactly {length} digits")
    return code


class VerificationCodeInput:
    """
    State of an N-field code input.

    Each position holds one decimal digit or ``""``. Every content change
    calls ``on_change`` with ``"".join(slots)``, so empty positions simply
    vanish from the reported value. Completeness is not checked here; use
    :func:`validate_verification_code` before submitting.
    """

    def __init__(self, length: int = 6, on_change: Optional[Callable[[str], None]] = None):
        if length < 1:
            raise ValueError("Code length must be at least 1")

        self.length = length
        self._on_change = on_change
        self._slots: List[str] = [""] * length
        self.focus = 0

    @property
    def slots(self) -> Tuple[str, ...]:
        return tuple(self._slots)

    @property
    def value(self) -> str:
        return "".join(self._slots)

    @property
    def is_complete(self) -> bool:
        return all(self._slots)

    def input(self, index: int, text: str) -> None:
        """
        Typing into position ``index``.

        Non-digits are dropped and only the last remaining digit is kept.
        A stored digit moves focus to the next position.
        """
        self._check_index(index)

        digit = strip_non_digits(text)[-1:]
        self._slots[index] = digit
        self._changed()

        if digit and index < self.length - 1:
            self.focus = index + 1

    def key_down(self, index: int, key: str) -> None:
        """Handle Backspace and the left/right arrow keys at ``index``."""
        self._check_index(index)

        if key == BACKSPACE:
            if not self._slots[index]:
                if index > 0:
                    self.focus = index - 1
                    self._slots[index - 1] = ""
                    self._changed()
            else:
                self._slots[index] = ""
                self._changed()
        elif key == ARROW_LEFT:
            if index > 0:
                self.focus = index - 1
        elif key == ARROW_RIGHT:
            if index < self.length - 1:
                self.focus = index + 1

    def paste(self, index: int, text: str) -> None:
        """
        Paste clipboard text starting at ``index``.

        Digits are written consecutively and never past the last position;
        focus lands after the last written digit, clamped to the last position.
        """
        self._check_index(index)

        digits = strip_non_digits(text)
        if not digits:
            return

        last_written = index
        for offset, digit in enumerate(digits):
            position = index + offset
            if position >= self.length:
                break
            self._slots[position] = digit
            last_written = position

        self._changed()
        self.focus = min(last_written + 1, self.length - 1)

    def clear(self) -> None:
        self._slots = [""] * self.length
        self.focus = 0
        self._changed()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.length:
            raise IndexError(f"Position {index} is outside a {self.length}-digit code")

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self.value)
