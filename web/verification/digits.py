import math
import re
import time

from django.conf import settings

OTP_LENGTH = 6

_NON_DIGITS = re.compile(r"\D")


class OtpDigits:
    """Six single-digit slots behind the verification page inputs."""

    def __init__(self, slots=None):
        slots = list(slots or [])[:OTP_LENGTH]
        self.slots = [_NON_DIGITS.sub("", str(s))[-1:] for s in slots]
        self.slots += [""] * (OTP_LENGTH - len(self.slots))

    def type(self, index: int, value: str) -> int:
        """Store the last digit typed into a slot; returns the index to focus next."""
        digit = _NON_DIGITS.sub("", value or "")[-1:]
        self.slots[index] = digit
        if digit and index < OTP_LENGTH - 1:
            return index + 1
        return index

    def backspace(self, index: int) -> int:
        if not self.slots[index] and index > 0:
            return index - 1
        return index

    def paste(self, text: str) -> int:
        pasted = _NON_DIGITS.sub("", text or "")[:OTP_LENGTH]
        if not pasted:
            return 0
        for i, digit in enumerate(pasted):
            self.slots[i] = digit
        return min(len(pasted), OTP_LENGTH - 1)

    def clear(self):
        self.slots = [""] * OTP_LENGTH

    @property
    def code(self) -> str:
        return "".join(self.slots)

    @property
    def is_complete(self) -> bool:
        return len(self.code) == OTP_LENGTH

    @classmethod
    def from_post(cls, data):
        """Build from `digit_0`..`digit_5` fields, or a pasted `code` field."""
        digits = cls()
        for index in range(OTP_LENGTH):
            digits.type(index, data.get(f"digit_{index}", ""))
        pasted = data.get("code")
        if pasted:
            digits.paste(pasted)
        return digits


class ResendCooldown:
    """Countdown between resend requests, kept in the session under `key`."""

    def __init__(self, storage, key, seconds=None, clock=time.time):
        self.storage = storage
        self.key = f"resend_cooldown:{key}"
        self.seconds = settings.OTP_RESEND_COOLDOWN_SECONDS if seconds is None else seconds
        self.clock = clock

    def start(self):
        self.storage[self.key] = self.clock()

    def remaining(self) -> int:
        started = self.storage.get(self.key)
        if started is None:
            return 0
        left = self.seconds - (self.clock() - started)
        return max(0, math.ceil(left))

    @property
    def is_ready(self) -> bool:
        return self.remaining() == 0
