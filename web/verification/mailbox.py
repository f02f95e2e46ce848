import json
import time

from django.conf import settings

VERIFICATION_KEY = "verification_complete"


class VerificationMailbox:
    """
    Single-slot hand-off of a completed verification from /verification to a form.

    The record lives in the visitor's session under VERIFICATION_KEY as JSON
    `{email, sessionId, purpose, verifiedAt}` with verifiedAt in epoch ms.
    take() only returns a record for the matching purpose while it is fresh;
    a record for another purpose stays put, an expired one is discarded.
    """

    def __init__(self, storage, clock=time.time, ttl_seconds=None):
        self.storage = storage
        self.clock = clock
        if ttl_seconds is None:
            ttl_seconds = settings.OTP_VERIFICATION_TTL_SECONDS
        self.ttl_seconds = ttl_seconds

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def put(self, email, session_id, purpose) -> dict:
        record = {
            "email": email,
            "sessionId": session_id,
            "purpose": purpose,
            "verifiedAt": self._now_ms(),
        }
        self.storage[VERIFICATION_KEY] = json.dumps(record)
        return record

    def take(self, purpose):
        raw = self.storage.get(VERIFICATION_KEY)
        if not raw:
            return None

        try:
            record = json.loads(raw)
        except (TypeError, ValueError):
            self.clear()
            return None

        if not isinstance(record, dict) or record.get("purpose") != purpose:
            return None

        self.clear()
        verified_at = record.get("verifiedAt")
        if not isinstance(verified_at, (int, float)):
            return None
        if self._now_ms() - verified_at >= self.ttl_seconds * 1000:
            return None
        return record

    def clear(self):
        self.storage.pop(VERIFICATION_KEY, None)
