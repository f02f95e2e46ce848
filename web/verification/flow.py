import time
from urllib.parse import urlencode

from django.conf import settings
from django.urls import reverse

from .exceptions import OtpRequestFailed
from .mailbox import VerificationMailbox
from .otp import OtpGateway, OtpStatus, Purpose, SubmissionOtp

# `type` query parameter of /verification -> (purpose, form path to return to)
VERIFICATION_TYPES = {
    "project": (Purpose.PROJECT, "/submit-project"),
    "research": (Purpose.RESEARCH, "/submit-research"),
    "journal": (Purpose.JOURNAL, "/submit-journal"),
}
DEFAULT_VERIFICATION_TYPE = "project"


def resolve_verification_type(value):
    """Returns (type, purpose, return_path); unknown types fall back to project."""
    key = value if value in VERIFICATION_TYPES else DEFAULT_VERIFICATION_TYPE
    purpose, return_path = VERIFICATION_TYPES[key]
    return key, purpose, return_path


class SubmissionVerificationFlow:
    """
    Email verification shared by the submission forms.

    The form asks for a code (request_code), the visitor is sent to
    /verification, and on the way back adopt() picks up the completed record
    from the mailbox. State is kept in the session per purpose.
    """

    SESSION_PREFIX = "submission_verification"
    MISSING_IDENTITY = "Enter your name and campus email first"

    def __init__(self, purpose, storage, gateway=OtpGateway, clock=time.time):
        self.purpose = purpose
        self.storage = storage
        self.clock = clock
        self.key = f"{self.SESSION_PREFIX}:{purpose}"

        state = storage.get(self.key) or {}
        self.otp = SubmissionOtp.from_dict(state.get("otp"), purpose, gateway=gateway)
        self.email = state.get("email")
        self.verified_at = state.get("verified_at")

        self.verification_type = next(
            (key for key, (p, _) in VERIFICATION_TYPES.items() if p == purpose),
            DEFAULT_VERIFICATION_TYPE,
        )
        self.return_path = VERIFICATION_TYPES[self.verification_type][1]

    @property
    def mailbox(self):
        return VerificationMailbox(self.storage, clock=self.clock)

    @property
    def status(self):
        return self.otp.status

    @property
    def is_verified(self) -> bool:
        if not (self.otp.is_verified and self.otp.session_id):
            return False
        if self._expired():
            self._reset()
            self._save()
            return False
        return True

    @property
    def session_id(self):
        return self.otp.session_id

    def _expired(self) -> bool:
        """A held verification lapses OTP_VERIFICATION_TTL_SECONDS after verifiedAt."""
        if not isinstance(self.verified_at, (int, float)):
            return True
        ttl_ms = settings.OTP_VERIFICATION_TTL_SECONDS * 1000
        return int(self.clock() * 1000) - self.verified_at >= ttl_ms

    def _reset(self):
        self.otp.reset()
        self.email = None
        self.verified_at = None

    def _save(self):
        self.storage[self.key] = {
            "otp": self.otp.to_dict(),
            "email": self.email,
            "verified_at": self.verified_at,
        }

    def request_code(self, email, full_name) -> str:
        """Send a code and return the /verification URL to redirect to."""
        if not email or not full_name:
            raise OtpRequestFailed(self.MISSING_IDENTITY)

        session_id = self.otp.request_otp(email, full_name)
        self.email = email
        self._save()
        if not session_id:
            raise OtpRequestFailed(OtpGateway.REQUEST_FALLBACK)

        query = urlencode(
            {
                "email": email,
                "name": full_name,
                "type": self.verification_type,
                "session": session_id,
            }
        )
        return f"{reverse('verification:verify')}?{query}"

    def adopt(self):
        """Take a fresh record for this purpose from the mailbox; returns it or None."""
        record = self.mailbox.take(self.purpose)
        if not record:
            return None

        self.otp.status = OtpStatus.VERIFIED
        self.otp.session_id = record.get("sessionId")
        self.otp.error = None
        self.email = record.get("email")
        self.verified_at = record.get("verifiedAt")
        self._save()
        return record

    def change_email(self, email) -> bool:
        """Drop the held verification when the form email differs; True if it did."""
        if not self.is_verified or email == self.email:
            return False

        self._reset()
        self.mailbox.clear()
        self._save()
        return True

    def complete(self):
        self._reset()
        self.mailbox.clear()
        self.storage.pop(self.key, None)
