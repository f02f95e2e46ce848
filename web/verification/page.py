import time

from .digits import OtpDigits, ResendCooldown
from .exceptions import OtpRequestFailed, OtpVerifyFailed
from .flow import resolve_verification_type
from .mailbox import VerificationMailbox
from .otp import OtpGateway


class PageStatus:
    PENDING = "pending"
    VERIFYING = "verifying"
    SUCCESS = "success"
    ERROR = "error"


class VerificationPage:
    """
    State of one /verification visit: pending -> verifying -> success | error.

    `error` is still editable; the entered digits are kept so the visitor can
    fix a single slot and retry.
    """

    VERIFY_FALLBACK = "Invalid verification code"
    RESEND_FALLBACK = "Failed to resend code"
    INCOMPLETE_CODE = "Please enter all 6 digits"

    def __init__(self, email, name, type_, session_id, storage,
                 gateway=OtpGateway, clock=time.time):
        self.email = email or ""
        self.name = name or ""
        self.session_id = session_id or ""
        self.type, self.purpose, self.return_path = resolve_verification_type(type_)
        self.storage = storage
        self.gateway = gateway
        self.clock = clock

        self.status = PageStatus.PENDING
        self.error = ""
        self.digits = OtpDigits()
        self.focus_index = 0
        self.cooldown = ResendCooldown(
            storage, f"{self.email}:{self.purpose}", clock=clock
        )

    @property
    def is_valid_link(self) -> bool:
        return bool(self.email and self.session_id)

    @property
    def success_url(self) -> str:
        return f"{self.return_path}?verified=true"

    @property
    def query(self) -> dict:
        return {
            "email": self.email,
            "name": self.name,
            "type": self.type,
            "session": self.session_id,
        }

    def verify(self, digits: OtpDigits) -> bool:
        self.digits = digits
        self.error = ""

        if not digits.is_complete:
            self.error = self.INCOMPLETE_CODE
            self.focus_index = next(i for i, slot in enumerate(digits.slots) if not slot)
            return False

        self.status = PageStatus.VERIFYING
        try:
            self.gateway.verify_code(
                self.email,
                digits.code,
                self.session_id,
                self.purpose,
                fallback=self.VERIFY_FALLBACK,
            )
        except OtpVerifyFailed as exc:
            self.status = PageStatus.ERROR
            self.error = exc.message
            return False

        self.status = PageStatus.SUCCESS
        VerificationMailbox(self.storage, clock=self.clock).put(
            self.email, self.session_id, self.purpose
        )
        return True

    def resend(self) -> str:
        """Request a fresh code; returns the session id the page should carry on with."""
        remaining = self.cooldown.remaining()
        if remaining:
            raise OtpRequestFailed(
                f"Please wait {remaining} seconds before requesting a new code"
            )

        new_session_id = self.gateway.request_code(
            self.email, self.name, self.purpose, fallback=self.RESEND_FALLBACK
        )
        self.cooldown.start()
        if new_session_id:
            self.session_id = new_session_id
        self.digits.clear()
        self.focus_index = 0
        self.error = ""
        self.status = PageStatus.PENDING
        return self.session_id
