import logging

from django.conf import settings
from django.db import models

from upstream import client
from upstream.exceptions import UpstreamError

from .exceptions import OtpRequestFailed, OtpSessionMissing, OtpVerifyFailed

logger = logging.getLogger(__name__)


class Purpose(models.TextChoices):
    PROJECT = "project_submission", "Project submission"
    RESEARCH = "research_submission", "Research submission"
    JOURNAL = "journal_submission", "Journal submission"
    FORM = "form_submission", "Form submission"


class OtpStatus:
    IDLE = "idle"
    SENT = "sent"
    VERIFIED = "verified"


class OtpGateway:
    """
    Calls to the upstream submission OTP endpoints.

    Both methods raise an OtpError subclass carrying the upstream `detail`/`error`
    message, or the given fallback when the body has none or the call never
    reached upstream.
    """

    REQUEST_FALLBACK = "Unable to send verification code"
    VERIFY_FALLBACK = "Unable to verify the OTP"

    @staticmethod
    def request_code(email, full_name, purpose, fallback=REQUEST_FALLBACK):
        """Returns the new session id (None if upstream did not send one)."""
        payload = {"email": email, "purpose": purpose}
        if full_name:
            payload["full_name"] = full_name

        try:
            response = client.post_json(settings.OTP_REQUEST_PATH, payload)
        except UpstreamError as exc:
            raise OtpRequestFailed(fallback) from exc

        data = client.json_or_empty(response)
        if not client.is_success(response):
            logger.warning(
                "OTP request for %s (%s) rejected: %s", email, purpose, response.status_code
            )
            raise OtpRequestFailed(client.error_message(data, fallback))

        session_id = data.get("session_id") or data.get("sessionId")
        return str(session_id) if session_id else None

    @staticmethod
    def verify_code(email, code, session_id, purpose, fallback=VERIFY_FALLBACK):
        payload = {
            "email": email,
            "otp_code": code,
            "session_id": session_id,
            "purpose": purpose,
        }
        try:
            response = client.post_json(settings.OTP_VERIFY_PATH, payload)
        except UpstreamError as exc:
            raise OtpVerifyFailed(fallback) from exc

        data = client.json_or_empty(response)
        if not client.is_success(response):
            logger.warning(
                "OTP verify for %s (%s) rejected: %s", email, purpose, response.status_code
            )
            raise OtpVerifyFailed(client.error_message(data, fallback))
        return data


class SubmissionOtp:
    """
    Per-visitor OTP state machine: idle -> sent -> verified.

    A failed request drops back to idle, a failed verify stays in sent so the
    visitor can try another code. Persist it between requests with to_dict().
    """

    def __init__(self, purpose, gateway=OtpGateway):
        self.purpose = purpose
        self.gateway = gateway
        self.status = OtpStatus.IDLE
        self.session_id = None
        self.error = None

    @property
    def is_verified(self) -> bool:
        return self.status == OtpStatus.VERIFIED

    def request_otp(self, email, full_name=None):
        self.error = None
        if not email:
            self.status = OtpStatus.IDLE
            self.error = OtpGateway.REQUEST_FALLBACK
            raise OtpRequestFailed(self.error)

        try:
            self.session_id = self.gateway.request_code(email, full_name, self.purpose)
        except OtpRequestFailed as exc:
            self.status = OtpStatus.IDLE
            self.error = exc.message
            raise

        self.status = OtpStatus.SENT
        return self.session_id

    def verify_otp(self, email, code):
        if not self.session_id:
            raise OtpSessionMissing()

        self.error = None
        try:
            data = self.gateway.verify_code(email, code, self.session_id, self.purpose)
        except OtpVerifyFailed as exc:
            self.status = OtpStatus.SENT
            self.error = exc.message
            raise

        self.status = OtpStatus.VERIFIED
        return data

    def reset(self):
        self.status = OtpStatus.IDLE
        self.session_id = None
        self.error = None

    def to_dict(self) -> dict:
        return {
            "purpose": self.purpose,
            "status": self.status,
            "session_id": self.session_id,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data, purpose, gateway=OtpGateway):
        otp = cls(purpose, gateway=gateway)
        if data and data.get("purpose") == purpose:
            otp.status = data.get("status", OtpStatus.IDLE)
            otp.session_id = data.get("session_id")
            otp.error = data.get("error")
        return otp
