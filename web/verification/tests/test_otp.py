from unittest.mock import MagicMock, patch

import requests
from django.test import TestCase

from verification.exceptions import OtpRequestFailed, OtpSessionMissing, OtpVerifyFailed
from verification.otp import OtpStatus, Purpose, SubmissionOtp


def fake_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {}
    return response


class SubmissionOtpTests(TestCase):
    def setUp(self):
        self.otp = SubmissionOtp(Purpose.PROJECT)

    @patch("requests.post")
    def test_request_moves_to_sent_with_session_id(self, mock_post):
        mock_post.return_value = fake_response(200, {"session_id": "sess-1"})

        session_id = self.otp.request_otp("a@tcioe.edu.np", "Asha")

        self.assertEqual(session_id, "sess-1")
        self.assertEqual(self.otp.status, OtpStatus.SENT)
        self.assertEqual(
            mock_post.call_args[1]["json"],
            {"email": "a@tcioe.edu.np", "full_name": "Asha", "purpose": "project_submission"},
        )
        self.assertTrue(mock_post.call_args[0][0].endswith("/submission-otp/request/"))

    @patch("requests.post")
    def test_request_accepts_camel_case_session_id(self, mock_post):
        mock_post.return_value = fake_response(200, {"sessionId": "sess-2"})

        self.assertEqual(self.otp.request_otp("a@tcioe.edu.np"), "sess-2")

    @patch("requests.post")
    def test_request_failure_returns_to_idle_with_upstream_message(self, mock_post):
        mock_post.return_value = fake_response(400, {"detail": "Use your campus email"})

        with self.assertRaises(OtpRequestFailed) as ctx:
            self.otp.request_otp("a@gmail.com", "Asha")

        self.assertEqual(ctx.exception.message, "Use your campus email")
        self.assertEqual(self.otp.status, OtpStatus.IDLE)
        self.assertEqual(self.otp.error, "Use your campus email")

    @patch("requests.post")
    def test_request_network_error_uses_fallback(self, mock_post):
        mock_post.side_effect = requests.Timeout("slow")

        with self.assertRaises(OtpRequestFailed) as ctx:
            self.otp.request_otp("a@tcioe.edu.np")

        self.assertEqual(ctx.exception.message, "Unable to send verification code")

    @patch("requests.post")
    def test_request_without_email_makes_no_call(self, mock_post):
        with self.assertRaises(OtpRequestFailed):
            self.otp.request_otp("")

        mock_post.assert_not_called()

    @patch("requests.post")
    def test_verify_without_session_makes_no_call(self, mock_post):
        with self.assertRaises(OtpSessionMissing) as ctx:
            self.otp.verify_otp("a@tcioe.edu.np", "123456")

        self.assertEqual(ctx.exception.message, "Request a verification code first")
        mock_post.assert_not_called()

    @patch("requests.post")
    def test_verify_success_and_failure(self, mock_post):
        mock_post.return_value = fake_response(200, {"session_id": "sess-1"})
        self.otp.request_otp("a@tcioe.edu.np", "Asha")

        mock_post.return_value = fake_response(400, {"error": "Invalid OTP"})
        with self.assertRaises(OtpVerifyFailed) as ctx:
            self.otp.verify_otp("a@tcioe.edu.np", "000000")
        self.assertEqual(ctx.exception.message, "Invalid OTP")
        self.assertEqual(self.otp.status, OtpStatus.SENT)

        mock_post.return_value = fake_response(200, {"verified": True})
        self.otp.verify_otp("a@tcioe.edu.np", "123456")
        self.assertEqual(self.otp.status, OtpStatus.VERIFIED)
        self.assertEqual(
            mock_post.call_args[1]["json"],
            {
                "email": "a@tcioe.edu.np",
                "otp_code": "123456",
                "session_id": "sess-1",
                "purpose": "project_submission",
            },
        )

    def test_reset_and_round_trip_through_dict(self):
        self.otp.status = OtpStatus.VERIFIED
        self.otp.session_id = "sess-1"

        restored = SubmissionOtp.from_dict(self.otp.to_dict(), Purpose.PROJECT)
        self.assertTrue(restored.is_verified)

        other = SubmissionOtp.from_dict(self.otp.to_dict(), Purpose.RESEARCH)
        self.assertEqual(other.status, OtpStatus.IDLE)

        restored.reset()
        self.assertEqual(restored.status, OtpStatus.IDLE)
        self.assertIsNone(restored.session_id)
