from unittest.mock import MagicMock, patch
from urllib.parse import parse_qs, urlparse

from django.test import TestCase

from verification.exceptions import OtpRequestFailed
from verification.flow import SubmissionVerificationFlow, resolve_verification_type
from verification.mailbox import VERIFICATION_KEY, VerificationMailbox
from verification.otp import OtpStatus, Purpose

from .test_digits import FakeClock


def fake_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {}
    return response


class VerificationTypeTests(TestCase):
    def test_type_table(self):
        self.assertEqual(
            resolve_verification_type("research"),
            ("research", Purpose.RESEARCH, "/submit-research"),
        )
        self.assertEqual(
            resolve_verification_type("journal"),
            ("journal", Purpose.JOURNAL, "/submit-journal"),
        )
        self.assertEqual(
            resolve_verification_type("anything"),
            ("project", Purpose.PROJECT, "/submit-project"),
        )


class SubmissionVerificationFlowTests(TestCase):
    def setUp(self):
        self.storage = {}
        self.clock = FakeClock()

    def _flow(self, purpose=Purpose.PROJECT):
        return SubmissionVerificationFlow(purpose, self.storage, clock=self.clock)

    @patch("requests.post")
    def test_request_code_returns_verification_url(self, mock_post):
        mock_post.return_value = fake_response(200, {"session_id": "sess-9"})

        url = self._flow(Purpose.RESEARCH).request_code("a@tcioe.edu.np", "Asha Rai")

        parsed = urlparse(url)
        self.assertEqual(parsed.path, "/verification")
        self.assertEqual(
            parse_qs(parsed.query),
            {
                "email": ["a@tcioe.edu.np"],
                "name": ["Asha Rai"],
                "type": ["research"],
                "session": ["sess-9"],
            },
        )
        self.assertEqual(self._flow(Purpose.RESEARCH).status, OtpStatus.SENT)

    @patch("requests.post")
    def test_request_code_needs_name_and_email(self, mock_post):
        with self.assertRaises(OtpRequestFailed) as ctx:
            self._flow().request_code("a@tcioe.edu.np", "")

        self.assertEqual(ctx.exception.message, "Enter your name and campus email first")
        mock_post.assert_not_called()

    def test_adopts_fresh_record_for_same_purpose(self):
        VerificationMailbox(self.storage, clock=self.clock).put(
            "a@tcioe.edu.np", "sess-1", Purpose.PROJECT
        )

        flow = self._flow()
        record = flow.adopt()

        self.assertEqual(record["email"], "a@tcioe.edu.np")
        self.assertTrue(flow.is_verified)
        self.assertEqual(flow.session_id, "sess-1")
        self.assertTrue(self._flow().is_verified)

    def test_research_record_is_not_adopted_by_project_form(self):
        VerificationMailbox(self.storage, clock=self.clock).put(
            "a@tcioe.edu.np", "sess-1", Purpose.RESEARCH
        )

        flow = self._flow(Purpose.PROJECT)

        self.assertIsNone(flow.adopt())
        self.assertFalse(flow.is_verified)
        self.assertIn(VERIFICATION_KEY, self.storage)

    def test_stale_record_is_ignored(self):
        VerificationMailbox(self.storage, clock=self.clock).put(
            "a@tcioe.edu.np", "sess-1", Purpose.PROJECT
        )
        self.clock.advance(31 * 60)

        flow = self._flow()

        self.assertIsNone(flow.adopt())
        self.assertFalse(flow.is_verified)

    def test_email_change_invalidates_verification(self):
        VerificationMailbox(self.storage, clock=self.clock).put(
            "a@tcioe.edu.np", "sess-1", Purpose.PROJECT
        )
        flow = self._flow()
        flow.adopt()

        self.assertFalse(flow.change_email("a@tcioe.edu.np"))
        self.assertTrue(flow.change_email("b@tcioe.edu.np"))

        self.assertFalse(flow.is_verified)
        self.assertEqual(flow.status, OtpStatus.IDLE)
        self.assertIsNone(flow.session_id)
        self.assertFalse(self._flow().is_verified)

    def test_complete_clears_held_verification(self):
        VerificationMailbox(self.storage, clock=self.clock).put(
            "a@tcioe.edu.np", "sess-1", Purpose.JOURNAL
        )
        flow = self._flow(Purpose.JOURNAL)
        flow.adopt()

        flow.complete()

        self.assertFalse(self._flow(Purpose.JOURNAL).is_verified)
        self.assertNotIn(VERIFICATION_KEY, self.storage)

    def test_adopted_verification_expires_after_thirty_minutes(self):
        VerificationMailbox(self.storage, clock=self.clock).put(
            "a@tcioe.edu.np", "sess-1", Purpose.PROJECT
        )
        self._flow().adopt()

        self.clock.advance(29 * 60)
        self.assertTrue(self._flow().is_verified)

        self.clock.advance(2 * 60)
        flow = self._flow()

        self.assertFalse(flow.is_verified)
        self.assertEqual(flow.status, OtpStatus.IDLE)
        self.assertIsNone(flow.session_id)
        self.assertIsNone(flow.email)

    def test_held_state_without_verified_timestamp_is_not_trusted(self):
        self.storage["submission_verification:project_submission"] = {
            "otp": {"status": OtpStatus.VERIFIED, "session_id": "sess-1", "error": None},
            "email": "a@tcioe.edu.np",
        }

        self.assertFalse(self._flow().is_verified)
