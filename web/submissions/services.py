import json
import logging

from django.conf import settings

from upstream import client
from upstream.exceptions import UpstreamError

from .exceptions import SubmissionFailed

logger = logging.getLogger(__name__)


class SubmissionService:
    """Sends finished submissions upstream; raises SubmissionFailed with a user-facing message."""

    PROJECT_FALLBACK = "Failed to submit project"
    RESEARCH_FALLBACK = "Failed to submit research"
    JOURNAL_FALLBACK = "Failed to submit article"
    CONTACT_FALLBACK = "Unable to submit contact request"

    @staticmethod
    def _check(response, fallback):
        data = client.json_or_empty(response)
        if not client.is_success(response):
            logger.warning("Submission rejected upstream (%s): %s", response.status_code, data)
            raise SubmissionFailed(client.error_message(data, fallback))
        return data

    @staticmethod
    def project_multipart(payload: dict) -> dict:
        """Flatten a project payload into form fields; `members` travels as a JSON string."""
        fields = {}
        for key, value in payload.items():
            if key == "members":
                fields[key] = json.dumps(value)
            else:
                fields[key] = str(value)
        return fields

    @staticmethod
    def submit_project(payload: dict, files: dict | None = None) -> dict:
        file_parts = [
            (name, (upload.name, upload, getattr(upload, "content_type", None)))
            for name, upload in (files or {}).items()
            if upload
        ]
        try:
            response = client.post_multipart(
                settings.PROJECT_SUBMIT_PATH,
                SubmissionService.project_multipart(payload),
                file_parts,
            )
        except UpstreamError as exc:
            raise SubmissionFailed(SubmissionService.PROJECT_FALLBACK) from exc
        return SubmissionService._check(response, SubmissionService.PROJECT_FALLBACK)

    @staticmethod
    def _submit_json(path, payload, fallback):
        try:
            response = client.post_json(path, payload)
        except UpstreamError as exc:
            raise SubmissionFailed(fallback) from exc
        return SubmissionService._check(response, fallback)

    @staticmethod
    def submit_research(payload: dict) -> dict:
        return SubmissionService._submit_json(
            settings.RESEARCH_SUBMIT_PATH, payload, SubmissionService.RESEARCH_FALLBACK
        )

    @staticmethod
    def submit_journal(payload: dict) -> dict:
        return SubmissionService._submit_json(
            settings.JOURNAL_SUBMIT_PATH, payload, SubmissionService.JOURNAL_FALLBACK
        )

    @staticmethod
    def submit_contact(payload: dict) -> dict:
        return SubmissionService._submit_json(
            settings.CONTACT_SUBMIT_PATH, payload, SubmissionService.CONTACT_FALLBACK
        )
