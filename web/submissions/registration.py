"""
Dynamic registration forms defined in the CMS (`/forms/<owner>/<slug>`).

Field definitions arrive with either camelCase or snake_case keys; helpers
below accept both.
"""

import json
import logging

from django.conf import settings

from upstream import client
from upstream.departments import current_department_slug
from upstream.exceptions import UpstreamError

from .exceptions import SubmissionFailed

logger = logging.getLogger(__name__)

FIELD_TYPES = (
    "short_text",
    "long_text",
    "email",
    "number",
    "date",
    "select",
    "radio",
    "checkbox",
    "rating",
    "image",
    "section_break",
)

REQUIRED_MESSAGE = "This field is required."
NOT_FOUND_MESSAGE = "This form doesn't exist or is no longer available."
INVALID_LINK_MESSAGE = "Invalid form link."
LOAD_FALLBACK = "Failed to load form"
SUBMIT_FALLBACK = "Failed to submit form"
SUBMITTED_MESSAGE = "Response submitted successfully."


class FormLoadError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def default_owner_slug() -> str:
    return current_department_slug() or settings.DEPARTMENT_CODE


def resolve_form_path(parts):
    """(owner, slug) for one or two path segments, None otherwise."""
    parts = [part for part in parts if part]
    if len(parts) == 1:
        return default_owner_slug(), parts[0]
    if len(parts) == 2:
        return parts[0], parts[1]
    return None


def forms_path(owner, slug, legacy=False):
    collection = "registration-forms" if legacy else "forms"
    return f"{settings.API_WEBSITE_PUBLIC_PREFIX}/{collection}/{owner}/{slug}"


def field_type(field) -> str:
    return str(field.get("fieldType") or field.get("field_type") or "")


def field_label(field) -> str:
    return str(field.get("label") or field.get("field_label") or "")


def field_help_text(field) -> str:
    return str(field.get("helpText") or field.get("help_text") or "")


def field_options(field) -> list:
    options = field.get("options")
    return options if isinstance(options, list) else []


def requires_college_email(form) -> bool:
    return bool(form.get("requireCollegeEmail", form.get("require_college_email", False)))


def allows_anonymous(form) -> bool:
    return bool(form.get("allowAnonymous", form.get("allow_anonymous", False)))


def build_sections(fields) -> list[dict]:
    """Split the field list into sections at every `section_break`."""
    sections = []
    current = {"title": "", "description": "", "fields": []}
    for field in fields:
        if field_type(field) == "section_break":
            if current["fields"] or current["title"] or current["description"]:
                sections.append(current)
            current = {
                "title": field_label(field),
                "description": field_help_text(field),
                "fields": [],
            }
        else:
            current["fields"].append(field)

    if current["fields"] or current["title"] or current["description"] or not sections:
        sections.append(current)
    return sections


def question_fields(fields) -> list:
    return [f for f in fields if field_type(f) != "section_break"]


def _is_empty(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return not value
    return False


def collect_answers(fields, data, files):
    """
    Read posted values for every question.

    Returns (answers, errors, uploads) where answers is `[{field, value}]`,
    errors maps field id -> message and uploads maps `field_<id>` -> file.
    """
    answers = []
    errors = {}
    uploads = {}
    for field in question_fields(fields):
        field_id = field.get("id")
        key = f"field_{field_id}"
        kind = field_type(field)

        if kind == "image":
            upload = files.get(key)
            if upload:
                uploads[key] = upload
            elif field.get("required"):
                errors[field_id] = REQUIRED_MESSAGE
            answers.append({"field": field_id, "value": None})
            continue

        if kind == "checkbox":
            value = data.getlist(key)
        elif kind == "rating":
            raw = data.get(key) or "1"
            try:
                value = int(raw)
            except ValueError:
                value = 1
        else:
            value = data.get(key)

        if field.get("required") and _is_empty(value):
            errors[field_id] = REQUIRED_MESSAGE
        answers.append({"field": field_id, "value": value})
    return answers, errors, uploads


class RegistrationFormService:
    @staticmethod
    def get_form(owner, slug, legacy=False):
        """Form definition; raises FormLoadError with a user-facing message."""
        try:
            response = client.api_get_raw(forms_path(owner, slug, legacy))
        except UpstreamError as exc:
            raise FormLoadError(LOAD_FALLBACK) from exc

        if response.status_code == 404:
            raise FormLoadError(NOT_FOUND_MESSAGE, 404)
        if response.status_code == 400:
            raise FormLoadError(INVALID_LINK_MESSAGE, 400)
        data = client.json_or_empty(response)
        if not client.is_success(response):
            raise FormLoadError(
                data.get("error") or data.get("detail") or data.get("message") or LOAD_FALLBACK,
                response.status_code,
            )
        return data

    @staticmethod
    def submit(owner, slug, answers, submitter_email=None, otp_session=None,
               uploads=None, legacy=False):
        """
        JSON body when there are no files, multipart otherwise.

        Returns the raw upstream response so proxy routes can relay its status.
        """
        path = f"{forms_path(owner, slug, legacy)}/submit"
        if uploads:
            data = {"answers": json.dumps(answers)}
            if submitter_email:
                data["submitter_email"] = submitter_email
            if otp_session:
                data["otp_session"] = otp_session
            file_parts = [
                (key, (upload.name, upload, getattr(upload, "content_type", None)))
                for key, upload in uploads.items()
            ]
            return client.post_multipart(path, data, file_parts)

        payload = {"answers": answers}
        if submitter_email:
            payload["submitter_email"] = submitter_email
        if otp_session:
            payload["otp_session"] = otp_session
        return client.post_json(path, payload)

    @staticmethod
    def submit_or_raise(owner, slug, answers, submitter_email=None, otp_session=None, uploads=None):
        try:
            response = RegistrationFormService.submit(
                owner, slug, answers, submitter_email, otp_session, uploads
            )
        except UpstreamError as exc:
            raise SubmissionFailed(SUBMIT_FALLBACK) from exc

        if not client.is_success(response):
            data = client.json_or_empty(response)
            logger.warning("Form %s/%s rejected: %s %s", owner, slug, response.status_code, data)
            raise SubmissionFailed(client.error_message(data, SUBMIT_FALLBACK))
        return client.json_or_empty(response)


def present_sections(form, data=None, errors=None):
    """Sections with each question resolved for the template (label, kind, posted value, error)."""
    errors = errors or {}
    number = 0
    presented = []
    for section in build_sections(form.get("fields") or []):
        fields = []
        for field in section["fields"]:
            number += 1
            name = f"field_{field.get('id')}"
            kind = field_type(field)
            if data is None:
                value = [] if kind == "checkbox" else ("1" if kind == "rating" else "")
            elif kind == "checkbox":
                value = data.getlist(name)
            else:
                value = data.get(name, "")
            fields.append({
                "id": field.get("id"),
                "name": name,
                "number": number,
                "kind": kind,
                "label": field_label(field),
                "help_text": field_help_text(field),
                "options": field_options(field),
                "required": bool(field.get("required")),
                "value": value,
                "error": errors.get(field.get("id")),
            })
        presented.append({**section, "fields": fields})
    return presented
