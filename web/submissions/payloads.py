"""
Upstream request bodies for the submission forms.

Blank optional values are left out of the payload entirely, and list rows
missing a required sub-field are dropped.
"""

from datetime import date
from decimal import Decimal


def _text(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _value(value):
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, str):
        return _text(value)
    return value


def compact(payload: dict) -> dict:
    return {key: value for key, value in payload.items() if value is not None}


def _pick(data: dict, names) -> dict:
    return {name: _value(data.get(name)) for name in names}


def build_members(rows) -> list[dict]:
    members = []
    for row in rows:
        member = compact({
            "full_name": _text(row.get("full_name")),
            "roll_number": _text(row.get("roll_number")),
            "email": _text(row.get("email")),
            "role": _text(row.get("role")),
        })
        if member.get("full_name") and member.get("roll_number"):
            members.append(member)
    return members


def build_participants(rows, department_uuid) -> list[dict]:
    participants = []
    for row in rows:
        participant = compact({
            "full_name": _text(row.get("full_name")),
            "participant_type": row.get("participant_type") or "student",
            "email": _text(row.get("email")),
            "role": _text(row.get("role")),
            "designation": _text(row.get("designation")),
            "organization": _text(row.get("organization")),
            "linkedin_url": _text(row.get("linkedin_url")),
            "orcid_id": _text(row.get("orcid_id")),
            "department": department_uuid,
        })
        if participant.get("full_name"):
            participants.append(participant)
    return participants


def build_authors(rows) -> list[dict]:
    authors = []
    for row in rows:
        author = compact({
            "given_name": _text(row.get("given_name")),
            "family_name": _text(row.get("family_name")),
            "email": _text(row.get("email")),
            "affiliation": _text(row.get("affiliation")),
            "country": _text(row.get("country")),
            "bio": _text(row.get("bio")),
        })
        if author.get("given_name"):
            authors.append(author)
    return authors


PROJECT_FIELDS = (
    "title", "abstract", "description", "project_type", "supervisor_name",
    "supervisor_email", "start_date", "end_date", "academic_year", "github_url",
    "demo_url", "technologies_used", "submitted_by_name",
)

RESEARCH_FIELDS = (
    "title", "abstract", "description", "research_type", "status",
    "principal_investigator", "pi_email", "start_date", "end_date",
    "funding_agency", "funding_amount", "keywords", "methodology",
    "expected_outcomes", "publications_url", "project_url", "github_url",
    "submitted_by_name",
)

JOURNAL_FIELDS = (
    "title", "genre", "abstract", "keywords", "discipline", "year", "volume",
    "number", "pages", "submitted_by_name",
)


def build_project_payload(data, member_rows, *, department_uuid, email, session_id):
    payload = _pick(data, PROJECT_FIELDS)
    payload.update({
        "submitted_by_email": email,
        "department": department_uuid,
        "members": build_members(member_rows),
        "otp_session": session_id,
    })
    return compact(payload)


def build_research_payload(data, participant_rows, *, department_uuid, email, session_id):
    payload = _pick(data, RESEARCH_FIELDS)
    payload.update({
        "submitted_by_email": email,
        "department": department_uuid,
        "participants": build_participants(participant_rows, department_uuid),
        "otp_session": session_id,
    })
    return compact(payload)


def build_journal_payload(data, author_rows, *, department_uuid, email, session_id):
    payload = _pick(data, JOURNAL_FIELDS)
    payload.update({
        "submitted_by_email": email,
        "department": department_uuid,
        "authors": build_authors(author_rows),
        "otp_session": session_id,
    })
    return compact(payload)


def build_contact_payload(data, department_slug):
    return {
        "department": department_slug,
        "category": data.get("category") or "general",
        "full_name": (data.get("full_name") or "").strip(),
        "email": (data.get("email") or "").strip(),
        "phone_number": (data.get("phone_number") or "").strip(),
        "subject": (data.get("subject") or "").strip(),
        "message": (data.get("message") or "").strip(),
    }
