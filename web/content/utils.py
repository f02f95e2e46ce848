import re
from datetime import datetime, time

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)

HONORIFICS = {"ER", "DR", "AR", "MR", "MS", "MRS"}

SEMESTER_ORDER = [f"sem{n}" for n in range(1, 11)]

PROGRAM_NOT_SPECIFIED = "Program not specified"


def is_uuid(value) -> bool:
    return bool(value) and bool(UUID_RE.match(str(value)))


def slugify_title(title) -> str:
    """URL slug derived from an event/notice/club title."""
    if not title:
        return ""
    slug = re.sub(r"[^a-z0-9\s-]", "", str(title).lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def titleize(value) -> str:
    if not value:
        return ""
    return " ".join(part.capitalize() for part in re.split(r"[_\s]+", str(value)) if part)


def results_of(data) -> list:
    """Items of a list response: bare list, paginated `results`, or nested `results.results`."""
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return []
    results = data.get("results")
    if isinstance(results, list):
        return results
    if isinstance(results, dict) and isinstance(results.get("results"), list):
        return results["results"]
    return []


def split_keywords(value) -> list[str]:
    if not value or not isinstance(value, str):
        return []
    return [kw.strip() for kw in value.split(",") if kw.strip()]


# Faculty

def format_title(title) -> str:
    """ER -> Er., DR -> Dr.; anything else unchanged."""
    if not title:
        return ""
    if title.upper() in HONORIFICS:
        return f"{title[0].upper()}{title[1:].lower()}."
    return title


def staff_priority(designation) -> int:
    d = (designation or "").upper()
    if "HEAD OF DEPARTMENT" in d and "DEPUTY" not in d:
        return 0
    if "PROGRAM COORDINATOR" in d or "PROGRAM CO-ORDINATOR" in d:
        return 1
    if "DEPUTY" in d and "HEAD" in d and "DEPARTMENT" in d:
        return 2
    return 3


def sort_staff(staff: list) -> list:
    return sorted(
        staff,
        key=lambda member: (
            staff_priority(member.get("designation")),
            member.get("displayOrder") or 0,
        ),
    )


def split_teachers(teachers: list) -> tuple[list, list]:
    full_time = [t for t in teachers if t.get("teacher_type") == "full_time"]
    part_time = [t for t in teachers if t.get("teacher_type") == "part_time"]
    return full_time, part_time


# Events

def parse_when(value):
    """Aware datetime from an ISO date or datetime string; None when unparseable."""
    if not value:
        return None
    try:
        parsed = parse_datetime(value)
        if parsed is None:
            day = parse_date(value)
            if day is None:
                return None
            parsed = datetime.combine(day, time.min)
    except ValueError:
        return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def is_upcoming(event: dict, now=None) -> bool:
    now = now or timezone.now()
    end = parse_when(event.get("eventEndDate"))
    if end:
        return end >= now
    start = parse_when(event.get("eventStartDate"))
    if start:
        return start >= now
    return True


def is_past(event: dict, now=None) -> bool:
    now = now or timezone.now()
    end = parse_when(event.get("eventEndDate"))
    if end:
        return end < now
    start = parse_when(event.get("eventStartDate"))
    if start:
        return start < now
    return False


def event_status(event: dict, now=None) -> str:
    now = now or timezone.now()
    start = parse_when(event.get("eventStartDate"))
    end = parse_when(event.get("eventEndDate"))
    if end and end < now:
        return "Finished"
    if start and start > now:
        return "Upcoming"
    return "Running"


# Programs

def sort_semesters(semesters) -> list[str]:
    def key(sem):
        if sem in SEMESTER_ORDER:
            return (0, SEMESTER_ORDER.index(sem), "")
        return (1, 0, sem)

    return sorted(semesters, key=key)


def group_subjects_by_semester(subjects: list) -> list[tuple[str, list]]:
    """
    One entry per (subject, semester), ordered sem1..sem10 then the rest.

    A semester that mixes published and archived classes keeps only the
    published ones.
    """
    by_semester: dict[str, list] = {}
    for subject in subjects:
        for cls in subject.get("academic_classes") or []:
            semester = cls.get("semester") or "unspecified"
            entries = by_semester.setdefault(semester, [])
            exists = any(
                entry["subject"].get("id") == subject.get("id")
                and entry["class_info"].get("semester") == cls.get("semester")
                for entry in entries
            )
            if not exists:
                entries.append({"subject": subject, "class_info": cls})

    for semester, entries in by_semester.items():
        has_published = any(e["class_info"].get("is_published") for e in entries)
        has_archived = any(e["class_info"].get("is_archived") for e in entries)
        if has_published and has_archived:
            by_semester[semester] = [e for e in entries if e["class_info"].get("is_published")]

    return [(semester, by_semester[semester]) for semester in sort_semesters(by_semester)]


# Alumni

def resolve_full_name(entry: dict) -> str:
    full_name = (entry.get("full_name") or "").strip()
    if full_name:
        return full_name
    parts = [entry.get("given_name"), entry.get("middle_name"), entry.get("surname")]
    return " ".join(p for p in parts if p).strip()


def resolve_program_name(entry: dict) -> str:
    program = entry.get("program") or {}
    for candidate in (
        entry.get("program_name"),
        program.get("name"),
        entry.get("program_other_name"),
    ):
        if candidate and candidate.strip():
            return candidate.strip()
    return PROGRAM_NOT_SPECIFIED


def _year_key(year) -> float:
    try:
        return float(year)
    except (TypeError, ValueError):
        return float("-inf")


def alumni_years(entries: list) -> list[str]:
    years = {e.get("passed_year") for e in entries if e.get("passed_year")}
    return sorted(years, key=_year_key, reverse=True)


def filter_alumni(entries: list, search: str = "", year: str = "all") -> list:
    needle = (search or "").strip().lower()
    selected = year or "all"

    def matches(entry):
        if selected != "all" and entry.get("passed_year") != selected:
            return False
        if not needle:
            return True
        haystack = [
            resolve_full_name(entry),
            entry.get("roll_no") or "",
            entry.get("workplace") or "",
            resolve_program_name(entry),
        ]
        return any(needle in value.strip().lower() for value in haystack)

    return [entry for entry in entries if matches(entry)]


def group_alumni(entries: list) -> list[dict]:
    """Year (newest first) -> program (alphabetical) -> members sorted by name."""
    by_year: dict[str, dict[str, list]] = {}
    for entry in entries:
        year = entry.get("passed_year") or "Unknown"
        program = resolve_program_name(entry)
        by_year.setdefault(year, {}).setdefault(program, []).append(entry)

    grouped = []
    for year in sorted(by_year, key=_year_key, reverse=True):
        programs = [
            {
                "name": name,
                "members": sorted(members, key=lambda m: resolve_full_name(m).lower()),
            }
            for name, members in sorted(by_year[year].items())
        ]
        grouped.append({"passed_year": year, "programs": programs})
    return grouped
