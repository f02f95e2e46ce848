import logging

from django.conf import settings

from upstream.client import api_get
from upstream.departments import current_department_slug
from upstream.exceptions import UpstreamError

from .utils import is_uuid, results_of, slugify_title

logger = logging.getLogger(__name__)


def _not_found(exc: UpstreamError) -> bool:
    return exc.status_code == 404


class DepartmentService:
    """Department-module endpoints (detail, programs, staff, downloads, plans, events)."""

    @staticmethod
    def _prefix():
        return settings.API_PUBLIC_PREFIX

    @staticmethod
    def get_department(slug=None):
        """Department detail, or None when the slug is not configured/unknown."""
        slug = slug or current_department_slug()
        if not slug:
            return None
        try:
            return api_get(f"{DepartmentService._prefix()}/departments/{slug}")
        except UpstreamError as exc:
            if _not_found(exc):
                return None
            raise

    @staticmethod
    def list_programs(slug, limit=100):
        data = api_get(
            f"{DepartmentService._prefix()}/departments/{slug}/programs", {"limit": limit}
        )
        return results_of(data)

    @staticmethod
    def find_program(slug, key):
        key_lower = key.lower()
        for program in DepartmentService.list_programs(slug):
            short_name = program.get("shortName") or ""
            if program.get("slug") == key or (short_name and short_name.lower() == key_lower):
                return program
        return None

    @staticmethod
    def list_staffs(slug, limit=100):
        data = api_get(
            f"{DepartmentService._prefix()}/departments/{slug}/staffs",
            {"limit": limit, "ordering": "displayOrder"},
        )
        return results_of(data)

    @staticmethod
    def list_downloads(slug, limit=100):
        data = api_get(
            f"{DepartmentService._prefix()}/departments/{slug}/downloads", {"limit": limit}
        )
        return results_of(data)

    @staticmethod
    def list_plans(slug, limit=50):
        data = api_get(
            f"{DepartmentService._prefix()}/departments/{slug}/plans", {"limit": limit}
        )
        return results_of(data)

    @staticmethod
    def list_event_gallery(event_id, limit=100):
        data = api_get(
            f"{DepartmentService._prefix()}/departments/events/{event_id}/gallery",
            {"limit": limit},
        )
        return results_of(data)


class EventService:
    @staticmethod
    def list_events(department_uuid, limit=50):
        data = api_get(
            f"{settings.API_WEBSITE_PUBLIC_PREFIX}/global-events",
            {"department": department_uuid, "ordering": "-eventStartDate", "limit": limit},
        )
        return results_of(data)

    @staticmethod
    def get_event(key, department_uuid=None):
        """Event by UUID, or by title slug looked up in the department's events."""
        target = key
        if not is_uuid(key):
            events = EventService.list_events(department_uuid, limit=200)
            match = next((e for e in events if slugify_title(e.get("title")) == key), None)
            if not match or not match.get("uuid"):
                return None
            target = match["uuid"]

        try:
            return api_get(f"{settings.API_WEBSITE_PUBLIC_PREFIX}/global-events/{target}")
        except UpstreamError as exc:
            if _not_found(exc):
                return None
            raise


class NoticeService:
    @staticmethod
    def list_notices(department_uuid, limit=20):
        data = api_get(
            f"{settings.API_NOTICE_PUBLIC_PREFIX}/notices",
            {"department": department_uuid, "ordering": "-publishedAt", "limit": limit},
        )
        return results_of(data)

    @staticmethod
    def approved(notices):
        return [n for n in notices if n.get("isApprovedByDepartment", True)]

    @staticmethod
    def categories(notices):
        names = []
        for notice in notices:
            name = (notice.get("category") or {}).get("name")
            if name and name not in names:
                names.append(name)
        return names

    @staticmethod
    def filter_by_category(notices, category):
        if not category or category == "All":
            return notices
        return [n for n in notices if (n.get("category") or {}).get("name") == category]

    @staticmethod
    def find_notice(notices, key):
        if is_uuid(key):
            return next((n for n in notices if n.get("uuid") == key), None)
        return next((n for n in notices if slugify_title(n.get("title")) == key), None)


class ProjectService:
    @staticmethod
    def list_projects(department_slug, limit=50):
        data = api_get(
            f"{settings.API_PROJECT_PUBLIC_PREFIX}/projects/by_department",
            {"department_slug": department_slug, "limit": limit},
        )
        return results_of(data)

    @staticmethod
    def get_project(identifier):
        try:
            return api_get(f"{settings.API_PROJECT_PUBLIC_PREFIX}/projects/{identifier}")
        except UpstreamError as exc:
            if _not_found(exc):
                return None
            raise


class ResearchService:
    @staticmethod
    def list_research(department_slug, limit=50):
        data = api_get(
            f"{settings.API_RESEARCH_PUBLIC_PREFIX}/research/by_department",
            {"department_slug": department_slug, "limit": limit},
        )
        return results_of(data)

    @staticmethod
    def get_research(identifier):
        try:
            return api_get(f"{settings.API_RESEARCH_PUBLIC_PREFIX}/research/{identifier}")
        except UpstreamError as exc:
            if _not_found(exc):
                return None
            raise


class JournalService:
    @staticmethod
    def list_articles(department_slug, limit=30):
        data = api_get(
            f"{settings.API_JOURNAL_PUBLIC_PREFIX}/articles",
            {"department_slug": department_slug, "ordering": "-date_published", "limit": limit},
        )
        return results_of(data)

    @staticmethod
    def get_article(identifier):
        """Tries `/articles/<id>` first, then `/articles?url_id=<id>`."""
        attempts = [
            (f"{settings.API_JOURNAL_PUBLIC_PREFIX}/articles/{identifier}", None),
            (f"{settings.API_JOURNAL_PUBLIC_PREFIX}/articles", {"url_id": identifier}),
        ]
        for path, params in attempts:
            try:
                data = api_get(path, params)
            except UpstreamError as exc:
                logger.warning("Journal article lookup %s failed: %s", path, exc.message)
                continue

            results = data.get("results") if isinstance(data, dict) else None
            if isinstance(results, list):
                match = next(
                    (
                        item for item in results
                        if str(item.get("id")) == identifier or item.get("url_id") == identifier
                    ),
                    results[0] if results else None,
                )
                if match:
                    return match
            elif isinstance(data, dict) and "id" in data:
                return data
        return None


class ClubService:
    @staticmethod
    def list_clubs(limit=200):
        data = api_get(f"{settings.API_WEBSITE_PUBLIC_PREFIX}/clubs", {"limit": limit})
        return results_of(data)

    @staticmethod
    def club_slug(club):
        return (club.get("slug") or slugify_title(club.get("name"))).lower()

    @staticmethod
    def get_club(key):
        target = key
        if not is_uuid(key):
            match = next(
                (c for c in ClubService.list_clubs() if ClubService.club_slug(c) == key.lower()),
                None,
            )
            if not match:
                return None
            target = match["uuid"]

        try:
            return api_get(f"{settings.API_WEBSITE_PUBLIC_PREFIX}/clubs/{target}")
        except UpstreamError as exc:
            if _not_found(exc):
                return None
            raise


class AlumniService:
    PAGE_SIZE = 200
    MAX_OFFSET = 10000

    @staticmethod
    def list_all(department_slug):
        """Walk the paginated alumni tracer until there is no next page."""
        collected = []
        offset = 0
        while True:
            data = api_get(
                f"{settings.API_WEBSITE_PUBLIC_PREFIX}/alumni-tracer",
                {
                    "department_slug": department_slug,
                    "limit": AlumniService.PAGE_SIZE,
                    "offset": offset,
                },
            )
            batch = data.get("results") if isinstance(data, dict) else None
            batch = batch if isinstance(batch, list) else []
            collected.extend(batch)

            if not data.get("next") or not batch:
                break
            offset += AlumniService.PAGE_SIZE
            if offset > AlumniService.MAX_OFFSET:
                break
        return collected


class ScheduleService:
    """Subject and teacher data from the class schedule backend."""

    @staticmethod
    def list_subjects(faculty_code):
        data = api_get(
            f"{settings.SCHEDULE_API_BASE}/subject/list/",
            {"faculty": faculty_code.upper()},
        )
        return results_of(data)

    @staticmethod
    def list_teachers(department_code=None):
        code = (department_code or settings.DEPARTMENT_CODE).upper()
        departments = results_of(api_get(f"{settings.SCHEDULE_API_BASE}/department/list/"))
        target = next(
            (d for d in departments if (d.get("name") or "").upper() == code), None
        )
        if not target or not target.get("id"):
            raise UpstreamError("Department not found in schedule backend.")

        data = api_get(
            f"{settings.SCHEDULE_API_BASE}/teacher/list/",
            {"department": target["id"], "is_assigned": True},
        )
        return results_of(data)
