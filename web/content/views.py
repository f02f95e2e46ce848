import logging

from django.contrib import messages
from django.http import Http404
from django.shortcuts import redirect
from django.views.generic import TemplateView

from submissions.exceptions import SubmissionFailed
from submissions.forms import ContactForm
from submissions.payloads import build_contact_payload
from submissions.services import SubmissionService
from upstream.departments import current_department_slug
from upstream.exceptions import UpstreamError

from . import utils
from .services import (
    AlumniService,
    ClubService,
    DepartmentService,
    EventService,
    JournalService,
    NoticeService,
    ProjectService,
    ResearchService,
    ScheduleService,
)

logger = logging.getLogger(__name__)

LOAD_ERROR = "Some content could not be loaded right now. Please try again later."


class ContentView(TemplateView):
    """
    Base for the public pages.

    Each upstream block is loaded through `load()`, so one failing endpoint
    shows an error notice instead of taking the whole page down.
    """

    def setup(self, request, *args, **kwargs):
        super().setup(request, *args, **kwargs)
        self.load_errors = []
        self.department_slug = current_department_slug()
        self._department = None

    def load(self, label, func, *args, default=None, **kwargs):
        try:
            return func(*args, **kwargs)
        except UpstreamError as exc:
            logger.warning("Failed to load %s: %s", label, exc.message)
            self.load_errors.append(label)
            return default

    @property
    def department(self):
        if self._department is None:
            self._department = self.load("department", DepartmentService.get_department) or {}
        return self._department

    @property
    def department_uuid(self):
        return self.department.get("uuid")

    def get_page_context(self, **kwargs):
        return {}

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context.update(self.get_page_context(**kwargs))
        context["department"] = self.department
        context["load_error"] = LOAD_ERROR if self.load_errors else None
        return context


class HomeView(ContentView):
    template_name = "content/home.html"

    def get_page_context(self, **kwargs):
        slug = self.department_slug
        uuid = self.department_uuid
        events, notices = [], []
        if uuid:
            events = self.load("events", EventService.list_events, uuid, limit=10, default=[])
            notices = self.load("notices", NoticeService.list_notices, uuid, limit=5, default=[])
        staff = self.load("staff", DepartmentService.list_staffs, slug, default=[]) if slug else []
        return {
            "upcoming_events": [e for e in events if utils.is_upcoming(e)][:3],
            "staff": utils.sort_staff(staff)[:6],
            "notices": NoticeService.approved(notices),
            "research": self.load("research", ResearchService.list_research, slug, limit=3, default=[]),
            "projects": self.load("projects", ProjectService.list_projects, slug, limit=3, default=[]),
            "articles": self.load("journal", JournalService.list_articles, slug, limit=3, default=[]),
            "show_submissions": bool(uuid),
        }


class AboutView(ContentView):
    template_name = "content/about.html"

    def get_page_context(self, **kwargs):
        plans = []
        if self.department_slug:
            plans = self.load("plans", DepartmentService.list_plans, self.department_slug, default=[])
        return {"plans": plans}


class ProgramListView(ContentView):
    template_name = "content/programs.html"

    def get_page_context(self, **kwargs):
        if not self.department_slug:
            return {"programs": []}
        programs = self.load(
            "programs", DepartmentService.list_programs, self.department_slug, default=[]
        )
        return {"programs": programs}


class ProgramDetailView(ContentView):
    template_name = "content/program_detail.html"

    def get_page_context(self, slug, **kwargs):
        if not self.department_slug:
            raise Http404("Program not found")
        program = self.load(
            "program", DepartmentService.find_program, self.department_slug, slug
        )
        if program is None:
            if self.load_errors:
                return {"program": None, "semesters": []}
            raise Http404("Program not found")

        faculty_code = program.get("shortName") or slug
        subjects = self.load("subjects", ScheduleService.list_subjects, faculty_code, default=[])
        return {
            "program": program,
            "semesters": utils.group_subjects_by_semester(subjects),
        }


class FacultyView(ContentView):
    template_name = "content/faculty.html"

    def get_page_context(self, **kwargs):
        staff = []
        if self.department_slug:
            staff = self.load("staff", DepartmentService.list_staffs, self.department_slug, default=[])
        teachers = self.load("teachers", ScheduleService.list_teachers, default=[])
        full_time, part_time = utils.split_teachers(teachers)
        return {
            "staff": utils.sort_staff(staff),
            "full_time_teachers": full_time,
            "part_time_teachers": part_time,
        }


class EventListView(ContentView):
    template_name = "content/events.html"

    def get_page_context(self, **kwargs):
        events = []
        if self.department_uuid:
            events = self.load("events", EventService.list_events, self.department_uuid, default=[])
        return {
            "upcoming_events": [e for e in events if utils.is_upcoming(e)],
            "past_events": [e for e in events if utils.is_past(e)],
        }


class EventDetailView(ContentView):
    template_name = "content/event_detail.html"

    def get_page_context(self, key, **kwargs):
        event = self.load("event", EventService.get_event, key, self.department_uuid)
        if event is None and not self.load_errors:
            raise Http404("Event not found")
        gallery = []
        if event and event.get("uuid"):
            gallery = self.load(
                "gallery", DepartmentService.list_event_gallery, event["uuid"], default=[]
            )
        return {"event": event, "gallery": gallery}


class NoticeListView(ContentView):
    template_name = "content/notices.html"

    def get_page_context(self, **kwargs):
        notices = []
        if self.department_uuid:
            notices = NoticeService.approved(
                self.load("notices", NoticeService.list_notices, self.department_uuid, default=[])
            )
        category = self.request.GET.get("category", "All")
        return {
            "categories": ["All"] + NoticeService.categories(notices),
            "selected_category": category,
            "notices": NoticeService.filter_by_category(notices, category),
        }


class NoticeDetailView(ContentView):
    template_name = "content/notice_detail.html"

    def get_page_context(self, key, **kwargs):
        notices = []
        if self.department_uuid:
            notices = self.load(
                "notices", NoticeService.list_notices, self.department_uuid, limit=100, default=[]
            )
        notice = NoticeService.find_notice(notices, key)
        if notice is None and not self.load_errors:
            raise Http404("Notice not found")
        latest = [n for n in notices if n is not notice][:5]
        return {"notice": notice, "latest_notices": latest}


class ResearchListView(ContentView):
    template_name = "content/research.html"

    def get_page_context(self, **kwargs):
        research = []
        if self.department_slug:
            research = self.load(
                "research", ResearchService.list_research, self.department_slug, default=[]
            )
        return {"research_list": research}


class ResearchDetailView(ContentView):
    template_name = "content/research_detail.html"

    def get_page_context(self, key, **kwargs):
        research = self.load("research", ResearchService.get_research, key)
        if research is None and not self.load_errors:
            raise Http404("Research not found")
        return {"research": research}


class ProjectListView(ContentView):
    template_name = "content/projects.html"

    def get_page_context(self, **kwargs):
        projects = []
        if self.department_slug:
            projects = self.load(
                "projects", ProjectService.list_projects, self.department_slug, default=[]
            )
        return {"projects": projects}


class ProjectDetailView(ContentView):
    template_name = "content/project_detail.html"

    def get_page_context(self, key, **kwargs):
        project = self.load("project", ProjectService.get_project, key)
        if project is None and not self.load_errors:
            raise Http404("Project not found")
        return {"project": project}


class JournalListView(ContentView):
    template_name = "content/journal.html"

    def get_page_context(self, **kwargs):
        articles = []
        if self.department_slug:
            articles = self.load(
                "journal", JournalService.list_articles, self.department_slug, default=[]
            )
        return {"articles": articles}


class JournalDetailView(ContentView):
    template_name = "content/journal_detail.html"

    def get_page_context(self, key, **kwargs):
        # get_article already logs and skips failing lookups
        article = JournalService.get_article(key)
        if article is None:
            raise Http404("Article not found")
        return {"article": article}


class ClubListView(ContentView):
    template_name = "content/clubs.html"

    def get_page_context(self, **kwargs):
        clubs = self.load("clubs", ClubService.list_clubs, default=[])
        return {
            "clubs": [{**club, "slug": ClubService.club_slug(club)} for club in clubs],
        }


class ClubDetailView(ContentView):
    template_name = "content/club_detail.html"

    def get_page_context(self, key, **kwargs):
        club = self.load("club", ClubService.get_club, key)
        if club is None and not self.load_errors:
            raise Http404("Club not found")
        return {"club": club}


class AlumniView(ContentView):
    template_name = "content/alumni.html"

    def get_page_context(self, **kwargs):
        entries = []
        if self.department_slug:
            entries = self.load("alumni", AlumniService.list_all, self.department_slug, default=[])
        search = self.request.GET.get("q", "")
        year = self.request.GET.get("year", "all")
        filtered = utils.filter_alumni(entries, search, year)
        return {
            "search": search,
            "selected_year": year,
            "years": utils.alumni_years(entries),
            "alumni_total": len(filtered),
            "alumni_groups": utils.group_alumni(filtered),
        }


class DownloadsView(ContentView):
    template_name = "content/downloads.html"

    def get_page_context(self, **kwargs):
        downloads = []
        if self.department_slug:
            downloads = self.load(
                "downloads", DepartmentService.list_downloads, self.department_slug, default=[]
            )
        return {"downloads": downloads}


class ContactView(ContentView):
    """Department contact form; disabled when the department has no email on record."""

    template_name = "content/contact.html"
    SENT_MESSAGE = "Message sent to the department."

    def get_page_context(self, form=None, error=None, **kwargs):
        return {
            "form": form or ContactForm(),
            "contact_enabled": bool(self.department.get("email")),
            "error": error,
        }

    def post(self, request, *args, **kwargs):
        form = ContactForm(request.POST)
        if not self.department.get("email") or not self.department_slug:
            return self.render_to_response(self.get_context_data(form=form))
        if not form.is_valid():
            return self.render_to_response(self.get_context_data(form=form))

        try:
            SubmissionService.submit_contact(
                build_contact_payload(form.cleaned_data, self.department_slug)
            )
        except SubmissionFailed as exc:
            return self.render_to_response(self.get_context_data(form=form, error=exc.message))

        messages.success(request, self.SENT_MESSAGE)
        return redirect("content:contact")
