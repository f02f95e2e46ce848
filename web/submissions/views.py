import logging

from django.contrib import messages
from django.shortcuts import redirect, render
from django.views import View

from content.services import DepartmentService
from upstream.exceptions import UpstreamError
from verification.exceptions import OtpError
from verification.flow import SubmissionVerificationFlow
from verification.otp import OtpStatus, Purpose, SubmissionOtp

from . import registration
from .exceptions import SubmissionFailed
from .forms import (
    AuthorsFormSet,
    IdentityForm,
    JournalForm,
    MembersFormSet,
    ParticipantsFormSet,
    ProjectForm,
    ResearchForm,
)
from .payloads import build_journal_payload, build_project_payload, build_research_payload
from .services import SubmissionService

logger = logging.getLogger(__name__)

NOT_VERIFIED = "Verify your campus email before submitting"
EMAIL_CHANGED = "Email changed. Verify the new address before submitting."
DEPARTMENT_MISSING = "Department not found. Please try again later."


def with_extra_row(data, prefix):
    """Copy of POST data with one more (blank) row in the `prefix` formset."""
    data = data.copy()
    key = f"{prefix}-TOTAL_FORMS"
    try:
        total = int(data.get(key, 1))
    except (TypeError, ValueError):
        total = 1
    data[key] = str(total + 1)
    return data


class SubmissionView(View):
    """
    Verify-then-submit page shared by the project, research and journal forms.

    GET ?verified=true adopts a completed verification; POST takes
    `action=verify` (send a code and go to /verification), `action=add_row`
    or `action=submit`.

    Subclasses set the class attributes below and implement two hooks:

    - build_payload(data, rows, department, flow) returns (payload, rows_key),
      the upstream body and the key of its row list.
    - submit(payload, files) sends it, raising SubmissionFailed on rejection.
    """

    purpose = None
    template_name = None
    page_title = ""
    form_class = None
    formset_class = None
    formset_prefix = None
    success_message = ""
    empty_rows_message = ""

    def get_flow(self, request):
        return SubmissionVerificationFlow(self.purpose, request.session)

    def get_department(self):
        try:
            return DepartmentService.get_department()
        except UpstreamError as exc:
            logger.warning("Failed to load department for %s: %s", self.purpose, exc.message)
            return None

    def build_payload(self, data, rows, department, flow):
        raise NotImplementedError

    def submit(self, payload, files):
        raise NotImplementedError

    def render_page(self, request, flow, department, form=None, formset=None,
                    identity_form=None, error=None, show_errors=True, status=200):
        context = {
            "page_title": self.page_title,
            "flow": flow,
            "department": department,
            "identity_form": identity_form or IdentityForm(),
            "form": form or self.form_class(),
            "formset": formset or self.formset_class(prefix=self.formset_prefix),
            "error": error,
            "show_errors": show_errors,
        }
        return render(request, self.template_name, context, status=status)

    def get(self, request):
        flow = self.get_flow(request)
        if request.GET.get("verified") == "true" and flow.adopt():
            messages.success(request, "Email verified successfully!")
        return self.render_page(request, flow, self.get_department())

    def post(self, request):
        flow = self.get_flow(request)
        department = self.get_department()
        action = request.POST.get("action", "submit")

        if action == "verify":
            return self.request_code(request, flow, department)

        if action == "add_row":
            data = with_extra_row(request.POST, self.formset_prefix)
            return self.render_page(
                request,
                flow,
                department,
                form=self.form_class(data, request.FILES),
                formset=self.formset_class(data, prefix=self.formset_prefix),
                show_errors=False,
            )

        return self.handle_submit(request, flow, department)

    def request_code(self, request, flow, department):
        identity_form = IdentityForm(request.POST)
        if not identity_form.is_valid():
            return self.render_page(request, flow, department, identity_form=identity_form)

        try:
            verification_url = flow.request_code(
                identity_form.cleaned_data["submitted_by_email"],
                identity_form.cleaned_data["submitted_by_name"],
            )
        except OtpError as exc:
            return self.render_page(
                request, flow, department, identity_form=identity_form, error=exc.message
            )
        return redirect(verification_url)

    def handle_submit(self, request, flow, department):
        submitted_email = (request.POST.get("submitted_by_email") or "").strip()
        if flow.change_email(submitted_email):
            messages.warning(request, EMAIL_CHANGED)
            identity_form = IdentityForm(
                initial={
                    "submitted_by_email": submitted_email,
                    "submitted_by_name": request.POST.get("submitted_by_name", ""),
                }
            )
            return self.render_page(request, flow, department, identity_form=identity_form)

        if not flow.is_verified:
            return self.render_page(request, flow, department, error=NOT_VERIFIED)

        form = self.form_class(request.POST, request.FILES)
        formset = self.formset_class(request.POST, prefix=self.formset_prefix)

        if not department or not department.get("uuid"):
            return self.render_page(
                request, flow, department, form=form, formset=formset, error=DEPARTMENT_MISSING
            )

        if not (form.is_valid() and formset.is_valid()):
            return self.render_page(request, flow, department, form=form, formset=formset)

        payload, rows_key = self.build_payload(form.cleaned_data, formset.rows(), department, flow)
        if not payload.get(rows_key):
            return self.render_page(
                request, flow, department, form=form, formset=formset,
                error=self.empty_rows_message,
            )

        try:
            self.submit(payload, request.FILES)
        except SubmissionFailed as exc:
            return self.render_page(
                request, flow, department, form=form, formset=formset, error=exc.message
            )

        logger.info("%s accepted for %s", self.purpose, flow.email)
        flow.complete()
        messages.success(request, self.success_message)
        return redirect(request.path)


class ProjectSubmissionView(SubmissionView):
    purpose = Purpose.PROJECT
    template_name = "submissions/project.html"
    page_title = "Submit a project"
    form_class = ProjectForm
    formset_class = MembersFormSet
    formset_prefix = "members"
    success_message = "Project submitted for review"
    empty_rows_message = "Add at least one team member"

    def build_payload(self, data, rows, department, flow):
        payload = build_project_payload(
            data,
            rows,
            department_uuid=department["uuid"],
            email=flow.email,
            session_id=flow.session_id,
        )
        return payload, "members"

    def submit(self, payload, files):
        uploads = {name: files.get(name) for name in ("thumbnail", "report_file")}
        return SubmissionService.submit_project(payload, uploads)


class ResearchSubmissionView(SubmissionView):
    purpose = Purpose.RESEARCH
    template_name = "submissions/research.html"
    page_title = "Submit research"
    form_class = ResearchForm
    formset_class = ParticipantsFormSet
    formset_prefix = "participants"
    success_message = "Research submitted for departmental review"
    empty_rows_message = "Add at least one participant"

    def build_payload(self, data, rows, department, flow):
        payload = build_research_payload(
            data,
            rows,
            department_uuid=department["uuid"],
            email=flow.email,
            session_id=flow.session_id,
        )
        return payload, "participants"

    def submit(self, payload, files):
        return SubmissionService.submit_research(payload)


class JournalSubmissionView(SubmissionView):
    purpose = Purpose.JOURNAL
    template_name = "submissions/journal.html"
    page_title = "Submit a journal article"
    form_class = JournalForm
    formset_class = AuthorsFormSet
    formset_prefix = "authors"
    success_message = "Journal article submitted"
    empty_rows_message = "Add at least one author"

    def build_payload(self, data, rows, department, flow):
        payload = build_journal_payload(
            data,
            rows,
            department_uuid=department["uuid"],
            email=flow.email,
            session_id=flow.session_id,
        )
        return payload, "authors"

    def submit(self, payload, files):
        return SubmissionService.submit_journal(payload)


class RegistrationFormView(View):
    """
    /forms/<slug> and /forms/<owner>/<slug>

    Forms flagged `requireCollegeEmail` verify the submitter inline: POST
    `action=send_otp`, then `action=verify_otp`, then the regular submit.
    """

    template_name = "submissions/registration_form.html"
    error_template_name = "submissions/registration_error.html"
    SESSION_PREFIX = "form_otp"
    EMAIL_REQUIRED = "College email is required for this form."
    VERIFY_FIRST = "Please verify your college email before submitting."

    def _resolve(self, path):
        resolved = registration.resolve_form_path(path.split("/"))
        if not resolved:
            raise registration.FormLoadError(registration.INVALID_LINK_MESSAGE, 400)
        return resolved

    def _session_key(self, owner, slug):
        return f"{self.SESSION_PREFIX}:{owner}/{slug}"

    def _otp_state(self, request, owner, slug):
        state = request.session.get(self._session_key(owner, slug)) or {}
        otp = SubmissionOtp.from_dict(state.get("otp"), Purpose.FORM)
        return otp, state.get("email", "")

    def _save_otp(self, request, owner, slug, otp, email):
        request.session[self._session_key(owner, slug)] = {"otp": otp.to_dict(), "email": email}

    def _render(self, request, form, otp, email, data=None, field_errors=None, error=None):
        requires_email = registration.requires_college_email(form)
        context = {
            "registration_form": form,
            "sections": registration.present_sections(form, data, field_errors),
            "requires_college_email": requires_email,
            "allow_anonymous": registration.allows_anonymous(form),
            "owner_name": form.get("ownerName") or form.get("owner_name") or "",
            "otp": otp,
            "submitter_email": email,
            "can_access_form": not requires_email or otp.is_verified,
            "error": error,
        }
        return render(request, self.template_name, context)

    def _load(self, request, path):
        owner, slug = self._resolve(path)
        return owner, slug, registration.RegistrationFormService.get_form(owner, slug)

    def _error_page(self, request, exc):
        status_code = exc.status_code if exc.status_code in (400, 404) else 502
        return render(
            request, self.error_template_name, {"error": exc.message}, status=status_code
        )

    def get(self, request, path):
        try:
            owner, slug, form = self._load(request, path)
        except registration.FormLoadError as exc:
            return self._error_page(request, exc)

        otp, email = self._otp_state(request, owner, slug)
        return self._render(request, form, otp, email)

    def post(self, request, path):
        try:
            owner, slug, form = self._load(request, path)
        except registration.FormLoadError as exc:
            return self._error_page(request, exc)

        otp, stored_email = self._otp_state(request, owner, slug)
        email = (request.POST.get("submitter_email") or "").strip()
        if email != stored_email and otp.status != OtpStatus.IDLE:
            otp.reset()
        action = request.POST.get("action", "submit")

        if action == "send_otp":
            try:
                otp.request_otp(email)
            except OtpError as exc:
                logger.warning("Form OTP request for %s failed: %s", email, exc.message)
            self._save_otp(request, owner, slug, otp, email)
            return self._render(request, form, otp, email, data=request.POST)

        if action == "verify_otp":
            try:
                otp.verify_otp(email, (request.POST.get("otp_code") or "").strip())
            except OtpError as exc:
                otp.error = exc.message
            self._save_otp(request, owner, slug, otp, email)
            return self._render(request, form, otp, email, data=request.POST)

        self._save_otp(request, owner, slug, otp, email)
        requires_email = registration.requires_college_email(form)
        if requires_email:
            if not email:
                return self._render(
                    request, form, otp, email, data=request.POST, error=self.EMAIL_REQUIRED
                )
            if not otp.is_verified or not otp.session_id:
                return self._render(
                    request, form, otp, email, data=request.POST, error=self.VERIFY_FIRST
                )

        answers, field_errors, uploads = registration.collect_answers(
            form.get("fields") or [], request.POST, request.FILES
        )
        if field_errors:
            return self._render(
                request, form, otp, email, data=request.POST, field_errors=field_errors
            )

        try:
            registration.RegistrationFormService.submit_or_raise(
                owner,
                slug,
                answers,
                submitter_email=email if requires_email else None,
                otp_session=otp.session_id if requires_email else None,
                uploads=uploads,
            )
        except SubmissionFailed as exc:
            return self._render(request, form, otp, email, data=request.POST, error=exc.message)

        if requires_email:
            request.session.pop(self._session_key(owner, slug), None)
        messages.success(request, registration.SUBMITTED_MESSAGE)
        return redirect(request.path)
