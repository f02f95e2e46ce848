from django import forms
from django.core.exceptions import ValidationError

from .constants import (
    CONTACT_CATEGORIES,
    PARTICIPANT_TYPES,
    PROJECT_TYPES,
    RESEARCH_STATUSES,
    RESEARCH_TYPES,
)

REQUIRED_MESSAGE = "This field is required."


class IdentityForm(forms.Form):
    """Name and campus email, the only fields shown before verification."""

    submitted_by_name = forms.CharField(max_length=200, label="Your name")
    submitted_by_email = forms.EmailField(label="Campus email")


class ProjectForm(forms.Form):
    title = forms.CharField(max_length=255)
    abstract = forms.CharField(widget=forms.Textarea)
    description = forms.CharField(widget=forms.Textarea)
    project_type = forms.ChoiceField(choices=PROJECT_TYPES, initial="major")
    supervisor_name = forms.CharField(max_length=200)
    supervisor_email = forms.EmailField(required=False)
    start_date = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    end_date = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    academic_year = forms.CharField(max_length=20, required=False)
    github_url = forms.URLField(required=False, assume_scheme="https")
    demo_url = forms.URLField(required=False, assume_scheme="https")
    technologies_used = forms.CharField(max_length=500, required=False)
    submitted_by_name = forms.CharField(max_length=200)
    thumbnail = forms.FileField(
        required=False, widget=forms.ClearableFileInput(attrs={"accept": "image/*"})
    )
    report_file = forms.FileField(
        required=False, widget=forms.ClearableFileInput(attrs={"accept": "application/pdf"})
    )

    def clean_thumbnail(self):
        thumbnail = self.cleaned_data.get("thumbnail")
        content_type = getattr(thumbnail, "content_type", "") or ""
        if thumbnail and not content_type.startswith("image/"):
            raise ValidationError("Upload an image file.")
        return thumbnail

    def clean_report_file(self):
        report = self.cleaned_data.get("report_file")
        if report and not report.name.lower().endswith(".pdf"):
            raise ValidationError("Upload the report as a PDF.")
        return report


class ResearchForm(forms.Form):
    title = forms.CharField(max_length=255)
    abstract = forms.CharField(widget=forms.Textarea)
    description = forms.CharField(widget=forms.Textarea)
    research_type = forms.ChoiceField(choices=RESEARCH_TYPES, initial="applied")
    status = forms.ChoiceField(choices=RESEARCH_STATUSES, initial="proposed")
    principal_investigator = forms.CharField(max_length=200)
    pi_email = forms.EmailField()
    start_date = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    end_date = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    funding_agency = forms.CharField(max_length=200, required=False)
    funding_amount = forms.DecimalField(required=False, min_value=0, decimal_places=2)
    keywords = forms.CharField(max_length=500, required=False)
    methodology = forms.CharField(widget=forms.Textarea, required=False)
    expected_outcomes = forms.CharField(widget=forms.Textarea, required=False)
    publications_url = forms.URLField(required=False, assume_scheme="https")
    project_url = forms.URLField(required=False, assume_scheme="https")
    github_url = forms.URLField(required=False, assume_scheme="https")
    submitted_by_name = forms.CharField(max_length=200)


class JournalForm(forms.Form):
    title = forms.CharField(max_length=255)
    genre = forms.CharField(max_length=100)
    abstract = forms.CharField(widget=forms.Textarea)
    keywords = forms.CharField(max_length=500, required=False)
    discipline = forms.CharField(max_length=200, required=False)
    year = forms.IntegerField(required=False)
    volume = forms.IntegerField(required=False)
    number = forms.IntegerField(required=False)
    pages = forms.CharField(max_length=50, required=False)
    submitted_by_name = forms.CharField(max_length=200)


# Row forms: every sub-field is optional at the field level. The formset
# enforces the required sub-fields on the first kept row; later partial rows
# are dropped when the payload is built.

class MemberForm(forms.Form):
    full_name = forms.CharField(max_length=200, required=False)
    roll_number = forms.CharField(max_length=50, required=False)
    email = forms.EmailField(required=False)
    role = forms.CharField(max_length=100, required=False)


class ParticipantForm(forms.Form):
    full_name = forms.CharField(max_length=200, required=False)
    participant_type = forms.ChoiceField(choices=PARTICIPANT_TYPES, initial="student")
    email = forms.EmailField(required=False)
    role = forms.CharField(max_length=100, required=False, initial="Researcher")
    designation = forms.CharField(max_length=100, required=False)
    organization = forms.CharField(max_length=200, required=False)
    linkedin_url = forms.URLField(required=False, assume_scheme="https")
    orcid_id = forms.CharField(max_length=50, required=False)


class AuthorForm(forms.Form):
    given_name = forms.CharField(max_length=100, required=False)
    family_name = forms.CharField(max_length=100, required=False)
    email = forms.EmailField(required=False)
    affiliation = forms.CharField(max_length=200, required=False)
    country = forms.CharField(max_length=100, required=False)
    bio = forms.CharField(widget=forms.Textarea, required=False)


class RequiredFirstRowFormSet(forms.BaseFormSet):
    required_fields = ()
    empty_message = ""

    def kept_forms(self):
        return [form for form in self.forms if not self._should_delete_form(form)]

    def clean(self):
        if any(self.errors):
            return

        rows = self.kept_forms()
        if not rows:
            raise ValidationError(self.empty_message)

        first = rows[0]
        for name in self.required_fields:
            if not (first.cleaned_data.get(name) or "").strip():
                first.add_error(name, REQUIRED_MESSAGE)

    def rows(self) -> list[dict]:
        """cleaned_data of every kept row, partial ones included."""
        return [form.cleaned_data for form in self.kept_forms() if form.cleaned_data]


class MemberFormSet(RequiredFirstRowFormSet):
    required_fields = ("full_name", "roll_number")
    empty_message = "Add at least one team member"


class ParticipantFormSet(RequiredFirstRowFormSet):
    required_fields = ("full_name",)
    empty_message = "Add at least one participant"


class AuthorFormSet(RequiredFirstRowFormSet):
    required_fields = ("given_name",)
    empty_message = "Add at least one author"


def _row_formset(form, formset):
    return forms.formset_factory(
        form, formset=formset, extra=0, min_num=1, can_delete=True, max_num=20
    )


MembersFormSet = _row_formset(MemberForm, MemberFormSet)
ParticipantsFormSet = _row_formset(ParticipantForm, ParticipantFormSet)
AuthorsFormSet = _row_formset(AuthorForm, AuthorFormSet)


class ContactForm(forms.Form):
    full_name = forms.CharField(max_length=200)
    email = forms.EmailField()
    phone_number = forms.CharField(max_length=30, required=False)
    category = forms.ChoiceField(choices=CONTACT_CATEGORIES, initial="general")
    subject = forms.CharField(max_length=255)
    message = forms.CharField(widget=forms.Textarea)
