from django.urls import path

from .views import (
    JournalSubmissionView,
    ProjectSubmissionView,
    RegistrationFormView,
    ResearchSubmissionView,
)

app_name = "submissions"

urlpatterns = [
    path("submit-project", ProjectSubmissionView.as_view(), name="project"),
    path("submit-research", ResearchSubmissionView.as_view(), name="research"),
    path("submit-journal", JournalSubmissionView.as_view(), name="journal"),
    path("forms/<path:path>", RegistrationFormView.as_view(), name="registration-form"),
]
