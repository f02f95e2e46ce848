from django.urls import path

from . import views

urlpatterns = [
    path("submissions/otp/request", views.OTPRequestView.as_view(), name="proxy-otp-request"),
    path("submissions/otp/verify", views.OTPVerifyView.as_view(), name="proxy-otp-verify"),
    path("submissions/project", views.ProjectSubmitView.as_view(), name="proxy-submit-project"),
    path("submissions/research", views.ResearchSubmitView.as_view(), name="proxy-submit-research"),
    path("submissions/journal", views.JournalSubmitView.as_view(), name="proxy-submit-journal"),
    path("contact/department", views.DepartmentContactView.as_view(), name="proxy-contact"),
    path("proxy/<path:path>", views.GenericProxyView.as_view(), name="proxy-generic"),
    path("department/", views.DepartmentProxyView.as_view(), name="proxy-department-root"),
    path("department/<path:path>", views.DepartmentProxyView.as_view(), name="proxy-department"),
    path("website/global-events", views.GlobalEventsProxyView.as_view(), name="proxy-global-events"),
    path("alumni-tracer", views.AlumniTracerProxyView.as_view(), name="proxy-alumni-tracer"),
    path("forms/<path:path>", views.FormProxyView.as_view(), name="proxy-forms"),
    path(
        "registration-forms/<path:path>",
        views.LegacyRegistrationFormView.as_view(),
        name="proxy-registration-forms",
    ),
]
