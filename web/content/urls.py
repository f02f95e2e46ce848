from django.urls import path

from . import views

app_name = "content"

urlpatterns = [
    path("", views.HomeView.as_view(), name="home"),
    path("about", views.AboutView.as_view(), name="about"),
    path("programs", views.ProgramListView.as_view(), name="programs"),
    path("programs/<str:slug>", views.ProgramDetailView.as_view(), name="program_detail"),
    path("faculty", views.FacultyView.as_view(), name="faculty"),
    path("events", views.EventListView.as_view(), name="events"),
    path("events/<str:key>", views.EventDetailView.as_view(), name="event_detail"),
    path("notices", views.NoticeListView.as_view(), name="notices"),
    path("notices/<str:key>", views.NoticeDetailView.as_view(), name="notice_detail"),
    path("research", views.ResearchListView.as_view(), name="research"),
    path("research/<str:key>", views.ResearchDetailView.as_view(), name="research_detail"),
    path("projects", views.ProjectListView.as_view(), name="projects"),
    path("projects/<str:key>", views.ProjectDetailView.as_view(), name="project_detail"),
    path("journal", views.JournalListView.as_view(), name="journal"),
    path("journal/<str:key>", views.JournalDetailView.as_view(), name="journal_detail"),
    path("clubs", views.ClubListView.as_view(), name="clubs"),
    path("clubs/<str:key>", views.ClubDetailView.as_view(), name="club_detail"),
    path("alumni", views.AlumniView.as_view(), name="alumni"),
    path("downloads", views.DownloadsView.as_view(), name="downloads"),
    path("contact", views.ContactView.as_view(), name="contact"),
]
