from django.urls import path

from .views import VerificationView

app_name = "verification"

urlpatterns = [
    path("verification", VerificationView.as_view(), name="verify"),
]
