import logging
from urllib.parse import urlencode

from django.conf import settings
from django.contrib import messages
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views import View

from .digits import OtpDigits
from .exceptions import OtpRequestFailed
from .page import VerificationPage

logger = logging.getLogger(__name__)


class VerificationView(View):
    """
    /verification?email=&name=&type=&session=

    GET renders the six-digit form, POST `action=verify` checks the code and
    POST `action=resend` asks for a new one.
    """

    template_name = "verification/verify.html"

    def _page(self, request, params):
        return VerificationPage(
            email=params.get("email", ""),
            name=params.get("name", ""),
            type_=params.get("type", ""),
            session_id=params.get("session", ""),
            storage=request.session,
        )

    def _render(self, request, page, status=200):
        context = {
            "page": page,
            "resend_remaining": page.cooldown.remaining(),
        }
        return render(request, self.template_name, context, status=status)

    def _invalid(self, request):
        return render(request, "verification/invalid.html", status=400)

    def get(self, request):
        page = self._page(request, request.GET)
        if not page.is_valid_link:
            return self._invalid(request)
        return self._render(request, page)

    def post(self, request):
        page = self._page(request, request.POST)
        if not page.is_valid_link:
            return self._invalid(request)

        if request.POST.get("action") == "resend":
            try:
                page.resend()
            except OtpRequestFailed as exc:
                logger.warning("Resend for %s failed: %s", page.email, exc.message)
                page.error = exc.message
                return self._render(request, page)
            messages.info(request, f"A new code was sent to {page.email}.")
            return redirect(f"{reverse('verification:verify')}?{urlencode(page.query)}")

        if not page.verify(OtpDigits.from_post(request.POST)):
            return self._render(request, page)

        delay = settings.VERIFICATION_REDIRECT_DELAY_SECONDS
        response = render(
            request,
            "verification/success.html",
            {"page": page, "redirect_delay": delay},
        )
        response["Refresh"] = f"{delay}; url={page.success_url}"
        return response
