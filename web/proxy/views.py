"""
Thin JSON relays between the browser and the campus CMS.

Submissions and OTP calls are relayed with the upstream status code; GET
passthroughs copy the body and content type verbatim.
"""

import json
import logging

from django.conf import settings
from django.http import HttpResponse
from drf_spectacular.utils import OpenApiTypes, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from submissions import registration
from submissions.services import SubmissionService
from upstream import client
from upstream.exceptions import UpstreamError
from verification.otp import OtpGateway

from .serializers import OTPRequestSerializer, OTPVerifySerializer
from .throttles import OTPRequestThrottle, OTPVerifyThrottle, SubmissionThrottle

logger = logging.getLogger(__name__)


def relay(response):
    """Copy an upstream response (body, status, content type) as-is."""
    return HttpResponse(
        response.content,
        status=response.status_code,
        content_type=response.headers.get("Content-Type") or "application/json",
    )


def relay_json(response):
    return Response(client.json_or_empty(response), status=response.status_code)


def query_string(request):
    return request.META.get("QUERY_STRING", "")


# --- Submission OTP ---


class OTPRequestView(APIView):
    """Ask upstream to email a one-time code: { email, purpose, full_name? }."""

    throttle_classes = [OTPRequestThrottle]

    @extend_schema(request=OTPRequestSerializer, responses=OpenApiTypes.OBJECT)
    def post(self, request):
        serializer = OTPRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        payload = {k: v for k, v in serializer.validated_data.items() if v != ""}
        try:
            response = client.post_json(settings.OTP_REQUEST_PATH, payload)
        except UpstreamError:
            return Response(
                {"error": OtpGateway.REQUEST_FALLBACK}, status=status.HTTP_502_BAD_GATEWAY
            )
        return relay_json(response)


class OTPVerifyView(APIView):
    """Check a one-time code: { email, otp_code, session_id, purpose }."""

    throttle_classes = [OTPVerifyThrottle]

    @extend_schema(request=OTPVerifySerializer, responses=OpenApiTypes.OBJECT)
    def post(self, request):
        serializer = OTPVerifySerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            response = client.post_json(settings.OTP_VERIFY_PATH, serializer.validated_data)
        except UpstreamError:
            return Response(
                {"error": OtpGateway.VERIFY_FALLBACK}, status=status.HTTP_502_BAD_GATEWAY
            )
        return relay_json(response)


# --- Submissions ---


class ProjectSubmitView(APIView):
    """Multipart (with thumbnail/report_file) or JSON project submission."""

    throttle_classes = [SubmissionThrottle]

    @extend_schema(request=OpenApiTypes.OBJECT, responses=OpenApiTypes.OBJECT)
    def post(self, request):
        try:
            if request.content_type.startswith("multipart/form-data"):
                files = [
                    (name, (upload.name, upload, upload.content_type))
                    for name, upload in request.FILES.items()
                ]
                response = client.post_multipart(
                    settings.PROJECT_SUBMIT_PATH, request.POST.dict(), files
                )
            else:
                response = client.post_json(settings.PROJECT_SUBMIT_PATH, request.data)
        except UpstreamError:
            logger.exception("Project submission relay failed")
            return Response(
                {"error": "Unable to submit project"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return relay_json(response)


class JSONSubmitView(APIView):
    throttle_classes = [SubmissionThrottle]
    path_setting = None
    fallback = None

    @extend_schema(request=OpenApiTypes.OBJECT, responses=OpenApiTypes.OBJECT)
    def post(self, request):
        try:
            response = client.post_json(getattr(settings, self.path_setting), request.data)
        except UpstreamError:
            logger.exception("Submission relay to %s failed", self.path_setting)
            return Response(
                {"error": self.fallback}, status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )
        return relay_json(response)


class ResearchSubmitView(JSONSubmitView):
    path_setting = "RESEARCH_SUBMIT_PATH"
    fallback = SubmissionService.RESEARCH_FALLBACK


class JournalSubmitView(JSONSubmitView):
    path_setting = "JOURNAL_SUBMIT_PATH"
    fallback = SubmissionService.JOURNAL_FALLBACK


class DepartmentContactView(JSONSubmitView):
    path_setting = "CONTACT_SUBMIT_PATH"
    fallback = SubmissionService.CONTACT_FALLBACK


# --- GET passthroughs ---


class GenericProxyView(APIView):
    """GET API_BASE/<path> with the incoming query string."""

    @extend_schema(responses=OpenApiTypes.OBJECT)
    def get(self, request, path):
        try:
            return relay(client.api_get_raw(f"/{path}", query_string(request)))
        except UpstreamError as exc:
            return Response(
                {"error": "Proxy request failed", "details": exc.message},
                status=status.HTTP_502_BAD_GATEWAY,
            )


class DepartmentProxyView(APIView):
    """GET <department prefix>/departments/<path>."""

    @extend_schema(responses=OpenApiTypes.OBJECT)
    def get(self, request, path=""):
        path = path.strip("/")
        if not path:
            return Response(
                {"error": "Path missing", "hint": "/api/department/{slug}/..."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        target = client.public_url(f"{settings.API_PUBLIC_PREFIX}/departments/{path}")
        try:
            return relay(client.api_get_raw(target, query_string(request)))
        except UpstreamError:
            return Response(
                {"error": "Department proxy failed", "target": target},
                status=status.HTTP_502_BAD_GATEWAY,
            )


class GlobalEventsProxyView(APIView):
    @extend_schema(responses=OpenApiTypes.OBJECT)
    def get(self, request):
        try:
            return relay(
                client.api_get_raw(
                    f"{settings.API_WEBSITE_PUBLIC_PREFIX}/global-events", query_string(request)
                )
            )
        except UpstreamError as exc:
            return Response(
                {"error": "Failed to load events", "details": exc.message},
                status=status.HTTP_502_BAD_GATEWAY,
            )


class AlumniTracerProxyView(APIView):
    @extend_schema(responses=OpenApiTypes.OBJECT)
    def get(self, request):
        try:
            return relay(
                client.api_get_raw(
                    f"{settings.API_WEBSITE_PUBLIC_PREFIX}/alumni-tracer", query_string(request)
                )
            )
        except UpstreamError as exc:
            return Response(
                {"error": "Failed to load alumni tracer submissions", "details": exc.message},
                status=status.HTTP_502_BAD_GATEWAY,
            )


# --- Dynamic forms ---


def parse_answers(raw):
    if isinstance(raw, list):
        return raw
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError:
            return None
        return parsed if isinstance(parsed, list) else None
    return None


class FormProxyView(APIView):
    """
    GET the definition of a CMS form, POST a response to it.

    POST takes `answers` (JSON string or list), optional `submitter_email` and
    `otp_session`, and image uploads as `field_<id>` parts.
    """

    legacy = False

    def resolve(self, path):
        return registration.resolve_form_path(path.split("/"))

    @extend_schema(responses=OpenApiTypes.OBJECT)
    def get(self, request, path):
        resolved = self.resolve(path)
        if not resolved:
            return Response({"error": "Invalid form path"}, status=status.HTTP_404_NOT_FOUND)

        owner, slug = resolved
        try:
            response = client.api_get_raw(registration.forms_path(owner, slug, self.legacy))
        except UpstreamError as exc:
            return Response(
                {"error": registration.LOAD_FALLBACK, "details": exc.message},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        if not client.is_success(response):
            return Response(
                {"error": registration.LOAD_FALLBACK, "details": response.text},
                status=response.status_code,
            )
        return Response(
            client.json_or_empty(response),
            status=status.HTTP_200_OK,
            headers={"Cache-Control": "no-cache"},
        )

    @extend_schema(request=OpenApiTypes.OBJECT, responses=OpenApiTypes.OBJECT)
    def post(self, request, path):
        resolved = self.resolve(path)
        if not resolved:
            return Response({"error": "Invalid form path"}, status=status.HTTP_404_NOT_FOUND)

        raw_answers = request.data.get("answers")
        if not raw_answers:
            return Response(
                {"error": registration.SUBMIT_FALLBACK, "details": "Missing answers payload."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        answers = parse_answers(raw_answers)
        if answers is None:
            return Response(
                {"error": registration.SUBMIT_FALLBACK, "details": "Invalid answers payload."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        uploads = {
            key: upload for key, upload in request.FILES.items() if key.startswith("field_")
        }
        owner, slug = resolved
        try:
            response = registration.RegistrationFormService.submit(
                owner,
                slug,
                answers,
                submitter_email=request.data.get("submitter_email") or None,
                otp_session=request.data.get("otp_session") or None,
                uploads=uploads,
                legacy=self.legacy,
            )
        except UpstreamError as exc:
            return Response(
                {"error": registration.SUBMIT_FALLBACK, "details": exc.message},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        if not client.is_success(response):
            return Response(
                {"error": registration.SUBMIT_FALLBACK, "details": response.text},
                status=response.status_code,
            )
        return Response(
            client.json_or_empty(response),
            status=status.HTTP_201_CREATED,
            headers={"Cache-Control": "no-cache"},
        )


class LegacyRegistrationFormView(FormProxyView):
    """Older `/registration-forms/<slug>` endpoints, always owned by this department."""

    legacy = True

    def resolve(self, path):
        slug = path.strip("/")
        if not slug or "/" in slug:
            return None
        return registration.default_owner_slug(), slug
