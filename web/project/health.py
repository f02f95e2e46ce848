import requests
from django.conf import settings
from django.core.cache import cache
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView


class HealthCheckView(APIView):
    """
    Health check endpoint for monitoring service status.
    Checks the cache (session store) and that the CMS answers.
    """
    permission_classes = []  # Public endpoint
    throttle_classes = []

    def get(self, request):
        health_status = {
            "status": "healthy",
            "service": "department-website",
            "department": settings.DEPARTMENT_CODE,
            "checks": {}
        }

        # Check cache (sessions live here)
        try:
            cache.set("health_check", "ok", 10)
            if cache.get("health_check") == "ok":
                health_status["checks"]["cache"] = "ok"
            else:
                health_status["status"] = "unhealthy"
                health_status["checks"]["cache"] = "error: cache read/write failed"
        except Exception as e:
            health_status["status"] = "unhealthy"
            health_status["checks"]["cache"] = f"error: {str(e)}"

        # Check upstream CMS
        try:
            response = requests.head(settings.API_BASE, timeout=settings.UPSTREAM_TIMEOUT)
            if response.status_code < 500:
                health_status["checks"]["upstream"] = "ok"
            else:
                health_status["status"] = "unhealthy"
                health_status["checks"]["upstream"] = f"error: status {response.status_code}"
        except requests.RequestException as e:
            health_status["status"] = "unhealthy"
            health_status["checks"]["upstream"] = f"error: {str(e)}"

        status_code = status.HTTP_200_OK if health_status["status"] == "healthy" else status.HTTP_503_SERVICE_UNAVAILABLE

        return Response(health_status, status=status_code)
