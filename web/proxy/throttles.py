"""
Rate limits for the public proxy endpoints.

Visitors are anonymous, so every throttle keys on the client IP.
Rates live in settings.REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'].
"""

from rest_framework.throttling import SimpleRateThrottle


class IPRateThrottle(SimpleRateThrottle):
    def get_cache_key(self, request, view):
        return self.cache_format % {
            "scope": self.scope,
            "ident": self.get_ident(request),
        }


class OTPRequestThrottle(IPRateThrottle):
    """
    Code requests. Each one costs an email upstream.

    Rate: settings.DEFAULT_THROTTLE_RATES['otp']
    """

    scope = "otp"


class OTPVerifyThrottle(IPRateThrottle):
    """
    Code guesses.

    Rate: settings.DEFAULT_THROTTLE_RATES['otp_verify']
    """

    scope = "otp_verify"


class SubmissionThrottle(IPRateThrottle):
    scope = "submission"
