class OtpError(Exception):
    """Base class for submission OTP failures. `message` is safe to show to the user."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class OtpRequestFailed(OtpError):
    pass


class OtpVerifyFailed(OtpError):
    pass


class OtpSessionMissing(OtpError):
    def __init__(self, message="Request a verification code first"):
        super().__init__(message)
