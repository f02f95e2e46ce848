class UpstreamError(Exception):
    """Raised when the CMS/backend cannot be reached or answers with a non-2xx status."""

    def __init__(self, message, status_code=None, data=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.data = data or {}
