class SubmissionFailed(Exception):
    """Upstream refused or never received a submission. `message` is user-facing."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message
