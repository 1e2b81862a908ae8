"""
Errors surfaced to HTTP callers. Each carries the status it maps to.
"""


class MirrorError(Exception):
    status_code = 500
    message = "Mirror error"

    def __init__(self, details: str | None = None):
        super().__init__(details or self.message)
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class MissingParameter(MirrorError):
    status_code = 400
    message = "Missing URL parameter"


class UnsafeUrl(MirrorError):
    status_code = 400
    message = "Unsafe URL"


class FetchFailed(MirrorError):
    status_code = 500
    message = "Page fetch failed"


class NotFound(MirrorError):
    status_code = 404
    message = "Page not found"


class InvalidCode(MirrorError):
    status_code = 400
    message = "Invalid page code"
