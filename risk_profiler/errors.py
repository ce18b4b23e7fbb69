"""Exception taxonomy for the risk profiler API."""


class HealthProfilerError(Exception):
    """Base error carrying the HTTP status it should be reported with."""

    status_code = 500

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"status": "error", "error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(HealthProfilerError):
    status_code = 400


class ParsingError(ValidationError):
    """Raised when a JSON survey payload is malformed or fails the schema."""


class FileUploadError(HealthProfilerError):
    status_code = 400


class OCRError(HealthProfilerError):
    """Raised when no usable text could be read from an uploaded image."""

    status_code = 422

    def __init__(self, message: str, details=None, data=None):
        super().__init__(message, details)
        self.data = data

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.data is not None:
            body["data"] = self.data
        return body


class ProcessingError(HealthProfilerError):
    status_code = 500
