from __future__ import annotations

from medscan.domain.models import AnalysisFailure


class ScanError(Exception):
    """Expected failure of one scan request, carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(ScanError):
    status_code = 400


class ExtractionError(ScanError):
    status_code = 400


class AnalysisError(ScanError):
    """Contained by the pipeline; degrades the result instead of failing the request."""

    def __init__(self, message: str, *, cause: AnalysisFailure):
        super().__init__(message)
        self.cause = cause


class ProviderError(RuntimeError):
    pass


class OCRRequestError(ProviderError):
    pass


class CompletionRequestError(ProviderError):
    pass
