"""
Error taxonomy for funder fit analysis.

Parsing, classification and scoring never raise for well-typed input; the
only propagated failures come from the upstream I/O boundary.
"""


class FunderFitError(Exception):
    """Base class for all funder-fit errors."""


class InvalidEinError(FunderFitError):
    """EIN is not a 9-digit taxpayer identifier."""

    def __init__(self, ein: str, reason: str = "EIN must be exactly 9 digits"):
        self.ein = ein
        self.reason = reason
        super().__init__(f"Invalid EIN '{ein}': {reason}")


class OrganizationNotFoundError(FunderFitError):
    """Organization is unknown upstream, or has no filings on record."""

    def __init__(self, ein: str, detail: str = "Organization not found"):
        self.ein = ein
        self.detail = detail
        super().__init__(f"{detail} [ein={ein}]")


class UpstreamError(FunderFitError):
    """An upstream HTTP call failed (non-404 status, timeout, transport error)."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class AnalysisFailedError(FunderFitError):
    """Coarse user-facing failure; internal detail is logged, not surfaced."""

    USER_MESSAGE = "Failed to analyze organization"

    def __init__(self, ein: str, cause: Exception | None = None):
        self.ein = ein
        self.cause = cause
        super().__init__(f"{self.USER_MESSAGE} [ein={ein}]")
