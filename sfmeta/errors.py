# ==============================================
# Errors
# ==============================================
#
# PURPOSE:
#   Exceptions raised by the client. Whole-call rejections and
#   job failures are exceptions; per-record failures are NOT,
#   they come back as OperationResult(success=False).
#
# HIERARCHY:
# ----------
# - MetadataClientError
#     ├── ConfigError        → connection settings missing
#     ├── ServiceFault       → SOAP fault returned by the service
#     ├── PollingTimeout     → async job not done in time
#     └── RetrieveError      → retrieve stream error signal
#
# ==============================================

from typing import Optional


class MetadataClientError(Exception):
    """Base class for all client errors."""


class ConfigError(MetadataClientError):
    """Raised when a connection cannot be built from the given settings."""


class ServiceFault(MetadataClientError):
    """
    The remote service rejected the whole call.

    Attributes:
        fault_code: SOAP faultcode, e.g. "sf:INVALID_SESSION_ID"
        message: SOAP faultstring
    """

    def __init__(self, fault_code: str, message: str):
        super().__init__(f"{fault_code}: {message}")
        self.fault_code = fault_code
        self.message = message


class PollingTimeout(MetadataClientError):
    """An async job did not reach a terminal state in time."""

    def __init__(self, job_id: str, timeout: float):
        super().__init__(f"Polling time out after {timeout}s. Job id = {job_id}")
        self.job_id = job_id
        self.timeout = timeout


class RetrieveError(MetadataClientError):
    """A retrieve finished without producing an archive."""

    def __init__(self, job_id: str, status: Optional[str], message: Optional[str] = None):
        super().__init__(f"Retrieve {job_id} ended with status {status}: {message or 'no archive returned'}")
        self.job_id = job_id
        self.status = status
        self.message = message
