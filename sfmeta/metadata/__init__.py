# ==============================================
# METADATA
# ==============================================
#
# This package handles all Metadata API calls:
# encoding requests, decoding results, and tracking
# asynchronous deploy / retrieve jobs.
#
# Modules:
# --------
# - soap.py      → Envelope building and response decoding
# - types.py     → Result data classes and enums
# - jobs.py      → DeployJob / RetrieveJob pending handles
# - client.py    → MetadataClient
#
# ==============================================

from .types import (
    MetadataType,
    DeploymentStatus,
    SharingModel,
    DeployStatus,
    RetrieveStatus,
    MetadataError,
    OperationResult,
    DeployResult,
    RetrieveResult,
)
from .jobs import AsyncJob, DeployJob, RetrieveJob
from .client import MetadataClient

__all__ = [
    "MetadataType",
    "DeploymentStatus",
    "SharingModel",
    "DeployStatus",
    "RetrieveStatus",
    "MetadataError",
    "OperationResult",
    "DeployResult",
    "RetrieveResult",
    "AsyncJob",
    "DeployJob",
    "RetrieveJob",
    "MetadataClient",
]
