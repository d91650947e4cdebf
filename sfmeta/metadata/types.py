# ==============================================
# Types (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes that represent the OUTPUT of Metadata API calls,
#   and the enums for the API's fixed string values.
#
# WHY THIS FILE EXISTS:
#   The SOAP codec hands back plain dicts of text values.
#   These classes turn them into typed results the caller can
#   inspect (success flags, counts, decoded archives) without
#   knowing the wire format.
#
# ENUMS:
# ------
# - MetadataType      → common component type names
# - DeploymentStatus  → Deployed, InDevelopment
# - SharingModel      → Private, Read, ReadWrite, ...
# - DeployStatus      → Pending ... Succeeded, Failed, Canceled
# - RetrieveStatus    → Pending, InProgress, Succeeded, Failed
#
# CLASSES:
# --------
# - MetadataError      → one error entry attached to a result
# - OperationResult    → per-record result of create/update/upsert/rename/delete
# - DeployResult       → status of a deploy job
# - RetrieveResult     → status of a retrieve job, with the decoded archive
#
#   Each has from_dict(data) (classmethod) to build from the decoded
#   SOAP result, and to_dict() for output.
#
# ==============================================

import base64
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Union


class MetadataType(str, Enum):
    """Component types most callers use. Any API type name string also works."""
    APEX_CLASS = "ApexClass"
    APEX_TRIGGER = "ApexTrigger"
    APEX_PAGE = "ApexPage"
    CUSTOM_OBJECT = "CustomObject"
    CUSTOM_FIELD = "CustomField"
    CUSTOM_TAB = "CustomTab"
    CUSTOM_LABELS = "CustomLabels"
    LAYOUT = "Layout"
    PERMISSION_SET = "PermissionSet"
    PROFILE = "Profile"
    RECORD_TYPE = "RecordType"
    STATIC_RESOURCE = "StaticResource"
    VALIDATION_RULE = "ValidationRule"


class DeploymentStatus(str, Enum):
    DEPLOYED = "Deployed"
    IN_DEVELOPMENT = "InDevelopment"


class SharingModel(str, Enum):
    PRIVATE = "Private"
    READ = "Read"
    READ_WRITE = "ReadWrite"
    READ_WRITE_TRANSFER = "ReadWriteTransfer"
    FULL_ACCESS = "FullAccess"
    CONTROLLED_BY_PARENT = "ControlledByParent"


class DeployStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    SUCCEEDED = "Succeeded"
    SUCCEEDED_PARTIAL = "SucceededPartial"
    FAILED = "Failed"
    CANCELING = "Canceling"
    CANCELED = "Canceled"


class RetrieveStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "InProgress"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


def _to_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    return int(value)


def _as_list(value: Any) -> list:
    # Repeated elements decode to a list, a single one to a scalar/dict
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _parse_status(enum_cls, value: Optional[str]):
    # Unknown values from newer API versions are kept as plain strings
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass
class MetadataError:
    """One error attached to a per-record result."""
    status_code: Optional[str] = None
    message: Optional[str] = None
    fields: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "message": self.message,
            "fields": list(self.fields),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetadataError":
        return cls(
            status_code=data.get("statusCode"),
            message=data.get("message"),
            fields=[f for f in _as_list(data.get("fields")) if f is not None],
        )


@dataclass
class OperationResult:
    """
    Result for one submitted record.

    For rename, full_name is the name the record had before the call.
    `created` is only set by upsert.
    """

    full_name: str
    success: bool
    created: Optional[bool] = None
    errors: List[MetadataError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "fullName": self.full_name,
            "success": self.success,
        }
        if self.created is not None:
            data["created"] = self.created
        if self.errors:
            data["errors"] = [e.to_dict() for e in self.errors]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OperationResult":
        created = data.get("created")
        return cls(
            full_name=data.get("fullName") or "",
            success=_to_bool(data.get("success")),
            created=_to_bool(created) if created is not None else None,
            errors=[MetadataError.from_dict(e) for e in _as_list(data.get("errors")) if isinstance(e, dict)],
        )


@dataclass
class DeployResult:
    """Status of a deploy job. `details` is only filled when requested."""

    id: str
    done: bool = False
    success: bool = False
    status: Union[DeployStatus, str, None] = None
    state_detail: Optional[str] = None
    error_message: Optional[str] = None
    error_status_code: Optional[str] = None
    number_component_errors: int = 0
    number_components_deployed: int = 0
    number_components_total: int = 0
    number_test_errors: int = 0
    number_tests_completed: int = 0
    number_tests_total: int = 0
    check_only: bool = False
    created_date: Optional[str] = None
    completed_date: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    @property
    def component_failures(self) -> List[Dict[str, Any]]:
        if not self.details:
            return []
        return _as_list(self.details.get("componentFailures"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "done": self.done,
            "success": self.success,
            "status": self.status.value if isinstance(self.status, Enum) else self.status,
            "stateDetail": self.state_detail,
            "errorMessage": self.error_message,
            "errorStatusCode": self.error_status_code,
            "numberComponentErrors": self.number_component_errors,
            "numberComponentsDeployed": self.number_components_deployed,
            "numberComponentsTotal": self.number_components_total,
            "numberTestErrors": self.number_test_errors,
            "numberTestsCompleted": self.number_tests_completed,
            "numberTestsTotal": self.number_tests_total,
            "checkOnly": self.check_only,
            "createdDate": self.created_date,
            "completedDate": self.completed_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeployResult":
        details = data.get("details")
        return cls(
            id=data.get("id") or "",
            done=_to_bool(data.get("done")),
            success=_to_bool(data.get("success")),
            status=_parse_status(DeployStatus, data.get("status")),
            state_detail=data.get("stateDetail"),
            error_message=data.get("errorMessage"),
            error_status_code=data.get("errorStatusCode"),
            number_component_errors=_to_int(data.get("numberComponentErrors")),
            number_components_deployed=_to_int(data.get("numberComponentsDeployed")),
            number_components_total=_to_int(data.get("numberComponentsTotal")),
            number_test_errors=_to_int(data.get("numberTestErrors")),
            number_tests_completed=_to_int(data.get("numberTestsCompleted")),
            number_tests_total=_to_int(data.get("numberTestsTotal")),
            check_only=_to_bool(data.get("checkOnly")),
            created_date=data.get("createdDate"),
            completed_date=data.get("completedDate"),
            details=details if isinstance(details, dict) else None,
        )


@dataclass
class RetrieveResult:
    """Status of a retrieve job. `zip_file` holds the decoded archive once done."""

    id: str
    done: bool = False
    success: bool = False
    status: Union[RetrieveStatus, str, None] = None
    error_message: Optional[str] = None
    error_status_code: Optional[str] = None
    zip_file: Optional[bytes] = None
    file_properties: List[Dict[str, Any]] = field(default_factory=list)
    messages: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "done": self.done,
            "success": self.success,
            "status": self.status.value if isinstance(self.status, Enum) else self.status,
            "errorMessage": self.error_message,
            "errorStatusCode": self.error_status_code,
            "zipFileSize": len(self.zip_file) if self.zip_file else 0,
            "fileProperties": self.file_properties,
            "messages": self.messages,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RetrieveResult":
        encoded = data.get("zipFile")
        return cls(
            id=data.get("id") or "",
            done=_to_bool(data.get("done")),
            success=_to_bool(data.get("success")),
            status=_parse_status(RetrieveStatus, data.get("status")),
            error_message=data.get("errorMessage"),
            error_status_code=data.get("errorStatusCode"),
            zip_file=base64.b64decode(encoded) if encoded else None,
            file_properties=[p for p in _as_list(data.get("fileProperties")) if isinstance(p, dict)],
            messages=[m for m in _as_list(data.get("messages")) if isinstance(m, dict)],
        )
