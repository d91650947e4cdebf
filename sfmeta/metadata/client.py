# ==============================================
# MetadataClient
# ==============================================
#
# PURPOSE:
#   Translates typed method calls into Metadata API SOAP calls and
#   translates the responses into typed results or exceptions.
#
# WHY THIS CLASS EXISTS:
#   Callers think in "create these two custom objects" or "deploy
#   this package". The service thinks in envelopes, xsi:types and
#   async process ids. This class is the mapping between the two,
#   and nothing more: one call in, one request out, no retries,
#   no caching.
#
# CLASS: MetadataClient
# ---------------------
#   Stateless apart from the Connection it sends on.
#
#   Constructor:
#   ------------
#   - __init__(connection, poll_interval=None, poll_timeout=None)
#       Polling defaults come from config when not given.
#
#   Synchronous CRUD (single item in → single result out,
#   list or other iterable in → list of the same length out,
#   input order kept; str and dict count as single items):
#   ---------------------------------------------------------
#   - create(type, records) -> OperationResult | list
#   - read(type, full_names) -> dict | None | list
#   - update(type, records) -> OperationResult | list
#   - upsert(type, records) -> OperationResult | list   (result.created set)
#   - rename(type, old_name, new_name) -> OperationResult
#   - delete(type, full_names) -> OperationResult | list
#
#   Discovery:
#   ----------
#   - list(queries, as_of_version=None) -> list[dict]
#   - describe(as_of_version=None) -> dict
#
#   Asynchronous:
#   -------------
#   - deploy(archive, options=None) -> DeployJob
#   - retrieve(request) -> RetrieveJob
#   - check_deploy_status(job_id, include_details=False) -> DeployResult
#   - check_retrieve_status(job_id, include_zip=True) -> RetrieveResult
#
# ERRORS:
# -------
#   ServiceFault for a rejected call; requests.HTTPError for an HTTP
#   error without a fault body. Per-record failures are results.
#
# ==============================================

import base64
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from sfmeta.config import get_config
from sfmeta.connection import Connection
from sfmeta.errors import ServiceFault
from sfmeta.metadata import soap
from sfmeta.metadata.jobs import DeployJob, RetrieveJob
from sfmeta.metadata.soap import TypedValue
from sfmeta.metadata.types import DeployResult, MetadataType, OperationResult, RetrieveResult

logger = logging.getLogger(__name__)

TypeName = Union[str, MetadataType]
Archive = Union[bytes, bytearray, str, os.PathLike, Any]

SOAP_HEADERS = {
    "Content-Type": "text/xml; charset=UTF-8",
    "SOAPAction": '""',
}


def _as_batch(items: Any) -> Tuple[list, bool]:
    # Returns (items as list, whether the caller passed a single item).
    # Strings, bytes and record dicts are single items; any other iterable is a batch
    if isinstance(items, (str, bytes, dict)):
        return [items], True
    if isinstance(items, Iterable):
        return list(items), False
    return [items], True


def _unwrap(results: list, single: bool):
    return results[0] if single else results


class MetadataClient:
    def __init__(
        self,
        connection: Connection,
        poll_interval: Optional[float] = None,
        poll_timeout: Optional[float] = None
    ):
        self.connection = connection
        if poll_interval is None or poll_timeout is None:
            polling = get_config().polling
            poll_interval = polling.poll_interval if poll_interval is None else poll_interval
            poll_timeout = polling.poll_timeout if poll_timeout is None else poll_timeout
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout

    # ---------------- transport ----------------

    def _invoke(self, method: str, args: List[Tuple[str, Any]]) -> list:
        """Send one SOAP call and return its decoded <result> values."""
        envelope = soap.build_envelope(self.connection.access_token, method, args)
        url = self.connection.metadata_url
        logger.debug("SOAP %s -> %s", method, url)

        response = self.connection.post(url, envelope, SOAP_HEADERS)
        try:
            return soap.parse_response(response.content)
        except ServiceFault as fault:
            # Non-XML error page: report the HTTP error itself
            if fault.fault_code == soap.PARSE_ERROR and not response.ok:
                response.raise_for_status()
            raise

    def _first(self, method: str, results: list) -> Any:
        if not results:
            raise ServiceFault(soap.PARSE_ERROR, f"{method} returned no result")
        return results[0]

    def _job_id(self, method: str, results: list) -> str:
        result = self._first(method, results)
        if not isinstance(result, dict) or not result.get("id"):
            raise ServiceFault(soap.PARSE_ERROR, f"{method} returned no async process id")
        return result["id"]

    def _save(self, method: str, metadata_type: TypeName, records: Any):
        batch, single = _as_batch(records)
        results = self._invoke(method, [
            ("metadata", [TypedValue(metadata_type, record) for record in batch]),
        ])
        return _unwrap([OperationResult.from_dict(r or {}) for r in results], single)

    # ---------------- synchronous CRUD ----------------

    def create(self, metadata_type: TypeName, records: Any):
        """
        Create metadata components.

        Args:
            metadata_type: e.g. "CustomObject"
            records: One record dict or a list of them

        Returns:
            OperationResult, or a list of them in input order
        """
        return self._save("createMetadata", metadata_type, records)

    def read(self, metadata_type: TypeName, full_names: Union[str, List[str]]):
        """
        Read full definitions by name.

        Names the service has no definition for come back as None,
        in the same position as the name.
        """
        names, single = _as_batch(full_names)
        results = self._invoke("readMetadata", [
            ("type", metadata_type),
            ("fullNames", names),
        ])

        result = results[0] if results else None
        records = result.get("records") if isinstance(result, dict) else None
        if records is None:
            records = []
        elif not isinstance(records, list):
            records = [records]

        records = [r if isinstance(r, dict) and r else None for r in records]
        # Keep positional correspondence with the requested names
        records.extend([None] * (len(names) - len(records)))
        return _unwrap(records, single)

    def update(self, metadata_type: TypeName, records: Any):
        """Update existing components. Same shape as create()."""
        return self._save("updateMetadata", metadata_type, records)

    def upsert(self, metadata_type: TypeName, records: Any):
        """Create or update by fullName. Each result carries `created`."""
        return self._save("upsertMetadata", metadata_type, records)

    def rename(self, metadata_type: TypeName, old_name: str, new_name: str) -> OperationResult:
        results = self._invoke("renameMetadata", [
            ("type", metadata_type),
            ("oldFullName", old_name),
            ("newFullName", new_name),
        ])
        return OperationResult.from_dict(self._first("renameMetadata", results) or {})

    def delete(self, metadata_type: TypeName, full_names: Union[str, List[str]]):
        """
        Delete components by name.

        Missing names are reported by the service as failed results.
        """
        names, single = _as_batch(full_names)
        results = self._invoke("deleteMetadata", [
            ("type", metadata_type),
            ("fullNames", names),
        ])
        return _unwrap([OperationResult.from_dict(r or {}) for r in results], single)

    # ---------------- discovery ----------------

    def list(self, queries: Union[Dict[str, str], List[Dict[str, str]]],
             as_of_version: Optional[str] = None) -> List[Dict[str, Any]]:
        """List file properties for components matching {"type": ..., "folder": ...} queries."""
        results = self._invoke("listMetadata", [
            ("queries", queries),
            ("asOfVersion", as_of_version or self.connection.api_version),
        ])
        return [r for r in results if isinstance(r, dict)]

    def describe(self, as_of_version: Optional[str] = None) -> Dict[str, Any]:
        results = self._invoke("describeMetadata", [
            ("asOfVersion", as_of_version or self.connection.api_version),
        ])
        return self._first("describeMetadata", results) or {}

    # ---------------- asynchronous ----------------

    def _read_archive(self, archive: Archive) -> bytes:
        if isinstance(archive, (bytes, bytearray)):
            return bytes(archive)
        if hasattr(archive, "read"):
            return archive.read()
        return Path(archive).read_bytes()

    def deploy(self, archive: Archive, options: Optional[Dict[str, Any]] = None) -> DeployJob:
        """
        Upload a packaged zip archive.

        Args:
            archive: zip as bytes, a binary file object, or a path
            options: DeployOptions using API names (runTests, checkOnly,
                     rollbackOnError, testLevel, ...)

        Returns:
            DeployJob; call complete() to wait for the DeployResult
        """
        deploy_options = dict(options or {})
        if deploy_options.get("runTests") and "testLevel" not in deploy_options:
            deploy_options["testLevel"] = "RunSpecifiedTests"

        zip_base64 = base64.b64encode(self._read_archive(archive)).decode("ascii")
        results = self._invoke("deploy", [
            ("ZipFile", zip_base64),
            ("DeployOptions", deploy_options),
        ])
        job_id = self._job_id("deploy", results)
        logger.info("Deploy submitted: %s", job_id)
        return DeployJob(self, job_id, self.poll_interval, self.poll_timeout)

    def retrieve(self, request: Dict[str, Any]) -> RetrieveJob:
        """
        Request a package archive.

        Args:
            request: RetrieveRequest fields (packageNames, unpackaged,
                     singlePackage, specificFiles). apiVersion defaults
                     to the connection's.

        Returns:
            RetrieveJob; call stream() or complete()
        """
        retrieve_request: Dict[str, Any] = {"apiVersion": self.connection.api_version}
        retrieve_request.update(request)

        results = self._invoke("retrieve", [("retrieveRequest", retrieve_request)])
        job_id = self._job_id("retrieve", results)
        logger.info("Retrieve submitted: %s", job_id)
        return RetrieveJob(self, job_id, self.poll_interval, self.poll_timeout)

    def check_deploy_status(self, job_id: str, include_details: bool = False) -> DeployResult:
        results = self._invoke("checkDeployStatus", [
            ("asyncProcessId", job_id),
            ("includeDetails", include_details),
        ])
        return DeployResult.from_dict(self._first("checkDeployStatus", results) or {})

    def check_retrieve_status(self, job_id: str, include_zip: bool = True) -> RetrieveResult:
        results = self._invoke("checkRetrieveStatus", [
            ("asyncProcessId", job_id),
            ("includeZip", include_zip),
        ])
        return RetrieveResult.from_dict(self._first("checkRetrieveStatus", results) or {})
