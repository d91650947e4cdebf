# ==============================================
# Async Jobs (Deploy / Retrieve)
# ==============================================
#
# PURPOSE:
#   Pending handles for the two asynchronous Metadata API calls.
#   Submitting a deploy or retrieve returns one of these right away;
#   the caller then chooses how to wait for it.
#
# WHY THIS FILE EXISTS:
#   Deploy and retrieve are submit → poll → fetch on the service side.
#   Instead of hiding that behind callbacks, the handle makes both
#   phases explicit: block until done (complete), or consume the
#   retrieved archive as a byte stream (stream).
#
# CLASSES:
# --------
# - AsyncJob (base)
#     id: str                   → async process id from the submit call
#     check()                   → one status request
#     poll(interval, timeout)   → check() until done, or PollingTimeout
#
# - DeployJob(AsyncJob)
#     complete(details=False) -> DeployResult
#
# - RetrieveJob(AsyncJob)
#     complete() -> RetrieveResult
#     stream(chunk_size=8192) -> Iterator[bytes]
#     save(path) -> Path
#
# ==============================================

import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Optional, Union, TYPE_CHECKING

from sfmeta.errors import PollingTimeout, RetrieveError
from sfmeta.metadata.types import DeployResult, RetrieveResult, RetrieveStatus

if TYPE_CHECKING:
    from sfmeta.metadata.client import MetadataClient

logger = logging.getLogger(__name__)


class AsyncJob(ABC):
    """Base pending handle. Subclasses set `kind` and implement check()."""

    def __init__(
        self,
        client: "MetadataClient",
        job_id: str,
        poll_interval: float,
        poll_timeout: float
    ):
        self.client = client
        self.id = job_id
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout

    @abstractmethod
    def check(self):
        """One status request; returns a result with a `done` flag."""

    def poll(self, interval: Optional[float] = None, timeout: Optional[float] = None):
        """
        Call check() until the job reports done.

        Args:
            interval: Seconds between checks (defaults to poll_interval)
            timeout: Seconds before giving up (defaults to poll_timeout)

        Returns:
            The last status result, with done == True

        Raises:
            PollingTimeout: job still running after `timeout` seconds
        """
        interval = self.poll_interval if interval is None else interval
        timeout = self.poll_timeout if timeout is None else timeout
        start_time = time.monotonic()

        while True:
            result = self.check()
            if result.done:
                logger.info("%s job %s finished with status %s", self.kind, self.id, result.status)
                return result

            elapsed = time.monotonic() - start_time
            if elapsed >= timeout:
                raise PollingTimeout(self.id, timeout)

            logger.debug("%s job %s status: %s", self.kind, self.id, result.status)
            time.sleep(interval)

    def __repr__(self):
        return f"<{type(self).__name__} id={self.id}>"


class DeployJob(AsyncJob):
    kind = "Deploy"

    def check(self) -> DeployResult:
        return self.client.check_deploy_status(self.id, include_details=False)

    def complete(self, details: bool = False) -> DeployResult:
        """
        Wait for the deploy to finish and return its final result.

        A Failed deploy is returned, not raised. Inspect `status`,
        `success` and the component/test counts.
        """
        result = self.poll()
        if details:
            result = self.client.check_deploy_status(self.id, include_details=True)
        return result


class RetrieveJob(AsyncJob):
    kind = "Retrieve"

    def check(self) -> RetrieveResult:
        return self.client.check_retrieve_status(self.id, include_zip=False)

    def complete(self) -> RetrieveResult:
        """Wait for the retrieve to finish and fetch the result with its archive."""
        self.poll()
        return self.client.check_retrieve_status(self.id, include_zip=True)

    def stream(self, chunk_size: int = 8192) -> Iterator[bytes]:
        """
        Yield the retrieved archive in chunks.

        Running out of chunks is the end-of-stream. A retrieve that failed
        or returned no archive raises RetrieveError instead.
        """
        result = self.complete()
        if result.status == RetrieveStatus.FAILED or not result.zip_file:
            raise RetrieveError(
                self.id,
                result.status.value if isinstance(result.status, RetrieveStatus) else result.status,
                result.error_message
            )

        data = result.zip_file
        for offset in range(0, len(data), chunk_size):
            yield data[offset:offset + chunk_size]

    def save(self, path: Union[str, Path]) -> Path:
        """Write the streamed archive to `path`."""
        path = Path(path)
        chunks = self.stream()
        # Pull the first chunk before opening so a failed retrieve leaves no file
        first = next(chunks)
        with open(path, "wb") as f:
            f.write(first)
            for chunk in chunks:
                f.write(chunk)
        logger.info("Saved retrieve %s to %s", self.id, path)
        return path
