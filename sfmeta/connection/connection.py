# ==============================================
# Connection
# ==============================================
#
# PURPOSE:
#   Holds everything a Metadata API call needs from an already
#   established session: the org instance URL, the session id,
#   the API version and an HTTP session to send requests on.
#
# WHY THIS CLASS EXISTS:
#   Logging in is somebody else's job. Whatever issued the session
#   hands over (instance_url, access_token); this class turns that
#   into the SOAP endpoint and keeps one requests.Session open for
#   the lifetime of the work.
#
# CLASS: Connection
# -----------------
#   Stateful — holds a requests.Session once connected.
#
#   Constructor:
#   ------------
#   - __init__(instance_url, access_token, api_version="59.0", request_timeout=120.0)
#       Store connection params. Don't open the HTTP session yet.
#
#   - from_config(config: AppConfig | None = None) (classmethod)
#       Build from SF_* settings. Raises ConfigError when incomplete.
#
#   Methods:
#   --------
#   - connect() -> None
#       Open the HTTP session.
#
#   - disconnect() -> None
#       Close it.
#
#   - metadata_url -> str (property)
#       {instance_url}/services/Soap/m/{api_version}
#
#   - post(url, data, headers) -> requests.Response
#       Send one request, connecting lazily.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with Connection(...) as conn:` usage.
#
# ==============================================

import logging
from typing import Optional

import requests

from sfmeta.config import AppConfig, get_config
from sfmeta.errors import ConfigError

logger = logging.getLogger(__name__)


class Connection:
    def __init__(
        self,
        instance_url: str,
        access_token: str,
        api_version: str = "59.0",
        request_timeout: float = 120.0,
        session: Optional[requests.Session] = None
    ):
        if not instance_url:
            raise ConfigError("instance_url is required")
        if not access_token:
            raise ConfigError("access_token is required")
        self.instance_url = instance_url.rstrip("/")
        self.access_token = access_token
        self.api_version = api_version
        self.request_timeout = request_timeout
        self.session = session  # Will hold the requests.Session

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "Connection":
        config = config or get_config()
        sf = config.salesforce
        if not sf.instance_url or not sf.access_token:
            raise ConfigError("SF_INSTANCE_URL and SF_ACCESS_TOKEN must be set")
        return cls(
            instance_url=sf.instance_url,
            access_token=sf.access_token,
            api_version=sf.api_version,
            request_timeout=sf.request_timeout
        )

    @property
    def metadata_url(self) -> str:
        return f"{self.instance_url}/services/Soap/m/{self.api_version}"

    def connect(self) -> None:
        if self.session is None:
            self.session = requests.Session()
            logger.debug("Opened HTTP session for %s", self.instance_url)

    def disconnect(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None
            logger.debug("Closed HTTP session for %s", self.instance_url)

    def post(self, url: str, data: bytes, headers: dict) -> requests.Response:
        # Connect lazily so a bare Connection(...) is usable
        self.connect()
        return self.session.post(url, data=data, headers=headers, timeout=self.request_timeout)

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
