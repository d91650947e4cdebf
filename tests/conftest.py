# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - fake_session   → stands in for requests.Session, replays canned
#                    SOAP responses and records every request
# - connection     → Connection bound to fake_session
# - client         → MetadataClient with zero poll interval
# - custom_objects → the two CustomObject records used across tests
#
# HELPERS:
# --------
# - soap_response(method, *results)  → response envelope bytes
# - soap_fault(code, message)        → fault envelope bytes
# - sent_call(request)               → the operation element of a sent request
#
# ==============================================

import xml.etree.ElementTree as ET

import pytest
import requests

from sfmeta.config import reset_config
from sfmeta.connection import Connection
from sfmeta.metadata import MetadataClient
from sfmeta.metadata.soap import METADATA_NS, SOAPENV_NS

INSTANCE_URL = "https://example.my.salesforce.com"
SESSION_ID = "00Dxx0000000001!session"


def soap_response(method: str, *results: str) -> bytes:
    """Wrap raw <result> inner XML strings in a response envelope."""
    inner = "".join(f"<result>{r}</result>" for r in results)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<soapenv:Envelope xmlns:soapenv="{SOAPENV_NS}" '
        'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
        f'xmlns="{METADATA_NS}">'
        f"<soapenv:Body><{method}Response>{inner}</{method}Response></soapenv:Body>"
        "</soapenv:Envelope>"
    ).encode("utf-8")


def soap_fault(code: str, message: str) -> bytes:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<soapenv:Envelope xmlns:soapenv="{SOAPENV_NS}" xmlns:sf="{METADATA_NS}">'
        "<soapenv:Body><soapenv:Fault>"
        f"<faultcode>{code}</faultcode><faultstring>{message}</faultstring>"
        "</soapenv:Fault></soapenv:Body></soapenv:Envelope>"
    ).encode("utf-8")


def sent_call(request: dict) -> ET.Element:
    """Return the operation element (e.g. <createMetadata>) of a sent request."""
    root = ET.fromstring(request["data"])
    body = root.find(f"{{{SOAPENV_NS}}}Body")
    return body[0]


def met(name: str) -> str:
    return f"{{{METADATA_NS}}}{name}"


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200):
        self.content = content
        self.status_code = status_code

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Replays queued responses in order and records each request."""

    def __init__(self):
        self.responses = []
        self.requests = []
        self.closed = False

    def queue(self, content: bytes, status_code: int = 200) -> None:
        self.responses.append(FakeResponse(content, status_code))

    def post(self, url, data=None, headers=None, timeout=None):
        self.requests.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if not self.responses:
            raise AssertionError(f"Unexpected request to {url}")
        return self.responses.pop(0)

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Keep SF_* settings from the environment out of unit tests."""
    for name in ("SF_INSTANCE_URL", "SF_ACCESS_TOKEN", "SF_API_VERSION",
                 "SF_POLL_INTERVAL", "SF_POLL_TIMEOUT", "SF_REQUEST_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("sfmeta.config.load_dotenv", lambda **kwargs: False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def no_sleep(monkeypatch):
    sleeps = []
    monkeypatch.setattr("sfmeta.metadata.jobs.time.sleep", sleeps.append)
    return sleeps


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def connection(fake_session):
    return Connection(INSTANCE_URL, SESSION_ID, api_version="59.0", session=fake_session)


@pytest.fixture
def client(connection):
    return MetadataClient(connection, poll_interval=0, poll_timeout=30)


@pytest.fixture
def custom_objects():
    return [{
        "fullName": "TestObjectSync1__c",
        "label": "Test Object Sync 1",
        "pluralLabel": "Test Object Sync 1",
        "nameField": {
            "type": "Text",
            "label": "Test Object Name"
        },
        "deploymentStatus": "Deployed",
        "sharingModel": "ReadWrite"
    }, {
        "fullName": "TestObjectSync2__c",
        "label": "Test Object Sync 2",
        "pluralLabel": "Test Object 2",
        "nameField": {
            "type": "AutoNumber",
            "label": "Test Object #"
        },
        "deploymentStatus": "InDevelopment",
        "sharingModel": "Private"
    }]
