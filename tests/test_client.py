# ==============================================
# Tests for MetadataClient (synchronous calls)
# ==============================================
#
# Every test queues the service's reply on the fake session and
# checks both the request that went out and the typed result.
# ==============================================

import pytest
import requests

from sfmeta.errors import ServiceFault
from sfmeta.metadata import MetadataType, OperationResult
from sfmeta.metadata.soap import XSI_NS

from conftest import INSTANCE_URL, SESSION_ID, met, sent_call, soap_fault, soap_response


def _ok(full_name: str, created: str = None) -> str:
    xml = f"<fullName>{full_name}</fullName><success>true</success>"
    if created is not None:
        xml = f"<created>{created}</created>" + xml
    return xml


def _custom_object_xml(full_name: str, label: str) -> str:
    return (
        f'<records xsi:type="CustomObject">'
        f"<fullName>{full_name}</fullName>"
        f"<deploymentStatus>Deployed</deploymentStatus>"
        f"<label>{label}</label>"
        f"<nameField><label>Test Object Name</label><type>Text</type></nameField>"
        f"<pluralLabel>{label}</pluralLabel>"
        f"<sharingModel>ReadWrite</sharingModel>"
        f"</records>"
    )


class TestTransport:
    """How calls are sent."""

    def test_endpoint_and_headers(self, client, fake_session):
        fake_session.queue(soap_response("deleteMetadata", _ok("A__c")))
        client.delete("CustomObject", "A__c")

        request = fake_session.requests[0]
        assert request["url"] == f"{INSTANCE_URL}/services/Soap/m/59.0"
        assert request["headers"]["Content-Type"].startswith("text/xml")
        assert request["headers"]["SOAPAction"] == '""'
        assert SESSION_ID.encode() in request["data"]

    def test_fault_propagates(self, client, fake_session):
        fake_session.queue(soap_fault("sf:INVALID_TYPE", "Unknown type name 'Bogus'"), status_code=500)
        with pytest.raises(ServiceFault) as exc_info:
            client.read("Bogus", ["X"])
        assert exc_info.value.fault_code == "sf:INVALID_TYPE"

    def test_http_error_without_fault(self, client, fake_session):
        fake_session.queue(b"Service Unavailable", status_code=503)
        with pytest.raises(requests.HTTPError):
            client.read("CustomObject", ["X"])

    def test_unparsable_success_response(self, client, fake_session):
        fake_session.queue(b"not xml", status_code=200)
        with pytest.raises(ServiceFault):
            client.read("CustomObject", ["X"])


class TestCreate:

    def test_create_list(self, client, fake_session, custom_objects):
        fake_session.queue(soap_response(
            "createMetadata", _ok("TestObjectSync1__c"), _ok("TestObjectSync2__c"),
        ))
        results = client.create("CustomObject", custom_objects)

        assert isinstance(results, list)
        assert len(results) == len(custom_objects)
        assert [r.full_name for r in results] == ["TestObjectSync1__c", "TestObjectSync2__c"]
        assert all(r.success for r in results)

        call = sent_call(fake_session.requests[0])
        assert call.tag == met("createMetadata")
        records = call.findall(met("metadata"))
        assert len(records) == 2
        assert records[0].get(f"{{{XSI_NS}}}type") == "met:CustomObject"
        assert records[1].find(f"{met('nameField')}/{met('type')}").text == "AutoNumber"

    def test_create_single_returns_single(self, client, fake_session, custom_objects):
        fake_session.queue(soap_response("createMetadata", _ok("TestObjectSync1__c")))
        result = client.create(MetadataType.CUSTOM_OBJECT, custom_objects[0])
        assert isinstance(result, OperationResult)
        assert result.success is True

    def test_per_record_failure_is_a_result(self, client, fake_session, custom_objects):
        fake_session.queue(soap_response(
            "createMetadata",
            _ok("TestObjectSync1__c"),
            "<errors><message>Label is required</message><statusCode>REQUIRED_FIELD_MISSING</statusCode></errors>"
            "<fullName>TestObjectSync2__c</fullName><success>false</success>",
        ))
        results = client.create("CustomObject", custom_objects)
        assert results[0].success is True
        assert results[1].success is False
        assert results[1].errors[0].status_code == "REQUIRED_FIELD_MISSING"


class TestRead:

    def test_read_list(self, client, fake_session):
        fake_session.queue(soap_response(
            "readMetadata",
            _custom_object_xml("TestObjectSync1__c", "Test Object Sync 1")
            + _custom_object_xml("TestObjectSync2__c", "Test Object Sync 2"),
        ))
        records = client.read("CustomObject", ["TestObjectSync1__c", "TestObjectSync2__c"])

        assert len(records) == 2
        assert records[0]["fullName"] == "TestObjectSync1__c"
        assert records[1]["nameField"]["label"] == "Test Object Name"

        call = sent_call(fake_session.requests[0])
        assert call.find(met("type")).text == "CustomObject"
        assert [e.text for e in call.findall(met("fullNames"))] == ["TestObjectSync1__c", "TestObjectSync2__c"]

    def test_read_single_name_returns_record(self, client, fake_session):
        fake_session.queue(soap_response("readMetadata", _custom_object_xml("A__c", "A")))
        record = client.read("CustomObject", "A__c")
        assert isinstance(record, dict)
        assert record["fullName"] == "A__c"

    def test_unknown_name_is_none(self, client, fake_session):
        fake_session.queue(soap_response(
            "readMetadata",
            _custom_object_xml("A__c", "A") + '<records xsi:type="CustomObject"/>',
        ))
        records = client.read("CustomObject", ["A__c", "Missing__c"])
        assert records[0]["fullName"] == "A__c"
        assert records[1] is None

    def test_empty_result_padded(self, client, fake_session):
        fake_session.queue(soap_response("readMetadata", ""))
        assert client.read("CustomObject", ["X__c", "Y__c"]) == [None, None]
        fake_session.queue(soap_response("readMetadata", ""))
        assert client.read("CustomObject", "X__c") is None


class TestUpdateUpsert:

    def test_update_round_trips_read_record(self, client, fake_session):
        fake_session.queue(soap_response("readMetadata", _custom_object_xml("A__c", "A")))
        record = client.read("CustomObject", "A__c")
        record["label"] = "Updated A"

        fake_session.queue(soap_response("updateMetadata", _ok("A__c")))
        result = client.update("CustomObject", [record])

        assert result[0].success is True
        call = sent_call(fake_session.requests[1])
        assert call.tag == met("updateMetadata")
        assert call.find(f"{met('metadata')}/{met('label')}").text == "Updated A"

    def test_upsert_created_flags(self, client, fake_session, custom_objects):
        fake_session.queue(soap_response(
            "upsertMetadata",
            _ok("TestObjectSync2__c", created="false"),
            _ok("TestObjectSync3__c", created="true"),
        ))
        records = [custom_objects[1], dict(custom_objects[0], fullName="TestObjectSync3__c")]
        results = client.upsert("CustomObject", records)

        for record, result in zip(records, results):
            assert result.success is True
            assert result.full_name == record["fullName"]
            assert result.created is (result.full_name == "TestObjectSync3__c")


class TestRename:

    def test_rename_reports_old_name(self, client, fake_session):
        fake_session.queue(soap_response("renameMetadata", _ok("TestObjectSync1__c")))
        result = client.rename("CustomObject", "TestObjectSync1__c", "UpdatedTestObjectSync1__c")

        assert result.success is True
        assert result.full_name == "TestObjectSync1__c"
        call = sent_call(fake_session.requests[0])
        assert call.find(met("oldFullName")).text == "TestObjectSync1__c"
        assert call.find(met("newFullName")).text == "UpdatedTestObjectSync1__c"

    def test_read_after_rename(self, client, fake_session):
        fake_session.queue(soap_response("renameMetadata", _ok("Old__c")))
        fake_session.queue(soap_response("readMetadata", _custom_object_xml("New__c", "Same Label")))

        client.rename("CustomObject", "Old__c", "New__c")
        record = client.read("CustomObject", "New__c")
        assert record["fullName"] == "New__c"
        assert record["label"] == "Same Label"


class TestDelete:

    def test_delete_list(self, client, fake_session):
        names = ["A__c", "B__c", "C__c"]
        fake_session.queue(soap_response("deleteMetadata", *[_ok(n) for n in names]))
        results = client.delete("CustomObject", names)
        assert len(results) == 3
        assert [r.full_name for r in results] == names

    def test_deleting_missing_name_is_failure_not_exception(self, client, fake_session):
        fake_session.queue(soap_response(
            "deleteMetadata",
            "<errors><message>no CustomObject named A__c found</message>"
            "<statusCode>INVALID_CROSS_REFERENCE_KEY</statusCode></errors>"
            "<fullName>A__c</fullName><success>false</success>",
        ))
        result = client.delete("CustomObject", "A__c")
        assert result.success is False
        assert result.errors[0].status_code == "INVALID_CROSS_REFERENCE_KEY"

    def test_delete_from_generator_and_set(self, client, fake_session):
        names = ["A__c", "B__c"]
        for batch in ((n for n in names), set(names)):
            fake_session.queue(soap_response("deleteMetadata", *[_ok(n) for n in names]))
            results = client.delete("CustomObject", batch)

            assert isinstance(results, list)
            assert len(results) == 2
            sent = sent_call(fake_session.requests[-1]).findall(met("fullNames"))
            assert sorted(e.text for e in sent) == names

    def test_single_record_dict_stays_single(self, client, fake_session):
        fake_session.queue(soap_response("createMetadata", _ok("A__c")))
        result = client.create("CustomObject", {"fullName": "A__c", "label": "A"})
        assert result.full_name == "A__c"
        assert len(sent_call(fake_session.requests[0]).findall(met("metadata"))) == 1


class TestDiscovery:

    def test_list(self, client, fake_session):
        fake_session.queue(soap_response(
            "listMetadata",
            "<fullName>A__c</fullName><type>CustomObject</type>",
            "<fullName>B__c</fullName><type>CustomObject</type>",
        ))
        props = client.list({"type": "CustomObject"})
        assert [p["fullName"] for p in props] == ["A__c", "B__c"]

        call = sent_call(fake_session.requests[0])
        assert call.find(f"{met('queries')}/{met('type')}").text == "CustomObject"
        assert call.find(met("asOfVersion")).text == "59.0"

    def test_describe(self, client, fake_session):
        fake_session.queue(soap_response(
            "describeMetadata",
            "<metadataObjects><directoryName>objects</directoryName><xmlName>CustomObject</xmlName></metadataObjects>"
            "<metadataObjects><directoryName>classes</directoryName><xmlName>ApexClass</xmlName></metadataObjects>"
            "<organizationNamespace/><partialSaveAllowed>true</partialSaveAllowed>",
        ))
        description = client.describe()
        assert [m["xmlName"] for m in description["metadataObjects"]] == ["CustomObject", "ApexClass"]
        assert description["partialSaveAllowed"] == "true"
