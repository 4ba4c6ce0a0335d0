import os

import pytest
import responses
from lxml import etree
from requests.exceptions import ConnectionError

from ltiprovider.consumer import Service
from ltiprovider.defaults import DEFAULT_PROVIDER_PROFILE
from ltiprovider.defaults import SOAP_NAMESPACES
from ltiprovider.exception import ErrorKind
from ltiprovider.exception import RegistrationError
from ltiprovider.registration import RegistrationHandshakeClient
from ltiprovider.registration import security_header
from ltiprovider.registration import service_endpoint

BASE_PATH = os.path.abspath(os.path.dirname(__file__))

REGISTRATION_URL = "https://lms.example.org/lti/registration"
SERVICE = Service(url=REGISTRATION_URL, wsdl=f"{REGISTRATION_URL}?wsdl", version="1.0",
                  name="RegistrationService", namespace="urn:registration")


def read_data(name):
    with open(os.path.join(BASE_PATH, 'base_data', name)) as fp:
        return fp.read()


def test_security_header():
    _security, _info = security_header("lti-tool-registration", "s3cr&t")
    _xml = etree.tostring(_security)
    _elem = etree.fromstring(_xml)
    assert _elem.xpath("string(//wsse:Username)",
                       namespaces=SOAP_NAMESPACES) == "lti-tool-registration"
    assert _elem.xpath("string(//wsse:Password)", namespaces=SOAP_NAMESPACES) == "s3cr&t"
    assert _info.xpath("string(ims:imsx_version)", namespaces=SOAP_NAMESPACES) == "V1.0"
    _ids = _info.xpath("ims:imsx_messageIdentifier", namespaces=SOAP_NAMESPACES)
    assert len(_ids) == 1
    assert not _ids[0].text


def test_service_endpoint():
    assert service_endpoint(SERVICE) == REGISTRATION_URL
    assert service_endpoint(Service(wsdl=f"{REGISTRATION_URL}?wsdl")) == REGISTRATION_URL
    assert service_endpoint(Service(name="Empty")) == ""


class TestRegistrationHandshakeClient(object):
    @pytest.fixture(autouse=True)
    def create_client(self):
        self.client = RegistrationHandshakeClient()

    def test_construct_request(self):
        _envelope = etree.fromstring(
            self.client.construct_request(DEFAULT_PROVIDER_PROFILE, "pw"))
        assert _envelope.xpath("string(//ims:schema_version)",
                               namespaces=SOAP_NAMESPACES) == "imp"
        assert _envelope.xpath("string(//ims:tool_registration_request)",
                               namespaces=SOAP_NAMESPACES) == DEFAULT_PROVIDER_PROFILE
        assert _envelope.xpath("count(/SOAP-ENV:Envelope/SOAP-ENV:Header/wsse:Security)",
                               namespaces=SOAP_NAMESPACES) == 1
        assert _envelope.xpath("string(//wsse:Password)", namespaces=SOAP_NAMESPACES) == "pw"

    def test_register(self):
        with responses.RequestsMock() as rsps:
            rsps.add("POST", REGISTRATION_URL, body=read_data("registration_success.xml"),
                     headers={"Content-Type": "text/xml"}, status=200)
            _guid = self.client.register(SERVICE, DEFAULT_PROVIDER_PROFILE, "pw")
            _request = rsps.calls[0].request

        assert _guid == "tp-guid-42"
        assert _request.headers["SOAPAction"] == '"registerTool"'
        _sent = etree.fromstring(_request.body)
        assert _sent.xpath("string(//wsse:Username)",
                           namespaces=SOAP_NAMESPACES) == "lti-tool-registration"

    def test_register_inline_guid(self):
        with responses.RequestsMock() as rsps:
            rsps.add("POST", REGISTRATION_URL, body=read_data("registration_inline.xml"),
                     status=200)
            assert self.client.register(SERVICE, DEFAULT_PROVIDER_PROFILE,
                                        "pw") == "tp-guid-inline"

    def test_failure_description(self):
        with responses.RequestsMock() as rsps:
            rsps.add("POST", REGISTRATION_URL, body=read_data("registration_failure.xml"),
                     status=200)
            with pytest.raises(RegistrationError) as err:
                self.client.register(SERVICE, DEFAULT_PROVIDER_PROFILE, "pw")
        assert str(err.value) == "Registration password has expired"
        assert err.value.kind == ErrorKind.REGISTRATION

    def test_failure_without_description(self):
        _body = read_data("registration_failure.xml").replace(
            "<ims:imsx_description>Registration password has expired</ims:imsx_description>",
            "")
        with responses.RequestsMock() as rsps:
            rsps.add("POST", REGISTRATION_URL, body=_body, status=200)
            with pytest.raises(RegistrationError) as err:
                self.client.register(SERVICE, DEFAULT_PROVIDER_PROFILE, "pw")
        assert "failure" in str(err.value)

    def test_soap_fault(self):
        with responses.RequestsMock() as rsps:
            rsps.add("POST", REGISTRATION_URL, body=read_data("registration_fault.xml"),
                     status=500)
            with pytest.raises(RegistrationError) as err:
                self.client.register(SERVICE, DEFAULT_PROVIDER_PROFILE, "pw")
        assert "Authentication failed" in str(err.value)

    def test_transport_error(self):
        with responses.RequestsMock() as rsps:
            rsps.add("POST", REGISTRATION_URL, body=ConnectionError("refused"))
            with pytest.raises(RegistrationError) as err:
                self.client.register(SERVICE, DEFAULT_PROVIDER_PROFILE, "pw")
        assert "refused" in str(err.value)

    def test_unexpected_status(self):
        with responses.RequestsMock() as rsps:
            rsps.add("POST", REGISTRATION_URL, body="", status=404)
            with pytest.raises(RegistrationError) as err:
                self.client.register(SERVICE, DEFAULT_PROVIDER_PROFILE, "pw")
        assert "404" in str(err.value)

    def test_garbage_response(self):
        with responses.RequestsMock() as rsps:
            rsps.add("POST", REGISTRATION_URL, body="<html>", status=200)
            with pytest.raises(RegistrationError):
                self.client.register(SERVICE, DEFAULT_PROVIDER_PROFILE, "pw")

    def test_no_endpoint(self):
        with pytest.raises(RegistrationError):
            self.client.register(Service(name="RegistrationService"),
                                 DEFAULT_PROVIDER_PROFILE, "pw")

    def test_missing_guid(self):
        _body = read_data("registration_failure.xml").replace(">failure<", ">success<")
        with responses.RequestsMock() as rsps:
            rsps.add("POST", REGISTRATION_URL, body=_body, status=200)
            with pytest.raises(RegistrationError) as err:
                self.client.register(SERVICE, DEFAULT_PROVIDER_PROFILE, "pw")
        assert "tool_proxy_guid" in str(err.value)


def test_fake_transport():
    class FakeTransport(object):
        def __init__(self):
            self.calls = []

        def call(self, endpoint, operation, envelope):
            self.calls.append((endpoint, operation))
            return read_data("registration_inline.xml").encode("utf-8")

    _transport = FakeTransport()
    client = RegistrationHandshakeClient(transport=_transport)
    assert client.register(SERVICE, DEFAULT_PROVIDER_PROFILE, "pw") == "tp-guid-inline"
    assert _transport.calls == [(REGISTRATION_URL, "registerTool")]
