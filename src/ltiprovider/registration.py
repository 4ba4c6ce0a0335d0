import logging
from typing import Callable
from typing import List
from typing import Optional
from urllib.parse import urlparse
from urllib.parse import urlunparse

import requests
from cryptojwt.utils import as_bytes
from lxml import etree
from requests.exceptions import RequestException

from ltiprovider.consumer import Service
from ltiprovider.defaults import IMS_TREG
from ltiprovider.defaults import IMSX_VERSION
from ltiprovider.defaults import PASSWORD_TEXT
from ltiprovider.defaults import REGISTRATION_OPERATION
from ltiprovider.defaults import REGISTRATION_USERNAME
from ltiprovider.defaults import SCHEMA_VERSION
from ltiprovider.defaults import SOAP_ENV
from ltiprovider.defaults import SOAP_NAMESPACES
from ltiprovider.defaults import SUCCESS
from ltiprovider.defaults import WSSE
from ltiprovider.defaults import WSU
from ltiprovider.exception import LTIProviderError
from ltiprovider.exception import RegistrationError
from ltiprovider.exception import TransportError
from ltiprovider.exception import UnexpectedStatusError

logger = logging.getLogger(__name__)

PROXY_GUID = "string(//*[local-name()='tool_proxy_guid'][1])"
REGISTRATION_RESPONSE = "//*[local-name()='tool_registration_response']"


def qname(namespace, tag):
    return f"{{{namespace}}}{tag}"


def safe_parser():
    return etree.XMLParser(resolve_entities=False, no_network=True)


def security_header(username: str, password: str) -> List[etree._Element]:
    """
    The SOAP header items a consumer expects with a registerTool request.

    :param username: WS-Security user name
    :param password: The registration password the consumer handed out
    :return: list of header elements
    """
    security = etree.Element(qname(WSSE, "Security"),
                             nsmap={"wsse": WSSE, "SOAP-ENV": SOAP_ENV})
    security.set(qname(SOAP_ENV, "mustUnderstand"), "1")
    token = etree.SubElement(security, qname(WSSE, "UsernameToken"), nsmap={"wsu": WSU})
    token.set(qname(WSU, "Id"), "UsernameToken-4")
    etree.SubElement(token, qname(WSSE, "Username")).text = username
    _password = etree.SubElement(token, qname(WSSE, "Password"))
    _password.set("Type", PASSWORD_TEXT)
    _password.text = password

    info = etree.Element(qname(IMS_TREG, "imsx_syncRequestHeaderInfo"), nsmap={"ims": IMS_TREG})
    etree.SubElement(info, qname(IMS_TREG, "imsx_version")).text = IMSX_VERSION
    etree.SubElement(info, qname(IMS_TREG, "imsx_messageIdentifier")).text = ""

    return [security, info]


def soap_envelope(header_items: List[etree._Element], body_item: etree._Element) -> bytes:
    envelope = etree.Element(qname(SOAP_ENV, "Envelope"), nsmap={"SOAP-ENV": SOAP_ENV})
    header = etree.SubElement(envelope, qname(SOAP_ENV, "Header"))
    for item in header_items:
        header.append(item)
    body = etree.SubElement(envelope, qname(SOAP_ENV, "Body"))
    body.append(body_item)
    return etree.tostring(envelope, xml_declaration=True, encoding="utf-8")


def service_endpoint(service: Service) -> str:
    """Where to send SOAP requests for a service. Prefers url, falls back to the WSDL location."""
    if service.url:
        return service.url
    if service.wsdl:
        p = urlparse(service.wsdl)
        return urlunparse((p.scheme, p.netloc, p.path, p.params, "", ""))
    return ""


class SoapTransport(object):
    """Posts SOAP 1.1 envelopes over HTTP."""

    def __init__(self, http_cli: Optional[Callable] = None, httpc_params: Optional[dict] = None):
        self.http_cli = http_cli or requests.request
        self.httpc_params = dict(httpc_params or {})

    def call(self, endpoint: str, operation: str, envelope: bytes) -> bytes:
        """
        :param endpoint: The service URL
        :param operation: Used as the SOAPAction
        :param envelope: The serialized SOAP envelope
        :return: The response body. Faults (HTTP 500) are returned as is.
        """
        _headers = {
            "Content-Type": "text/xml; charset=utf-8",
            "SOAPAction": f'"{operation}"'
        }
        try:
            response = self.http_cli("POST", endpoint, data=envelope, headers=_headers,
                                     **self.httpc_params)
        except RequestException as err:
            raise TransportError(f"Could not connect to service ({err})") from err

        if response.status_code not in [200, 500]:
            raise UnexpectedStatusError(response.status_code, endpoint)

        return response.content


class RegistrationHandshakeClient(object):
    """Registers a tool with a consumer's registration service."""

    def __init__(self,
                 transport: Optional[SoapTransport] = None,
                 username: Optional[str] = REGISTRATION_USERNAME,
                 schema_version: Optional[str] = SCHEMA_VERSION,
                 operation: Optional[str] = REGISTRATION_OPERATION):
        self.transport = transport or SoapTransport()
        self.username = username
        self.schema_version = schema_version
        self.operation = operation

    def construct_request(self, provider_profile_xml: str, registration_password: str) -> bytes:
        request = etree.Element(qname(IMS_TREG, f"{self.operation}Request"),
                                nsmap={"ims": IMS_TREG})
        etree.SubElement(request, qname(IMS_TREG, "schema_version")).text = self.schema_version
        etree.SubElement(request,
                         qname(IMS_TREG, "tool_registration_request")).text = provider_profile_xml

        return soap_envelope(security_header(self.username, registration_password), request)

    def register(self, service: Service, provider_profile_xml: str,
                 registration_password: str) -> str:
        """
        Register this tool with the consumer.

        :param service: The consumer's registration service
        :param provider_profile_xml: The tool's profile
        :param registration_password: The password the consumer sent as reg_password
        :return: The tool proxy GUID the consumer assigned
        """
        _endpoint = service_endpoint(service)
        if not _endpoint:
            raise RegistrationError(f"Service '{service.name}' has no endpoint")

        logger.debug(f"Registering with {_endpoint}")
        try:
            _envelope = self.construct_request(provider_profile_xml, registration_password)
            _content = self.transport.call(_endpoint, self.operation, _envelope)
            return self.parse_response(_content)
        except RegistrationError:
            raise
        except (LTIProviderError, etree.XMLSyntaxError, ValueError, TypeError) as err:
            logger.error(f"Registration with {_endpoint} failed: {err}")
            raise RegistrationError(str(err)) from err

    def parse_response(self, content: bytes) -> str:
        root = etree.fromstring(as_bytes(content), parser=safe_parser())

        _fault = root.xpath("string(//SOAP-ENV:Fault/faultstring)", namespaces=SOAP_NAMESPACES)
        if _fault:
            logger.error(f"SOAP fault: {_fault}")
            raise RegistrationError(f"[SOAP] {_fault}")

        _status = root.xpath("string(//ims:imsx_codeMajor)", namespaces=SOAP_NAMESPACES)
        if _status != SUCCESS:
            _reason = root.xpath("string(//ims:imsx_description)", namespaces=SOAP_NAMESPACES)
            if not _reason:
                _reason = f"Registration failed with status '{_status}'"
            logger.error(f"Registration refused: {_reason}")
            raise RegistrationError(_reason)

        _guid = self.extract_proxy_guid(root)
        if not _guid:
            raise RegistrationError("Missing tool_proxy_guid in registration response")
        return _guid

    def extract_proxy_guid(self, root) -> str:
        """
        The GUID is either an element somewhere in the response or part of an XML
        document carried as the text of tool_registration_response.
        """
        _guid = root.xpath(PROXY_GUID).strip()
        if _guid:
            return _guid

        for node in root.xpath(REGISTRATION_RESPONSE):
            _text = (node.text or "").strip()
            if not _text:
                continue
            _doc = etree.fromstring(as_bytes(_text), parser=safe_parser())
            _guid = _doc.xpath(PROXY_GUID).strip()
            if _guid:
                return _guid
        return ""
