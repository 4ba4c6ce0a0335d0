import logging
from typing import Callable
from typing import Dict
from typing import Optional
from typing import Union

from cryptojwt.utils import as_bytes
from lxml import etree

from ltiprovider.consumer import Capability
from ltiprovider.consumer import Consumer
from ltiprovider.consumer import SecurityProfile
from ltiprovider.consumer import Service
from ltiprovider.defaults import BASIC_HASH_PROFILE
from ltiprovider.defaults import PROFILE_NAMESPACES
from ltiprovider.defaults import PROFILE_ROOT
from ltiprovider.exception import ParseError

logger = logging.getLogger(__name__)

CONSUMER_FIELDS = {
    "vendor_code": "//tcp:vendor/pc:code",
    "vendor_name": "//tcp:vendor/pc:name",
    "code": "//tcp:tool_consumer_info/pc:code",
    "name": "//tcp:tool_consumer_info/pc:name",
    "version": "//tcp:tool_consumer_info/pc:version",
    "guid": "//tcp:tool_consumer_instance/tcp:guid",
}

SERVICE_PATH = "//pc:service_profile/pc:service"
CAPABILITY_PATH = "//tcp:capabilities_offered/pc:capability"
SECURITY_PROFILE_PATH = "//tcp:security_profiles/*"

SERVICE_ATTRIBUTES = ["url", "wsdl", "version", "name", "namespace"]


def first_value(result) -> str:
    """
    The string value of the first item in an XPath result.

    :param result: What lxml returned for an XPath query
    :return: A string, empty if there was nothing to be had
    """
    if not result or not isinstance(result, list):
        return ""

    _item = result[0]
    if isinstance(_item, etree._Element):
        return _item.text or ""
    return str(_item)


def basic_hash_config(node) -> dict:
    return {"algorithm": first_value(node.xpath("sec:algorithm/text()",
                                                namespaces=PROFILE_NAMESPACES))}


class ProfileDocumentParser(object):
    """
    Parses a tool consumer profile.

    The configuration of a security profile is picked out by the function registered
    in `config_extractors` under the profile's tag. Kinds not registered get an empty
    configuration.
    """

    def __init__(self, config_extractors: Optional[Dict[str, Callable]] = None):
        self.config_extractors = {BASIC_HASH_PROFILE: basic_hash_config}
        if config_extractors:
            self.config_extractors.update(config_extractors)

    def load(self, document: Union[str, bytes]):
        """
        Parse the profile. Bytes are decoded according to the document's own XML
        declaration, text is taken as already decoded.
        """
        if isinstance(document, bytes):
            _parser = etree.XMLParser(resolve_entities=False, no_network=True)
        else:
            _parser = etree.XMLParser(resolve_entities=False, no_network=True,
                                      encoding="utf-8")
        try:
            root = etree.fromstring(as_bytes(document), parser=_parser)
        except (etree.XMLSyntaxError, ValueError) as err:
            raise ParseError(f"Could not parse consumer profile: {err}") from err

        if root is None or root.tag != PROFILE_ROOT:
            _tag = "" if root is None else root.tag
            raise ParseError(f"Not a tool consumer profile, root element is '{_tag}'")
        return root

    def parse(self, document: Union[str, bytes]) -> dict:
        """
        Extract everything of interest from a tool consumer profile.

        :param document: The profile as XML
        :return: A dictionary with the consumer fields. Services, capabilities and
            security profiles are returned as lists in document order.
        """
        return self.extract(self.load(document))

    def extract(self, root) -> dict:
        _info = {}
        for field, path in CONSUMER_FIELDS.items():
            _info[field] = first_value(root.xpath(path, namespaces=PROFILE_NAMESPACES))

        _info["services"] = self.extract_services(root)
        _info["capabilities"] = self.extract_capabilities(root)
        _info["security_profiles"] = self.extract_security_profiles(root)

        logger.debug(
            f"Consumer profile for '{_info['code']}': {len(_info['services'])} services, "
            f"{len(_info['capabilities'])} capabilities, "
            f"{len(_info['security_profiles'])} security profiles")
        return _info

    def extract_services(self, root):
        _services = []
        for node in root.xpath(SERVICE_PATH, namespaces=PROFILE_NAMESPACES):
            _args = {attr: node.get(attr, "") for attr in SERVICE_ATTRIBUTES}
            _services.append(Service(**_args))
        return _services

    def extract_capabilities(self, root):
        return [Capability(first_value(node.xpath("text()")))
                for node in root.xpath(CAPABILITY_PATH, namespaces=PROFILE_NAMESPACES)]

    def extract_security_profiles(self, root):
        _profiles = []
        for node in root.xpath(SECURITY_PROFILE_PATH, namespaces=PROFILE_NAMESPACES):
            _name = etree.QName(node).localname
            _extractor = self.config_extractors.get(_name)
            if _extractor:
                _config = _extractor(node)
            else:
                _config = {}
            _profiles.append(SecurityProfile(_name, _config))
        return _profiles

    def build_consumer(self, document: Union[str, bytes]) -> Consumer:
        """Parse a profile and create the Consumer it describes."""
        root = self.load(document)
        if isinstance(document, bytes):
            _encoding = root.getroottree().docinfo.encoding or "utf-8"
            _text = document.decode(_encoding)
        else:
            _text = document
        return Consumer(profile_xml=_text, **self.extract(root))
