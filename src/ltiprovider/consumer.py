import logging
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional

from ltiprovider.defaults import DEFAULT_PROVIDER_PROFILE

logger = logging.getLogger(__name__)


class Service(object):
    """One SOAP endpoint offered by a tool consumer."""

    def __init__(self, url: str = "", wsdl: str = "", version: str = "", name: str = "",
                 namespace: str = ""):
        self.url = url
        self.wsdl = wsdl
        self.version = version
        self.name = name
        self.namespace = namespace

    def to_dict(self):
        return {
            "url": self.url,
            "wsdl": self.wsdl,
            "version": self.version,
            "name": self.name,
            "namespace": self.namespace
        }

    def __repr__(self):
        return f"Service(name={self.name!r}, url={self.url!r})"


class Capability(object):

    def __init__(self, name: str):
        self.name = name

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"Capability({self.name!r})"


class SecurityProfile(object):
    """A security profile offered by the consumer together with its configuration."""

    def __init__(self, name: str, config: Optional[dict] = None):
        self.name = name
        self.config = dict(config or {})

    def get_config_item(self, key: str) -> Optional[str]:
        return self.config.get(key)

    def to_dict(self):
        return {"name": self.name, "config": dict(self.config)}

    def __repr__(self):
        return f"SecurityProfile(name={self.name!r}, config={self.config!r})"


def _index(items: Iterable, kind: str) -> dict:
    _res = {}
    for item in items:
        if item.name in _res:
            logger.warning(f"Duplicate {kind} '{item.name}' in consumer profile, last one used")
        _res[item.name] = item
    return _res


class Consumer(object):
    """
    What a tool consumer says about itself in its profile.

    Services, capabilities and security profiles are indexed by name. If the profile
    lists the same name more than once the last occurrence is the one kept.
    """

    def __init__(self,
                 vendor_code: str = "",
                 vendor_name: str = "",
                 code: str = "",
                 name: str = "",
                 version: str = "",
                 guid: str = "",
                 services: Optional[List[Service]] = None,
                 capabilities: Optional[List[Capability]] = None,
                 security_profiles: Optional[List[SecurityProfile]] = None,
                 profile_xml: str = ""):
        self._vendor_code = vendor_code
        self._vendor_name = vendor_name
        self._code = code
        self._name = name
        self._version = version
        self._guid = guid
        self._services = _index(services or [], "service")
        self._capabilities = _index(capabilities or [], "capability")
        self._security_profiles = _index(security_profiles or [], "security profile")
        self._profile_xml = profile_xml

    @property
    def vendor_code(self):
        return self._vendor_code

    @property
    def vendor_name(self):
        return self._vendor_name

    @property
    def code(self):
        return self._code

    @property
    def name(self):
        return self._name

    @property
    def version(self):
        return self._version

    @property
    def guid(self):
        return self._guid

    @property
    def profile_xml(self):
        return self._profile_xml

    @property
    def services(self) -> Dict[str, Service]:
        return dict(self._services)

    @property
    def capabilities(self) -> Dict[str, Capability]:
        return dict(self._capabilities)

    @property
    def security_profiles(self) -> Dict[str, SecurityProfile]:
        return dict(self._security_profiles)

    def get_service(self, name: str) -> Optional[Service]:
        """
        Return a specific service.

        :param name: The name of the service
        :return: A Service instance or None if the consumer does not offer it
        """
        return self._services.get(name)

    def get_security_profile(self, name: str) -> Optional[SecurityProfile]:
        return self._security_profiles.get(name)

    def has_capabilities(self, capabilities: Iterable[str]) -> bool:
        """
        Check if this consumer offers all of a set of capabilities.

        :param capabilities: capability names
        :return: True if every one of them is offered
        """
        return all(c in self._capabilities for c in capabilities)

    def to_dict(self):
        return {
            "vendor_code": self._vendor_code,
            "vendor_name": self._vendor_name,
            "code": self._code,
            "name": self._name,
            "version": self._version,
            "guid": self._guid,
            "services": {k: v.to_dict() for k, v in self._services.items()},
            "capabilities": list(self._capabilities.keys()),
            "security_profiles": {k: v.to_dict() for k, v in self._security_profiles.items()}
        }

    def __repr__(self):
        return f"Consumer(code={self._code!r}, guid={self._guid!r})"


class Provider(object):
    """This tool, as described to the consumer by its profile XML."""

    def __init__(self, profile_xml: Optional[str] = None):
        self.profile_xml = profile_xml or DEFAULT_PROVIDER_PROFILE
