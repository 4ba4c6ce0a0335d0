"""
An LTISession handles one request from an LTI tool consumer.

A tool provider first registers with a consumer using :py:meth:`LTISession.register`.
The consumer profile is fetched and handed to a validation callback, after which the
provider's own profile is sent to the consumer's registration service. On success
the consumer hands out a tool proxy GUID which, together with the consumer and the
original request, is given to the success callback. That is where the caller stores
whatever it needs, typically the GUID and the shared secret.

On subsequent requests the consumer is authenticated with
:py:meth:`LTISession.authenticate` using the shared secret.
"""
import logging
from enum import Enum
from typing import Callable
from typing import Optional
from typing import Union

from ltiprovider.authn import RequestAuthenticator
from ltiprovider.configure import ProviderConfiguration
from ltiprovider.consumer import Consumer
from ltiprovider.consumer import Provider
from ltiprovider.defaults import REDIRECT_STATUS
from ltiprovider.defaults import REDIRECT_SUFFIX
from ltiprovider.exception import ConfigurationError
from ltiprovider.exception import LTIProviderError
from ltiprovider.exception import ServiceNotFound
from ltiprovider.exception import ValidationError
from ltiprovider.fetch import ConsumerProfileFetcher
from ltiprovider.message import RequestPacket
from ltiprovider.profile import ProfileDocumentParser
from ltiprovider.registration import RegistrationHandshakeClient
from ltiprovider.registration import SoapTransport

logger = logging.getLogger(__name__)


class SessionState(Enum):
    CREATED = "created"
    PROFILE_FETCHED = "profile_fetched"
    VALIDATED = "validated"
    REGISTERED = "registered"
    REDIRECTED = "redirected"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class LTISession(object):

    def __init__(self,
                 source,
                 conf: Optional[Union[dict, ProviderConfiguration]] = None,
                 fetcher: Optional[ConsumerProfileFetcher] = None,
                 parser: Optional[ProfileDocumentParser] = None,
                 registrar: Optional[RegistrationHandshakeClient] = None,
                 authenticator: Optional[RequestAuthenticator] = None):
        """
        :param source: The parameters the consumer sent, a mapping or a list of
            (key, value) pairs
        :param conf: Configuration
        """
        if isinstance(conf, ProviderConfiguration):
            self.conf = conf
        else:
            self.conf = ProviderConfiguration(conf)

        self.packet = RequestPacket.from_source(source)
        self.provider = Provider(self.conf.provider_profile)
        self.consumer = None
        self.state = SessionState.CREATED
        self.authenticated = False

        self.fetcher = fetcher or ConsumerProfileFetcher(httpc_params=self.conf.httpc_params)
        self.parser = parser or ProfileDocumentParser()
        self.registrar = registrar or RegistrationHandshakeClient(
            transport=SoapTransport(httpc_params=self.conf.httpc_params),
            username=self.conf.registration_username,
            schema_version=self.conf.schema_version)
        self.authenticator = authenticator or RequestAuthenticator(self.conf.mac_algorithm)

    def get_packet(self) -> RequestPacket:
        return self.packet

    def get_provider(self) -> Provider:
        return self.provider

    def get_consumer(self) -> Optional[Consumer]:
        """The consumer, available only after a completed registration."""
        return self.consumer

    def is_authenticated(self) -> bool:
        return self.authenticated

    def register(self,
                 validation_callback: Callable[[Consumer], bool],
                 on_success_callback: Callable[[str, Consumer, RequestPacket], None],
                 redirect: Optional[bool] = True) -> Optional[dict]:
        """
        Register this tool with the consumer that sent the request.

        :param validation_callback: Given the consumer, returns True if this tool is
            willing to register with it
        :param on_success_callback: Called with the tool proxy GUID, the consumer and
            the request packet once the consumer has accepted the registration
        :param redirect: Whether to send the user agent back to the consumer
        :return: If redirect, a dictionary with response_code and http_headers
            describing the redirect, otherwise None
        """
        _required = ["tc_profile_url"]
        if redirect:
            _required.append("launch_presentation_return_url")
        _missing = self.packet.missing(*_required)
        if _missing:
            self.state = SessionState.FAILED
            raise ConfigurationError(f"Missing request parameters: {', '.join(_missing)}")

        try:
            _guid, _consumer = self._register(validation_callback)
            on_success_callback(_guid, _consumer, self.packet)
        except Exception:
            self.state = SessionState.FAILED
            raise

        self.consumer = _consumer

        if not redirect:
            return None

        _location = f"{self.packet['launch_presentation_return_url']}{REDIRECT_SUFFIX}"
        self.state = SessionState.REDIRECTED
        logger.debug(f"Redirecting to {_location}")
        return {
            "response_code": REDIRECT_STATUS,
            "http_headers": [("Location", _location)]
        }

    def _register(self, validation_callback):
        _document = self.fetcher.fetch(self.packet["tc_profile_url"])
        _consumer = self.parser.build_consumer(_document)
        self.state = SessionState.PROFILE_FETCHED

        if not validation_callback(_consumer):
            raise ValidationError("Consumer does not meet validation requirements.")
        self.state = SessionState.VALIDATED

        _service = _consumer.get_service(self.conf.registration_service)
        if _service is None:
            raise ServiceNotFound(
                f"Consumer does not offer the {self.conf.registration_service} service")

        _guid = self.registrar.register(_service, self.provider.profile_xml,
                                        self.packet.get("reg_password", ""))
        self.state = SessionState.REGISTERED
        logger.info(f"Registered with consumer '{_consumer.guid}', tool_proxy_guid={_guid}")
        return _guid, _consumer

    def authenticate(self, secret: str, algorithm: Optional[str] = None) -> bool:
        """
        Check the MAC on the request. On success this session is marked as authenticated.

        :param secret: The secret shared with the consumer when this tool was registered
        :param algorithm: Overrides the configured hash algorithm
        """
        try:
            self.authenticator.authenticate(self.packet, secret, algorithm)
        except LTIProviderError:
            self.state = SessionState.FAILED
            raise
        self.authenticated = True
        self.state = SessionState.AUTHENTICATED
        return True
