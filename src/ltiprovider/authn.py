import base64
import hashlib
import hmac
import logging
from typing import Optional

from cryptojwt.utils import as_bytes
from cryptojwt.utils import as_unicode

from ltiprovider.defaults import DEFAULT_MAC_ALGORITHM
from ltiprovider.exception import AuthenticationError
from ltiprovider.exception import ConfigurationError

logger = logging.getLogger(__name__)

HASH_ALGORITHMS = {
    "SHA-1": hashlib.sha1,
    "SHA-256": hashlib.sha256
}


def canonical_string(packet) -> str:
    """
    The values of all parameters except mac, ordered by parameter name and
    concatenated without separator.
    """
    _params = {k: v for k, v in packet.items() if k != "mac"}
    return "".join(_params[k] for k in sorted(_params.keys()))


class RequestAuthenticator(object):
    """Checks the MAC a consumer puts on its requests. Integrity only, no freshness."""

    def __init__(self, algorithm: Optional[str] = DEFAULT_MAC_ALGORITHM):
        self.algorithm = algorithm

    def _hash_function(self, algorithm):
        try:
            return HASH_ALGORITHMS[algorithm]
        except KeyError:
            raise ConfigurationError(f"Unsupported MAC algorithm: {algorithm}")

    def compute_mac(self, packet, secret: str, algorithm: Optional[str] = None) -> str:
        _hash = self._hash_function(algorithm or self.algorithm)
        _digest = _hash(as_bytes(canonical_string(packet) + secret)).digest()
        return as_unicode(base64.b64encode(_digest))

    def authenticate(self, packet, secret: str, algorithm: Optional[str] = None):
        """
        :param packet: The request parameters, including mac
        :param secret: The secret shared with the consumer
        :param algorithm: Hash algorithm name, as given in a basic hash security profile
        """
        _mac = packet.get("mac")
        _computed = self.compute_mac(packet, secret, algorithm)
        if not _mac or not hmac.compare_digest(as_bytes(_mac), as_bytes(_computed)):
            logger.error(f"MAC check failed for tool_proxy_guid={packet.get('tool_proxy_guid')}")
            raise AuthenticationError("MAC check failed")
        return True
