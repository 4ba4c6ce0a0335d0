import logging
from typing import Callable
from typing import Optional

import requests
from requests.exceptions import RequestException

from ltiprovider.exception import TransportError
from ltiprovider.exception import UnexpectedStatusError

logger = logging.getLogger(__name__)


class ConsumerProfileFetcher(object):

    def __init__(self, http_cli: Optional[Callable] = None, httpc_params: Optional[dict] = None,
                 insecure: bool = False):
        """
        :param http_cli: Function with the same signature as requests.request
        :param httpc_params: Additional parameters to pass to the HTTP client function
        :param insecure: Do not verify TLS certificates
        """
        self.http_cli = http_cli or requests.request
        self.httpc_params = dict(httpc_params or {})
        if insecure:
            self.httpc_params["verify"] = False
        logger.debug(f'httpc_params: {self.httpc_params}')

    def fetch(self, url: str) -> bytes:
        """
        Get the tool consumer profile. Only one attempt is made.

        :param url: The profile URL the consumer sent as tc_profile_url
        :return: The profile document as received, undecoded
        """
        logger.debug(f"Fetching consumer profile from {url}")
        try:
            response = self.http_cli("GET", url, **self.httpc_params)
        except RequestException as err:
            logger.error(f"Could not connect to {url}: {err}")
            raise TransportError(f"Could not connect to service ({err})") from err

        if response.status_code != 200:
            logger.error(f"Got {response.status_code} from {url}")
            raise UnexpectedStatusError(response.status_code, url)

        return response.content
