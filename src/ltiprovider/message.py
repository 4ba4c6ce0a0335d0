""" Classes and functions used to describe the information an LTI tool consumer sends."""
import logging
from typing import List

from idpyoidc.message import Message
from idpyoidc.message import SINGLE_OPTIONAL_STRING

LOGGER = logging.getLogger(__name__)

MULTI_VALUE_SEPARATOR = ","

LAUNCH_PARAMETERS = [
    "user_id",
    "roles",
    "launch_presentation_locale",
    "launch_presentation_css_url",
    "launch_presentation_document_target",
    "launch_presentation_window_name",
    "launch_presentation_width",
    "launch_presentation_height",
    "launch_presentation_return_url",
]

REGISTRATION_PARAMETERS = [
    "reg_password",
    "tool_version",
    "tool_code",
    "vendor_code",
    "tc_profile_url",
]

AUTHENTICATION_PARAMETERS = [
    "tool_proxy_guid",
    "mac"
]


def flatten_source(source) -> dict:
    """
    Turn whatever the transport handed over into a flat string to string dictionary.

    A value that arrives more than once, either as a list/tuple value or as a repeated
    key in a sequence of (key, value) pairs, is joined with a comma in arrival order.

    :param source: A mapping or a sequence of (key, value) pairs
    :return: dictionary
    """
    if hasattr(source, "items"):
        _pairs = source.items()
    else:
        _pairs = source

    _collected = {}
    for key, val in _pairs:
        if isinstance(val, (list, tuple)):
            _vals = [str(v) for v in val]
        elif val is None:
            _vals = []
        else:
            _vals = [str(val)]
        _collected.setdefault(str(key), []).extend(_vals)

    return {k: MULTI_VALUE_SEPARATOR.join(v) for k, v in _collected.items()}


class RequestPacket(Message):
    """The parameters an LTI tool consumer sends in a registration or launch request."""
    c_param = {k: SINGLE_OPTIONAL_STRING for k in
               LAUNCH_PARAMETERS + REGISTRATION_PARAMETERS + AUTHENTICATION_PARAMETERS}

    _frozen = False

    @classmethod
    def from_source(cls, source):
        """
        Capture the inbound request. The returned packet can not be changed.

        :param source: A mapping or a sequence of (key, value) pairs
        :return: A RequestPacket instance
        """
        _packet = cls().from_dict(flatten_source(source))
        _extra = _packet.extra()
        if _extra:
            LOGGER.debug(f"Unrecognized request parameters: {sorted(_extra.keys())}")
        _packet._frozen = True
        return _packet

    def _check_frozen(self):
        if self._frozen:
            raise TypeError("A RequestPacket can not be modified")

    def __setitem__(self, key, value):
        self._check_frozen()
        Message.__setitem__(self, key, value)

    def __delitem__(self, key):
        self._check_frozen()
        Message.__delitem__(self, key)

    def from_dict(self, dictionary, **kwargs):
        self._check_frozen()
        return Message.from_dict(self, dictionary, **kwargs)

    def update(self, item):
        self._check_frozen()
        return Message.update(self, item)

    def set_defaults(self):
        self._check_frozen()
        return Message.set_defaults(self)

    def weed(self):
        self._check_frozen()
        return Message.weed(self)

    def pop(self, key, *default):
        self._check_frozen()
        return self._dict.pop(key, *default)

    def clear(self):
        self._check_frozen()
        self._dict.clear()

    def missing(self, *keys) -> List[str]:
        """Which of the given parameters are absent or empty."""
        return [k for k in keys if not self.get(k)]
