from enum import Enum


class ErrorKind(Enum):
    CONFIGURATION = "configuration"
    TRANSPORT = "transport"
    UNEXPECTED_STATUS = "unexpected_status"
    PARSE = "parse"
    VALIDATION = "validation"
    REGISTRATION = "registration"
    AUTHENTICATION = "authentication"


class LTIProviderError(Exception):
    kind = None


class ConfigurationError(LTIProviderError):
    kind = ErrorKind.CONFIGURATION


class TransportError(LTIProviderError):
    kind = ErrorKind.TRANSPORT


class UnexpectedStatusError(TransportError):
    kind = ErrorKind.UNEXPECTED_STATUS

    def __init__(self, code, url=""):
        TransportError.__init__(self, f"Unexpected code from service ({code}, expected 200)")
        self.code = code
        self.url = url


class ParseError(LTIProviderError):
    kind = ErrorKind.PARSE


class ValidationError(LTIProviderError):
    kind = ErrorKind.VALIDATION


class RegistrationError(LTIProviderError):
    kind = ErrorKind.REGISTRATION


class ServiceNotFound(RegistrationError):
    pass


class AuthenticationError(LTIProviderError):
    kind = ErrorKind.AUTHENTICATION
