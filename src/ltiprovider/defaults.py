"""Fixed protocol constants used when talking to an LTI tool consumer."""

LTI_TCP = 'http://www.imsglobal.org/xsd/imsltiTCP_v1p0'
LTI_PC = 'http://www.imsglobal.org/xsd/imsltiPC_v1p0'
LTI_SEC = 'http://www.imsglobal.org/xsd/imsltiSEC_v1p0'

PROFILE_NAMESPACES = {
    "tcp": LTI_TCP,
    "pc": LTI_PC,
    "sec": LTI_SEC
}

PROFILE_ROOT = f"{{{LTI_TCP}}}tool_consumer_profile"

SOAP_ENV = "http://schemas.xmlsoap.org/soap/envelope/"
WSSE = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-secext-1.0.xsd"
WSU = "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-wssecurity-utility-1.0.xsd"
PASSWORD_TEXT = ("http://docs.oasis-open.org/wss/2004/01/"
                 "oasis-200401-wss-username-token-profile-1.0#PasswordText")
IMS_TREG = "http://www.imsglobal.org/services/ltiv2p0/tregv1p0/wsdl11/sync/imsltitreg_v1p0"

SOAP_NAMESPACES = {
    "SOAP-ENV": SOAP_ENV,
    "wsse": WSSE,
    "wsu": WSU,
    "ims": IMS_TREG
}

REGISTRATION_OPERATION = "registerTool"
REGISTRATION_SERVICE = "RegistrationService"
REGISTRATION_USERNAME = "lti-tool-registration"
SCHEMA_VERSION = "imp"
IMSX_VERSION = "V1.0"
SUCCESS = "success"

BASIC_HASH_PROFILE = "basic_hash_message_security_profile"
DEFAULT_MAC_ALGORITHM = "SHA-1"

REDIRECT_STATUS = 301
REDIRECT_SUFFIX = "&status=success"

DEFAULT_PROVIDER_PROFILE = """<?xml version="1.0"?>
<tool_registration_request xmlns="http://www.imsglobal.org/services/ltiv2p0/ltirgsv1p0/imsltiRGS_v1p0"
                           xmlns:sec="http://www.imsglobal.org/xsd/imsltiSEC_v1p0"
                           xmlns:tp="http://www.imsglobal.org/xsd/imsltiTPR_v1p0"
                           xmlns:cm="http://www.imsglobal.org/xsd/imsltiMSS_v1p0"
                           xmlns:pc="http://www.imsglobal.org/xsd/imsltiPC_v1p0">
  <tool_profile lti_version="2.0"/>
</tool_registration_request>
"""

DEFAULT_LTI_CONFIG = {
    "httpc_params": {"timeout": 30},
    "registration_service": REGISTRATION_SERVICE,
    "registration_username": REGISTRATION_USERNAME,
    "schema_version": SCHEMA_VERSION,
    "provider_profile": DEFAULT_PROVIDER_PROFILE,
    "mac_algorithm": DEFAULT_MAC_ALGORITHM
}
