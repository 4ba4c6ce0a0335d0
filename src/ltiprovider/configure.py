import logging
import os
from typing import Dict
from typing import List
from typing import Optional

from idpyoidc.configure import Base
from idpyoidc.configure import create_from_config_file

from ltiprovider.defaults import DEFAULT_LTI_CONFIG
from ltiprovider.exception import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_FILE_ATTRIBUTE_NAMES = ["provider_profile_file"]


class ProviderConfiguration(Base):
    """ Tool provider configuration """

    def __init__(self,
                 conf: Optional[Dict] = None,
                 base_path: Optional[str] = '',
                 entity_conf: Optional[List[dict]] = None,
                 file_attributes: Optional[List[str]] = None,
                 domain: Optional[str] = "",
                 port: Optional[int] = 0,
                 dir_attributes: Optional[List[str]] = None,
                 ):
        file_attributes = file_attributes or DEFAULT_PROVIDER_FILE_ATTRIBUTE_NAMES

        Base.__init__(self, conf=conf or {}, base_path=base_path,
                      file_attributes=file_attributes, dir_attributes=dir_attributes,
                      domain=domain, port=port)

        self.httpc_params = dict(self.conf.get("httpc_params",
                                               DEFAULT_LTI_CONFIG["httpc_params"]))
        self.registration_service = self.conf.get("registration_service",
                                                  DEFAULT_LTI_CONFIG["registration_service"])
        self.registration_username = self.conf.get("registration_username",
                                                   DEFAULT_LTI_CONFIG["registration_username"])
        self.schema_version = self.conf.get("schema_version",
                                            DEFAULT_LTI_CONFIG["schema_version"])
        self.mac_algorithm = self.conf.get("mac_algorithm", DEFAULT_LTI_CONFIG["mac_algorithm"])

        _profile_file = self.conf.get("provider_profile_file")
        if _profile_file:
            try:
                self.provider_profile = open(_profile_file).read()
            except OSError as err:
                raise ConfigurationError(
                    f"Could not read provider profile {_profile_file}: {err}") from err
        else:
            self.provider_profile = self.conf.get("provider_profile",
                                                  DEFAULT_LTI_CONFIG["provider_profile"])


def load_configuration(filename: str) -> ProviderConfiguration:
    """
    Load a provider configuration from a JSON or YAML file. Relative paths in file
    attributes are taken to be relative to the directory the file is in.
    """
    try:
        _conf = create_from_config_file(ProviderConfiguration,
                                        filename=filename,
                                        file_attributes=DEFAULT_PROVIDER_FILE_ATTRIBUTE_NAMES,
                                        base_path=os.path.dirname(os.path.abspath(filename)))
    except (OSError, ValueError) as err:
        raise ConfigurationError(f"Could not load configuration from {filename}: {err}") from err

    logger.debug(f"Configuration loaded from {filename}")
    return _conf
