__version__ = '0.1.0'

from ltiprovider.authn import RequestAuthenticator
from ltiprovider.consumer import Capability
from ltiprovider.consumer import Consumer
from ltiprovider.consumer import Provider
from ltiprovider.consumer import SecurityProfile
from ltiprovider.consumer import Service
from ltiprovider.fetch import ConsumerProfileFetcher
from ltiprovider.message import RequestPacket
from ltiprovider.profile import ProfileDocumentParser
from ltiprovider.registration import RegistrationHandshakeClient
from ltiprovider.session import LTISession
