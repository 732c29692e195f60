from .autodiscover import Autodiscovery, DiscoveredInfo, discover
from .configuration import Configuration
from .credentials import Credentials
from .errors import AutoDiscoverFailed
from .protocol import AutodiscoverProtocol, NoVerifyHTTPAdapter
from .transport import BASIC
from .version import Build, Version

__version__ = '1.0.0'

__all__ = [
    '__version__',
    'Autodiscovery', 'DiscoveredInfo', 'discover',
    'Configuration',
    'Credentials',
    'AutoDiscoverFailed',
    'AutodiscoverProtocol', 'NoVerifyHTTPAdapter',
    'BASIC',
    'Build', 'Version',
]
