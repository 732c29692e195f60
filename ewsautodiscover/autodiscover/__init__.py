from .discovery import Autodiscovery, discover
from .properties import Autodiscover, DiscoveredInfo, parse_response

__all__ = ['Autodiscover', 'Autodiscovery', 'DiscoveredInfo', 'discover', 'parse_response']
