from collections import namedtuple

from ..errors import ErrorNonExistentMailbox, AutoDiscoverFailed
from ..transport import DEFAULT_ENCODING
from ..util import create_element, add_xml_child, to_xml, xml_to_str, find_child, find_children, get_xml_attr, \
    is_xml, AUTODISCOVER_REQUEST_NS, AUTODISCOVER_BASE_NS, AUTODISCOVER_RESPONSE_NS, ParseError
from ..version import Version, VERSIONS


class DiscoveredInfo(namedtuple('DiscoveredInfo', ('ews_url', 'api_version'))):
    """The result of a successful autodiscover lookup: the EWS endpoint and the server version label"""
    __slots__ = ()

    @property
    def fullname(self):
        return VERSIONS[self.api_version][1]


class Protocol:
    """MSDN: https://docs.microsoft.com/en-us/exchange/client-developer/web-service-reference/protocol-pox

    Only the elements we need to locate the EWS endpoint are parsed. 'server_version' and 'ews_url' may be empty, e.g.
    on EXPR protocols.
    """
    ELEMENT_NAME = 'Protocol'
    EXCH = 'EXCH'
    EXPR = 'EXPR'
    TYPES = ('WEB', EXCH, EXPR, 'EXHTTP')

    __slots__ = ('type', 'server_version', 'ews_url')

    def __init__(self, type=None, server_version=None, ews_url=None):
        self.type = type
        self.server_version = server_version or ''
        self.ews_url = ews_url or ''

    @classmethod
    def from_xml(cls, elem):
        return cls(
            type=get_xml_attr(elem, 'Type'),
            server_version=get_xml_attr(elem, 'ServerVersion'),
            ews_url=get_xml_attr(elem, 'EwsUrl'),
        )

    def __eq__(self, other):
        return all(getattr(self, k) == getattr(other, k) for k in self.__slots__)

    def __repr__(self):
        return self.__class__.__name__ + repr((self.type, self.server_version, self.ews_url))


class Error:
    """MSDN: https://docs.microsoft.com/en-us/exchange/client-developer/web-service-reference/error-pox"""
    ELEMENT_NAME = 'Error'
    NON_EXISTENT_MAILBOX_MESSAGES = ('The e-mail address cannot be found.', "The email address can't be found.")

    __slots__ = ('code', 'message')

    def __init__(self, code=None, message=None):
        self.code = code
        self.message = message

    @classmethod
    def from_xml(cls, elem):
        return cls(code=get_xml_attr(elem, 'ErrorCode'), message=get_xml_attr(elem, 'Message'))

    def to_exception(self):
        if self.message in self.NON_EXISTENT_MAILBOX_MESSAGES:
            return ErrorNonExistentMailbox('The SMTP address has no mailbox associated with it')
        return AutoDiscoverFailed('Unknown error %s: %s' % (self.code, self.message))

    def __repr__(self):
        return self.__class__.__name__ + repr((self.code, self.message))


class Response:
    """MSDN: https://docs.microsoft.com/en-us/exchange/client-developer/web-service-reference/response-pox"""
    ELEMENT_NAME = 'Response'

    __slots__ = ('protocols',)

    def __init__(self, protocols=None):
        self.protocols = protocols or []

    @classmethod
    def from_xml(cls, elem):
        account = find_child(elem, 'Account')
        if account is None:
            return cls()
        return cls(protocols=[Protocol.from_xml(p) for p in find_children(account, Protocol.ELEMENT_NAME)])

    def _first_protocol(self, protocol_type):
        for p in self.protocols:
            if p.type == protocol_type:
                return p
        return None

    @property
    def protocol(self):
        """There are several protocol types in a response. EXCH is the internal Exchange protocol and is authoritative
        for both the EWS URL and the server version. EXPR (Outlook Anywhere) is only used as a fallback for the EWS URL
        when the EXCH protocol does not have one.

        Returns an (ews_url, server_version) tuple.
        """
        exch = self._first_protocol(Protocol.EXCH)
        if exch is None:
            raise ValueError('No Exchange protocol in response: %s' % self.protocols)
        ews_url = exch.ews_url
        if not ews_url:
            expr = self._first_protocol(Protocol.EXPR)
            if expr is None:
                raise ValueError('No Express protocol in response: %s' % self.protocols)
            ews_url = expr.ews_url
        # The server version is only ever taken from the EXCH protocol
        return ews_url, exch.server_version

    def discovered_info(self):
        ews_url, server_version = self.protocol
        if not ews_url:
            raise ValueError("Response is missing an 'ews_url' value")
        version = Version.from_hex_string(server_version)
        return DiscoveredInfo(ews_url=ews_url, api_version=version.api_version)


class Autodiscover:
    ELEMENT_NAME = 'Autodiscover'
    NAMESPACE = AUTODISCOVER_BASE_NS
    ACCEPTABLE_RESPONSE_SCHEMA = AUTODISCOVER_RESPONSE_NS

    __slots__ = ('response', 'error')

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error

    @classmethod
    def response_tag(cls):
        return '{%s}%s' % (cls.NAMESPACE, cls.ELEMENT_NAME)

    @classmethod
    def from_bytes(cls, bytes_content):
        """Parse the body of a POX autodiscover response. Only the protocol records and any error are kept.

        MSDN: https://docs.microsoft.com/en-us/exchange/client-developer/web-service-reference/autodiscover-pox
        """
        if not bytes_content or not is_xml(bytes_content):
            raise ValueError('Response is not XML: %s' % bytes_content)
        try:
            root = to_xml(bytes_content).getroot()
        except ParseError:
            raise ValueError('Error parsing XML: %s' % bytes_content)
        if root is None or root.tag != cls.response_tag():
            raise ValueError('Unknown root element in XML: %s' % bytes_content)
        response, error = None, None
        for elem in find_children(root, Response.ELEMENT_NAME):
            # Error responses use the 'Response' element name, but contain an 'Error' element
            error_elem = find_child(elem, Error.ELEMENT_NAME)
            if error_elem is not None:
                error = Error.from_xml(error_elem)
            elif response is None:
                response = Response.from_xml(elem)
        return cls(response=response, error=error)

    def raise_errors(self):
        # Find an error message in the response and raise the relevant exception
        if self.error is not None:
            raise self.error.to_exception()
        raise AutoDiscoverFailed('Unknown autodiscover error response: %s' % self)

    def discovered_info(self):
        if self.response is None:
            self.raise_errors()
        return self.response.discovered_info()

    @classmethod
    def payload(cls, email):
        # Builds a full Autodiscover XML request
        payload = create_element(
            '{%s}%s' % (AUTODISCOVER_REQUEST_NS, cls.ELEMENT_NAME), nsmap={None: AUTODISCOVER_REQUEST_NS}
        )
        request = add_xml_child(payload, '{%s}Request' % AUTODISCOVER_REQUEST_NS)
        add_xml_child(request, '{%s}EMailAddress' % AUTODISCOVER_REQUEST_NS, email)
        add_xml_child(request, '{%s}AcceptableResponseSchema' % AUTODISCOVER_REQUEST_NS,
                      cls.ACCEPTABLE_RESPONSE_SCHEMA)
        return xml_to_str(payload, encoding=DEFAULT_ENCODING, xml_declaration=False)

    def __repr__(self):
        return self.__class__.__name__ + repr((self.response, self.error))


def parse_response(bytes_content):
    """Parse an autodiscover response and return a DiscoveredInfo instance. Raises ValueError or an AutoDiscoverError
    subclass if the response does not contain a usable EWS URL and server version.
    """
    return Autodiscover.from_bytes(bytes_content=bytes_content).discovered_info()
