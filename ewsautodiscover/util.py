from codecs import BOM_UTF8
import io
import logging
import re
import socket
from urllib.parse import urljoin, urlparse

# Import _etree via defusedxml instead of directly from lxml.etree, to silence overly strict linters
from defusedxml.lxml import parse, tostring, GlobalParserTLS, _etree
from pygments import highlight
from pygments.lexers.html import XmlLexer
from pygments.formatters.terminal import TerminalFormatter
import requests.exceptions

log = logging.getLogger(__name__)


class ParseError(_etree.ParseError):
    # Wrap lxml ParseError in our own class
    pass


# Regex of UTF-8 control characters that are illegal in XML 1.0 (and XML 1.1)
_ILLEGAL_XML_CHARS_RE = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1F\uD800-\uDFFF\uFFFE\uFFFF]')

# XML namespaces
AUTODISCOVER_BASE_NS = 'http://schemas.microsoft.com/exchange/autodiscover/responseschema/2006'
AUTODISCOVER_REQUEST_NS = 'http://schemas.microsoft.com/exchange/autodiscover/outlook/requestschema/2006'
AUTODISCOVER_RESPONSE_NS = 'http://schemas.microsoft.com/exchange/autodiscover/outlook/responseschema/2006a'


def xml_to_str(tree, encoding=None, xml_declaration=False):
    """Serialize an XML tree. Returns unicode if 'encoding' is None. Otherwise, we return encoded 'bytes'."""
    if xml_declaration and not encoding:
        raise ValueError("'xml_declaration' is not supported when 'encoding' is None")
    if encoding:
        return tostring(tree, encoding=encoding, xml_declaration=xml_declaration)
    return tostring(tree, encoding=str, xml_declaration=False)


def local_name(elem):
    # The autodiscover schemas are spread over several namespaces. Match on the local part of the tag only.
    return _etree.QName(elem).localname


def find_children(tree, name):
    return [elem for elem in tree if isinstance(elem.tag, str) and local_name(elem) == name]


def find_child(tree, name):
    for elem in find_children(tree, name):
        return elem
    return None


def get_xml_attr(tree, name):
    elem = find_child(tree, name)
    if elem is None:  # Must compare with None, see XML docs
        return None
    return elem.text or None


def safe_xml_value(value, replacement='?'):
    return str(_ILLEGAL_XML_CHARS_RE.sub(replacement, value))


def create_element(name, nsmap=None):
    return _strict_parser.getDefaultParser().makeelement(name, nsmap=nsmap)


def add_xml_child(tree, name, value=None):
    # Use SubElement so the child inherits the namespace declarations of the parent instead of declaring its own
    elem = _etree.SubElement(tree, name)
    if value is not None:
        elem.text = safe_xml_value(value)
    return elem


class StrictParser(GlobalParserTLS):
    parser_config = {
        'resolve_entities': False,
        'recover': False,  # A truncated or otherwise broken response must not be mistaken for a valid one
    }


_strict_parser = StrictParser()


def to_xml(bytes_content):
    # Converts bytes to an XML tree. Malformed XML raises ParseError with an excerpt of the offending text.
    stream = io.BytesIO(bytes_content)
    strict_parser = _strict_parser.getDefaultParser()
    try:
        return parse(stream, parser=strict_parser)
    except AssertionError as e:
        raise ParseError(e.args[0], '<not from file>', -1, 0)
    except _etree.ParseError as e:
        if hasattr(e, 'position'):
            e.lineno, e.offset = e.position
        if not e.lineno:
            raise ParseError(str(e), '<not from file>', e.lineno, e.offset)
        try:
            stream.seek(0)
            offending_line = stream.read().splitlines()[e.lineno - 1]
        except IndexError:
            raise ParseError(str(e), '<not from file>', e.lineno, e.offset)
        else:
            offending_excerpt = offending_line[max(0, e.offset - 20):e.offset + 20]
            msg = '%s\nOffending text: [...]%s[...]' % (str(e), offending_excerpt)
            raise ParseError(msg, '<not from file>', e.lineno, e.offset)
    except TypeError:
        stream.seek(0)
        raise ParseError('This is not XML: %r' % stream.read(), '<not from file>', -1, 0)


def is_xml(text):
    """
    Helper function. Lightweight test if response is an XML doc
    """
    # BOM_UTF8 is an UTF-8 byte order mark which may precede the XML from an Exchange server
    bom_len = len(BOM_UTF8)
    if text[:bom_len] == BOM_UTF8:
        text = text[bom_len:]
    return text.lstrip()[:1] == b'<'


class PrettyXmlHandler(logging.StreamHandler):
    """A steaming log handler that prettifies log statements containing XML when output is a terminal"""
    @staticmethod
    def parse_bytes(xml_bytes):
        return parse(io.BytesIO(xml_bytes))

    @classmethod
    def prettify_xml(cls, xml_bytes):
        # Re-formats an XML document to a consistent style
        return tostring(
            cls.parse_bytes(xml_bytes),
            xml_declaration=True,
            encoding='utf-8',
            pretty_print=True
        ).replace(b'\t', b'    ').replace(b' xmlns:', b'\n    xmlns:')

    @staticmethod
    def highlight_xml(xml_str):
        # Highlights a string containing XML, using terminal color codes
        return highlight(xml_str, XmlLexer(), TerminalFormatter())

    def emit(self, record):
        """Pretty-print and syntax highlight a log statement if all these conditions are met:
           * This is a DEBUG message
           * We're outputting to a terminal
           * The log message args is a dict containing keys starting with 'xml_' and values as bytes
        """
        if record.levelno == logging.DEBUG and self.is_tty() and isinstance(record.args, dict):
            for key, value in record.args.items():
                if not key.startswith('xml_'):
                    continue
                if not isinstance(value, bytes):
                    continue
                if not is_xml(value):
                    continue
                try:
                    record.args[key] = self.highlight_xml(self.prettify_xml(value))
                except Exception as e:
                    # Something bad happened, but we don't want to crash the program just because logging failed
                    print('XML highlighting failed: %s' % e)
        return super().emit(record)

    def is_tty(self):
        # Check if we're outputting to a terminal
        try:
            return self.stream.isatty()
        except AttributeError:
            return False


def get_domain(email):
    """Returns the domain part of an email address. The address must contain exactly one '@' and a non-empty domain.
    """
    try:
        local_part, domain = email.split('@')
    except (ValueError, AttributeError):
        raise ValueError("'%s' is not a valid email" % email)
    if not domain:
        raise ValueError("'%s' is not a valid email" % email)
    return domain.lower()


def split_url(url):
    parsed_url = urlparse(url)
    # Use netloc instead og hostname since hostname is None if URL is relative
    return parsed_url.scheme == 'https', parsed_url.netloc.lower(), parsed_url.path


def get_redirect_url(response):
    # Servers may supply a relative location. Make it absolute, based on the URL we requested.
    redirect_url = response.headers.get('location', None)
    if not redirect_url:
        return None
    _, redirect_server, _ = split_url(redirect_url)
    if not redirect_server:
        redirect_url = urljoin(response.url, redirect_url)
    return redirect_url


# A collection of error classes we want to handle as general connection errors
CONNECTION_ERRORS = (requests.exceptions.ChunkedEncodingError, requests.exceptions.ConnectionError,
                     requests.exceptions.Timeout, socket.timeout, ConnectionResetError)

# A collection of error classes we want to handle as TLS verification errors
TLS_ERRORS = (requests.exceptions.SSLError,)
try:
    # If pyOpenSSL is installed, requests will use it and throw this class on TLS errors
    import OpenSSL.SSL
    TLS_ERRORS += (OpenSSL.SSL.Error,)
except ImportError:
    pass
