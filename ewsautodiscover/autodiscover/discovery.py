import logging

from ..configuration import Configuration
from ..credentials import Credentials
from ..errors import AutoDiscoverFailed, EWSError, TransportError, UnauthorizedError
from ..protocol import AutodiscoverProtocol
from ..util import get_domain, get_redirect_url
from .properties import Autodiscover, parse_response

log = logging.getLogger(__name__)


def discover(email, password=None, credentials=None, config=None, session=None, on_failure=None):
    """Autodiscover the EWS endpoint and server version of the mailbox 'email'. Returns a DiscoveredInfo instance, or
    raises AutoDiscoverFailed.

    If 'password' is given, the request is authenticated with the email address and the password. Otherwise,
    'credentials' or the credentials of 'config' are used.
    """
    if password is not None:
        credentials = Credentials(email, password)
    return Autodiscovery(
        email=email, credentials=credentials, config=config, session=session, on_failure=on_failure
    ).discover()


class Autodiscovery:
    """Autodiscover is a Microsoft protocol for automatically getting the endpoint of the Exchange server and other
    connection-related settings holding the email address using only the email address, and username and password of the
    user.

    This implements the POX flavor of the protocol, trying a fixed list of candidate URLs in turn:

        1. https://example.com/autodiscover/autodiscover.xml
        2. https://autodiscover.example.com/autodiscover/autodiscover.xml
        3. The URL that an unauthenticated GET request to URL 2 redirects to with an HTTP 302, if any

    The first candidate that returns a valid response wins. Later candidates are not tried, even if they could give a
    more complete response. Failures on each candidate are logged and reported to the optional 'on_failure' callback,
    which is called with the URL and the exception. Only when all candidates fail is AutoDiscoverFailed raised.

    For a description of the POX request and response, see:

    https://docs.microsoft.com/en-us/exchange/client-developer/exchange-web-services/autodiscover-for-exchange

    WARNING: The autodiscover protocol is very complicated. If you have problems autodiscovering using this
    implementation, start by doing an official test at https://testconnectivity.microsoft.com
    """

    DOMAIN_URL = 'https://%s/autodiscover/autodiscover.xml'
    SUBDOMAIN_URL = 'https://autodiscover.%s/autodiscover/autodiscover.xml'

    def __init__(self, email, credentials=None, config=None, session=None, on_failure=None):
        """
        :param email: The email address to autodiscover. Must contain exactly one '@' followed by a domain
        :param credentials: Credentials with authorization to make autodiscover lookups for this email
        :param config: A Configuration instance with timeouts and TLS settings
        :param session: An optional 'requests' session to use instead of creating one
        :param on_failure: An optional callable, called as on_failure(url, exception) when a candidate URL fails
        """
        if config is None:
            config = Configuration()
        if not isinstance(config, Configuration):
            raise ValueError("'config' %r must be a Configuration instance" % config)
        if credentials is None:
            credentials = config.credentials
        if not isinstance(credentials, Credentials):
            raise ValueError("'credentials' %r must be a Credentials instance" % credentials)
        if on_failure is not None and not callable(on_failure):
            raise ValueError("'on_failure' %r must be callable" % on_failure)
        self.email = email
        self.credentials = credentials
        self.config = config
        self.session = session
        self.on_failure = on_failure

    def discover(self):
        log.debug('Attempting autodiscover on email %s', self.email)
        try:
            payload = Autodiscover.payload(email=self.email)
        except (TypeError, ValueError) as e:
            raise AutoDiscoverFailed('Could not create autodiscover request for email %r: %s' % (self.email, e))

        with AutodiscoverProtocol(config=self.config, session=self.session) as protocol:
            for url in self.discovery_urls(protocol=protocol):
                if not url:
                    continue
                if protocol.expired:
                    log.warning('Max wait of %s seconds exceeded. Skipping remaining candidates', self.config.max_wait)
                    break
                try:
                    return self._attempt_response(protocol=protocol, url=url, payload=payload)
                except (EWSError, ValueError) as e:
                    log.warning('Autodiscover failed on %s: %s', url, e)
                    if self.on_failure is not None:
                        self.on_failure(url, e)
        raise AutoDiscoverFailed(
            'All autodiscover candidates failed for email %r. If you think this is an error, consider doing an '
            'official test at https://testconnectivity.microsoft.com' % self.email)

    def discovery_urls(self, protocol):
        """Returns the candidate URLs in the order they should be tried. The last one is '' if the autodiscover
        subdomain does not redirect us anywhere.
        """
        domain = get_domain(self.email)
        return (
            self.DOMAIN_URL % domain,
            self.SUBDOMAIN_URL % domain,
            self.redirected_url(protocol=protocol, domain=domain),
        )

    def redirected_url(self, protocol, domain):
        """Sends an unauthenticated GET request to https://autodiscover.example.com/autodiscover/autodiscover.xml and
        returns the 'Location' header if the response is an HTTP 302 redirect. Returns '' in all other cases.
        """
        url = self.SUBDOMAIN_URL % domain
        log.debug('Looking for a redirect on %s', url)
        try:
            r = protocol.get(url=url)
        except TransportError as e:
            log.debug('Response error on redirect URL %s: %s', url, e)
            return ''
        if r.status_code != 302:
            log.debug('No redirect from %s (status code %s)', url, r.status_code)
            return ''
        redirect_url = get_redirect_url(r)
        if not redirect_url:
            log.debug('HTTP redirect from %s but no location header', url)
            return ''
        log.debug('Got a redirect URL: %s', redirect_url)
        return redirect_url

    def _attempt_response(self, protocol, url, payload):
        """Returns a DiscoveredInfo instance if 'url' returns a valid response. Raises an exception otherwise.
        """
        log.info('Trying autodiscover on %r with email %r', url, self.email)
        r = protocol.get(url=url, data=payload, credentials=self.credentials)
        if r.status_code == 401:
            raise UnauthorizedError('Wrong username or password for %s' % url)
        if r.status_code != 200:
            raise TransportError('Invalid response code %s from %s' % (r.status_code, url))
        log.debug('Response data: %(xml_response)s', dict(xml_response=r.content))
        return parse_response(r.content)
