"""
A protocol is the HTTP transport used for autodiscover requests. It contains all necessary information to make HTTPS
connections to the candidate autodiscover servers.

A protocol is created for each discovery call. Callers may hand in their own 'requests' session, e.g. to add proxy
support or to test against a mocked server.
"""
import logging
import time

import requests.adapters
import requests.exceptions
import requests.sessions
import requests.utils

from .configuration import Configuration
from .errors import TransportError
from .transport import get_auth_instance, BASIC, DEFAULT_ENCODING, DEFAULT_HEADERS
from .util import CONNECTION_ERRORS, TLS_ERRORS

log = logging.getLogger(__name__)


class NoVerifyHTTPAdapter(requests.adapters.HTTPAdapter):
    """An HTTP adapter that ignores TLS validation errors. Use at own risk."""
    def cert_verify(self, conn, url, verify, cert):
        # pylint: disable=unused-argument
        # We're overiding a method so we have to keep the signature
        super().cert_verify(conn=conn, url=url, verify=False, cert=cert)


class AutodiscoverProtocol:
    """Protocol which implements the bare essentials for autodiscover"""

    # We want only 1 TCP connection per Session object. We only ever have one request in flight.
    CONNECTIONS_PER_SESSION = 1
    # Timeout for HTTP requests
    TIMEOUT = 10  # Seconds

    # The adapter class to use for HTTP requests when TLS validation is enabled. Override this if you need e.g. proxy
    # support or specific TLS versions.
    HTTP_ADAPTER_CLS = requests.adapters.HTTPAdapter
    # The adapter class to use when TLS validation is disabled
    NOVERIFY_HTTP_ADAPTER_CLS = NoVerifyHTTPAdapter

    # The User-Agent header to use for HTTP requests. Override this to set an app-specific one
    USERAGENT = None

    def __init__(self, config, session=None):
        if not isinstance(config, Configuration):
            raise ValueError("'config' %r must be a Configuration instance" % config)
        self.config = config
        self._owns_session = session is None
        self._session = session if session is not None else self.raw_session(verify_ssl=config.verify_ssl)
        # The point in time when we must give up on making more requests, if 'max_wait' is set
        self._deadline = None if config.max_wait is None else time.monotonic() + config.max_wait

    @property
    def timeout(self):
        return self.config.timeout or self.TIMEOUT

    @property
    def session(self):
        return self._session

    def close(self):
        # Only close sessions that we created ourselves
        if self._owns_session:
            log.debug('Closing autodiscover session')
            self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args, **kwargs):
        self.close()

    @property
    def expired(self):
        return self._deadline is not None and time.monotonic() >= self._deadline

    def request_timeout(self):
        # Clip the request timeout to the remaining time budget of this discovery call
        if self._deadline is None:
            return self.timeout
        remaining = self._deadline - time.monotonic()
        if remaining <= 0:
            raise TransportError('Max wait of %s seconds exceeded' % self.config.max_wait)
        return min(self.timeout, remaining)

    def get(self, url, data=None, credentials=None):
        """Issue a GET request to 'url' without following redirects. The autodiscover servers expect the request
        payload in the body of a GET request, so 'data' is sent as the request body. The request is sent with basic
        auth if 'credentials' are given, and unauthenticated otherwise.
        """
        kwargs = dict(
            headers=DEFAULT_HEADERS.copy(), allow_redirects=False, timeout=self.request_timeout(),
            verify=self.config.verify_ssl,
        )
        if data is not None:
            kwargs['data'] = data
        if credentials:
            kwargs['auth'] = get_auth_instance(
                auth_type=BASIC,
                username=credentials.username.encode(DEFAULT_ENCODING),
                password=credentials.password.encode(DEFAULT_ENCODING),
            )
        log.debug('GET %(url)s (timeout %(timeout)s)\nRequest data: %(xml_request)s',
                  dict(url=url, timeout=kwargs['timeout'], xml_request=data))
        try:
            r = self._session.get(url, **kwargs)
        except TLS_ERRORS as e:
            raise TransportError('TLS error on URL %s: %s' % (url, e)) from e
        except CONNECTION_ERRORS as e:
            raise TransportError('Connection error on URL %s: %s' % (url, e)) from e
        except requests.exceptions.RequestException as e:
            raise TransportError('Request to URL %s failed: %s' % (url, e)) from e
        log.debug('Response from %(url)s: %(status_code)s\nResponse headers: %(response_headers)s',
                  dict(url=url, status_code=r.status_code, response_headers=r.headers))
        return r

    @classmethod
    def get_adapter(cls, verify_ssl=True):
        # We want just one connection per session. No retries, since we fall back to the next candidate URL instead
        adapter_cls = cls.HTTP_ADAPTER_CLS if verify_ssl else cls.NOVERIFY_HTTP_ADAPTER_CLS
        return adapter_cls(
            pool_block=True,
            pool_connections=cls.CONNECTIONS_PER_SESSION,
            pool_maxsize=cls.CONNECTIONS_PER_SESSION,
            max_retries=0,
        )

    @classmethod
    def get_useragent(cls):
        if not cls.USERAGENT:
            # import here to avoid a cyclic import
            from ewsautodiscover import __version__
            cls.USERAGENT = "ewsautodiscover/%s (%s)" % (__version__, requests.utils.default_user_agent())
        return cls.USERAGENT

    @classmethod
    def raw_session(cls, verify_ssl=True):
        session = requests.sessions.Session()
        session.headers.update(DEFAULT_HEADERS)
        session.headers["User-Agent"] = cls.get_useragent()
        session.verify = verify_ssl
        session.mount('http://', adapter=cls.get_adapter(verify_ssl=verify_ssl))
        session.mount('https://', adapter=cls.get_adapter(verify_ssl=verify_ssl))
        return session

    def __repr__(self):
        return self.__class__.__name__ + repr((self.timeout, self.config.verify_ssl, self.config.max_wait))

    def __str__(self):
        return '''\
Timeout: %s
Verify TLS: %s
Max wait: %s''' % (
            self.timeout,
            self.config.verify_ssl,
            self.config.max_wait,
        )
