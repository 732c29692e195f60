import logging

from .credentials import Credentials

log = logging.getLogger(__name__)


class Configuration:
    """Contains information needed to make autodiscover requests.

    The 'credentials' argument contains the credentials needed to authenticate with the server:

        config = Configuration(credentials=Credentials('john@example.com', 'MY_SECRET'), ...)

    Autodiscover servers are often set up with self-signed or otherwise broken certificates, so TLS validation is
    disabled unless 'verify_ssl' is set:

        config = Configuration(verify_ssl=True, ...)

    'timeout' is the timeout in seconds for each HTTP request. It defaults to AutodiscoverProtocol.TIMEOUT. 'max_wait'
    is the total number of seconds a discovery call may spend on HTTP requests. When the budget is spent, no more
    candidate URLs are tried:

        config = Configuration(timeout=5, max_wait=30, ...)
    """
    def __init__(self, credentials=None, timeout=None, verify_ssl=False, max_wait=None):
        if not isinstance(credentials, (Credentials, type(None))):
            raise ValueError("'credentials' %r must be a Credentials instance" % credentials)
        if timeout is not None and (not isinstance(timeout, (int, float)) or timeout <= 0):
            raise ValueError("'timeout' %r must be a positive number" % timeout)
        if max_wait is not None and (not isinstance(max_wait, (int, float)) or max_wait <= 0):
            raise ValueError("'max_wait' %r must be a positive number" % max_wait)
        if not isinstance(verify_ssl, bool):
            raise ValueError("'verify_ssl' %r must be a boolean" % verify_ssl)
        self._credentials = credentials
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.max_wait = max_wait

    @property
    def credentials(self):
        return self._credentials

    def __repr__(self):
        return self.__class__.__name__ + '(%s)' % ', '.join('%s=%r' % (k, getattr(self, k)) for k in (
            'credentials', 'timeout', 'verify_ssl', 'max_wait'
        ))
