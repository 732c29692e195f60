import logging

import requests.auth

log = logging.getLogger(__name__)

# Authentication method enums
BASIC = 'basic'

AUTH_TYPE_MAP = {
    BASIC: requests.auth.HTTPBasicAuth,
}

DEFAULT_ENCODING = 'utf-8'
DEFAULT_HEADERS = {'Content-Type': 'text/xml; charset=%s' % DEFAULT_ENCODING, 'Accept-Encoding': 'gzip, deflate'}


def get_auth_instance(auth_type, **kwargs):
    """
    Returns an *Auth instance suitable for the requests package
    """
    model = AUTH_TYPE_MAP[auth_type]
    return model(**kwargs)
