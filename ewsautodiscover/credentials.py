"""
Implements the login info used for autodiscover requests. Autodiscover is done with HTTP Basic authentication, using
the email address of the mailbox as username.
"""
import logging

log = logging.getLogger(__name__)


class Credentials:
    """
    Login info for HTTP Basic authentication against the autodiscover servers. Both values are sent UTF-8 encoded.

    :param username: Usually the email address of the mailbox
    :param password: Clear-text password
    """

    def __init__(self, username, password):
        if not isinstance(username, str):
            raise ValueError("'username' %r must be a string" % username)
        if not isinstance(password, str):
            raise ValueError("'password' must be a string")
        self.username = username
        self.password = password

    def __eq__(self, other):
        return (self.username, self.password) == (other.username, other.password)

    def __hash__(self):
        return hash((self.username, self.password))

    def __repr__(self):
        return self.__class__.__name__ + repr((self.username, '********'))

    def __str__(self):
        return self.username
