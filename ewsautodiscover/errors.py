# coding=utf-8
"""
Stores errors specific to ewsautodiscover, and mirrors the autodiscover error responses we know how to interpret.
"""


class EWSError(Exception):
    """
    Global error type within this module.

    """

    def __init__(self, value):
        super().__init__(value)
        self.value = value

    def __str__(self):
        return str(self.value)


# Misc errors
class TransportError(EWSError):
    pass


class UnauthorizedError(EWSError):
    pass


class AutoDiscoverError(TransportError):
    pass


class AutoDiscoverFailed(AutoDiscoverError):
    pass


class ResponseMessageError(TransportError):
    pass


# Error codes that an autodiscover server may return in the 'Error' element of a response
class ErrorNonExistentMailbox(ResponseMessageError): pass  # noqa: E701
