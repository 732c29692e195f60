import time
import unittest
import unittest.util


def autodiscover_response(exch_ews_url=None, server_version='73C1840A', expr_ews_url=None):
    # Builds a POX autodiscover response body with an EXCH protocol and, optionally, an EXPR protocol
    exch = b'<Type>EXCH</Type>'
    if server_version is not None:
        exch += b'<ServerVersion>%s</ServerVersion>' % server_version.encode()
    if exch_ews_url is not None:
        exch += b'<EwsUrl>%s</EwsUrl>' % exch_ews_url.encode()
    expr = b''
    if expr_ews_url is not None:
        expr = b'<Protocol><Type>EXPR</Type><EwsUrl>%s</EwsUrl></Protocol>' % expr_ews_url.encode()
    return b'''\
<?xml version="1.0" encoding="utf-8"?>
<Autodiscover xmlns="http://schemas.microsoft.com/exchange/autodiscover/responseschema/2006">
    <Response xmlns="http://schemas.microsoft.com/exchange/autodiscover/outlook/responseschema/2006a">
        <Account>
            <AccountType>email</AccountType>
            <Action>settings</Action>
            <Protocol>%s</Protocol>
            %s
        </Account>
    </Response>
</Autodiscover>''' % (exch, expr)


class TimedTestCase(unittest.TestCase):
    SLOW_TEST_DURATION = 5  # Log tests that are slower than this value (in seconds)

    def setUp(self):
        self.maxDiff = None
        self.t1 = time.monotonic()

    def tearDown(self):
        t2 = time.monotonic() - self.t1
        if t2 > self.SLOW_TEST_DURATION:
            print("{:07.3f} : {}".format(t2, self.id()))
