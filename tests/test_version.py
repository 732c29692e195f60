from ewsautodiscover import Version
from ewsautodiscover.version import Build, VERSIONS

from .common import TimedTestCase


class VersionTest(TimedTestCase):
    def test_default_api_version(self):
        # Test that a version gets a reasonable api_version value if we don't set one explicitly
        version = Version(build=Build(15, 1, 2, 3))
        self.assertEqual(version.api_version, 'Exchange2016')
        self.assertEqual(version.fullname, 'Microsoft Exchange Server 2016')
        self.assertEqual(Version(build=Build(15, 1), api_version='Exchange2013').api_version, 'Exchange2013')

    def test_invalid_version_args(self):
        with self.assertRaises(ValueError):
            Version(build='XXX')
        with self.assertRaises(ValueError):
            Version(build=Build(15, 1, 2, 3), api_version=999)

    def test_magic(self):
        version = Version(build=Build(15, 1, 2, 3))
        self.assertEqual(repr(version), "Version(Build(15, 1, 2, 3), 'Exchange2016')")
        self.assertEqual(str(version), 'Build=15.1.2.3, API=Exchange2016, Fullname=Microsoft Exchange Server 2016')
        self.assertEqual(version, Version(build=Build(15, 1, 2, 3)))

    def test_from_hex_string(self):
        for s, api_version in (
            ('72000000', 'Exchange2007'),
            ('72010000', 'Exchange2007_SP1'),
            ('72020000', 'Exchange2007_SP1'),
            ('72030000', 'Exchange2007_SP1'),
            ('73800000', 'Exchange2010'),
            ('73810000', 'Exchange2010_SP1'),
            ('738180DA', 'Exchange2010_SP1'),
            ('73820000', 'Exchange2010_SP2'),
            ('73830000', 'Exchange2010_SP2'),
            ('73C0034E', 'Exchange2013'),
            ('73C0034F', 'Exchange2013_SP1'),
            ('73C0834F', 'Exchange2013_SP1'),
            ('73C10000', 'Exchange2016'),
            ('73C1840A', 'Exchange2016'),
            ('73C20000', 'Exchange2019'),
            ('73D40000', 'Exchange2016'),
        ):
            with self.subTest(s=s):
                version = Version.from_hex_string(s)
                self.assertEqual(version.api_version, api_version)
                self.assertIn(api_version, VERSIONS)

    def test_from_hex_string_failure(self):
        for s in (
            '72400000',  # Major version 9
            '7FC00000',  # Major version 63
            '00000000',  # Major version 0
            '73C30000',  # Version 15.3
            '72040000',  # Version 8.4
            '73840000',  # Version 14.4
            'XYZ',
            '',
            '0x73C1840A',
            '1FFFFFFFF',
        ):
            with self.subTest(s=s):
                with self.assertRaises(ValueError):
                    Version.from_hex_string(s)
