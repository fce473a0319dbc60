import sys
import unittest
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from modemppp.wifi.models import (
    WifiBgscan,
    WifiBgscanModule,
    WifiChannel,
    WifiCiphers,
    WifiConfig,
    WifiMode,
    WifiSecurity,
)


def _config(**overrides) -> WifiConfig:
    values = dict(
        mode=WifiMode.MASTER,
        ssid="gateway",
        channels=(1, 6, 11),
        security=WifiSecurity.SECURITY_WPA2,
        pairwise_ciphers=WifiCiphers.CCMP,
        group_ciphers=WifiCiphers.CCMP,
        passkey="secret-key",
        hw_mode="g",
        country_code="IT",
    )
    values.update(overrides)
    return WifiConfig(**values)


class WifiConfigTests(unittest.TestCase):
    def test_structural_equality(self) -> None:
        self.assertEqual(_config(), _config())
        self.assertEqual(hash(_config()), hash(_config()))
        self.assertNotEqual(_config(), _config(passkey="other"))
        self.assertNotEqual(_config(), _config(channels=(1, 6)))
        self.assertNotEqual(_config(), _config(bgscan=WifiBgscan(WifiBgscanModule.LEARN, -65, 10, 60)))

    def test_validity_requires_mode(self) -> None:
        self.assertTrue(_config().is_valid())
        self.assertFalse(WifiConfig().is_valid())

    def test_string_rendering(self) -> None:
        rendered = str(
            _config(
                bgscan=WifiBgscan(WifiBgscanModule.SIMPLE, -70, 30, 300),
                channel_frequencies=(WifiChannel(1, 2412), WifiChannel(6, 2437)),
            )
        )

        self.assertEqual(
            "WifiConfig [mode: MASTER :: ssid: gateway :: ignoreSSID: false :: channels: 1,6,11 :: "
            "security: SECURITY_WPA2 :: pairwiseCiphers: CCMP :: groupCiphers: CCMP :: passkey: *** :: "
            "hwMode: g :: bgscan: simple:30:-70:300 :: countryCode: IT :: "
            "channelFrequencies: 1/2412MHz,6/2437MHz]",
            rendered,
        )
        self.assertNotIn("secret-key", rendered)

    def test_empty_rendering(self) -> None:
        self.assertEqual("WifiConfig [ignoreSSID: false :: ]", str(WifiConfig()))


if __name__ == "__main__":
    unittest.main()
