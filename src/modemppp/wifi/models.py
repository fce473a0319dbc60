"""Wi-Fi configuration record carried alongside modem interfaces."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class WifiMode(str, Enum):
    UNKNOWN = "unknown"
    ADHOC = "adhoc"
    INFRA = "infra"
    MASTER = "master"


class WifiSecurity(str, Enum):
    NONE = "none"
    SECURITY_WEP = "wep"
    SECURITY_WPA = "wpa"
    SECURITY_WPA2 = "wpa2"
    SECURITY_WPA_WPA2 = "wpa_wpa2"


class WifiCiphers(str, Enum):
    CCMP_TKIP = "ccmp_tkip"
    TKIP = "tkip"
    CCMP = "ccmp"


class WifiRadioMode(str, Enum):
    RADIO_MODE_80211A = "80211a"
    RADIO_MODE_80211B = "80211b"
    RADIO_MODE_80211G = "80211g"
    RADIO_MODE_80211NHT20 = "80211nht20"
    RADIO_MODE_80211NHT40ABOVE = "80211nht40above"
    RADIO_MODE_80211NHT40BELOW = "80211nht40below"
    RADIO_MODE_80211_AC = "80211ac"


class WifiBgscanModule(str, Enum):
    NONE = "none"
    SIMPLE = "simple"
    LEARN = "learn"


@dataclass(frozen=True, slots=True)
class WifiBgscan:
    """Background scan parameters as understood by wpa_supplicant."""

    module: WifiBgscanModule = WifiBgscanModule.NONE
    rssi_threshold: int = 0
    short_interval: int = 0
    long_interval: int = 0

    def __str__(self) -> str:
        if self.module is WifiBgscanModule.NONE:
            return ""
        return f"{self.module.value}:{self.short_interval}:{self.rssi_threshold}:{self.long_interval}"


@dataclass(frozen=True, slots=True)
class WifiChannel:
    channel: int
    frequency: int

    def __str__(self) -> str:
        return f"{self.channel}/{self.frequency}MHz"


@dataclass(frozen=True, slots=True)
class WifiConfig:
    """Flat Wi-Fi configuration value.

    Equality is structural over every attribute. ``str()`` renders the
    populated attributes only and masks the passkey.
    """

    mode: WifiMode | None = None
    ssid: str | None = None
    channels: tuple[int, ...] = ()
    security: WifiSecurity | None = None
    pairwise_ciphers: WifiCiphers | None = None
    group_ciphers: WifiCiphers | None = None
    passkey: str | None = field(default=None, repr=False)
    hw_mode: str | None = None
    radio_mode: WifiRadioMode | None = None
    bgscan: WifiBgscan | None = None
    ping_access_point: bool = False
    ignore_ssid: bool = False
    driver: str | None = None
    country_code: str | None = None
    channel_frequencies: tuple[WifiChannel, ...] | None = None

    def is_valid(self) -> bool:
        return self.mode is not None

    def __str__(self) -> str:
        parts: list[str] = []
        if self.mode is not None:
            parts.append(f"mode: {self.mode.name}")
        if self.ssid is not None:
            parts.append(f"ssid: {self.ssid}")
        parts.append(f"ignoreSSID: {str(self.ignore_ssid).lower()}")
        if self.driver is not None:
            parts.append(f"driver: {self.driver}")
        if self.channels:
            parts.append("channels: " + ",".join(str(channel) for channel in self.channels))
        if self.security is not None:
            parts.append(f"security: {self.security.name}")
        if self.pairwise_ciphers is not None:
            parts.append(f"pairwiseCiphers: {self.pairwise_ciphers.name}")
        if self.group_ciphers is not None:
            parts.append(f"groupCiphers: {self.group_ciphers.name}")
        if self.passkey is not None:
            parts.append("passkey: ***")
        if self.hw_mode is not None:
            parts.append(f"hwMode: {self.hw_mode}")
        if self.radio_mode is not None:
            parts.append(f"radioMode: {self.radio_mode.name}")
        if self.bgscan is not None:
            parts.append(f"bgscan: {self.bgscan}")
        if self.country_code is not None:
            parts.append(f"countryCode: {self.country_code}")

        rendered = "".join(f"{part} :: " for part in parts)
        if self.channel_frequencies is not None:
            rendered += "channelFrequencies: " + ",".join(str(wc) for wc in self.channel_frequencies)
        return f"WifiConfig [{rendered}]"
