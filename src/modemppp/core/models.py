"""Data models for modem interfaces and their desired PPP configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AuthType(str, Enum):
    """Authentication protocol negotiated with the carrier."""

    NONE = "none"
    PAP = "pap"
    CHAP = "chap"
    EITHER = "either"


class Ipv4Policy(str, Enum):
    """How the local IPv4 address is obtained during IPCP."""

    PEER_ASSIGNED = "peer_assigned"
    LOCAL = "local"


@dataclass(frozen=True, slots=True)
class UsbDevice:
    """Physical location and identity of a USB modem."""

    vendor_id: int
    product_id: int
    usb_port: str

    def __str__(self) -> str:
        return f"{self.vendor_id:04x}:{self.product_id:04x}@{self.usb_port}"


@dataclass(frozen=True, slots=True)
class ModemConfig:
    """Desired PPP settings for one modem interface."""

    ppp_number: int = -1
    dial_string: str = ""
    apn: str = ""
    auth_type: AuthType = AuthType.NONE
    username: str = ""
    password: str = field(default="", repr=False)
    idle: int = 0
    lcp_echo_interval: int = 0
    lcp_echo_failure: int = 0
    persist: bool = False
    max_fail: int = 5
    holdoff: int = 1
    pdp_type: str = "IP"
    profile_id: int = 1
    header_compression: bool = False
    data_compression: bool = False
    init_strings: tuple[str, ...] = ()
    ipv4_policy: Ipv4Policy = Ipv4Policy.PEER_ASSIGNED


@dataclass(frozen=True, slots=True)
class InterfaceSnapshot:
    """A non-modem interface carried through reconfiguration untouched."""

    interface_name: str
    enabled: bool = True
    net_configs: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class ModemInterfaceSnapshot:
    """Desired state of a modem interface."""

    interface_name: str
    enabled: bool = True
    usb_device: UsbDevice | None = None
    net_configs: tuple[Any, ...] = ()

    def modem_config(self) -> ModemConfig | None:
        """Return the first ``ModemConfig`` among ``net_configs``."""

        for net_config in self.net_configs:
            if isinstance(net_config, ModemConfig):
                return net_config
        return None


@dataclass(frozen=True, slots=True)
class NetworkConfiguration:
    """Snapshot of the interfaces modified since the last reconfiguration."""

    modified_interfaces: tuple[ModemInterfaceSnapshot | InterfaceSnapshot, ...] = ()

    def interface(self, name: str) -> ModemInterfaceSnapshot | InterfaceSnapshot | None:
        for snapshot in self.modified_interfaces:
            if snapshot.interface_name == name:
                return snapshot
        return None
