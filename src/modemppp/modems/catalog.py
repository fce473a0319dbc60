"""Static catalog of supported USB modems."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from modemppp.core.models import UsbDevice


class GeneratorKind(str, Enum):
    """Profile generator family used to render a modem's PPP artifacts."""

    TELIT = "telit"
    HUAWEI = "huawei"
    SIERRA = "sierra"
    UBLOX = "ublox"


@dataclass(frozen=True, slots=True)
class ModemDescriptor:
    canonical_name: str
    default_baud: int
    generator_kind: GeneratorKind


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """Catalog row; ``usb_port`` restricts the match to one bus port."""

    vendor_id: int
    product_id: int
    descriptor: ModemDescriptor
    usb_port: str | None = None


SUPPORTED_MODEMS: tuple[CatalogEntry, ...] = (
    CatalogEntry(0x1BC7, 0x0021, ModemDescriptor("telit_he910", 115200, GeneratorKind.TELIT)),
    # On-board HE910-D soldered to the internal hub.
    CatalogEntry(
        0x1BC7, 0x0021, ModemDescriptor("telit_he910_d", 115200, GeneratorKind.TELIT), usb_port="1-1.3"
    ),
    CatalogEntry(0x1BC7, 0x1010, ModemDescriptor("telit_le910", 115200, GeneratorKind.TELIT)),
    CatalogEntry(0x1BC7, 0x1201, ModemDescriptor("telit_le910", 115200, GeneratorKind.TELIT)),
    CatalogEntry(0x1BC7, 0x0036, ModemDescriptor("telit_le910_v2", 115200, GeneratorKind.TELIT)),
    CatalogEntry(0x1BC7, 0x1101, ModemDescriptor("telit_le910_cat1", 115200, GeneratorKind.TELIT)),
    CatalogEntry(0x12D1, 0x1506, ModemDescriptor("huawei_ms2372", 115200, GeneratorKind.HUAWEI)),
    CatalogEntry(0x12D1, 0x1001, ModemDescriptor("huawei_e169", 460800, GeneratorKind.HUAWEI)),
    CatalogEntry(0x1199, 0x6812, ModemDescriptor("sierra_mc8775", 921600, GeneratorKind.SIERRA)),
    CatalogEntry(0x1199, 0x683C, ModemDescriptor("sierra_mc8790", 921600, GeneratorKind.SIERRA)),
    CatalogEntry(0x1199, 0x0025, ModemDescriptor("sierra_usb598", 921600, GeneratorKind.SIERRA)),
    CatalogEntry(0x1546, 0x1146, ModemDescriptor("ublox_toby_l2", 115200, GeneratorKind.UBLOX)),
    CatalogEntry(0x1546, 0x1102, ModemDescriptor("ublox_sara_u2", 115200, GeneratorKind.UBLOX)),
)


class ModemCatalog:
    """Read-only lookup from ``UsbDevice`` to ``ModemDescriptor``."""

    def __init__(self, entries: tuple[CatalogEntry, ...] = SUPPORTED_MODEMS) -> None:
        self._by_port: dict[tuple[int, int, str], ModemDescriptor] = {}
        self._by_id: dict[tuple[int, int], ModemDescriptor] = {}
        for entry in entries:
            if entry.usb_port is not None:
                self._by_port.setdefault((entry.vendor_id, entry.product_id, entry.usb_port), entry.descriptor)
            else:
                self._by_id.setdefault((entry.vendor_id, entry.product_id), entry.descriptor)

    def lookup(self, usb_device: UsbDevice | None) -> ModemDescriptor | None:
        """Return the descriptor for ``usb_device`` or ``None`` for an unknown modem."""

        if usb_device is None:
            return None
        key = (usb_device.vendor_id, usb_device.product_id)
        port_match = self._by_port.get((*key, usb_device.usb_port))
        if port_match is not None:
            return port_match
        return self._by_id.get(key)

    def __len__(self) -> int:
        return len(self._by_port) + len(self._by_id)


DEFAULT_CATALOG = ModemCatalog()


def lookup(usb_device: UsbDevice | None) -> ModemDescriptor | None:
    return DEFAULT_CATALOG.lookup(usb_device)
