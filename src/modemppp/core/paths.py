"""Canonical file locations for PPP peer artifacts."""

from __future__ import annotations

import re
from pathlib import Path

from modemppp.core.config import DEFAULT_LAYOUT, PppLayout
from modemppp.core.models import UsbDevice

LOG_PREFIX = "kura-"
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def base_name(canonical_name: str | None, usb_device: UsbDevice | None) -> str:
    """Return ``<canonical_name>_<usb_port>`` or ``""`` for an unknown modem.

    Characters outside ``[A-Za-z0-9_.-]`` are replaced with ``_``.
    """

    if not canonical_name or usb_device is None:
        return ""
    return _UNSAFE_FILENAME_CHARS.sub("_", f"{canonical_name}_{usb_device.usb_port}")


def peer_path(base: str, layout: PppLayout = DEFAULT_LAYOUT) -> Path:
    return layout.peers_dir / base


def log_path(base: str, layout: PppLayout = DEFAULT_LAYOUT) -> Path:
    return layout.log_dir / f"{LOG_PREFIX}{base}"


def chat_path(base: str, layout: PppLayout = DEFAULT_LAYOUT) -> Path:
    return layout.scripts_dir / f"chat_{base}"


def disconnect_path(base: str, layout: PppLayout = DEFAULT_LAYOUT) -> Path:
    return layout.scripts_dir / f"disconnect_{base}"


def peer_link_name(ppp_number: int) -> str:
    return f"ppp{ppp_number}"


def peer_link_path(ppp_number: int, layout: PppLayout = DEFAULT_LAYOUT) -> Path:
    return layout.peers_dir / peer_link_name(ppp_number)


def chap_secrets_path(layout: PppLayout = DEFAULT_LAYOUT) -> Path:
    return layout.ppp_dir / "chap-secrets"


def pap_secrets_path(layout: PppLayout = DEFAULT_LAYOUT) -> Path:
    return layout.ppp_dir / "pap-secrets"
