"""Configuration helpers for modemppp."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from modemppp.core.credentials import Credentials, CredentialNotFoundError, resolve_password
from modemppp.core.models import (
    AuthType,
    InterfaceSnapshot,
    Ipv4Policy,
    ModemConfig,
    ModemInterfaceSnapshot,
    NetworkConfiguration,
    UsbDevice,
)
from modemppp.wifi.models import (
    WifiBgscan,
    WifiBgscanModule,
    WifiChannel,
    WifiCiphers,
    WifiConfig,
    WifiMode,
    WifiRadioMode,
    WifiSecurity,
)
from modemppp.modems.base import DEFAULT_CHAT_PROGRAM

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_LOCAL_CONFIG = PROJECT_ROOT / "config" / "local.yml"


@dataclass(frozen=True, slots=True)
class PppLayout:
    """Directories and helper programs the PPP daemon expects."""

    ppp_dir: Path = Path("/etc/ppp")
    log_dir: Path = Path("/var/log")
    chat_program: str = DEFAULT_CHAT_PROGRAM

    @property
    def peers_dir(self) -> Path:
        return self.ppp_dir / "peers"

    @property
    def scripts_dir(self) -> Path:
        return self.ppp_dir / "scripts"

    @classmethod
    def under(cls, root: str | Path, chat_program: str = DEFAULT_CHAT_PROGRAM) -> "PppLayout":
        """Relocate the standard layout below ``root``.

        A relative ``root`` is taken from the current directory; peer files and
        their aliases always carry absolute paths.
        """

        root = Path(os.path.abspath(Path(root).expanduser()))
        return cls(ppp_dir=root / "etc" / "ppp", log_dir=root / "var" / "log", chat_program=chat_program)


DEFAULT_LAYOUT = PppLayout()


class NetworkConfigError(ValueError):
    """Raised when interfaces.yml cannot be parsed or validated."""


def load_local_config(
    config_path: str | Path | None = None, logger: logging.Logger | None = None
) -> Mapping[str, Any] | None:
    """Load local.yml if it exists and return the mapping."""

    config_file = Path(config_path) if config_path else DEFAULT_LOCAL_CONFIG
    if not config_file.is_absolute():
        config_file = PROJECT_ROOT / config_file

    if logger:
        logger.debug("loading local config from %s", config_file)

    if not config_file.exists():
        if logger:
            logger.debug("local config not found at %s", config_file)
        return None

    try:
        with config_file.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        if logger:
            logger.warning("unable to read local config file=%s reason=\"%s\"", config_file, exc)
        return None

    return data if isinstance(data, Mapping) else None


def resolve_layout(
    cli_root: str | Path | None, local_cfg: Mapping[str, Any] | None, logger: logging.Logger
) -> PppLayout:
    """Determine the PPP layout with priority: CLI > local.yml > defaults."""

    ppp_section = local_cfg.get("ppp") if isinstance(local_cfg, Mapping) else None
    if not isinstance(ppp_section, Mapping):
        ppp_section = {}

    chat_program = ppp_section.get("chat_program") or DEFAULT_LAYOUT.chat_program
    if cli_root:
        source, root = "cli", Path(cli_root).expanduser()
    elif ppp_section.get("root"):
        source, root = "local_yml", Path(str(ppp_section["root"])).expanduser()
        if not root.is_absolute():
            root = PROJECT_ROOT / root
    else:
        layout = PppLayout(chat_program=str(chat_program))
        logger.info("ppp_layout source=default ppp_dir=%s", layout.ppp_dir)
        return layout

    layout = PppLayout.under(root, chat_program=str(chat_program))
    logger.info("ppp_layout source=%s ppp_dir=%s", source, layout.ppp_dir)
    return layout


def _require_string(mapping: Mapping[str, Any], field: str, context: str) -> str:
    value = mapping.get(field)
    if value is None or value == "":
        raise NetworkConfigError(f"{context}: missing required field '{field}'.")
    if not isinstance(value, str):
        raise NetworkConfigError(f"{context}: field '{field}' must be a string.")
    return value


def _optional_int(mapping: Mapping[str, Any], field: str, default: int, context: str) -> int:
    value = mapping.get(field)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise NetworkConfigError(f"{context}: field '{field}' must be an integer.")
    return value


def _optional_bool(mapping: Mapping[str, Any], field: str, default: bool, context: str) -> bool:
    value = mapping.get(field)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise NetworkConfigError(f"{context}: field '{field}' must be a boolean.")
    return value


def _enum_value(enum_type: Any, value: Any, field: str, context: str) -> Any:
    if value is None:
        return None
    try:
        return enum_type(str(value).lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise NetworkConfigError(
            f"{context}: invalid {field} '{value}'. Allowed values: {allowed}."
        ) from None


def _parse_usb(raw_usb: Any, context: str) -> UsbDevice | None:
    if raw_usb is None:
        return None
    if not isinstance(raw_usb, Mapping):
        raise NetworkConfigError(f"{context}: usb must be a mapping.")

    vendor_id = raw_usb.get("vendor_id")
    product_id = raw_usb.get("product_id")
    for field, value in (("vendor_id", vendor_id), ("product_id", product_id)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise NetworkConfigError(f"{context}: usb {field} must be an integer.")
        if value < 0 or value > 0xFFFF:
            raise NetworkConfigError(f"{context}: usb {field} must be between 0x0000 and 0xffff.")
    port = _require_string(raw_usb, "port", f"{context} usb")
    return UsbDevice(vendor_id=vendor_id, product_id=product_id, usb_port=port)


def _parse_modem_config(
    raw_modem: Any, context: str, credentials: Credentials | None
) -> ModemConfig:
    if not isinstance(raw_modem, Mapping):
        raise NetworkConfigError(f"{context}: modem must be a mapping.")

    auth_raw = raw_modem.get("auth") or {}
    if not isinstance(auth_raw, Mapping):
        raise NetworkConfigError(f"{context}: auth must be a mapping.")
    if "password" in raw_modem or "password" in auth_raw:
        raise NetworkConfigError(
            f"{context}: password must not be stored in interfaces.yml. Use config/credentials.yml."
        )

    auth_type = _enum_value(AuthType, auth_raw.get("type", "none"), "auth type", context)
    username = ""
    password = ""
    if auth_type is not AuthType.NONE:
        username = _require_string(auth_raw, "username", f"{context} auth")
        secret_ref = _require_string(auth_raw, "secret_ref", f"{context} auth")
        try:
            password = resolve_password(secret_ref, credentials)
        except CredentialNotFoundError as exc:
            raise NetworkConfigError(f"{context}: {exc.args[0]}") from exc

    init_strings = raw_modem.get("init_strings") or []
    if not isinstance(init_strings, list) or not all(isinstance(item, str) for item in init_strings):
        raise NetworkConfigError(f"{context}: init_strings must be a list of strings.")

    policy = _enum_value(Ipv4Policy, raw_modem.get("ipv4_policy", "peer_assigned"), "ipv4_policy", context)

    return ModemConfig(
        ppp_number=_optional_int(raw_modem, "ppp_number", -1, context),
        dial_string=str(raw_modem.get("dial_string") or ""),
        apn=str(raw_modem.get("apn") or ""),
        auth_type=auth_type,
        username=username,
        password=password,
        idle=_optional_int(raw_modem, "idle", 0, context),
        lcp_echo_interval=_optional_int(raw_modem, "lcp_echo_interval", 0, context),
        lcp_echo_failure=_optional_int(raw_modem, "lcp_echo_failure", 0, context),
        persist=_optional_bool(raw_modem, "persist", False, context),
        max_fail=_optional_int(raw_modem, "max_fail", 5, context),
        holdoff=_optional_int(raw_modem, "holdoff", 1, context),
        pdp_type=str(raw_modem.get("pdp_type") or "IP"),
        profile_id=_optional_int(raw_modem, "profile_id", 1, context),
        header_compression=_optional_bool(raw_modem, "header_compression", False, context),
        data_compression=_optional_bool(raw_modem, "data_compression", False, context),
        init_strings=tuple(init_strings),
        ipv4_policy=policy,
    )


def _parse_bgscan(raw_bgscan: Any, context: str) -> WifiBgscan | None:
    if raw_bgscan is None:
        return None
    if not isinstance(raw_bgscan, Mapping):
        raise NetworkConfigError(f"{context}: bgscan must be a mapping.")
    return WifiBgscan(
        module=_enum_value(WifiBgscanModule, raw_bgscan.get("module", "none"), "bgscan module", context),
        rssi_threshold=_optional_int(raw_bgscan, "rssi_threshold", 0, context),
        short_interval=_optional_int(raw_bgscan, "short_interval", 0, context),
        long_interval=_optional_int(raw_bgscan, "long_interval", 0, context),
    )


def _parse_wifi_config(raw_wifi: Any, context: str, credentials: Credentials | None) -> WifiConfig:
    if not isinstance(raw_wifi, Mapping):
        raise NetworkConfigError(f"{context}: wifi must be a mapping.")
    if "passkey" in raw_wifi:
        raise NetworkConfigError(
            f"{context}: passkey must not be stored in interfaces.yml. Use passkey_ref and config/credentials.yml."
        )

    passkey = None
    if raw_wifi.get("passkey_ref") is not None:
        passkey_ref = _require_string(raw_wifi, "passkey_ref", context)
        try:
            passkey = resolve_password(passkey_ref, credentials)
        except CredentialNotFoundError as exc:
            raise NetworkConfigError(f"{context}: {exc.args[0]}") from exc

    channels = raw_wifi.get("channels") or []
    if not isinstance(channels, list) or not all(
        isinstance(channel, int) and not isinstance(channel, bool) for channel in channels
    ):
        raise NetworkConfigError(f"{context}: channels must be a list of integers.")

    frequencies = raw_wifi.get("channel_frequencies")
    channel_frequencies = None
    if frequencies is not None:
        if not isinstance(frequencies, list) or not all(isinstance(item, Mapping) for item in frequencies):
            raise NetworkConfigError(f"{context}: channel_frequencies must be a list of mappings.")
        channel_frequencies = tuple(
            WifiChannel(
                channel=_optional_int(item, "channel", 0, context),
                frequency=_optional_int(item, "frequency", 0, context),
            )
            for item in frequencies
        )

    def _optional_str(field: str) -> str | None:
        value = raw_wifi.get(field)
        return None if value is None else str(value)

    return WifiConfig(
        mode=_enum_value(WifiMode, raw_wifi.get("mode"), "wifi mode", context),
        ssid=_optional_str("ssid"),
        channels=tuple(channels),
        security=_enum_value(WifiSecurity, raw_wifi.get("security"), "security", context),
        pairwise_ciphers=_enum_value(WifiCiphers, raw_wifi.get("pairwise_ciphers"), "pairwise_ciphers", context),
        group_ciphers=_enum_value(WifiCiphers, raw_wifi.get("group_ciphers"), "group_ciphers", context),
        passkey=passkey,
        hw_mode=_optional_str("hw_mode"),
        radio_mode=_enum_value(WifiRadioMode, raw_wifi.get("radio_mode"), "radio_mode", context),
        bgscan=_parse_bgscan(raw_wifi.get("bgscan"), context),
        ping_access_point=_optional_bool(raw_wifi, "ping_access_point", False, context),
        ignore_ssid=_optional_bool(raw_wifi, "ignore_ssid", False, context),
        driver=_optional_str("driver"),
        country_code=_optional_str("country_code"),
        channel_frequencies=channel_frequencies,
    )


def _parse_interface(
    raw_interface: Mapping[str, Any], context: str, credentials: Credentials | None
) -> ModemInterfaceSnapshot | InterfaceSnapshot:
    name = _require_string(raw_interface, "name", context)
    context = f"{context} '{name}'"
    interface_type = _require_string(raw_interface, "type", context)
    enabled = _optional_bool(raw_interface, "enabled", True, context)

    if interface_type == "modem":
        net_configs: tuple[Any, ...] = ()
        if raw_interface.get("modem") is not None:
            net_configs = (_parse_modem_config(raw_interface["modem"], context, credentials),)
        return ModemInterfaceSnapshot(
            interface_name=name,
            enabled=enabled,
            usb_device=_parse_usb(raw_interface.get("usb"), context),
            net_configs=net_configs,
        )

    if interface_type == "wifi":
        net_configs = ()
        if raw_interface.get("wifi") is not None:
            net_configs = (_parse_wifi_config(raw_interface["wifi"], context, credentials),)
        return InterfaceSnapshot(interface_name=name, enabled=enabled, net_configs=net_configs)

    raise NetworkConfigError(f"{context}: invalid type '{interface_type}'. Allowed values: modem, wifi.")


def load_network_configuration(
    path: Path, credentials: Credentials | None = None, logger: logging.Logger | None = None
) -> NetworkConfiguration:
    """Load and validate interfaces.yml into a ``NetworkConfiguration``."""

    logger = logger or logging.getLogger(__name__)

    if not path.exists():
        raise FileNotFoundError(f"Interface inventory not found: {path}")

    with path.open("r", encoding="utf-8") as handle:
        raw_data = yaml.safe_load(handle) or {}

    if not isinstance(raw_data, dict):
        raise NetworkConfigError("Top-level interfaces.yml structure must be a mapping.")

    raw_interfaces = raw_data.get("interfaces")
    if raw_interfaces is None:
        raise NetworkConfigError("interfaces.yml must contain an 'interfaces' list.")
    if not isinstance(raw_interfaces, list):
        raise NetworkConfigError("The 'interfaces' field must be a list of interface entries.")

    interfaces: list[ModemInterfaceSnapshot | InterfaceSnapshot] = []
    seen_names: set[str] = set()

    for index, raw_interface in enumerate(raw_interfaces, start=1):
        context = f"interface #{index}"
        if not isinstance(raw_interface, dict):
            logger.error("%s: each interface must be a mapping.", context)
            continue

        log_extra = {"interface": raw_interface.get("name") or "-"}
        try:
            snapshot = _parse_interface(raw_interface, context, credentials)
        except NetworkConfigError as exc:
            logger.error("%s", exc, extra=log_extra)
            continue

        if snapshot.interface_name in seen_names:
            logger.error(
                "%s '%s': interface name must be unique. Duplicate ignored.",
                context,
                snapshot.interface_name,
                extra=log_extra,
            )
            continue

        seen_names.add(snapshot.interface_name)
        interfaces.append(snapshot)
        logger.debug(
            "interface=%s type=%s enabled=%s loaded from interfaces.yml",
            snapshot.interface_name,
            "modem" if isinstance(snapshot, ModemInterfaceSnapshot) else "wifi",
            snapshot.enabled,
            extra=log_extra,
        )

    return NetworkConfiguration(modified_interfaces=tuple(interfaces))
