"""Apply a network configuration snapshot to the PPP configuration tree."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path

from modemppp.common.run_summary import ApplyResult, InterfaceResult, Outcome
from modemppp.core import paths
from modemppp.core.config import DEFAULT_LAYOUT, PppLayout
from modemppp.core.models import ModemInterfaceSnapshot, NetworkConfiguration
from modemppp.core.storage import ensure_directory, find_aliases
from modemppp.modems.catalog import DEFAULT_CATALOG, ModemCatalog
from modemppp.modems.registry import create_generator
from modemppp.ppp.writer import ArtifactWriteError, ArtifactWriter, LinkUpdateError

# TODO: use ModemDescriptor.default_baud once per-family rates are verified on hardware.
USB_MODEM_BAUD_RATE = 921600


class ReconfigurationDriver:
    """Write PPP peer artifacts for every modem interface in a snapshot.

    The PPP daemon must not be running while ``apply`` executes. Interfaces are
    processed in snapshot order and a failure on one does not stop the others.
    """

    def __init__(
        self,
        layout: PppLayout = DEFAULT_LAYOUT,
        catalog: ModemCatalog = DEFAULT_CATALOG,
        writer: ArtifactWriter | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.layout = layout
        self.catalog = catalog
        self.logger = logger or logging.getLogger(__name__)
        self.writer = writer or ArtifactWriter(self.logger)
        self.create_system_folders()

    def create_system_folders(self) -> None:
        for directory in (self.layout.peers_dir, self.layout.scripts_dir):
            if directory.is_dir():
                continue
            try:
                ensure_directory(directory)
            except OSError as exc:
                self.logger.warning("Could not create directory %s reason=\"%s\"", directory, exc)
            else:
                self.logger.debug("Created directory: %s", directory)

    def apply(self, configuration: NetworkConfiguration) -> ApplyResult:
        """Write artifacts for each modified modem interface.

        Returns the per-interface outcomes together with a new configuration in
        which interfaces with a unit number are renamed to ``ppp<N>``.
        """

        result = ApplyResult(configuration=configuration)
        updated = []
        for snapshot in configuration.modified_interfaces:
            if not isinstance(snapshot, ModemInterfaceSnapshot):
                updated.append(snapshot)
                continue
            interface_result, snapshot = self._write_config(snapshot)
            result.add(interface_result)
            updated.append(snapshot)

        result.configuration = NetworkConfiguration(modified_interfaces=tuple(updated))
        return result

    def _write_config(
        self, snapshot: ModemInterfaceSnapshot
    ) -> tuple[InterfaceResult, ModemInterfaceSnapshot]:
        old_name = snapshot.interface_name
        log_extra = {"interface": old_name}

        if not snapshot.enabled:
            self.logger.info("Interface disabled - not overwriting ppp configuration.", extra=log_extra)
            return InterfaceResult(old_name, Outcome.DISABLED), snapshot

        modem_config = snapshot.modem_config()
        if modem_config is None:
            self.logger.warning("Skipping interface without modem configuration.", extra=log_extra)
            return InterfaceResult(old_name, Outcome.MISSING_CONFIG), snapshot

        descriptor = self.catalog.lookup(snapshot.usb_device)
        base = paths.base_name(descriptor.canonical_name if descriptor else None, snapshot.usb_device)
        if descriptor is None or not base:
            self.logger.warning("Skipping unsupported modem usb=%s", snapshot.usb_device, extra=log_extra)
            return InterfaceResult(old_name, Outcome.UNKNOWN_MODEM), snapshot

        ppp_number = modem_config.ppp_number
        new_name = old_name
        if ppp_number >= 0:
            new_name = paths.peer_link_name(ppp_number)
            snapshot = dataclasses.replace(snapshot, interface_name=new_name)
            log_extra = {"interface": new_name}

        peer_path = paths.peer_path(base, self.layout)
        chat_path = paths.chat_path(base, self.layout)
        disconnect_path = paths.disconnect_path(base, self.layout)
        link_path = paths.peer_link_path(ppp_number, self.layout) if ppp_number >= 0 else None

        result = InterfaceResult(
            interface_name=new_name,
            outcome=Outcome.SUCCESS,
            previous_name=old_name if old_name != new_name else None,
            peer_path=str(peer_path),
            link_path=str(link_path) if link_path else None,
        )

        try:
            removed = self.remove_stale_links(old_name, new_name, peer_path, link_path, log_extra)
        except OSError as exc:
            self.logger.error("Could not remove old symlinks to %s reason=\"%s\"", peer_path, exc, extra=log_extra)
            result.outcome = Outcome.IO_FAILURE
            result.error = str(exc)
            return result, snapshot
        result.removed_links = [str(path) for path in removed]

        generator = create_generator(
            descriptor.generator_kind, baud_rate=descriptor.default_baud, chat_program=self.layout.chat_program
        )
        self.logger.debug(
            "Writing connect scripts for ppp%s using %s", ppp_number, type(generator).__name__, extra=log_extra
        )
        peer = generator.build_peer(
            descriptor.canonical_name,
            modem_config,
            paths.log_path(base, self.layout),
            chat_path,
            disconnect_path,
        )
        peer.baud_rate = USB_MODEM_BAUD_RATE
        connect = generator.build_connect(modem_config)
        disconnect = generator.build_disconnect(modem_config)

        try:
            self.writer.write_all(
                peer,
                connect,
                disconnect,
                peer_path,
                chat_path,
                disconnect_path,
                paths.chap_secrets_path(self.layout),
                paths.pap_secrets_path(self.layout),
                link_path=link_path,
                log_extra=log_extra,
            )
        except LinkUpdateError as exc:
            self.logger.error("Peer file written but link update failed: %s", exc, extra=log_extra)
            result.outcome = Outcome.LINK_UPDATE_FAILURE
            result.error = str(exc)
            return result, snapshot
        except ArtifactWriteError as exc:
            self.logger.error("Could not write modem config: %s", exc, extra=log_extra)
            result.outcome = Outcome.IO_FAILURE
            result.error = str(exc)
            return result, snapshot

        if link_path is None:
            self.logger.error(
                "Can't create symbolic link to %s, invalid ppp number: %s", peer_path, ppp_number, extra=log_extra
            )
            result.outcome = Outcome.INVALID_UNIT_NUMBER
            return result, snapshot

        self.logger.info("ppp configuration written peer=%s link=%s", peer_path, link_path, extra=log_extra)
        return result, snapshot

    def remove_stale_links(
        self,
        old_name: str,
        new_name: str,
        peer_path: Path,
        keep: Path | None,
        log_extra: dict | None = None,
    ) -> list[Path]:
        """Delete aliases in the peers directory that resolve to ``peer_path``.

        ``keep`` (the alias for the current unit number) is left in place. Aliases
        are swept both on interface rename and on a unit number change that kept
        the interface name.
        """

        log_extra = log_extra or {}
        stale = [alias for alias in find_aliases(self.layout.peers_dir, peer_path) if alias != keep]
        if not stale:
            return []

        if old_name != new_name:
            self.logger.debug("Removing old symlinks to %s", peer_path, extra=log_extra)
        else:
            self.logger.debug("Unit number changed, removing old symlinks to %s", peer_path, extra=log_extra)
        for alias in stale:
            self.logger.debug("Deleting %s", alias, extra=log_extra)
            alias.unlink()
        return stale
