"""Render PPP artifacts and install them on disk."""

from __future__ import annotations

import logging
from pathlib import Path

from modemppp.core.models import AuthType
from modemppp.core.secrets import merge_secrets
from modemppp.core.storage import FileTransaction, read_text_if_exists, replace_symlink
from modemppp.modems.base import ChatScript, PeerFile

PEER_MODE = 0o644
SCRIPT_MODE = 0o755
SECRETS_MODE = 0o600

# Secrets files are shared with other tools and may hold non UTF-8 bytes.
SECRETS_ERRORS = "surrogateescape"


class ArtifactWriteError(OSError):
    """Raised when an artifact cannot be rendered or installed."""

    def __init__(self, path: Path, reason: BaseException) -> None:
        super().__init__(f"Unable to write {path}: {reason}")
        self.path = path
        self.reason = reason


class LinkUpdateError(OSError):
    """Raised when the peer file is in place but its ``pppN`` alias is not."""

    def __init__(self, link_path: Path, reason: BaseException) -> None:
        super().__init__(f"Unable to update link {link_path}: {reason}")
        self.link_path = link_path
        self.reason = reason


class ArtifactWriter:
    """Install peer, chat, disconnect and secrets files for one modem."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def write_all(
        self,
        peer: PeerFile,
        chat: ChatScript,
        disconnect: ChatScript,
        peer_path: Path,
        chat_path: Path,
        disconnect_path: Path,
        chap_path: Path,
        pap_path: Path,
        link_path: Path | None = None,
        log_extra: dict | None = None,
    ) -> bool:
        """Write every artifact; return True when ``link_path`` was (re)created.

        Raises ``ArtifactWriteError`` if any file could not be installed, in
        which case no destination has changed. Raises ``LinkUpdateError`` if
        only the alias update failed.
        """

        log_extra = log_extra or {}
        rendered = [
            (peer_path, peer.render(), PEER_MODE),
            (chat_path, chat.render(), SCRIPT_MODE),
            (disconnect_path, disconnect.render(), SCRIPT_MODE),
        ]
        secrets_paths = {AuthType.CHAP: chap_path, AuthType.PAP: pap_path}

        with FileTransaction() as transaction:
            current = peer_path
            try:
                for current, content, mode in rendered:
                    self.logger.debug("Writing %s", current, extra=log_extra)
                    transaction.stage(current, content, mode)

                for kind, entry in peer.secrets().items():
                    current = secrets_paths[kind]
                    existing = read_text_if_exists(current, errors=SECRETS_ERRORS)
                    merged, changed = merge_secrets(existing or "", [entry])
                    if not changed and existing is not None:
                        self.logger.debug("secrets up to date path=%s", current, extra=log_extra)
                        continue
                    self.logger.debug("Writing %s", current, extra=log_extra)
                    transaction.stage(current, merged, SECRETS_MODE, errors=SECRETS_ERRORS)

                transaction.commit()
            except (OSError, UnicodeError) as exc:
                failed = transaction.failed_destination or current
                raise ArtifactWriteError(failed, exc) from exc

        if link_path is None:
            return False
        return self.update_link(peer_path, link_path, log_extra)

    def update_link(self, peer_path: Path, link_path: Path, log_extra: dict | None = None) -> bool:
        log_extra = log_extra or {}
        try:
            created = replace_symlink(peer_path, link_path)
        except OSError as exc:
            raise LinkUpdateError(link_path, exc) from exc

        if created:
            self.logger.debug("linked %s -> %s", link_path, peer_path, extra=log_extra)
        return created
