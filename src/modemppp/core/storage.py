"""Storage helpers for writing PPP artifacts to disk."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_MARKER = ".tmp."
BACKUP_MARKER = ".bak."


def ensure_directory(path: Path) -> Path:
    """Ensure the target directory exists and return it."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def read_text_if_exists(path: Path, errors: str = "strict") -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors=errors)
    except FileNotFoundError:
        return None


def remove_stale_temp_files(destination: Path) -> list[Path]:
    """Delete ``<dest>.tmp.*`` and ``<dest>.bak.*`` left behind by an interrupted run."""

    removed: list[Path] = []
    if not destination.parent.is_dir():
        return removed
    for marker in (TEMP_MARKER, BACKUP_MARKER):
        for leftover in destination.parent.glob(f"{destination.name}{marker}*"):
            leftover.unlink(missing_ok=True)
            removed.append(leftover)
    return removed


@dataclass(slots=True)
class StagedFile:
    destination: Path
    temp_path: Path
    backup_path: Path | None = None
    committed: bool = False


class FileTransaction:
    """Replace a group of files so that either all or none of them change.

    Each file is first written to a sibling ``<dest>.tmp.<rand>`` with its
    final mode and fsynced. ``commit`` renames the temp files over their
    destinations in staging order; when a rename fails, destinations already
    replaced are restored from hard-link backups taken just before the rename.
    """

    def __init__(self) -> None:
        self._staged: list[StagedFile] = []
        self.failed_destination: Path | None = None

    def __enter__(self) -> "FileTransaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.discard()

    def stage(self, destination: Path, content: str, mode: int, errors: str = "strict") -> Path:
        """Write ``content`` to a temp file next to ``destination``.

        ``errors`` is passed to the encoder; use ``surrogateescape`` for text
        read back with the same handler so undecodable bytes survive unchanged.
        """

        remove_stale_temp_files(destination)
        fd, temp_name = tempfile.mkstemp(prefix=f"{destination.name}{TEMP_MARKER}", dir=destination.parent)
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", errors=errors, newline="\n") as handle:
                handle.write(content)
                handle.flush()
                os.fchmod(handle.fileno(), mode)
                os.fsync(handle.fileno())
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

        self._staged.append(StagedFile(destination=destination, temp_path=temp_path))
        logger.debug("staged path=%s temp=%s mode=%o", destination, temp_path.name, mode)
        return temp_path

    def commit(self) -> None:
        try:
            for item in self._staged:
                self.failed_destination = item.destination
                item.backup_path = _preserve(item.destination)
                try:
                    os.replace(item.temp_path, item.destination)
                except OSError:
                    if item.backup_path is not None:
                        item.backup_path.unlink(missing_ok=True)
                        item.backup_path = None
                    raise
                item.committed = True
            self.failed_destination = None
        except OSError:
            self._rollback()
            raise

        for item in self._staged:
            if item.backup_path is not None:
                item.backup_path.unlink(missing_ok=True)
        self._staged.clear()

    def discard(self) -> None:
        """Remove temp files that were never committed."""

        for item in self._staged:
            if not item.committed:
                item.temp_path.unlink(missing_ok=True)
        self._staged.clear()

    def _rollback(self) -> None:
        for item in reversed(self._staged):
            if not item.committed:
                continue
            try:
                if item.backup_path is not None:
                    os.replace(item.backup_path, item.destination)
                else:
                    item.destination.unlink(missing_ok=True)
            except OSError as exc:
                logger.error("rollback failed path=%s reason=\"%s\"", item.destination, exc)
            else:
                logger.debug("rolled back path=%s", item.destination)
            item.committed = False
            item.backup_path = None
        self.discard()


def _preserve(destination: Path) -> Path | None:
    """Keep the current content of ``destination`` reachable under a backup name."""

    if not destination.is_file():
        return None
    backup = destination.with_name(f"{destination.name}{BACKUP_MARKER}{uuid.uuid4().hex[:8]}")
    try:
        os.link(destination, backup)
    except OSError:
        shutil.copy2(destination, backup)
    return backup


def resolve_link_target(link: Path) -> Path:
    """Return the normalised absolute target of symlink ``link``."""

    target = Path(os.readlink(link))
    if not target.is_absolute():
        target = link.parent / target
    return Path(os.path.normpath(target))


def find_aliases(directory: Path, target: Path) -> list[Path]:
    """List symlinks in ``directory`` that point at ``target``."""

    if not directory.is_dir():
        return []
    normalized_target = Path(os.path.normpath(target))
    aliases: list[Path] = []
    for entry in sorted(directory.iterdir()):
        if entry == normalized_target or not entry.is_symlink():
            continue
        if resolve_link_target(entry) == normalized_target:
            aliases.append(entry)
    return aliases


def replace_symlink(target: Path, link: Path) -> bool:
    """Point ``link`` at absolute ``target``; return False when it already does."""

    target = Path(os.path.abspath(target))
    if link.is_symlink():
        if resolve_link_target(link) == target and Path(os.readlink(link)).is_absolute():
            return False
        link.unlink()
    elif link.exists():
        if link.is_dir():
            raise IsADirectoryError(f"Refusing to replace directory with symlink: {link}")
        link.unlink()

    os.symlink(str(target), link)
    return True
