"""Reading and merging ``/etc/ppp/{chap,pap}-secrets``.

The files hold one credential per line as ``client server secret addresses``.
Comments, blank lines and any line that is not touched by a merge are kept
byte-for-byte, so ``parse(text).render() == text`` for every input.
"""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass, field

_NEEDS_QUOTING = re.compile(r"[\s#\"'\\]")


def _quote(value: str) -> str:
    if value and not _NEEDS_QUOTING.search(value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass(frozen=True, slots=True)
class SecretsEntry:
    """One credential; ``(client, server)`` identifies it within a file."""

    client: str
    server: str
    secret: str = field(repr=False)
    addresses: str = "*"

    @property
    def key(self) -> tuple[str, str]:
        return (self.client, self.server)

    def render(self) -> str:
        columns = [_quote(self.client), _quote(self.server), _quote(self.secret)]
        if self.addresses:
            columns.append(self.addresses)
        return " ".join(columns)


@dataclass(slots=True)
class SecretsLine:
    raw: str
    entry: SecretsEntry | None = None


def _parse_line(raw: str) -> SecretsLine:
    stripped = raw.strip()
    if not stripped or stripped.startswith("#"):
        return SecretsLine(raw=raw)
    try:
        tokens = shlex.split(stripped, comments=True)
    except ValueError:
        return SecretsLine(raw=raw)
    if len(tokens) < 3:
        return SecretsLine(raw=raw)
    client, server, secret, *addresses = tokens
    return SecretsLine(raw=raw, entry=SecretsEntry(client, server, secret, " ".join(addresses)))


@dataclass(slots=True)
class SecretsDocument:
    """Parsed secrets file preserving every original line."""

    lines: list[SecretsLine] = field(default_factory=list)
    trailing_newline: bool = True

    @classmethod
    def parse(cls, text: str) -> "SecretsDocument":
        if not text:
            return cls(lines=[], trailing_newline=True)
        trailing_newline = text.endswith("\n")
        body = text[:-1] if trailing_newline else text
        return cls(lines=[_parse_line(raw) for raw in body.split("\n")], trailing_newline=trailing_newline)

    def render(self) -> str:
        if not self.lines:
            return ""
        text = "\n".join(line.raw for line in self.lines)
        return text + "\n" if self.trailing_newline else text

    def entries(self) -> list[SecretsEntry]:
        return [line.entry for line in self.lines if line.entry is not None]

    def find(self, client: str, server: str) -> SecretsEntry | None:
        for entry in self.entries():
            if entry.key == (client, server):
                return entry
        return None

    def upsert(self, entry: SecretsEntry) -> bool:
        """Insert or overwrite ``entry``; return True when the document changed.

        The first line with the same ``(client, server)`` is rewritten in place
        and later duplicates of that key are dropped.
        """

        changed = False
        kept: list[SecretsLine] = []
        found = False
        for line in self.lines:
            if line.entry is None or line.entry.key != entry.key:
                kept.append(line)
                continue
            if found:
                changed = True
                continue
            found = True
            if line.entry == entry:
                kept.append(line)
            else:
                kept.append(SecretsLine(raw=entry.render(), entry=entry))
                changed = True

        if not found:
            kept.append(SecretsLine(raw=entry.render(), entry=entry))
            changed = True

        self.lines = kept
        return changed


def merge_secrets(text: str, entries: list[SecretsEntry]) -> tuple[str, bool]:
    """Merge ``entries`` into secrets file ``text``; return the new text and a changed flag."""

    document = SecretsDocument.parse(text)
    changed = False
    for entry in entries:
        changed = document.upsert(entry) or changed
    return document.render(), changed
