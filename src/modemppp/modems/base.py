"""Building blocks shared by every modem profile generator.

A generator turns a ``ModemConfig`` into three artifacts: the pppd peer
options (``PeerFile``), the connect chat script and the disconnect chat
script (both ``ChatScript``). Directives common to all families are produced
here; family modules only add their AT dialogue and a few peer options.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from modemppp.core.models import AuthType, Ipv4Policy, ModemConfig
from modemppp.core.secrets import SecretsEntry
from modemppp.modems.catalog import GeneratorKind

DEFAULT_CHAT_PROGRAM = "/usr/sbin/chat"

STANDARD_ABORTS: tuple[str, ...] = (
    "BUSY",
    "VOICE",
    "NO CARRIER",
    "NO DIALTONE",
    "NO DIAL TONE",
    "ERROR",
)


def quote(token: str) -> str:
    """Quote a chat token; embedded double quotes are backslash-escaped."""

    return '"' + token.replace('"', '\\"') + '"'


@dataclass(slots=True)
class PeerFile:
    """pppd options file for one modem."""

    device_id: str
    baud_rate: int
    log_path: Path
    chat_path: Path
    disconnect_path: Path
    auth_type: AuthType = AuthType.NONE
    username: str = ""
    password: str = field(default="", repr=False)
    options: list[str] = field(default_factory=list)
    chat_program: str = DEFAULT_CHAT_PROGRAM

    def auth_directives(self) -> list[str]:
        if self.auth_type is AuthType.NONE:
            return ["noauth"]

        directives = [f"user {quote(self.username)}"]
        if self.auth_type is AuthType.PAP:
            directives += ["require-pap", "refuse-chap"]
        elif self.auth_type is AuthType.CHAP:
            directives += ["require-chap", "refuse-pap"]
        return directives

    def secrets(self) -> dict[AuthType, SecretsEntry]:
        """Secrets entries this peer relies on, keyed by secrets file."""

        if self.auth_type is AuthType.NONE:
            return {}
        entry = SecretsEntry(client=self.username, server="*", secret=self.password, addresses="*")
        if self.auth_type is AuthType.EITHER:
            return {AuthType.CHAP: entry, AuthType.PAP: entry}
        return {self.auth_type: entry}

    def directives(self) -> list[str]:
        lines = [
            f"# {self.device_id}",
            str(self.baud_rate),
            f"logfile {self.log_path}",
            f"connect {quote(f'{self.chat_program} -v -f {self.chat_path}')}",
            f"disconnect {quote(f'{self.chat_program} -v -f {self.disconnect_path}')}",
        ]
        lines += self.auth_directives()
        lines += self.options
        return lines

    def render(self) -> str:
        return "\n".join(self.directives()) + "\n"


@dataclass(slots=True)
class ChatScript:
    """``chat(8)`` program as an ordered list of expect/send pairs."""

    lines: list[tuple[str, str]] = field(default_factory=list)

    def abort(self, *strings: str) -> "ChatScript":
        for value in strings:
            self.lines.append(("ABORT", quote(value)))
        return self

    def timeout(self, seconds: int) -> "ChatScript":
        self.lines.append(("TIMEOUT", str(seconds)))
        return self

    def report(self, value: str) -> "ChatScript":
        self.lines.append(("REPORT", quote(value)))
        return self

    def expect_send(self, expect: str, send: str) -> "ChatScript":
        self.lines.append((quote(expect), quote(send)))
        return self

    def render(self) -> str:
        return "".join(f"{expect}\t{send}\n" for expect, send in self.lines)


class ProfileGenerator(ABC):
    """Base class for modem family generators."""

    kind: GeneratorKind
    default_dial_string = "ATD*99***{profile_id}#"
    connect_timeout = 45

    def __init__(self, baud_rate: int = 115200, chat_program: str = DEFAULT_CHAT_PROGRAM) -> None:
        self.baud_rate = baud_rate
        self.chat_program = chat_program

    def build_peer(
        self,
        device_id: str,
        config: ModemConfig,
        log_path: Path,
        chat_path: Path,
        disconnect_path: Path,
    ) -> PeerFile:
        peer = PeerFile(
            device_id=device_id,
            baud_rate=self.baud_rate,
            log_path=log_path,
            chat_path=chat_path,
            disconnect_path=disconnect_path,
            auth_type=config.auth_type,
            username=config.username,
            password=config.password,
            chat_program=self.chat_program,
        )
        peer.options = self.family_options(config) + common_options(config)
        return peer

    def family_options(self, config: ModemConfig) -> list[str]:
        return ["debug", "modem", "lock", "crtscts"]

    def dial_string(self, config: ModemConfig) -> str:
        if config.dial_string:
            return config.dial_string
        return self.default_dial_string.format(profile_id=config.profile_id)

    def pdp_context(self, config: ModemConfig) -> str:
        return f'AT+CGDCONT={config.profile_id},"{config.pdp_type}","{config.apn}"'

    @abstractmethod
    def build_connect(self, config: ModemConfig) -> ChatScript:
        """Return the chat script that brings the data call up."""

    def build_disconnect(self, config: ModemConfig) -> ChatScript:
        script = ChatScript()
        script.abort("BUSY", "ERROR", "NO DIALTONE")
        script.expect_send("", r"BREAK\c")
        script.expect_send("", "+++ATH")
        script.expect_send("NO CARRIER", "")
        return script

    def init_steps(self, script: ChatScript, config: ModemConfig) -> None:
        for init_string in config.init_strings:
            script.expect_send("OK", init_string)


def common_options(config: ModemConfig) -> list[str]:
    """Peer directives every modem family shares."""

    options: list[str] = []
    if config.ipv4_policy is Ipv4Policy.PEER_ASSIGNED:
        options += ["noipdefault", "ipcp-accept-local", "ipcp-accept-remote"]
    options += ["defaultroute", "usepeerdns"]

    if not config.header_compression:
        options += ["novj", "novjccomp"]
    if not config.data_compression:
        options += ["nobsdcomp", "nodeflate"]

    if config.lcp_echo_interval > 0:
        options.append(f"lcp-echo-interval {config.lcp_echo_interval}")
    if config.lcp_echo_failure > 0:
        options.append(f"lcp-echo-failure {config.lcp_echo_failure}")

    if config.persist:
        options += ["persist", f"holdoff {config.holdoff}", f"maxfail {config.max_fail}"]
    else:
        options.append(f"maxfail {config.max_fail}")

    if config.idle > 0:
        options.append(f"idle {config.idle}")
    return options
