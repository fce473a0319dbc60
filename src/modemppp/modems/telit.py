"""Telit xE910 family (HE910, LE910 and variants)."""

from __future__ import annotations

from modemppp.core.models import ModemConfig
from modemppp.modems.base import STANDARD_ABORTS, ChatScript, ProfileGenerator
from modemppp.modems.catalog import GeneratorKind


class TelitGenerator(ProfileGenerator):
    kind = GeneratorKind.TELIT
    default_dial_string = "atd*99***{profile_id}#"

    def build_connect(self, config: ModemConfig) -> ChatScript:
        script = ChatScript()
        script.abort(*STANDARD_ABORTS)
        script.timeout(self.connect_timeout)
        script.expect_send("", "+++ath")
        script.expect_send("", "AT")
        script.expect_send("OK", "AT+CSQ")
        script.expect_send("OK", self.pdp_context(config))
        self.init_steps(script, config)
        script.expect_send("OK", r"\d\d\d")
        script.expect_send("", self.dial_string(config))
        script.expect_send("CONNECT", r"\c")
        return script
