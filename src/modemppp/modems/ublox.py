"""u-blox TOBY and SARA modules."""

from __future__ import annotations

from modemppp.core.models import ModemConfig
from modemppp.modems.base import STANDARD_ABORTS, ChatScript, ProfileGenerator
from modemppp.modems.catalog import GeneratorKind


class UbloxGenerator(ProfileGenerator):
    kind = GeneratorKind.UBLOX

    def family_options(self, config: ModemConfig) -> list[str]:
        return ["debug", "modem", "lock", "nocrtscts"]

    def build_connect(self, config: ModemConfig) -> ChatScript:
        script = ChatScript()
        script.abort(*STANDARD_ABORTS)
        script.timeout(self.connect_timeout)
        script.expect_send("", "AT")
        script.expect_send("OK", "ATE1")
        script.expect_send("OK", "AT+CSQ")
        script.expect_send("OK", "AT+COPS=0")
        script.expect_send("OK", self.pdp_context(config))
        self.init_steps(script, config)
        script.expect_send("OK", self.dial_string(config))
        script.expect_send("CONNECT", r"\c")
        return script

    def build_disconnect(self, config: ModemConfig) -> ChatScript:
        script = super().build_disconnect(config)
        script.expect_send("OK", f"AT+CGACT=0,{config.profile_id}")
        return script
