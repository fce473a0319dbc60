"""Sierra Wireless MC87xx modules and USB cards."""

from __future__ import annotations

from modemppp.core.models import ModemConfig
from modemppp.modems.base import STANDARD_ABORTS, ChatScript, ProfileGenerator
from modemppp.modems.catalog import GeneratorKind


class SierraGenerator(ProfileGenerator):
    kind = GeneratorKind.SIERRA

    def family_options(self, config: ModemConfig) -> list[str]:
        return ["debug", "modem", "lock", "crtscts", "noccp", "nopcomp", "noaccomp"]

    def build_connect(self, config: ModemConfig) -> ChatScript:
        script = ChatScript()
        script.abort(*STANDARD_ABORTS)
        script.report("CONNECT")
        script.timeout(self.connect_timeout)
        script.expect_send("", "AT")
        script.expect_send("OK", "ATE0V1&F&D2&C1S0=0")
        script.expect_send("OK", "AT!GSTATUS?")
        script.expect_send("OK", "AT+CSQ")
        script.expect_send("OK", self.pdp_context(config))
        self.init_steps(script, config)
        script.expect_send("OK", self.dial_string(config))
        script.expect_send("CONNECT", r"\c")
        return script
