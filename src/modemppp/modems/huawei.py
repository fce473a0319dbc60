"""Huawei USB sticks and modules."""

from __future__ import annotations

from modemppp.core.models import ModemConfig
from modemppp.modems.base import STANDARD_ABORTS, ChatScript, ProfileGenerator
from modemppp.modems.catalog import GeneratorKind


class HuaweiGenerator(ProfileGenerator):
    kind = GeneratorKind.HUAWEI
    default_dial_string = "ATDT*99#"

    def family_options(self, config: ModemConfig) -> list[str]:
        return ["debug", "modem", "lock", "nocrtscts", "noccp"]

    def build_connect(self, config: ModemConfig) -> ChatScript:
        script = ChatScript()
        script.abort(*STANDARD_ABORTS)
        script.timeout(self.connect_timeout)
        script.expect_send("", "ATZ")
        script.expect_send("OK", "ATQ0 V1 E1 S0=0")
        script.expect_send("OK", "AT^SYSINFO")
        script.expect_send("OK", self.pdp_context(config))
        self.init_steps(script, config)
        script.expect_send("OK", self.dial_string(config))
        script.expect_send("CONNECT", "")
        return script

    def build_disconnect(self, config: ModemConfig) -> ChatScript:
        script = ChatScript()
        script.abort("BUSY", "ERROR")
        script.expect_send("", r"\K")
        script.expect_send("", "+++ATH0")
        script.expect_send("OK", "")
        return script
