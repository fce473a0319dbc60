"""Dispatch from ``GeneratorKind`` to the generator implementing it."""

from __future__ import annotations

from typing import Callable

from modemppp.modems.base import DEFAULT_CHAT_PROGRAM, ProfileGenerator
from modemppp.modems.catalog import GeneratorKind
from modemppp.modems.huawei import HuaweiGenerator
from modemppp.modems.sierra import SierraGenerator
from modemppp.modems.telit import TelitGenerator
from modemppp.modems.ublox import UbloxGenerator

GENERATORS: dict[GeneratorKind, Callable[..., ProfileGenerator]] = {
    GeneratorKind.TELIT: TelitGenerator,
    GeneratorKind.HUAWEI: HuaweiGenerator,
    GeneratorKind.SIERRA: SierraGenerator,
    GeneratorKind.UBLOX: UbloxGenerator,
}

_missing = set(GeneratorKind) - set(GENERATORS)
if _missing:
    raise RuntimeError(f"No profile generator registered for: {sorted(kind.value for kind in _missing)}")


def create_generator(
    kind: GeneratorKind, baud_rate: int = 115200, chat_program: str = DEFAULT_CHAT_PROGRAM
) -> ProfileGenerator:
    return GENERATORS[kind](baud_rate=baud_rate, chat_program=chat_program)
