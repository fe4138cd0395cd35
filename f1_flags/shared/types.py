"""
Shared type definitions for F1 Flag Relay.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class GlobalFlag(IntEnum):
    """
    Session-wide flag, ordered by severity (VSC < SC < RED).

    A global flag overrides everything the driver would otherwise see.
    """

    VSC = 0
    SC = 1
    RED = 2


class LocalFlag(IntEnum):
    """Flag shown to the observed driver only."""

    GREEN = 0
    YELLOW = 1
    BLUE = 2


# Codes understood by the flag display
GLOBAL_FLAG_CODES = {
    GlobalFlag.VSC: 5,
    GlobalFlag.SC: 4,
    GlobalFlag.RED: 12,
}

LOCAL_FLAG_CODES = {
    LocalFlag.GREEN: 1,
    LocalFlag.YELLOW: 2,
    LocalFlag.BLUE: 8,
}

PENALTY_CODE = 11
FINISH_CODE = 16


@dataclass(frozen=True)
class FlagSignal:
    """
    One command for the flag display.

    Wire format is UTF-8 text:
        "12"     plain code
        "11,3"   code plus driver index (penalties)
        ""       clear the display

    A signal without a code is the "clear" command.
    """

    code: Optional[int] = None
    driver_index: Optional[int] = None

    @classmethod
    def for_global(cls, flag: GlobalFlag) -> 'FlagSignal':
        return cls(code=GLOBAL_FLAG_CODES[flag])

    @classmethod
    def for_local(cls, flag: Optional[LocalFlag]) -> 'FlagSignal':
        """Local flag signal; no flag means clear."""
        if flag is None:
            return cls()
        return cls(code=LOCAL_FLAG_CODES[flag])

    @classmethod
    def penalty(cls, driver_index: int) -> 'FlagSignal':
        return cls(code=PENALTY_CODE, driver_index=driver_index)

    @classmethod
    def finish(cls) -> 'FlagSignal':
        return cls(code=FINISH_CODE)

    @property
    def is_clear(self) -> bool:
        return self.code is None

    def encode(self) -> str:
        """Encode to the text command sent to the display."""
        if self.code is None:
            return ""
        if self.driver_index is None:
            return str(self.code)
        return f"{self.code},{self.driver_index}"

    def to_bytes(self) -> bytes:
        """Pack signal into bytes for UDP transmission."""
        return self.encode().encode('utf-8')

    def __str__(self):
        if self.is_clear:
            return "FlagSignal(clear)"
        return f"FlagSignal({self.encode()})"


# Explicit "show nothing" command
FlagSignal.CLEAR = FlagSignal()


@dataclass(frozen=True)
class PenaltyNotice:
    """
    Penalty currently on display.

    Attributes:
        driver_index: Car slot of the penalised driver
        raised_at: Monotonic time (seconds) the penalty was received
    """

    driver_index: int
    raised_at: float

    def elapsed(self, now: float) -> float:
        """Seconds this penalty has been on display."""
        return now - self.raised_at
