"""
Flag Precedence Engine

Holds the current flag state for the observed driver and decides what the
flag display should show after every change.

Precedence, highest first:
    1. Global flag (VSC / SC / RED) - always shown, masks everything below
    2. Penalty overlay / race finish - shown when raised, own their display
    3. Local flag (GREEN / YELLOW / BLUE) or clear

Every operation emits at most one FlagSignal through the emitter and
returns it, or returns None when the display is left untouched.

Usage:
    from f1_flags.engine.flag_engine import FlagEngine
    from f1_flags.shared.types import GlobalFlag

    engine = FlagEngine(emitter)
    engine.set_global_flag(GlobalFlag.SC)   # emits "4"
    engine.clear_global_flag()              # emits "" (nothing else to show)
"""

import logging
import time
from typing import Callable, List, Optional, Sequence

from f1_flags.shared.types import FlagSignal, GlobalFlag, LocalFlag, PenaltyNotice

logger = logging.getLogger(__name__)

# How long a penalty stays on the display
PENALTY_SHOW_SECONDS = 2.0


def reconcile_local(flag: Optional[LocalFlag], penalty_active: bool,
                    finished: bool) -> Optional[FlagSignal]:
    """
    Decide what to show for a local flag when no global flag masks it.

    Returns the signal to emit, or None to leave the display as it is
    (the penalty and finish paths manage their own display).
    """
    if flag is None:
        if not penalty_active and not finished:
            return FlagSignal.CLEAR
        return None
    if flag == LocalFlag.GREEN:
        if not finished:
            return FlagSignal.for_local(flag)
        return None
    # Yellow and blue are always relevant to the driver
    return FlagSignal.for_local(flag)


class FlagEngine:
    """
    Flag state machine for a single observed driver.

    Example:
        engine = FlagEngine(emitter)
        engine.set_local_flag(LocalFlag.YELLOW)   # "2"
        engine.set_global_flag(GlobalFlag.RED)    # "12"
        engine.clear_global_flag()                # "2" again
    """

    def __init__(self, emitter=None,
                 penalty_show_seconds: float = PENALTY_SHOW_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the engine.

        Args:
            emitter: Object with a send(FlagSignal) method, or None to only
                     return decisions without transmitting them
            penalty_show_seconds: Penalty display duration
            clock: Monotonic time source (seconds)
        """
        self.emitter = emitter
        self.penalty_show_seconds = penalty_show_seconds
        self._clock = clock

        self.global_flag: Optional[GlobalFlag] = None
        self.local_flag: Optional[LocalFlag] = None
        self.race_finished = False
        self.active_penalty: Optional[PenaltyNotice] = None
        self.driver_numbers: List[int] = []

        self._signals_emitted = 0

    def reset(self):
        """Return to a fresh session. Emits nothing."""
        self.global_flag = None
        self.local_flag = None
        self.race_finished = False
        self.active_penalty = None
        self.driver_numbers = []
        logger.info("Flag state reset")

    def set_roster(self, driver_numbers: Sequence[int]):
        """Replace the race number roster (one entry per car slot)."""
        self.driver_numbers = list(driver_numbers)
        logger.debug(f"Roster updated: {self.driver_numbers}")

    def finish(self) -> Optional[FlagSignal]:
        self.race_finished = True
        if self.global_flag is None:
            return self._show(FlagSignal.finish())
        return None

    def set_penalty(self, driver_index: int) -> Optional[FlagSignal]:
        """Show a penalty for driver_index unless a global flag is out."""
        self.active_penalty = PenaltyNotice(driver_index, self._clock())
        if self.global_flag is None:
            return self._show(FlagSignal.penalty(driver_index))
        return None

    def check_penalty(self):
        """Drop the penalty overlay once it has been shown long enough."""
        if self.active_penalty is None:
            return
        if self.active_penalty.elapsed(self._clock()) > self.penalty_show_seconds:
            logger.debug(f"Penalty for car {self.active_penalty.driver_index} expired")
            self.active_penalty = None

    def set_global_flag(self, flag: GlobalFlag) -> Optional[FlagSignal]:
        return self._set_global_flag_value(flag)

    def clear_global_flag(self) -> Optional[FlagSignal]:
        return self._set_global_flag_value(None)

    def set_local_flag(self, flag: LocalFlag) -> Optional[FlagSignal]:
        return self._set_local_flag_value(flag)

    def clear_local_flag(self) -> Optional[FlagSignal]:
        return self._set_local_flag_value(None)

    def _set_global_flag_value(self, flag: Optional[GlobalFlag]) -> Optional[FlagSignal]:
        self.check_penalty()
        if self.global_flag == flag:
            return None

        self.global_flag = flag

        if flag is not None:
            return self._show(FlagSignal.for_global(flag))

        # Clearing reveals whatever local state was masked
        return self._show_local(self.local_flag)

    def _set_local_flag_value(self, flag: Optional[LocalFlag]) -> Optional[FlagSignal]:
        self.check_penalty()
        if self.local_flag == flag:
            return None

        self.local_flag = flag

        if self.global_flag is not None:
            return None

        return self._show_local(flag)

    def _show_local(self, flag: Optional[LocalFlag]) -> Optional[FlagSignal]:
        signal = reconcile_local(
            flag,
            self.active_penalty is not None,
            self.race_finished,
        )
        if signal is None:
            return None
        return self._show(signal)

    def _show(self, signal: FlagSignal) -> FlagSignal:
        logger.info(f"Showing {signal}")
        self._signals_emitted += 1
        if self.emitter is not None:
            self.emitter.send(signal)
        return signal

    @property
    def stats(self) -> dict:
        """Return engine statistics."""
        return {
            'signals_emitted': self._signals_emitted,
            'global_flag': self.global_flag.name if self.global_flag is not None else None,
            'local_flag': self.local_flag.name if self.local_flag is not None else None,
            'race_finished': self.race_finished,
            'penalty_active': self.active_penalty is not None,
        }
