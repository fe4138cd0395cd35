"""
Event Router

Feeds decoded telemetry events into the FlagEngine.

    ParticipantsEvent         -> set_roster()
    SafetyCarEvent            -> set/clear global flag (see safety_car_flag)
    PenaltyEvent              -> set_penalty()
    ChequeredFlagEvent        -> finish()
    RedFlagEvent              -> set_global_flag(RED)
    Session start/end         -> reset()
    FinalClassificationEvent  -> reset()
    CarStatusEvent            -> local flag of the player's car
"""

import logging
from typing import Optional

from f1_flags.engine.flag_engine import FlagEngine
from f1_flags.shared.errors import ContractViolation
from f1_flags.shared.types import FlagSignal, GlobalFlag, LocalFlag
from f1_flags.telemetry.events import (
    CarStatusEvent,
    ChequeredFlagEvent,
    FinalClassificationEvent,
    ParticipantsEvent,
    PenaltyEvent,
    RedFlagEvent,
    SafetyCarEvent,
    SessionEndedEvent,
    SessionStartedEvent,
    VehicleFiaFlag,
)

logger = logging.getLogger(__name__)

# safety_car_type
SC_TYPE_NONE = 0
SC_TYPE_FULL = 1
SC_TYPE_VIRTUAL = 2
SC_TYPE_FORMATION_LAP = 3

# event_type
SC_EVENT_DEPLOYED = 0
SC_EVENT_RETURNING = 1
SC_EVENT_RETURNED = 2
SC_EVENT_RESUME_RACE = 3

LOCAL_FLAGS = {
    VehicleFiaFlag.GREEN: LocalFlag.GREEN,
    VehicleFiaFlag.BLUE: LocalFlag.BLUE,
    VehicleFiaFlag.YELLOW: LocalFlag.YELLOW,
}


def safety_car_flag(safety_car_type: int, event_type: int) -> Optional[GlobalFlag]:
    """
    Map a safety car (type, event) pair to the global flag it implies.

    Returns None when the safety car is gone, SC or VSC while it is out.
    Raises ContractViolation for pairs the game never sends.
    """
    on_track = (SC_EVENT_DEPLOYED, SC_EVENT_RETURNING)

    if (safety_car_type == SC_TYPE_NONE
            or event_type in (SC_EVENT_RETURNED, SC_EVENT_RESUME_RACE)):
        return None
    if safety_car_type in (SC_TYPE_FULL, SC_TYPE_FORMATION_LAP) and event_type in on_track:
        return GlobalFlag.SC
    if safety_car_type == SC_TYPE_VIRTUAL and event_type in on_track:
        return GlobalFlag.VSC

    raise ContractViolation(
        f"Unexpected safety car state: type={safety_car_type}, event={event_type}"
    )


class EventRouter:
    """
    Dispatches telemetry events to a FlagEngine.

    Example:
        router = EventRouter(FlagEngine(emitter))
        event = parser.parse(data)
        if event is not None:
            router.route(event)
    """

    def __init__(self, engine: FlagEngine):
        self.engine = engine
        self._events_routed = 0

    def route(self, event) -> Optional[FlagSignal]:
        """
        Apply one event to the engine.

        Returns the signal the engine emitted, if any.
        """
        self._events_routed += 1

        if isinstance(event, ParticipantsEvent):
            self.engine.set_roster(event.race_numbers)
            return None

        if isinstance(event, SafetyCarEvent):
            flag = safety_car_flag(event.safety_car_type, event.event_type)
            if flag is None:
                return self.engine.clear_global_flag()
            return self.engine.set_global_flag(flag)

        if isinstance(event, PenaltyEvent):
            return self.engine.set_penalty(event.vehicle_index)

        if isinstance(event, ChequeredFlagEvent):
            return self.engine.finish()

        if isinstance(event, RedFlagEvent):
            return self.engine.set_global_flag(GlobalFlag.RED)

        if isinstance(event, (SessionStartedEvent, SessionEndedEvent, FinalClassificationEvent)):
            self.engine.reset()
            return None

        if isinstance(event, CarStatusEvent):
            return self._route_car_status(event)

        logger.debug(f"Ignoring event {type(event).__name__}")
        return None

    def _route_car_status(self, event: CarStatusEvent) -> Optional[FlagSignal]:
        index = event.player_car_index
        if not 0 <= index < len(event.vehicle_fia_flags):
            raise ContractViolation(
                f"Player car index {index} outside "
                f"{len(event.vehicle_fia_flags)} cars in session"
            )

        fia_flag = event.vehicle_fia_flags[index]

        if fia_flag == VehicleFiaFlag.INVALID_UNKNOWN:
            logger.warning("Unknown local flag received")
            return None
        if fia_flag == VehicleFiaFlag.NONE:
            return self.engine.clear_local_flag()
        if fia_flag == VehicleFiaFlag.RED:
            return self.engine.set_global_flag(GlobalFlag.RED)
        return self.engine.set_local_flag(LOCAL_FLAGS[fia_flag])

    @property
    def events_routed(self) -> int:
        """Return total number of events routed."""
        return self._events_routed
