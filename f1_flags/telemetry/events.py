"""
Typed telemetry events produced by the packet parser.

Only the events that can affect the flag display are modelled.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List


class VehicleFiaFlag(IntEnum):
    """vehicleFiaFlags from the car status packet."""
    INVALID_UNKNOWN = -1
    NONE = 0
    GREEN = 1
    BLUE = 2
    YELLOW = 3
    RED = 4


@dataclass
class ParticipantsEvent:
    """Roster of the session, one race number per car slot."""
    num_active_cars: int
    race_numbers: List[int]
    names: List[str] = field(default_factory=list)


@dataclass
class SafetyCarEvent:
    """
    Safety car status change.

    safety_car_type: 0 = none, 1 = full, 2 = virtual, 3 = formation lap
    event_type:      0 = deployed, 1 = returning, 2 = returned, 3 = resume race
    """
    safety_car_type: int
    event_type: int


@dataclass
class PenaltyEvent:
    penalty_type: int
    infringement_type: int
    vehicle_index: int
    other_vehicle_index: int
    time: int
    lap_num: int
    places_gained: int


@dataclass
class ChequeredFlagEvent:
    pass


@dataclass
class RedFlagEvent:
    pass


@dataclass
class SessionStartedEvent:
    pass


@dataclass
class SessionEndedEvent:
    pass


@dataclass
class FinalClassificationEvent:
    num_cars: int


@dataclass
class CarStatusEvent:
    """
    FIA flags for every car slot plus the index of the local player.

    player_car_index is taken straight from the header and is not
    range-checked by the parser.
    """
    player_car_index: int
    vehicle_fia_flags: List[VehicleFiaFlag]
