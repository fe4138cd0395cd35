"""
Pytest Configuration - Shared Fixtures

This file contains shared fixtures used across all test modules:
packet builders for F1 25 telemetry and a fake clock / emitter for the
flag engine.
"""

import pytest
import struct
import sys
import os
from unittest.mock import Mock

# Add project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


HEADER_FORMAT = '<HBBBBBQfIIBB'
PARTICIPANT_FORMAT = '<BBBBBBB32sBBHBB12s'
CAR_STATUS_FORMAT = '<BBBBBfffHHBBHBBBbfffBfffB'
MAX_CARS = 22


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def advance(self, seconds: float):
        self.now += seconds

    def __call__(self) -> float:
        return self.now


def build_header(packet_id, player_car_index=0, packet_format=2025):
    return struct.pack(
        HEADER_FORMAT,
        packet_format,  # packetFormat
        25,             # gameYear
        1,              # gameMajorVersion
        0,              # gameMinorVersion
        1,              # packetVersion
        packet_id,      # packetId
        12345678,       # sessionUID
        123.456,        # sessionTime
        1000,           # frameIdentifier
        1000,           # overallFrameIdentifier
        player_car_index,
        255             # secondaryPlayerCarIndex
    )


def build_car_status(fia_flag):
    return struct.pack(
        CAR_STATUS_FORMAT,
        0, 0, 0, 56, 0,         # TC, ABS, fuel mix, brake bias, pit limiter
        10.0, 110.0, 5.0,       # fuel in tank, capacity, remaining laps
        13000, 4000,            # max / idle RPM
        8, 0, 0,                # max gears, DRS allowed, DRS distance
        16, 16, 3,              # tyre compound actual / visual, age
        fia_flag,               # vehicleFiaFlags
        0.0, 0.0, 4000000.0,    # ICE / MGU-K power, ERS store
        1,                      # ERS deploy mode
        0.0, 0.0, 0.0,          # ERS harvested / deployed
        0                       # network paused
    )


def build_participant(race_number, name=b'DRIVER'):
    return struct.pack(
        PARTICIPANT_FORMAT,
        1, 0, 255, 0, 0,        # AI, driver id, network id, team id, my team
        race_number,
        0,                      # nationality
        name,
        1, 1, 0, 0, 0,          # your telemetry, online names, tech level, platform, colours
        b'\x00' * 12            # livery colours
    )


@pytest.fixture
def make_event_packet():
    """Build an event packet: header + 4 char code + details."""
    def _make(code, details=b''):
        return build_header(3) + code.encode('ascii') + details
    return _make


@pytest.fixture
def make_car_status_packet():
    """
    Build a car status packet.

    player_flag goes into the player's slot, every other car gets NONE (0).
    """
    def _make(player_flag, player_car_index=0, other_flag=0):
        body = b''.join(
            build_car_status(player_flag if i == player_car_index else other_flag)
            for i in range(MAX_CARS)
        )
        return build_header(7, player_car_index=player_car_index) + body
    return _make


@pytest.fixture
def make_participants_packet():
    def _make(race_numbers):
        numbers = list(race_numbers) + [0] * (MAX_CARS - len(race_numbers))
        body = bytes([len(race_numbers)]) + b''.join(
            build_participant(n, name=f'CAR{n}'.encode('ascii')) for n in numbers
        )
        return build_header(4) + body
    return _make


@pytest.fixture
def final_classification_packet():
    # Only numCars is read; the per-car results are not needed
    return build_header(8) + bytes([20]) + b'\x00' * 100


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def emitter():
    """Mock emitter that records every signal sent."""
    return Mock()


@pytest.fixture
def engine(emitter, clock):
    from f1_flags.engine.flag_engine import FlagEngine
    return FlagEngine(emitter, clock=clock)


def sent_signals(emitter):
    """Encoded signals the engine handed to a mock emitter, in order."""
    return [call.args[0].encode() for call in emitter.send.call_args_list]


@pytest.fixture
def sent():
    return sent_signals
