"""
F1 Packet Parser

Parses F1 25 UDP packets into the typed events the flag relay cares about:
    Event (3)                -> session start/end, chequered flag, red flag,
                                penalty, safety car
    Participants (4)         -> race number roster
    Car Status (7)           -> FIA flags per car
    Final Classification (8) -> end of session

Every other packet type (motion, lap data, car telemetry, ...) is ignored.
"""

import struct
import logging
from typing import Optional

from f1_flags import DEBUG
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


class PacketDecodeError(ValueError):
    """Raised internally when a packet cannot be decoded."""


class PacketParser:
    """
    Parses F1 25 UDP telemetry packets.

    parse() never raises for bad input: malformed packets are logged,
    counted and reported as None.
    """

    PACKET_FORMAT = 2025

    # Packet types
    PACKET_ID_EVENT = 3
    PACKET_ID_PARTICIPANTS = 4
    PACKET_ID_CAR_STATUS = 7
    PACKET_ID_FINAL_CLASSIFICATION = 8

    # F1 25 Header: 29 bytes
    # <HBBBBBQfIIBB = uint16, 5×uint8, uint64, float, 2×uint32, 2×uint8
    HEADER_FORMAT = '<HBBBBBQfIIBB'
    HEADER_SIZE = struct.calcsize(HEADER_FORMAT)  # 29

    # Number of car slots in every per-car array
    MAX_CARS = 22

    # Event details
    EVENT_CODE_SIZE = 4
    PENALTY_FORMAT = '<BBBBBBB'
    SAFETY_CAR_FORMAT = '<BB'

    # Participant data per car: 57 bytes
    # aiControlled, driverId, networkId, teamId, myTeam, raceNumber,
    # nationality, name[32], yourTelemetry, showOnlineNames, techLevel,
    # platform, numColours, liveryColours[4 × RGB]
    PARTICIPANT_FORMAT = '<BBBBBBB32sBBHBB12s'
    PARTICIPANT_SIZE = struct.calcsize(PARTICIPANT_FORMAT)  # 57

    # Car status per car: 55 bytes, vehicleFiaFlags is field 16 (int8)
    CAR_STATUS_FORMAT = '<BBBBBfffHHBBHBBBbfffBfffB'
    CAR_STATUS_SIZE = struct.calcsize(CAR_STATUS_FORMAT)  # 55
    CAR_STATUS_FIA_FLAGS_FIELD = 16

    def __init__(self):
        self._packets_parsed = 0
        self._invalid_packets = 0
        self._ignored_packets = 0

    def parse_header(self, data: bytes) -> Optional[dict]:
        """
        Parse packet header (29 bytes for F1 25).

        Returns dict with header fields, or None if invalid.
        """
        if data is None or len(data) < self.HEADER_SIZE:
            return None

        try:
            fields = struct.unpack(self.HEADER_FORMAT, data[:self.HEADER_SIZE])
        except struct.error:
            return None

        return {
            'packet_format': fields[0],
            'game_year': fields[1],
            'game_major_version': fields[2],
            'game_minor_version': fields[3],
            'packet_version': fields[4],
            'packet_id': fields[5],
            'session_uid': fields[6],
            'session_time': fields[7],
            'frame_identifier': fields[8],
            'overall_frame_identifier': fields[9],
            'player_car_index': fields[10],
            'secondary_player_car_index': fields[11],
        }

    def parse(self, data: bytes):
        """
        Parse one datagram.

        Returns a typed event, or None if the packet is malformed or of a
        kind the relay does not use.
        """
        header = self.parse_header(data)
        if header is None:
            logger.warning("Failed to parse packet: bad header")
            self._invalid_packets += 1
            return None

        if header['packet_format'] != self.PACKET_FORMAT:
            logger.warning(f"Failed to parse packet: unsupported format {header['packet_format']}")
            self._invalid_packets += 1
            return None

        decoders = {
            self.PACKET_ID_EVENT: self._parse_event,
            self.PACKET_ID_PARTICIPANTS: self._parse_participants,
            self.PACKET_ID_CAR_STATUS: self._parse_car_status,
            self.PACKET_ID_FINAL_CLASSIFICATION: self._parse_final_classification,
        }
        decoder = decoders.get(header['packet_id'])
        if decoder is None:
            self._ignored_packets += 1
            return None

        try:
            event = decoder(header, data[self.HEADER_SIZE:])
        except (PacketDecodeError, struct.error) as e:
            logger.warning(f"Failed to parse packet {header['packet_id']}: {e}")
            self._invalid_packets += 1
            return None

        if event is None:
            self._ignored_packets += 1
            return None

        self._packets_parsed += 1
        if DEBUG:
            print(event)
        return event

    def _parse_event(self, header: dict, body: bytes):
        if len(body) < self.EVENT_CODE_SIZE:
            raise PacketDecodeError(f"event packet too short: {len(body)} bytes")

        try:
            code = body[:self.EVENT_CODE_SIZE].decode('ascii')
        except UnicodeDecodeError:
            raise PacketDecodeError(f"invalid event code {body[:self.EVENT_CODE_SIZE]!r}")
        details = body[self.EVENT_CODE_SIZE:]

        if code == 'SSTA':
            return SessionStartedEvent()
        if code == 'SEND':
            return SessionEndedEvent()
        if code == 'CHQF':
            return ChequeredFlagEvent()
        if code == 'RDFL':
            return RedFlagEvent()
        if code == 'PENA':
            fields = self._unpack_details(self.PENALTY_FORMAT, details, code)
            return PenaltyEvent(*fields)
        if code == 'SCAR':
            fields = self._unpack_details(self.SAFETY_CAR_FORMAT, details, code)
            return SafetyCarEvent(*fields)

        logger.debug(f"Ignoring event {code}")
        return None

    def _unpack_details(self, fmt: str, details: bytes, code: str) -> tuple:
        size = struct.calcsize(fmt)
        if len(details) < size:
            raise PacketDecodeError(f"{code} details too short: {len(details)} < {size}")
        return struct.unpack(fmt, details[:size])

    def _parse_participants(self, header: dict, body: bytes) -> ParticipantsEvent:
        expected = 1 + self.MAX_CARS * self.PARTICIPANT_SIZE
        if len(body) < expected:
            raise PacketDecodeError(f"participants packet too short: {len(body)} < {expected}")

        race_numbers = []
        names = []
        for i in range(self.MAX_CARS):
            offset = 1 + i * self.PARTICIPANT_SIZE
            fields = struct.unpack(
                self.PARTICIPANT_FORMAT,
                body[offset:offset + self.PARTICIPANT_SIZE]
            )
            race_numbers.append(fields[5])
            names.append(fields[7].split(b'\x00', 1)[0].decode('utf-8', errors='replace'))

        return ParticipantsEvent(
            num_active_cars=body[0],
            race_numbers=race_numbers,
            names=names,
        )

    def _parse_car_status(self, header: dict, body: bytes) -> CarStatusEvent:
        expected = self.MAX_CARS * self.CAR_STATUS_SIZE
        if len(body) < expected:
            raise PacketDecodeError(f"car status packet too short: {len(body)} < {expected}")

        flags = []
        for i in range(self.MAX_CARS):
            offset = i * self.CAR_STATUS_SIZE
            fields = struct.unpack(
                self.CAR_STATUS_FORMAT,
                body[offset:offset + self.CAR_STATUS_SIZE]
            )
            raw_flag = fields[self.CAR_STATUS_FIA_FLAGS_FIELD]
            try:
                flags.append(VehicleFiaFlag(raw_flag))
            except ValueError:
                raise PacketDecodeError(f"invalid vehicleFiaFlags {raw_flag} for car {i}")

        return CarStatusEvent(
            player_car_index=header['player_car_index'],
            vehicle_fia_flags=flags,
        )

    def _parse_final_classification(self, header: dict, body: bytes) -> FinalClassificationEvent:
        if len(body) < 1:
            raise PacketDecodeError("final classification packet too short")
        return FinalClassificationEvent(num_cars=body[0])

    @property
    def stats(self) -> dict:
        """Return parsing statistics."""
        return {
            'packets_parsed': self._packets_parsed,
            'invalid_packets': self._invalid_packets,
            'ignored_packets': self._ignored_packets,
        }
