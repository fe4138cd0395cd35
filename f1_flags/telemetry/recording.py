"""
Telemetry recordings.

File format (little-endian):
    uint32                   packet count
    per packet:
        float32 + uint32     seconds since recording start, length
        bytes[length]        raw UDP payload

Used by tools/telemetry_recorder.py and tools/telemetry_replayer.py.
"""

import struct
import logging
from typing import List, Tuple

logger = logging.getLogger(__name__)

COUNT_FORMAT = '<I'
ENTRY_FORMAT = '<fI'
ENTRY_SIZE = struct.calcsize(ENTRY_FORMAT)

Recording = List[Tuple[float, bytes]]


def save_recording(output_file: str, packets: Recording):
    """Write (timestamp, data) pairs to a recording file."""
    with open(output_file, 'wb') as f:
        f.write(struct.pack(COUNT_FORMAT, len(packets)))
        for timestamp, data in packets:
            f.write(struct.pack(ENTRY_FORMAT, timestamp, len(data)))
            f.write(data)

    logger.info(f"Saved {len(packets)} packets to {output_file}")


def load_recording(input_file: str) -> Recording:
    """
    Load recorded packets from file.

    Raises:
        ValueError: If the file is truncated
    """
    packets = []

    with open(input_file, 'rb') as f:
        header = f.read(struct.calcsize(COUNT_FORMAT))
        if len(header) < struct.calcsize(COUNT_FORMAT):
            raise ValueError(f"{input_file} is not a telemetry recording")
        count = struct.unpack(COUNT_FORMAT, header)[0]

        for i in range(count):
            entry = f.read(ENTRY_SIZE)
            if len(entry) < ENTRY_SIZE:
                raise ValueError(f"{input_file} truncated at packet {i} of {count}")
            timestamp, length = struct.unpack(ENTRY_FORMAT, entry)
            data = f.read(length)
            if len(data) < length:
                raise ValueError(f"{input_file} truncated at packet {i} of {count}")
            packets.append((timestamp, data))

    return packets
