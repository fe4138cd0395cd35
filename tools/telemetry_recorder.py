"""
F1 Telemetry Recorder

Records live UDP packets from the F1 game to a file for later replay.
Run this while a session is running, ideally one with safety cars,
penalties and a chequered flag.

Usage:
    python tools/telemetry_recorder.py --output race1.bin --duration 300
"""

import time
import argparse
import logging

from f1_flags.telemetry.recording import save_recording
from f1_flags.telemetry.udp_listener import UDPListener


def record(output_file: str, duration: int, port: int = 20888):
    """Record F1 telemetry packets to file."""

    listener = UDPListener(port=port, timeout=1.0)

    print(f"Recording on port {port} for {duration} seconds...")
    print("Start the session in the F1 game now!")
    print()

    packets = []
    start_time = time.time()

    try:
        while time.time() - start_time < duration:
            data = listener.receive()
            if data is None:
                print("  Waiting for packets...")
                continue

            packets.append((time.time() - start_time, data))

            if len(packets) % 600 == 0:
                print(f"  {len(packets)} packets ({int(time.time() - start_time)}s)")

    except KeyboardInterrupt:
        print("\nStopped early")

    listener.close()

    save_recording(output_file, packets)
    print()
    print(f"Saved {len(packets)} packets to {output_file}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Record F1 telemetry")
    parser.add_argument("--output", "-o", default="telemetry_recording.bin", help="Output file")
    parser.add_argument("--duration", "-d", type=int, default=60, help="Recording duration (seconds)")
    parser.add_argument("--port", "-p", type=int, default=20888, help="UDP port")
    args = parser.parse_args()

    record(args.output, args.duration, args.port)
