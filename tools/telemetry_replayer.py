"""
F1 Telemetry Replayer

Replays recorded telemetry packets to the flag relay as if they were coming
from the game. Use this to test the flag lights without the game.

Usage:
    python tools/telemetry_replayer.py --input race1.bin
    python tools/telemetry_replayer.py --input race1.bin --speed 4 --loop
"""

import socket
import time
import argparse

from f1_flags.telemetry.recording import load_recording


def replay(input_file: str, port: int = 20888, loop: bool = False, speed: float = 1.0):
    """Replay recorded packets via UDP to localhost."""

    packets = load_recording(input_file)
    print(f"Loaded {len(packets)} packets from {input_file}")

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    target = ('127.0.0.1', port)

    print(f"Replaying to localhost:{port} (speed: {speed}x)")
    print("Press Ctrl+C to stop")
    print()

    try:
        while True:
            start_time = time.time()

            for i, (timestamp, data) in enumerate(packets):
                sleep_time = start_time + (timestamp / speed) - time.time()
                if sleep_time > 0:
                    time.sleep(sleep_time)

                sock.sendto(data, target)

                if i % 600 == 0:
                    print(f"  Packet {i}/{len(packets)}")

            if not loop:
                break

            print("\n  Looping...\n")

    except KeyboardInterrupt:
        print("\nStopped")

    sock.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Replay F1 telemetry to the flag relay")
    parser.add_argument("--input", "-i", required=True, help="Input recording file")
    parser.add_argument("--port", "-p", type=int, default=20888, help="Relay UDP port")
    parser.add_argument("--loop", "-l", action="store_true", help="Loop playback")
    parser.add_argument("--speed", "-s", type=float, default=1.0, help="Playback speed")
    args = parser.parse_args()

    replay(args.input, args.port, args.loop, args.speed)
