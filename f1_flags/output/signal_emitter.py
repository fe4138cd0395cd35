"""
Flag Signal Emitter

Sends flag commands to the flag display over UDP.

Packet Format (send):
    UTF-8 text, one command per datagram
    - "<code>"                e.g. "4" (safety car)
    - "<code>,<driver index>" e.g. "11,3" (penalty for car 3)
    - ""                      clear the display

No acknowledgement is expected. A failed send is logged and dropped;
the next flag change simply sends the next command.

Usage:
    from f1_flags.output.signal_emitter import SignalEmitter

    emitter = SignalEmitter(destination='192.168.1.50:20999')
    emitter.connect()
    emitter.send(FlagSignal.for_global(GlobalFlag.SC))
    emitter.close()
"""

import socket
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from f1_flags.shared.types import FlagSignal

logger = logging.getLogger(__name__)


def parse_destination(destination: str) -> Tuple[str, int]:
    """
    Split "host:port" into (host, port).

    Raises:
        ValueError: If the port is missing or not a valid port number
    """
    host, sep, port_text = destination.rpartition(':')
    if not sep or not host:
        raise ValueError(f"Destination must be host:port, got {destination!r}")

    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"Invalid port in destination {destination!r}")

    if not 0 < port < 65536:
        raise ValueError(f"Port out of range in destination {destination!r}")

    return host, port


@dataclass
class EmitterConfig:
    """Configuration for the flag display connection."""
    host: str = '127.0.0.1'
    port: int = 20999


class SignalEmitter:
    """
    UDP sender for flag display commands.

    The socket is bound to an ephemeral local port and connected to the
    destination, so every send goes to the same display.
    """

    def __init__(self, destination: Optional[str] = None,
                 config: Optional[dict] = None):
        """
        Initialize the emitter.

        Args:
            destination: "host:port" of the flag display. Takes precedence
                         over config.
            config: Configuration dict with host, port.
        """
        if destination:
            host, port = parse_destination(destination)
            self.config = EmitterConfig(host=host, port=port)
        elif config:
            self.config = EmitterConfig(**config)
        else:
            self.config = EmitterConfig()

        self.socket: Optional[socket.socket] = None
        self._connected = False
        self._sent_count = 0
        self._failed_count = 0

    def connect(self):
        """
        Create the UDP socket and connect it to the display.

        Raises:
            OSError: If the socket cannot be created or connected
        """
        try:
            self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self.socket.bind(('0.0.0.0', 0))
            self.socket.connect((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to connect to {self.destination}: {e}")
            raise

        self._connected = True
        logger.info(f"Sending flags to {self.destination}")

    def send(self, signal: FlagSignal) -> bool:
        """
        Send one flag command.

        Returns:
            True if the datagram was handed to the OS
        """
        if self.socket is None:
            logger.error(f"Failed to send {signal}: not connected")
            self._failed_count += 1
            return False

        try:
            self.socket.send(signal.to_bytes())
        except OSError as e:
            logger.error(f"Failed to send {signal}: {e}")
            self._failed_count += 1
            return False

        self._sent_count += 1
        logger.debug(f"Sent {signal.encode()!r} to {self.destination}")
        return True

    def close(self):
        """Close the UDP socket."""
        if self.socket:
            self.socket.close()
            self.socket = None
            logger.info(f"Emitter closed. Sent {self._sent_count} signals, "
                        f"{self._failed_count} failed")
        self._connected = False

    @property
    def destination(self) -> str:
        return f"{self.config.host}:{self.config.port}"

    @property
    def is_connected(self) -> bool:
        """Return connection status."""
        return self._connected

    @property
    def stats(self) -> dict:
        """Return send statistics."""
        return {
            'sent': self._sent_count,
            'failed': self._failed_count,
        }
