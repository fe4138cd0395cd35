"""
UDP Telemetry Listener

Receives raw UDP packets from the F1 game (or a forwarder / replayer).

The relay listens on 127.0.0.1 by default, so the game (or a telemetry
forwarder such as SimHub) must send to this machine's loopback address.

Usage:
    from f1_flags.telemetry.udp_listener import UDPListener

    listener = UDPListener(port=20888)
    raw_data = listener.receive()
"""

import socket
import logging
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_HOST = '127.0.0.1'
DEFAULT_PORT = 20888


class UDPListener:
    """
    Listens for F1 telemetry UDP packets.

    The F1 game sends up to 60Hz per packet type. Packet sizes vary by type
    (car status packets are ~1240 bytes, participants ~1280 bytes).

    Example:
        listener = UDPListener(port=20888)
        while True:
            data = listener.receive()
            if data:
                process(data)
    """

    BUFFER_SIZE = 2048  # Max packet size from F1 game

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                 timeout: float = 1.0, buffer_size: int = BUFFER_SIZE):
        """
        Initialize the UDP listener.

        Args:
            host: Address to bind (default: 127.0.0.1)
            port: UDP port to listen on (default: 20888)
            timeout: Socket timeout in seconds (default: 1.0)
            buffer_size: Max datagram size to read
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self.buffer_size = buffer_size
        self.socket: Optional[socket.socket] = None
        self._packet_count = 0

        self._setup_socket()

    def _setup_socket(self):
        """
        Create and bind the UDP socket.

        Raises:
            OSError: If the port cannot be bound
        """
        try:
            self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self.socket.settimeout(self.timeout)
            self.socket.bind((self.host, self.port))
        except OSError as e:
            logger.error(f"Failed to bind {self.host}:{self.port}: {e}")
            raise

        logger.info(f"Listening on {self.host}:{self.port}")

    def receive(self) -> Optional[bytes]:
        """
        Receive a single UDP packet.

        Returns:
            bytes: Raw packet data, or None if timeout/error
        """
        try:
            data, _ = self.socket.recvfrom(self.buffer_size)
        except socket.timeout:
            return None
        except OSError as e:
            logger.error(f"Socket error: {e}")
            return None

        self._packet_count += 1
        if self._packet_count % 1000 == 0:
            logger.debug(f"Received {self._packet_count} packets (last: {len(data)} bytes)")
        return data

    def close(self):
        """Close the UDP socket."""
        if self.socket:
            self.socket.close()
            self.socket = None
            logger.info(f"Listener closed. Total packets received: {self._packet_count}")

    @property
    def packet_count(self) -> int:
        """Return total number of packets received."""
        return self._packet_count
