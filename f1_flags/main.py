"""
F1 Flag Relay - Main Entry Point

Ties together:
- F1 UDP telemetry reception
- Packet parsing into typed events
- Flag precedence engine
- Flag signal output to the display

Usage:
    python -m f1_flags.main 192.168.1.50:20999
    python -m f1_flags.main 192.168.1.50:20999 20777
    python -m f1_flags.main 192.168.1.50:20999 --config my_settings.yaml --debug
"""

import argparse
import logging
import signal
from typing import Optional

from f1_flags.engine.flag_engine import FlagEngine
from f1_flags.engine.router import EventRouter
from f1_flags.output.signal_emitter import SignalEmitter, parse_destination
from f1_flags.shared.errors import ContractViolation
from f1_flags.telemetry.packet_parser import PacketParser
from f1_flags.telemetry.udp_listener import UDPListener
from f1_flags.utils.config import load_config

logger = logging.getLogger(__name__)


class F1FlagRelay:
    """
    Main application class that orchestrates all components.

    Flow:
        F1 Game → UDP Listener → Packet Parser → Event Router → Flag Engine → Signal Emitter
    """

    def __init__(self, config: dict):
        """
        Initialize the relay.

        Args:
            config: Full configuration (see f1_flags.utils.config.DEFAULT_CONFIG);
                    output.destination must be set
        """
        self.config = config

        self.udp_listener: Optional[UDPListener] = None
        self.packet_parser: Optional[PacketParser] = None
        self.emitter: Optional[SignalEmitter] = None
        self.engine: Optional[FlagEngine] = None
        self.router: Optional[EventRouter] = None

        self.running = False

    def setup(self):
        """Initialize all components."""
        telemetry = self.config["telemetry"]
        destination = self.config["output"]["destination"]

        self.emitter = SignalEmitter(destination=destination)
        self.emitter.connect()

        self.packet_parser = PacketParser()
        self.engine = FlagEngine(
            self.emitter,
            penalty_show_seconds=self.config["flags"]["penalty_show_seconds"],
        )
        self.router = EventRouter(self.engine)

        self.udp_listener = UDPListener(
            host=telemetry["host"],
            port=telemetry["port"],
            timeout=telemetry["timeout"],
            buffer_size=telemetry["buffer_size"],
        )

        logger.info(
            f"Listening to {telemetry['host']}:{telemetry['port']} "
            f"and outputting on {destination}"
        )

    def process_packet(self, data: bytes):
        """
        Decode one datagram and apply it to the engine.

        Returns the emitted FlagSignal, or None.

        Raises:
            ContractViolation: If the telemetry breaks decoder guarantees
        """
        event = self.packet_parser.parse(data)
        if event is None:
            return None
        return self.router.route(event)

    def run(self):
        """Main loop: receive telemetry → decode → update flags."""
        logger.info("Starting main loop...")
        self.running = True

        try:
            while self.running:
                raw_packet = self.udp_listener.receive()
                if raw_packet is None:
                    continue
                self.process_packet(raw_packet)

        except KeyboardInterrupt:
            logger.info("Shutting down...")
        except ContractViolation as e:
            logger.critical(f"Telemetry contract violated: {e}")
            raise
        finally:
            self.cleanup()

    def install_signal_handlers(self):
        """Stop the main loop on Ctrl+C or a service manager's SIGTERM."""
        signal.signal(signal.SIGINT, self.stop)
        signal.signal(signal.SIGTERM, self.stop)

    def stop(self, *args):
        logger.info("Shutting down...")
        self.running = False

    def cleanup(self):
        """Clean up resources."""
        if self.udp_listener:
            self.udp_listener.close()
        if self.emitter:
            self.emitter.close()
        if self.packet_parser:
            logger.info(f"Parser stats: {self.packet_parser.stats}")
        logger.info("Cleanup complete.")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="F1 Flag Relay")
    parser.add_argument(
        "destination",
        nargs="?",
        help="Flag display address as host:port (default: output.destination from config)"
    )
    parser.add_argument(
        "source_port",
        nargs="?",
        type=int,
        help="UDP port to receive telemetry on (default: 20888)"
    )
    parser.add_argument(
        "--config", "-c",
        help="Path to settings YAML (default: config/settings.yaml)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def resolve_log_level(level) -> int:
    """
    Turn a level name ("debug", "INFO") or number (10) into a logging level.

    Raises:
        ValueError: If the level is not a known logging level
    """
    if isinstance(level, bool):
        raise ValueError(f"Invalid logging level {level!r}")
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        if isinstance(value, int):
            return value
    raise ValueError(f"Invalid logging level {level!r}")


def resolve_config(args: argparse.Namespace, parser: argparse.ArgumentParser) -> dict:
    """Apply command line overrides on top of the loaded config."""
    config = load_config(args.config)

    if args.destination:
        config["output"]["destination"] = args.destination
    if args.source_port is not None:
        config["telemetry"]["port"] = args.source_port
    if args.debug:
        config["logging"]["level"] = "DEBUG"

    try:
        config["logging"]["level"] = resolve_log_level(config["logging"]["level"])
    except ValueError as e:
        parser.error(str(e))

    destination = config["output"]["destination"]
    if not destination:
        parser.error("Expected a destination (host:port)")
    try:
        parse_destination(destination)
    except ValueError as e:
        parser.error(str(e))

    return config


def main(argv=None):
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = resolve_config(args, parser)
    logging.getLogger().setLevel(config["logging"]["level"])

    relay = F1FlagRelay(config)
    relay.setup()
    relay.install_signal_handlers()
    relay.run()


if __name__ == "__main__":
    main()
