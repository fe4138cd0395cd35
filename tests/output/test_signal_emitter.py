"""
Unit Tests for Signal Emitter

Verifies flag commands reach the display in the expected text format and
that send failures never propagate.

Test Design Techniques Used:
    - Equivalence partitioning (valid/invalid destinations)
    - Mock testing (UDP socket)
    - Error guessing (send failures)

Run: pytest tests/output/test_signal_emitter.py -v
"""

import pytest
import socket
from unittest.mock import MagicMock, patch

from f1_flags.output.signal_emitter import SignalEmitter, parse_destination
from f1_flags.shared.types import FlagSignal, GlobalFlag, LocalFlag


# =============================================================================
# TEST FIXTURES
# =============================================================================

@pytest.fixture
def mock_socket():
    mock = MagicMock(spec=socket.socket)
    mock.send.return_value = 2
    return mock


@pytest.fixture
def emitter(mock_socket):
    """Connected emitter on a mocked socket."""
    emitter = SignalEmitter(destination='192.168.1.50:20999')
    with patch('socket.socket', return_value=mock_socket):
        emitter.connect()
    return emitter


# =============================================================================
# DESTINATION PARSING
# =============================================================================

class TestParseDestination:

    @pytest.mark.parametrize("destination,expected", [
        ('192.168.1.50:20999', ('192.168.1.50', 20999)),
        ('localhost:1', ('localhost', 1)),
        ('flags.local:65535', ('flags.local', 65535)),
    ])
    def test_valid(self, destination, expected):
        assert parse_destination(destination) == expected

    @pytest.mark.parametrize("destination", [
        '192.168.1.50',
        ':20999',
        'host:port',
        'host:0',
        'host:65536',
        '',
    ])
    def test_invalid(self, destination):
        with pytest.raises(ValueError):
            parse_destination(destination)


# =============================================================================
# SIGNAL ENCODING
# =============================================================================

class TestFlagSignal:

    @pytest.mark.parametrize("signal,expected", [
        (FlagSignal.for_local(LocalFlag.GREEN), "1"),
        (FlagSignal.for_local(LocalFlag.YELLOW), "2"),
        (FlagSignal.for_local(LocalFlag.BLUE), "8"),
        (FlagSignal.for_global(GlobalFlag.VSC), "5"),
        (FlagSignal.for_global(GlobalFlag.SC), "4"),
        (FlagSignal.for_global(GlobalFlag.RED), "12"),
        (FlagSignal.penalty(3), "11,3"),
        (FlagSignal.penalty(21), "11,21"),
        (FlagSignal.finish(), "16"),
        (FlagSignal.CLEAR, ""),
        (FlagSignal.for_local(None), ""),
    ])
    def test_encode(self, signal, expected):
        assert signal.encode() == expected
        assert signal.to_bytes() == expected.encode('utf-8')

    def test_clear(self):
        assert FlagSignal.CLEAR.is_clear
        assert not FlagSignal.finish().is_clear


# =============================================================================
# CONNECT / SEND / CLOSE
# =============================================================================

class TestConnect:

    def test_connects_to_destination(self, emitter, mock_socket):
        mock_socket.connect.assert_called_once_with(('192.168.1.50', 20999))
        assert emitter.is_connected
        assert emitter.destination == '192.168.1.50:20999'

    def test_default_destination(self):
        emitter = SignalEmitter()
        assert emitter.destination == '127.0.0.1:20999'

    def test_config_dict(self):
        emitter = SignalEmitter(config={'host': '10.0.0.2', 'port': 5000})
        assert emitter.destination == '10.0.0.2:5000'

    def test_connect_failure_raises(self, mock_socket):
        mock_socket.connect.side_effect = OSError("Network unreachable")
        emitter = SignalEmitter(destination='10.0.0.2:5000')
        with patch('socket.socket', return_value=mock_socket):
            with pytest.raises(OSError):
                emitter.connect()
        assert not emitter.is_connected


class TestSend:

    def test_send_writes_encoded_signal(self, emitter, mock_socket):
        assert emitter.send(FlagSignal.penalty(3)) is True
        mock_socket.send.assert_called_once_with(b'11,3')

    def test_send_clear_writes_empty_datagram(self, emitter, mock_socket):
        emitter.send(FlagSignal.CLEAR)
        mock_socket.send.assert_called_once_with(b'')

    def test_send_failure_is_logged_not_raised(self, emitter, mock_socket, caplog):
        mock_socket.send.side_effect = ConnectionRefusedError("refused")
        assert emitter.send(FlagSignal.finish()) is False
        assert emitter.stats == {'sent': 0, 'failed': 1}
        assert "Failed to send" in caplog.text

    def test_send_continues_after_failure(self, emitter, mock_socket):
        mock_socket.send.side_effect = [OSError("boom"), 2]
        emitter.send(FlagSignal.for_global(GlobalFlag.SC))
        assert emitter.send(FlagSignal.for_global(GlobalFlag.RED)) is True
        assert emitter.stats == {'sent': 1, 'failed': 1}

    def test_send_without_connect(self):
        emitter = SignalEmitter(destination='10.0.0.2:5000')
        assert emitter.send(FlagSignal.finish()) is False
        assert emitter.stats['failed'] == 1


class TestClose:

    def test_close(self, emitter, mock_socket):
        emitter.close()
        mock_socket.close.assert_called_once()
        assert not emitter.is_connected

    def test_close_without_connect(self):
        SignalEmitter().close()


# =============================================================================
# INTEGRATION TESTS
# =============================================================================

class TestIntegration:

    def test_real_socket_delivery(self):
        receiver = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        receiver.bind(('127.0.0.1', 0))
        receiver.settimeout(1.0)
        port = receiver.getsockname()[1]

        emitter = SignalEmitter(destination=f'127.0.0.1:{port}')
        try:
            emitter.connect()
            emitter.send(FlagSignal.penalty(7))
            data, _ = receiver.recvfrom(64)
            assert data.decode('utf-8') == "11,7"
        finally:
            emitter.close()
            receiver.close()
