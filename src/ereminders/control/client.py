"""Synchronous control client used by the CLI."""

import socket
from pathlib import Path

from ereminders.control.protocol import encode_frame, read_frame_sync
from ereminders.errors import ControlChannelError

DEFAULT_TIMEOUT = 330.0


def transmit_command(
    command: str, socket_path: Path, timeout: float = DEFAULT_TIMEOUT
) -> str:
    """Send a command to the daemon and wait for its response.

    Raises:
        ControlChannelError: If the daemon cannot be reached or hangs up.
    """
    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout)
            sock.connect(str(socket_path))
            sock.sendall(encode_frame(command))
            response = read_frame_sync(sock)
    except (FileNotFoundError, ConnectionRefusedError) as e:
        raise ControlChannelError(
            f"Daemon is not running (no control socket at {socket_path})"
        ) from e
    except OSError as e:
        raise ControlChannelError(f"Control socket error: {e}") from e

    if response is None:
        raise ControlChannelError("Connection closed by daemon")
    return response
