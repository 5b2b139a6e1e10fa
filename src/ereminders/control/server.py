"""Unix domain socket control server.

Each connection carries one command frame and receives one response frame.
Commands are handed to the scheduler loop, which answers them between job
firings, or straight away with "stopping" once it has shut down.
"""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from ereminders.control.protocol import encode_frame, read_frame
from ereminders.events import ControlCommand

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_TIMEOUT = 300.0


class ControlServer:
    """Accepts operator commands on a Unix domain socket."""

    def __init__(
        self,
        socket_path: Path,
        submit: Callable[[ControlCommand], None],
        response_timeout: float = DEFAULT_RESPONSE_TIMEOUT,
    ):
        """Initialize control server.

        Args:
            socket_path: Path to the Unix domain socket.
            submit: Hands a command to the scheduler loop.
            response_timeout: Seconds to wait for the loop to answer.
        """
        self._socket_path = socket_path
        self._submit = submit
        self._response_timeout = response_timeout
        self._server: asyncio.Server | None = None

    @property
    def socket_path(self) -> Path:
        return self._socket_path

    @property
    def is_running(self) -> bool:
        return self._server is not None

    async def start(self) -> None:
        """Start listening, replacing any stale socket file."""
        self._socket_path.parent.mkdir(parents=True, exist_ok=True)
        self._socket_path.unlink(missing_ok=True)

        self._server = await asyncio.start_unix_server(
            self._handle_connection,
            path=str(self._socket_path),
        )

        # Owner only
        self._socket_path.chmod(0o600)

        logger.info("control_server_started", extra={"socket": str(self._socket_path)})

    async def stop(self) -> None:
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

        self._socket_path.unlink(missing_ok=True)
        logger.info("control_server_stopped")

    async def _handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        try:
            text = await read_frame(reader)
            if text is None:
                return

            command = ControlCommand(text=text)
            self._submit(command)
            response = await asyncio.wait_for(command.response, self._response_timeout)

            writer.write(encode_frame(response))
            await writer.drain()
        except TimeoutError:
            logger.warning("control_command_timeout")
        except Exception:
            logger.exception("Error handling control connection")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass
