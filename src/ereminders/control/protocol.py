"""Control channel framing: UTF-8 text with a 4-byte big-endian length prefix."""

import asyncio
import socket
import struct

MAX_FRAME_SIZE = 1024 * 1024  # 1MB limit


def encode_frame(text: str) -> bytes:
    """Serialize text to length-prefixed bytes."""
    payload = text.encode("utf-8")
    return struct.pack("!I", len(payload)) + payload


def _check_length(length: int) -> None:
    if length > MAX_FRAME_SIZE:
        raise ValueError(f"Message too large: {length}")


async def read_frame(reader: asyncio.StreamReader) -> str | None:
    """Read a length-prefixed message from an async reader.

    Returns None if connection closed.
    """
    try:
        length_bytes = await reader.readexactly(4)
    except asyncio.IncompleteReadError:
        return None

    length = struct.unpack("!I", length_bytes)[0]
    _check_length(length)

    try:
        payload = await reader.readexactly(length)
    except asyncio.IncompleteReadError:
        return None
    return payload.decode("utf-8", errors="replace")


def _recv_exactly(sock: socket.socket, size: int) -> bytes | None:
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            return None
        data += chunk
    return data


def read_frame_sync(sock: socket.socket) -> str | None:
    """Read a length-prefixed message from a sync socket.

    Returns None if connection closed.
    """
    length_bytes = _recv_exactly(sock, 4)
    if length_bytes is None:
        return None

    length = struct.unpack("!I", length_bytes)[0]
    _check_length(length)

    payload = _recv_exactly(sock, length)
    if payload is None:
        return None
    return payload.decode("utf-8", errors="replace")
