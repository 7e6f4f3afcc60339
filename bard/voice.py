"""Client side of the chunked text protocol: speak messages to a listening server."""

from __future__ import annotations

import socket

CHUNK_SIZE = 32
REPLY = b"ok"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 3333


def chunk_message(msg: str | bytes) -> list[bytes]:
    """Split a message into full 32-byte chunks followed by the (possibly empty) remainder."""
    data = msg.encode("utf-8") if isinstance(msg, str) else bytes(msg)
    full = len(data) - len(data) % CHUNK_SIZE
    chunks = [data[start:start + CHUNK_SIZE] for start in range(0, full, CHUNK_SIZE)]
    chunks.append(data[full:])
    return chunks


class Voice:
    """A connection to a server that prints what it is sent."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
        self._sock = socket.create_connection((host, port))
        self._reader = self._sock.makefile("rb")
        print(f"Successfully connected to server in port {port}")

    def send_chunk(self, chunk: bytes) -> bool:
        """Send one chunk, zero-padded to 32 bytes, and wait for the server's reply.

        Returns False when the chunk is too large or the reply is not ``ok``.
        """
        if len(chunk) > CHUNK_SIZE:
            print("Tried to send a chunk that was too big.")
            return False
        self._sock.sendall(bytes(chunk).ljust(CHUNK_SIZE, b"\0"))

        try:
            reply = self._reader.read(len(REPLY))
            if len(reply) < len(REPLY):
                raise ConnectionError("connection closed before the reply arrived")
        except OSError as exc:
            print(f"Failed to receive data: {exc}")
            return True

        if reply != REPLY:
            print(f"Unexpected reply: {reply.decode('utf-8')}")
            return False
        return True

    def speak(self, msg: str | bytes) -> bool:
        """Send a whole message, chunk by chunk, ending with a zero-padded chunk."""
        for chunk in chunk_message(msg):
            self.send_chunk(chunk)
        return True

    def close(self) -> None:
        """Close the connection."""
        self._reader.close()
        self._sock.close()

    def __enter__(self) -> Voice:
        return self

    def __exit__(self, *args) -> None:
        self.close()