"""A server that receives zero-terminated text in 32-byte chunks and prints it."""

from __future__ import annotations

import argparse
import socket
import threading
from contextlib import suppress

CHUNK_SIZE = 32
REPLY = b"ok"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3333


def _format_addr(addr) -> str:
    host, port = addr[0], addr[1]
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def handle_client(sock: socket.socket, peer: str) -> list[str]:
    """Serve one client until its connection fails; return the messages printed.

    Every full chunk is acknowledged with ``ok``. A chunk holding a zero byte
    completes the current message, which is printed.
    """
    messages: list[str] = []
    message = ""
    with sock.makefile("rb") as reader:
        while True:
            try:
                data = reader.read(CHUNK_SIZE)
                if len(data) < CHUNK_SIZE:
                    raise ConnectionError("connection closed mid-chunk")
            except OSError:
                print(f"An error occurred, terminating connection with {peer}")
                with suppress(OSError):
                    sock.shutdown(socket.SHUT_RDWR)
                return messages
            sock.sendall(REPLY)
            message += data.decode("utf-8")
            if 0 in data:
                print(message)
                messages.append(message)
                message = ""


def _serve_client(sock: socket.socket, peer: str) -> None:
    with sock:
        handle_client(sock, peer)


def serve(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Listen forever, handling each connection on its own thread."""
    with socket.create_server((host, port)) as listener:
        print(f"Server listening on port {port}")
        while True:
            try:
                sock, addr = listener.accept()
            except OSError as exc:
                print(f"Error: {exc}")
                continue
            peer = _format_addr(addr)
            print(f"New connection: {peer}")
            threading.Thread(target=_serve_client, args=(sock, peer), daemon=True).start()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Print the messages that voices send.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)
    try:
        serve(args.host, args.port)
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())