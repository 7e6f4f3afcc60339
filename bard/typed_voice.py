"""Read lines from standard input and speak each one to the server."""

from __future__ import annotations

import argparse
import sys

from bard.voice import DEFAULT_HOST, DEFAULT_PORT, Voice


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Send each line typed on standard input.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)

    with Voice(args.host, args.port) as voice:
        for line in sys.stdin:
            line = line.rstrip("\n").removesuffix("\r")
            if voice.speak(line):
                print("Success")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())