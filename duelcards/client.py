"""Terminal client for the card duel."""

from __future__ import annotations

import argparse
import re
import socket
import sys
import time
from typing import Callable, Optional

from .protocol import StateView, decode_state, encode_play, strip_newline

SERVER_IP = "127.0.0.1"
SERVER_PORT = 12345
BUFFER_SIZE = 1024

_RULE = "-----------------------------"
_NUMBER = re.compile(r"\s*([+-]?\d+)")


class LineConnection:
    """A socket read and written one newline-terminated line at a time."""

    def __init__(self, sock: socket.socket, limit: int = BUFFER_SIZE - 1) -> None:
        self._sock = sock
        self._limit = limit
        self._pending = b""

    def receive_line(self) -> Optional[str]:
        """Return the next line without its newline, or None once the peer has closed."""
        while b"\n" not in self._pending and len(self._pending) < self._limit:
            chunk = self._sock.recv(self._limit - len(self._pending))
            if not chunk:
                self._pending = b""
                return None
            self._pending += chunk
        end = self._pending.find(b"\n")
        cut = end + 1 if 0 <= end < self._limit else self._limit
        line, self._pending = self._pending[:cut], self._pending[cut:]
        return strip_newline(line.decode("utf-8", errors="replace"))

    def send_line(self, text: str) -> None:
        """Send text in full."""
        self._sock.sendall(text.encode("utf-8"))

    def close(self) -> None:
        """Close the socket."""
        self._sock.close()

    def __enter__(self) -> "LineConnection":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def render_state(state: StateView) -> str:
    """Format a player's view of the game for the terminal."""
    lines = [
        "",
        _RULE,
        f"Your Health: {state.your_health}",
        f"Opponent's Health: {state.opponent_health}",
        "",
        "Your Hand:",
    ]
    lines.extend(
        f"{number}. {card.name} ({card.type}, Power: {card.power})"
        for number, card in enumerate(state.cards, start=1)
    )
    lines.extend([_RULE, "", ""])
    return "\n".join(lines)


def prompt_choice(
    state: StateView,
    read_line: Callable[[], str],
    write: Callable[[str], object],
) -> int:
    """Ask until the player names a card in their hand; return its 1-based number."""
    size = len(state.cards)
    write(f"It's your turn. Select a card to play (1-{size}): ")
    while True:
        line = read_line()
        if not line:
            raise EOFError("input ended before a card was chosen")
        if not line.strip():
            continue
        match = _NUMBER.match(line)
        if match is None:
            write(f"Invalid input. Please enter a number between 1 and {size}: ")
            continue
        choice = int(match.group(1))
        if not 1 <= choice <= size:
            write(
                f"Invalid choice. Please select a card number between 1 and {size}: "
            )
            continue
        return choice


def play_session(
    connection: LineConnection,
    read_line: Callable[[], str],
    write: Callable[[str], object],
    pause: Callable[[float], object],
) -> bool:
    """Follow the game until it ends.

    Returns True when the game reached a winner, False when the server
    went away first.
    """
    while True:
        line = connection.receive_line()
        if line is None:
            write("Server disconnected.\n")
            return False
        state = decode_state(line)
        write(render_state(state))

        if state.your_health <= 0:
            write("You have been defeated! Game Over.\n")
            return True
        if state.opponent_health <= 0:
            write("Congratulations! You have won the game.\n")
            return True

        if state.your_turn:
            choice = prompt_choice(state, read_line, write)
            connection.send_line(encode_play(choice))
        else:
            write("Waiting for opponent's move...\n")
            pause(1)


def _write_out(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def main(argv: Optional[list[str]] = None) -> int:
    """Connect to a duel server and play from the terminal."""
    parser = argparse.ArgumentParser(description="Join a two-player card duel.")
    parser.add_argument("--host", default=SERVER_IP)
    parser.add_argument("--port", type=int, default=SERVER_PORT)
    args = parser.parse_args(argv)

    try:
        sock = socket.create_connection((args.host, args.port))
    except OSError as exc:
        print(f"Connection Failed: {exc}", file=sys.stderr)
        print("Failed to connect to the server.", file=sys.stderr)
        return 1

    print(f"Connected to the server at {args.host}:{args.port}")
    with LineConnection(sock) as connection:
        try:
            finished = play_session(
                connection, sys.stdin.readline, _write_out, time.sleep
            )
        except EOFError:
            print("\nInput closed. Exiting.", file=sys.stderr)
            return 1
        except OSError as exc:
            print(f"Failed to exchange data with the server: {exc}", file=sys.stderr)
            return 1

    if finished:
        print("Disconnected from server. Exiting.")
    return 0


if __name__ == "__main__":
    sys.exit(main())