"""TCP server that seats two players and referees their duel."""

from __future__ import annotations

import argparse
import os
import socket
import sys
import time
from typing import Callable, Optional, TextIO, Union

from .game import MAX_PLAYERS, Game, InvalidMove
from .protocol import encode_state, strip_newline

SERVER_PORT = 12345
BUFFER_SIZE = 1024
LOG_PATH = "game.log"


class ActionLog:
    """Append-only log of what happens during a game, flushed after every write."""

    def __init__(self, target: Union[str, os.PathLike, TextIO]) -> None:
        if isinstance(target, (str, os.PathLike)):
            self._stream: TextIO = open(target, "a", encoding="utf-8")
            self._owned = True
        else:
            self._stream = target
            self._owned = False

    def write(self, text: str) -> None:
        """Append text to the log and flush it."""
        self._stream.write(text)
        self._stream.flush()

    def close(self) -> None:
        """Close the underlying stream."""
        self._stream.close()

    def __enter__(self) -> "ActionLog":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class GameServer:
    """Listens for two players, then runs the duel between them."""

    def __init__(
        self,
        host: str = "",
        port: int = SERVER_PORT,
        log: Optional[ActionLog] = None,
        echo: Callable[[str], object] = print,
    ) -> None:
        self.game = Game()
        self._log = log
        self._echo = echo
        self._connections: list[socket.socket] = []
        listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind((host, port))
            listener.listen(MAX_PLAYERS)
        except OSError:
            listener.close()
            raise
        self._listener = listener

    @property
    def address(self) -> tuple[str, int]:
        """Host and port the server is listening on."""
        host, port = self._listener.getsockname()[:2]
        return host, port

    def _record(self, text: str) -> None:
        if self._log is not None:
            self._log.write(text + "\n")

    def _report(self, text: str) -> None:
        self._echo(text)
        self._record(text)

    def accept_players(self) -> None:
        """Wait for both players to connect and deal their hands."""
        while len(self._connections) < MAX_PLAYERS:
            try:
                connection, (address, port) = self._listener.accept()[0], self._listener_peer_placeholder()
            except OSError as exc:
                if self._listener.fileno() == -1:
                    raise
                self._echo(f"Accept failed: {exc}")
                continue
            address, port = connection.getpeername()[:2]
            self._connections.append(connection)
            self.game.add_player()
            self._report(
                f"Player {len(self._connections)} connected from {address}:{port}"
            )
        self.game.current_turn = 0
        self.game.game_over = False

    @staticmethod
    def _listener_peer_placeholder() -> tuple[str, int]:
        return "", 0

    def broadcast(self) -> None:
        """Send each player their view of the game."""
        for index, connection in enumerate(self._connections):
            try:
                connection.sendall(encode_state(self.game, index).encode("utf-8"))
            except OSError as exc:
                self._echo(f"send: {exc}")

    def run(self) -> None:
        """Play turns until a player is defeated or disconnects."""
        game = self.game
        self._echo("Both players connected. Starting the game...")
        self._record("Both players connected. Starting the game.")
        self.broadcast()

        while not game.game_over:
            index = game.current_turn
            try:
                data = self._connections[index].recv(BUFFER_SIZE - 1)
            except OSError as exc:
                self._echo(f"recv: {exc}")
                self._record(f"Error receiving from Player {index + 1}, ending game.")
                game.game_over = True
                break
            if not data:
                self._report(f"Player {index + 1} disconnected. Ending game.")
                game.game_over = True
                break

            message = strip_newline(data.decode("utf-8", errors="replace"))
            self._report(f"Received from Player {index + 1}: {message}")

            try:
                card = game.apply_message(index, message)
            except InvalidMove as exc:
                self._report(str(exc))
            else:
                self._report(
                    f"Player {index + 1} played {card.name} "
                    f"({card.type}, Power: {card.power})"
                )

            loser = game.defeated()
            if loser is not None:
                self._report(f"Player {loser + 1} has been defeated!")
                game.game_over = True
            else:
                game.next_turn()
                self.broadcast()

        self.broadcast()

    def close(self) -> None:
        """Close every player connection and the listening socket."""
        for connection in self._connections:
            connection.close()
        self._connections.clear()
        self._listener.close()

    def __enter__(self) -> "GameServer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def main(argv: Optional[list[str]] = None) -> int:
    """Run one game on the given port, logging to the given file."""
    parser = argparse.ArgumentParser(description="Host a two-player card duel.")
    parser.add_argument("--port", type=int, default=SERVER_PORT)
    parser.add_argument("--log", default=LOG_PATH)
    args = parser.parse_args(argv)

    try:
        log = ActionLog(args.log)
    except OSError as exc:
        print(f"Failed to open log file: {exc}", file=sys.stderr)
        return 1

    with log:
        log.write(f"=== Server started at {time.ctime()}\n")
        try:
            server = GameServer(port=args.port, log=log)
        except OSError as exc:
            print(f"Bind failed: {exc}", file=sys.stderr)
            return 1
        with server:
            print(
                f"Server is running on port {args.port}. "
                "Waiting for players to connect..."
            )
            server.accept_players()
            server.run()
        log.write(f"=== Server shutting down at {time.ctime()}\n")

    print("Game has ended. Server shutting down.")
    return 0


if __name__ == "__main__":
    sys.exit(main())