import io
import socket
import threading

import pytest

from duelcards.game import MAX_HEALTH, MAX_PLAYERS
from duelcards.protocol import decode_state
from duelcards.server import ActionLog, GameServer, main


class _Seat:
    def __init__(self, address):
        self.sock = socket.create_connection(address, timeout=5)
        self.reader = self.sock.makefile("r", encoding="utf-8", newline="\n")

    def state(self):
        return decode_state(self.reader.readline())

    def send(self, text):
        self.sock.sendall(text.encode("utf-8"))

    def close(self):
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.reader.close()
        self.sock.close()


@pytest.fixture
def table():
    log_stream = io.StringIO()
    lines = []
    server = GameServer(
        host="127.0.0.1", port=0, log=ActionLog(log_stream), echo=lines.append
    )
    first = _Seat(server.address)
    second = _Seat(server.address)
    server.accept_players()
    yield server, first, second, log_stream, lines
    first.close()
    second.close()
    server.close()


def _start(server):
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()
    return thread


def test_action_log_appends_to_file(tmp_path):
    path = tmp_path / "game.log"
    log = ActionLog(path)
    log.write("first\n")
    log.close()
    with ActionLog(path) as log:
        log.write("second\n")
    assert path.read_text(encoding="utf-8") == "first\nsecond\n"


def test_action_log_writes_to_stream():
    stream = io.StringIO()
    log = ActionLog(stream)
    log.write("hello\n")
    assert stream.getvalue() == "hello\n"


def test_accept_players_seats_both_players(table):
    server, _first, _second, log_stream, _lines = table
    assert len(server.game.players) == MAX_PLAYERS
    assert all(player.health == MAX_HEALTH for player in server.game.players)
    assert server.game.current_turn == 0
    assert "Player 1 connected from 127.0.0.1:" in log_stream.getvalue()
    assert "Player 2 connected from 127.0.0.1:" in log_stream.getvalue()


def test_initial_broadcast_and_turn(table):
    server, first, second, log_stream, lines = table
    thread = _start(server)

    view_one = first.state()
    view_two = second.state()
    assert view_one.your_turn is True
    assert view_two.your_turn is False
    assert view_one.cards[0].name == "Fireball"
    assert view_two.cards[0].name == "Ice Blast"

    first.send("PLAY_CARD:1\n")
    after_one = first.state()
    after_two = second.state()
    assert after_two.your_health == after_one.opponent_health
    assert after_two.your_health < MAX_HEALTH
    assert after_two.your_turn is True
    assert after_one.cards[0].power == view_one.cards[0].power - 1

    second.close()
    thread.join(5)
    assert not thread.is_alive()
    assert server.game.game_over is True
    log = log_stream.getvalue()
    assert "Received from Player 1: PLAY_CARD:1\n" in log
    assert "Player 1 played Fireball (Attack, Power: 7)\n" in log
    assert "Player 2 disconnected. Ending game.\n" in log
    assert "Both players connected. Starting the game...\n" not in log
    assert "Both players connected. Starting the game..." in lines


def test_invalid_message_passes_turn(table):
    server, first, second, log_stream, _lines = table
    thread = _start(server)
    first.state()
    second.state()

    first.send("HELLO\n")
    after_one = first.state()
    after_two = second.state()
    assert after_one.your_turn is False
    assert after_two.your_turn is True
    assert after_one.your_health == after_two.your_health

    first.close()
    second.close()
    thread.join(5)
    assert not thread.is_alive()
    assert "Invalid message from Player 1: HELLO\n" in log_stream.getvalue()


def test_defeat_ends_game(table):
    server, first, second, log_stream, _lines = table
    server.game.players[1].health = 1
    thread = _start(server)
    first.state()
    second.state()

    first.send("PLAY_CARD:1\n")
    final_two = second.state()
    thread.join(5)
    assert not thread.is_alive()
    assert final_two.your_health == 0
    assert server.game.game_over is True
    assert server.game.defeated() == 1
    assert "Player 2 has been defeated!\n" in log_stream.getvalue()


def test_main_fails_when_port_taken(tmp_path):
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("", 0))
    blocker.listen(1)
    port = blocker.getsockname()[1]
    log_path = tmp_path / "game.log"
    try:
        result = main(["--port", str(port), "--log", str(log_path)])
    finally:
        blocker.close()
    assert result == 1
    assert log_path.read_text(encoding="utf-8").startswith("=== Server started at ")