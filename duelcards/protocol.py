"""Line-based wire format exchanged between the duel server and its clients."""

from __future__ import annotations

from dataclasses import dataclass, field

from .game import MAX_CARDS, Card, CardType, Game, _leading_int

PLAY_PREFIX = "PLAY_CARD:"

_NAME_LIMIT = 19
_TYPE_LIMIT = 9
_CARD_INFO_LIMIT = 49
_TOKEN_LIMIT = 63
_CARDS_LIMIT = 511


class ProtocolError(ValueError):
    """Raised when a message does not follow the wire format."""


@dataclass
class StateView:
    """The game as one player sees it."""

    your_health: int = 0
    opponent_health: int = 0
    your_turn: bool = False
    cards: list[Card] = field(default_factory=list)


def _type_name(kind) -> str:
    return kind.value if isinstance(kind, CardType) else str(kind)


def encode_state(game: Game, player_index: int) -> str:
    """Build the state line sent to one player, newline included."""
    player = game.players[player_index]
    opponent = game.players[1 - player_index]
    your_turn = 1 if game.current_turn == player_index else 0
    cards = "|".join(
        f"{card.name},{_type_name(card.type)},{card.power}"[:_CARD_INFO_LIMIT]
        for card in player.hand
    )
    return (
        f"YOUR_HEALTH:{player.health};OPPONENT_HEALTH:{opponent.health};"
        f"YOUR_TURN:{your_turn};CARDS:{cards}\n"
    )


def _field_after(message: str, key: str):
    position = message.find(key)
    return None if position < 0 else message[position + len(key):]


def _parse_card(token: str):
    parts = [part for part in token[:_TOKEN_LIMIT].split(",") if part]
    if len(parts) < 3:
        return None
    name, kind, power = parts[:3]
    kind = kind[:_TYPE_LIMIT]
    try:
        kind = CardType(kind)
    except ValueError:
        pass
    return Card(name[:_NAME_LIMIT], kind, _leading_int(power))


def decode_state(message: str) -> StateView:
    """Read a state line; missing fields default to zero and bad cards are skipped."""
    message = strip_newline(message)
    view = StateView()

    if (rest := _field_after(message, "YOUR_HEALTH:")) is not None:
        view.your_health = _leading_int(rest)
    if (rest := _field_after(message, "OPPONENT_HEALTH:")) is not None:
        view.opponent_health = _leading_int(rest)
    if (rest := _field_after(message, "YOUR_TURN:")) is not None:
        view.your_turn = _leading_int(rest) != 0

    if (rest := _field_after(message, "CARDS:")) is not None:
        section = rest.split(";", 1)[0][:_CARDS_LIMIT]
        for token in section.split("|"):
            if len(view.cards) >= MAX_CARDS:
                break
            if token and (card := _parse_card(token)) is not None:
                view.cards.append(card)

    return view


def encode_play(choice: int) -> str:
    """Build the line a client sends to play a card."""
    return f"{PLAY_PREFIX}{choice}\n"


def decode_play(message: str) -> int:
    """Return the card number in a ``PLAY_CARD:`` line (0 if none is given)."""
    if not message.startswith(PLAY_PREFIX):
        raise ProtocolError(f"not a play message: {message!r}")
    return _leading_int(message[len(PLAY_PREFIX):])


def strip_newline(text: str) -> str:
    """Remove one trailing newline, if there is one."""
    return text[:-1] if text.endswith("\n") else text