"""Rules of the two-player card duel: hands, health and turns."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union

MAX_PLAYERS = 2
MAX_CARDS = 5
MAX_HEALTH = 20

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class CardType(str, Enum):
    """What a card does when played."""

    ATTACK = "Attack"
    DEFENSE = "Defense"

    def __str__(self) -> str:
        return self.value


@dataclass
class Card:
    """A single card in a player's hand."""

    name: str
    type: Union[CardType, str]
    power: int


@dataclass
class Player:
    """A seat at the table: health and the cards held."""

    health: int = MAX_HEALTH
    hand: list[Card] = field(default_factory=list)


class InvalidMove(ValueError):
    """Raised when a player asks for a move the rules do not allow."""


_HANDS = (
    (
        ("Fireball", CardType.ATTACK, 7),
        ("Shield", CardType.DEFENSE, 5),
        ("Lightning Strike", CardType.ATTACK, 6),
        ("Heal", CardType.DEFENSE, 4),
        ("Sword Slash", CardType.ATTACK, 5),
    ),
    (
        ("Ice Blast", CardType.ATTACK, 7),
        ("Barrier", CardType.DEFENSE, 5),
        ("Earthquake", CardType.ATTACK, 6),
        ("Rejuvenate", CardType.DEFENSE, 4),
        ("Axe Chop", CardType.ATTACK, 5),
    ),
)


def starting_hand(seat: int) -> list[Card]:
    """Return a fresh copy of the hand dealt to the given seat (0 is the first player)."""
    cards = _HANDS[0] if seat == 0 else _HANDS[1]
    return [Card(name, kind, power) for name, kind, power in cards]


@dataclass
class Game:
    """State of one duel between two players."""

    players: list[Player] = field(default_factory=list)
    current_turn: int = 0
    game_over: bool = False

    def add_player(self) -> Player:
        """Seat a new player with full health and their starting hand."""
        seat = len(self.players)
        if seat >= MAX_PLAYERS:
            raise ValueError(f"the game already has {MAX_PLAYERS} players")
        player = Player(health=MAX_HEALTH, hand=starting_hand(seat))
        self.players.append(player)
        return player

    def play(self, player_index: int, choice: int) -> Card:
        """Play card number ``choice`` (1-based) for a player.

        Returns the card as it was when played; the card in hand then loses
        one point of power.
        """
        player = self.players[player_index]
        if not 1 <= choice <= len(player.hand):
            raise InvalidMove(
                f"Player {player_index + 1} selected an invalid card: {choice}"
            )
        card = player.hand[choice - 1]
        played = replace(card)
        opponent = self.players[1 - player_index]
        if card.type == CardType.ATTACK:
            opponent.health = max(opponent.health - card.power, 0)
        elif card.type == CardType.DEFENSE:
            player.health = min(player.health + card.power, MAX_HEALTH)
        card.power -= 1
        return played

    def apply_message(self, player_index: int, message: str) -> Card:
        """Carry out a ``PLAY_CARD:<n>`` request sent by a player."""
        from .protocol import ProtocolError, decode_play

        try:
            choice = decode_play(message)
        except ProtocolError as exc:
            raise InvalidMove(
                f"Invalid message from Player {player_index + 1}: {message}"
            ) from exc
        return self.play(player_index, choice)

    def next_turn(self) -> int:
        """Pass the turn to the other player and return whose turn it is."""
        self.current_turn = (self.current_turn + 1) % MAX_PLAYERS
        return self.current_turn

    def defeated(self) -> Optional[int]:
        """Index of the first player with no health left, or None."""
        return next(
            (index for index, player in enumerate(self.players) if player.health <= 0),
            None,
        )


def _leading_int(text: str) -> int:
    """Read an integer from the start of text the way atoi does; 0 if none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0