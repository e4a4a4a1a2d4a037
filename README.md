# duelcards

A small turn-based card duel for two players over TCP. One machine runs the
server. Each player connects with the terminal client.

## How the game works

- Each player starts with 20 health and a fixed hand of five cards:
  - Player 1: Fireball (Attack, 7), Shield (Defense, 5),
    Lightning Strike (Attack, 6), Heal (Defense, 4), Sword Slash (Attack, 5).
  - Player 2: Ice Blast (Attack, 7), Barrier (Defense, 5),
    Earthquake (Attack, 6), Rejuvenate (Defense, 4), Axe Chop (Attack, 5).
- Players take turns. Player 1 goes first. On your turn you play one card
  from your hand.
- An **Attack** card lowers your opponent's health by its power, but never
  below 0.
- A **Defense** card raises your own health by its power, but never above 20.
- After a card is played, its power goes down by one. Cards stay in the hand.
- If a move is malformed or names a card that is not in the hand, the server
  logs it and the turn passes to the other player anyway.
- A player whose health reaches 0 loses, and the game ends.

## Installing

```
pip install .
```

## Playing

Start the server:

```
duelcards-server
```

It listens on all interfaces, on port 12345 by default, and waits for two
players. Options:

- `--port PORT`: the port to listen on.
- `--log PATH`: the file the server appends its log to. The default is
  `game.log` in the current directory.

The log records when the server starts and shuts down, each connection, every
message received, every card played, invalid moves, disconnections and the
result. The server also prints these events to the terminal.

Each player then runs the client:

```
duelcards-client
```

By default the client connects to `127.0.0.1:12345`. Options:

- `--host HOST`: the server to connect to.
- `--port PORT`: the server's port.

The client shows your health, your opponent's health and your hand. When it
is your turn, type the number of the card you want to play. Input that is not
a number, or a number outside the hand, is refused, and the client asks
again. Blank lines are ignored. When it is not your turn, the client waits
for your opponent's move.

The client stops when one player has no health left or when the server closes
the connection. If your input ends before you pick a card, or the connection
fails, the client exits with status 1.

## Wire protocol

Every message is a single line of UTF-8 text that ends in a newline.

The server sends each player their view of the game:

```
YOUR_HEALTH:20;OPPONENT_HEALTH:20;YOUR_TURN:1;CARDS:Fireball,Attack,7|Shield,Defense,5|...
```

The client answers with the card it plays, counting from 1:

```
PLAY_CARD:3
```

The server sends the state after every turn, and once more when the game
ends.

## Using it as a library

- `duelcards.game` holds the rules:
  - `Card`, `CardType` (`ATTACK`, `DEFENSE`), `Player` and `starting_hand(seat)`.
  - `Game`, with `add_player()`, `play(player_index, choice)`,
    `apply_message(player_index, message)`, `next_turn()` and `defeated()`.
  - `InvalidMove`, which `play` and `apply_message` raise for moves the rules
    do not allow.
- `duelcards.protocol` handles the messages:
  - `encode_state(game, player_index)` and `decode_state(message)`, which
    returns a `StateView`.
  - `encode_play(choice)` and `decode_play(message)`. `decode_play` raises
    `ProtocolError` for a line that is not a play message.
  - `strip_newline(text)`.
- `duelcards.server` provides `GameServer`, with `accept_players()`, `run()`,
  `broadcast()`, `close()` and an `address` property. It also provides
  `ActionLog`, an append-only log that is flushed after every write. Both
  classes work as context managers.
- `duelcards.client` provides `LineConnection`, `render_state(state)`,
  `prompt_choice(state, read_line, write)` and
  `play_session(connection, read_line, write, pause)`. The prompt and session
  functions take their input, output and delay functions as arguments, so
  they can run without a terminal.

## What it does not do

One server process hosts exactly one game between two players and then shuts
down. There is no lobby and no matchmaking. A player who disconnects cannot
rejoin. Hands are fixed, with no decks, draws or shuffling. The game is not
saved anywhere except in the text log.

## Running the tests

```
pip install .[test]
pytest
```