"""Server-wide configuration constants for Skirmish Server."""

import os

GRID_WIDTH = 8           # Board width in cells
GRID_HEIGHT = 6          # Board height in cells
CELL_SIZE_PX = 64        # Rendered cell size, used when snapping pixel positions
CELL_GAP_PX = 2
GRID_PADDING_PX = 2
DEFAULT_MAP_ID = "plains"

DECK_SIZE = 30           # Cards per deck definition
DECK_COPIES = int(os.environ.get("DECK_COPIES", "2"))  # Copies of each card in a draw pile
INITIAL_HAND_SIZE = 4
MAX_HAND_SIZE = 10       # Enforced by the HTTP layer, not by the engine

LOBBY_SENTINEL = "lobby"  # Stored in place of a snapshot before the game starts
STATE_UPDATE_EVENT = "game_state_update"

BROADCAST_TIMEOUT_SECONDS = float(os.environ.get("BROADCAST_TIMEOUT_SECONDS", "5"))
REJECT_STALE_SNAPSHOTS = os.environ.get("REJECT_STALE_SNAPSHOTS", "0") == "1"

DATA_DIR = os.environ.get("DATA_DIR", ".")  # Persistent data directory
GAMES_DIR = os.environ.get("GAMES_DIR", os.path.join(DATA_DIR, "games"))
DECKS_DIR = os.environ.get("DECKS_DIR", os.path.join(os.path.dirname(__file__), "decks"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
