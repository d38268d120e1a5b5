"""Preset terrain maps and map lookup."""

from __future__ import annotations

import math
from typing import Callable

from config import GRID_HEIGHT, GRID_WIDTH
from models.maps import MapDefinition, TerrainType

G = TerrainType.GRASS
W = TerrainType.WATER
M = TerrainType.MOUNTAIN
F = TerrainType.FOREST
S = TerrainType.SAND
ST = TerrainType.STONE
R = TerrainType.RUINS


def build_grid(
    cell: Callable[[int, int], TerrainType],
    width: int = GRID_WIDTH,
    height: int = GRID_HEIGHT,
) -> list[list[TerrainType]]:
    """Build a terrain grid from a per-cell function.

    Returns:
        A 2D list indexed as grid[y][x].
    """
    return [[cell(x, y) for x in range(width)] for y in range(height)]


def _dist(x: int, y: int, cx: int = 4, cy: int = 3) -> float:
    return math.sqrt((x - cx) ** 2 + (y - cy) ** 2)


def _plains(x: int, y: int) -> TerrainType:
    if x == 4 or y == 3:
        return W
    if (x + y) % 4 == 0:
        return F
    return G


def _islands(x: int, y: int) -> TerrainType:
    d = _dist(x, y)
    if d < 2:
        return G
    if d < 3:
        return F
    return W


def _mountain_range(x: int, y: int) -> TerrainType:
    if x == 4:
        return M
    if x in (3, 5):
        return F
    return G


def _river_crossing(x: int, y: int) -> TerrainType:
    if y in (2, 3):
        return W
    return F if (x + y) % 4 == 0 else G


def _ruined_city(x: int, y: int) -> TerrainType:
    if (x % 2 == 0 or y % 2 == 0) and (x + y) % 2 != 0:
        return R
    if abs(x - 4) < 1 and abs(y - 3) < 1:
        return ST
    return F if (x + y) % 3 == 0 else G


def _desert_outpost(x: int, y: int) -> TerrainType:
    if 2 < x < 5 and 1 < y < 4:
        return ST
    if x % 2 == 0 or y % 2 == 0:
        return M
    return S


def _forest_maze(x: int, y: int) -> TerrainType:
    if (x * y) % 3 == 0:
        return G
    if (x + y) % 2 == 0:
        return F
    return M


def _the_bridge(x: int, y: int) -> TerrainType:
    if x < 2 or x > 5:
        return W
    return ST


def _lava_fields(x: int, y: int) -> TerrainType:
    # Mountain doubles as lava
    if (x + y) % 4 == 0 or x == 4 or y == 3:
        return ST
    if 2 < x < 5 and 1 < y < 4 and (x + y) % 3 == 0:
        return S
    return M


def _fortress_courtyard(x: int, y: int) -> TerrainType:
    if x in (0, 7) or y in (0, 5):
        return ST
    return G


def _swamp(x: int, y: int) -> TerrainType:
    if (x + y) % 4 == 0:
        return G
    if (x * y) % 5 == 0:
        return F
    return W


def _frozen_lake(x: int, y: int) -> TerrainType:
    # Water doubles as ice, sand as snow
    d = _dist(x, y)
    if d < 2:
        return W
    if d < 3:
        return S
    return M


def _ruined_temple(x: int, y: int) -> TerrainType:
    if (x % 2 == 0 and y % 2 == 0) or (x + y) % 5 == 0:
        return R
    if 2 < x < 5 and 1 < y < 4:
        return ST
    return G


def _cavern_maze(x: int, y: int) -> TerrainType:
    if (x + y) % 3 == 0 or (x * y) % 4 == 0:
        return ST
    return M


def _market_square(x: int, y: int) -> TerrainType:
    if (x % 2 == 0 and y % 2 == 0) or (x + y) % 4 == 0:
        return ST
    if 2 < x < 5 and 1 < y < 4:
        return S
    return G


_PRESETS: list[tuple[str, str, str, Callable[[int, int], TerrainType]]] = [
    ("plains", "Plains",
     "A simple map with mostly grass and some water features", _plains),
    ("islands", "Islands",
     "A small, tight map with a few islands", _islands),
    ("mountain_range", "Mountain Range",
     "A long, narrow mountain range", _mountain_range),
    ("river_crossing", "River Crossing",
     "A wide river splits the battlefield.", _river_crossing),
    ("ruined_city", "Ruined City",
     "A compact city map with lots of cover.", _ruined_city),
    ("desert_outpost", "Desert Outpost",
     "A large, open desert with a central outpost.", _desert_outpost),
    ("forest_maze", "Forest Maze",
     "A tiny, dense forest with winding paths", _forest_maze),
    ("the_bridge", "The Bridge",
     "A narrow bridge over a deep chasm, with no way around.", _the_bridge),
    ("lava_fields", "Lava Fields",
     "Treacherous lava flows with safe stone paths and a few islands.", _lava_fields),
    ("fortress_courtyard", "Fortress Courtyard",
     "Walled fortress with a central open area.", _fortress_courtyard),
    ("swamp", "Swamp",
     "Muddy, slow terrain with scattered dry land.", _swamp),
    ("frozen_lake", "Frozen Lake",
     "A slippery ice lake in the center, surrounded by snow and rocks.", _frozen_lake),
    ("ruined_temple", "Ruined Temple",
     "Crumbling pillars and impassable ruins with open spaces for battle.", _ruined_temple),
    ("cavern_maze", "Cavern Maze",
     "Winding stone corridors and dead ends in a dark cavern.", _cavern_maze),
    ("market_square", "Market Square",
     "A mid-size market with obstacles and open lanes.", _market_square),
]

PRESET_MAPS: list[MapDefinition] = [
    MapDefinition(
        id=map_id,
        name=name,
        description=description,
        grid=build_grid(cell),
        grid_width=GRID_WIDTH,
        grid_height=GRID_HEIGHT,
    )
    for map_id, name, description, cell in _PRESETS
]


def get_map(map_id: str | None) -> MapDefinition:
    """Look up a preset map, falling back to the first preset if unknown."""
    for preset in PRESET_MAPS:
        if preset.id == map_id:
            return preset
    return PRESET_MAPS[0]


def list_maps() -> list[MapDefinition]:
    """Return all preset maps in registry order."""
    return list(PRESET_MAPS)
