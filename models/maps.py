"""Terrain map models for Skirmish Server."""

from enum import Enum

from pydantic import BaseModel


class TerrainType(str, Enum):
    """Terrain tags a map cell can carry."""
    GRASS = "grass"
    WATER = "water"
    MOUNTAIN = "mountain"
    FOREST = "forest"
    SAND = "sand"
    STONE = "stone"
    RUINS = "ruins"


class MapDefinition(BaseModel):
    """A static terrain layout."""
    id: str
    name: str
    description: str
    grid: list[list[TerrainType]]   # 2D grid [y][x]
    grid_width: int
    grid_height: int
