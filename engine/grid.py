"""Pixel/cell conversion and snapping for board positions.

The engine never validates positions. Clients snap and clamp a dropped
figure with these helpers before calling move_character.
"""

from __future__ import annotations

import math

from config import CELL_GAP_PX, CELL_SIZE_PX, GRID_PADDING_PX
from models.characters import CharacterSize, Position
from models.game_state import GridSize

# Rendered token footprint in pixels, per size class.
TOKEN_SIZE_PX: dict[CharacterSize, int] = {
    CharacterSize.SMALL: 48,
    CharacterSize.MEDIUM: 56,
    CharacterSize.LARGE: 72,
    CharacterSize.HUGE: 128,        # 2x2 cells
    CharacterSize.GIANT: 256,       # 4x4 cells
}

# Sizes that occupy several cells and snap to cell intersections.
MULTI_CELL_SIZES = (CharacterSize.HUGE, CharacterSize.GIANT)

_PITCH = CELL_SIZE_PX + CELL_GAP_PX


def pixel_to_cell(x: float, y: float) -> tuple[int, int]:
    """Return the (column, row) nearest to a pixel position."""
    return (
        round((x - GRID_PADDING_PX) / _PITCH),
        round((y - GRID_PADDING_PX) / _PITCH),
    )


def cell_to_pixel(cell_x: int, cell_y: int) -> tuple[int, int]:
    """Return the pixel position of a cell's top-left corner."""
    return (
        GRID_PADDING_PX + cell_x * _PITCH,
        GRID_PADDING_PX + cell_y * _PITCH,
    )


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def cells_spanned(size: CharacterSize) -> int:
    """Number of cells a token of this size covers along each axis."""
    return math.ceil(TOKEN_SIZE_PX[size] / CELL_SIZE_PX)


def snap_to_grid(
    x: float,
    y: float,
    size: CharacterSize,
    grid_size: GridSize,
) -> Position:
    """Snap a dropped token to the board.

    Huge and giant tokens snap to cell intersections so that they cover
    whole cells. Smaller tokens are centred inside a single cell. The
    token's whole footprint is kept on the board.

    Args:
        x: Pixel x where the token was dropped.
        y: Pixel y where the token was dropped.
        size: Size class of the token.
        grid_size: Board dimensions used for clamping.

    Returns:
        The snapped, in-bounds Position.
    """
    span = cells_spanned(size)
    cell_x, cell_y = pixel_to_cell(x, y)
    cell_x = _clamp(cell_x, 0, grid_size.width - span)
    cell_y = _clamp(cell_y, 0, grid_size.height - span)
    px, py = cell_to_pixel(cell_x, cell_y)

    if size in MULTI_CELL_SIZES:
        return Position(x=px, y=py)

    offset = (CELL_SIZE_PX - TOKEN_SIZE_PX[size]) / 2
    return Position(x=px + offset, y=py + offset)
