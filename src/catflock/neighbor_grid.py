from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence, Tuple

from pygame.math import Vector2

from .grid import Grid2D
from .vector import ceil_dimensions, floor_indices, wrap

if TYPE_CHECKING:
    from .cat import Cat

_NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)
_EMPTY: Tuple["Cat", ...] = ()


class NeighborGrid:
    """Uniform spatial hash over the arena, rebuilt every hard update.

    Cells are ``cell_size`` wide, which should equal the interaction radius so
    that the 3x3 block around a cat's cell covers everything it can interact
    with. ``create_groups`` concatenates each 3x3 block once per step; queries
    after that are a single lookup.
    """

    def __init__(self, width: float, height: float, cell_size: float, wrap_edges: bool = False) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self._cell_size = cell_size
        self._wrap_edges = wrap_edges
        self._dimensions = ceil_dimensions(width, height, cell_size)
        self._cells: Grid2D[List["Cat"]] = Grid2D(self._dimensions[0], self._dimensions[1], list)
        self._groups: Grid2D[List["Cat"]] | None = None

    @property
    def cell_size(self) -> float:
        return self._cell_size

    @property
    def dimensions(self) -> Tuple[int, int]:
        return self._dimensions

    @property
    def wrap_edges(self) -> bool:
        return self._wrap_edges

    def indices_of(self, position: Vector2) -> Tuple[int, int]:
        return floor_indices(position, self._cell_size)

    def wrap(self, indices: Tuple[int, int]) -> Tuple[int, int]:
        return (wrap(indices[0], self._dimensions[0]), wrap(indices[1], self._dimensions[1]))

    def add(self, cat: "Cat") -> None:
        # Positions must already be inside the arena; the grid does no correction.
        x, y = self.indices_of(cat.position)
        self._cells.get(x, y).append(cat)
        self._groups = None

    def cell(self, indices: Tuple[int, int]) -> List["Cat"]:
        return self._cells.get(indices[0], indices[1])

    def get_neighboring_cell(self, indices: Tuple[int, int], offset: Tuple[int, int]) -> Sequence["Cat"]:
        x = indices[0] + offset[0]
        y = indices[1] + offset[1]
        if self._cells.in_bounds(x, y):
            return self._cells.get(x, y)
        return _EMPTY

    def get_group(self, indices: Tuple[int, int]) -> List["Cat"]:
        group = list(self._cells.get(indices[0], indices[1]))
        if self._wrap_edges:
            # Small grids wrap onto the same cell more than once.
            visited = {indices}
            for dx, dy in _NEIGHBOR_OFFSETS:
                moved = self.wrap((indices[0] + dx, indices[1] + dy))
                if moved in visited:
                    continue
                visited.add(moved)
                group.extend(self._cells.get(moved[0], moved[1]))
            return group
        for offset in _NEIGHBOR_OFFSETS:
            group.extend(self.get_neighboring_cell(indices, offset))
        return group

    def create_groups(self) -> None:
        width, height = self._dimensions
        groups: Grid2D[List["Cat"]] = Grid2D(width, height)
        for y in range(height):
            for x in range(width):
                groups.set(x, y, self.get_group((x, y)))
        self._groups = groups

    def get_neighbors(self, cat: "Cat") -> List["Cat"]:
        """Cats in the 3x3 cell block around `cat`, including `cat` itself."""
        if self._groups is None:
            raise RuntimeError("create_groups() must run after the last add() and before get_neighbors()")
        x, y = self.indices_of(cat.position)
        return self._groups.get(x, y)
