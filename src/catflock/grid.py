from __future__ import annotations

from typing import Callable, Generic, Iterator, List, Optional, Tuple, TypeVar

T = TypeVar("T")


class Grid2D(Generic[T]):
    """Dense fixed-size 2D array addressed by integer (x, y).

    Items are stored row-major in a flat list, ``index = y * width + x``. The
    dimensions are fixed at construction and every access outside them raises
    ``IndexError`` instead of silently reading a neighbouring row.
    """

    __slots__ = ("_width", "_height", "_items")

    def __init__(self, width: int, height: int, producer: Optional[Callable[[], T]] = None) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"grid dimensions must be non-negative, got {width}x{height}")
        self._width = width
        self._height = height
        self._items: List[Optional[T]] = [None] * (width * height)
        if producer is not None:
            self.fill(producer)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def dimensions(self) -> Tuple[int, int]:
        return (self._width, self._height)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)  # type: ignore[arg-type]

    def fill(self, producer: Callable[[], T]) -> None:
        """Replace every item with a fresh value from `producer`."""
        for index in range(len(self._items)):
            self._items[index] = producer()

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._width and 0 <= y < self._height

    def get(self, x: int, y: int) -> T:
        return self._items[self._index(x, y)]  # type: ignore[return-value]

    def set(self, x: int, y: int, value: T) -> None:
        self._items[self._index(x, y)] = value

    def _index(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            raise IndexError(f"cell ({x}, {y}) is outside a {self._width}x{self._height} grid")
        return y * self._width + x
