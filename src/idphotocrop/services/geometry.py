"""
Axis-aligned rectangle and candidate types.

All rectangles are expressed in full-image pixel coordinates unless a
docstring says otherwise (detectors report region-local coordinates).
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned rectangle with positive width and height.

    Attributes:
        x: Left edge
        y: Top edge
        width: Horizontal extent (> 0)
        height: Vertical extent (> 0)
    """

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Rectangle must have positive size, got {self.width}x{self.height}")

    @classmethod
    def from_corners(cls, x0: float, y0: float, x1: float, y1: float) -> "Rectangle":
        """Build a rectangle from two opposite corners given in any order."""
        return cls(min(x0, x1), min(y0, y1), abs(x1 - x0), abs(y1 - y0))

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    def contains(self, px: float, py: float) -> bool:
        """Hit-test a point against the closed interval [x, x+w] × [y, y+h]."""
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def translated(self, dx: float, dy: float) -> "Rectangle":
        return Rectangle(self.x + dx, self.y + dy, self.width, self.height)

    def scaled(self, factor: float) -> "Rectangle":
        """Scale every coordinate, e.g. to map a display selection to source pixels."""
        return Rectangle(self.x * factor, self.y * factor, self.width * factor, self.height * factor)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True)
class Candidate:
    """A detected rectangle believed to bound a photo.

    Attributes:
        rect: Rectangle in full-image coordinates
        region_index: Index of the search region that produced it
        area: Derived rectangle area, used for ranking
        aspect_ratio: Derived width/height, used for filtering
    """

    rect: Rectangle
    region_index: int = -1
    area: float = field(init=False)
    aspect_ratio: float = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "area", self.rect.area)
        object.__setattr__(self, "aspect_ratio", self.rect.aspect_ratio)

    def area_ratio(self, image_width: int, image_height: int) -> float:
        """Fraction of the full image covered by this candidate."""
        return self.area / (image_width * image_height)


@dataclass(frozen=True)
class CropSpec:
    """Final extraction rectangle, clipped to the source image.

    Attributes:
        rect: Integer pixel rectangle fully inside the source bounds
        padding_ratio: Padding that was applied before clipping
    """

    rect: Rectangle
    padding_ratio: float

    @property
    def box(self) -> tuple[int, int, int, int]:
        """Integer (x, y, width, height) for slicing."""
        return (int(self.rect.x), int(self.rect.y), int(self.rect.width), int(self.rect.height))
