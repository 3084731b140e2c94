"""
Diff Engine Models
Data structures passed between the diff engine stages and returned to callers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .errors import InvalidBuffer

RGB = Tuple[int, int, int]

# DiffMask cell states
UNCHANGED = 0
ANTI_ALIAS = 1
SIGNIFICANT = 2

SEVERITY_ORDER = {'high': 3, 'medium': 2, 'low': 1}
PRIORITY_ORDER = SEVERITY_ORDER


def color_to_css(color: RGB) -> str:
    return f"rgb({color[0]},{color[1]},{color[2]})"


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Decoded RGBA pixels, row-major, four uint8 samples per pixel."""
    width: int
    height: int
    data: Any

    def __post_init__(self):
        for name in ('width', 'height'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
                raise InvalidBuffer(f"{name} must be a positive integer, got {value!r}")
        raw = self.data
        if isinstance(raw, (bytes, bytearray, memoryview)):
            array = np.frombuffer(bytes(raw), dtype=np.uint8)
        else:
            array = np.asarray(raw)
            if array.dtype.kind not in 'ui':
                raise InvalidBuffer(f"pixel data must contain integers, got dtype {array.dtype}")
            if array.size and (array.min() < 0 or array.max() > 255):
                raise InvalidBuffer("pixel samples must be in the range 0-255")
        array = array.reshape(-1)
        expected_len = int(self.width) * int(self.height) * 4
        if array.size != expected_len:
            raise InvalidBuffer(
                f"buffer length {array.size} does not match {self.width}x{self.height}x4 = {expected_len}"
            )
        array = array.astype(np.uint8, copy=True)
        array.setflags(write=False)
        object.__setattr__(self, 'width', int(self.width))
        object.__setattr__(self, 'height', int(self.height))
        object.__setattr__(self, 'data', array)

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def as_array(self) -> np.ndarray:
        """Read-only (height, width, 4) view of the samples."""
        return self.data.reshape(self.height, self.width, 4)


@dataclass(frozen=True, eq=False)
class DiffMask:
    width: int
    height: int
    cells: np.ndarray

    def __post_init__(self):
        cells = np.ascontiguousarray(self.cells, dtype=np.uint8)
        if cells.shape != (self.height, self.width):
            raise ValueError(f"mask shape {cells.shape} does not match {self.width}x{self.height}")
        cells.setflags(write=False)
        object.__setattr__(self, 'cells', cells)

    def at(self, x: int, y: int) -> int:
        return int(self.cells[y, x])

    def significant(self) -> np.ndarray:
        return self.cells == SIGNIFICANT

    def anti_aliased(self) -> np.ndarray:
        return self.cells == ANTI_ALIAS

    @property
    def significant_count(self) -> int:
        return int(np.count_nonzero(self.cells == SIGNIFICANT))

    @property
    def anti_alias_count(self) -> int:
        return int(np.count_nonzero(self.cells == ANTI_ALIAS))


@dataclass(frozen=True)
class ColorCount:
    color: RGB
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {'color': color_to_css(self.color), 'count': self.count}


@dataclass(frozen=True)
class Region:
    x: int
    y: int
    width: int
    height: int
    pixel_count: int
    expected_colors: Tuple[ColorCount, ...] = ()
    actual_colors: Tuple[ColorCount, ...] = ()
    avg_color_delta: float = 0.0
    severity: str = 'low'
    type: str = 'position'
    zone: str = 'content'
    description: str = ''

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'height': self.height,
            'pixelCount': self.pixel_count,
            'severity': self.severity,
            'type': self.type,
            'zone': self.zone,
            'avgColorDelta': self.avg_color_delta,
            'description': self.description,
            'expectedColors': [c.to_dict() for c in self.expected_colors],
            'actualColors': [c.to_dict() for c in self.actual_colors],
        }


@dataclass(frozen=True)
class Heatmap:
    grid_size: int
    width: int
    height: int
    cells: Tuple[Tuple[float, ...], ...]
    max_count: int = 0

    @property
    def max_value(self) -> float:
        return max((max(row) for row in self.cells if row), default=0.0)

    def value_at(self, grid_x: int, grid_y: int) -> float:
        return self.cells[grid_y][grid_x]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'gridSize': self.grid_size,
            'width': self.width,
            'height': self.height,
            'maxCount': self.max_count,
            'data': [list(row) for row in self.cells],
        }


@dataclass(frozen=True)
class ColorDifference:
    expected_color: RGB
    actual_color: RGB
    pixel_count: int

    @property
    def expected_css(self) -> str:
        return color_to_css(self.expected_color)

    @property
    def actual_css(self) -> str:
        return color_to_css(self.actual_color)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'expectedColor': self.expected_css,
            'actualColor': self.actual_css,
            'pixelCount': self.pixel_count,
        }


@dataclass(frozen=True)
class Suggestion:
    type: str
    priority: str
    description: str
    suggested_fix: str
    affected_area: str
    impact: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'priority': self.priority,
            'description': self.description,
            'suggestedFix': self.suggested_fix,
            'affectedArea': self.affected_area,
            'impact': self.impact or self.priority,
        }


@dataclass(frozen=True)
class ComparisonResult:
    match_percentage: float
    diff_pixel_count: int
    total_pixel_count: int
    width: int
    height: int
    regions: Tuple[Region, ...]
    color_differences: Tuple[ColorDifference, ...]
    heatmap: Heatmap
    suggestions: Tuple[Suggestion, ...]
    metadata: Dict[str, Any] = field(default_factory=dict)
    anti_alias_pixel_count: int = 0
    mask: Optional[DiffMask] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe view for report renderers and tool surfaces."""
        return {
            'matchPercentage': self.match_percentage,
            'diffPixels': self.diff_pixel_count,
            'antiAliasPixels': self.anti_alias_pixel_count,
            'totalPixels': self.total_pixel_count,
            'dimensions': {'width': self.width, 'height': self.height},
            'regions': [r.to_dict() for r in self.regions],
            'colorAnalysis': [c.to_dict() for c in self.color_differences],
            'heatmapData': self.heatmap.to_dict(),
            'suggestions': [s.to_dict() for s in self.suggestions],
            'metadata': dict(self.metadata),
        }
