"""
Road network between settlements.

Cities are joined closest pair first. Each road is an A* path over the
terrain cost surface, simplified with Douglas-Peucker.
"""

import heapq
import math
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import structlog
from pydantic import BaseModel, ConfigDict, Field

from ..config import WorldSettings
from ..utils.grid import DX, DY
from .settlements import City

logger = structlog.get_logger()

MAX_EXPANSIONS = 10000

Point = Tuple[int, int]


class Road(BaseModel):
    """A road between two cities."""

    model_config = ConfigDict(frozen=True)

    from_city_id: int = Field(description="Id of the first city")
    to_city_id: int = Field(description="Id of the second city")
    path: Tuple[Point, ...] = Field(description="Simplified polyline of grid coordinates")


class PathFinder:
    """A* search over the terrain travel cost of a world."""

    def __init__(
        self,
        height_map: np.ndarray,
        land_mask: np.ndarray,
        forest: np.ndarray,
        settings: WorldSettings,
    ):
        self.height, self.width = land_mask.shape
        self.options = settings.roads
        self.mountain_level = settings.map.sea_level + 0.5

        # Flat lists keep the inner loop off numpy scalar access
        self._heights = np.asarray(height_map, dtype=np.float64).ravel().tolist()
        self._land = (np.asarray(land_mask) == 1).ravel().tolist()
        self._forest = np.asarray(forest, dtype=np.float64).ravel().tolist()

    def step_cost(self, from_idx: int, to_idx: int) -> float:
        """Cost of moving into ``to_idx`` from a neighbouring cell."""
        if not self._land[to_idx]:
            return 1 + self.options.cost_water

        h = self._heights[to_idx]
        cost = 1 + abs(h - self._heights[from_idx]) * self.options.cost_elevation * 10
        if h > self.mountain_level:
            cost += self.options.cost_mountain
        cost += self.options.cost_forest * self._forest[to_idx] / 255
        return cost

    def find_path(self, start: Point, goal: Point) -> Optional[List[Point]]:
        """
        Cheapest 8-connected path from start to goal.

        Returns:
            Cells from start to goal inclusive, or None when the goal is not
            reached within MAX_EXPANSIONS expansions
        """
        width = self.width
        start_idx = start[1] * width + start[0]
        goal_idx = goal[1] * width + goal[0]
        goal_x, goal_y = goal

        g_score: Dict[int, float] = {start_idx: 0.0}
        came_from: Dict[int, int] = {}
        closed = set()
        counter = 0
        open_set = [(abs(start[0] - goal_x) + abs(start[1] - goal_y), counter, start_idx)]
        expansions = 0

        while open_set:
            _, _, current = heapq.heappop(open_set)
            if current in closed:
                continue

            expansions += 1
            if expansions > MAX_EXPANSIONS:
                break

            if current == goal_idx:
                return self._reconstruct(came_from, current)

            closed.add(current)

            cx = current % width
            cy = current // width
            current_g = g_score[current]

            for d in range(8):
                nx = cx + DX[d]
                ny = cy + DY[d]
                if nx < 0 or nx >= width or ny < 0 or ny >= self.height:
                    continue

                neighbour = ny * width + nx
                if neighbour in closed:
                    continue

                tentative = current_g + self.step_cost(current, neighbour)
                if tentative < g_score.get(neighbour, math.inf):
                    g_score[neighbour] = tentative
                    came_from[neighbour] = current
                    counter += 1
                    f = tentative + abs(nx - goal_x) + abs(ny - goal_y)
                    heapq.heappush(open_set, (f, counter, neighbour))

        return None

    def _reconstruct(self, came_from: Dict[int, int], current: int) -> List[Point]:
        path = [current]
        while current in came_from:
            current = came_from[current]
            path.append(current)
        path.reverse()
        return [(idx % self.width, idx // self.width) for idx in path]


def perpendicular_distance(point: Point, line_start: Point, line_end: Point) -> float:
    """Distance from point to the infinite line through line_start and line_end."""
    px, py = point
    x1, y1 = line_start
    x2, y2 = line_end
    dx = x2 - x1
    dy = y2 - y1
    length = math.hypot(dx, dy)
    if length == 0:
        return math.hypot(px - x1, py - y1)
    return abs(dy * px - dx * py + x2 * y1 - y2 * x1) / length


def simplify_path(path: List[Point], tolerance: float) -> List[Point]:
    """Douglas-Peucker simplification; both endpoints are always kept."""
    if len(path) <= 2:
        return list(path)

    keep = [False] * len(path)
    keep[0] = keep[-1] = True

    # Index ranges still to split, processed depth first
    ranges = [(0, len(path) - 1)]
    while ranges:
        start, end = ranges.pop()
        max_distance = 0.0
        index = start
        for i in range(start + 1, end):
            distance = perpendicular_distance(path[i], path[start], path[end])
            if distance > max_distance:
                max_distance = distance
                index = i

        if max_distance > tolerance:
            keep[index] = True
            ranges.append((index, end))
            ranges.append((start, index))

    return [point for point, kept in zip(path, keep) if kept]


def path_length(path: Sequence[Point]) -> float:
    """Euclidean length of a polyline."""
    return sum(
        math.hypot(b[0] - a[0], b[1] - a[1]) for a, b in zip(path, path[1:])
    )


def generate_roads(
    cities: Sequence[City],
    height_map: np.ndarray,
    land_mask: np.ndarray,
    forest: np.ndarray,
    settings: WorldSettings,
) -> Tuple[Road, ...]:
    """
    Connect cities with roads, closest pairs first.

    A pair is skipped once either city has ``max_connections_per_city``
    roads. Pairs with no path found are left unconnected.
    """
    options = settings.roads
    if not options.enabled or len(cities) < 2:
        return ()

    logger.info("Building roads", cities=len(cities))

    pairs = []
    for i in range(len(cities)):
        for j in range(i + 1, len(cities)):
            a, b = cities[i], cities[j]
            pairs.append((math.hypot(b.x - a.x, b.y - a.y), i, j))
    pairs.sort(key=lambda pair: pair[0])

    finder = PathFinder(height_map, land_mask, forest, settings)
    connections = [0] * len(cities)
    roads: List[Road] = []

    for _, i, j in pairs:
        limit = options.max_connections_per_city
        if connections[i] >= limit or connections[j] >= limit:
            continue

        a, b = cities[i], cities[j]
        path = finder.find_path((a.x, a.y), (b.x, b.y))
        if path is None:
            logger.debug("No road found", from_city=a.name, to_city=b.name)
            continue

        roads.append(
            Road(
                from_city_id=a.id,
                to_city_id=b.id,
                path=tuple(simplify_path(path, options.simplify_tolerance)),
            )
        )
        connections[i] += 1
        connections[j] += 1

    logger.info("Roads built", roads=len(roads))
    return tuple(roads)
