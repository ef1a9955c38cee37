"""
Hydrology system for river generation and water flow simulation.

This module implements:
- Steepest-descent flow directions over the 8-neighbourhood
- Flow accumulation in topological order
- River extraction from accumulated flow
- Lake detection in undrained basins
- Distance-to-water field
"""

from collections import deque
from typing import Optional

import numpy as np
import structlog

from ..config import HydrologySettings
from ..utils.grid import DX, DY, NO_FLOW, SQRT2, STEP_DISTANCE, neighbour_view

logger = structlog.get_logger()

# Lake fill limits, not exposed as settings
LAKE_MAX_CELLS = 100
LAKE_HEIGHT_TOLERANCE = 0.02

RIVER_INTENSITY_SCALE = 50


def calculate_flow_direction(height_map: np.ndarray, land_mask: np.ndarray) -> np.ndarray:
    """
    Calculate the steepest-descent direction code of every land cell.

    Ties keep the lowest direction code; cells without a lower neighbour,
    and all water cells, get NO_FLOW.
    """
    h = np.asarray(height_map, dtype=np.float64)
    flow_dir = np.full(h.shape, NO_FLOW, dtype=np.int8)
    steepest = np.zeros(h.shape, dtype=np.float64)

    for d in range(8):
        # Off-map neighbours read +inf and never win
        neighbour = neighbour_view(h, DX[d], DY[d], np.inf)
        slope = (h - neighbour) / STEP_DISTANCE[d]
        better = slope > steepest
        steepest = np.where(better, slope, steepest)
        flow_dir[better] = d

    flow_dir[land_mask != 1] = NO_FLOW
    logger.info(
        "Flow directions calculated",
        sinks=int(((flow_dir == NO_FLOW) & (land_mask == 1)).sum()),
    )
    return flow_dir


def downstream_cells(flow_dir: np.ndarray) -> np.ndarray:
    """Flat index of the cell each cell drains into, or -1."""
    height, width = flow_dir.shape
    ys, xs = np.indices((height, width))
    dx = np.asarray(DX, dtype=np.int64)
    dy = np.asarray(DY, dtype=np.int64)

    has_flow = flow_dir >= 0
    codes = np.where(has_flow, flow_dir, 0).astype(np.int64)
    tx = xs + dx[codes]
    ty = ys + dy[codes]
    valid = has_flow & (tx >= 0) & (tx < width) & (ty >= 0) & (ty < height)
    return np.where(valid, ty * width + tx, -1).ravel()


def calculate_flow_accumulation(flow_dir: np.ndarray, land_mask: np.ndarray) -> np.ndarray:
    """
    Accumulate one unit of rainfall per cell along the flow graph.

    Cells are drained in topological order: a cell is processed only after
    all land cells upstream of it, so every value is final when propagated.
    """
    land = land_mask.ravel() == 1
    target = downstream_cells(flow_dir)
    target[~land] = -1

    in_degree = np.bincount(target[target >= 0], minlength=target.size).tolist()
    accumulation = [1.0] * target.size
    target_list = target.tolist()
    land_list = land.tolist()

    queue = deque(int(i) for i in np.flatnonzero(land & (np.asarray(in_degree) == 0)))

    while queue:
        idx = queue.popleft()
        nidx = target_list[idx]
        if nidx < 0:
            continue

        accumulation[nidx] += accumulation[idx]
        in_degree[nidx] -= 1
        if in_degree[nidx] == 0 and land_list[nidx]:
            queue.append(nidx)

    result = np.asarray(accumulation, dtype=np.float32).reshape(flow_dir.shape)
    logger.info("Flow accumulation calculated", max_flow=float(result.max()))
    return result


def generate_rivers(
    flow_accumulation: np.ndarray, land_mask: np.ndarray, options: HydrologySettings
) -> np.ndarray:
    """Mark land cells with enough flow as rivers with a log-scaled intensity."""
    min_accum = options.river_min_accum
    accumulation = np.asarray(flow_accumulation, dtype=np.float64)
    is_river = (land_mask == 1) & (accumulation >= min_accum)

    intensity = np.floor(np.log(accumulation / min_accum + 1) * RIVER_INTENSITY_SCALE)
    intensity = np.clip(intensity, 1, 255)

    rivers = np.zeros(accumulation.shape, dtype=np.uint8)
    rivers[is_river] = intensity[is_river].astype(np.uint8)

    logger.info("Rivers generated", river_cells=int(is_river.sum()))
    return rivers


def detect_lakes(
    height_map: np.ndarray,
    land_mask: np.ndarray,
    flow_dir: np.ndarray,
    options: HydrologySettings,
) -> np.ndarray:
    """
    Fill small lakes around undrained interior land cells.

    Each sink seeds a breadth-first fill over land neighbours no higher than
    the sink plus LAKE_HEIGHT_TOLERANCE, stopping at LAKE_MAX_CELLS cells.
    """
    height, width = height_map.shape
    lake_mask = np.zeros((height, width), dtype=np.uint8)

    if not options.lake_fill_enabled:
        return lake_mask

    interior = np.zeros((height, width), dtype=bool)
    interior[1:-1, 1:-1] = True
    sinks = np.flatnonzero(interior & (land_mask == 1) & (flow_dir < 0))

    heights = np.asarray(height_map, dtype=np.float64).ravel().tolist()
    land = (land_mask.ravel() == 1).tolist()
    lake = lake_mask.ravel()

    for sink in sinks.tolist():
        limit = heights[sink] + LAKE_HEIGHT_TOLERANCE
        queue = deque([sink])
        visited = set()
        size = 0

        while queue and size < LAKE_MAX_CELLS:
            current = queue.popleft()
            if current in visited:
                continue
            visited.add(current)

            if heights[current] > limit:
                continue

            lake[current] = 1
            size += 1

            cx = current % width
            cy = current // width
            for d in range(8):
                nx = cx + DX[d]
                ny = cy + DY[d]
                if 0 <= nx < width and 0 <= ny < height:
                    nidx = ny * width + nx
                    if land[nidx] and nidx not in visited:
                        queue.append(nidx)

    logger.info("Lakes detected", sinks=int(sinks.size), lake_cells=int(lake_mask.sum()))
    return lake_mask


def calculate_water_distance(
    land_mask: np.ndarray, rivers: np.ndarray, lake_mask: np.ndarray
) -> np.ndarray:
    """
    Distance from every cell to the nearest water cell, normalized to [0, 1].

    Water is ocean, river or lake. Steps are 8-directional with cost 1 for
    orthogonal and sqrt(2) for diagonal moves. Without obstacles the shortest
    path to any source is monotone in y, so a downward and an upward row sweep
    (each relaxing from the adjacent row, then along the row in both
    directions) give the same result as a multi-source breadth-first search.
    """
    water = (land_mask == 0) | (rivers > 0) | (lake_mask == 1)
    distance = np.where(water, 0.0, np.inf)
    height, width = distance.shape
    xs = np.arange(width, dtype=np.float64)

    def relax_row(row: np.ndarray, previous: Optional[np.ndarray]) -> np.ndarray:
        if previous is not None:
            row = np.minimum(row, previous + 1.0)
            diagonal = np.full(width, np.inf)
            diagonal[1:] = previous[:-1] + SQRT2
            diagonal[:-1] = np.minimum(diagonal[:-1], previous[1:] + SQRT2)
            row = np.minimum(row, diagonal)
        # Along the row: d[x] = min over k of d[k] + |x - k|
        row = np.minimum(row, np.minimum.accumulate(row - xs) + xs)
        row = np.minimum(row, np.minimum.accumulate((row + xs)[::-1])[::-1] - xs)
        return row

    for y in range(height):
        distance[y] = relax_row(distance[y], distance[y - 1] if y > 0 else None)
    for y in range(height - 2, -1, -1):
        distance[y] = relax_row(distance[y], distance[y + 1])

    finite = np.isfinite(distance)
    max_dist = float(distance[finite].max()) if finite.any() else 0.0

    if not finite.any():
        normalized = np.ones_like(distance)
    elif max_dist > 0:
        normalized = np.minimum(1.0, distance / max_dist)
    else:
        normalized = distance

    logger.info("Water distance calculated", max_distance=round(max_dist, 3))
    return normalized.astype(np.float32)


