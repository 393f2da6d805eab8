"""
Raster Device
=============

Software rasterization device with a depth buffer and occlusion queries.

Draw calls are queued and only executed when the device is flushed, so a
query's pixel count is unavailable until its commands have run. Callers must
wait for completion through wait_for_query, which is bounded and raises
QueryTimeout instead of spinning forever.

Rasterization rules:
- one sample per pixel, at the pixel centre
- top-left fill rule, so triangles sharing an edge never both cover a sample
- depth test LESS_EQUAL with depth writes enabled
- fragments outside the [0, 1] depth range are clipped
- no face culling
"""

import time
import logging
import threading
from typing import List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class QueryTimeout(RuntimeError):
    """Raised when an occlusion query does not complete within the allowed wait."""


class QueryCancelled(QueryTimeout):
    """Raised when a query wait is cancelled before completion."""


class OcclusionQuery:
    """
    Counts fragments that pass the depth test between begin() and end().

    The pixel count may only be read once is_complete is True.
    """

    def __init__(self, device: "RasterDevice", query_id: int):
        self.device = device
        self.query_id = query_id
        self._count = 0
        self._complete = False
        self._issued = False

    def begin(self) -> None:
        self.device.begin_query(self)

    def end(self) -> None:
        self.device.end_query(self)

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def pixel_count(self) -> int:
        if not self._complete:
            raise RuntimeError(f"Occlusion query {self.query_id} read before completion")
        return self._count


class RasterDevice:
    """
    Depth-buffered triangle rasterizer with occlusion queries.

    Must be used from a single thread.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid render target size: {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.depth = np.ones((self.height, self.width), dtype=np.float64)
        self.transform = np.eye(4)

        self._commands: List[Tuple[str, object]] = []
        self._active_query: Optional[OcclusionQuery] = None     # state while recording
        self._executing_query: Optional[OcclusionQuery] = None  # state while flushing
        self._next_query_id = 0

        self.stats = {
            'draw_calls': 0,
            'triangles': 0,
            'fragments': 0
        }
        logger.debug(f"Raster device initialized ({self.width}x{self.height})")

    # =========================================================================
    # Command recording
    # =========================================================================

    def clear(self, depth: float = 1.0) -> None:
        self._commands.append(('clear', float(depth)))

    def set_transform(self, matrix: np.ndarray) -> None:
        """Set the 4x4 model-view-projection matrix for following draw calls."""
        matrix = np.asarray(matrix, dtype=np.float64)
        if matrix.shape != (4, 4):
            raise ValueError(f"Transform must be 4x4, got {matrix.shape}")
        self._commands.append(('transform', matrix.copy()))

    def draw_triangles(self, positions: np.ndarray) -> None:
        """
        Queue a triangle list.

        Args:
            positions: (3*K, 3) vertex positions, three consecutive rows per triangle
        """
        positions = np.asarray(positions, dtype=np.float64)
        if positions.ndim != 2 or positions.shape[1] != 3 or len(positions) % 3 != 0:
            raise ValueError(f"Triangle list must have shape (3K, 3), got {positions.shape}")
        if len(positions) == 0:
            return
        self._commands.append(('draw', positions))

    def create_query(self) -> OcclusionQuery:
        query = OcclusionQuery(self, self._next_query_id)
        self._next_query_id += 1
        return query

    def begin_query(self, query: OcclusionQuery) -> None:
        if self._active_query is not None:
            raise RuntimeError("Another occlusion query is active on this render target")
        if query._issued and not query._complete:
            raise RuntimeError(f"Occlusion query {query.query_id} is still outstanding")
        query._complete = False
        query._issued = False
        query._count = 0
        self._active_query = query
        self._commands.append(('begin', query))

    def end_query(self, query: OcclusionQuery) -> None:
        if self._active_query is not query:
            raise RuntimeError(f"Occlusion query {query.query_id} is not active")
        self._active_query = None
        query._issued = True
        self._commands.append(('end', query))

    # =========================================================================
    # Execution
    # =========================================================================

    def flush(self) -> None:
        """Execute all queued commands in order."""
        commands, self._commands = self._commands, []
        for op, arg in commands:
            if op == 'clear':
                self.depth.fill(arg)
            elif op == 'transform':
                self.transform = arg
            elif op == 'draw':
                passed = self._draw(arg)
                if self._executing_query is not None:
                    self._executing_query._count += passed
            elif op == 'begin':
                self._executing_query = arg
            elif op == 'end':
                arg._complete = True
                self._executing_query = None

    def wait_for_query(
        self,
        query: OcclusionQuery,
        timeout_s: float,
        poll_interval_s: float = 0.0005,
        cancel_event: Optional[threading.Event] = None
    ) -> int:
        """
        Block until the query completes and return its pixel count.

        Args:
            query: Query that has been ended
            timeout_s: Maximum time to wait
            poll_interval_s: Sleep between completion checks
            cancel_event: Optional event that aborts the wait when set

        Returns:
            Number of fragments that passed the depth test

        Raises:
            QueryTimeout: If the query is not complete within timeout_s
            QueryCancelled: If cancel_event is set before completion
        """
        deadline = time.monotonic() + timeout_s
        while not query.is_complete:
            self.flush()
            if query.is_complete:
                break
            if cancel_event is not None and cancel_event.is_set():
                raise QueryCancelled(f"Wait for occlusion query {query.query_id} cancelled")
            if time.monotonic() >= deadline:
                raise QueryTimeout(f"Occlusion query {query.query_id} did not complete within {timeout_s:.3f}s")
            time.sleep(poll_interval_s)
        return query.pixel_count

    def read_depth(self) -> np.ndarray:
        """Flush and return a copy of the depth buffer."""
        self.flush()
        return self.depth.copy()

    # =========================================================================
    # Rasterization
    # =========================================================================

    def _to_screen(self, positions: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        # Elementwise products keep shared vertices bit-identical across triangles
        m = self.transform
        px, py, pz = positions[:, 0], positions[:, 1], positions[:, 2]
        cx = px * m[0, 0] + py * m[0, 1] + pz * m[0, 2] + m[0, 3]
        cy = px * m[1, 0] + py * m[1, 1] + pz * m[1, 2] + m[1, 3]
        cz = px * m[2, 0] + py * m[2, 1] + pz * m[2, 2] + m[2, 3]
        cw = px * m[3, 0] + py * m[3, 1] + pz * m[3, 2] + m[3, 3]

        with np.errstate(divide='ignore', invalid='ignore'):
            ndc_x = cx / cw
            ndc_y = cy / cw
            ndc_z = cz / cw

        sx = (ndc_x + 1.0) * 0.5 * self.width
        sy = (1.0 - ndc_y) * 0.5 * self.height
        return sx, sy, ndc_z

    def _draw(self, positions: np.ndarray) -> int:
        sx, sy, sz = self._to_screen(positions)
        num_triangles = len(positions) // 3
        passed_total = 0

        for t in range(num_triangles):
            k = 3 * t
            passed_total += self._rasterize_triangle(
                (sx[k], sy[k], sz[k]),
                (sx[k + 1], sy[k + 1], sz[k + 1]),
                (sx[k + 2], sy[k + 2], sz[k + 2])
            )

        self.stats['draw_calls'] += 1
        self.stats['triangles'] += num_triangles
        self.stats['fragments'] += passed_total
        return passed_total

    @staticmethod
    def _edge(a, b, px: np.ndarray, py: np.ndarray) -> np.ndarray:
        """
        Edge function of a->b at sample points.

        Evaluated from the lexicographically smaller endpoint so that an edge
        shared by two triangles gives exactly negated values on both sides.
        """
        if (a[0], a[1]) > (b[0], b[1]):
            return -((a[0] - b[0]) * (py - b[1]) - (a[1] - b[1]) * (px - b[0]))
        return (b[0] - a[0]) * (py - a[1]) - (b[1] - a[1]) * (px - a[0])

    @staticmethod
    def _is_top_left(a, b) -> bool:
        dx = b[0] - a[0]
        dy = b[1] - a[1]
        return dy > 0 or (dy == 0 and dx < 0)

    def _covers(self, edge: np.ndarray, a, b) -> np.ndarray:
        if self._is_top_left(a, b):
            return edge >= 0
        return edge > 0

    def _rasterize_triangle(self, v0, v1, v2) -> int:
        if not np.all(np.isfinite([v0, v1, v2])):
            return 0

        area = (v1[0] - v0[0]) * (v2[1] - v0[1]) - (v1[1] - v0[1]) * (v2[0] - v0[0])
        if area == 0:
            return 0
        if area < 0:
            v1, v2 = v2, v1
            area = -area

        xs = (v0[0], v1[0], v2[0])
        ys = (v0[1], v1[1], v2[1])

        # Pixel index range whose centres (i + 0.5) can lie inside the triangle
        i0 = max(int(np.ceil(min(xs) - 0.5)), 0)
        i1 = min(int(np.floor(max(xs) - 0.5)), self.width - 1)
        j0 = max(int(np.ceil(min(ys) - 0.5)), 0)
        j1 = min(int(np.floor(max(ys) - 0.5)), self.height - 1)
        if i0 > i1 or j0 > j1:
            return 0

        px, py = np.meshgrid(
            np.arange(i0, i1 + 1, dtype=np.float64) + 0.5,
            np.arange(j0, j1 + 1, dtype=np.float64) + 0.5
        )

        w0 = self._edge(v1, v2, px, py)
        w1 = self._edge(v2, v0, px, py)
        w2 = self._edge(v0, v1, px, py)

        inside = self._covers(w0, v1, v2) & self._covers(w1, v2, v0) & self._covers(w2, v0, v1)
        if not inside.any():
            return 0

        z = (w0 * v0[2] + w1 * v1[2] + w2 * v2[2]) / area

        tile = self.depth[j0:j1 + 1, i0:i1 + 1]
        passed = inside & (z >= 0.0) & (z <= 1.0) & (z <= tile)
        tile[passed] = z[passed]
        return int(np.count_nonzero(passed))
