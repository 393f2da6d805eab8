"""
Wavefront OBJ loader and core model definitions for solar area estimation.

This module provides:
- Core data structures: GeometryPart, RenderBuffer, GeometryModel
- OBJ parsing (objects, vertices, faces) with per-part vertex offsets
- Display palette assignment and per-part render buffer construction

Each "o NAME" object in the file is treated as one measured part.
"""

import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np
import trimesh

from ..utils.error_reporter import ErrorReporter, resolve_reporter

logger = logging.getLogger(__name__)

Color = Tuple[float, float, float, float]

WHITE: Color = (1.0, 1.0, 1.0, 1.0)

# Synthetic per-vertex normals for the three corners of every triangle.
# Only depth/visibility is measured, so geometric normals are not needed.
SYNTHETIC_NORMALS = np.array([
    [1.0, 0.0, 0.0],
    [0.0, 1.0, 0.0],
    [0.0, 0.0, 1.0]
])


# =============================================================================
# Core Data Structures
# =============================================================================

@dataclass
class GeometryPart:
    """
    A named part of the satellite model (e.g. solar panel, bus side).

    Attributes:
        name: Part name from the "o" line.
        vertices: Model-scaled vertex positions (n, 3).
        faces: Triangles as part-local, 0-based vertex indices (m, 3).
        color: Display color (r, g, b, a), used only for inspection.
    """
    name: str
    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)), repr=False)
    faces: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.int64), repr=False)
    color: Color = WHITE

    @property
    def num_triangles(self) -> int:
        return len(self.faces)

    def triangle_vertices(self) -> np.ndarray:
        """Vertex positions of all triangles, shape (m, 3, 3)."""
        if len(self.faces) == 0:
            return np.zeros((0, 3, 3))
        return self.vertices[self.faces]


@dataclass
class RenderBuffer:
    """
    Flattened per-vertex data of one part, three rows per triangle.

    Attributes:
        positions: Vertex positions (3m, 3).
        normals: Synthetic normals (3m, 3).
        colors: Vertex colors (3m, 4).
    """
    positions: np.ndarray
    normals: np.ndarray
    colors: np.ndarray

    @property
    def vertex_count(self) -> int:
        return len(self.positions)


class GeometryModel:
    """
    Ordered list of parts plus derived render buffers.

    Parts are index-stable; a reload replaces the whole model. Render
    buffers are rebuilt only when geometry or colors change.
    """

    def __init__(self, parts: Optional[List[GeometryPart]] = None, name: str = ""):
        self.name = name
        self._parts: List[GeometryPart] = list(parts) if parts else []
        self._buffers: List[RenderBuffer] = []
        self._dirty = True
        self.rebuild_count = 0

    @property
    def parts(self) -> Tuple[GeometryPart, ...]:
        return tuple(self._parts)

    @property
    def part_names(self) -> List[str]:
        return [part.name for part in self._parts]

    @property
    def num_parts(self) -> int:
        return len(self._parts)

    @property
    def num_triangles(self) -> int:
        return sum(part.num_triangles for part in self._parts)

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def is_empty(self) -> bool:
        return len(self._parts) == 0

    def set_part_color(self, part_index: int, color: Color) -> None:
        """Change the display color of a part and mark buffers for rebuild."""
        part = self._parts[part_index]
        if part.color != color:
            part.color = color
            self._dirty = True

    def apply_palette(self, palette: List[Color]) -> None:
        """Assign palette colors to parts cyclically."""
        if not palette:
            palette = [WHITE]
        for i in range(len(self._parts)):
            self.set_part_color(i, palette[i % len(palette)])

    def rebuild_buffers(self) -> List[RenderBuffer]:
        """
        Build per-part render buffers if geometry or colors changed.

        Idempotent: returns the existing buffers when nothing changed.
        """
        if not self._dirty:
            return self._buffers

        buffers = []
        for part in self._parts:
            positions = part.triangle_vertices().reshape(-1, 3)
            num_tris = part.num_triangles
            normals = np.tile(SYNTHETIC_NORMALS, (num_tris, 1))
            colors = np.tile(np.asarray(part.color, dtype=np.float64), (3 * num_tris, 1))
            buffers.append(RenderBuffer(positions=positions, normals=normals, colors=colors))

        self._buffers = buffers
        self._dirty = False
        self.rebuild_count += 1
        logger.debug(f"Rebuilt render buffers for {len(buffers)} parts ({self.vertex_count} vertices)")
        return self._buffers

    @property
    def render_buffers(self) -> List[RenderBuffer]:
        return self.rebuild_buffers()

    @property
    def vertex_count(self) -> int:
        return sum(buffer.vertex_count for buffer in self._buffers)

    def face_part_indices(self) -> np.ndarray:
        """Part index of every triangle, in load order."""
        if not self._parts:
            return np.zeros(0, dtype=np.int64)
        return np.concatenate([
            np.full(part.num_triangles, i, dtype=np.int64) for i, part in enumerate(self._parts)
        ])

    def to_trimesh(self, part_index: Optional[int] = None) -> Optional[trimesh.Trimesh]:
        """
        Create a trimesh of the whole model or a single part.

        Triangles keep load order and are not merged, so face i of the
        combined mesh belongs to face_part_indices()[i].
        """
        parts = self._parts if part_index is None else [self._parts[part_index]]
        triangles = [part.triangle_vertices() for part in parts if part.num_triangles > 0]
        if not triangles:
            return None

        triangles = np.concatenate(triangles)
        vertices = triangles.reshape(-1, 3)
        faces = np.arange(len(vertices)).reshape(-1, 3)
        return trimesh.Trimesh(vertices=vertices, faces=faces, process=False)

    def surface_areas(self) -> np.ndarray:
        """One-sided triangle surface area of every part (scaled model units squared)."""
        areas = np.zeros(len(self._parts))
        for i in range(len(self._parts)):
            mesh = self.to_trimesh(i)
            if mesh is not None:
                areas[i] = mesh.area
        return areas


# =============================================================================
# Palette
# =============================================================================

def assign_display_colors(count: int, use_grayscale: bool = True) -> List[Color]:
    """
    Build a deterministic display palette for a given number of parts.

    Args:
        count: Number of parts.
        use_grayscale: Gray ramp if True, otherwise an RGB grid.

    Returns:
        List of (r, g, b, a) colors; may be shorter than count for the RGB
        grid, in which case colors are reused cyclically.
    """
    palette: List[Color] = []
    if count <= 0:
        return palette

    if use_grayscale:
        for k in range(1, count + 1):
            g = k / (count + 1)
            palette.append((g, g, g, 1.0))
    else:
        step = 3.0 / count
        levels = []
        value = step
        while value < 1.0:
            levels.append(value)
            value += step
        for r in levels:
            for g in levels:
                for b in levels:
                    palette.append((r, g, b, 1.0))

    return palette


# =============================================================================
# OBJ Loading
# =============================================================================

class ObjLoader:
    """Loads Wavefront OBJ text and converts it to a GeometryModel."""

    @staticmethod
    def parse(
        lines: Iterable[str],
        model_scale: float = 1.0,
        use_grayscale: bool = True,
        reporter: Optional[ErrorReporter] = None,
        name: str = ""
    ) -> GeometryModel:
        """
        Parse OBJ lines into a GeometryModel.

        Face indices are 1-based and global; they are converted to part-local
        indices by subtracting the vertex count of all previously closed
        parts. Only the first three indices of a face are used.

        Args:
            lines: OBJ file lines.
            model_scale: Factor applied to every vertex coordinate.
            use_grayscale: Palette type for display colors.
            reporter: Error reporter for malformed lines.
            name: Model name for logging.

        Returns:
            GeometryModel with one part per "o" object.
        """
        reporter = resolve_reporter(reporter)

        names: List[str] = []
        vertices: List[List[List[float]]] = []
        faces: List[List[Tuple[int, int, int]]] = []
        truncated: List[int] = []
        vertex_offset = 0

        def open_part(part_name: str) -> None:
            nonlocal vertex_offset
            if vertices:
                vertex_offset += len(vertices[-1])
            names.append(part_name)
            vertices.append([])
            faces.append([])
            truncated.append(0)

        for line_number, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line:
                continue

            prefix = line[:2]
            if prefix == "o ":
                open_part(line[2:].strip())
                continue
            if prefix not in ("v ", "f "):
                continue

            if not names:
                logger.warning("Geometry found before any object line, using implicit part 'default'")
                open_part("default")

            tokens = line.split()
            if prefix == "v ":
                if len(tokens) < 4:
                    reporter.report(f"ObjLoader: line {line_number}: vertex needs 3 coordinates, got {len(tokens) - 1}")
                    continue
                try:
                    vertex = [float(tokens[1]) * model_scale,
                              float(tokens[2]) * model_scale,
                              float(tokens[3]) * model_scale]
                except ValueError:
                    reporter.report(f"ObjLoader: line {line_number}: invalid vertex <{line}>")
                    continue
                vertices[-1].append(vertex)
            else:
                if len(tokens) < 4:
                    reporter.report(f"ObjLoader: line {line_number}: face needs 3 vertex indices, got {len(tokens) - 1}")
                    continue
                try:
                    indices = tuple(int(token.split('/')[0]) - 1 - vertex_offset for token in tokens[1:4])
                except ValueError:
                    reporter.report(f"ObjLoader: line {line_number}: invalid face <{line}>")
                    continue
                if len(tokens) > 4:
                    truncated[-1] += 1
                faces[-1].append(indices)

        parts = []
        for part_name, part_vertices, part_faces, num_truncated in zip(names, vertices, faces, truncated):
            vertex_array = np.array(part_vertices, dtype=np.float64).reshape(-1, 3)
            face_array = np.array(part_faces, dtype=np.int64).reshape(-1, 3)

            # Faces referencing vertices outside the part are dropped
            valid = np.all((face_array >= 0) & (face_array < len(vertex_array)), axis=1)
            for bad in face_array[~valid]:
                reporter.report(f"ObjLoader: part <{part_name}>: face {list(bad + 1)} references "
                                f"vertices outside the part ({len(vertex_array)} vertices)")
            face_array = face_array[valid]

            if num_truncated:
                logger.warning(f"  Part '{part_name}': {num_truncated} faces with more than 3 vertices "
                               f"truncated to their first triangle")

            parts.append(GeometryPart(name=part_name, vertices=vertex_array, faces=face_array))

        model = GeometryModel(parts, name=name)
        model.apply_palette(assign_display_colors(model.num_parts, use_grayscale))

        for i, part in enumerate(model.parts):
            logger.debug(f"  Part {i}: {part.name} with {len(part.vertices)} vertices, "
                         f"{part.num_triangles} triangles, color = {part.color}")
        logger.info(f"Loaded model '{name}' with {model.num_parts} parts, {model.num_triangles} triangles")
        return model

    @staticmethod
    def load_file(
        path: Union[str, Path],
        model_scale: float = 1.0,
        use_grayscale: bool = True,
        reporter: Optional[ErrorReporter] = None
    ) -> GeometryModel:
        """
        Load a model from an OBJ file.

        A missing file is reported and yields an empty model.
        """
        reporter = resolve_reporter(reporter)
        path = Path(path)

        if not path.exists():
            reporter.report(f"ObjLoader: File <{path}> not found.")
            return GeometryModel(name=path.stem)

        logger.info(f"Loading model from: {path}")
        with open(path, 'r') as f:
            return ObjLoader.parse(f, model_scale=model_scale, use_grayscale=use_grayscale,
                                   reporter=reporter, name=path.stem)
