# Model loading and output logs

from .obj_loader import GeometryModel, GeometryPart, RenderBuffer, ObjLoader, assign_display_colors
from .data_writer import (
    OutputLog,
    FileSink,
    MemorySink,
    build_area_header,
    build_power_header,
    format_area_line,
    format_power_line,
)
from .log_reader import read_area_log, read_power_log, read_legend

__all__ = [
    # Geometry
    'GeometryModel',
    'GeometryPart',
    'RenderBuffer',
    'ObjLoader',
    'assign_display_colors',
    # Output
    'OutputLog',
    'FileSink',
    'MemorySink',
    'build_area_header',
    'build_power_header',
    'format_area_line',
    'format_power_line',
    # Reading
    'read_area_log',
    'read_power_log',
    'read_legend',
]
