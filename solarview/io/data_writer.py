"""
Data export utilities for area and power results.

Lines are collected in memory and written to the output files in blocks, so
long runs do not reopen the files for every time step. The first write of a
run creates/truncates the file; later writes append.

Output formats:
- area:  "timestamp;area1;...;areaN" in m^2
- power: "timestamp;power" in W
each preceded by a generation-time line and a numbered column legend.
"""

import logging
from pathlib import Path
from datetime import datetime
from typing import List, Optional, Sequence, Union

logger = logging.getLogger(__name__)


class FileSink:
    """Writes line blocks to a text file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.write_count = 0

    def write_lines(self, lines: Sequence[str], append: bool) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'a' if append else 'w') as f:
            for line in lines:
                f.write(line + '\n')
        self.write_count += 1
        logger.debug(f"Wrote {len(lines)} lines to {self.path} (append={append})")


class OutputLog:
    """
    Block-buffered output log.

    Lines are flushed automatically once block_size lines are pending, or
    on an explicit flush. A disabled log discards lines.
    """

    def __init__(self, sink, block_size: int = 10000, enabled: bool = True, name: str = "output"):
        """
        Args:
            sink: Object with write_lines(lines, append)
            block_size: Pending line count that triggers a write
            enabled: If False, lines are dropped and nothing is written
            name: Label for log messages
        """
        if block_size < 1:
            raise ValueError(f"block_size must be at least 1: {block_size}")
        self.sink = sink
        self.block_size = block_size
        self.enabled = enabled
        self.name = name
        self.buffer: List[str] = []
        self._append = False
        self.lines_written = 0

    def start_run(self, header_lines: Optional[Sequence[str]] = None) -> None:
        """
        Begin a new output file: pending lines are dropped, the header is
        written immediately and the file is truncated.
        """
        self.buffer = []
        self._append = False
        if not self.enabled:
            logger.warning(f"Attention: {self.name} data will not be saved to file!")
            return
        if header_lines:
            self.buffer.extend(header_lines)
            self.flush()

    def add_line(self, line: str, write_now: bool = False) -> None:
        """Queue a line and write the block if it is full or write_now is set."""
        if not self.enabled:
            return
        self.buffer.append(line)
        if write_now or len(self.buffer) >= self.block_size:
            self.flush()

    def flush(self) -> int:
        """
        Write all pending lines.

        Returns:
            Number of lines written
        """
        if not self.enabled or not self.buffer:
            return 0

        lines, self.buffer = self.buffer, []
        self.sink.write_lines(lines, append=self._append)
        self._append = True
        self.lines_written += len(lines)
        return len(lines)

    @property
    def pending(self) -> int:
        return len(self.buffer)


def build_area_header(part_names: Sequence[str], generated: Optional[datetime] = None) -> List[str]:
    """
    Header of the area output file.

    Args:
        part_names: Part names in column order
        generated: Generation time (defaults to now)

    Returns:
        Header lines, one legend entry per column
    """
    generated = generated or datetime.now()
    header = [f"% File generated on {generated.strftime('%Y-%m-%d %H:%M:%S')}",
              "% 1: time [s]"]
    for column, name in enumerate(part_names, start=2):
        header.append(f"% {column}: {name} [m^2]")
    return header


def build_power_header(generated: Optional[datetime] = None) -> List[str]:
    """Header of the power output file."""
    generated = generated or datetime.now()
    return [f"% File generated on {generated.strftime('%Y-%m-%d %H:%M:%S')}",
            "% 1: time [s]",
            "% 2: power [W]"]


def format_area_line(timestamp: str, areas: Sequence[float], float_format: str = ".6f") -> str:
    return ";".join([timestamp] + [format(float(a), float_format) for a in areas])


def format_power_line(timestamp: str, power: float, float_format: str = ".6f") -> str:
    return f"{timestamp};{format(float(power), float_format)}"


class MemorySink:
    """Keeps written blocks in memory; used for dry runs and inspection."""

    def __init__(self):
        self.lines: List[str] = []
        self.write_count = 0

    def write_lines(self, lines: Sequence[str], append: bool) -> None:
        if not append:
            self.lines = []
        self.lines.extend(lines)
        self.write_count += 1
