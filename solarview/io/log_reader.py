"""
Readers for area and power output logs.

Column names are taken from the "% k: name [unit]" legend in the file header.
"""

import re
import logging
from pathlib import Path
from typing import List, Union

import pandas as pd

logger = logging.getLogger(__name__)

LEGEND_PATTERN = re.compile(r"^%\s*(\d+):\s*(.+?)\s*(\[[^\]]*\])?\s*$")


def read_legend(path: Union[str, Path]) -> List[str]:
    """
    Read column names from the header legend.

    Returns:
        Column names in order (first column is "time")
    """
    columns = {}
    with open(path, 'r') as f:
        for line in f:
            if not line.startswith('%'):
                break
            match = LEGEND_PATTERN.match(line.strip())
            if match:
                columns[int(match.group(1))] = match.group(2)
    return [columns[k] for k in sorted(columns)]


def unique_column_names(names: List[str]) -> List[str]:
    """Suffix repeated names with their 1-based legend number."""
    seen = set()
    unique = []
    for k, name in enumerate(names, start=1):
        if name in seen:
            name = f"{name}_{k}"
        seen.add(name)
        unique.append(name)
    return unique


def _read_log(path: Union[str, Path]) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Output log not found: {path}")

    columns = unique_column_names(read_legend(path))
    data = pd.read_csv(path, sep=';', comment='%', header=None, names=columns)
    logger.info(f"Read {len(data)} rows with {len(columns)} columns from {path}")
    return data


def read_area_log(path: Union[str, Path]) -> pd.DataFrame:
    """Read an area log; one column per part plus "time"."""
    return _read_log(path)


def read_power_log(path: Union[str, Path]) -> pd.DataFrame:
    """Read a power log with columns "time" and "power"."""
    return _read_log(path)
