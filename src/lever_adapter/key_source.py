"""
KeySource module for reading parent identifiers from a CSV file
"""

import csv
import logging
from pathlib import Path
from typing import List

from lever_adapter.config_loader import ConfigurationError


logger = logging.getLogger(__name__)


def load_parent_keys(file_path: Path) -> List[str]:
    """
    Load parent keys from the first column of a CSV file

    Rows are kept in file order; blank lines are ignored.

    Args:
        file_path: Path to the CSV file, e.g. an export of candidate ids

    Returns:
        List of parent key strings

    Raises:
        ConfigurationError: If the file is missing, unreadable, empty or has
            a row whose first field is empty
    """
    if not file_path.exists():
        raise ConfigurationError(f"Key source file not found: {file_path}")

    keys = []
    try:
        with open(file_path, 'r', encoding='utf-8', newline='') as f:
            for line_num, row in enumerate(csv.reader(f), start=1):
                if not row:
                    continue
                key = row[0].strip()
                if not key:
                    raise ConfigurationError(f"Empty key in {file_path} on line {line_num}")
                keys.append(key)
    except (csv.Error, OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Unable to read key source {file_path}: {e}") from e

    if not keys:
        raise ConfigurationError(f"Key source file is empty: {file_path}")

    logger.info(f"Loaded {len(keys)} keys from {file_path}")
    return keys
