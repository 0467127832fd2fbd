"""
Usage source loading.

Reads usage JSON files. Several sources are read concurrently and returned
in the order they were requested, so merging stays deterministic.
"""

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence

logger = logging.getLogger(__name__)

MAX_READ_WORKERS = 8


@dataclass(frozen=True)
class SourceDocument:
    """A parsed usage file and where it came from."""
    path: str
    data: Any


def load_usage_file(path: str) -> Any:
    """Read and parse one usage JSON file.

    Args:
        path: Path to the JSON file

    Returns:
        Parsed JSON value

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is not valid JSON
    """
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    with open(source_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    logger.debug("Loaded usage source %s", path)
    return data


def load_usage_sources(
    paths: Sequence[str],
    max_workers: Optional[int] = None,
) -> List[SourceDocument]:
    """Read several usage files concurrently.

    Args:
        paths: Paths to read
        max_workers: Thread count (default: one per file, capped)

    Returns:
        One SourceDocument per path, in the order given

    Raises:
        FileNotFoundError: If any file does not exist
        json.JSONDecodeError: If any file is not valid JSON
    """
    if not paths:
        return []

    workers = max_workers or min(len(paths), MAX_READ_WORKERS)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        documents = list(executor.map(load_usage_file, paths))

    return [SourceDocument(path=path, data=data) for path, data in zip(paths, documents)]
