"""
Marker-based document patching.

Replaces the text between the dashboard markers of a README and writes the
SVG card next to it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

START_MARKER = "<!-- VIBE-DASHBOARD:START -->"
END_MARKER = "<!-- VIBE-DASHBOARD:END -->"


class MarkersNotFoundError(ValueError):
    """Raised when a document has no usable pair of dashboard markers."""

    def __init__(self, path: Optional[str] = None):
        where = f" in {path}" if path else ""
        super().__init__(
            f"Markers not found{where}. Please add the following markers to your README:"
            f"\n\n{START_MARKER}\n{END_MARKER}"
        )
        self.path = path


@dataclass(frozen=True)
class MarkerPositions:
    """Character offsets of both markers."""
    start: int
    start_end: int
    end: int
    end_end: int


def find_markers(content: str) -> Optional[MarkerPositions]:
    """Locate the markers; None if either is missing or they are out of order."""
    start = content.find(START_MARKER)
    end = content.find(END_MARKER)

    if start == -1 or end == -1 or end <= start:
        return None

    return MarkerPositions(
        start=start,
        start_end=start + len(START_MARKER),
        end=end,
        end_end=end + len(END_MARKER),
    )


def insert_content(original: str, new_content: str) -> str:
    """Replace everything between the markers with new content.

    Args:
        original: Document text
        new_content: Text to place between the markers

    Returns:
        Updated document text

    Raises:
        MarkersNotFoundError: If the markers are missing
    """
    markers = find_markers(original)
    if markers is None:
        raise MarkersNotFoundError()

    before = original[:markers.start_end]
    after = original[markers.end:]
    return f"{before}\n{new_content}\n{after}"


def update_readme(readme_path: str, content: str) -> None:
    """Patch a README file in place.

    Raises:
        FileNotFoundError: If the README does not exist
        MarkersNotFoundError: If the README has no markers
    """
    path = Path(readme_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {readme_path}")

    original = path.read_text(encoding="utf-8")
    try:
        updated = insert_content(original, content)
    except MarkersNotFoundError:
        raise MarkersNotFoundError(readme_path) from None

    path.write_text(updated, encoding="utf-8")
    logger.info("Updated %s", readme_path)


def has_markers(readme_path: str) -> bool:
    """Whether a README exists and contains the markers."""
    path = Path(readme_path)
    if not path.exists():
        return False
    return find_markers(path.read_text(encoding="utf-8")) is not None


def add_markers(readme_path: str) -> bool:
    """Append the markers to a README that lacks them.

    Returns:
        True if markers were added, False if they were already present

    Raises:
        FileNotFoundError: If the README does not exist
    """
    path = Path(readme_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {readme_path}")

    content = path.read_text(encoding="utf-8")
    if find_markers(content) is not None:
        return False

    path.write_text(f"{content}\n\n{START_MARKER}\n{END_MARKER}\n", encoding="utf-8")
    logger.info("Added dashboard markers to %s", readme_path)
    return True


def write_svg(svg_path: str, svg_content: str) -> None:
    """Write the SVG card, creating parent directories as needed."""
    path = Path(svg_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(svg_content, encoding="utf-8")
    logger.info("SVG saved to %s", svg_path)
