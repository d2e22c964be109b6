"""
Utility functions for copy summaries and report files.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from tabulate import tabulate

from regcopy.logging_utils import get_logger

logger = get_logger(__name__)


def get_timestamp_suffix() -> str:
    """
    Generate a timestamp suffix for report filenames.

    Returns:
        String in format: YYYY-MM-DD-HH-MM-SS
    """
    return datetime.now().strftime("%Y-%m-%d-%H-%M-%S")


def add_timestamp_to_path(path: str, timestamp: str = None) -> str:
    """
    Add a timestamp to a file path before the extension.

    Args:
        path: Original file path (e.g., 'reports/copy-report.json')
        timestamp: Optional timestamp string (defaults to current time)

    Returns:
        Path with timestamp inserted (e.g., 'reports/copy-report-2026-01-15-14-30-00.json')
    """
    if timestamp is None:
        timestamp = get_timestamp_suffix()

    p = Path(path)
    return str(p.parent / f"{p.stem}-{timestamp}{p.suffix}")


def save_json(path: str, data: Any, timestamp: bool = False) -> str:
    """
    Write JSON data to a file with indentation, creating parent directories.

    Args:
        path: Path to save the JSON file
        data: Data to save
        timestamp: If True, add timestamp to filename

    Returns:
        Path to the saved file
    """
    if timestamp:
        path = add_timestamp_to_path(path)

    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2, default=str)
    logger.info(f"Report saved to {path}")
    return path


def format_failures_table(failures: List[Dict[str, Any]]) -> str:
    """Render failed copies as a grid table.

    Each entry needs ``image``, ``tag``, ``failed_step`` and ``error`` keys;
    only the first line of the error is shown.
    """
    rows = []
    for failure in failures:
        error = (failure.get("error") or "").splitlines()
        rows.append([failure["image"], failure["tag"], failure.get("failed_step") or "", error[0] if error else ""])
    return tabulate(rows, headers=["Image", "Tag", "Step", "Error"], tablefmt="grid")
