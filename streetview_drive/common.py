"""Common helpers shared across modules."""
import csv
import os
import re
import shutil
from typing import Any


def normalize_header_name(value: str) -> str:
    """Normalize a CSV header name for matching."""
    return re.sub(r"[^a-z0-9]+", "", value.strip().lower())


def prune_none(value: Any) -> Any:
    """Recursively remove None values and empty containers."""
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for key, sub in value.items():
            sub = prune_none(sub)
            if sub is None:
                continue
            if isinstance(sub, (dict, list)) and not sub:
                continue
            out[key] = sub
        return out
    if isinstance(value, list):
        out_list = []
        for item in value:
            item = prune_none(item)
            if item is None:
                continue
            if isinstance(item, (dict, list)) and not item:
                continue
            out_list.append(item)
        return out_list
    return value


def parse_float(value: Any) -> float | None:
    """Parse a float from a value, returning None on failure."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return float(text.replace(",", "."))
    except ValueError:
        return None


def format_heading(heading: float | None) -> str:
    """Render a heading for log lines."""
    return "unspecified" if heading is None else f"{heading:.2f}"


def ensure_dirs(*paths: str) -> None:
    """Create directories if they do not exist."""
    for path in paths:
        if path:
            os.makedirs(path, exist_ok=True)


def reset_dir(path: str) -> None:
    """Remove a directory tree if present and recreate it empty."""
    if os.path.isdir(path):
        shutil.rmtree(path)
    elif os.path.exists(path):
        os.remove(path)
    ensure_dirs(path)


def sniff_csv_dialect(sample: str) -> csv.Dialect:
    """Return a CSV dialect for the given sample string."""
    try:
        return csv.Sniffer().sniff(sample, delimiters=",\t;")
    except csv.Error:
        return csv.excel_tab if "\t" in sample else csv.excel
