"""
I/O utilities for the layout engine.

Handles:
- Loading recognition output (page results) from JSON
- JSON serialization of results and analyses
- Text output and directory management
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Union, Any, Dict, List

from .models import PageResult

logger = logging.getLogger(__name__)


# ============================================================================
# JSON Serialization
# ============================================================================

class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles enums, paths and model objects."""

    def default(self, obj):
        if isinstance(obj, Enum):
            return obj.value
        if hasattr(obj, "to_dict"):
            return obj.to_dict()
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def dumps_json(data: Any, indent: int = 2, ensure_ascii: bool = False) -> str:
    """Serialize data with the enhanced encoder."""
    return json.dumps(data, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, model object, etc.)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


def load_json(json_path: Union[str, Path]) -> Any:
    """
    Load data from a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    json_path = Path(json_path)
    if not json_path.exists():
        raise FileNotFoundError(f"JSON file not found: {json_path}")

    with open(json_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def save_text(text: str, output_path: Union[str, Path]) -> Path:
    """Write UTF-8 text, creating parent directories."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(text)

    logger.debug(f"Saved text: {output_path}")
    return output_path


# ============================================================================
# Directory Management
# ============================================================================

def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


# ============================================================================
# Page Results
# ============================================================================

def _page_entries(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, dict) and "pages" in data:
        return list(data["pages"])
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return [data]
    raise ValueError(f"Expected a page result object or list, got {type(data).__name__}")


def load_page_results(input_path: Union[str, Path]) -> Dict[int, PageResult]:
    """
    Load recognition output from a JSON file or a folder of JSON files.

    A file may hold one page object, a list of pages, or an object with a
    ``pages`` list. Pages are keyed by their ``pageIndex``; a page without
    one goes after the highest index loaded so far.

    Args:
        input_path: JSON file or directory of ``*.json`` files

    Returns:
        Page index -> PageResult

    Raises:
        ValueError: If an entry is not a valid page result
    """
    input_path = Path(input_path)

    if input_path.is_dir():
        files = sorted(input_path.glob("*.json"))
        if not files:
            logger.warning(f"No JSON files found in {input_path}")
    else:
        files = [input_path]

    results: Dict[int, PageResult] = {}
    for json_file in files:
        for entry in _page_entries(load_json(json_file)):
            if not isinstance(entry, dict):
                raise ValueError(f"Malformed page result in {json_file}: expected an object")
            if "pageIndex" not in entry:
                entry = dict(entry, pageIndex=max(results, default=-1) + 1)
            page = PageResult.from_dict(entry)
            if page.page_index in results:
                logger.warning(f"Duplicate page index {page.page_index} in {json_file}, keeping the last one")
            results[page.page_index] = page

    logger.info(f"Loaded {len(results)} page result(s) from {input_path}")
    return results
