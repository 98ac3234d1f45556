"""
Read-only rendering of a handed-off submission.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ConfirmationEntry(BaseModel):
    name: str
    label: str
    value: str


def load_display_names(path: Path) -> dict[str, str]:
    """Load the field name to display label mapping; problems leave it empty."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("Display name mapping %s not found, using raw field names", path)
        return {}
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Error loading display names from %s: %s", path, exc)
        return {}

    if not isinstance(data, dict):
        logger.error("Display name mapping %s is not a JSON object", path)
        return {}
    return {str(key): str(label) for key, label in data.items()}


def display_label(names: Mapping[str, str], key: str) -> str:
    label = names.get(key)
    if label is None:
        logger.debug("No display name for %s", key)
        return key
    return label


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value if str(item).strip())
    return str(value)


def build_confirmation(record: Mapping[str, Any], names: Mapping[str, str]) -> list[ConfirmationEntry]:
    return [
        ConfirmationEntry(name=key, label=display_label(names, key), value=format_value(value))
        for key, value in record.items()
    ]
