"""
Grid Settings - Persistable configuration of a record grid.

Settings can be built in code, from a mapping, or loaded from a YAML file:

    auto_refresh: true
    show_friendly_names: true
    column_order: fullname, email
    filter_columns: [fullname, email]
    layout_xml: |
      <grid><row><cell name="fullname" width="150"/></row></grid>
"""
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)


@dataclass
class GridSettings:
    """Configuration surface of RecordGrid, with its defaults."""
    auto_refresh: bool = True
    show_friendly_names: bool = False
    show_local_times: bool = False
    show_id_column: bool = True
    show_index_column: bool = True
    column_order: Union[str, List[str]] = field(default_factory=list)
    show_all_ordered_columns: bool = False
    show_unordered_columns: bool = True
    filter_text: Optional[str] = None
    filter_columns: Union[str, List[str]] = field(default_factory=list)
    entity_reference_clickable: bool = False
    layout_xml: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "GridSettings":
        """
        Build settings from a mapping.

        Unknown keys are ignored with a warning.
        """
        data = data or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown grid settings: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_grid_settings(path: Union[str, Path]) -> GridSettings:
    """
    Load settings from a YAML file.

    Args:
        path: YAML file path

    Returns:
        GridSettings (defaults for an empty file)

    Raises:
        ValueError: If the document is not a mapping
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Grid settings must be a mapping: {path}")
    logger.info(f"Loaded grid settings from {path}")
    return GridSettings.from_dict(data)


def save_grid_settings(settings: GridSettings, path: Union[str, Path]):
    """Write settings to a YAML file."""
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(settings.to_dict(), f, sort_keys=False, allow_unicode=True)
    logger.info(f"Saved grid settings to {path}")
