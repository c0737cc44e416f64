"""
Layout Reconciler - Persisted column order, widths and visibility.

Layout descriptions are small XML documents:

    <grid>
      <row>
        <cell name="fullname" width="150"/>
        <cell name="email" width="0"/>
      </row>
    </grid>

A width of 0 hides the column. Columns the layout does not name are hidden.
Invalid layouts are treated as absent.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..constants import (
    FIRST_ORDERED_POSITION, LAYOUT_CELL_TAG, LAYOUT_ROOT_TAG, LAYOUT_ROW_TAG,
)
from .errors import LayoutParseFault
from .sink import GridSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutCell:
    """One column entry of a layout."""
    name: str
    width: int = 0


def _parse_width(text: Optional[str]) -> int:
    try:
        return int(text)
    except (TypeError, ValueError):
        return 0


def read_layout(xml: str) -> List[LayoutCell]:
    """
    Read the cells of a layout document.

    Raises:
        LayoutParseFault: If the document is malformed or has no cells
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        raise LayoutParseFault(f"Malformed layout: {e}") from e
    if root.tag != LAYOUT_ROOT_TAG:
        raise LayoutParseFault(f"Unexpected layout root <{root.tag}>")

    cells: List[LayoutCell] = []
    seen = set()
    row = root.find(LAYOUT_ROW_TAG)
    if row is not None:
        for cell in row.findall(LAYOUT_CELL_TAG):
            name = cell.get("name")
            if not name or name in seen:
                continue
            seen.add(name)
            cells.append(LayoutCell(name, _parse_width(cell.get("width"))))
    if not cells:
        raise LayoutParseFault("Layout has no cells")
    return cells


def parse_layout(xml: Optional[str]) -> Optional[List[LayoutCell]]:
    """
    Parse a layout description.

    Returns:
        List of LayoutCell, or None when the input is empty or invalid
    """
    if not xml or not xml.strip():
        return None
    try:
        return read_layout(xml)
    except LayoutParseFault as e:
        logger.debug(f"Ignoring layout: {e}")
        return None


def apply_layout(layout: Sequence[LayoutCell], sink: GridSink):
    """
    Apply a parsed layout to the sink columns.

    Columns the layout names but the sink lacks are added as placeholders.
    Applying the same layout twice leaves the sink unchanged.
    """
    existing = {c.name for c in sink.get_columns()}
    for cell in layout:
        if cell.name not in existing:
            sink.add_column(cell.name, cell.name)

    named = {cell.name for cell in layout}
    count = len(sink.get_columns())
    for index, cell in enumerate(layout):
        sink.move_column(cell.name, min(index, count - 1))
        sink.set_column_width(cell.name, cell.width)
        sink.set_column_visible(cell.name, cell.width > 0)

    for column in sink.get_columns():
        if column.name not in named:
            sink.set_column_visible(column.name, False)


def arrange_columns(column_order: Sequence[str], sink: GridSink):
    """Move ordered columns right after the #no and #id columns."""
    present = {c.name for c in sink.get_columns()}
    position = FIRST_ORDERED_POSITION
    for name in column_order:
        if name in present:
            sink.move_column(name, position)
            position += 1
