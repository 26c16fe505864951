"""YAML layout parser for Grid-MCP.

Supports two formats:
1. Full layout YAML (``layout:`` root with items, canonical and overrides)
2. Simplified format (column count + flat list of placed items)
"""

from __future__ import annotations
from pathlib import Path

import yaml
from pydantic import ValidationError

from .layout_model import LayoutModel
from .models import GridCell, ItemDefinition, LayoutDocument


def parse_yaml(yaml_str: str) -> LayoutModel:
    """Parse a YAML string into a LayoutModel."""
    return LayoutModel.from_document(parse_document(yaml_str))


def parse_file(path: str) -> LayoutModel:
    """Parse a YAML file into a LayoutModel."""
    content = Path(path).read_text()
    return parse_yaml(content)


def parse_document(yaml_str: str) -> LayoutDocument:
    """Parse a YAML string into a LayoutDocument (no model wrapping)."""
    data = yaml.safe_load(yaml_str)
    if not data:
        raise ValueError("Empty YAML input")
    if not isinstance(data, dict):
        raise ValueError("Layout YAML must be a mapping")

    try:
        # Check if it's a full-format layout
        if "layout" in data:
            return _parse_full_format(data["layout"])

        # Otherwise, treat as simplified format
        return _parse_simple_format(data)
    except ValidationError as e:
        raise ValueError(f"Invalid layout: {e}") from e
    except KeyError as e:
        raise ValueError(f"Missing required field: {e}") from e


def _parse_cell(data: dict) -> GridCell:
    return GridCell(column=int(data.get("column", 1)), row=int(data.get("row", 1)))


def _parse_positions(data: dict) -> dict[str, GridCell]:
    return {str(item_id): _parse_cell(cell or {}) for item_id, cell in (data or {}).items()}


def _parse_full_format(data: dict) -> LayoutDocument:
    """Parse the full layout format.

    Example:
        layout:
          max_columns: 4
          items:
            - {id: chart, width: 2, height: 1}
            - {id: notes, width: 1, height: 1}
          canonical:
            chart: {column: 1, row: 1}
            notes: {column: 3, row: 1}
          overrides:
            2:
              chart: {column: 1, row: 2}
              notes: {column: 1, row: 1}
    """
    if "max_columns" not in data:
        raise ValueError("Full layout format requires 'max_columns'")

    items = [
        ItemDefinition(
            id=str(item["id"]),
            width=int(item.get("width", 1)),
            height=int(item.get("height", 1)),
        )
        for item in data.get("items", [])
    ]
    overrides = {
        int(cols): _parse_positions(positions)
        for cols, positions in (data.get("overrides") or {}).items()
    }

    return LayoutDocument(
        max_columns=int(data["max_columns"]),
        min_columns=int(data.get("min_columns", 1)),
        items=items,
        canonical=_parse_positions(data.get("canonical")),
        overrides=overrides,
    )


def _parse_simple_format(data: dict) -> LayoutDocument:
    """Parse simplified format.

    Example:
        columns: 4
        items:
          - id: chart
            width: 2
            column: 1
            row: 1
          - id: notes
            column: 3
            row: 1
    """
    if "columns" not in data:
        raise ValueError("Simplified layout format requires 'columns'")

    items = []
    canonical = {}
    for item_data in data.get("items", []):
        item_id = str(item_data["id"])
        items.append(ItemDefinition(
            id=item_id,
            width=int(item_data.get("width", 1)),
            height=int(item_data.get("height", 1)),
        ))
        canonical[item_id] = _parse_cell(item_data)

    return LayoutDocument(
        max_columns=int(data["columns"]),
        min_columns=int(data.get("min_columns", 1)),
        items=items,
        canonical=canonical,
    )


def _positions_to_data(positions: dict[str, GridCell]) -> dict:
    return {
        item_id: {"column": cell.column, "row": cell.row}
        for item_id, cell in positions.items()
    }


def layout_to_yaml(model: LayoutModel) -> str:
    """Serialize a LayoutModel to the full layout YAML format."""
    document = model.to_document()
    data = {
        "layout": {
            "max_columns": document.max_columns,
            "min_columns": document.min_columns,
            "items": [
                {"id": item.id, "width": item.width, "height": item.height}
                for item in document.items
            ],
            "canonical": _positions_to_data(document.canonical),
        }
    }
    if document.overrides:
        data["layout"]["overrides"] = {
            cols: _positions_to_data(positions)
            for cols, positions in document.overrides.items()
        }

    return yaml.dump(data, default_flow_style=False, sort_keys=False)
