import pytest

from grid_mcp.models import GridCell
from grid_mcp.parser import layout_to_yaml, parse_document, parse_file, parse_yaml


SIMPLE_YAML = """
columns: 4
items:
  - id: chart
    width: 2
    column: 1
    row: 1
  - id: notes
    column: 3
    row: 1
  - id: feed
    height: 2
    column: 4
    row: 1
"""

FULL_YAML = """
layout:
  max_columns: 4
  min_columns: 2
  items:
    - {id: chart, width: 2, height: 1}
    - {id: notes}
  canonical:
    chart: {column: 1, row: 1}
    notes: {column: 3, row: 1}
  overrides:
    2:
      chart: {column: 1, row: 2}
      notes: {column: 1, row: 1}
"""


def test_simple_format():
    model = parse_yaml(SIMPLE_YAML)
    assert model.max_columns == 4
    assert model.min_columns == 1
    assert model.items["chart"].width == 2
    assert model.items["feed"].height == 2
    assert model.get_layout_for_columns(4)["feed"] == GridCell(column=4, row=1)


def test_full_format():
    model = parse_yaml(FULL_YAML)
    assert model.min_columns == 2
    assert model.items["notes"].width == 1
    assert model.get_override_column_counts() == [2]
    assert model.get_layout_for_columns(2)["chart"] == GridCell(column=1, row=2)
    assert model.layout_source(3) == "derived"


def test_yaml_round_trip():
    model = parse_yaml(FULL_YAML)
    restored = parse_yaml(layout_to_yaml(model))
    assert restored.to_document() == model.to_document()


def test_simple_format_serializes_as_full():
    text = layout_to_yaml(parse_yaml(SIMPLE_YAML))
    assert text.startswith("layout:\n")
    assert "overrides" not in text


def test_parse_file(tmp_path):
    path = tmp_path / "layout.yaml"
    path.write_text(FULL_YAML)
    assert parse_file(str(path)).max_columns == 4


@pytest.mark.parametrize("text,message", [
    ("", "Empty YAML input"),
    ("- just\n- a list\n", "mapping"),
    ("layout:\n  items: []\n", "max_columns"),
    ("items: []\n", "columns"),
    ("columns: 3\nitems:\n  - {width: 2}\n", "Missing required field"),
])
def test_invalid_documents(text, message):
    with pytest.raises(ValueError, match=message):
        parse_document(text)


def test_invalid_sizes_are_rejected():
    with pytest.raises(ValueError):
        parse_yaml("columns: 3\nitems:\n  - {id: a, width: 0}\n")


def test_inconsistent_column_bounds_are_rejected():
    with pytest.raises(ValueError):
        parse_yaml("layout:\n  max_columns: 2\n  min_columns: 3\n")
