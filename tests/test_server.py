import asyncio
import json
from pathlib import Path

import pytest

from grid_mcp import server
from grid_mcp.parser import parse_yaml


LAYOUT_YAML = """
columns: 4
items:
  - {id: chart, width: 2, column: 1, row: 1}
  - {id: notes, column: 3, row: 1}
"""


def run(coro):
    result = asyncio.run(coro)
    assert len(result) == 1
    return result[0].text


def test_list_tools():
    tools = asyncio.run(server.list_tools())
    assert {tool.name for tool in tools} == {
        "push_layout",
        "reflow_layout",
        "derive_layout",
        "breakpoint_css",
        "save_layout",
        "clear_override",
        "resize_item",
        "render_preview",
    }


def test_unknown_tool():
    assert run(server.call_tool("nope", {})) == "Unknown tool: nope"


def test_push_layout():
    payload = json.loads(run(server._push_layout({
        "items": [
            {"id": "a", "column": 1, "row": 1},
            {"id": "b", "column": 1, "row": 2},
            {"id": "c", "column": 3, "row": 3},
        ],
        "moved_id": "c",
        "column": 1,
        "row": 1,
    })))
    assert payload["status"] == "success"
    assert payload["overlaps"] == 0
    rows = {it["id"]: (it["column"], it["row"]) for it in payload["items"]}
    assert rows == {"a": (1, 2), "b": (1, 3), "c": (1, 1)}


def test_push_layout_resize():
    payload = json.loads(run(server._push_layout({
        "items": [{"id": "a", "column": 1, "row": 1}, {"id": "b", "column": 2, "row": 1}],
        "moved_id": "a",
        "column": 1,
        "row": 1,
        "width": 2,
    })))
    sizes = {it["id"]: (it["width"], it["height"]) for it in payload["items"]}
    assert sizes["a"] == (2, 1)
    assert payload["overlaps"] == 0


def test_push_layout_invalid_input():
    text = run(server._push_layout({"items": [{"id": "a"}], "moved_id": "a", "column": 1, "row": 1}))
    assert text.startswith("Invalid input")


def test_reflow_layout():
    payload = json.loads(run(server._reflow_layout({
        "items": [
            {"id": "A", "column": 1, "row": 1},
            {"id": "B", "column": 2, "row": 1},
            {"id": "C", "column": 3, "row": 1},
        ],
        "moved_id": "C",
        "column": 1,
        "row": 1,
        "columns": 3,
    })))
    order = [it["id"] for it in sorted(payload["items"], key=lambda it: (it["row"], it["column"]))]
    assert order == ["C", "A", "B"]


def test_derive_layout():
    payload = json.loads(run(server._derive_layout({"layout_yaml": LAYOUT_YAML, "columns": 2})))
    assert payload["columns"] == 2
    assert payload["source"] == "derived"
    assert payload["positions"]["notes"] == {"column": 1, "row": 2}


def test_derive_layout_bad_yaml():
    text = run(server._derive_layout({"layout_yaml": "", "columns": 2}))
    assert text.startswith("Failed to parse layout YAML")


@pytest.mark.parametrize("handler,args", [
    ("_derive_layout", {"layout_yaml": LAYOUT_YAML}),
    ("_derive_layout", {"layout_yaml": LAYOUT_YAML, "columns": "wide"}),
    ("_save_layout", {"layout_yaml": LAYOUT_YAML, "positions": {}}),
    ("_clear_override", {"layout_yaml": LAYOUT_YAML, "columns": None}),
    ("_resize_item", {"layout_yaml": LAYOUT_YAML, "width": 1, "height": 1}),
    ("_render_preview", {"layout_yaml": LAYOUT_YAML, "columns": "x"}),
    ("_reflow_layout", {"items": [], "moved_id": "a", "column": 1, "row": 1}),
    ("_breakpoint_css", {}),
])
def test_bad_arguments_return_error_text(handler, args, tmp_path, monkeypatch):
    monkeypatch.setattr(server, "OUTPUT_DIR", tmp_path)
    text = run(getattr(server, handler)(args))
    assert text.startswith("Invalid input")


def test_breakpoint_css():
    payload = json.loads(run(server._breakpoint_css({"layout_yaml": LAYOUT_YAML, "gap": 0, "cell_size": 100})))
    counts = [bp["column_count"] for bp in payload["descriptions"]["breakpoints"]]
    assert counts == [4, 3, 2, 1]
    assert "@container (min-width: 400px) {" in payload["css"]


def test_save_and_clear_override():
    saved = run(server._save_layout({
        "layout_yaml": LAYOUT_YAML,
        "columns": 2,
        "positions": {"chart": {"column": 1, "row": 2}, "notes": {"column": 1, "row": 1}},
    }))
    model = parse_yaml(saved)
    assert model.has_override(2)

    cleared = parse_yaml(run(server._clear_override({"layout_yaml": saved, "columns": 2})))
    assert not cleared.has_override(2)


def test_resize_item():
    model = parse_yaml(run(server._resize_item({
        "layout_yaml": LAYOUT_YAML, "item_id": "notes", "width": 2, "height": 2,
    })))
    assert (model.items["notes"].width, model.items["notes"].height) == (2, 2)

    text = run(server._resize_item({"layout_yaml": LAYOUT_YAML, "item_id": "ghost", "width": 1, "height": 1}))
    assert text == "Item not found: ghost"


def test_render_preview(tmp_path, monkeypatch):
    monkeypatch.setattr(server, "OUTPUT_DIR", tmp_path / "previews")
    payload = json.loads(run(server._render_preview({
        "layout_yaml": LAYOUT_YAML, "columns": 3, "filename": "board",
    })))
    assert payload["path"] == str(tmp_path / "previews" / "board.png")
    assert Path(payload["path"]).read_bytes().startswith(b"\x89PNG")
    assert payload["items"] == 2


def test_render_preview_unknown_theme(tmp_path, monkeypatch):
    monkeypatch.setattr(server, "OUTPUT_DIR", tmp_path)
    text = run(server._render_preview({"layout_yaml": LAYOUT_YAML, "theme": "neon"}))
    assert text.startswith("Rendering failed")


@pytest.mark.parametrize("name", ["save_layout", "clear_override"])
def test_dispatch_through_call_tool(name):
    args = {"layout_yaml": LAYOUT_YAML, "columns": 4, "positions": {}}
    text = run(server.call_tool(name, args))
    assert text.startswith("layout:")
