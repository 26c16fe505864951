from grid_mcp.geometry import find_overlaps
from grid_mcp.models import GridCell
from grid_mcp.reorder import compute_reflow_layout, get_item_order, reflow_items

from conftest import item, positions_of


def test_get_item_order_is_reading_order():
    items = [item("c", 1, 2), item("b", 3, 1), item("a", 1, 1)]
    assert [it.id for it in get_item_order(items)] == ["a", "b", "c"]


def test_reflow_packs_first_fit():
    items = [item("a", 1, 1, width=2), item("b", 1, 1, width=2), item("c", 1, 1)]
    result = reflow_items(items, 3)
    assert positions_of(result) == {"a": (1, 1), "b": (1, 2), "c": (3, 1)}
    assert find_overlaps(result) == []


def test_reflow_clamps_width():
    result = reflow_items([item("wide", 1, 1, width=5)], 3)
    assert (result[0].column, result[0].row, result[0].width) == (1, 1, 3)


def test_moving_last_item_to_front():
    items = [item("A", 1, 1), item("B", 2, 1), item("C", 3, 1)]
    result = compute_reflow_layout(items, "C", GridCell(column=1, row=1), 3)

    ordered = [it.id for it in get_item_order(result)]
    assert ordered == ["C", "A", "B"]
    assert positions_of(result) == {"C": (1, 1), "A": (2, 1), "B": (3, 1)}


def test_moving_first_item_to_end():
    items = [item("A", 1, 1), item("B", 2, 1), item("C", 3, 1)]
    result = compute_reflow_layout(items, "A", GridCell(column=3, row=2), 3)
    assert [it.id for it in get_item_order(result)] == ["B", "C", "A"]


def test_reflow_never_overlaps():
    items = [
        item("a", 1, 1, width=2, height=2),
        item("b", 3, 1),
        item("c", 4, 1, height=3),
        item("d", 1, 3, width=3),
    ]
    result = compute_reflow_layout(items, "d", GridCell(column=2, row=1), 4)
    assert find_overlaps(result) == []


def test_unknown_item_returns_unchanged_copy():
    items = [item("a", 1, 1), item("b", 3, 3)]
    result = compute_reflow_layout(items, "missing", GridCell(column=1, row=1), 3)
    assert positions_of(result) == {"a": (1, 1), "b": (3, 3)}
    assert result[0] is not items[0]
