from grid_mcp.geometry import find_overlaps, items_overlap
from grid_mcp.models import GridCell, ItemSize
from grid_mcp.push import compact_up, compute_push_layout, layout_to_css

from conftest import item, positions_of


def test_collision_cascade(stacked_items):
    result = compute_push_layout(stacked_items, "d", GridCell(column=1, row=1))

    assert positions_of(result) == {
        "a": (1, 2),
        "b": (1, 3),
        "c": (1, 4),
        "d": (1, 1),
    }
    assert find_overlaps(result) == []


def test_input_is_not_modified(stacked_items):
    compute_push_layout(stacked_items, "d", GridCell(column=1, row=1))
    assert positions_of(stacked_items)["d"] == (3, 3)
    assert positions_of(stacked_items)["a"] == (1, 1)


def test_moved_item_lands_exactly_on_target():
    items = [item("a", 1, 1), item("b", 2, 1, width=2, height=2), item("c", 4, 5)]
    result = compute_push_layout(items, "c", GridCell(column=2, row=2))
    moved = next(it for it in result if it.id == "c")
    assert (moved.column, moved.row) == (2, 2)
    assert find_overlaps(result) == []


def test_compaction_floats_items_up():
    items = [item("a", 1, 1), item("b", 2, 5), item("c", 2, 7)]
    result = compute_push_layout(items, "a", GridCell(column=1, row=3))
    assert positions_of(result) == {"a": (1, 3), "b": (2, 1), "c": (2, 2)}


def test_compaction_leaves_no_liftable_item():
    items = [
        item("a", 1, 1, width=2),
        item("b", 3, 1),
        item("c", 1, 2),
        item("d", 2, 4, height=2),
        item("e", 3, 6),
    ]
    result = compute_push_layout(items, "b", GridCell(column=1, row=1))

    for it in result:
        if it.id == "b" or it.row == 1:
            continue
        lifted = it.model_copy(update={"row": it.row - 1})
        assert any(items_overlap(lifted, other) for other in result if other.id != it.id)


def test_compacting_again_changes_nothing():
    items = [
        item("a", 1, 1, width=2),
        item("b", 3, 1),
        item("c", 1, 2),
        item("d", 2, 4, height=2),
        item("e", 3, 6),
        item("f", 1, 8, width=3),
    ]
    result = compute_push_layout(items, "b", GridCell(column=1, row=1))
    before = positions_of(result)

    compact_up(result, "b")
    assert positions_of(result) == before


def test_without_compaction_gaps_remain():
    items = [item("a", 1, 1), item("b", 2, 5)]
    result = compute_push_layout(items, "a", GridCell(column=1, row=3), compact=False)
    assert positions_of(result) == {"a": (1, 3), "b": (2, 5)}


def test_resize_pushes_neighbours():
    items = [item("a", 1, 1), item("b", 2, 1), item("c", 1, 2)]
    result = compute_push_layout(
        items, "a", GridCell(column=1, row=1), size=ItemSize(width=2, height=2)
    )
    resized = next(it for it in result if it.id == "a")
    assert (resized.width, resized.height) == (2, 2)
    assert find_overlaps(result) == []


def test_depth_ceiling_returns_best_effort(stacked_items):
    result = compute_push_layout(
        stacked_items, "d", GridCell(column=1, row=1), compact=False, max_depth=1
    )
    # The cascade stops before reaching "c"
    assert positions_of(result)["b"] == (1, 3)
    assert positions_of(result)["c"] == (1, 3)
    assert len(find_overlaps(result)) == 1


def test_unknown_item_returns_unchanged_copy(stacked_items):
    result = compute_push_layout(stacked_items, "missing", GridCell(column=2, row=2))
    assert positions_of(result) == positions_of(stacked_items)
    assert result[0] is not stacked_items[0]


def test_layout_to_css():
    css = layout_to_css([item("a", 2, 1, width=2), item("b", 1, 2, height=3)])
    assert css.splitlines() == [
        "#a { grid-column: 2 / span 2; grid-row: 1 / span 1; }",
        "#b { grid-column: 1 / span 1; grid-row: 2 / span 3; }",
    ]


def test_layout_to_css_clamps_to_max_columns():
    css = layout_to_css(
        [item("wide", 3, 1, width=4)],
        selector_prefix="[data-id='",
        selector_suffix="']",
        max_columns=2,
    )
    assert css == "[data-id='wide'] { grid-column: 1 / span 2; grid-row: 1 / span 1; }"
