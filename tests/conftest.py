import pytest

from grid_mcp.layout_model import LayoutModel
from grid_mcp.models import GridCell, GridItem, ItemDefinition


def item(item_id, column, row, width=1, height=1):
    return GridItem(id=item_id, column=column, row=row, width=width, height=height)


def positions_of(items):
    return {it.id: (it.column, it.row) for it in items}


@pytest.fixture
def stacked_items():
    """Three 1x1 items stacked in column 1 plus a loose one at (3,3)."""
    return [
        item("a", 1, 1),
        item("b", 1, 2),
        item("c", 1, 3),
        item("d", 3, 3),
    ]


@pytest.fixture
def dashboard_model():
    """Four columns: a 2-wide chart at (1,1) and a 1-wide note at (3,1)."""
    return LayoutModel(
        max_columns=4,
        items=[
            ItemDefinition(id="chart", width=2, height=1),
            ItemDefinition(id="notes", width=1, height=1),
        ],
        canonical_positions={
            "chart": GridCell(column=1, row=1),
            "notes": GridCell(column=3, row=1),
        },
    )
