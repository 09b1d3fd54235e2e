import unittest

from seating_layout.grid import build_rows, representative_seats
from seating_layout.model import Block, BlockType, Layout, SeatedSession, SeatStatus, SessionSeatingMapRequest, Tier
from seating_layout.render import (
    RESERVED_OPACITY,
    UNASSIGNED_COLOR,
    UNKNOWN_TIER_COLOR,
    render_layout,
    render_session,
    render_text,
    tier_color,
    tier_name,
)


TIERS = [Tier(id="t1", name="VIP", price=100, color="#f59e0b"), Tier(id="t2", name="GA", price=30)]


def _layout() -> Layout:
    rows = build_rows("b1", 2, 3)
    rows[0].seats[0].tier_id = "t1"
    rows[0].seats[1].status = SeatStatus.reserved
    rows[1].seats[2].tier_id = "gone"
    return Layout(
        blocks=[
            Block(id="b1", name="Stalls", type=BlockType.seated_grid, rows=rows),
            Block(
                id="s1",
                name="Floor",
                type=BlockType.standing_capacity,
                capacity=400,
                width=220,
                height=160,
                seats=representative_seats("s1"),
                tier_id="t1",
            ),
            Block(id="n1", name="Stage", type=BlockType.non_sellable, width=300, height=60),
        ]
    )


class TestTierLookup(unittest.TestCase):
    def test_names(self):
        self.assertEqual(tier_name(None, TIERS), "Unassigned")
        self.assertEqual(tier_name("unassigned", TIERS), "Unknown Tier")
        self.assertEqual(tier_name("t2", TIERS), "GA")
        self.assertEqual(tier_name("x", TIERS), "Unknown Tier")

    def test_colors(self):
        self.assertEqual(tier_color(None, TIERS), UNASSIGNED_COLOR)
        self.assertEqual(tier_color("t1", TIERS), "#f59e0b")
        self.assertEqual(tier_color("t2", TIERS), UNKNOWN_TIER_COLOR)
        self.assertEqual(tier_color("x", TIERS), UNKNOWN_TIER_COLOR)


class TestRenderLayout(unittest.TestCase):
    def test_seated_grid(self):
        view = render_layout(_layout(), TIERS, name="Arena")
        seated = view.blocks[0]
        self.assertEqual(view.name, "Arena")
        self.assertEqual(seated.row_labels, ["A", "B"])
        self.assertEqual(seated.columns, 3)
        self.assertEqual((seated.width, seated.height), (108, 110))

        vip, reserved, plain = seated.grid[0]
        self.assertEqual((vip.tier, vip.color, vip.opacity), ("VIP", "#f59e0b", 1.0))
        self.assertEqual(vip.row, "A")
        self.assertEqual(vip.block, "Stalls")
        self.assertTrue(reserved.disabled)
        self.assertEqual(reserved.opacity, RESERVED_OPACITY)
        self.assertEqual(reserved.status, "Reserved")
        self.assertEqual(plain.color, UNASSIGNED_COLOR)
        self.assertEqual(seated.grid[1][2].tier, "Unknown Tier")

    def test_standing_and_non_sellable(self):
        _, standing, stage = render_layout(_layout(), TIERS).blocks
        self.assertEqual(standing.label, "Capacity: 400")
        self.assertEqual(standing.color, "#f59e0b")
        self.assertEqual((standing.width, standing.height), (220, 160))
        self.assertEqual(stage.label, "Stage")
        self.assertIsNone(stage.color)

    def test_standing_without_tier_uses_unassigned_color(self):
        layout = _layout()
        layout.blocks[1].tier_id = None
        self.assertEqual(render_layout(layout, TIERS).blocks[1].color, UNASSIGNED_COLOR)

    def test_tier_whose_id_is_unassigned(self):
        tiers = TIERS + [Tier(id="unassigned", name="Balcony", color="#10b981")]
        layout = _layout()
        layout.blocks[0].rows[1].seats[0].tier_id = "unassigned"
        seat = render_layout(layout, tiers).blocks[0].grid[1][0]
        self.assertEqual((seat.tier, seat.color), ("Balcony", "#10b981"))
        self.assertIn("  B B.?", render_text(render_layout(layout, tiers), cell_width=1).splitlines())

    def test_render_session(self):
        seating_map = SessionSeatingMapRequest(name="Arena", layout=_layout())
        self.assertIsNone(render_session(SeatedSession(), TIERS))
        self.assertIsNone(render_session(SeatedSession(session_type="ONLINE", layout_data=seating_map), TIERS))
        view = render_session(SeatedSession.model_validate({"layoutData": seating_map.to_wire()}), TIERS)
        self.assertEqual(len(view.blocks), 3)


class TestRenderText(unittest.TestCase):
    def test_text(self):
        text = render_text(render_layout(_layout(), TIERS, name="Arena"), cell_width=1)
        lines = text.splitlines()
        self.assertEqual(lines[0], "Arena")
        self.assertEqual(lines[1], "[b1] Stalls (seated_grid) @ (0, 0) 108x110")
        self.assertEqual(lines[2], "  A Vx.")
        self.assertEqual(lines[3], "  B ..?")
        self.assertIn("  Capacity: 400", lines)
        self.assertEqual(lines[-1], "  Stage")


if __name__ == "__main__":
    unittest.main()
