import unittest

from seating_layout.grid import (
    build_rows,
    materialize_block,
    materialize_template,
    new_block_id,
    representative_seats,
    row_index,
    row_label,
)
from seating_layout.model import BlockType, LayoutError, LayoutTemplate, SeatStatus, TemplateBlock


class TestLabels(unittest.TestCase):
    def test_row_labels(self):
        cases = {0: "A", 25: "Z", 26: "AA", 27: "AB", 701: "ZZ", 702: "AAA"}
        for index, label in cases.items():
            self.assertEqual(row_label(index), label)
            self.assertEqual(row_index(label), index)

    def test_round_trip(self):
        for i in range(1000):
            self.assertEqual(row_index(row_label(i)), i)

    def test_lowercase_start_label(self):
        self.assertEqual(row_index(" c "), 2)

    def test_bad_labels(self):
        with self.assertRaises(LayoutError):
            row_label(-1)
        for bad in ("", "1", "A1", "É"):
            with self.assertRaises(LayoutError):
                row_index(bad)


class TestBuildRows(unittest.TestCase):
    def test_ids_and_labels(self):
        rows = build_rows("b7", 2, 3)
        self.assertEqual([r.id for r in rows], ["temp_row_b7_0", "temp_row_b7_1"])
        self.assertEqual([r.label for r in rows], ["A", "B"])
        self.assertEqual([s.label for s in rows[1].seats], ["1B", "2B", "3B"])
        self.assertEqual(rows[1].seats[2].id, "temp_seat_b7_1_2")
        for row in rows:
            for seat in row.seats:
                self.assertIsNone(seat.tier_id)
                self.assertEqual(seat.status, SeatStatus.available)

    def test_start_labels(self):
        rows = build_rows("b", 2, 3, start_row_label="C", start_column=5)
        self.assertEqual([r.label for r in rows], ["C", "D"])
        self.assertEqual([s.label for s in rows[0].seats], ["5C", "6C", "7C"])

    def test_rejects_empty_grid(self):
        for rows, cols in ((0, 3), (3, 0), (-1, 2)):
            with self.assertRaises(LayoutError):
                build_rows("b", rows, cols)

    def test_representative_seats(self):
        seats = representative_seats("s1", 2)
        self.assertEqual([s.id for s in seats], ["temp_seat_s1_0", "temp_seat_s1_1"])
        self.assertEqual(seats[0].label, "Slot 1")

    def test_new_block_ids_are_unique(self):
        ids = {new_block_id() for _ in range(100)}
        self.assertEqual(len(ids), 100)
        self.assertTrue(all(i.startswith("temp_") for i in ids))


class TestMaterialize(unittest.TestCase):
    def test_template(self):
        template = LayoutTemplate.model_validate(
            {
                "name": "Main hall",
                "layout": {
                    "blocks": [
                        {
                            "id": "b1",
                            "name": "Stalls",
                            "type": "seated_grid",
                            "position": {"x": 10, "y": 20},
                            "rows": 3,
                            "columns": 4,
                            "startRowLabel": "B",
                            "startColumnLabel": 2,
                        },
                        {"id": "s1", "name": "Pit", "type": "standing_capacity", "capacity": 250, "width": 300, "height": 150},
                        {"id": "n1", "name": "Stage", "type": "non_sellable", "width": 400, "height": 80},
                    ]
                },
            }
        )
        seating_map = materialize_template(template)
        self.assertEqual(seating_map.name, "Main hall")
        seated, standing, stage = seating_map.layout.blocks

        self.assertEqual(seated.seat_count(), 12)
        self.assertEqual(seated.rows[0].label, "B")
        self.assertEqual(seated.rows[0].seats[0].label, "2B")
        self.assertEqual((seated.position.x, seated.position.y), (10, 20))

        self.assertEqual(standing.capacity, 250)
        self.assertEqual(len(standing.seats), 1)
        self.assertEqual((standing.width, standing.height), (300, 150))

        self.assertIsNone(stage.rows)
        self.assertIsNone(stage.seats)
        self.assertEqual(stage.width, 400)

    def test_seated_block_without_counts_has_no_rows(self):
        block = materialize_block(TemplateBlock(id="b", name="B", type=BlockType.seated_grid))
        self.assertEqual(block.rows, [])

    def test_zero_capacity_standing_block_has_no_seats(self):
        block = materialize_block(TemplateBlock(id="s", name="S", type=BlockType.standing_capacity))
        self.assertEqual(block.capacity, 0)
        self.assertEqual(block.seats, [])


if __name__ == "__main__":
    unittest.main()
