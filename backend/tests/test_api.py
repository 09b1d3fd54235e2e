import os
import tempfile
import unittest


TEMPLATE = {
    "name": "Main hall",
    "layout": {
        "blocks": [
            {"id": "b1", "name": "Stalls", "type": "seated_grid", "position": {"x": 0, "y": 0}, "rows": 2, "columns": 3},
            {"id": "s1", "name": "Pit", "type": "standing_capacity", "capacity": 400, "width": 220, "height": 160},
            {"id": "n1", "name": "Stage", "type": "non_sellable", "width": 300, "height": 80},
        ]
    },
}

TIERS = [
    {"id": "t1", "name": "VIP", "price": 150, "color": "#f59e0b"},
    {"id": "t2", "name": "GA", "price": 45, "color": "#3b82f6"},
]


class TestSeatingLayoutAPI(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        # Point the app at a temporary sqlite DB for tests.
        cls._tmpdir = tempfile.TemporaryDirectory()
        os.environ["SEATING_LAYOUT_DATA_DIR"] = cls._tmpdir.name
        # Import after env var set so db uses the temp dir.
        from backend.app.db import init_db
        from backend.app.main import app

        cls.app = app
        init_db()

    @classmethod
    def tearDownClass(cls):
        cls._tmpdir.cleanup()

    def client(self):
        from fastapi.testclient import TestClient

        return TestClient(self.app)

    def seating_map(self, c):
        t = c.post("/seating-templates", json={"name": "Hall", "organizationId": "org-map", "layoutData": TEMPLATE})
        return c.post(f"/seating-templates/{t.json()['id']}/materialize").json()

    def test_health(self):
        self.assertEqual(self.client().get("/health").json(), {"ok": True})

    def test_session_dependency_closes_session(self):
        from unittest import mock

        from sqlmodel import Session

        from backend.app.db import get_session

        with mock.patch.object(Session, "close", autospec=True) as close:
            gen = get_session()
            session = next(gen)
            self.assertIsInstance(session, Session)
            close.assert_not_called()
            with self.assertRaises(StopIteration):
                next(gen)
            close.assert_called_once_with(session)

    def test_template_crud_and_pagination(self):
        c = self.client()
        created = [
            c.post(
                "/seating-templates",
                json={"name": f"Layout {i}", "organizationId": "org-1", "layoutData": TEMPLATE},
            ).json()
            for i in range(3)
        ]
        first = created[0]
        self.assertEqual(first["organizationId"], "org-1")
        self.assertEqual(first["layoutData"]["layout"]["blocks"][0]["rows"], 2)

        page = c.get("/seating-templates/organization/org-1?page=0&size=2").json()
        self.assertEqual(page["totalElements"], 3)
        self.assertEqual(page["totalPages"], 2)
        self.assertEqual(page["numberOfElements"], 2)
        self.assertTrue(page["first"])
        self.assertFalse(page["last"])
        last = c.get("/seating-templates/organization/org-1?page=1&size=2").json()
        self.assertTrue(last["last"])
        self.assertEqual(last["numberOfElements"], 1)
        self.assertTrue(c.get("/seating-templates/organization/nobody").json()["empty"])

        updated = c.put(
            f"/seating-templates/{first['id']}",
            json={"name": "Renamed", "organizationId": "org-1", "layoutData": TEMPLATE},
        ).json()
        self.assertEqual(updated["name"], "Renamed")
        self.assertEqual(c.get(f"/seating-templates/{first['id']}").json()["name"], "Renamed")

        self.assertEqual(c.delete(f"/seating-templates/{first['id']}").json(), {"deleted": True})
        self.assertEqual(c.get(f"/seating-templates/{first['id']}").status_code, 404)

    def test_invalid_template_rejected(self):
        c = self.client()
        bad = {"name": "", "organizationId": "org-1", "layoutData": TEMPLATE}
        self.assertEqual(c.post("/seating-templates", json=bad).status_code, 422)
        bad_type = {
            "name": "X",
            "organizationId": "org-1",
            "layoutData": {"name": "X", "layout": {"blocks": [{"id": "z", "name": "Z", "type": "balcony"}]}},
        }
        self.assertEqual(c.post("/seating-templates", json=bad_type).status_code, 422)

    def test_materialize(self):
        seating_map = self.seating_map(self.client())
        self.assertEqual(seating_map["name"], "Main hall")
        seated, standing, stage = seating_map["layout"]["blocks"]
        self.assertEqual(sum(len(r["seats"]) for r in seated["rows"]), 6)
        self.assertEqual(seated["rows"][0]["seats"][0]["label"], "1A")
        self.assertEqual(standing["capacity"], 400)
        self.assertEqual(len(standing["seats"]), 1)
        self.assertNotIn("rows", stage)

    def test_seat_click_and_apply_to_all(self):
        c = self.client()
        seating_map = self.seating_map(c)
        res = c.post(
            "/layouts/seat-click",
            json={
                "seatingMap": seating_map,
                "tiers": TIERS,
                "selectedTierId": "t1",
                "blockId": "b1",
                "rowId": "temp_row_b1_0",
                "seatId": "temp_seat_b1_0_1",
            },
        ).json()
        self.assertEqual(res["affected"], 1)
        seat = res["seatingMap"]["layout"]["blocks"][0]["rows"][0]["seats"][1]
        self.assertEqual(seat["tierId"], "t1")

        res = c.post(
            "/layouts/apply-to-all",
            json={"seatingMap": res["seatingMap"], "tiers": TIERS, "selectedTierId": "t2", "blockId": "b1"},
        ).json()
        self.assertEqual(res["tierName"], "GA")
        self.assertEqual(res["affected"], 6)
        seats = [s for r in res["seatingMap"]["layout"]["blocks"][0]["rows"] for s in r["seats"]]
        self.assertTrue(all(s["tierId"] == "t2" for s in seats))

    def test_block_click(self):
        c = self.client()
        seating_map = self.seating_map(c)
        body = {"seatingMap": seating_map, "tiers": TIERS, "selectedTierId": "RESERVED", "blockId": "s1"}
        res = c.post("/layouts/block-click", json=body).json()
        self.assertTrue(res["rejected"])
        self.assertIn("non-sellable", res["warning"])
        self.assertEqual(res["seatingMap"], seating_map)

        body["selectedTierId"] = "t2"
        res = c.post("/layouts/block-click", json=body).json()
        standing = res["seatingMap"]["layout"]["blocks"][1]
        self.assertFalse(res["rejected"])
        self.assertTrue(res["applied"])
        self.assertEqual(standing["tierId"], "t2")
        self.assertEqual(standing["seats"][0]["tierId"], "t2")

    def test_render_and_summary(self):
        c = self.client()
        seating_map = self.seating_map(c)
        view = c.post("/layouts/render", json={"seatingMap": seating_map, "tiers": TIERS}).json()
        seated, standing, stage = view["blocks"]
        self.assertEqual([r["label"] for r in seated["rows"]], ["A", "B"])
        self.assertEqual(seated["rows"][0]["seats"][0]["tier"], "Unassigned")
        self.assertEqual(standing["label"], "Capacity: 400")
        self.assertEqual(stage["label"], "Stage")

        summary = c.post("/layouts/summary", json={"seatingMap": seating_map, "tiers": TIERS}).json()
        self.assertEqual(summary["totalCapacity"], 406)
        self.assertEqual(summary["byStatus"], {"AVAILABLE": 406, "RESERVED": 0})
        self.assertEqual(summary["byTier"], [{"tierId": None, "name": "Unassigned", "color": "#d1d5db", "count": 406}])

    def test_normalize_and_validate(self):
        c = self.client()
        seating_map = self.seating_map(c)
        norm = c.post("/layouts/normalize", json={"seatingMap": seating_map, "padding": 10}).json()
        self.assertEqual(norm["padding"], 10)
        first = norm["seatingMap"]["layout"]["blocks"][0]
        self.assertEqual((first["position"]["x"], first["position"]["y"]), (10, 10))
        self.assertEqual(norm["canvasWidth"], norm["contentWidth"] + 20)

        self.assertEqual(c.post("/layouts/validate", json={"seatingMap": seating_map}).json(), {"valid": True, "problems": []})
        seating_map["layout"]["blocks"][1]["id"] = "b1"
        res = c.post("/layouts/validate", json={"seatingMap": seating_map}).json()
        self.assertFalse(res["valid"])
        self.assertEqual(len(res["problems"]), 1)


if __name__ == "__main__":
    unittest.main()
