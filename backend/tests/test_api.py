import os
import tempfile
import unittest


class TestRoomLayoutAPI(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        # Point the app at a temporary sqlite DB for tests.
        cls._tmpdir = tempfile.TemporaryDirectory()
        os.environ["CINEMA_LAYOUT_DATA_DIR"] = cls._tmpdir.name
        # Import after env var set so db uses the temp dir.
        from backend.app.db import init_db
        from backend.app.main import app

        cls.app = app
        init_db()

    @classmethod
    def tearDownClass(cls):
        cls._tmpdir.cleanup()

    def _client(self):
        from fastapi.testclient import TestClient

        return TestClient(self.app)

    def _create_room(self, c, **overrides):
        body = {
            "name": "Room 1",
            "cinemaId": "cin-1",
            "seatLayout": [
                {"row": "A", "col": 1, "type": "NORMAL"},
                {"row": "B", "col": 3, "type": "COUPLE"},
                {"row": "B", "col": 4, "type": "COUPLE"},
            ],
            "vipPrice": 20000,
            "couplePrice": 50000,
        }
        body.update(overrides)
        r = c.post("/rooms", json=body)
        self.assertEqual(r.status_code, 200, r.text)
        return r.json()

    def test_health(self):
        c = self._client()
        self.assertEqual(c.get("/health").json(), {"ok": True})

    def test_create_and_get_room(self):
        c = self._client()
        room = self._create_room(c)
        self.assertEqual(room["name"], "Room 1")
        self.assertEqual(room["cinemaId"], "cin-1")
        self.assertEqual(room["couplePrice"], 50000)
        self.assertEqual(len(room["seatLayout"]), 3)

        got = c.get(f"/rooms/{room['id']}").json()
        self.assertEqual(got["seatLayout"], room["seatLayout"])

    def test_stored_layout_is_normalised(self):
        c = self._client()
        room = self._create_room(
            c,
            seatLayout=[
                {"row": "B", "col": 1, "type": "VIP"},
                {"row": "A", "col": 1, "type": "COUPLE"},
                {"row": "A", "col": 2, "type": "EMPTY"},
            ],
        )
        self.assertEqual(
            room["seatLayout"],
            [{"row": "A", "col": 1, "type": "NORMAL"}, {"row": "B", "col": 1, "type": "VIP"}],
        )

    def test_invalid_payloads(self):
        c = self._client()
        base = {"name": "R", "cinemaId": "c", "seatLayout": []}
        self.assertEqual(c.post("/rooms", json={**base, "vipPrice": -1}).status_code, 422)
        self.assertEqual(c.post("/rooms", json={**base, "name": "  "}).status_code, 422)
        bad_seat = {**base, "seatLayout": [{"row": "Z", "col": 1, "type": "NORMAL"}]}
        self.assertEqual(c.post("/rooms", json=bad_seat).status_code, 422)
        bad_type = {**base, "seatLayout": [{"row": "A", "col": 1, "type": "SOFA"}]}
        self.assertEqual(c.post("/rooms", json=bad_type).status_code, 422)

    def test_missing_room(self):
        c = self._client()
        self.assertEqual(c.get("/rooms/999999").status_code, 404)
        self.assertEqual(c.get("/rooms/999999/layout").status_code, 404)

    def test_layout_reconstructs_couples(self):
        c = self._client()
        room = self._create_room(c)
        data = c.get(f"/rooms/{room['id']}/layout").json()
        layout = data["layout"]
        self.assertEqual((layout["rows"], layout["cols"]), (2, 4))
        self.assertEqual(layout["seats"][1][2]["seatNumber"], "B3-4")
        self.assertEqual(layout["seats"][1][3]["coupleWith"], 2)
        self.assertEqual(data["stats"]["couple"], 1)
        self.assertEqual(data["stats"]["total"], 2)

    def test_edits_apply_and_persist(self):
        c = self._client()
        room = self._create_room(c)
        r = c.post(
            f"/rooms/{room['id']}/layout/edits",
            json={
                "edits": [
                    {"action": "resize", "rows": 3, "cols": 5},
                    {"action": "click", "row": 2, "col": 1, "seat_type": "COUPLE"},
                    {"action": "paint", "row": 0, "col": 4, "seat_type": "VIP"},
                    {"action": "erase", "row": 1, "col": 3},
                ]
            },
        )
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["stats"]["couple"], 1)
        stored = c.get(f"/rooms/{room['id']}").json()["seatLayout"]
        self.assertEqual(
            stored,
            [
                {"row": "A", "col": 1, "type": "NORMAL"},
                {"row": "A", "col": 5, "type": "VIP"},
                {"row": "C", "col": 1, "type": "COUPLE"},
                {"row": "C", "col": 2, "type": "COUPLE"},
            ],
        )

    def test_rejected_edit_stores_nothing(self):
        c = self._client()
        room = self._create_room(c)
        r = c.post(
            f"/rooms/{room['id']}/layout/edits",
            json={"edits": [{"action": "clear"}, {"action": "couple", "row": 0, "col_a": 0, "col_b": 2}]},
        )
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["detail"]["edit_index"], 1)
        self.assertIn("adjacent empty seats", r.json()["detail"]["message"])
        self.assertEqual(c.get(f"/rooms/{room['id']}").json()["seatLayout"], room["seatLayout"])

        r = c.post(f"/rooms/{room['id']}/layout/edits", json={"edits": [{"action": "resize", "rows": 16, "cols": 2}]})
        self.assertEqual(r.status_code, 400)
        r = c.post(f"/rooms/{room['id']}/layout/edits", json={"edits": [{"action": "erase", "row": 9, "col": 0}]})
        self.assertEqual(r.status_code, 400)

    def test_grid_size_survives_reload(self):
        c = self._client()
        room = self._create_room(c, seatLayout=[])
        self.assertEqual((room["rows"], room["cols"]), (1, 1))
        r = c.post(f"/rooms/{room['id']}/layout/edits", json={"edits": [{"action": "resize", "rows": 10, "cols": 15}]})
        self.assertEqual(r.status_code, 200, r.text)

        layout = c.get(f"/rooms/{room['id']}/layout").json()["layout"]
        self.assertEqual((layout["rows"], layout["cols"]), (10, 15))
        r = c.post(
            f"/rooms/{room['id']}/layout/edits",
            json={"edits": [{"action": "click", "row": 9, "col": 14, "seat_type": "NORMAL"}]},
        )
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(c.get(f"/rooms/{room['id']}").json()["seatLayout"], [{"row": "J", "col": 15, "type": "NORMAL"}])

        # An update that only touches the seat list keeps the stored size.
        r = c.put(f"/rooms/{room['id']}", json={"seatLayout": [{"row": "A", "col": 1, "type": "VIP"}]})
        self.assertEqual((r.json()["rows"], r.json()["cols"]), (10, 15))
        data = c.get(f"/rooms/{room['id']}/booking-map").json()
        self.assertEqual((data["rows"], data["cols"]), (10, 15))

    def test_create_with_explicit_size(self):
        c = self._client()
        room = self._create_room(c, rows=8, cols=12)
        self.assertEqual((room["rows"], room["cols"]), (8, 12))
        layout = c.get(f"/rooms/{room['id']}/layout").json()["layout"]
        self.assertEqual((layout["rows"], layout["cols"]), (8, 12))
        self.assertEqual(layout["seats"][1][3]["seatNumber"], "B3-4")
        self.assertEqual(c.post("/rooms", json={"name": "R", "cinemaId": "c", "rows": 16}).status_code, 422)

    def test_import_full_layout(self):
        c = self._client()
        room = self._create_room(c)
        exported = c.get(f"/rooms/{room['id']}/layout").json()["layout"]
        exported["seats"][0][1] = {"row": 0, "col": 1, "type": "BLOCKED"}
        r = c.put(f"/rooms/{room['id']}/layout", json=exported)
        self.assertEqual(r.status_code, 200, r.text)
        self.assertIn({"row": "A", "col": 2, "type": "BLOCKED"}, c.get(f"/rooms/{room['id']}").json()["seatLayout"])

        before = c.get(f"/rooms/{room['id']}").json()["seatLayout"]
        self.assertEqual(c.put(f"/rooms/{room['id']}/layout", json={"rows": 2, "cols": 2}).status_code, 400)
        self.assertEqual(c.get(f"/rooms/{room['id']}").json()["seatLayout"], before)

    def test_update_archive_restore_delete(self):
        c = self._client()
        room = self._create_room(c, cinemaId="cin-archive")
        rid = room["id"]
        r = c.put(f"/rooms/{rid}", json={"name": "Renamed", "vipPrice": 1, "seatLayout": [{"row": "A", "col": 2, "type": "VIP"}]})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["name"], "Renamed")
        self.assertEqual(r.json()["seatLayout"], [{"row": "A", "col": 2, "type": "VIP"}])
        self.assertEqual(r.json()["couplePrice"], 50000)

        self.assertEqual(len(c.get("/rooms", params={"cinema_id": "cin-archive"}).json()), 1)
        c.post(f"/rooms/{rid}/archive")
        self.assertEqual(c.get("/rooms", params={"cinema_id": "cin-archive"}).json(), [])
        archived = c.get("/rooms", params={"cinema_id": "cin-archive", "include_archived": True}).json()
        self.assertTrue(archived[0]["isArchived"])
        c.post(f"/rooms/{rid}/restore")
        self.assertEqual(len(c.get("/rooms", params={"cinema_id": "cin-archive"}).json()), 1)

        self.assertEqual(c.delete(f"/rooms/{rid}").json(), {"deleted": True})
        self.assertEqual(c.get(f"/rooms/{rid}").status_code, 404)

    def test_serve_runs_app_with_uvicorn(self):
        from unittest import mock

        from backend.app import main as api

        with mock.patch.dict(os.environ, {"CINEMA_LAYOUT_PORT": "8123"}), mock.patch("uvicorn.run") as run:
            api.serve()
        run.assert_called_once_with(api.app, host="127.0.0.1", port=8123, log_config=None)

    def test_booking_map(self):
        c = self._client()
        room = self._create_room(c)
        data = c.get(f"/rooms/{room['id']}/booking-map", params={"booked": "A1", "held": "b4"}).json()
        units = {u["seatNumber"]: u for u in data["units"]}
        self.assertEqual(set(units), {"A1", "B3-4"})
        self.assertEqual(units["A1"]["status"], "booked")
        self.assertFalse(units["A1"]["selectable"])
        self.assertEqual(units["B3-4"]["status"], "held")
        self.assertEqual(units["B3-4"]["width"], 2)


if __name__ == "__main__":
    unittest.main()
