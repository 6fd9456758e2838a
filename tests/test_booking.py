import unittest

from seat_layout import editor
from seat_layout.booking import SeatStatus, booking_units, expand_seat_numbers, is_selectable, purchasable_units, seat_status
from seat_layout.grid import create_empty_layout
from seat_layout.render import render_ascii, render_booking_ascii
from seat_layout.types import SeatCell, SeatType


def _layout():
    g = create_empty_layout(2, 4)
    g = editor.paint_seat(g, 0, 0, SeatType.NORMAL).layout
    g = editor.paint_seat(g, 0, 1, SeatType.BLOCKED).layout
    g = editor.create_couple(g, 0, 2, 3).layout
    g = editor.paint_seat(g, 1, 0, SeatType.VIP).layout
    return g


class TestBookingStatus(unittest.TestCase):
    def test_expand_seat_numbers(self):
        self.assertEqual(expand_seat_numbers("A1-2"), ["A1", "A2"])
        self.assertEqual(expand_seat_numbers("B12"), ["B12"])
        self.assertEqual(expand_seat_numbers("C9-10"), ["C9", "C10"])

    def test_single_status_precedence(self):
        cell = SeatCell(0, 0, SeatType.NORMAL, seat_number="A1")
        self.assertEqual(seat_status(cell, {"A1"}, {"A1"}, {"A1"}), SeatStatus.booked)
        self.assertEqual(seat_status(cell, set(), {"A1"}, {"A1"}), SeatStatus.held)
        self.assertEqual(seat_status(cell, set(), set(), {"A1"}), SeatStatus.selected)
        self.assertEqual(seat_status(cell, set(), set()), SeatStatus.available)

    def test_couple_booked_if_either_half_booked(self):
        g = _layout()
        left = g.cell(0, 2)
        self.assertEqual(seat_status(left, {"A4"}, set()), SeatStatus.booked)
        self.assertEqual(seat_status(left, set(), {"A3"}), SeatStatus.held)

    def test_cells_without_number_are_available(self):
        self.assertEqual(seat_status(SeatCell(0, 0), {"A1"}, set()), SeatStatus.available)

    def test_selectable(self):
        self.assertFalse(is_selectable(SeatCell(0, 0), SeatStatus.available))
        self.assertFalse(is_selectable(SeatCell(0, 0, SeatType.BLOCKED, seat_number="A1"), SeatStatus.available))
        self.assertFalse(is_selectable(SeatCell(0, 0, SeatType.VIP, seat_number="A1"), SeatStatus.booked))
        self.assertTrue(is_selectable(SeatCell(0, 0, SeatType.VIP, seat_number="A1"), SeatStatus.held))

    def test_booking_units_skip_right_couple_half(self):
        units = list(booking_units(_layout(), booked={"A1"}))
        self.assertEqual(len(units), 7)
        couple = [u for u in units if u.cell.type == SeatType.COUPLE]
        self.assertEqual(len(couple), 1)
        self.assertEqual(couple[0].width, 2)
        self.assertEqual(couple[0].to_dict()["seatNumber"], "A3-4")
        first = units[0].to_dict()
        self.assertEqual((first["status"], first["selectable"]), ("booked", False))

    def test_purchasable_units(self):
        numbers = [u.cell.seat_number for u in purchasable_units(_layout())]
        self.assertEqual(numbers, ["A1", "A3-4", "B1"])


class TestRender(unittest.TestCase):
    def test_render_ascii(self):
        out = render_ascii(_layout(), cell_width=2).splitlines()
        self.assertIn("SCREEN", out[0])
        self.assertEqual(out[2], "A   N # < > ")
        self.assertEqual(out[3], "B   V . . . ")

    def test_render_booking(self):
        out = render_booking_ascii(_layout(), {"A1"}, {"A4"}, cell_width=2).splitlines()
        self.assertEqual(out[2], "A   x # h h ")


if __name__ == "__main__":
    unittest.main()
