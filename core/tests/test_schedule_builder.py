from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from core.services.schedule_builder import (
    BANK_HEADER,
    ScheduleBuilder,
    ScheduleError,
    UnreadableSchedule,
    builder_for,
)


def _course(acr, units):
    division, _, number = acr.partition("-")
    return SimpleNamespace(
        units=Decimal(units),
        as_class_dict=lambda: {"ACR": acr, "DIVISION": division, "NUMBER": number, "NAME": f"{acr} name"},
    )


class GridTests(SimpleTestCase):
    def test_headers(self):
        b = ScheduleBuilder(3)
        self.assertEqual(b.headers(), ["Semester 1", "Semester 2", "Semester 3", BANK_HEADER])

    def test_new_classes_land_in_bank(self):
        b = ScheduleBuilder(2)
        b.add_class("math-101")
        self.assertEqual(b.bank, ["MATH-101"])
        self.assertEqual(b.locate("MATH-101"), b.bank_index)
        self.assertTrue(b.is_empty(0))
        self.assertFalse(b.is_empty(b.bank_index))

    def test_duplicate_add_is_rejected(self):
        b = ScheduleBuilder(2)
        b.add_class("MATH-101")
        b.move_class("MATH-101", 1)
        with self.assertRaises(ScheduleError):
            b.add_class("MATH-101")

    def test_move_between_columns(self):
        b = ScheduleBuilder(2)
        b.add_class("MATH-101")
        b.add_class("CS-101")
        self.assertTrue(b.move_class("MATH-101", 0))
        self.assertTrue(b.move_class("CS-101", 1))
        self.assertTrue(b.move_class("MATH-101", 1))
        self.assertEqual(b.semesters(), [[], ["CS-101", "MATH-101"]])
        self.assertEqual(b.bank, [])

    def test_drop_on_own_column_is_noop(self):
        b = ScheduleBuilder(1)
        b.add_class("MATH-101")
        self.assertFalse(b.move_class("MATH-101", b.bank_index))
        b.move_class("MATH-101", 0)
        self.assertFalse(b.move_class("MATH-101", 0))
        self.assertEqual(b.semesters(), [["MATH-101"]])

    def test_move_errors(self):
        b = ScheduleBuilder(1)
        b.add_class("MATH-101")
        with self.assertRaises(ScheduleError):
            b.move_class("CS-101", 0)
        with self.assertRaises(ScheduleError):
            b.move_class("MATH-101", 2)
        with self.assertRaises(ScheduleError):
            b.move_class("MATH-101", -1)

    def test_remove_from_any_column(self):
        b = ScheduleBuilder(2)
        for acr in ("MATH-101", "CS-101"):
            b.add_class(acr)
        b.move_class("CS-101", 1)
        self.assertTrue(b.remove_class("CS-101"))
        self.assertTrue(b.remove_class("MATH-101"))
        self.assertFalse(b.remove_class("MATH-101"))
        self.assertEqual(b.classes(), [])

    def test_semesters_exclude_bank_and_are_copies(self):
        b = ScheduleBuilder(1)
        b.add_class("MATH-101")
        sems = b.semesters()
        sems[0].append("HACK-1")
        self.assertEqual(b.semesters(), [[]])


class ColumnTests(SimpleTestCase):
    def test_non_positive_is_ignored(self):
        b = ScheduleBuilder(2)
        self.assertFalse(b.set_columns(0))
        self.assertFalse(b.set_columns(-3))
        self.assertEqual(b.columns, 2)

    def test_grow_keeps_placement(self):
        b = ScheduleBuilder(1)
        b.add_class("MATH-101")
        b.move_class("MATH-101", 0)
        b.set_columns(3)
        self.assertEqual(b.semesters(), [["MATH-101"], [], []])

    def test_shrink_moves_dropped_classes_to_bank(self):
        b = ScheduleBuilder(3)
        for i, acr in enumerate(["A-1", "B-1", "C-1"]):
            b.add_class(acr)
            b.move_class(acr, i)
        b.add_class("D-1")
        b.set_columns(1)
        self.assertEqual(b.semesters(), [["A-1"]])
        self.assertEqual(b.bank, ["D-1", "B-1", "C-1"])

    def test_max_columns(self):
        b = ScheduleBuilder(1, max_columns=4)
        with self.assertRaises(ScheduleError):
            b.set_columns(5)
        with self.assertRaises(ScheduleError):
            ScheduleBuilder(5, max_columns=4)
        with self.assertRaises(ScheduleError):
            ScheduleBuilder(0)

    def test_clear_returns_everything_to_bank(self):
        b = ScheduleBuilder(2)
        b.add_class("A-1")
        b.add_class("B-1")
        b.move_class("B-1", 1)
        b.clear()
        self.assertEqual(b.semesters(), [[], []])
        self.assertEqual(b.bank, ["A-1", "B-1"])


class DocumentTests(SimpleTestCase):
    def test_document_round_trip(self):
        b = ScheduleBuilder(2)
        for acr in ("A-1", "B-1", "C-1"):
            b.add_class(acr)
        b.move_class("B-1", 1)
        doc = b.to_document()
        self.assertEqual(doc, {"columns": 2, "semesters": [[], ["B-1"]], "bank": ["A-1", "C-1"]})
        self.assertEqual(ScheduleBuilder.from_document(doc).to_document(), doc)

    def test_empty_document_uses_default_columns(self):
        self.assertEqual(ScheduleBuilder.from_document({}, default_columns=4).columns, 4)

    def test_columns_inferred_from_semesters(self):
        b = ScheduleBuilder.from_document({"semesters": [["A-1"], [], ["B-1"]]})
        self.assertEqual(b.columns, 3)
        self.assertEqual(b.locate("B-1"), 2)

    def test_malformed_documents(self):
        bad = [
            [],
            "text",
            {"semesters": "A-1"},
            {"semesters": [["A-1"]], "bank": "B-1"},
            {"columns": "2"},
            {"columns": 1, "semesters": [[], []]},
            {"semesters": [["A-1"], ["A-1"]]},
            {"semesters": [["A-1"]], "bank": ["A-1"]},
        ]
        for doc in bad:
            with self.subTest(doc=doc), self.assertRaises(ScheduleError):
                ScheduleBuilder.from_document(doc)

    def test_saved_schedule_loads_past_the_semester_limit(self):
        row = SimpleNamespace(pk=1, columns=3, data={"columns": 3, "semesters": [["A-1"], [], []]})
        b = builder_for(row, max_columns=2)
        self.assertEqual(b.columns, 3)
        self.assertFalse(b.set_columns(0))
        self.assertTrue(b.set_columns(2))
        with self.assertRaises(ScheduleError):
            b.set_columns(3)

    def test_unreadable_saved_schedule(self):
        row = SimpleNamespace(pk=7, columns=1, data={"semesters": "broken"})
        with self.assertRaises(UnreadableSchedule):
            builder_for(row)


class ReportTests(SimpleTestCase):
    def test_export_and_units(self):
        b = ScheduleBuilder(2)
        for acr in ("MATH-1", "CS-1", "ART-9"):
            b.add_class(acr)
        b.move_class("MATH-1", 0)
        b.move_class("CS-1", 0)
        b.move_class("ART-9", 1)
        courses = {"MATH-1": _course("MATH-1", "5"), "CS-1": _course("CS-1", "4.5")}

        exported = b.export(courses)
        self.assertEqual([row["ACR"] for row in exported[0]], ["MATH-1", "CS-1"])
        self.assertEqual(exported[1], [{"ACR": "ART-9", "DIVISION": "ART", "NUMBER": "9"}])
        self.assertEqual(b.units_per_semester(courses), [Decimal("9.5"), Decimal("0")])

    def test_bank_not_exported(self):
        b = ScheduleBuilder(1)
        b.add_class("MATH-1")
        self.assertEqual(b.export({}), [[]])
