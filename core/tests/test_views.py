import json

from django.conf import settings
from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

from accounts.services.sessions import ISSUED_AT_KEY
from core.models import Course, Schedule

User = get_user_model()

PASSWORD = "Gr8-Semester!"


class _ApiTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user("student1", "s1@example.edu", PASSWORD)
        self.client.login(username="student1", password=PASSWORD)
        Course.objects.create(division="MATH", number="101", name="Calculus I", units=5)
        Course.objects.create(division="CS", number="101", name="Intro to Programming", units=4)
        Course.objects.create(division="ENGL", number="1A", name="Composition", units=3)

    def post(self, name, payload):
        return self.client.post(
            reverse(f"core:{name}"), data=json.dumps(payload), content_type="application/json"
        )


class CreateAndListTests(_ApiTestCase):
    def test_create_schedule(self):
        r = self.post("create_schedule", {"name": "Plan A", "columns": 4})
        self.assertEqual(r.status_code, 201)
        data = r.json()
        self.assertEqual(data["info"], "SCHEDULE CREATED")
        self.assertEqual(data["headers"][-1], "Selected Classes")
        self.assertEqual(len(data["headers"]), 5)
        self.assertEqual(data["schedule"], {"columns": 4, "semesters": [[], [], [], []], "bank": []})

    def test_duplicate_name_conflicts(self):
        self.post("create_schedule", {"name": "Plan A"})
        r = self.post("create_schedule", {"name": "Plan A"})
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["info"], "SCHEDULE EXISTS")

    def test_bad_create_input(self):
        self.assertEqual(self.post("create_schedule", {"name": ""}).status_code, 400)
        too_many = settings.SCHEDULE_MAX_SEMESTERS + 1
        self.assertEqual(self.post("create_schedule", {"name": "X", "columns": too_many}).status_code, 400)
        self.assertEqual(self.post("create_schedule", {"name": "X", "columns": 0}).status_code, 400)

    def test_is_public_string_is_rejected(self):
        r = self.post("create_schedule", {"name": "Plan A", "is_public": "false"})
        self.assertEqual(r.status_code, 400)
        self.assertFalse(Schedule.objects.exists())
        r = self.post("create_schedule", {"name": "Plan A", "is_public": True})
        self.assertTrue(r.json()["is_public"])

    def test_get_user_schedules_only_lists_own(self):
        other = User.objects.create_user("student2", "s2@example.edu", PASSWORD)
        Schedule.objects.create(user=other, name="Theirs", is_public=True)
        self.post("create_schedule", {"name": "Mine"})
        r = self.client.get(reverse("core:get_user_schedules"))
        self.assertEqual([s["name"] for s in r.json()["schedules"]], ["Mine"])

    def test_requires_session(self):
        self.client.logout()
        r = self.post("create_schedule", {"name": "Plan A"})
        self.assertEqual(r.status_code, 401)
        self.assertEqual(self.client.get(reverse("core:get_user_schedules")).status_code, 401)

    def test_expired_session_is_rejected(self):
        self.client.get(reverse("accounts:verify_session"))  # stamps the session
        session = self.client.session
        session[ISSUED_AT_KEY] -= settings.SESSION_LIFETIME.total_seconds() + 1
        session.save()
        r = self.post("create_schedule", {"name": "Plan A"})
        self.assertEqual(r.status_code, 401)
        self.assertEqual(r.json()["info"], "EXPIRED")


class EditScheduleTests(_ApiTestCase):
    def setUp(self):
        super().setUp()
        self.post("create_schedule", {"name": "Plan A", "columns": 2})

    def edit(self, **payload):
        payload.setdefault("name", "Plan A")
        return self.post("edit_schedule", payload)

    def test_add_move_remove(self):
        r = self.edit(action="add", **{"class": "math-101"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["schedule"]["bank"], ["MATH-101"])

        r = self.edit(action="move", semester=1, **{"class": "MATH-101"})
        data = r.json()
        self.assertTrue(data["changed"])
        self.assertEqual(data["schedule"]["semesters"], [[], ["MATH-101"]])
        self.assertEqual(data["units"], [0.0, 5.0])
        self.assertEqual(data["classes"]["MATH-101"]["NAME"], "Calculus I")

        r = self.edit(action="remove", **{"class": "MATH-101"})
        self.assertEqual(r.json()["schedule"]["semesters"], [[], []])
        stored = Schedule.objects.get(user=self.user, name="Plan A")
        self.assertEqual(stored.data["semesters"], [[], []])

    def test_move_to_same_column_reports_unchanged(self):
        self.edit(action="add", **{"class": "CS-101"})
        r = self.edit(action="move", semester=2, **{"class": "CS-101"})  # bank index
        self.assertFalse(r.json()["changed"])

    def test_columns_shrink_sends_classes_to_bank(self):
        self.edit(action="add", **{"class": "CS-101"})
        self.edit(action="move", semester=1, **{"class": "CS-101"})
        r = self.edit(action="columns", columns=1)
        self.assertEqual(r.json()["schedule"], {"columns": 1, "semesters": [[]], "bank": ["CS-101"]})
        self.assertEqual(Schedule.objects.get(name="Plan A").columns, 1)

    def test_clear(self):
        self.edit(action="add", **{"class": "CS-101"})
        self.edit(action="move", semester=0, **{"class": "CS-101"})
        r = self.edit(action="clear")
        self.assertEqual(r.json()["schedule"]["bank"], ["CS-101"])

    def test_edit_unreadable_schedule(self):
        Schedule.objects.filter(name="Plan A").update(data={"semesters": "x"})
        r = self.edit(action="add", **{"class": "CS-101"})
        self.assertEqual(r.status_code, 409)
        self.assertEqual(Schedule.objects.get(name="Plan A").data, {"semesters": "x"})

    def test_edit_errors(self):
        self.assertEqual(self.edit(action="add", **{"class": "NOPE-1"}).status_code, 400)
        self.edit(action="add", **{"class": "CS-101"})
        self.assertEqual(self.edit(action="add", **{"class": "CS-101"}).status_code, 400)
        self.assertEqual(self.edit(action="move", semester=7, **{"class": "CS-101"}).status_code, 400)
        self.assertEqual(self.edit(action="move", **{"class": "CS-101"}).status_code, 400)
        self.assertEqual(self.edit(action="remove", **{"class": "MATH-101"}).status_code, 400)
        self.assertEqual(self.edit(action="explode").status_code, 400)
        self.assertEqual(self.edit(name="Nope", action="clear").status_code, 404)


class SaveFetchDeleteTests(_ApiTestCase):
    DOC = {"columns": 2, "semesters": [["MATH-101"], ["CS-101"]], "bank": ["ENGL-1A"]}

    def test_post_schedule_creates_then_updates(self):
        r = self.post("post_schedule", {"name": "Saved", "schedule": self.DOC})
        self.assertEqual(r.status_code, 201)
        self.assertEqual(Schedule.objects.get(name="Saved").data, self.DOC)

        doc = {"columns": 1, "semesters": [["CS-101"]], "bank": []}
        r = self.post("post_schedule", {"name": "Saved", "schedule": doc, "is_public": True})
        self.assertEqual(r.status_code, 200)
        saved = Schedule.objects.get(name="Saved")
        self.assertEqual(saved.data, doc)
        self.assertEqual(saved.columns, 1)
        self.assertTrue(saved.is_public)

    def test_post_schedule_without_document_keeps_saved_plan(self):
        self.post("post_schedule", {"name": "Saved", "schedule": self.DOC})
        for payload in ({"name": "Saved"}, {"name": "Saved", "schedule": None}, {"name": "Saved", "schedule": []}):
            with self.subTest(payload=payload):
                r = self.post("post_schedule", payload)
                self.assertEqual(r.status_code, 400)
                self.assertEqual(r.json()["info"], "BAD SCHEDULE")
        self.assertEqual(Schedule.objects.get(name="Saved").data, self.DOC)

    def test_is_public_must_be_a_boolean(self):
        r = self.post("post_schedule", {"name": "Saved", "schedule": self.DOC, "is_public": "false"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["info"], "BAD REQUEST")
        self.assertFalse(Schedule.objects.exists())

        r = self.post("post_schedule", {"name": "Saved", "schedule": self.DOC, "is_public": False})
        self.assertEqual(r.status_code, 201)
        self.assertFalse(Schedule.objects.get(name="Saved").is_public)

    def test_fetch_unreadable_schedule(self):
        Schedule.objects.create(user=self.user, name="Broken", data={"semesters": "x"})
        r = self.post("fetch_schedule", {"name": "Broken"})
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["info"], "SCHEDULE CORRUPT")

    def test_post_schedule_rejects_bad_documents(self):
        r = self.post("post_schedule", {"name": "Saved", "schedule": {"semesters": "x"}})
        self.assertEqual(r.status_code, 400)
        r = self.post("post_schedule", {"name": "Saved", "schedule": {"semesters": [["FAKE-9"]]}})
        self.assertEqual(r.status_code, 400)
        self.assertFalse(Schedule.objects.exists())

    def test_fetch_own_schedule(self):
        self.post("post_schedule", {"name": "Saved", "schedule": self.DOC})
        r = self.post("fetch_schedule", {"name": "Saved"})
        self.assertEqual(r.status_code, 200)
        data = r.json()
        self.assertEqual(data["schedule"], self.DOC)
        self.assertEqual(data["units"], [5.0, 4.0])
        self.assertEqual(self.post("fetch_schedule", {"name": "Missing"}).status_code, 404)

    def test_fetch_public_schedule_of_another_user(self):
        other = User.objects.create_user("student2", "s2@example.edu", PASSWORD)
        Schedule.objects.create(user=other, name="Open", is_public=True, columns=2, data=self.DOC)
        Schedule.objects.create(user=other, name="Closed", columns=2, data=self.DOC)
        self.client.logout()

        r = self.post("fetch_schedule", {"username": "student2", "name": "Open"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["owner"], "student2")
        r = self.post("fetch_schedule", {"username": "student2", "name": "Closed"})
        self.assertEqual(r.status_code, 404)
        self.assertEqual(self.post("fetch_schedule", {"name": "Open"}).status_code, 401)

    def test_delete_schedule(self):
        self.post("create_schedule", {"name": "Doomed"})
        r = self.post("delete_schedule", {"name": "Doomed"})
        self.assertEqual(r.json()["info"], "SCHEDULE DELETED")
        self.assertFalse(Schedule.objects.filter(name="Doomed").exists())
        self.assertEqual(self.post("delete_schedule", {"name": "Doomed"}).status_code, 404)

    def test_cannot_delete_someone_elses(self):
        other = User.objects.create_user("student2", "s2@example.edu", PASSWORD)
        Schedule.objects.create(user=other, name="Theirs")
        self.assertEqual(self.post("delete_schedule", {"name": "Theirs"}).status_code, 404)
        self.assertTrue(Schedule.objects.filter(name="Theirs").exists())

    def test_fetch_batch(self):
        other = User.objects.create_user("student2", "s2@example.edu", PASSWORD)
        Schedule.objects.create(user=other, name="Transfer plan", is_public=True)
        Schedule.objects.create(user=other, name="Transfer secret")
        Schedule.objects.create(user=self.user, name="My transfer plan")

        r = self.post("fetch_schedules_batch", {"query": "transfer"})
        names = sorted(s["name"] for s in r.json()["schedules"])
        self.assertEqual(names, ["My transfer plan", "Transfer plan"])

        r = self.post("fetch_schedules_batch", {"username": "STUDENT2"})
        self.assertEqual([s["name"] for s in r.json()["schedules"]], ["Transfer plan"])

        self.client.logout()
        r = self.post("fetch_schedules_batch", {"query": "transfer", "limit": 1})
        self.assertEqual([s["name"] for s in r.json()["schedules"]], ["Transfer plan"])


class ExportTests(_ApiTestCase):
    def test_export_downloads_semesters(self):
        schedule = Schedule.objects.create(
            user=self.user, name="Plan", columns=2,
            data={"columns": 2, "semesters": [["MATH-101"], []], "bank": ["CS-101"]},
        )
        r = self.client.get(reverse("core:schedule_export", args=[schedule.pk]))
        self.assertEqual(r.status_code, 200)
        self.assertIn('filename="schedule.json"', r["Content-Disposition"])
        body = json.loads(r.content)
        self.assertEqual(body[0][0]["NAME"], "Calculus I")
        self.assertEqual(body[1], [])

    def test_private_export_hidden_from_others(self):
        other = User.objects.create_user("student2", "s2@example.edu", PASSWORD)
        schedule = Schedule.objects.create(user=other, name="Theirs")
        r = self.client.get(reverse("core:schedule_export", args=[schedule.pk]))
        self.assertEqual(r.status_code, 404)
