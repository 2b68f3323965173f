"""
Core data models for MakeMyFuture.

Notes:
- Courses are keyed by (division, number); their acronym "DIVISION-NUMBER"
  is what schedules store, so a catalog reload never orphans a schedule row.
- Schedule.data holds the builder document (see services.schedule_builder).
"""

from django.conf import settings
from django.db import models
from django.db.models import Index
from django.db.models.functions import Lower


class College(models.Model):
    """A university students can plan a transfer to."""

    name = models.CharField(max_length=160, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Major(models.Model):
    college = models.ForeignKey(College, on_delete=models.CASCADE, related_name="majors")
    name = models.CharField(max_length=160)
    degree = models.CharField(
        max_length=16, blank=True,
        help_text="Optional degree label, e.g. 'B.S.'.",
    )

    class Meta:
        ordering = ["college__name", "name"]
        constraints = [
            models.UniqueConstraint(
                Lower("name"), "college",
                name="uniq_major_college_name_ci",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.college})"


class Course(models.Model):
    """
    A class offered in the catalog, e.g. CS-101.
    `division` is stored upper-cased so acronyms compare exactly.
    """
    division = models.CharField(max_length=16, help_text="Department code, e.g. 'MATH'.")
    number = models.CharField(max_length=16, help_text="Course number, e.g. '101A'.")
    name = models.CharField(max_length=200)
    units = models.DecimalField(max_digits=4, decimal_places=1, default=0)
    description = models.TextField(blank=True)
    college = models.ForeignKey(
        College, null=True, blank=True, on_delete=models.SET_NULL, related_name="courses",
    )

    class Meta:
        ordering = ["division", "number"]
        constraints = [
            models.UniqueConstraint(
                fields=["division", "number"],
                name="uniq_course_division_number",
            )
        ]
        indexes = [
            Index(fields=["name"], name="core_course_name_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.acronym} {self.name}"

    def save(self, *args, **kwargs):
        self.division = (self.division or "").strip().upper()
        self.number = (self.number or "").strip().upper()
        return super().save(*args, **kwargs)

    @property
    def acronym(self) -> str:
        return f"{self.division}-{self.number}"

    def as_class_dict(self) -> dict:
        """Shape the builder and the front end use for a class."""
        return {
            "ACR": self.acronym,
            "DIVISION": self.division,
            "NUMBER": self.number,
            "NAME": self.name,
            "UNITS": float(self.units),
        }


class Schedule(models.Model):
    """A named semester plan owned by a user."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="schedules",
    )
    name = models.CharField(max_length=100)
    columns = models.PositiveSmallIntegerField(
        default=1, help_text="Number of semesters in the plan.",
    )
    data = models.JSONField(default=dict, blank=True)
    is_public = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "name"],
                name="uniq_schedule_user_name",
            )
        ]
        indexes = [
            Index(fields=["user", "name"], name="core_schedu_user_id_name_idx"),
            Index(fields=["is_public", "updated_at"], name="core_schedu_public_updated_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.user})"

    def summary(self) -> dict:
        return {
            "id": self.pk,
            "name": self.name,
            "owner": self.user.get_username(),
            "columns": self.columns,
            "is_public": self.is_public,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
