from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.db.models.functions.text


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="College",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=160, unique=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("division", models.CharField(help_text="Department code, e.g. 'MATH'.", max_length=16)),
                ("number", models.CharField(help_text="Course number, e.g. '101A'.", max_length=16)),
                ("name", models.CharField(max_length=200)),
                ("units", models.DecimalField(decimal_places=1, default=0, max_digits=4)),
                ("description", models.TextField(blank=True)),
                ("college", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="courses", to="core.college")),
            ],
            options={
                "ordering": ["division", "number"],
                "indexes": [models.Index(fields=["name"], name="core_course_name_idx")],
                "constraints": [models.UniqueConstraint(fields=("division", "number"), name="uniq_course_division_number")],
            },
        ),
        migrations.CreateModel(
            name="Major",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=160)),
                ("degree", models.CharField(blank=True, help_text="Optional degree label, e.g. 'B.S.'.", max_length=16)),
                ("college", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="majors", to="core.college")),
            ],
            options={
                "ordering": ["college__name", "name"],
                "constraints": [
                    models.UniqueConstraint(
                        django.db.models.functions.text.Lower("name"),
                        models.F("college"),
                        name="uniq_major_college_name_ci",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Schedule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("columns", models.PositiveSmallIntegerField(default=1, help_text="Number of semesters in the plan.")),
                ("data", models.JSONField(blank=True, default=dict)),
                ("is_public", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="schedules", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-updated_at"],
                "indexes": [
                    models.Index(fields=["user", "name"], name="core_schedu_user_id_name_idx"),
                    models.Index(fields=["is_public", "updated_at"], name="core_schedu_public_updated_idx"),
                ],
                "constraints": [models.UniqueConstraint(fields=("user", "name"), name="uniq_schedule_user_name")],
            },
        ),
    ]
