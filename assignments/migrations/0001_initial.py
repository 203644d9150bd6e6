import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("courses", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Assignment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                (
                    "type",
                    models.CharField(
                        choices=[("CODING", "Coding"), ("QUIZ", "Quiz"), ("ESSAY", "Essay"), ("PROJECT", "Project")],
                        default="CODING",
                        max_length=20,
                    ),
                ),
                (
                    "difficulty",
                    models.CharField(
                        choices=[("EASY", "Easy"), ("MEDIUM", "Medium"), ("HARD", "Hard")],
                        default="EASY",
                        max_length=10,
                    ),
                ),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("AI_GENERATED", "AI Generated"),
                            ("CODEFORCES", "Codeforces"),
                            ("MANUAL", "Manual"),
                            ("SKIPPED", "Skipped"),
                        ],
                        default="MANUAL",
                        max_length=20,
                    ),
                ),
                ("problem_statement", models.TextField(blank=True)),
                ("constraints", models.TextField(blank=True)),
                ("examples", models.JSONField(blank=True, default=list)),
                ("test_cases", models.JSONField(blank=True, default=list)),
                ("starter_code", models.TextField(blank=True)),
                ("solution", models.TextField(blank=True, help_text="Reference solution, never shown to students")),
                ("programming_language", models.CharField(default="python", max_length=30)),
                ("time_limit", models.PositiveIntegerField(default=30, help_text="Time limit in minutes")),
                ("max_attempts", models.PositiveIntegerField(default=3, help_text="0 for placeholder assignments")),
                ("points", models.PositiveIntegerField(default=100)),
                ("due_date", models.DateTimeField(blank=True, null=True)),
                ("published", models.BooleanField(default=False)),
                ("ai_generated", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="assignments", to="courses.course"
                    ),
                ),
                (
                    "instructor",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="authored_assignments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["course", "published"], name="assignment_course_pub_idx"),
                    models.Index(fields=["instructor"], name="assignment_instructor_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Submission",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.TextField(blank=True)),
                ("submitted_at", models.DateTimeField(auto_now_add=True)),
                ("score", models.PositiveIntegerField(default=0)),
                ("max_score", models.PositiveIntegerField(default=0, help_text="Assignment points at submission time")),
                ("passed", models.BooleanField(default=False)),
                ("attempt_number", models.PositiveIntegerField(default=1)),
                ("time_spent_seconds", models.PositiveIntegerField(default=0)),
                ("test_results", models.JSONField(blank=True, default=list)),
                ("feedback", models.TextField(blank=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("SUBMITTED", "Submitted"),
                            ("GRADED", "Graded"),
                            ("PENDING_REVIEW", "Pending Review"),
                            ("REJECTED", "Rejected"),
                        ],
                        default="SUBMITTED",
                        max_length=20,
                    ),
                ),
                ("graded_at", models.DateTimeField(blank=True, null=True)),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="submissions",
                        to="assignments.assignment",
                    ),
                ),
                (
                    "graded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="graded_submissions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assignment_submissions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-submitted_at"],
                "indexes": [
                    models.Index(fields=["student", "assignment"], name="submission_student_asg_idx"),
                    models.Index(fields=["status"], name="submission_status_idx"),
                ],
            },
        ),
    ]
