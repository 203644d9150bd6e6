import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
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
            name="Progress",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "completion_percentage",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Completed lessons over lessons touched, truncated",
                        validators=[django.core.validators.MaxValueValidator(100)],
                    ),
                ),
                ("completed", models.BooleanField(default=False, help_text="Set once at 100%, never reset")),
                ("enrolled_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("last_accessed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("total_time_spent_minutes", models.PositiveIntegerField(default=0)),
                ("average_quiz_score", models.FloatField(default=0.0)),
                ("total_quiz_attempts", models.PositiveIntegerField(default=0)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="student_progress",
                        to="courses.course",
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="course_progress",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name_plural": "progress",
                "db_table": "student_progress",
                "ordering": ["-last_accessed_at"],
                "indexes": [models.Index(fields=["course", "completed"], name="progress_course_completed_idx")],
                "unique_together": {("student", "course")},
            },
        ),
        migrations.CreateModel(
            name="LessonProgress",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("completed", models.BooleanField(default=False)),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("time_spent_minutes", models.PositiveIntegerField(default=0)),
                (
                    "watched_percentage",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Highest video position reached, in percent",
                        validators=[django.core.validators.MaxValueValidator(100)],
                    ),
                ),
                (
                    "lesson",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="student_progress",
                        to="courses.lesson",
                    ),
                ),
                (
                    "progress",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lesson_progress",
                        to="student.progress",
                    ),
                ),
            ],
            options={
                "db_table": "student_lesson_progress",
                "ordering": ["started_at"],
                "unique_together": {("progress", "lesson")},
            },
        ),
        migrations.CreateModel(
            name="QuizAttempt",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("attempted_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "score",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Percentage",
                        validators=[django.core.validators.MaxValueValidator(100)],
                    ),
                ),
                ("total_questions", models.PositiveIntegerField(default=0)),
                ("correct_answers", models.PositiveIntegerField(default=0)),
                ("passed", models.BooleanField(default=False)),
                ("time_spent_minutes", models.PositiveIntegerField(default=0)),
                ("answers", models.JSONField(blank=True, default=dict)),
                (
                    "progress",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="quiz_attempts",
                        to="student.progress",
                    ),
                ),
                (
                    "quiz",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="attempts",
                        to="courses.quiz",
                    ),
                ),
            ],
            options={
                "db_table": "student_quiz_attempts",
                "ordering": ["-attempted_at"],
            },
        ),
    ]
