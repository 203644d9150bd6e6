import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("category", models.CharField(blank=True, max_length=100)),
                (
                    "difficulty",
                    models.CharField(
                        choices=[("BEGINNER", "Beginner"), ("INTERMEDIATE", "Intermediate"), ("ADVANCED", "Advanced")],
                        default="BEGINNER",
                        max_length=20,
                    ),
                ),
                ("estimated_hours", models.PositiveIntegerField(default=0)),
                ("outline", models.TextField(blank=True)),
                ("summary", models.TextField(blank=True, help_text="AI-generated summary")),
                ("video_url", models.URLField(blank=True, help_text="Intro video link", max_length=500)),
                ("published", models.BooleanField(default=False)),
                ("total_enrollments", models.PositiveIntegerField(default=0)),
                ("average_rating", models.FloatField(default=0.0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "enrolled_students",
                    models.ManyToManyField(blank=True, related_name="enrolled_courses", to=settings.AUTH_USER_MODEL),
                ),
                (
                    "instructor",
                    models.ForeignKey(
                        help_text="Instructor who owns this course",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="courses",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["published", "category"], name="course_published_category_idx"),
                    models.Index(fields=["instructor"], name="course_instructor_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Lesson",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=200)),
                ("content", models.TextField(blank=True)),
                ("notes", models.TextField(blank=True, help_text="Study notes, HTML")),
                ("video_url", models.URLField(blank=True, help_text="Normalized YouTube embed URL", max_length=500)),
                ("video_title", models.CharField(blank=True, max_length=200)),
                ("video_description", models.TextField(blank=True)),
                ("video_embedded", models.BooleanField(default=True, help_text="Embed the video instead of linking to it")),
                ("order", models.PositiveIntegerField(default=1)),
                ("duration_minutes", models.PositiveIntegerField(default=0)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("LESSON", "Lesson"),
                            ("ASSIGNMENT_PLACEHOLDER", "Assignment Placeholder"),
                            ("VIDEO_LESSON", "Video Lesson"),
                            ("TEXT_LESSON", "Text Lesson"),
                        ],
                        default="LESSON",
                        max_length=30,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="lessons", to="courses.course"
                    ),
                ),
            ],
            options={
                "ordering": ["course", "order"],
            },
        ),
        migrations.CreateModel(
            name="CourseReview",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "rating",
                    models.PositiveIntegerField(
                        help_text="Rating from 1 to 5 stars",
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ],
                    ),
                ),
                ("comment", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "course",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="reviews", to="courses.course"
                    ),
                ),
                (
                    "student",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="course_reviews",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Quiz",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True)),
                ("topic", models.CharField(blank=True, max_length=200)),
                ("questions", models.JSONField(default=list)),
                ("time_limit", models.PositiveIntegerField(default=30, help_text="Time limit in minutes")),
                (
                    "passing_score",
                    models.PositiveIntegerField(
                        default=70,
                        help_text="Minimum percentage to pass",
                        validators=[django.core.validators.MaxValueValidator(100)],
                    ),
                ),
                ("ai_generated", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "course",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="quizzes",
                        to="courses.course",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name_plural": "quizzes",
            },
        ),
    ]
