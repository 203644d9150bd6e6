from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
import uuid


class Course(models.Model):
    """
    A course authored by an instructor. Students enroll into it, follow its
    lessons and leave reviews.
    """
    DIFFICULTY_CHOICES = [
        ('BEGINNER', 'Beginner'),
        ('INTERMEDIATE', 'Intermediate'),
        ('ADVANCED', 'Advanced'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='courses',
        help_text="Instructor who owns this course"
    )

    category = models.CharField(max_length=100, blank=True)
    difficulty = models.CharField(max_length=20, choices=DIFFICULTY_CHOICES, default='BEGINNER')
    estimated_hours = models.PositiveIntegerField(default=0)

    outline = models.TextField(blank=True)
    summary = models.TextField(blank=True, help_text="AI-generated summary")
    video_url = models.URLField(max_length=500, blank=True, help_text="Intro video link")

    published = models.BooleanField(default=False)

    # Enrollment and rating aggregates
    enrolled_students = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name='enrolled_courses',
        blank=True
    )
    total_enrollments = models.PositiveIntegerField(default=0)
    average_rating = models.FloatField(default=0.0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['published', 'category'], name='course_published_category_idx'),
            models.Index(fields=['instructor'], name='course_instructor_idx'),
        ]

    def __str__(self):
        return self.title

    @property
    def instructor_name(self):
        return self.instructor.display_name

    @property
    def total_lessons(self):
        return self.lessons.count()

    def recalculate_average_rating(self):
        """
        Recompute the mean over every review; 0.0 when there are none.
        """
        ratings = list(self.reviews.values_list('rating', flat=True))
        self.average_rating = sum(ratings) / len(ratings) if ratings else 0.0
        return self.average_rating


class Lesson(models.Model):
    """
    Ordered unit of course content, optionally backed by a YouTube video
    """
    TYPE_CHOICES = [
        ('LESSON', 'Lesson'),
        ('ASSIGNMENT_PLACEHOLDER', 'Assignment Placeholder'),
        ('VIDEO_LESSON', 'Video Lesson'),
        ('TEXT_LESSON', 'Text Lesson'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='lessons')
    title = models.CharField(max_length=200)
    content = models.TextField(blank=True)
    notes = models.TextField(blank=True, help_text="Study notes, HTML")

    video_url = models.URLField(max_length=500, blank=True, help_text="Normalized YouTube embed URL")
    video_title = models.CharField(max_length=200, blank=True)
    video_description = models.TextField(blank=True)
    video_embedded = models.BooleanField(default=True, help_text="Embed the video instead of linking to it")

    order = models.PositiveIntegerField(default=1)
    duration_minutes = models.PositiveIntegerField(default=0)
    type = models.CharField(max_length=30, choices=TYPE_CHOICES, default='LESSON')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['course', 'order']

    def __str__(self):
        return f"{self.course.title} - {self.title}"


class CourseReview(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='reviews')
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='course_reviews'
    )
    rating = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        help_text="Rating from 1 to 5 stars"
    )
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.course.title} - {self.rating} stars by {self.student.email}"

    @property
    def student_name(self):
        return self.student.display_name


class Quiz(models.Model):
    """
    Multiple-choice quiz attached to a course.

    questions holds a list of {"id", "question_text", "options", "correct_answer_index",
    "explanation", "points"} dicts.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='quizzes', null=True, blank=True)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    topic = models.CharField(max_length=200, blank=True)
    questions = models.JSONField(default=list)
    time_limit = models.PositiveIntegerField(default=30, help_text="Time limit in minutes")
    passing_score = models.PositiveIntegerField(
        default=70,
        validators=[MaxValueValidator(100)],
        help_text="Minimum percentage to pass"
    )
    ai_generated = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'quizzes'

    def __str__(self):
        return self.title

    @property
    def question_count(self):
        return len(self.questions)
