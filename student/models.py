from django.db import models
from django.conf import settings
from django.core.validators import MaxValueValidator
from django.utils import timezone
import uuid


class Progress(models.Model):
    """
    A student's standing in one course: per-lesson progress, quiz attempts and
    derived aggregates (completion percentage, average quiz score).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='course_progress'
    )
    course = models.ForeignKey(
        'courses.Course',
        on_delete=models.CASCADE,
        related_name='student_progress'
    )

    completion_percentage = models.PositiveIntegerField(
        default=0,
        validators=[MaxValueValidator(100)],
        help_text="Completed lessons over lessons touched, truncated"
    )
    completed = models.BooleanField(default=False, help_text="Set once at 100%, never reset")

    enrolled_at = models.DateTimeField(default=timezone.now)
    last_accessed_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)

    total_time_spent_minutes = models.PositiveIntegerField(default=0)
    average_quiz_score = models.FloatField(default=0.0)
    total_quiz_attempts = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'student_progress'
        unique_together = ['student', 'course']
        ordering = ['-last_accessed_at']
        verbose_name_plural = 'progress'
        indexes = [
            models.Index(fields=['course', 'completed'], name='progress_course_completed_idx'),
        ]

    def __str__(self):
        return f"{self.student.email} - {self.course.title} ({self.completion_percentage}%)"

    def recalculate_completion(self):
        """
        completed * 100 // touched lessons (0 with none touched). Reaching 100
        marks the course completed; nothing here ever clears that flag.
        """
        entries = list(self.lesson_progress.values_list('completed', flat=True))
        if not entries:
            self.completion_percentage = 0
            return self.completion_percentage

        self.completion_percentage = sum(1 for completed in entries if completed) * 100 // len(entries)
        if self.completion_percentage == 100 and not self.completed:
            self.completed = True
            self.completed_at = timezone.now()
        return self.completion_percentage

    def recalculate_average_quiz_score(self):
        scores = list(self.quiz_attempts.values_list('score', flat=True))
        self.average_quiz_score = sum(scores) / len(scores) if scores else 0.0
        return self.average_quiz_score


class LessonProgress(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    progress = models.ForeignKey(Progress, on_delete=models.CASCADE, related_name='lesson_progress')
    lesson = models.ForeignKey('courses.Lesson', on_delete=models.CASCADE, related_name='student_progress')

    completed = models.BooleanField(default=False)
    started_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)
    time_spent_minutes = models.PositiveIntegerField(default=0)
    watched_percentage = models.PositiveIntegerField(
        default=0,
        validators=[MaxValueValidator(100)],
        help_text="Highest video position reached, in percent"
    )

    class Meta:
        db_table = 'student_lesson_progress'
        unique_together = ['progress', 'lesson']
        ordering = ['started_at']

    def __str__(self):
        state = 'completed' if self.completed else 'in progress'
        return f"{self.progress.student.email} - {self.lesson.title} ({state})"


class QuizAttempt(models.Model):
    """
    One submitted quiz. answers maps question index to the chosen option index.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    progress = models.ForeignKey(Progress, on_delete=models.CASCADE, related_name='quiz_attempts')
    quiz = models.ForeignKey(
        'courses.Quiz',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attempts'
    )

    attempted_at = models.DateTimeField(default=timezone.now)
    score = models.PositiveIntegerField(default=0, validators=[MaxValueValidator(100)], help_text="Percentage")
    total_questions = models.PositiveIntegerField(default=0)
    correct_answers = models.PositiveIntegerField(default=0)
    passed = models.BooleanField(default=False)
    time_spent_minutes = models.PositiveIntegerField(default=0)
    answers = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = 'student_quiz_attempts'
        ordering = ['-attempted_at']

    def __str__(self):
        return f"{self.progress.student.email} - {self.score}% ({'passed' if self.passed else 'failed'})"
