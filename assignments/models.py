from django.db import models
from django.conf import settings
import uuid


class Assignment(models.Model):
    """
    Assignment attached to a course.

    examples holds [{"input", "output", "explanation"}] and test_cases holds
    [{"input", "expected_output", "is_hidden"}], both in display order.
    """
    TYPE_CHOICES = [
        ('CODING', 'Coding'),
        ('QUIZ', 'Quiz'),
        ('ESSAY', 'Essay'),
        ('PROJECT', 'Project'),
    ]

    DIFFICULTY_CHOICES = [
        ('EASY', 'Easy'),
        ('MEDIUM', 'Medium'),
        ('HARD', 'Hard'),
    ]

    SOURCE_CHOICES = [
        ('AI_GENERATED', 'AI Generated'),
        ('CODEFORCES', 'Codeforces'),
        ('MANUAL', 'Manual'),
        ('SKIPPED', 'Skipped'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    course = models.ForeignKey('courses.Course', on_delete=models.CASCADE, related_name='assignments')
    instructor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='authored_assignments'
    )

    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='CODING')
    difficulty = models.CharField(max_length=10, choices=DIFFICULTY_CHOICES, default='EASY')
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES, default='MANUAL')

    # Problem content
    problem_statement = models.TextField(blank=True)
    constraints = models.TextField(blank=True)
    examples = models.JSONField(default=list, blank=True)
    test_cases = models.JSONField(default=list, blank=True)
    starter_code = models.TextField(blank=True)
    solution = models.TextField(blank=True, help_text="Reference solution, never shown to students")
    programming_language = models.CharField(max_length=30, default='python')

    # Rules
    time_limit = models.PositiveIntegerField(default=30, help_text="Time limit in minutes")
    max_attempts = models.PositiveIntegerField(default=3, help_text="0 for placeholder assignments")
    points = models.PositiveIntegerField(default=100)
    due_date = models.DateTimeField(null=True, blank=True)

    published = models.BooleanField(default=False)
    ai_generated = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['course', 'published'], name='assignment_course_pub_idx'),
            models.Index(fields=['instructor'], name='assignment_instructor_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.get_type_display()}, {self.get_difficulty_display()})"

    @property
    def visible_test_cases(self):
        return [test_case for test_case in self.test_cases if not test_case.get('is_hidden')]


class Submission(models.Model):
    """
    One attempt at an assignment. Auto-graded on creation; later changes come
    only from an instructor regrade.
    """
    STATUS_CHOICES = [
        ('SUBMITTED', 'Submitted'),
        ('GRADED', 'Graded'),
        ('PENDING_REVIEW', 'Pending Review'),
        ('REJECTED', 'Rejected'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    assignment = models.ForeignKey(Assignment, on_delete=models.CASCADE, related_name='submissions')
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='assignment_submissions'
    )

    code = models.TextField(blank=True)
    submitted_at = models.DateTimeField(auto_now_add=True)

    score = models.PositiveIntegerField(default=0)
    max_score = models.PositiveIntegerField(default=0, help_text="Assignment points at submission time")
    passed = models.BooleanField(default=False)
    attempt_number = models.PositiveIntegerField(default=1)
    time_spent_seconds = models.PositiveIntegerField(default=0)

    # [{"test_case_id", "passed", "actual_output", "expected_output", "error_message", "execution_time_ms"}]
    test_results = models.JSONField(default=list, blank=True)
    feedback = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='SUBMITTED')
    graded_at = models.DateTimeField(null=True, blank=True)
    graded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='graded_submissions'
    )

    class Meta:
        ordering = ['-submitted_at']
        indexes = [
            models.Index(fields=['student', 'assignment'], name='submission_student_asg_idx'),
            models.Index(fields=['status'], name='submission_status_idx'),
        ]

    def __str__(self):
        return f"{self.student.email} - {self.assignment.title} (attempt {self.attempt_number})"

    @property
    def percentage(self):
        if not self.max_score:
            return 0
        return self.score * 100 // self.max_score
