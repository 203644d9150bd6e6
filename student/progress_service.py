"""
ProgressService - per (student, course) progress tracking.

Lesson and video updates both end by recomputing the completion percentage
over every lesson the student has touched; quiz attempts recompute the
average quiz score over the full attempt history.
"""
import logging
from typing import Dict, List, Optional

from django.db import transaction
from django.db.models import Avg
from django.utils import timezone

from backend.exceptions import NotFound, InvalidInput
from courses.models import Course, Lesson, Quiz
from courses.services import CourseService
from .models import Progress, LessonProgress, QuizAttempt

logger = logging.getLogger(__name__)

VIDEO_COMPLETION_THRESHOLD = 90
QUIZ_PASSING_SCORE = 70


def _as_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def score_quiz(questions: List[dict], answers: Dict) -> tuple:
    """
    Return (score, correct) for answers mapping question index to option index.

    score is correct * 100 // len(questions), 0 for an empty quiz. Missing or
    non-numeric answers count as wrong.
    """
    if not questions:
        return 0, 0

    chosen = {_as_int(index): _as_int(option) for index, option in answers.items()}
    correct = sum(
        1 for index, question in enumerate(questions)
        if chosen.get(index) is not None and chosen.get(index) == question.get('correct_answer_index')
    )
    return correct * 100 // len(questions), correct


class ProgressService:

    def __init__(self, course_service: Optional[CourseService] = None):
        self.courses = course_service or CourseService()

    # Lookup helpers

    def _get_course(self, course_id) -> Course:
        course = Course.objects.filter(id=course_id).first()
        if course is None:
            raise NotFound("Course not found")
        return course

    def _get_lesson(self, course: Course, lesson_id) -> Lesson:
        lesson = Lesson.objects.filter(course=course, id=lesson_id).first()
        if lesson is None:
            raise NotFound("Lesson not found")
        return lesson

    def _locked_progress(self, student, course: Course) -> Progress:
        progress, created = Progress.objects.get_or_create(student=student, course=course)
        if created:
            logger.info(f"Progress record created for {student.email} in course {course.id}")
        return Progress.objects.select_for_update().get(id=progress.id)

    # Enrollment

    def get_or_create_progress(self, student, course_id) -> Progress:
        course = self._get_course(course_id)
        progress, created = Progress.objects.get_or_create(student=student, course=course)
        if created:
            logger.info(f"Progress record created for {student.email} in course {course.id}")
        return progress

    def enroll_student(self, course_id, student) -> Progress:
        """
        Enroll through the course rules (published only) and open a progress record.
        """
        self.courses.enroll_student(course_id, student)
        return self.get_or_create_progress(student, course_id)

    def is_student_enrolled(self, student, course_id) -> bool:
        return Progress.objects.filter(student=student, course_id=course_id).exists()

    # Updates

    @transaction.atomic
    def update_lesson_progress(self, student, course_id, lesson_id, completed: bool,
                               time_spent_minutes: int = 0) -> Progress:
        if time_spent_minutes < 0:
            raise InvalidInput("Time spent cannot be negative")

        course = self._get_course(course_id)
        lesson = self._get_lesson(course, lesson_id)
        progress = self._locked_progress(student, course)

        lesson_progress, _ = LessonProgress.objects.get_or_create(progress=progress, lesson=lesson)
        lesson_progress.completed = completed
        lesson_progress.time_spent_minutes += time_spent_minutes
        if completed and lesson_progress.completed_at is None:
            lesson_progress.completed_at = timezone.now()
        lesson_progress.save()

        progress.last_accessed_at = timezone.now()
        progress.total_time_spent_minutes += time_spent_minutes
        self.update_completion_percentage(progress)
        return progress

    @transaction.atomic
    def update_video_progress(self, student, course_id, lesson_id, watched_percentage: int) -> Progress:
        if not 0 <= watched_percentage <= 100:
            raise InvalidInput("Watched percentage must be between 0 and 100")

        course = self._get_course(course_id)
        lesson = self._get_lesson(course, lesson_id)
        progress = self._locked_progress(student, course)

        lesson_progress, _ = LessonProgress.objects.get_or_create(progress=progress, lesson=lesson)
        lesson_progress.watched_percentage = max(lesson_progress.watched_percentage, watched_percentage)
        if watched_percentage >= VIDEO_COMPLETION_THRESHOLD and not lesson_progress.completed:
            lesson_progress.completed = True
            if lesson_progress.completed_at is None:
                lesson_progress.completed_at = timezone.now()
            logger.info(f"Lesson {lesson.id} completed by video watch for {student.email}")
        lesson_progress.save()

        progress.last_accessed_at = timezone.now()
        self.update_completion_percentage(progress)
        return progress

    @transaction.atomic
    def record_quiz_attempt(self, student, course_id, quiz: Optional[Quiz], answers: Dict, score: int,
                            total_questions: int, correct_answers: int, passed: bool,
                            time_spent_minutes: int = 0) -> QuizAttempt:
        course = self._get_course(course_id)
        progress = self._locked_progress(student, course)

        attempt = QuizAttempt.objects.create(
            progress=progress,
            quiz=quiz,
            score=score,
            total_questions=total_questions,
            correct_answers=correct_answers,
            passed=passed,
            time_spent_minutes=time_spent_minutes,
            answers=answers,
        )

        progress.total_quiz_attempts += 1
        progress.total_time_spent_minutes += time_spent_minutes
        progress.last_accessed_at = timezone.now()
        progress.recalculate_average_quiz_score()
        self.update_completion_percentage(progress)
        return attempt

    def submit_quiz(self, student, course_id, quiz_id, answers: Dict, time_spent_minutes: int = 0) -> QuizAttempt:
        quiz = Quiz.objects.filter(id=quiz_id, course_id=course_id).first()
        if quiz is None:
            raise NotFound("Quiz not found")

        score, correct = score_quiz(quiz.questions, answers)
        passed = score >= QUIZ_PASSING_SCORE
        attempt = self.record_quiz_attempt(
            student, course_id, quiz, answers, score, len(quiz.questions), correct, passed, time_spent_minutes
        )
        logger.info(
            f"Quiz {quiz.id} submitted by {student.email}: {correct}/{len(quiz.questions)} correct, score {score}"
        )
        return attempt

    def update_completion_percentage(self, progress: Progress) -> Progress:
        was_completed = progress.completed
        progress.recalculate_completion()
        progress.save()
        if progress.completed and not was_completed:
            logger.info(f"Course {progress.course_id} completed by {progress.student.email}")
        return progress

    # Queries

    def get_progress(self, student, course_id) -> Progress:
        progress = Progress.objects.filter(student=student, course_id=course_id).select_related('course').first()
        if progress is None:
            raise NotFound("No progress recorded for this course")
        return progress

    def student_progress(self, student):
        return Progress.objects.filter(student=student).select_related('course', 'course__instructor')

    def completed_courses(self, student):
        return self.student_progress(student).filter(completed=True)

    def course_progress(self, course):
        return Progress.objects.filter(course=course).select_related('student')

    def average_completion(self, course) -> Optional[float]:
        """Mean completion percentage across the course's students; None when nobody is enrolled."""
        return self.course_progress(course).aggregate(avg=Avg('completion_percentage'))['avg']

    def enrollment_count(self, course) -> int:
        return self.course_progress(course).count()
