"""
SubmissionService - scoring, attempt quota and feedback for assignment submissions.

Code is never executed here: callers pass the pass/fail outcome of each test
case and this module turns it into a graded Submission.

    score  = passed_tests * points // total_tests   (0 with no tests)
    passed = score >= points * 0.7
"""
import logging
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import Avg
from django.utils import timezone

from backend.exceptions import NotFound, InvalidInput, AttemptsExceeded
from .models import Assignment, Submission

logger = logging.getLogger(__name__)

PASS_THRESHOLD = 0.70

IMPROVEMENT_TIPS = (
    "💡 Tips for improvement:\n"
    "- Review the problem statement carefully\n"
    "- Check your logic for edge cases\n"
    "- Test your solution with the provided examples\n"
    "- Consider the time and space complexity\n"
)


def build_test_results(outcomes: List[bool]) -> List[Dict[str, Any]]:
    """
    Expand plain pass/fail flags into test result records (test_0, test_1, ...).
    """
    return [
        {
            'test_case_id': f"test_{i}",
            'passed': bool(passed),
            'actual_output': "Correct" if passed else "Incorrect",
            'expected_output': "Expected output",
            'error_message': '',
            'execution_time_ms': 0,
        }
        for i, passed in enumerate(outcomes)
    ]


def count_passed(test_results: List[Dict[str, Any]]) -> int:
    return sum(1 for result in test_results if result.get('passed'))


def calculate_score(test_results: List[Dict[str, Any]], points: int) -> int:
    if not test_results:
        return 0
    return count_passed(test_results) * points // len(test_results)


def is_passing(score: int, max_score: int) -> bool:
    return score >= max_score * PASS_THRESHOLD


def build_feedback(test_results: List[Dict[str, Any]], passed: bool, score: int, max_score: int) -> str:
    if passed:
        feedback = "🎉 Excellent work! You've successfully completed this assignment.\n\n"
    else:
        feedback = "Good effort! Keep practicing to improve your solution.\n\n"

    percentage = score * 100 // max_score if max_score else 0
    feedback += f"Score: {score}/{max_score} ({percentage}%)\n"

    if test_results:
        feedback += f"Test Cases: {count_passed(test_results)}/{len(test_results)} passed\n\n"

    if not passed:
        feedback += IMPROVEMENT_TIPS
    return feedback


class SubmissionService:

    def get_assignment(self, assignment_id) -> Assignment:
        assignment = Assignment.objects.filter(id=assignment_id).first()
        if assignment is None:
            raise NotFound("Assignment not found")
        return assignment

    def get_submission(self, submission_id) -> Submission:
        submission = Submission.objects.select_related('assignment', 'student').filter(id=submission_id).first()
        if submission is None:
            raise NotFound("Submission not found")
        return submission

    @transaction.atomic
    def submit(self, assignment_id, student, code: str, time_spent_seconds: int,
               test_results: List[Dict[str, Any]]) -> Submission:
        """
        Grade and store one attempt.

        Raises NotFound for an unknown assignment and AttemptsExceeded once the
        student already has max_attempts submissions; neither path writes anything.
        """
        # The row lock serializes concurrent attempts on one assignment
        assignment = Assignment.objects.select_for_update().filter(id=assignment_id).first()
        if assignment is None:
            raise NotFound("Assignment not found")

        attempts = self.attempt_count(student, assignment.id)
        if attempts >= assignment.max_attempts:
            logger.warning(
                f"Submission rejected for {student.email} on assignment {assignment.id}: "
                f"{attempts}/{assignment.max_attempts} attempts used"
            )
            raise AttemptsExceeded("Maximum attempts exceeded for this assignment")

        test_results = list(test_results or [])
        score = calculate_score(test_results, assignment.points)
        passed = is_passing(score, assignment.points)

        submission = Submission.objects.create(
            assignment=assignment,
            student=student,
            code=code or '',
            score=score,
            max_score=assignment.points,
            passed=passed,
            attempt_number=attempts + 1,
            time_spent_seconds=time_spent_seconds,
            test_results=test_results,
            feedback=build_feedback(test_results, passed, score, assignment.points),
            status='GRADED',
            graded_at=timezone.now(),
        )

        logger.info(
            f"Submission {submission.id} graded: {student.email} scored {score}/{assignment.points} "
            f"on assignment {assignment.id} (attempt {submission.attempt_number}, passed={passed})"
        )
        return submission

    def grade_submission(self, submission_id, score: int, feedback: str, grader) -> Submission:
        """
        Instructor regrade: overrides score and feedback and re-derives passed.
        """
        submission = self.get_submission(submission_id)
        if not 0 <= score <= submission.max_score:
            raise InvalidInput(f"Score must be between 0 and {submission.max_score}")

        submission.score = score
        submission.feedback = feedback
        submission.passed = is_passing(score, submission.max_score)
        submission.status = 'GRADED'
        submission.graded_at = timezone.now()
        submission.graded_by = grader
        submission.save()

        logger.info(f"Submission {submission.id} regraded to {score}/{submission.max_score} by {grader.email}")
        return submission

    # Queries

    def submission_history(self, student, assignment_id):
        return Submission.objects.filter(student=student, assignment_id=assignment_id).order_by('-attempt_number')

    def latest_submission(self, student, assignment_id) -> Optional[Submission]:
        return self.submission_history(student, assignment_id).first()

    def attempt_count(self, student, assignment_id) -> int:
        return Submission.objects.filter(student=student, assignment_id=assignment_id).count()

    def has_passed(self, student, assignment_id) -> bool:
        return Submission.objects.filter(student=student, assignment_id=assignment_id, passed=True).exists()

    def student_submissions(self, student):
        return Submission.objects.filter(student=student).select_related('assignment', 'assignment__course')

    def assignment_submissions(self, assignment_id):
        return Submission.objects.filter(assignment_id=assignment_id).select_related('student')

    def passed_submissions(self, student):
        return self.student_submissions(student).filter(passed=True)

    def completed_assignment_ids(self, student) -> List:
        return list(self.passed_submissions(student).order_by().values_list('assignment_id', flat=True).distinct())

    def pending_submissions(self, instructor=None):
        submissions = Submission.objects.filter(status='PENDING_REVIEW').select_related('assignment', 'student')
        if instructor is not None and not instructor.is_platform_admin:
            submissions = submissions.filter(assignment__course__instructor=instructor)
        return submissions

    def average_score_for_student(self, student) -> Optional[float]:
        """None when the student has no submissions."""
        return Submission.objects.filter(student=student).aggregate(avg=Avg('score'))['avg']

    def average_score_for_assignment(self, assignment_id) -> Optional[float]:
        return Submission.objects.filter(assignment_id=assignment_id).aggregate(avg=Avg('score'))['avg']
