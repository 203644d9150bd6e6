from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from ai.exceptions import ExternalServiceFailure
from backend.exceptions import AttemptsExceeded, InvalidInput, NotFound, Unauthorized
from courses.models import Course
from .grading import SubmissionService, build_test_results, calculate_score, is_passing, build_feedback
from .models import Assignment, Submission
from .services import AssignmentService, build_fallback_assignment

User = get_user_model()


def make_user(name, role):
    return User.objects.create_user(
        firebase_uid=f'test_{name}_firebase_uid',
        email=f'{name}@test.com',
        username=f'{name}@test.com',
        password='testpass123',
        role=role
    )


class FailingAssignmentAI:
    def generate_coding_assignment(self, course_title, topic, difficulty, language):
        raise ExternalServiceFailure('gemini', 'unavailable')


class StaticAssignmentAI:
    def generate_coding_assignment(self, course_title, topic, difficulty, language):
        return {
            'title': 'Reverse a Linked List',
            'description': 'Reverse a singly linked list.',
            'problem_statement': 'Given the head of a list, reverse it.',
            'constraints': '',
            'examples': [],
            'test_cases': [{'input': '1 2 3', 'expected_output': '3 2 1', 'is_hidden': False}],
            'starter_code': '',
            'solution': '',
        }


class StaticCodeforces:
    def __init__(self, problems):
        self.problems = problems
        self.calls = []

    def get_problems_by_difficulty(self, difficulty, topic, count):
        self.calls.append((difficulty, topic, count))
        return self.problems[:count]


def codeforces_problem(i, rating=1000):
    return {
        'contest_id': 1500 + i,
        'index': 'A',
        'name': f'Problem {i}',
        'type': 'PROGRAMMING',
        'rating': rating,
        'tags': ['greedy'],
        'solved_count': 100,
        'url': f'https://codeforces.com/problemset/problem/{1500 + i}/A',
    }


class ScoringTest(TestCase):
    """Pure scoring helpers"""

    def test_three_of_four_scores_seventy_five(self):
        results = build_test_results([True, True, True, False])
        score = calculate_score(results, 100)
        self.assertEqual(score, 75)
        self.assertTrue(is_passing(score, 100))

    def test_pass_boundary(self):
        seven = build_test_results([True] * 7 + [False] * 3)
        six = build_test_results([True] * 6 + [False] * 4)
        self.assertEqual(calculate_score(seven, 100), 70)
        self.assertTrue(is_passing(70, 100))
        self.assertEqual(calculate_score(six, 100), 60)
        self.assertFalse(is_passing(60, 100))

    def test_score_uses_integer_division(self):
        results = build_test_results([True, False, False])
        self.assertEqual(calculate_score(results, 100), 33)

    def test_no_tests_scores_zero(self):
        self.assertEqual(calculate_score([], 100), 0)
        self.assertFalse(is_passing(0, 100))

    def test_test_results_shape(self):
        results = build_test_results([True, False])
        self.assertEqual(results[0]['test_case_id'], 'test_0')
        self.assertEqual(results[0]['actual_output'], 'Correct')
        self.assertEqual(results[1]['actual_output'], 'Incorrect')
        self.assertEqual(results[1]['expected_output'], 'Expected output')

    def test_feedback_tips_only_when_failed(self):
        passed = build_feedback(build_test_results([True]), True, 100, 100)
        failed = build_feedback(build_test_results([False]), False, 0, 100)
        self.assertIn('Excellent work', passed)
        self.assertNotIn('Tips for improvement', passed)
        self.assertIn('Tips for improvement', failed)
        self.assertIn('Score: 0/100 (0%)', failed)
        self.assertIn('Test Cases: 0/1 passed', failed)

    def test_feedback_with_zero_max_score(self):
        feedback = build_feedback([], False, 0, 0)
        self.assertIn('Score: 0/0 (0%)', feedback)


class SubmissionServiceTest(TestCase):

    def setUp(self):
        self.instructor = make_user('teacher', User.Role.INSTRUCTOR)
        self.student = make_user('student', User.Role.STUDENT)
        self.course = Course.objects.create(title='Algorithms', instructor=self.instructor, published=True)
        self.assignment = Assignment.objects.create(
            title='Two Sum',
            course=self.course,
            instructor=self.instructor,
            max_attempts=2,
            points=100,
            published=True
        )
        self.service = SubmissionService()

    def submit(self, outcomes):
        return self.service.submit(
            self.assignment.id, self.student, 'print(1)', 60, build_test_results(outcomes)
        )

    def test_submission_is_graded(self):
        submission = self.submit([True, True, True, False])

        self.assertEqual(submission.score, 75)
        self.assertEqual(submission.max_score, 100)
        self.assertTrue(submission.passed)
        self.assertEqual(submission.status, 'GRADED')
        self.assertIsNotNone(submission.graded_at)
        self.assertEqual(submission.attempt_number, 1)
        self.assertEqual(submission.time_spent_seconds, 60)

    def test_attempt_numbers_increase(self):
        first = self.submit([False])
        second = self.submit([True])
        self.assertEqual(first.attempt_number, 1)
        self.assertEqual(second.attempt_number, 2)

    def test_attempt_quota_enforced(self):
        self.submit([False])
        self.submit([False])

        with self.assertRaises(AttemptsExceeded):
            self.submit([True])
        self.assertEqual(self.service.attempt_count(self.student, self.assignment.id), 2)

    def test_zero_attempt_assignment_rejects_everything(self):
        self.assignment.max_attempts = 0
        self.assignment.save()

        with self.assertRaises(AttemptsExceeded):
            self.submit([True])
        self.assertFalse(Submission.objects.exists())

    def test_unknown_assignment(self):
        with self.assertRaises(NotFound):
            self.service.submit(
                '00000000-0000-0000-0000-000000000000', self.student, '', 0, []
            )

    def test_history_newest_first(self):
        self.submit([False])
        self.submit([True])

        history = list(self.service.submission_history(self.student, self.assignment.id))
        self.assertEqual([s.attempt_number for s in history], [2, 1])
        self.assertEqual(self.service.latest_submission(self.student, self.assignment.id).attempt_number, 2)

    def test_has_passed(self):
        self.submit([False])
        self.assertFalse(self.service.has_passed(self.student, self.assignment.id))
        self.submit([True])
        self.assertTrue(self.service.has_passed(self.student, self.assignment.id))
        self.assertEqual(self.service.completed_assignment_ids(self.student), [self.assignment.id])

    def test_average_score(self):
        self.assertIsNone(self.service.average_score_for_student(self.student))
        self.submit([True, False])
        self.submit([True, True])
        self.assertEqual(self.service.average_score_for_student(self.student), 75)

    def test_average_score_for_assignment(self):
        self.assertIsNone(self.service.average_score_for_assignment(self.assignment.id))

        other_student = make_user('other', User.Role.STUDENT)
        self.submit([True, False, False, False])
        self.service.submit(self.assignment.id, other_student, '', 30, build_test_results([True, True]))

        self.assertEqual(self.service.average_score_for_assignment(self.assignment.id), 62.5)

    def test_regrade(self):
        submission = self.submit([False])

        regraded = self.service.grade_submission(submission.id, 80, 'Good reasoning', self.instructor)
        self.assertEqual(regraded.score, 80)
        self.assertTrue(regraded.passed)
        self.assertEqual(regraded.graded_by, self.instructor)
        self.assertEqual(regraded.feedback, 'Good reasoning')

    def test_regrade_rejects_score_above_max(self):
        submission = self.submit([False])
        with self.assertRaises(InvalidInput):
            self.service.grade_submission(submission.id, 101, '', self.instructor)


class FallbackAssignmentTest(TestCase):

    def test_easy_array_topic_gets_two_sum(self):
        fields = build_fallback_assignment('Arrays and Hashing', 'EASY', 'python')
        self.assertEqual(fields['title'], 'Two Sum Problem')
        self.assertEqual(len(fields['examples']), 2)
        self.assertEqual(len(fields['test_cases']), 3)
        self.assertIn('def twoSum', fields['starter_code'])

    def test_harder_array_topic_skips_two_sum(self):
        fields = build_fallback_assignment('array algorithms', 'MEDIUM', 'python')
        self.assertEqual(fields['title'], 'Sorting Algorithm Implementation')

    def test_keyword_order(self):
        self.assertEqual(build_fallback_assignment('Sorting', 'HARD', 'java')['title'], 'Sorting Algorithm Implementation')
        self.assertEqual(build_fallback_assignment('String basics', 'EASY', 'java')['title'], 'String Manipulation')
        self.assertEqual(build_fallback_assignment('Recursion', 'EASY', 'java')['title'], 'Programming Challenge')

    def test_fallback_defaults(self):
        fields = build_fallback_assignment('Recursion', 'EASY', 'python')
        self.assertEqual(fields['time_limit'], 30)
        self.assertEqual(fields['points'], 100)
        self.assertEqual(fields['source'], 'AI_GENERATED')
        self.assertFalse(fields['ai_generated'])


class AssignmentServiceTest(TestCase):

    def setUp(self):
        self.instructor = make_user('teacher', User.Role.INSTRUCTOR)
        self.other_instructor = make_user('other', User.Role.INSTRUCTOR)
        self.course = Course.objects.create(title='Data Structures', instructor=self.instructor)

    def test_generation_falls_back_when_ai_fails(self):
        service = AssignmentService(assignment_ai=FailingAssignmentAI(), codeforces=StaticCodeforces([]))

        assignment = service.create_generated_assignment(self.course.id, self.instructor, 'arrays', 'EASY', 'python')
        self.assertEqual(assignment.title, 'Two Sum Problem')
        self.assertFalse(assignment.published)
        self.assertEqual(assignment.source, 'AI_GENERATED')

    def test_ai_generated_assignment_is_published(self):
        service = AssignmentService(assignment_ai=StaticAssignmentAI(), codeforces=StaticCodeforces([]))

        assignment = service.create_generated_assignment(self.course.id, self.instructor, 'lists', 'MEDIUM', 'python')
        self.assertEqual(assignment.title, 'Reverse a Linked List')
        self.assertTrue(assignment.ai_generated)
        self.assertTrue(assignment.published)
        self.assertEqual(assignment.difficulty, 'MEDIUM')

    def test_codeforces_assignment(self):
        codeforces = StaticCodeforces([codeforces_problem(i) for i in range(3)])
        service = AssignmentService(assignment_ai=FailingAssignmentAI(), codeforces=codeforces)

        assignment = service.create_codeforces_assignment(
            self.course.id, self.instructor, 'greedy', 'EASY', 'python', 3
        )
        self.assertEqual(assignment.title, 'Problem 0')
        self.assertEqual(assignment.source, 'CODEFORCES')
        self.assertEqual(assignment.points, 150)
        self.assertEqual(assignment.time_limit, 60)
        self.assertTrue(assignment.published)
        self.assertIn('Additional Practice Problems', assignment.description)
        self.assertIn('Problem 2', assignment.description)
        self.assertEqual(codeforces.calls, [('EASY', 'greedy', 3)])

    def test_codeforces_without_problems_uses_generation(self):
        service = AssignmentService(assignment_ai=FailingAssignmentAI(), codeforces=StaticCodeforces([]))

        fields = service.generate_assignment_with_codeforces('Course', 'strings', 'EASY', 'python')
        self.assertEqual(fields['title'], 'String Manipulation')

    def test_skipped_assignment(self):
        service = AssignmentService(assignment_ai=FailingAssignmentAI(), codeforces=StaticCodeforces([]))

        assignment = service.create_skipped_assignment(self.course.id, self.instructor, {'title': 'Week 3'})
        self.assertEqual(assignment.source, 'SKIPPED')
        self.assertTrue(assignment.published)
        self.assertEqual(assignment.points, 0)
        self.assertEqual(assignment.time_limit, 0)
        self.assertEqual(assignment.max_attempts, 0)

    def test_only_owner_creates(self):
        service = AssignmentService(assignment_ai=FailingAssignmentAI(), codeforces=StaticCodeforces([]))
        with self.assertRaises(Unauthorized):
            service.create_assignment(self.course.id, self.other_instructor, {'title': 'Hack'})

    def test_publish_missing_assignment(self):
        service = AssignmentService(assignment_ai=FailingAssignmentAI(), codeforces=StaticCodeforces([]))
        with self.assertRaises(NotFound):
            service.publish_assignment('00000000-0000-0000-0000-000000000000', self.instructor)


@override_settings(GCP_PROJECT_ID=None)
class AssignmentAPITestCase(APITestCase):
    """
    HTTP tests for the assignment endpoints
    """

    def setUp(self):
        self.instructor = make_user('teacher', User.Role.INSTRUCTOR)
        self.other_instructor = make_user('other', User.Role.INSTRUCTOR)
        self.student = make_user('student', User.Role.STUDENT)
        self.course = Course.objects.create(title='Data Structures', instructor=self.instructor, published=True)
        self.published = Assignment.objects.create(
            title='Published',
            course=self.course,
            instructor=self.instructor,
            published=True,
            test_cases=[
                {'input': '1', 'expected_output': '1', 'is_hidden': False},
                {'input': '2', 'expected_output': '2', 'is_hidden': True},
            ],
            solution='print(input())'
        )
        self.draft = Assignment.objects.create(title='Draft', course=self.course, instructor=self.instructor)

    def test_course_assignments_owner_sees_drafts(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.get(f'/api/assignments/course/{self.course.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_course_assignments_student_sees_published(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get(f'/api/assignments/course/{self.course.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertNotIn('solution', response.data[0])
        self.assertEqual(len(response.data[0]['test_cases']), 1)

    def test_student_cannot_see_draft(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get(f'/api/assignments/{self.draft.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_create_assignment(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.post('/api/assignments/', {
            'course_id': str(self.course.id),
            'title': 'FizzBuzz',
            'difficulty': 'EASY',
            'examples': [{'input': '3', 'output': 'Fizz', 'explanation': ''}],
            'test_cases': [],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['source'], 'MANUAL')
        self.assertFalse(response.data['published'])
        self.assertEqual(response.data['max_attempts'], 3)
        self.assertEqual(response.data['points'], 100)

    def test_create_on_foreign_course(self):
        self.client.force_authenticate(user=self.other_instructor)
        response = self.client.post('/api/assignments/', {
            'course_id': str(self.course.id),
            'title': 'Intruder',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertIn('error', response.data)

    def test_student_cannot_create(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post('/api/assignments/', {'course_id': str(self.course.id), 'title': 'X'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_generate_uses_fallback_without_ai(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.post('/api/assignments/generate/', {
            'course_id': str(self.course.id),
            'topic': 'arrays',
            'difficulty': 'EASY',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['assignment']['title'], 'Two Sum Problem')

    @mock.patch('ai.codeforces_service.requests.get', side_effect=requests.ConnectionError('offline'))
    def test_codeforces_problems_fallback(self, mock_get):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.get('/api/assignments/codeforces-problems/?difficulty=EASY&limit=8')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 5)
        self.assertEqual(response.data['topic'], 'general')

    def test_publish_and_unpublish(self):
        self.client.force_authenticate(user=self.instructor)

        response = self.client.post(f'/api/assignments/{self.draft.id}/publish/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.draft.refresh_from_db()
        self.assertTrue(self.draft.published)

        response = self.client.post(f'/api/assignments/{self.draft.id}/unpublish/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.draft.refresh_from_db()
        self.assertFalse(self.draft.published)

    def test_delete_by_other_instructor(self):
        self.client.force_authenticate(user=self.other_instructor)
        response = self.client.delete(f'/api/assignments/{self.published.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Assignment.objects.filter(id=self.published.id).exists())

    def test_my_assignments(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.get('/api/assignments/instructor/my-assignments/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_submit(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post(f'/api/assignments/{self.published.id}/submit/', {
            'code': 'print(input())',
            'time_spent': 90,
            'test_results': [True, True, True, False],
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['score'], 75)
        self.assertTrue(response.data['passed'])
        self.assertEqual(response.data['attempt_number'], 1)
        self.assertEqual(response.data['submission']['test_results'][3]['actual_output'], 'Incorrect')

    def test_submit_over_quota(self):
        self.published.max_attempts = 1
        self.published.save()
        self.client.force_authenticate(user=self.student)

        url = f'/api/assignments/{self.published.id}/submit/'
        self.client.post(url, {'test_results': [False]}, format='json')
        response = self.client.post(url, {'test_results': [True]}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Maximum attempts exceeded for this assignment')
        self.assertEqual(Submission.objects.count(), 1)

    def test_instructor_cannot_submit(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.post(f'/api/assignments/{self.published.id}/submit/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unauthenticated(self):
        response = self.client.get(f'/api/assignments/course/{self.course.id}/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
