from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from assignments.grading import SubmissionService, build_test_results
from assignments.models import Assignment
from backend.exceptions import InvalidInput, NotFound
from courses.models import Course, Lesson, Quiz
from .models import Progress, LessonProgress
from .progress_service import ProgressService, score_quiz

User = get_user_model()


def make_user(name, role):
    return User.objects.create_user(
        firebase_uid=f'test_{name}_firebase_uid',
        email=f'{name}@test.com',
        username=f'{name}@test.com',
        password='testpass123',
        role=role
    )


def make_question(correct):
    return {
        'id': f'q{correct}',
        'question_text': 'Pick one',
        'options': ['A', 'B', 'C', 'D'],
        'correct_answer_index': correct,
        'explanation': '',
        'points': 1,
    }


class QuizScoringTest(TestCase):

    def test_score_quiz(self):
        questions = [make_question(0), make_question(1), make_question(2)]
        self.assertEqual(score_quiz(questions, {'0': '0', '1': '1', '2': '3'}), (66, 2))

    def test_invalid_answers_count_as_wrong(self):
        questions = [make_question(0), make_question(1)]
        self.assertEqual(score_quiz(questions, {'0': 'zero', 'x': '1'}), (0, 0))

    def test_empty_quiz(self):
        self.assertEqual(score_quiz([], {'0': '1'}), (0, 0))


class ProgressServiceTest(TestCase):

    def setUp(self):
        self.instructor = make_user('teacher', User.Role.INSTRUCTOR)
        self.student = make_user('student', User.Role.STUDENT)
        self.course = Course.objects.create(title='Python Basics', instructor=self.instructor, published=True)
        self.lessons = [
            Lesson.objects.create(course=self.course, title=f'Lesson {i}', order=i)
            for i in range(1, 4)
        ]
        self.service = ProgressService()

    def test_enroll_opens_progress(self):
        progress = self.service.enroll_student(self.course.id, self.student)

        self.assertEqual(progress.completion_percentage, 0)
        self.assertTrue(self.service.is_student_enrolled(self.student, self.course.id))
        self.course.refresh_from_db()
        self.assertEqual(self.course.total_enrollments, 1)

    def test_completion_idempotent(self):
        lesson = self.lessons[0]
        self.service.update_lesson_progress(self.student, self.course.id, lesson.id, True, 10)
        first_completed_at = LessonProgress.objects.get(lesson=lesson).completed_at
        self.assertIsNotNone(first_completed_at)

        progress = self.service.update_lesson_progress(self.student, self.course.id, lesson.id, True, 5)

        self.assertEqual(LessonProgress.objects.get(lesson=lesson).completed_at, first_completed_at)
        self.assertEqual(progress.completion_percentage, 100)
        self.assertEqual(LessonProgress.objects.filter(progress=progress).count(), 1)
        self.assertEqual(progress.total_time_spent_minutes, 15)

    def test_completion_counts_touched_lessons(self):
        self.service.update_lesson_progress(self.student, self.course.id, self.lessons[0].id, True)
        self.service.update_lesson_progress(self.student, self.course.id, self.lessons[1].id, False)
        progress = self.service.update_lesson_progress(self.student, self.course.id, self.lessons[2].id, False)

        self.assertEqual(progress.completion_percentage, 33)
        self.assertFalse(progress.completed)

    def test_course_completion_is_one_way(self):
        lesson = self.lessons[0]
        progress = self.service.update_lesson_progress(self.student, self.course.id, lesson.id, True)
        self.assertTrue(progress.completed)
        self.assertIsNotNone(progress.completed_at)

        progress = self.service.update_lesson_progress(self.student, self.course.id, lesson.id, False)
        self.assertEqual(progress.completion_percentage, 0)
        self.assertTrue(progress.completed)

    def test_video_progress_high_water_mark(self):
        lesson = self.lessons[0]

        self.service.update_video_progress(self.student, self.course.id, lesson.id, 40)
        self.service.update_video_progress(self.student, self.course.id, lesson.id, 30)
        entry = LessonProgress.objects.get(lesson=lesson)
        self.assertEqual(entry.watched_percentage, 40)
        self.assertFalse(entry.completed)

        self.service.update_video_progress(self.student, self.course.id, lesson.id, 95)
        entry.refresh_from_db()
        self.assertEqual(entry.watched_percentage, 95)
        self.assertTrue(entry.completed)
        self.assertIsNotNone(entry.completed_at)
        first_completed_at = entry.completed_at

        self.service.update_video_progress(self.student, self.course.id, lesson.id, 100)
        entry.refresh_from_db()
        self.assertEqual(entry.watched_percentage, 100)
        self.assertEqual(entry.completed_at, first_completed_at)

    def test_video_progress_range(self):
        with self.assertRaises(InvalidInput):
            self.service.update_video_progress(self.student, self.course.id, self.lessons[0].id, 101)

    def test_negative_time_rejected(self):
        with self.assertRaises(InvalidInput):
            self.service.update_lesson_progress(self.student, self.course.id, self.lessons[0].id, True, -1)

    def test_lesson_from_another_course(self):
        other = Course.objects.create(title='Other', instructor=self.instructor)
        stray = Lesson.objects.create(course=other, title='Stray')
        with self.assertRaises(NotFound):
            self.service.update_lesson_progress(self.student, self.course.id, stray.id, True)

    def test_quiz_attempts_average(self):
        quiz = Quiz.objects.create(course=self.course, title='Quiz', questions=[make_question(0), make_question(1)])

        first = self.service.submit_quiz(self.student, self.course.id, quiz.id, {'0': '0', '1': '1'})
        second = self.service.submit_quiz(self.student, self.course.id, quiz.id, {'0': '0', '1': '0'})

        self.assertEqual(first.score, 100)
        self.assertTrue(first.passed)
        self.assertEqual(second.score, 50)
        self.assertFalse(second.passed)
        self.assertEqual(second.correct_answers, 1)

        progress = Progress.objects.get(student=self.student, course=self.course)
        self.assertEqual(progress.total_quiz_attempts, 2)
        self.assertEqual(progress.average_quiz_score, 75.0)

    def test_correct_answers_not_derived_from_truncated_score(self):
        quiz = Quiz.objects.create(
            course=self.course,
            title='Quiz',
            questions=[make_question(0), make_question(0), make_question(1)]
        )

        attempt = self.service.submit_quiz(self.student, self.course.id, quiz.id, {'0': '0', '1': '0', '2': '1'})

        self.assertEqual(attempt.score, 66)
        self.assertEqual(attempt.correct_answers, 2)
        self.assertEqual(attempt.total_questions, 3)
        self.assertFalse(attempt.passed)

    def test_unknown_quiz(self):
        with self.assertRaises(NotFound):
            self.service.submit_quiz(self.student, self.course.id, '00000000-0000-0000-0000-000000000000', {})

    def test_course_aggregates(self):
        other_student = make_user('other', User.Role.STUDENT)
        self.assertIsNone(self.service.average_completion(self.course))

        self.service.update_lesson_progress(self.student, self.course.id, self.lessons[0].id, True)
        self.service.update_lesson_progress(other_student, self.course.id, self.lessons[0].id, False)

        self.assertEqual(self.service.enrollment_count(self.course), 2)
        self.assertEqual(self.service.average_completion(self.course), 50)
        self.assertEqual(self.service.completed_courses(self.student).count(), 1)

    def test_missing_progress(self):
        with self.assertRaises(NotFound):
            self.service.get_progress(self.student, self.course.id)


@override_settings(GCP_PROJECT_ID=None)
class StudentAPITestCase(APITestCase):
    """
    HTTP tests for the student endpoints
    """

    def setUp(self):
        self.instructor = make_user('teacher', User.Role.INSTRUCTOR)
        self.student = make_user('student', User.Role.STUDENT)
        self.course = Course.objects.create(title='Python Basics', instructor=self.instructor, published=True)
        self.lesson = Lesson.objects.create(course=self.course, title='Intro', order=1)
        self.quiz = Quiz.objects.create(
            course=self.course,
            title='Python Quiz',
            questions=[make_question(0), make_question(1), make_question(2), make_question(3)]
        )
        self.assignment = Assignment.objects.create(
            title='FizzBuzz',
            course=self.course,
            instructor=self.instructor,
            published=True
        )
        Assignment.objects.create(title='Hidden draft', course=self.course, instructor=self.instructor)
        self.client.force_authenticate(user=self.student)

    def enroll(self):
        return self.client.post(f'/api/student/courses/{self.course.id}/enroll/')

    def test_enroll(self):
        response = self.enroll()

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['progress']['course']['title'], 'Python Basics')

        response = self.client.get('/api/student/courses/')
        self.assertEqual(len(response.data), 1)

    def test_instructor_forbidden(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.get('/api/student/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_lesson_and_video_progress(self):
        self.enroll()
        url = f'/api/student/courses/{self.course.id}/lessons/{self.lesson.id}'

        response = self.client.post(f'{url}/video-progress/', {'watched_percentage': 50}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['completion_percentage'], 0)

        response = self.client.post(f'{url}/progress/', {'completed': True, 'time_spent': 20}, format='json')
        self.assertEqual(response.data['completion_percentage'], 100)
        self.assertTrue(response.data['completed'])
        self.assertEqual(response.data['total_time_spent_minutes'], 20)

        response = self.client.get(f'/api/student/courses/{self.course.id}/progress/')
        self.assertEqual(response.data['lesson_progress'][0]['watched_percentage'], 50)

    def test_video_progress_validation(self):
        url = f'/api/student/courses/{self.course.id}/lessons/{self.lesson.id}/video-progress/'
        response = self.client.post(url, {'watched_percentage': 150}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quiz_submit(self):
        response = self.client.post(f'/api/student/courses/{self.course.id}/quiz/submit/', {
            'quiz_id': str(self.quiz.id),
            'answers': {'0': '0', '1': '1', '2': '2', '3': '0'},
            'time_spent': 12,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['score'], 75)
        self.assertEqual(response.data['correct_answers'], 3)
        self.assertTrue(response.data['passed'])

    def test_lesson_review_submission(self):
        self.enroll()
        response = self.client.post(
            f'/api/student/courses/{self.course.id}/lessons/{self.lesson.id}/submit-review/',
            {'time_spent': 5, 'video_progress': 80},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'PENDING')
        self.assertEqual(response.data['progress']['completion_percentage'], 100)

    def test_dashboard(self):
        self.enroll()
        SubmissionService().submit(self.assignment.id, self.student, '', 10, build_test_results([True, False]))

        response = self.client.get('/api/student/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stats']['total_courses'], 1)
        self.assertEqual(response.data['stats']['completed_courses'], 0)
        self.assertEqual(response.data['stats']['average_score'], 50)
        self.assertEqual(len(response.data['recent_submissions']), 1)

    def test_assignments_grouped_by_course(self):
        self.enroll()
        SubmissionService().submit(self.assignment.id, self.student, '', 10, build_test_results([True]))

        response = self.client.get('/api/student/assignments/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        group = response.data['assignments'][0]
        self.assertEqual(group['course_title'], 'Python Basics')
        self.assertEqual(len(group['assignments']), 1)
        self.assertEqual(group['assignments'][0]['attempts_used'], 1)
        self.assertTrue(group['assignments'][0]['completed'])

    def test_assignment_submission_history(self):
        service = SubmissionService()
        service.submit(self.assignment.id, self.student, '', 10, build_test_results([False]))
        service.submit(self.assignment.id, self.student, '', 10, build_test_results([True]))

        response = self.client.get(f'/api/student/assignments/{self.assignment.id}/submissions/')
        self.assertEqual(response.data['attempt_count'], 2)
        self.assertTrue(response.data['has_passed_assignment'])
        self.assertEqual(response.data['submissions'][0]['attempt_number'], 2)

        response = self.client.get('/api/student/submissions/')
        self.assertEqual(response.data['total_submissions'], 2)
        self.assertEqual(response.data['passed_submissions'], 1)

    def test_recommendations_fall_back(self):
        self.student.expertise = 'Data Science'
        self.student.save()

        response = self.client.get('/api/student/recommendations/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['interests'], 'Data Science')
        self.assertIn('Introduction to Data Science', response.data['recommendations'])
