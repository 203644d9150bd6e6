from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from assignments.grading import SubmissionService, build_test_results
from assignments.models import Assignment, Submission
from courses.models import Course, Lesson
from student.progress_service import ProgressService

User = get_user_model()


class InstructorAPITestCase(APITestCase):
    """
    Test cases for the instructor dashboard, analytics and grading endpoints
    """

    def setUp(self):
        self.instructor = User.objects.create_user(
            firebase_uid='test_teacher_firebase_uid',
            email='teacher@test.com',
            username='teacher@test.com',
            password='testpass123',
            first_name='Test',
            last_name='Teacher',
            role=User.Role.INSTRUCTOR
        )
        self.other_instructor = User.objects.create_user(
            firebase_uid='test_other_teacher_firebase_uid',
            email='other@test.com',
            username='other@test.com',
            password='testpass123',
            role=User.Role.INSTRUCTOR
        )
        self.student = User.objects.create_user(
            firebase_uid='test_student_firebase_uid',
            email='student@test.com',
            username='student@test.com',
            password='testpass123',
            first_name='Test',
            last_name='Student',
            role=User.Role.STUDENT,
            estimated_iq=110
        )

        self.course = Course.objects.create(
            title='Python Basics',
            instructor=self.instructor,
            published=True,
            average_rating=4.0
        )
        self.second_course = Course.objects.create(title='Django', instructor=self.instructor)
        self.lesson = Lesson.objects.create(course=self.course, title='Intro', order=1)
        self.assignment = Assignment.objects.create(
            title='FizzBuzz',
            course=self.course,
            instructor=self.instructor,
            published=True
        )

        progress_service = ProgressService()
        progress_service.enroll_student(self.course.id, self.student)
        progress_service.update_lesson_progress(self.student, self.course.id, self.lesson.id, True, 30)

        self.client.force_authenticate(user=self.instructor)

    def test_dashboard(self):
        response = self.client.get('/api/instructor/dashboard/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_courses'], 2)
        self.assertEqual(response.data['published_courses'], 1)
        self.assertEqual(response.data['total_enrollments'], 1)
        self.assertEqual(response.data['average_rating'], 4.0)
        self.assertEqual(len(response.data['courses']), 2)

    def test_student_forbidden(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get('/api/instructor/stats/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unauthenticated(self):
        self.client.force_authenticate(user=None)
        response = self.client.get('/api/instructor/stats/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_course_students(self):
        response = self.client.get(f'/api/instructor/courses/{self.course.id}/students/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_students'], 1)
        entry = response.data['students'][0]
        self.assertEqual(entry['email'], 'student@test.com')
        self.assertEqual(entry['completion_percentage'], 100)

    def test_course_students_requires_ownership(self):
        self.client.force_authenticate(user=self.other_instructor)
        response = self.client.get(f'/api/instructor/courses/{self.course.id}/students/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_course_analytics(self):
        response = self.client.get(f'/api/instructor/courses/{self.course.id}/analytics/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_enrollments'], 1)
        self.assertEqual(response.data['completed_students'], 1)
        self.assertEqual(response.data['completion_rate'], 100.0)
        self.assertEqual(response.data['average_time_spent_minutes'], 30.0)
        self.assertEqual(response.data['average_quiz_score'], 0.0)
        self.assertEqual(response.data['total_reviews'], 0)

    def test_students_across_courses(self):
        response = self.client.get('/api/instructor/students/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_students'], 1)
        self.assertEqual(response.data['students'][0]['enrolled_courses'], 1)
        self.assertEqual(response.data['students'][0]['estimated_iq'], 110)

    def test_pending_submissions_and_grading(self):
        submission = SubmissionService().submit(
            self.assignment.id, self.student, 'print(1)', 30, build_test_results([False, False])
        )
        Submission.objects.filter(id=submission.id).update(status='PENDING_REVIEW')

        response = self.client.get('/api/instructor/submissions/pending/')
        self.assertEqual(len(response.data), 1)

        response = self.client.post(
            f'/api/instructor/submissions/{submission.id}/grade/',
            {'score': 85, 'feedback': 'Solid approach'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['score'], 85)
        self.assertTrue(response.data['passed'])
        self.assertEqual(response.data['status'], 'GRADED')

        response = self.client.get('/api/instructor/submissions/pending/')
        self.assertEqual(len(response.data), 0)

    def test_grading_other_instructors_submission(self):
        submission = SubmissionService().submit(
            self.assignment.id, self.student, '', 0, build_test_results([True])
        )
        self.client.force_authenticate(user=self.other_instructor)

        response = self.client.post(
            f'/api/instructor/submissions/{submission.id}/grade/', {'score': 0}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        submission.refresh_from_db()
        self.assertEqual(submission.score, 100)

    def test_grade_above_max_score(self):
        submission = SubmissionService().submit(
            self.assignment.id, self.student, '', 0, build_test_results([True])
        )
        response = self.client.post(
            f'/api/instructor/submissions/{submission.id}/grade/', {'score': 250}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
