from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from courses.models import Course

User = get_user_model()


class AdministrationAPITestCase(APITestCase):
    """
    Test cases for the admin user, course and report endpoints
    """

    def setUp(self):
        self.admin = User.objects.create_user(
            firebase_uid='test_admin_firebase_uid',
            email='admin@test.com',
            username='admin@test.com',
            password='testpass123',
            role=User.Role.ADMIN
        )
        self.instructor = User.objects.create_user(
            firebase_uid='test_teacher_firebase_uid',
            email='teacher@test.com',
            username='teacher@test.com',
            password='testpass123',
            role=User.Role.INSTRUCTOR
        )
        self.student = User.objects.create_user(
            firebase_uid='test_student_firebase_uid',
            email='student@test.com',
            username='student@test.com',
            password='testpass123',
            role=User.Role.STUDENT
        )
        self.course = Course.objects.create(
            title='Python Basics',
            instructor=self.instructor,
            category='Programming',
            published=True
        )
        self.draft = Course.objects.create(title='Draft', instructor=self.instructor, difficulty='ADVANCED')
        self.course.enrolled_students.add(self.student)

        self.client.force_authenticate(user=self.admin)

    def test_non_admin_forbidden(self):
        for user in (self.instructor, self.student):
            self.client.force_authenticate(user=user)
            response = self.client.get('/api/admin/dashboard/')
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_dashboard(self):
        response = self.client.get('/api/admin/dashboard/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stats']['total_users'], 3)
        self.assertEqual(response.data['stats']['total_students'], 1)
        self.assertEqual(response.data['stats']['total_courses'], 2)
        self.assertEqual(response.data['stats']['published_courses'], 1)
        self.assertEqual(len(response.data['recent_users']), 3)

    def test_users_by_role(self):
        response = self.client.get('/api/admin/users/role/INSTRUCTOR/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([u['email'] for u in response.data], ['teacher@test.com'])

        response = self.client.get('/api/admin/users/role/superhero/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_user_role(self):
        response = self.client.put(
            f'/api/admin/users/{self.student.id}/',
            {'role': 'instructor', 'is_active': False},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.student.refresh_from_db()
        self.assertEqual(self.student.role, User.Role.INSTRUCTOR)
        self.assertFalse(self.student.is_active)

    def test_delete_user(self):
        response = self.client.delete(f'/api/admin/users/{self.student.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(id=self.student.id).exists())

    def test_missing_user(self):
        response = self.client.get('/api/admin/users/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_sees_and_publishes_any_course(self):
        response = self.client.get(f'/api/admin/courses/{self.draft.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(f'/api/admin/courses/{self.draft.id}/publish/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.draft.refresh_from_db()
        self.assertTrue(self.draft.published)

        response = self.client.post(f'/api/admin/courses/{self.draft.id}/unpublish/')
        self.draft.refresh_from_db()
        self.assertFalse(self.draft.published)

    def test_delete_course(self):
        response = self.client.delete(f'/api/admin/courses/{self.draft.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Course.objects.filter(id=self.draft.id).exists())

    def test_analytics(self):
        response = self.client.get('/api/admin/analytics/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user_stats']['total_admins'], 1)
        self.assertEqual(response.data['course_stats']['total_courses'], 2)
        self.assertEqual(response.data['category_distribution'], {'Programming': 1})
        self.assertEqual(response.data['difficulty_distribution'], {'BEGINNER': 1, 'ADVANCED': 1})

    def test_user_activity_report(self):
        response = self.client.get('/api/admin/reports/user-activity/')

        rows = {row['email']: row for row in response.data['user_activity']}
        self.assertEqual(rows['student@test.com']['enrolled_courses'], 1)
        self.assertEqual(rows['teacher@test.com']['created_courses'], 2)

    def test_course_performance_report(self):
        response = self.client.get('/api/admin/reports/course-performance/')

        rows = {row['course_title']: row for row in response.data['course_performance']}
        self.assertEqual(rows['Draft']['category'], 'Uncategorized')
        self.assertFalse(rows['Draft']['published'])
        self.assertEqual(rows['Python Basics']['completion_rate'], 0.0)
