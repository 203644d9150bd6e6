from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

User = get_user_model()


class UserModelTest(TestCase):

    def test_create_user_defaults(self):
        user = User.objects.create_user(firebase_uid='uid_1', email='Someone@Example.com')

        self.assertEqual(user.role, User.Role.STUDENT)
        self.assertEqual(user.username, 'Someone@example.com')
        self.assertFalse(user.has_usable_password())
        self.assertTrue(user.is_student)

    def test_create_superuser_is_admin(self):
        admin = User.objects.create_superuser(firebase_uid='uid_2', email='root@example.com', password='testpass123')

        self.assertTrue(admin.is_platform_admin)
        self.assertTrue(admin.is_staff)

    def test_display_name(self):
        user = User.objects.create_user(firebase_uid='uid_3', email='ada@example.com', first_name='Ada', last_name='Lovelace')
        self.assertEqual(user.display_name, 'Ada Lovelace')

        user.first_name = user.last_name = ''
        self.assertEqual(user.display_name, 'ada@example.com')


class UserProfileAPITestCase(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            firebase_uid='test_student_firebase_uid',
            email='student@test.com',
            username='student@test.com',
            password='testpass123',
            role=User.Role.STUDENT
        )

    def test_get_profile(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get('/api/users/profile/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'student@test.com')
        self.assertEqual(response.data['role'], 'student')

    def test_update_profile_cannot_change_role(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.put('/api/users/profile/', {
            'first_name': 'Grace',
            'expertise': 'Compilers',
            'role': 'admin',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, 'Grace')
        self.assertEqual(self.user.expertise, 'Compilers')
        self.assertEqual(self.user.role, User.Role.STUDENT)

    def test_unauthenticated(self):
        response = self.client.get('/api/users/profile/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
