from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.test import APITestCase, APIRequestFactory

from .authentication import FirebaseAuthentication

User = get_user_model()


class FirebaseAuthenticationTest(TestCase):

    def setUp(self):
        self.factory = APIRequestFactory()
        self.backend = FirebaseAuthentication()

    def request_with(self, header):
        return self.factory.get('/api/users/profile/', HTTP_AUTHORIZATION=header)

    def test_no_header(self):
        self.assertIsNone(self.backend.authenticate(self.factory.get('/')))

    def test_non_bearer_header(self):
        self.assertIsNone(self.backend.authenticate(self.request_with('Basic abc')))

    @mock.patch('authentication.authentication.initialize_firebase', return_value=True)
    @mock.patch('authentication.authentication.auth.verify_id_token')
    def test_first_login_creates_student(self, mock_verify, mock_init):
        mock_verify.return_value = {'uid': 'firebase-1', 'email': 'new@test.com', 'name': 'New Person'}

        user, token = self.backend.authenticate(self.request_with('Bearer good-token'))

        self.assertEqual(token, 'good-token')
        self.assertEqual(user.role, User.Role.STUDENT)
        self.assertEqual(user.first_name, 'New')
        self.assertEqual(user.last_name, 'Person')
        self.assertIsNotNone(user.last_login_at)

    @mock.patch('authentication.authentication.initialize_firebase', return_value=True)
    @mock.patch('authentication.authentication.auth.verify_id_token')
    def test_existing_user_is_reused(self, mock_verify, mock_init):
        existing = User.objects.create_user(
            firebase_uid='firebase-2', email='old@test.com', role=User.Role.INSTRUCTOR
        )
        mock_verify.return_value = {'uid': 'firebase-2', 'email': 'old@test.com'}

        user, _ = self.backend.authenticate(self.request_with('Bearer token'))
        self.assertEqual(user.id, existing.id)
        self.assertEqual(user.role, User.Role.INSTRUCTOR)

    @mock.patch('authentication.authentication.initialize_firebase', return_value=True)
    @mock.patch('authentication.authentication.auth.verify_id_token', side_effect=ValueError('malformed'))
    def test_bad_token(self, mock_verify, mock_init):
        with self.assertRaises(AuthenticationFailed):
            self.backend.authenticate(self.request_with('Bearer broken'))

    @mock.patch('authentication.authentication.initialize_firebase', return_value=False)
    def test_unconfigured_firebase(self, mock_init):
        with self.assertRaises(AuthenticationFailed):
            self.backend.authenticate(self.request_with('Bearer token'))


class RegistrationAPITestCase(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            firebase_uid='test_new_firebase_uid',
            email='new@test.com',
            username='new@test.com',
            password='testpass123'
        )
        self.client.force_authenticate(user=self.user)

    def test_register_as_instructor(self):
        response = self.client.post('/api/auth/register/', {
            'role': 'instructor',
            'first_name': 'Alan',
            'expertise': 'Algorithms',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, User.Role.INSTRUCTOR)
        self.assertEqual(self.user.expertise, 'Algorithms')

    def test_cannot_self_register_as_admin(self):
        response = self.client.post('/api/auth/register/', {'role': 'admin'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertEqual(self.user.role, User.Role.STUDENT)

    def test_current_user(self):
        response = self.client.get('/api/auth/user/')
        self.assertEqual(response.data['email'], 'new@test.com')
