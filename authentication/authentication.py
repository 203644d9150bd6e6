from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed
from firebase_admin import auth
import logging

from backend.settings import initialize_firebase

logger = logging.getLogger(__name__)
User = get_user_model()


class FirebaseAuthentication(BaseAuthentication):
    """
    Bearer-token authentication backed by Firebase ID tokens.

    The token's uid resolves to a local User (created with the student role on
    first sight); role and ownership checks happen later in permissions and
    services.
    """

    def authenticate(self, request):
        auth_header = request.META.get('HTTP_AUTHORIZATION')
        if not auth_header:
            return None

        token = self.extract_token(auth_header)
        if not token:
            return None

        if not initialize_firebase():
            raise AuthenticationFailed('Token verification is not configured')

        try:
            decoded_token = auth.verify_id_token(token)
        except (auth.ExpiredIdTokenError, auth.RevokedIdTokenError) as e:
            logger.warning(f"Rejected Firebase token: {e}")
            raise AuthenticationFailed('Authentication token expired or revoked')
        except auth.InvalidIdTokenError as e:
            logger.warning(f"Invalid Firebase token: {e}")
            raise AuthenticationFailed('Invalid authentication token')
        except ValueError as e:
            logger.error(f"Authentication error: {e}")
            raise AuthenticationFailed('Authentication failed')

        if not decoded_token.get('uid') or not decoded_token.get('email'):
            raise AuthenticationFailed('Invalid token: missing required fields')

        user = self.get_or_create_user(decoded_token)
        if not user.is_active:
            raise AuthenticationFailed('User account is disabled')

        return (user, token)

    def extract_token(self, auth_header):
        """
        Extract token from an Authorization header of the form "Bearer <token>".
        """
        parts = auth_header.split()

        if len(parts) != 2 or parts[0].lower() != 'bearer':
            return None

        return parts[1]

    def get_or_create_user(self, decoded_token):
        firebase_uid = decoded_token.get('uid')
        email = decoded_token.get('email')
        name = decoded_token.get('name', '')

        try:
            user = User.objects.get(firebase_uid=firebase_uid)
            if user.email != email:
                user.email = email
                user.save(update_fields=['email'])
        except User.DoesNotExist:
            name_parts = name.split(' ', 1) if name else ['', '']
            user = User.objects.create_user(
                firebase_uid=firebase_uid,
                email=email,
                username=email,
                first_name=name_parts[0],
                last_name=name_parts[1] if len(name_parts) > 1 else '',
                role=User.Role.STUDENT,
            )
            logger.info(f"Created new user with default student role: {email}")

        user.last_login_at = timezone.now()
        user.save(update_fields=['last_login_at'])

        return user

    def authenticate_header(self, request):
        """
        Return the authentication header for 401 responses.
        """
        return 'Bearer'
