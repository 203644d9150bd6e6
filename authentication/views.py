from rest_framework import status, permissions
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.response import Response
from rest_framework.views import APIView
from firebase_admin import auth
from backend.settings import initialize_firebase
from users.serializers import UserSerializer
from .serializers import AuthTokenSerializer, RegistrationSerializer
import logging

logger = logging.getLogger(__name__)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([permissions.AllowAny])
def verify_token(request):
    """
    Verify Firebase ID token and return the identity it carries.

    Lets the frontend check a token without touching any local account.
    """
    serializer = AuthTokenSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(
            {'error': 'Invalid request data', 'details': serializer.errors},
            status=status.HTTP_400_BAD_REQUEST
        )

    if not initialize_firebase():
        return Response(
            {'valid': False, 'error': 'Token verification is not configured'},
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    try:
        decoded_token = auth.verify_id_token(serializer.validated_data['token'])
    except (auth.InvalidIdTokenError, ValueError) as e:
        logger.warning(f"Invalid token verification: {e}")
        return Response(
            {'valid': False, 'error': 'Invalid token'},
            status=status.HTTP_401_UNAUTHORIZED
        )

    return Response({
        'valid': True,
        'user_info': {
            'uid': decoded_token.get('uid'),
            'email': decoded_token.get('email'),
            'name': decoded_token.get('name'),
            'email_verified': decoded_token.get('email_verified', False),
        }
    })


class RegisterView(APIView):
    """
    Complete registration for the authenticated user.

    POST: {"role": "student"|"instructor", "first_name", "last_name", "bio", "expertise"}
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = request.user
        for field, value in serializer.validated_data.items():
            setattr(user, field, value)
        user.save()

        logger.info(f"Registered {user.email} as {user.role}")
        return Response({
            'message': 'Registration completed successfully',
            'user': UserSerializer(user).data
        }, status=status.HTTP_200_OK)


class AuthenticatedUserView(APIView):
    """
    Get current authenticated user information.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)
