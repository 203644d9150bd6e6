import logging
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView
from .serializers import UserSerializer, UserProfileUpdateSerializer

logger = logging.getLogger(__name__)


class UserProfileView(APIView):
    """
    Retrieve and update the authenticated user's profile.

    GET: current profile
    PUT/PATCH: update first_name, last_name, bio, expertise
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    def put(self, request):
        serializer = UserProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"Profile updated for {user.email}")
        return Response({
            'message': 'Profile updated successfully',
            'user': UserSerializer(user).data
        })

    patch = put
