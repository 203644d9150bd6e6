from rest_framework import serializers
from users.models import User


class AuthTokenSerializer(serializers.Serializer):
    """
    Serializer for Firebase ID token authentication
    """
    token = serializers.CharField(
        help_text="Firebase ID token obtained from frontend authentication"
    )


class RegistrationSerializer(serializers.Serializer):
    """
    Completes registration for a user first seen through a token.

    Only the student and instructor roles are self-selectable; admins are
    appointed by another admin.
    """
    role = serializers.ChoiceField(
        choices=[User.Role.STUDENT, User.Role.INSTRUCTOR],
        default=User.Role.STUDENT
    )
    first_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    bio = serializers.CharField(required=False, allow_blank=True)
    expertise = serializers.CharField(max_length=255, required=False, allow_blank=True)
