from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for User model
    """
    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'firebase_uid', 'email', 'first_name', 'last_name',
            'full_name', 'role', 'bio', 'expertise', 'estimated_iq',
            'is_active', 'created_at', 'last_login_at'
        ]
        read_only_fields = ['id', 'firebase_uid', 'email', 'role', 'is_active', 'created_at', 'last_login_at']

    def get_full_name(self, obj):
        return obj.get_full_name()


class UserProfileUpdateSerializer(serializers.ModelSerializer):
    """
    Fields a user may change on their own profile
    """

    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'bio', 'expertise']


class AdminUserUpdateSerializer(serializers.ModelSerializer):
    """
    Fields an administrator may change on any account
    """

    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'role', 'is_active', 'bio', 'expertise']
