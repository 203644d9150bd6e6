from rest_framework import serializers


class VideoSearchSerializer(serializers.Serializer):
    """
    Query parameters for the video search endpoint
    """
    query = serializers.CharField(max_length=200)
    max_results = serializers.IntegerField(required=False, default=5, min_value=1, max_value=25)


class CodeforcesProblemQuerySerializer(serializers.Serializer):
    difficulty = serializers.CharField(required=False, allow_blank=True, default='')
    topic = serializers.CharField(required=False, allow_blank=True, default='')
    limit = serializers.IntegerField(required=False, default=10, min_value=1, max_value=50)


class QuizGenerationSerializer(serializers.Serializer):
    """
    Request body for generating a quiz on a custom topic
    """
    topic = serializers.CharField(max_length=200)
    content = serializers.CharField(required=False, allow_blank=True, default='')
    number_of_questions = serializers.IntegerField(required=False, default=5, min_value=1, max_value=20)
