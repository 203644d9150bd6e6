from rest_framework import serializers

from courses.serializers import CourseListSerializer
from .models import Progress, LessonProgress, QuizAttempt


class LessonProgressSerializer(serializers.ModelSerializer):
    lesson_title = serializers.CharField(source='lesson.title', read_only=True)

    class Meta:
        model = LessonProgress
        fields = [
            'lesson', 'lesson_title', 'completed', 'started_at', 'completed_at',
            'time_spent_minutes', 'watched_percentage'
        ]
        read_only_fields = fields


class QuizAttemptSerializer(serializers.ModelSerializer):
    class Meta:
        model = QuizAttempt
        fields = [
            'id', 'quiz', 'attempted_at', 'score', 'total_questions', 'correct_answers',
            'passed', 'time_spent_minutes', 'answers'
        ]
        read_only_fields = fields


class ProgressSummarySerializer(serializers.ModelSerializer):
    """
    Progress without per-lesson detail, for dashboards and listings
    """
    course = CourseListSerializer(read_only=True)

    class Meta:
        model = Progress
        fields = [
            'id', 'course', 'completion_percentage', 'completed', 'enrolled_at',
            'last_accessed_at', 'completed_at', 'total_time_spent_minutes',
            'average_quiz_score', 'total_quiz_attempts'
        ]
        read_only_fields = fields


class ProgressDetailSerializer(ProgressSummarySerializer):
    lesson_progress = LessonProgressSerializer(many=True, read_only=True)
    quiz_attempts = QuizAttemptSerializer(many=True, read_only=True)

    class Meta(ProgressSummarySerializer.Meta):
        fields = ProgressSummarySerializer.Meta.fields + ['lesson_progress', 'quiz_attempts']
        read_only_fields = fields


class LessonProgressUpdateSerializer(serializers.Serializer):
    completed = serializers.BooleanField()
    time_spent = serializers.IntegerField(required=False, default=0, min_value=0, help_text="Minutes")


class VideoProgressUpdateSerializer(serializers.Serializer):
    watched_percentage = serializers.IntegerField(min_value=0, max_value=100)


class QuizSubmissionSerializer(serializers.Serializer):
    """
    answers maps question index ("0", "1", ...) to the chosen option index
    """
    quiz_id = serializers.UUIDField()
    answers = serializers.DictField(child=serializers.CharField(allow_blank=True))
    time_spent = serializers.IntegerField(required=False, default=0, min_value=0, help_text="Minutes")


class LessonReviewSubmissionSerializer(serializers.Serializer):
    time_spent = serializers.IntegerField(required=False, default=0, min_value=0, help_text="Minutes")
    video_progress = serializers.IntegerField(required=False, default=0, min_value=0, max_value=100)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
