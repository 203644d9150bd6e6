from rest_framework import serializers

from .models import Course, Lesson, CourseReview, Quiz


# ===== REVIEW SERIALIZERS =====

class CourseReviewSerializer(serializers.ModelSerializer):
    """
    Serializer for course reviews
    """
    student_name = serializers.ReadOnlyField()

    class Meta:
        model = CourseReview
        fields = ['id', 'student', 'student_name', 'rating', 'comment', 'created_at']
        read_only_fields = fields


class CourseReviewCreateSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(required=False, allow_blank=True, default='')


# ===== LESSON SERIALIZERS =====

class LessonSerializer(serializers.ModelSerializer):
    class Meta:
        model = Lesson
        fields = [
            'id', 'course', 'title', 'content', 'notes',
            'video_url', 'video_title', 'video_description', 'video_embedded',
            'order', 'duration_minutes', 'type', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class LessonCreateUpdateSerializer(serializers.ModelSerializer):
    """
    Serializer for creating and updating lessons.
    video_url accepts any YouTube link form and is normalized by the service.
    """
    video_url = serializers.CharField(required=False, allow_blank=True, max_length=500)
    order = serializers.IntegerField(required=False, min_value=0)

    class Meta:
        model = Lesson
        fields = [
            'title', 'content', 'notes', 'video_url', 'video_title', 'video_description',
            'video_embedded', 'order', 'duration_minutes', 'type'
        ]

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError("Lesson title cannot be empty")
        return value.strip()


class LessonReorderSerializer(serializers.Serializer):
    """
    Serializer for reordering lessons within a course
    """
    lesson_ids = serializers.ListField(
        child=serializers.UUIDField(),
        allow_empty=False,
        help_text="Lesson ids in their new order"
    )


class LessonNotesSerializer(serializers.Serializer):
    notes = serializers.CharField(allow_blank=True)


class YouTubeUrlSerializer(serializers.Serializer):
    url = serializers.CharField(max_length=500)


# ===== COURSE SERIALIZERS =====

class CourseListSerializer(serializers.ModelSerializer):
    """
    Compact course representation for listings
    """
    instructor_name = serializers.ReadOnlyField()
    total_lessons = serializers.ReadOnlyField()

    class Meta:
        model = Course
        fields = [
            'id', 'title', 'description', 'instructor', 'instructor_name', 'category',
            'difficulty', 'estimated_hours', 'published', 'total_enrollments',
            'average_rating', 'total_lessons', 'created_at'
        ]
        read_only_fields = fields


class CourseDetailSerializer(serializers.ModelSerializer):
    """
    Full course representation including lessons and reviews
    """
    instructor_name = serializers.ReadOnlyField()
    lessons = serializers.SerializerMethodField()
    reviews = CourseReviewSerializer(many=True, read_only=True)

    class Meta:
        model = Course
        fields = [
            'id', 'title', 'description', 'instructor', 'instructor_name', 'category',
            'difficulty', 'estimated_hours', 'outline', 'summary', 'video_url', 'published',
            'total_enrollments', 'average_rating', 'lessons', 'reviews',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_lessons(self, obj):
        return LessonSerializer(obj.lessons.order_by('order', 'created_at'), many=True).data


class CourseCreateUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Course
        fields = [
            'title', 'description', 'category', 'difficulty', 'estimated_hours', 'outline', 'video_url'
        ]

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError("Course title cannot be empty")
        return value.strip()


# ===== QUIZ SERIALIZERS =====

class QuizSerializer(serializers.ModelSerializer):
    """
    Quiz with answer keys, for the course owner
    """
    question_count = serializers.ReadOnlyField()

    class Meta:
        model = Quiz
        fields = [
            'id', 'course', 'title', 'description', 'topic', 'questions', 'question_count',
            'time_limit', 'passing_score', 'ai_generated', 'created_at'
        ]
        read_only_fields = fields


class StudentQuizSerializer(QuizSerializer):
    """
    Quiz as served to students: correct answers and explanations are removed
    """
    questions = serializers.SerializerMethodField()

    def get_questions(self, obj):
        return [
            {
                'id': question.get('id'),
                'question_text': question.get('question_text'),
                'options': question.get('options', []),
                'points': question.get('points', 1),
            }
            for question in obj.questions
        ]


class QuizGenerateRequestSerializer(serializers.Serializer):
    number_of_questions = serializers.IntegerField(required=False, default=5, min_value=1, max_value=20)
