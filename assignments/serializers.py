from rest_framework import serializers

from .models import Assignment, Submission


# ===== ASSIGNMENT SERIALIZERS =====

class AssignmentSerializer(serializers.ModelSerializer):
    """
    Full assignment, including solution and hidden test cases (owners only)
    """
    course_title = serializers.CharField(source='course.title', read_only=True)

    class Meta:
        model = Assignment
        fields = [
            'id', 'title', 'description', 'course', 'course_title', 'instructor',
            'type', 'difficulty', 'source', 'problem_statement', 'constraints',
            'examples', 'test_cases', 'starter_code', 'solution', 'programming_language',
            'time_limit', 'max_attempts', 'points', 'due_date', 'published', 'ai_generated',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class StudentAssignmentSerializer(serializers.ModelSerializer):
    """
    Assignment as students see it: no solution and no hidden test cases
    """
    course_title = serializers.CharField(source='course.title', read_only=True)
    test_cases = serializers.ReadOnlyField(source='visible_test_cases')

    class Meta:
        model = Assignment
        fields = [
            'id', 'title', 'description', 'course', 'course_title',
            'type', 'difficulty', 'source', 'problem_statement', 'constraints',
            'examples', 'test_cases', 'starter_code', 'programming_language',
            'time_limit', 'max_attempts', 'points', 'due_date', 'created_at'
        ]
        read_only_fields = fields


class AssignmentCreateSerializer(serializers.ModelSerializer):
    course_id = serializers.UUIDField(write_only=True)

    class Meta:
        model = Assignment
        fields = [
            'course_id', 'title', 'description', 'type', 'difficulty', 'problem_statement',
            'constraints', 'examples', 'test_cases', 'starter_code', 'solution',
            'programming_language', 'time_limit', 'max_attempts', 'points', 'due_date'
        ]

    def validate_title(self, value):
        if not value.strip():
            raise serializers.ValidationError("Assignment title cannot be empty")
        return value.strip()

    def validate_examples(self, value):
        if not isinstance(value, list) or not all(isinstance(example, dict) for example in value):
            raise serializers.ValidationError("Examples must be a list of objects")
        return value

    def validate_test_cases(self, value):
        if not isinstance(value, list) or not all(isinstance(test_case, dict) for test_case in value):
            raise serializers.ValidationError("Test cases must be a list of objects")
        return value


class AssignmentGenerateSerializer(serializers.Serializer):
    """
    Request body for AI and Codeforces assignment generation
    """
    course_id = serializers.UUIDField()
    topic = serializers.CharField(max_length=200)
    difficulty = serializers.ChoiceField(choices=Assignment.DIFFICULTY_CHOICES)
    programming_language = serializers.CharField(max_length=30, default='python')
    problem_count = serializers.IntegerField(required=False, default=3, min_value=1, max_value=10)


class CodeforcesProblemsQuerySerializer(serializers.Serializer):
    difficulty = serializers.CharField()
    topic = serializers.CharField(required=False, allow_blank=True, default='')
    limit = serializers.IntegerField(required=False, default=10, min_value=1, max_value=50)


class SkippedAssignmentSerializer(serializers.Serializer):
    course_id = serializers.UUIDField()
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    type = serializers.ChoiceField(choices=Assignment.TYPE_CHOICES, default='CODING')
    difficulty = serializers.ChoiceField(choices=Assignment.DIFFICULTY_CHOICES, default='EASY')


# ===== SUBMISSION SERIALIZERS =====

class SubmissionCreateSerializer(serializers.Serializer):
    """
    A submission attempt. test_results holds the pass/fail outcome of each test
    case as computed by the client-side runner.
    """
    code = serializers.CharField(required=False, allow_blank=True, default='')
    time_spent = serializers.IntegerField(required=False, default=0, min_value=0, help_text="Seconds")
    test_results = serializers.ListField(child=serializers.BooleanField(), required=False, default=list)


class SubmissionSerializer(serializers.ModelSerializer):
    assignment_title = serializers.CharField(source='assignment.title', read_only=True)
    student_email = serializers.EmailField(source='student.email', read_only=True)
    percentage = serializers.ReadOnlyField()

    class Meta:
        model = Submission
        fields = [
            'id', 'assignment', 'assignment_title', 'student', 'student_email', 'code',
            'submitted_at', 'score', 'max_score', 'percentage', 'passed', 'attempt_number',
            'time_spent_seconds', 'test_results', 'feedback', 'status', 'graded_at', 'graded_by'
        ]
        read_only_fields = fields


class SubmissionGradeSerializer(serializers.Serializer):
    score = serializers.IntegerField(min_value=0)
    feedback = serializers.CharField(required=False, allow_blank=True, default='')
