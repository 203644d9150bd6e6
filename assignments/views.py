import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.exceptions import NotFound
from courses.services import is_owner
from users.permissions import IsInstructor, IsStudent
from .grading import SubmissionService, build_test_results
from .serializers import (
    AssignmentSerializer, StudentAssignmentSerializer, AssignmentCreateSerializer,
    AssignmentGenerateSerializer, CodeforcesProblemsQuerySerializer, SkippedAssignmentSerializer,
    SubmissionCreateSerializer, SubmissionSerializer
)
from .services import AssignmentService

logger = logging.getLogger(__name__)


def _serialize_for(user, assignment):
    if is_owner(assignment.course, user) or assignment.instructor_id == user.id:
        return AssignmentSerializer(assignment).data
    return StudentAssignmentSerializer(assignment).data


class CourseAssignmentsView(APIView):
    """
    GET /api/assignments/course/<course_id>/

    Owners see every assignment of the course, everyone else the published ones.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, course_id):
        assignments = AssignmentService().course_assignments(course_id, request.user)
        return Response([_serialize_for(request.user, assignment) for assignment in assignments])


class AssignmentCreateView(APIView):
    permission_classes = [IsAuthenticated, IsInstructor]

    def post(self, request):
        serializer = AssignmentCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = dict(serializer.validated_data)
        course_id = data.pop('course_id')
        data['source'] = 'MANUAL'
        assignment = AssignmentService().create_assignment(course_id, request.user, data)
        return Response(AssignmentSerializer(assignment).data, status=status.HTTP_201_CREATED)


class AssignmentDetailView(APIView):
    """
    GET: one assignment (unpublished ones only for their owner)
    DELETE: remove the assignment and its submissions
    """

    def get_permissions(self):
        if self.request.method == 'DELETE':
            return [IsAuthenticated(), IsInstructor()]
        return [IsAuthenticated()]

    def get(self, request, assignment_id):
        assignment = AssignmentService().get_assignment(assignment_id)
        owner = is_owner(assignment.course, request.user) or assignment.instructor_id == request.user.id
        if not assignment.published and not owner:
            raise NotFound("Assignment not found")
        return Response(_serialize_for(request.user, assignment))

    def delete(self, request, assignment_id):
        AssignmentService().delete_assignment(assignment_id, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsInstructor])
def generate_assignment(request):
    """
    Generate a coding assignment with AI (keyword fallback when AI is unavailable).
    """
    serializer = AssignmentGenerateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    assignment = AssignmentService().create_generated_assignment(
        data['course_id'], request.user, data['topic'], data['difficulty'], data['programming_language']
    )
    return Response({
        'message': 'Coding assignment generated successfully',
        'assignment': AssignmentSerializer(assignment).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsInstructor])
def generate_assignment_with_codeforces(request):
    serializer = AssignmentGenerateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    assignment = AssignmentService().create_codeforces_assignment(
        data['course_id'], request.user, data['topic'], data['difficulty'],
        data['programming_language'], data['problem_count']
    )
    return Response({
        'message': 'Assignment with Codeforces problems generated and published successfully',
        'assignment': AssignmentSerializer(assignment).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsInstructor])
def codeforces_problems(request):
    serializer = CodeforcesProblemsQuerySerializer(data=request.query_params)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    problems = AssignmentService().available_codeforces_problems(
        data['difficulty'], data['topic'] or None, data['limit']
    )
    return Response({
        'success': True,
        'problems': problems,
        'count': len(problems),
        'difficulty': data['difficulty'],
        'topic': data['topic'] or 'general',
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsInstructor])
def create_skipped_assignment(request):
    serializer = SkippedAssignmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = dict(serializer.validated_data)
    course_id = data.pop('course_id')
    assignment = AssignmentService().create_skipped_assignment(course_id, request.user, data)
    return Response({
        'message': 'Skipped assignment placeholder created successfully',
        'assignment': AssignmentSerializer(assignment).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsInstructor])
def publish_assignment(request, assignment_id):
    assignment = AssignmentService().publish_assignment(assignment_id, request.user)
    return Response({'message': 'Assignment published successfully', 'assignment': AssignmentSerializer(assignment).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsInstructor])
def unpublish_assignment(request, assignment_id):
    assignment = AssignmentService().unpublish_assignment(assignment_id, request.user)
    return Response({'message': 'Assignment unpublished successfully', 'assignment': AssignmentSerializer(assignment).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsInstructor])
def my_assignments(request):
    assignments = AssignmentService().instructor_assignments(request.user)
    return Response(AssignmentSerializer(assignments, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStudent])
def submit_assignment(request, assignment_id):
    """
    POST /api/assignments/<id>/submit/
    {"code": "...", "time_spent": 120, "test_results": [true, false, true]}
    """
    serializer = SubmissionCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    submission = SubmissionService().submit(
        assignment_id, request.user, data['code'], data['time_spent'], build_test_results(data['test_results'])
    )
    return Response({
        'submission_id': str(submission.id),
        'score': submission.score,
        'max_score': submission.max_score,
        'passed': submission.passed,
        'attempt_number': submission.attempt_number,
        'feedback': submission.feedback,
        'message': 'Great job! Assignment completed successfully!' if submission.passed else 'Good effort! Keep practicing!',
        'submission': SubmissionSerializer(submission).data,
    }, status=status.HTTP_201_CREATED)
