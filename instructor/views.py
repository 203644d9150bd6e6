import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from assignments.grading import SubmissionService
from assignments.serializers import SubmissionSerializer, SubmissionGradeSerializer
from backend.exceptions import Unauthorized
from courses.serializers import CourseListSerializer
from courses.services import CourseService, is_owner
from student.progress_service import ProgressService
from student.serializers import ProgressSummarySerializer
from users.models import User
from users.permissions import IsInstructor
from .analytics import teaching_summary, course_analytics

logger = logging.getLogger(__name__)


class InstructorDashboardView(APIView):
    """
    Teaching totals plus the instructor's courses
    """
    permission_classes = [IsAuthenticated, IsInstructor]

    def get(self, request):
        courses = CourseService().instructor_courses(request.user)
        data = teaching_summary(courses)
        data['courses'] = CourseListSerializer(courses, many=True).data
        return Response(data)


class InstructorStatsView(APIView):
    permission_classes = [IsAuthenticated, IsInstructor]

    def get(self, request):
        return Response(teaching_summary(CourseService().instructor_courses(request.user)))


class InstructorCoursesView(APIView):
    permission_classes = [IsAuthenticated, IsInstructor]

    def get(self, request):
        courses = CourseService().instructor_courses(request.user)
        return Response(CourseListSerializer(courses, many=True).data)


class CourseStudentsView(APIView):
    """
    Progress of every student enrolled in one of the instructor's courses
    """
    permission_classes = [IsAuthenticated, IsInstructor]

    def get(self, request, course_id):
        course = CourseService().get_owned_course(course_id, request.user, 'view students of')
        students = []
        for progress in ProgressService().course_progress(course):
            entry = ProgressSummarySerializer(progress).data
            entry.pop('course')
            entry['student_id'] = progress.student.id
            entry['student_name'] = progress.student.display_name
            entry['email'] = progress.student.email
            students.append(entry)

        return Response({
            'course': CourseListSerializer(course).data,
            'students': students,
            'total_students': len(students),
        })


class CourseAnalyticsView(APIView):
    permission_classes = [IsAuthenticated, IsInstructor]

    def get(self, request, course_id):
        course = CourseService().get_owned_course(course_id, request.user, 'view analytics of')
        return Response(course_analytics(course))


class InstructorStudentsView(APIView):
    """
    Distinct students across all of the instructor's courses
    """
    permission_classes = [IsAuthenticated, IsInstructor]

    def get(self, request):
        courses = CourseService().instructor_courses(request.user)
        students = User.objects.filter(enrolled_courses__in=courses).distinct()

        data = [
            {
                'student_id': student.id,
                'student_name': student.display_name,
                'email': student.email,
                'enrolled_courses': student.enrolled_courses.filter(instructor=request.user).count(),
                'estimated_iq': student.estimated_iq,
            }
            for student in students
        ]
        return Response({'students': data, 'total_students': len(data)})


class PendingSubmissionsView(APIView):
    permission_classes = [IsAuthenticated, IsInstructor]

    def get(self, request):
        submissions = SubmissionService().pending_submissions(request.user)
        return Response(SubmissionSerializer(submissions, many=True).data)


class GradeSubmissionView(APIView):
    """
    POST {"score": 80, "feedback": "..."}: instructor regrade of a submission
    """
    permission_classes = [IsAuthenticated, IsInstructor]

    def post(self, request, submission_id):
        serializer = SubmissionGradeSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        service = SubmissionService()
        submission = service.get_submission(submission_id)
        if not is_owner(submission.assignment.course, request.user):
            raise Unauthorized("Unauthorized to grade this submission")

        submission = service.grade_submission(
            submission_id, serializer.validated_data['score'], serializer.validated_data['feedback'], request.user
        )
        return Response(SubmissionSerializer(submission).data)
