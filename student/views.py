import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ai.gemini_course_service import GeminiCourseService
from assignments.grading import SubmissionService
from assignments.serializers import StudentAssignmentSerializer, SubmissionSerializer
from assignments.services import AssignmentService
from users.permissions import IsStudent
from .progress_service import ProgressService
from .serializers import (
    ProgressSummarySerializer, ProgressDetailSerializer, QuizAttemptSerializer,
    LessonProgressUpdateSerializer, VideoProgressUpdateSerializer, QuizSubmissionSerializer,
    LessonReviewSubmissionSerializer
)

logger = logging.getLogger(__name__)

RECENT_SUBMISSIONS_LIMIT = 5


class StudentDashboardView(APIView):
    """
    Enrolled and completed courses, recent submissions and headline stats.
    """
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request):
        progress_service = ProgressService()
        submission_service = SubmissionService()

        enrolled = list(progress_service.student_progress(request.user))
        completed = [progress for progress in enrolled if progress.completed]
        recent_submissions = submission_service.student_submissions(request.user)[:RECENT_SUBMISSIONS_LIMIT]
        average_score = submission_service.average_score_for_student(request.user)

        return Response({
            'enrolled_courses': ProgressSummarySerializer(enrolled, many=True).data,
            'completed_courses': ProgressSummarySerializer(completed, many=True).data,
            'recent_submissions': SubmissionSerializer(recent_submissions, many=True).data,
            'stats': {
                'total_courses': len(enrolled),
                'completed_courses': len(completed),
                'total_time_spent': sum(progress.total_time_spent_minutes for progress in enrolled),
                'average_score': average_score,
            },
        })


class EnrolledCoursesView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request):
        progress = ProgressService().student_progress(request.user)
        return Response(ProgressSummarySerializer(progress, many=True).data)


class CourseEnrollView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def post(self, request, course_id):
        progress = ProgressService().enroll_student(course_id, request.user)
        return Response({
            'message': 'Successfully enrolled in course',
            'progress': ProgressSummarySerializer(progress).data,
        }, status=status.HTTP_200_OK)


class CourseProgressView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request, course_id):
        progress = ProgressService().get_progress(request.user, course_id)
        return Response(ProgressDetailSerializer(progress).data)


class LessonProgressView(APIView):
    """
    POST {"completed": true, "time_spent": 15}
    """
    permission_classes = [IsAuthenticated, IsStudent]

    def post(self, request, course_id, lesson_id):
        serializer = LessonProgressUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        progress = ProgressService().update_lesson_progress(
            request.user, course_id, lesson_id,
            serializer.validated_data['completed'], serializer.validated_data['time_spent']
        )
        return Response(ProgressDetailSerializer(progress).data)


class VideoProgressView(APIView):
    """
    POST {"watched_percentage": 95}
    """
    permission_classes = [IsAuthenticated, IsStudent]

    def post(self, request, course_id, lesson_id):
        serializer = VideoProgressUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        progress = ProgressService().update_video_progress(
            request.user, course_id, lesson_id, serializer.validated_data['watched_percentage']
        )
        return Response(ProgressDetailSerializer(progress).data)


class QuizSubmitView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def post(self, request, course_id):
        serializer = QuizSubmissionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        attempt = ProgressService().submit_quiz(
            request.user, course_id, data['quiz_id'], data['answers'], data['time_spent']
        )
        return Response({
            'score': attempt.score,
            'correct_answers': attempt.correct_answers,
            'total_questions': attempt.total_questions,
            'passed': attempt.passed,
            'message': 'Congratulations! You passed the quiz!' if attempt.passed else 'Keep studying and try again!',
            'attempt': QuizAttemptSerializer(attempt).data,
        })


class LessonReviewSubmitView(APIView):
    """
    Mark a lesson completed and hand it in for instructor review.
    """
    permission_classes = [IsAuthenticated, IsStudent]

    def post(self, request, course_id, lesson_id):
        serializer = LessonReviewSubmissionSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        service = ProgressService()
        if data['video_progress']:
            service.update_video_progress(request.user, course_id, lesson_id, data['video_progress'])
        progress = service.update_lesson_progress(request.user, course_id, lesson_id, True, data['time_spent'])

        logger.info(
            f"Lesson {lesson_id} submitted for review by {request.user.email} "
            f"(time spent {data['time_spent']} min, video {data['video_progress']}%)"
        )
        return Response({
            'message': 'Lesson submitted for review successfully',
            'status': 'PENDING',
            'progress': ProgressDetailSerializer(progress).data,
        })


class RecommendationsView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request):
        user = request.user
        completed_titles = [progress.course.title for progress in ProgressService().completed_courses(user)]
        interests = user.expertise or "General Learning"
        recommendations = GeminiCourseService().generate_recommendations(
            interests, user.estimated_iq, completed_titles
        )
        return Response({
            'recommendations': recommendations,
            'interests': interests,
        })


class StudentAssignmentsView(APIView):
    """
    Published assignments of every enrolled course, grouped by course.
    """
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request):
        submission_service = SubmissionService()
        completed_ids = set(submission_service.completed_assignment_ids(request.user))
        assignment_service = AssignmentService()

        groups = []
        for progress in ProgressService().student_progress(request.user):
            assignments = assignment_service.published_assignments_for_courses([progress.course])
            items = []
            for assignment in assignments:
                item = StudentAssignmentSerializer(assignment).data
                item['attempts_used'] = submission_service.attempt_count(request.user, assignment.id)
                item['completed'] = assignment.id in completed_ids
                items.append(item)
            groups.append({
                'course_id': str(progress.course.id),
                'course_title': progress.course.title,
                'assignments': items,
            })

        return Response({'assignments': groups})


class StudentSubmissionsView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request):
        submissions = list(SubmissionService().student_submissions(request.user))
        return Response({
            'submissions': SubmissionSerializer(submissions, many=True).data,
            'total_submissions': len(submissions),
            'passed_submissions': sum(1 for submission in submissions if submission.passed),
        })


class AssignmentSubmissionsView(APIView):
    permission_classes = [IsAuthenticated, IsStudent]

    def get(self, request, assignment_id):
        service = SubmissionService()
        service.get_assignment(assignment_id)
        history = service.submission_history(request.user, assignment_id)
        return Response({
            'submissions': SubmissionSerializer(history, many=True).data,
            'attempt_count': service.attempt_count(request.user, assignment_id),
            'has_passed_assignment': service.has_passed(request.user, assignment_id),
        })
