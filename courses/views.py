import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.exceptions import NotFound
from student.progress_service import ProgressService
from users.permissions import IsInstructor, IsStudent
from .serializers import (
    CourseListSerializer, CourseDetailSerializer, CourseCreateUpdateSerializer,
    CourseReviewSerializer, CourseReviewCreateSerializer,
    LessonSerializer, LessonCreateUpdateSerializer, LessonReorderSerializer, LessonNotesSerializer,
    YouTubeUrlSerializer, QuizSerializer, StudentQuizSerializer, QuizGenerateRequestSerializer
)
from .services import CourseService, LessonService, is_owner, extract_youtube_id, normalize_youtube_url

logger = logging.getLogger(__name__)


def _can_view(course, user):
    return course.published or (user.is_authenticated and is_owner(course, user))


# ===== COURSE CATALOGUE =====

class PublicCourseListView(APIView):
    """
    Published courses, newest first. No authentication required.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        courses = CourseService().published_courses()
        return Response(CourseListSerializer(courses, many=True).data)


class CourseSearchView(APIView):
    permission_classes = [AllowAny]

    def get(self, request):
        query = request.query_params.get('q', '').strip()
        if not query:
            return Response({'error': 'Search query is required'}, status=status.HTTP_400_BAD_REQUEST)
        courses = CourseService().search_courses(query)
        return Response(CourseListSerializer(courses, many=True).data)


class CourseCategoryView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, category):
        courses = CourseService().courses_by_category(category)
        return Response(CourseListSerializer(courses, many=True).data)


class CourseDifficultyView(APIView):
    permission_classes = [AllowAny]

    def get(self, request, difficulty):
        courses = CourseService().courses_by_difficulty(difficulty)
        return Response(CourseListSerializer(courses, many=True).data)


# ===== COURSE CRUD =====

class CourseListCreateView(APIView):
    """
    GET: courses owned by the requesting instructor
    POST: create a new (unpublished) course
    """
    permission_classes = [IsAuthenticated, IsInstructor]

    def get(self, request):
        courses = CourseService().instructor_courses(request.user)
        return Response(CourseListSerializer(courses, many=True).data)

    def post(self, request):
        serializer = CourseCreateUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        course = CourseService().create_course(request.user, serializer.validated_data)
        return Response(CourseDetailSerializer(course).data, status=status.HTTP_201_CREATED)


class CourseDetailView(APIView):
    """
    GET: course with lessons and reviews (unpublished courses only for their owner)
    PUT: partial update by the owner
    DELETE: remove the course and everything attached to it
    """

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAuthenticated(), IsInstructor()]

    def get(self, request, course_id):
        course = CourseService().get_course(course_id)
        if not _can_view(course, request.user):
            raise NotFound("Course not found")
        return Response(CourseDetailSerializer(course).data)

    def put(self, request, course_id):
        serializer = CourseCreateUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        course = CourseService().update_course(course_id, request.user, serializer.validated_data)
        return Response(CourseDetailSerializer(course).data)

    def delete(self, request, course_id):
        CourseService().delete_course(course_id, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsInstructor])
def publish_course(request, course_id):
    course = CourseService().publish_course(course_id, request.user)
    return Response({'message': 'Course published successfully', 'id': str(course.id), 'published': True})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsInstructor])
def unpublish_course(request, course_id):
    course = CourseService().unpublish_course(course_id, request.user)
    return Response({'message': 'Course unpublished successfully', 'id': str(course.id), 'published': False})


# ===== ENROLLMENT AND REVIEWS =====

@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStudent])
def enroll_course(request, course_id):
    progress = ProgressService().enroll_student(course_id, request.user)
    return Response({
        'message': 'Enrolled successfully',
        'course_id': str(course_id),
        'progress_id': str(progress.id),
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStudent])
def unenroll_course(request, course_id):
    CourseService().unenroll_student(course_id, request.user)
    return Response({'message': 'Unenrolled successfully', 'course_id': str(course_id)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStudent])
def review_course(request, course_id):
    serializer = CourseReviewCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    review = CourseService().add_review(
        course_id, request.user, serializer.validated_data['rating'], serializer.validated_data['comment']
    )
    return Response({
        'review': CourseReviewSerializer(review).data,
        'average_rating': review.course.average_rating,
    }, status=status.HTTP_201_CREATED)


# ===== AI CONTENT =====

@api_view(['POST'])
@permission_classes([IsAuthenticated, IsInstructor])
def generate_course_summary(request, course_id):
    course = CourseService().generate_course_summary(course_id, request.user)
    return Response({'id': str(course.id), 'summary': course.summary})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsInstructor])
def generate_course_quiz(request, course_id):
    serializer = QuizGenerateRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    quiz = CourseService().generate_course_quiz(
        course_id, request.user, serializer.validated_data['number_of_questions']
    )
    return Response(QuizSerializer(quiz).data, status=status.HTTP_201_CREATED)


class CourseQuizView(APIView):
    """
    Latest quiz of a course. Owners receive answer keys; everyone else does not.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, course_id):
        service = CourseService()
        course = service.get_course(course_id)
        if not _can_view(course, request.user):
            raise NotFound("Course not found")

        quiz = service.get_course_quiz(course_id)
        if is_owner(course, request.user):
            return Response(QuizSerializer(quiz).data)
        return Response(StudentQuizSerializer(quiz).data)


# ===== LESSONS =====

class LessonListCreateView(APIView):
    """
    GET: ordered lessons of a course
    POST: add a lesson (owner only); order defaults to the end of the course
    """

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAuthenticated(), IsInstructor()]

    def get(self, request, course_id):
        course = CourseService().get_course(course_id)
        if not _can_view(course, request.user):
            raise NotFound("Course not found")
        lessons = LessonService().list_lessons(course_id)
        return Response(LessonSerializer(lessons, many=True).data)

    def post(self, request, course_id):
        serializer = LessonCreateUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        lesson = LessonService().add_lesson(course_id, request.user, serializer.validated_data)
        return Response(LessonSerializer(lesson).data, status=status.HTTP_201_CREATED)


class LessonDetailView(APIView):

    def get_permissions(self):
        if self.request.method == 'GET':
            return [AllowAny()]
        return [IsAuthenticated(), IsInstructor()]

    def get(self, request, course_id, lesson_id):
        lesson = LessonService().get_lesson(course_id, lesson_id)
        if not _can_view(lesson.course, request.user):
            raise NotFound("Course not found")
        return Response(LessonSerializer(lesson).data)

    def put(self, request, course_id, lesson_id):
        serializer = LessonCreateUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        lesson = LessonService().update_lesson(course_id, lesson_id, request.user, serializer.validated_data)
        return Response(LessonSerializer(lesson).data)

    def delete(self, request, course_id, lesson_id):
        LessonService().delete_lesson(course_id, lesson_id, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsInstructor])
def reorder_lessons(request, course_id):
    serializer = LessonReorderSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    lessons = LessonService().reorder_lessons(course_id, request.user, serializer.validated_data['lesson_ids'])
    return Response(LessonSerializer(lessons, many=True).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsInstructor])
def update_lesson_notes(request, course_id, lesson_id):
    serializer = LessonNotesSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    lesson = LessonService().update_notes(course_id, lesson_id, request.user, serializer.validated_data['notes'])
    return Response({'id': str(lesson.id), 'notes': lesson.notes})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsInstructor])
def generate_lesson_notes(request, course_id, lesson_id):
    lesson = LessonService().generate_notes(course_id, lesson_id, request.user)
    return Response({'id': str(lesson.id), 'notes': lesson.notes})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsInstructor])
def regenerate_lesson_notes(request, course_id, lesson_id):
    lesson = LessonService().regenerate_notes(course_id, lesson_id, request.user)
    return Response({'id': str(lesson.id), 'notes': lesson.notes})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def validate_youtube_url(request):
    """
    Check a YouTube link and return its video id and embed URL.
    """
    serializer = YouTubeUrlSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    url = serializer.validated_data['url']
    video_id = extract_youtube_id(url)
    if video_id is None:
        return Response({'valid': False, 'error': 'Invalid YouTube URL format'}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'valid': True,
        'video_id': video_id,
        'embed_url': normalize_youtube_url(url),
    })
