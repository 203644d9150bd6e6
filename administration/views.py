import logging

from django.db.models import Count
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.exceptions import NotFound, InvalidInput
from courses.models import Course
from courses.serializers import CourseListSerializer, CourseDetailSerializer
from courses.services import CourseService
from instructor.analytics import teaching_summary, course_analytics
from users.models import User
from users.permissions import IsAdminRole
from users.serializers import UserSerializer, AdminUserUpdateSerializer

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


def _get_user(user_id):
    user = User.objects.filter(id=user_id).first()
    if user is None:
        raise NotFound("User not found")
    return user


def _role_counts():
    counts = dict(User.objects.order_by().values_list('role').annotate(total=Count('id')))
    return {
        'total_users': sum(counts.values()),
        'total_students': counts.get(User.Role.STUDENT, 0),
        'total_instructors': counts.get(User.Role.INSTRUCTOR, 0),
        'total_admins': counts.get(User.Role.ADMIN, 0),
    }


def _distribution(field):
    rows = Course.objects.exclude(**{field: ''}).order_by().values_list(field).annotate(total=Count('id'))
    return dict(rows)


class AdminDashboardView(APIView):
    """
    Platform totals with the most recent courses and sign-ups.
    """
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request):
        stats = _role_counts()
        stats.pop('total_admins')
        stats['total_courses'] = Course.objects.count()
        stats['published_courses'] = Course.objects.filter(published=True).count()

        recent_courses = Course.objects.select_related('instructor').order_by('-created_at')[:RECENT_LIMIT]
        recent_users = User.objects.order_by('-created_at')[:RECENT_LIMIT]
        return Response({
            'stats': stats,
            'recent_courses': CourseListSerializer(recent_courses, many=True).data,
            'recent_users': UserSerializer(recent_users, many=True).data,
        })


class AdminUserListView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request):
        return Response(UserSerializer(User.objects.all(), many=True).data)


class AdminUserDetailView(APIView):
    """
    GET: one account
    PUT: change name, role, active flag or profile
    DELETE: remove the account
    """
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request, user_id):
        return Response(UserSerializer(_get_user(user_id)).data)

    def put(self, request, user_id):
        user = _get_user(user_id)
        serializer = AdminUserUpdateSerializer(user, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        user = serializer.save()
        logger.info(f"User {user.email} updated by admin {request.user.email}: {list(request.data.keys())}")
        return Response(UserSerializer(user).data)

    def delete(self, request, user_id):
        user = _get_user(user_id)
        email = user.email
        user.delete()
        logger.info(f"User {email} deleted by admin {request.user.email}")
        return Response({'message': 'User deleted successfully'})


class AdminUsersByRoleView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request, role):
        role = role.lower()
        if role not in User.Role.values:
            raise InvalidInput(f"Invalid role: {role}")
        return Response(UserSerializer(User.objects.filter(role=role), many=True).data)


class AdminCourseListView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request):
        courses = Course.objects.select_related('instructor').all()
        return Response(CourseListSerializer(courses, many=True).data)


class AdminCourseDetailView(APIView):
    """
    Any course, published or not; admins bypass the ownership rules.
    """
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request, course_id):
        return Response(CourseDetailSerializer(CourseService().get_course(course_id)).data)

    def delete(self, request, course_id):
        CourseService().delete_course(course_id, request.user)
        return Response({'message': 'Course deleted successfully'})


class AdminCoursePublishView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def post(self, request, course_id):
        course = CourseService().publish_course(course_id, request.user)
        return Response({'message': 'Course published successfully', 'course': CourseListSerializer(course).data})


class AdminCourseUnpublishView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def post(self, request, course_id):
        course = CourseService().unpublish_course(course_id, request.user)
        return Response({'message': 'Course unpublished successfully', 'course': CourseListSerializer(course).data})


class SystemAnalyticsView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request):
        return Response({
            'user_stats': _role_counts(),
            'course_stats': teaching_summary(Course.objects.all()),
            'category_distribution': _distribution('category'),
            'difficulty_distribution': _distribution('difficulty'),
        })


class UserActivityReportView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request):
        users = User.objects.annotate(
            enrolled_count=Count('enrolled_courses', distinct=True),
            created_count=Count('courses', distinct=True),
        )
        activity = [
            {
                'user_id': user.id,
                'email': user.email,
                'full_name': user.get_full_name(),
                'role': user.role,
                'enrolled_courses': user.enrolled_count,
                'created_courses': user.created_count,
                'last_login_at': user.last_login_at,
                'active': user.is_active,
            }
            for user in users
        ]
        return Response({'user_activity': activity})


class CoursePerformanceReportView(APIView):
    permission_classes = [IsAuthenticated, IsAdminRole]

    def get(self, request):
        performance = []
        for course in Course.objects.select_related('instructor'):
            entry = course_analytics(course)
            entry.update({
                'instructor': course.instructor_name,
                'category': course.category or 'Uncategorized',
                'difficulty': course.difficulty,
                'published': course.published,
                'created_at': course.created_at,
            })
            performance.append(entry)
        return Response({'course_performance': performance})
