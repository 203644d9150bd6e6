from django.urls import path
from . import views

app_name = 'student'

urlpatterns = [
    path('dashboard/', views.StudentDashboardView.as_view(), name='dashboard'),
    path('courses/', views.EnrolledCoursesView.as_view(), name='enrolled_courses'),
    path('courses/<uuid:course_id>/enroll/', views.CourseEnrollView.as_view(), name='course_enroll'),
    path('courses/<uuid:course_id>/progress/', views.CourseProgressView.as_view(), name='course_progress'),
    path('courses/<uuid:course_id>/lessons/<uuid:lesson_id>/progress/', views.LessonProgressView.as_view(), name='lesson_progress'),
    path('courses/<uuid:course_id>/lessons/<uuid:lesson_id>/video-progress/', views.VideoProgressView.as_view(), name='video_progress'),
    path('courses/<uuid:course_id>/lessons/<uuid:lesson_id>/submit-review/', views.LessonReviewSubmitView.as_view(), name='lesson_submit_review'),
    path('courses/<uuid:course_id>/quiz/submit/', views.QuizSubmitView.as_view(), name='quiz_submit'),
    path('recommendations/', views.RecommendationsView.as_view(), name='recommendations'),
    path('assignments/', views.StudentAssignmentsView.as_view(), name='assignments'),
    path('assignments/<uuid:assignment_id>/submissions/', views.AssignmentSubmissionsView.as_view(), name='assignment_submissions'),
    path('submissions/', views.StudentSubmissionsView.as_view(), name='submissions'),
]
