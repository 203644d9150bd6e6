from django.urls import path
from . import views

app_name = 'instructor'

urlpatterns = [
    path('dashboard/', views.InstructorDashboardView.as_view(), name='dashboard'),
    path('stats/', views.InstructorStatsView.as_view(), name='stats'),
    path('courses/', views.InstructorCoursesView.as_view(), name='courses'),
    path('courses/<uuid:course_id>/students/', views.CourseStudentsView.as_view(), name='course_students'),
    path('courses/<uuid:course_id>/analytics/', views.CourseAnalyticsView.as_view(), name='course_analytics'),
    path('students/', views.InstructorStudentsView.as_view(), name='students'),
    path('submissions/pending/', views.PendingSubmissionsView.as_view(), name='pending_submissions'),
    path('submissions/<uuid:submission_id>/grade/', views.GradeSubmissionView.as_view(), name='grade_submission'),
]
