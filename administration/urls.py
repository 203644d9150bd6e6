from django.urls import path
from . import views

app_name = 'administration'

urlpatterns = [
    path('dashboard/', views.AdminDashboardView.as_view(), name='dashboard'),
    path('users/', views.AdminUserListView.as_view(), name='users'),
    path('users/role/<str:role>/', views.AdminUsersByRoleView.as_view(), name='users_by_role'),
    path('users/<int:user_id>/', views.AdminUserDetailView.as_view(), name='user_detail'),
    path('courses/', views.AdminCourseListView.as_view(), name='courses'),
    path('courses/<uuid:course_id>/', views.AdminCourseDetailView.as_view(), name='course_detail'),
    path('courses/<uuid:course_id>/publish/', views.AdminCoursePublishView.as_view(), name='publish_course'),
    path('courses/<uuid:course_id>/unpublish/', views.AdminCourseUnpublishView.as_view(), name='unpublish_course'),
    path('analytics/', views.SystemAnalyticsView.as_view(), name='analytics'),
    path('reports/user-activity/', views.UserActivityReportView.as_view(), name='user_activity_report'),
    path('reports/course-performance/', views.CoursePerformanceReportView.as_view(), name='course_performance_report'),
]
