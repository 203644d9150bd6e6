from django.urls import path
from . import views

app_name = 'assignments'

urlpatterns = [
    path('', views.AssignmentCreateView.as_view(), name='assignment_create'),
    path('course/<uuid:course_id>/', views.CourseAssignmentsView.as_view(), name='course_assignments'),
    path('generate/', views.generate_assignment, name='assignment_generate'),
    path('generate-with-codeforces/', views.generate_assignment_with_codeforces, name='assignment_generate_codeforces'),
    path('codeforces-problems/', views.codeforces_problems, name='codeforces_problems'),
    path('create-skipped/', views.create_skipped_assignment, name='assignment_create_skipped'),
    path('instructor/my-assignments/', views.my_assignments, name='my_assignments'),
    path('<uuid:assignment_id>/', views.AssignmentDetailView.as_view(), name='assignment_detail'),
    path('<uuid:assignment_id>/publish/', views.publish_assignment, name='assignment_publish'),
    path('<uuid:assignment_id>/unpublish/', views.unpublish_assignment, name='assignment_unpublish'),
    path('<uuid:assignment_id>/submit/', views.submit_assignment, name='assignment_submit'),
]
