from django.urls import path
from . import views

app_name = 'courses'

urlpatterns = [
    # Catalogue
    path('public/', views.PublicCourseListView.as_view(), name='public_courses'),
    path('search/', views.CourseSearchView.as_view(), name='course_search'),
    path('category/<str:category>/', views.CourseCategoryView.as_view(), name='courses_by_category'),
    path('difficulty/<str:difficulty>/', views.CourseDifficultyView.as_view(), name='courses_by_difficulty'),
    path('validate-youtube-url/', views.validate_youtube_url, name='validate_youtube_url'),

    # Course CRUD
    path('', views.CourseListCreateView.as_view(), name='course_list_create'),
    path('<uuid:course_id>/', views.CourseDetailView.as_view(), name='course_detail'),
    path('<uuid:course_id>/publish/', views.publish_course, name='course_publish'),
    path('<uuid:course_id>/unpublish/', views.unpublish_course, name='course_unpublish'),

    # Enrollment and reviews
    path('<uuid:course_id>/enroll/', views.enroll_course, name='course_enroll'),
    path('<uuid:course_id>/unenroll/', views.unenroll_course, name='course_unenroll'),
    path('<uuid:course_id>/review/', views.review_course, name='course_review'),

    # AI content
    path('<uuid:course_id>/generate-summary/', views.generate_course_summary, name='course_generate_summary'),
    path('<uuid:course_id>/generate-quiz/', views.generate_course_quiz, name='course_generate_quiz'),
    path('<uuid:course_id>/quiz/', views.CourseQuizView.as_view(), name='course_quiz'),

    # Lessons
    path('<uuid:course_id>/lessons/', views.LessonListCreateView.as_view(), name='lesson_list_create'),
    path('<uuid:course_id>/lessons/reorder/', views.reorder_lessons, name='lesson_reorder'),
    path('<uuid:course_id>/lessons/<uuid:lesson_id>/', views.LessonDetailView.as_view(), name='lesson_detail'),
    path('<uuid:course_id>/lessons/<uuid:lesson_id>/notes/', views.update_lesson_notes, name='lesson_notes'),
    path('<uuid:course_id>/lessons/<uuid:lesson_id>/generate-notes/', views.generate_lesson_notes, name='lesson_generate_notes'),
    path('<uuid:course_id>/lessons/<uuid:lesson_id>/regenerate-notes/', views.regenerate_lesson_notes, name='lesson_regenerate_notes'),
]
