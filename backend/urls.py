"""
URL configuration for backend project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/4.2/topics/http/urls/
"""
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse

urlpatterns = [
    path("django-admin/", admin.site.urls),

    # API endpoints
    path("api/auth/", include('authentication.urls')),
    path("api/users/", include('users.urls')),
    path("api/courses/", include('courses.urls')),
    path("api/assignments/", include('assignments.urls')),
    path("api/student/", include('student.urls')),
    path("api/instructor/", include('instructor.urls')),
    path("api/admin/", include('administration.urls')),
    path("api/ai/", include('ai.urls')),

    # Health check endpoint
    path("health/", lambda request: JsonResponse({"status": "ok"})),

    path("", lambda request: JsonResponse({
        "message": "Learning Platform API",
        "status": "running",
    })),
]
