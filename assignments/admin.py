from django.contrib import admin
from .models import Assignment, Submission


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ['title', 'course', 'type', 'difficulty', 'source', 'points', 'max_attempts', 'published', 'created_at']
    list_filter = ['type', 'difficulty', 'source', 'published', 'ai_generated']
    search_fields = ['title', 'description', 'course__title', 'instructor__email']
    readonly_fields = ['id', 'created_at', 'updated_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('title', 'description', 'course', 'instructor', 'type', 'difficulty', 'source')
        }),
        ('Problem', {
            'fields': ('problem_statement', 'constraints', 'examples', 'test_cases', 'starter_code',
                       'solution', 'programming_language')
        }),
        ('Rules', {
            'fields': ('time_limit', 'max_attempts', 'points', 'due_date', 'published', 'ai_generated')
        }),
        ('Metadata', {
            'fields': ('id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ['assignment', 'student', 'attempt_number', 'score', 'max_score', 'passed', 'status', 'submitted_at']
    list_filter = ['status', 'passed', 'submitted_at']
    search_fields = ['assignment__title', 'student__email']
    readonly_fields = ['id', 'submitted_at', 'graded_at', 'attempt_number', 'test_results']
