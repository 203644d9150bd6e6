from django.contrib import admin
from .models import Progress, LessonProgress, QuizAttempt


class LessonProgressInline(admin.TabularInline):
    model = LessonProgress
    extra = 0
    readonly_fields = ['lesson', 'completed', 'started_at', 'completed_at', 'time_spent_minutes', 'watched_percentage']


class QuizAttemptInline(admin.TabularInline):
    model = QuizAttempt
    extra = 0
    readonly_fields = ['quiz', 'attempted_at', 'score', 'total_questions', 'correct_answers', 'passed']
    exclude = ['answers']


@admin.register(Progress)
class ProgressAdmin(admin.ModelAdmin):
    list_display = ['student', 'course', 'completion_percentage', 'completed', 'average_quiz_score', 'last_accessed_at']
    list_filter = ['completed', 'enrolled_at']
    search_fields = ['student__email', 'course__title']
    readonly_fields = ['id', 'enrolled_at', 'completed_at', 'completion_percentage', 'average_quiz_score']
    inlines = [LessonProgressInline, QuizAttemptInline]
