from django.contrib import admin
from .models import Course, Lesson, CourseReview, Quiz


class LessonInline(admin.TabularInline):
    model = Lesson
    extra = 0
    fields = ['order', 'title', 'type', 'duration_minutes', 'video_url']
    ordering = ['order']


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ['title', 'instructor', 'category', 'difficulty', 'published', 'total_enrollments', 'average_rating', 'created_at']
    list_filter = ['published', 'difficulty', 'category', 'created_at']
    search_fields = ['title', 'description', 'instructor__email', 'instructor__first_name', 'instructor__last_name']
    readonly_fields = ['id', 'created_at', 'updated_at', 'total_enrollments', 'average_rating']
    filter_horizontal = ['enrolled_students']
    inlines = [LessonInline]
    actions = ['publish_courses', 'unpublish_courses']

    def publish_courses(self, request, queryset):
        updated = queryset.update(published=True)
        self.message_user(request, f'{updated} courses were published.')
    publish_courses.short_description = "Publish selected courses"

    def unpublish_courses(self, request, queryset):
        updated = queryset.update(published=False)
        self.message_user(request, f'{updated} courses were unpublished.')
    unpublish_courses.short_description = "Unpublish selected courses"

    fieldsets = (
        ('Basic Information', {
            'fields': ('title', 'description', 'instructor', 'category', 'difficulty', 'estimated_hours')
        }),
        ('Content', {
            'fields': ('outline', 'summary', 'video_url')
        }),
        ('Enrollment', {
            'fields': ('published', 'enrolled_students', 'total_enrollments', 'average_rating')
        }),
        ('Metadata', {
            'fields': ('id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Lesson)
class LessonAdmin(admin.ModelAdmin):
    list_display = ['title', 'course', 'order', 'type', 'duration_minutes', 'created_at']
    list_filter = ['type', 'course__category', 'created_at']
    search_fields = ['title', 'content', 'course__title']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(CourseReview)
class CourseReviewAdmin(admin.ModelAdmin):
    list_display = ['course', 'student', 'rating', 'created_at']
    list_filter = ['rating', 'created_at']
    search_fields = ['course__title', 'student__email', 'comment']


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ['title', 'course', 'question_count', 'passing_score', 'ai_generated', 'created_at']
    list_filter = ['ai_generated', 'created_at']
    search_fields = ['title', 'topic', 'course__title']
