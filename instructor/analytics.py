"""
Aggregate figures for instructor dashboards and admin reports.
"""
from django.db.models import Avg, Count, Q

from student.progress_service import ProgressService


def teaching_summary(courses):
    """
    Totals across a set of courses; the average rating ignores unrated courses.
    """
    courses = list(courses)
    rated = [course.average_rating for course in courses if course.average_rating > 0]
    return {
        'total_courses': len(courses),
        'published_courses': sum(1 for course in courses if course.published),
        'total_enrollments': sum(course.total_enrollments for course in courses),
        'average_rating': sum(rated) / len(rated) if rated else 0.0,
    }


def course_analytics(course):
    progress = ProgressService().course_progress(course)
    stats = progress.aggregate(
        students=Count('id'),
        completed=Count('id', filter=Q(completed=True)),
        average_completion=Avg('completion_percentage'),
        average_time=Avg('total_time_spent_minutes'),
        average_quiz=Avg('average_quiz_score', filter=Q(total_quiz_attempts__gt=0)),
    )

    students = stats['students']
    return {
        'course_id': str(course.id),
        'course_title': course.title,
        'total_enrollments': course.total_enrollments,
        'completed_students': stats['completed'],
        'completion_rate': round(stats['completed'] * 100 / students, 2) if students else 0.0,
        'average_completion_percentage': round(stats['average_completion'] or 0.0, 2),
        'average_time_spent_minutes': round(stats['average_time'] or 0.0, 2),
        'average_quiz_score': round(stats['average_quiz'] or 0.0, 2),
        'course_rating': course.average_rating,
        'total_reviews': course.reviews.count(),
    }
