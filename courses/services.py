"""
Course and lesson business rules.

Views pass in validated field dicts and the requesting user; ownership and
lifecycle rules are enforced here and reported with backend.exceptions.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import Q, F, Value
from django.db.models.functions import Greatest

from ai.gemini_course_service import GeminiCourseService
from ai.gemini_quiz_service import GeminiQuizService
from backend.exceptions import NotFound, Unauthorized, InvalidInput
from .models import Course, Lesson, CourseReview, Quiz

logger = logging.getLogger(__name__)

YOUTUBE_URL_PATTERN = re.compile(
    r"^(https?://)?(www\.)?(youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([a-zA-Z0-9_-]{11}).*$"
)

COURSE_UPDATABLE_FIELDS = (
    'title', 'description', 'category', 'difficulty', 'estimated_hours', 'outline', 'video_url',
)
LESSON_UPDATABLE_FIELDS = (
    'title', 'content', 'notes', 'video_url', 'video_title', 'video_description',
    'video_embedded', 'order', 'duration_minutes', 'type',
)


def extract_youtube_id(url: Optional[str]) -> Optional[str]:
    if not url or not url.strip():
        return None
    match = YOUTUBE_URL_PATTERN.match(url.strip())
    return match.group(4) if match else None


def is_valid_youtube_url(url: Optional[str]) -> bool:
    return extract_youtube_id(url) is not None


def normalize_youtube_url(url: Optional[str]) -> str:
    """
    Return the embed form of a YouTube link; blank input gives ''.

    Raises InvalidInput for anything that is not a recognised YouTube link.
    """
    if not url or not url.strip():
        return ''
    video_id = extract_youtube_id(url)
    if video_id is None:
        raise InvalidInput("Invalid YouTube URL format")
    return f"https://www.youtube.com/embed/{video_id}"


def is_owner(course: Course, user) -> bool:
    return user.is_platform_admin or course.instructor_id == user.id


class CourseService:
    """
    Course lifecycle: authoring, publishing, enrollment, reviews and AI content.
    """

    def __init__(self, course_ai=None, quiz_ai=None):
        self.course_ai = course_ai or GeminiCourseService()
        self.quiz_ai = quiz_ai or GeminiQuizService()

    # Queries

    def get_course(self, course_id) -> Course:
        course = Course.objects.select_related('instructor').filter(id=course_id).first()
        if course is None:
            raise NotFound("Course not found")
        return course

    def get_owned_course(self, course_id, user, action: str) -> Course:
        course = self.get_course(course_id)
        if not is_owner(course, user):
            logger.warning(f"User {user.email} tried to {action} course {course_id} they do not own")
            raise Unauthorized(f"Unauthorized to {action} this course")
        return course

    def published_courses(self):
        return Course.objects.filter(published=True).select_related('instructor')

    def instructor_courses(self, instructor):
        return Course.objects.filter(instructor=instructor)

    def search_courses(self, query: str):
        return self.published_courses().filter(
            Q(title__icontains=query) | Q(description__icontains=query)
        )

    def courses_by_category(self, category: str):
        return self.published_courses().filter(category__iexact=category)

    def courses_by_difficulty(self, difficulty: str):
        difficulty = difficulty.upper()
        if difficulty not in dict(Course.DIFFICULTY_CHOICES):
            raise InvalidInput(f"Invalid difficulty: {difficulty}")
        return self.published_courses().filter(difficulty=difficulty)

    # Authoring

    def create_course(self, instructor, data: Dict[str, Any]) -> Course:
        if not (instructor.is_instructor or instructor.is_platform_admin):
            raise Unauthorized("Invalid instructor")
        course = Course.objects.create(instructor=instructor, **data)
        logger.info(f"Course '{course.title}' ({course.id}) created by {instructor.email}")
        return course

    def update_course(self, course_id, user, data: Dict[str, Any]) -> Course:
        course = self.get_owned_course(course_id, user, 'update')
        for field in COURSE_UPDATABLE_FIELDS:
            if field in data and data[field] is not None:
                setattr(course, field, data[field])
        course.save()
        return course

    def publish_course(self, course_id, user) -> Course:
        course = self.get_owned_course(course_id, user, 'publish')
        course.published = True
        course.save(update_fields=['published', 'updated_at'])
        logger.info(f"Course {course.id} published by {user.email}")
        return course

    def unpublish_course(self, course_id, user) -> Course:
        course = self.get_owned_course(course_id, user, 'unpublish')
        course.published = False
        course.save(update_fields=['published', 'updated_at'])
        logger.info(f"Course {course.id} unpublished by {user.email}")
        return course

    def delete_course(self, course_id, user) -> None:
        course = self.get_owned_course(course_id, user, 'delete')
        logger.info(f"Course {course.id} deleted by {user.email}")
        course.delete()

    # Enrollment and reviews

    def enroll_student(self, course_id, student) -> Course:
        course = self.get_course(course_id)
        if not course.published:
            raise InvalidInput("Cannot enroll in unpublished course")

        if not course.enrolled_students.filter(id=student.id).exists():
            course.enrolled_students.add(student)
            Course.objects.filter(id=course.id).update(total_enrollments=F('total_enrollments') + 1)
            course.refresh_from_db(fields=['total_enrollments'])
            logger.info(f"Student {student.email} enrolled in course {course.id}")
        return course

    def unenroll_student(self, course_id, student) -> Course:
        course = self.get_course(course_id)
        if course.enrolled_students.filter(id=student.id).exists():
            course.enrolled_students.remove(student)
            Course.objects.filter(id=course.id).update(
                total_enrollments=Greatest(F('total_enrollments') - 1, Value(0))
            )
            course.refresh_from_db(fields=['total_enrollments'])
            logger.info(f"Student {student.email} unenrolled from course {course.id}")
        return course

    def is_enrolled(self, course: Course, student) -> bool:
        return course.enrolled_students.filter(id=student.id).exists()

    @transaction.atomic
    def add_review(self, course_id, student, rating: int, comment: str = '') -> CourseReview:
        course = self.get_course(course_id)
        if not self.is_enrolled(course, student):
            raise InvalidInput("Student not enrolled in this course")
        if not 1 <= rating <= 5:
            raise InvalidInput("Rating must be between 1 and 5")

        review = CourseReview.objects.create(course=course, student=student, rating=rating, comment=comment or '')
        course.recalculate_average_rating()
        course.save(update_fields=['average_rating', 'updated_at'])
        logger.info(f"Review {rating}/5 added to course {course.id} by {student.email}")
        return review

    # AI content

    def generate_course_summary(self, course_id, user) -> Course:
        course = self.get_owned_course(course_id, user, 'generate summary for')
        lessons = [(lesson.title, lesson.content) for lesson in course.lessons.all()]
        course.summary = self.course_ai.generate_course_summary(
            course.title, course.description, course.outline, lessons
        )
        course.save(update_fields=['summary', 'updated_at'])
        return course

    def generate_course_quiz(self, course_id, user, number_of_questions: int = 5) -> Quiz:
        course = self.get_owned_course(course_id, user, 'generate a quiz for')
        content = "\n".join(
            f"{lesson.title}: {lesson.content}" for lesson in course.lessons.all()
        ) or course.description
        data = self.quiz_ai.generate_quiz(course.title, content, number_of_questions)
        quiz = Quiz.objects.create(
            course=course,
            title=data['title'],
            description=f"Quiz for {course.title}",
            topic=data['topic'],
            questions=data['questions'],
            time_limit=data['time_limit'],
            passing_score=data['passing_score'],
            ai_generated=data['ai_generated'],
        )
        logger.info(f"Quiz {quiz.id} with {quiz.question_count} questions created for course {course.id}")
        return quiz

    def get_course_quiz(self, course_id) -> Quiz:
        course = self.get_course(course_id)
        quiz = course.quizzes.order_by('-created_at').first()
        if quiz is None:
            raise NotFound("No quiz available for this course")
        return quiz


class LessonService:
    """
    Ordered lesson management inside a course.
    """

    def __init__(self, course_ai=None, course_service: Optional[CourseService] = None):
        self.course_ai = course_ai or GeminiCourseService()
        self.courses = course_service or CourseService(course_ai=self.course_ai)

    def list_lessons(self, course_id) -> List[Lesson]:
        course = self.courses.get_course(course_id)
        return list(course.lessons.order_by('order', 'created_at'))

    def get_lesson(self, course_id, lesson_id) -> Lesson:
        lesson = Lesson.objects.select_related('course').filter(course_id=course_id, id=lesson_id).first()
        if lesson is None:
            # distinguish a missing course from a missing lesson
            self.courses.get_course(course_id)
            raise NotFound("Lesson not found")
        return lesson

    def _get_owned_lesson(self, course_id, lesson_id, user, action: str) -> Lesson:
        self.courses.get_owned_course(course_id, user, action)
        return self.get_lesson(course_id, lesson_id)

    def add_lesson(self, course_id, user, data: Dict[str, Any]) -> Lesson:
        course = self.courses.get_owned_course(course_id, user, 'add lessons to')
        data = dict(data)
        if not data.get('order'):
            data['order'] = course.lessons.count() + 1
        if data.get('video_url'):
            data['video_url'] = normalize_youtube_url(data['video_url'])

        lesson = Lesson.objects.create(course=course, **data)
        logger.info(f"Lesson '{lesson.title}' added to course {course.id} at position {lesson.order}")
        return lesson

    def update_lesson(self, course_id, lesson_id, user, data: Dict[str, Any]) -> Lesson:
        lesson = self._get_owned_lesson(course_id, lesson_id, user, 'update lessons of')
        for field in LESSON_UPDATABLE_FIELDS:
            if field in data and data[field] is not None:
                value = data[field]
                if field == 'video_url':
                    value = normalize_youtube_url(value)
                setattr(lesson, field, value)
        lesson.save()
        return lesson

    def delete_lesson(self, course_id, lesson_id, user) -> None:
        lesson = self._get_owned_lesson(course_id, lesson_id, user, 'delete lessons of')
        lesson.delete()
        logger.info(f"Lesson {lesson_id} deleted from course {course_id}")

    @transaction.atomic
    def reorder_lessons(self, course_id, user, lesson_ids: List[str]) -> List[Lesson]:
        course = self.courses.get_owned_course(course_id, user, 'reorder lessons of')
        lessons = {str(lesson.id): lesson for lesson in course.lessons.all()}

        requested = [str(lesson_id) for lesson_id in lesson_ids]
        if len(requested) != len(set(requested)) or set(requested) != set(lessons):
            raise InvalidInput("Lesson ids must list every lesson of the course exactly once")

        reordered = []
        for position, lesson_id in enumerate(requested, start=1):
            lesson = lessons[lesson_id]
            lesson.order = position
            lesson.save(update_fields=['order', 'updated_at'])
            reordered.append(lesson)
        return reordered

    def update_notes(self, course_id, lesson_id, user, notes: str) -> Lesson:
        lesson = self._get_owned_lesson(course_id, lesson_id, user, 'edit notes of')
        lesson.notes = notes
        lesson.save(update_fields=['notes', 'updated_at'])
        return lesson

    def generate_notes(self, course_id, lesson_id, user) -> Lesson:
        lesson = self._get_owned_lesson(course_id, lesson_id, user, 'generate notes for')
        course = lesson.course
        lesson.notes = self.course_ai.generate_lesson_notes(
            lesson.title, lesson.content, course.title, course.difficulty
        )
        lesson.save(update_fields=['notes', 'updated_at'])
        return lesson

    def regenerate_notes(self, course_id, lesson_id, user) -> Lesson:
        lesson = self._get_owned_lesson(course_id, lesson_id, user, 'regenerate notes for')
        course = lesson.course
        lesson.notes = self.course_ai.regenerate_lesson_notes(
            lesson.title, lesson.content, course.title, course.difficulty, lesson.notes
        )
        lesson.save(update_fields=['notes', 'updated_at'])
        return lesson
