from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from ai.exceptions import ExternalServiceFailure
from ai.gemini_course_service import GeminiCourseService
from ai.gemini_quiz_service import GeminiQuizService
from backend.exceptions import InvalidInput, NotFound, Unauthorized
from .models import Course, Lesson, Quiz
from .services import CourseService, LessonService, extract_youtube_id, normalize_youtube_url

User = get_user_model()


def make_user(name, role):
    return User.objects.create_user(
        firebase_uid=f'test_{name}_firebase_uid',
        email=f'{name}@test.com',
        username=f'{name}@test.com',
        password='testpass123',
        first_name=name.title(),
        role=role
    )


class FailingGenerator:
    def generate(self, prompt, system_instruction=None, temperature=0.7):
        raise ExternalServiceFailure('gemini', 'unavailable')


class StaticGenerator:
    def __init__(self, text):
        self.text = text

    def generate(self, prompt, system_instruction=None, temperature=0.7):
        return self.text


def offline_course_service():
    generator = FailingGenerator()
    return CourseService(
        course_ai=GeminiCourseService(generator=generator),
        quiz_ai=GeminiQuizService(generator=generator)
    )


class YouTubeUrlTest(TestCase):

    def test_accepted_forms(self):
        for url in [
            'https://www.youtube.com/watch?v=dQw4w9WgXcQ',
            'youtube.com/watch?v=dQw4w9WgXcQ&t=42',
            'https://youtu.be/dQw4w9WgXcQ',
            'http://www.youtube.com/embed/dQw4w9WgXcQ',
        ]:
            self.assertEqual(extract_youtube_id(url), 'dQw4w9WgXcQ', url)
            self.assertEqual(normalize_youtube_url(url), 'https://www.youtube.com/embed/dQw4w9WgXcQ')

    def test_blank_url(self):
        self.assertEqual(normalize_youtube_url(''), '')
        self.assertEqual(normalize_youtube_url(None), '')

    def test_rejected_forms(self):
        self.assertIsNone(extract_youtube_id('https://vimeo.com/123456'))
        self.assertIsNone(extract_youtube_id('https://youtu.be/short'))
        with self.assertRaises(InvalidInput):
            normalize_youtube_url('https://example.com/watch?v=dQw4w9WgXcQ')


class CourseServiceTest(TestCase):

    def setUp(self):
        self.instructor = make_user('teacher', User.Role.INSTRUCTOR)
        self.other_instructor = make_user('other', User.Role.INSTRUCTOR)
        self.admin = make_user('admin', User.Role.ADMIN)
        self.student = make_user('student', User.Role.STUDENT)
        self.course = Course.objects.create(
            title='Python Basics',
            description='Variables and loops',
            instructor=self.instructor,
            category='Programming',
            published=True
        )
        self.service = offline_course_service()

    def test_students_cannot_create_courses(self):
        with self.assertRaises(Unauthorized):
            self.service.create_course(self.student, {'title': 'Nope'})

    def test_only_owner_or_admin_publishes(self):
        draft = self.service.create_course(self.instructor, {'title': 'Draft'})
        self.assertFalse(draft.published)

        with self.assertRaises(Unauthorized):
            self.service.publish_course(draft.id, self.other_instructor)

        self.assertTrue(self.service.publish_course(draft.id, self.admin).published)
        self.assertFalse(self.service.unpublish_course(draft.id, self.instructor).published)

    def test_enrollment_is_idempotent(self):
        self.service.enroll_student(self.course.id, self.student)
        course = self.service.enroll_student(self.course.id, self.student)

        self.assertEqual(course.total_enrollments, 1)
        self.assertTrue(self.service.is_enrolled(course, self.student))

    def test_cannot_enroll_in_unpublished_course(self):
        draft = Course.objects.create(title='Draft', instructor=self.instructor)
        with self.assertRaises(InvalidInput):
            self.service.enroll_student(draft.id, self.student)
        self.assertEqual(draft.enrolled_students.count(), 0)

    def test_unenroll_floors_at_zero(self):
        self.service.enroll_student(self.course.id, self.student)
        Course.objects.filter(id=self.course.id).update(total_enrollments=0)

        course = self.service.unenroll_student(self.course.id, self.student)
        self.assertEqual(course.total_enrollments, 0)
        self.assertFalse(self.service.is_enrolled(course, self.student))

    def test_unenroll_decrements_stored_count(self):
        self.service.enroll_student(self.course.id, self.student)
        Course.objects.filter(id=self.course.id).update(total_enrollments=5)

        course = self.service.unenroll_student(self.course.id, self.student)
        self.assertEqual(course.total_enrollments, 4)
        self.course.refresh_from_db()
        self.assertEqual(self.course.total_enrollments, 4)

    def test_review_requires_enrollment(self):
        with self.assertRaises(InvalidInput):
            self.service.add_review(self.course.id, self.student, 5)

    def test_average_rating_over_all_reviews(self):
        self.service.enroll_student(self.course.id, self.student)
        self.service.add_review(self.course.id, self.student, 5, 'Great')
        self.service.add_review(self.course.id, self.student, 2, 'Changed my mind')

        self.course.refresh_from_db()
        self.assertEqual(self.course.average_rating, 3.5)

    def test_review_rating_range(self):
        self.service.enroll_student(self.course.id, self.student)
        with self.assertRaises(InvalidInput):
            self.service.add_review(self.course.id, self.student, 6)

    def test_search_and_filters_only_published(self):
        Course.objects.create(title='Python Advanced', instructor=self.instructor, category='Programming')

        self.assertEqual([c.title for c in self.service.search_courses('python')], ['Python Basics'])
        self.assertEqual([c.title for c in self.service.search_courses('loops')], ['Python Basics'])
        self.assertEqual(self.service.courses_by_category('programming').count(), 1)
        self.assertEqual(self.service.courses_by_difficulty('beginner').count(), 1)
        with self.assertRaises(InvalidInput):
            self.service.courses_by_difficulty('impossible')

    def test_summary_falls_back(self):
        Lesson.objects.create(course=self.course, title='Loops', order=1)

        course = self.service.generate_course_summary(self.course.id, self.instructor)
        self.assertIn('Python Basics', course.summary)
        self.assertIn('Loops', course.summary)

    def test_quiz_falls_back_and_is_persisted(self):
        quiz = self.service.generate_course_quiz(self.course.id, self.instructor, 8)

        self.assertEqual(quiz.question_count, 5)
        self.assertEqual(quiz.passing_score, 70)
        self.assertEqual(quiz.time_limit, 30)
        self.assertEqual(self.service.get_course_quiz(self.course.id), quiz)

    def test_missing_quiz(self):
        with self.assertRaises(NotFound):
            self.service.get_course_quiz(self.course.id)


class LessonServiceTest(TestCase):

    def setUp(self):
        self.instructor = make_user('teacher', User.Role.INSTRUCTOR)
        self.other_instructor = make_user('other', User.Role.INSTRUCTOR)
        self.course = Course.objects.create(title='Python Basics', instructor=self.instructor)
        self.service = LessonService(course_ai=GeminiCourseService(generator=FailingGenerator()))

    def test_lessons_append_in_order(self):
        first = self.service.add_lesson(self.course.id, self.instructor, {'title': 'Intro'})
        second = self.service.add_lesson(self.course.id, self.instructor, {
            'title': 'Loops',
            'video_url': 'https://youtu.be/dQw4w9WgXcQ',
        })

        self.assertEqual(first.order, 1)
        self.assertEqual(second.order, 2)
        self.assertEqual(second.video_url, 'https://www.youtube.com/embed/dQw4w9WgXcQ')

    def test_invalid_video_url_rejected(self):
        with self.assertRaises(InvalidInput):
            self.service.add_lesson(self.course.id, self.instructor, {
                'title': 'Loops',
                'video_url': 'https://vimeo.com/1',
            })
        self.assertFalse(Lesson.objects.exists())

    def test_reorder(self):
        a = self.service.add_lesson(self.course.id, self.instructor, {'title': 'A'})
        b = self.service.add_lesson(self.course.id, self.instructor, {'title': 'B'})
        c = self.service.add_lesson(self.course.id, self.instructor, {'title': 'C'})

        self.service.reorder_lessons(self.course.id, self.instructor, [c.id, a.id, b.id])
        titles = [lesson.title for lesson in self.service.list_lessons(self.course.id)]
        self.assertEqual(titles, ['C', 'A', 'B'])

    def test_reorder_requires_every_lesson_once(self):
        a = self.service.add_lesson(self.course.id, self.instructor, {'title': 'A'})
        b = self.service.add_lesson(self.course.id, self.instructor, {'title': 'B'})

        with self.assertRaises(InvalidInput):
            self.service.reorder_lessons(self.course.id, self.instructor, [a.id])
        with self.assertRaises(InvalidInput):
            self.service.reorder_lessons(self.course.id, self.instructor, [a.id, a.id])

        b.refresh_from_db()
        self.assertEqual(b.order, 2)

    def test_foreign_instructor_cannot_edit(self):
        lesson = self.service.add_lesson(self.course.id, self.instructor, {'title': 'A'})
        with self.assertRaises(Unauthorized):
            self.service.update_lesson(self.course.id, lesson.id, self.other_instructor, {'title': 'B'})
        with self.assertRaises(Unauthorized):
            self.service.delete_lesson(self.course.id, lesson.id, self.other_instructor)

    def test_notes_fall_back_to_html(self):
        lesson = self.service.add_lesson(self.course.id, self.instructor, {'title': 'Loops', 'content': 'for and while'})

        lesson = self.service.generate_notes(self.course.id, lesson.id, self.instructor)
        self.assertIn('<h2>Loops</h2>', lesson.notes)
        self.assertIn('for and while', lesson.notes)

    def test_regenerate_uses_generator(self):
        service = LessonService(course_ai=GeminiCourseService(generator=StaticGenerator('<p>Fresh notes</p>')))
        lesson = service.add_lesson(self.course.id, self.instructor, {'title': 'Loops', 'notes': '<p>Old</p>'})

        lesson = service.regenerate_notes(self.course.id, lesson.id, self.instructor)
        self.assertEqual(lesson.notes, '<p>Fresh notes</p>')


@override_settings(GCP_PROJECT_ID=None)
class CourseAPITestCase(APITestCase):
    """
    HTTP tests for the course endpoints
    """

    def setUp(self):
        self.instructor = make_user('teacher', User.Role.INSTRUCTOR)
        self.other_instructor = make_user('other', User.Role.INSTRUCTOR)
        self.student = make_user('student', User.Role.STUDENT)
        self.course = Course.objects.create(
            title='Python Basics',
            description='Variables and loops',
            instructor=self.instructor,
            published=True
        )
        self.draft = Course.objects.create(title='Secret Draft', instructor=self.instructor)

    def test_public_listing_without_authentication(self):
        response = self.client.get('/api/courses/public/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['title'] for c in response.data], ['Python Basics'])

    def test_search_requires_query(self):
        response = self.client.get('/api/courses/search/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get('/api/courses/search/?q=loops')
        self.assertEqual(len(response.data), 1)

    def test_draft_hidden_from_others(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get(f'/api/courses/{self.draft.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

        self.client.force_authenticate(user=self.instructor)
        response = self.client.get(f'/api/courses/{self.draft.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_create_course(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.post('/api/courses/', {
            'title': 'Django 101',
            'difficulty': 'INTERMEDIATE',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['published'])
        self.assertEqual(Course.objects.get(title='Django 101').instructor, self.instructor)

    def test_student_cannot_create_course(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post('/api/courses/', {'title': 'Mine'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_by_other_instructor(self):
        self.client.force_authenticate(user=self.other_instructor)
        response = self.client.put(f'/api/courses/{self.course.id}/', {'title': 'Taken'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Unauthorized to update this course')

    def test_publish(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.post(f'/api/courses/{self.draft.id}/publish/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.draft.refresh_from_db()
        self.assertTrue(self.draft.published)

    def test_enroll_and_review(self):
        self.client.force_authenticate(user=self.student)

        response = self.client.post(f'/api/courses/{self.course.id}/enroll/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('progress_id', response.data)

        response = self.client.post(f'/api/courses/{self.course.id}/review/', {'rating': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['average_rating'], 4.0)

    def test_enroll_in_draft(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post(f'/api/courses/{self.draft.id}/enroll/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot enroll in unpublished course')

    def test_review_without_enrollment(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post(f'/api/courses/{self.course.id}/review/', {'rating': 4}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quiz_hides_answers_from_students(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.post(f'/api/courses/{self.course.id}/generate-quiz/', {'number_of_questions': 3}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('correct_answer_index', response.data['questions'][0])

        self.client.force_authenticate(user=self.student)
        response = self.client.get(f'/api/courses/{self.course.id}/quiz/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['questions']), 3)
        self.assertNotIn('correct_answer_index', response.data['questions'][0])

    def test_lesson_crud(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.post(f'/api/courses/{self.course.id}/lessons/', {
            'title': 'Loops',
            'video_url': 'https://www.youtube.com/watch?v=dQw4w9WgXcQ',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        lesson_id = response.data['id']

        response = self.client.put(f'/api/courses/{self.course.id}/lessons/{lesson_id}/', {'title': 'While loops'}, format='json')
        self.assertEqual(response.data['title'], 'While loops')

        response = self.client.get(f'/api/courses/{self.course.id}/lessons/')
        self.assertEqual(len(response.data), 1)

        response = self.client.delete(f'/api/courses/{self.course.id}/lessons/{lesson_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Lesson.objects.exists())

    def test_reorder_endpoint_rejects_partial_list(self):
        a = Lesson.objects.create(course=self.course, title='A', order=1)
        Lesson.objects.create(course=self.course, title='B', order=2)

        self.client.force_authenticate(user=self.instructor)
        response = self.client.post(f'/api/courses/{self.course.id}/lessons/reorder/', {'lesson_ids': [str(a.id)]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_validate_youtube_url(self):
        self.client.force_authenticate(user=self.student)

        response = self.client.post('/api/courses/validate-youtube-url/', {'url': 'https://youtu.be/dQw4w9WgXcQ'}, format='json')
        self.assertTrue(response.data['valid'])
        self.assertEqual(response.data['video_id'], 'dQw4w9WgXcQ')

        response = self.client.post('/api/courses/validate-youtube-url/', {'url': 'not a link'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['valid'])

    def test_delete_course(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.delete(f'/api/courses/{self.draft.id}/')

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Course.objects.filter(id=self.draft.id).exists())
        self.assertFalse(Quiz.objects.exists())
