import hashlib
from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from .codeforces_service import (
    CodeforcesService, matches_difficulty, parse_problems_response, tags_for_topic, build_fallback_problems
)
from .exceptions import ExternalServiceFailure
from .gemini_assignment_service import GeminiAssignmentService
from .gemini_course_service import GeminiCourseService, parse_recommendations
from .gemini_quiz_service import GeminiQuizService, parse_quiz_response
from .gemini_service import GeminiService, parse_json_response
from .youtube_service import YouTubeService, parse_search_response

User = get_user_model()

QUIZ_TEXT = (
    "Q1: What does len() return?\n"
    "A) The type\n"
    "B) The length\n"
    "C) The id\n"
    "D) Nothing\n"
    "Correct: B\n"
    "Explanation: len returns the number of items.\n"
    "\n"
    "Q2: Which keyword defines a function?\n"
    "A) def\n"
    "B) func\n"
    "C) lambda\n"
    "D) fn\n"
    "Correct: A\n"
    "Explanation: def starts a function definition."
)


class FailingGenerator:
    def generate(self, prompt, system_instruction=None, temperature=0.7):
        raise ExternalServiceFailure('gemini', 'unavailable')

    def generate_json(self, prompt, system_instruction=None, temperature=0.7):
        raise ExternalServiceFailure('gemini', 'unavailable')


class StaticGenerator:
    def __init__(self, text=None, data=None):
        self.text = text
        self.data = data

    def generate(self, prompt, system_instruction=None, temperature=0.7):
        return self.text

    def generate_json(self, prompt, system_instruction=None, temperature=0.7):
        return self.data


class QuizGenerationTest(TestCase):

    def test_parse_quiz_response(self):
        questions = parse_quiz_response(QUIZ_TEXT)

        self.assertEqual(len(questions), 2)
        self.assertEqual(questions[0]['question_text'], 'What does len() return?')
        self.assertEqual(questions[0]['options'][1], 'The length')
        self.assertEqual(questions[0]['correct_answer_index'], 1)
        self.assertEqual(questions[1]['correct_answer_index'], 0)
        self.assertEqual(questions[1]['explanation'], 'def starts a function definition.')

    def test_unparseable_response_falls_back(self):
        quiz = GeminiQuizService(generator=StaticGenerator(text="Sorry, I can't help with that.")).generate_quiz('Loops', '', 3)

        self.assertEqual(len(quiz['questions']), 3)
        self.assertEqual(quiz['questions'][0]['question_text'], 'What is a key concept in Loops?')

    def test_failure_falls_back_to_at_most_five(self):
        quiz = GeminiQuizService(generator=FailingGenerator()).generate_quiz('Loops', '', 12)

        self.assertEqual(len(quiz['questions']), 5)
        self.assertEqual(quiz['time_limit'], 30)
        self.assertEqual(quiz['passing_score'], 70)

    def test_generated_quiz(self):
        quiz = GeminiQuizService(generator=StaticGenerator(text=QUIZ_TEXT)).generate_quiz('Python', 'basics', 2)
        self.assertEqual(quiz['title'], 'Python Quiz')
        self.assertEqual(len(quiz['questions']), 2)


class CourseContentTest(TestCase):

    def test_parse_recommendations(self):
        text = "Here you go:\n1. Python for Data Analysis\n2. Statistics 101\n3.Machine Learning Basics"
        self.assertEqual(
            parse_recommendations(text),
            ['Python for Data Analysis', 'Statistics 101', 'Machine Learning Basics']
        )

    def test_recommendations_fall_back_when_nothing_parses(self):
        service = GeminiCourseService(generator=StaticGenerator(text='No list here'))
        recommendations = service.generate_recommendations('Rust', None, [])
        self.assertEqual(recommendations[0], 'Introduction to Rust')

    def test_summary_strips_whitespace(self):
        service = GeminiCourseService(generator=StaticGenerator(text='  A concise summary.\n'))
        self.assertEqual(service.generate_course_summary('Course', 'Desc'), 'A concise summary.')

    @override_settings(GCP_PROJECT_ID='test-project')
    @mock.patch.object(GeminiService, '_ensure_initialized')
    @mock.patch.object(GeminiService, '_call_model', side_effect=RuntimeError('grpc channel closed'))
    def test_unexpected_model_error_falls_back(self, mock_call, mock_init):
        summary = GeminiCourseService().generate_course_summary('Python Basics', 'Learn Python', lessons=[('Intro', '')])

        self.assertEqual(summary, 'Python Basics: Learn Python\n\nThis course covers 1 lessons: Intro.')
        mock_call.assert_called_once()

    @override_settings(GCP_PROJECT_ID='test-project')
    @mock.patch.object(GeminiService, '_ensure_initialized')
    @mock.patch.object(GeminiService, '_call_model', side_effect=RuntimeError('grpc channel closed'))
    def test_unexpected_model_error_is_wrapped(self, mock_call, mock_init):
        with self.assertRaises(ExternalServiceFailure):
            GeminiService().generate('Summarize this')


class JsonResponseTest(TestCase):

    def test_fenced_json(self):
        self.assertEqual(parse_json_response('```json\n{"title": "X"}\n```'), {'title': 'X'})
        self.assertEqual(parse_json_response('```\n[1, 2]\n```'), [1, 2])

    def test_invalid_json(self):
        with self.assertRaises(ExternalServiceFailure):
            parse_json_response('not json')

    def test_assignment_fields(self):
        data = {
            'title': 'Palindrome Check',
            'problemStatement': 'Return true if s is a palindrome.',
            'examples': [{'input': 'aba', 'output': 'true'}],
            'testCases': [{'input': 'ab', 'expectedOutput': 'false', 'isHidden': True}],
            'starterCode': 'def solve(s):\n    pass',
        }
        fields = GeminiAssignmentService(generator=StaticGenerator(data=data)).generate_coding_assignment(
            'Strings', 'palindromes', 'EASY', 'python'
        )

        self.assertEqual(fields['title'], 'Palindrome Check')
        self.assertEqual(fields['examples'][0]['explanation'], '')
        self.assertEqual(fields['test_cases'][0], {'input': 'ab', 'expected_output': 'false', 'is_hidden': True})

    def test_assignment_without_statement_is_rejected(self):
        service = GeminiAssignmentService(generator=StaticGenerator(data={'title': 'Only a title'}))
        with self.assertRaises(ExternalServiceFailure):
            service.generate_coding_assignment('Strings', 'palindromes', 'EASY', 'python')


class YouTubeServiceTest(TestCase):

    payload = {
        'items': [
            {
                'id': {'videoId': 'abcdefghijk'},
                'snippet': {
                    'title': 'Python Loops',
                    'description': 'for and while',
                    'channelTitle': 'Teach',
                    'thumbnails': {'medium': {'url': 'https://img/1.jpg'}},
                },
            },
            {'id': {'channelId': 'UC123'}, 'snippet': {'title': 'A channel'}},
        ]
    }

    def test_parse_search_response(self):
        videos = parse_search_response(self.payload)

        self.assertEqual(len(videos), 1)
        self.assertEqual(videos[0]['embed_url'], 'https://www.youtube.com/embed/abcdefghijk')
        self.assertEqual(videos[0]['thumbnail_url'], 'https://img/1.jpg')
        self.assertEqual(videos[0]['source'], 'youtube')

    @mock.patch('ai.youtube_service.requests.get')
    def test_search(self, mock_get):
        mock_get.return_value.json.return_value = self.payload

        videos = YouTubeService(api_key='key', base_url='https://yt.test').search_videos('python loops', 3)

        self.assertEqual(videos[0]['title'], 'Python Loops')
        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs['params']['q'], 'python loops')
        self.assertEqual(kwargs['params']['maxResults'], 3)

    @mock.patch('ai.youtube_service.requests.get', side_effect=requests.Timeout('slow'))
    def test_search_falls_back(self, mock_get):
        videos = YouTubeService(api_key='key').search_videos('recursion', 3)

        self.assertEqual(len(videos), 3)
        self.assertTrue(all(video['source'] == 'fallback' for video in videos))

    @mock.patch('ai.youtube_service.requests.get')
    def test_missing_key_skips_request(self, mock_get):
        videos = YouTubeService(api_key='').search_videos('recursion', 2)

        self.assertEqual(len(videos), 2)
        mock_get.assert_not_called()


class CodeforcesServiceTest(TestCase):

    def test_difficulty_windows(self):
        self.assertTrue(matches_difficulty(800, 'EASY'))
        self.assertTrue(matches_difficulty(1200, 'EASY'))
        self.assertFalse(matches_difficulty(1300, 'EASY'))
        self.assertTrue(matches_difficulty(1400, 'intermediate'))
        self.assertTrue(matches_difficulty(3000, 'EXPERT'))
        self.assertFalse(matches_difficulty(None, 'HARD'))
        self.assertTrue(matches_difficulty(None, 'UNKNOWN'))
        self.assertTrue(matches_difficulty(None, None))

    def test_topic_tags(self):
        self.assertEqual(tags_for_topic('Sorting algorithms'), ['sortings'])
        self.assertEqual(tags_for_topic('Dynamic programming on graphs'), ['graphs', 'dp'])
        self.assertEqual(tags_for_topic(None), [])

    def test_parse_filters_and_limits(self):
        payload = {
            'status': 'OK',
            'result': {
                'problems': [
                    {'contestId': 1, 'index': 'A', 'name': 'Easy', 'type': 'PROGRAMMING', 'rating': 900, 'tags': ['math']},
                    {'contestId': 2, 'index': 'B', 'name': 'Hard', 'type': 'PROGRAMMING', 'rating': 1900, 'tags': []},
                    {'contestId': 3, 'index': 'C', 'name': 'Unrated', 'type': 'PROGRAMMING', 'tags': []},
                    {'contestId': 4, 'index': 'A', 'name': 'Easy 2', 'type': 'PROGRAMMING', 'rating': 1100, 'tags': []},
                    {'contestId': 5, 'index': 'A', 'name': 'Easy 3', 'type': 'PROGRAMMING', 'rating': 1000, 'tags': []},
                ],
                'problemStatistics': [{'contestId': 1, 'index': 'A', 'solvedCount': 5000}],
            },
        }
        problems = parse_problems_response(payload, 'EASY', 2)

        self.assertEqual([p['name'] for p in problems], ['Easy', 'Easy 2'])
        self.assertEqual(problems[0]['solved_count'], 5000)
        self.assertEqual(problems[1]['solved_count'], 0)
        self.assertEqual(problems[0]['url'], 'https://codeforces.com/problemset/problem/1/A')

    def test_error_status(self):
        with self.assertRaises(ExternalServiceFailure):
            parse_problems_response({'status': 'FAILED', 'comment': 'limit exceeded'}, 'EASY', 5)

    def test_fallback_problems(self):
        problems = build_fallback_problems('MEDIUM', 10)
        self.assertEqual(len(problems), 5)
        self.assertEqual(problems[0]['rating'], 1400)
        self.assertEqual(problems[0]['name'], 'Sample Problem 1 (MEDIUM)')

    @mock.patch('ai.codeforces_service.requests.get', side_effect=requests.ConnectionError('offline'))
    def test_fetch_failure_falls_back(self, mock_get):
        problems = CodeforcesService(api_url='https://cf.test').get_problems_by_difficulty('HARD', 'graphs', 2)
        self.assertEqual(len(problems), 2)
        self.assertEqual(problems[0]['rating'], 1800)

    def test_sign_params(self):
        service = CodeforcesService(api_key='key123', api_secret='secret456')
        signed = service.sign_params('contest.list', {'gym': 'false'}, now=1700000000, rand='123456')

        expected = hashlib.sha512(
            b'123456/contest.list?apiKey=key123&gym=false&time=1700000000#secret456'
        ).hexdigest()
        self.assertEqual(signed['apiKey'], 'key123')
        self.assertEqual(signed['time'], '1700000000')
        self.assertEqual(signed['apiSig'], '123456' + expected)

    @mock.patch('ai.codeforces_service.requests.get')
    def test_user_info(self, mock_get):
        mock_get.return_value.json.return_value = {
            'status': 'OK',
            'result': [{'handle': 'tourist', 'rating': 3800, 'maxRating': 4000, 'rank': 'legendary grandmaster'}],
        }
        info = CodeforcesService(api_key='', api_secret='').get_user_info('tourist')

        self.assertEqual(info['handle'], 'tourist')
        self.assertEqual(info['max_rating'], 4000)


@override_settings(GCP_PROJECT_ID=None, YOUTUBE_API_KEY='')
class AIEndpointsTestCase(APITestCase):

    def setUp(self):
        self.instructor = User.objects.create_user(
            firebase_uid='test_teacher_firebase_uid',
            email='teacher@test.com',
            username='teacher@test.com',
            password='testpass123',
            role=User.Role.INSTRUCTOR
        )
        self.student = User.objects.create_user(
            firebase_uid='test_student_firebase_uid',
            email='student@test.com',
            username='student@test.com',
            password='testpass123',
            role=User.Role.STUDENT
        )

    def test_video_search_fallback(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get('/api/ai/videos/search/?query=python&max_results=2')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['videos'][0]['source'], 'fallback')

    def test_video_search_requires_query(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get('/api/ai/videos/search/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quiz_generation(self):
        self.client.force_authenticate(user=self.instructor)
        response = self.client.post('/api/ai/quiz/generate/', {'topic': 'Recursion', 'number_of_questions': 2}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['questions']), 2)

    def test_quiz_generation_instructors_only(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.post('/api/ai/quiz/generate/', {'topic': 'Recursion'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
