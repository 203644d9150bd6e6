import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from users.permissions import IsInstructor
from .codeforces_service import CodeforcesService
from .gemini_quiz_service import GeminiQuizService
from .serializers import VideoSearchSerializer, CodeforcesProblemQuerySerializer, QuizGenerationSerializer
from .youtube_service import YouTubeService

logger = logging.getLogger(__name__)


class VideoSearchView(APIView):
    """
    Search educational videos for a topic.

    GET /api/ai/videos/search/?query=python+loops&max_results=5

    Always answers 200; when YouTube is unavailable the videos carry
    "source": "fallback".
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        serializer = VideoSearchSerializer(data=request.query_params)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        query = serializer.validated_data['query']
        videos = YouTubeService().search_videos(query, serializer.validated_data['max_results'])
        return Response({
            'query': query,
            'count': len(videos),
            'videos': videos,
        }, status=status.HTTP_200_OK)


class CodeforcesProblemsView(APIView):
    """
    List Codeforces practice problems filtered by difficulty band and topic.

    GET /api/ai/codeforces/problems/?difficulty=EASY&topic=arrays&limit=10
    """
    permission_classes = [IsAuthenticated, IsInstructor]

    def get(self, request):
        serializer = CodeforcesProblemQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        problems = CodeforcesService().get_problems_by_difficulty(
            data['difficulty'] or None, data['topic'] or None, data['limit']
        )
        return Response({
            'count': len(problems),
            'problems': problems,
        }, status=status.HTTP_200_OK)


class QuizGenerationView(APIView):
    """
    Generate a multiple-choice quiz for any topic without persisting it.

    POST /api/ai/quiz/generate/
    {"topic": "Recursion", "content": "...", "number_of_questions": 5}
    """
    permission_classes = [IsAuthenticated, IsInstructor]

    def post(self, request):
        serializer = QuizGenerationSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        quiz = GeminiQuizService().generate_quiz(data['topic'], data['content'], data['number_of_questions'])
        logger.info(f"Generated quiz '{quiz['title']}' for {request.user.email}")
        return Response(quiz, status=status.HTTP_200_OK)
