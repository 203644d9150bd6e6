"""
GeminiQuizService - multiple-choice quiz generation

The model is asked for a fixed plain-text layout which is parsed with a
regular expression. When the call fails or nothing parses, a generic quiz is
built locally so callers always receive questions.

Usage:
    from ai.gemini_quiz_service import GeminiQuizService

    quiz = GeminiQuizService().generate_quiz(
        topic="Python Basics",
        content="Variables, loops and functions...",
        number_of_questions=5
    )
"""
import logging
import re
import uuid
from typing import Any, Dict, List

from .exceptions import ExternalServiceFailure
from .gemini_service import GeminiService
from .prompts import build_quiz_prompt

logger = logging.getLogger(__name__)

QUIZ_PASSING_SCORE = 70
QUIZ_TIME_LIMIT = 30
FALLBACK_MAX_QUESTIONS = 5

QUESTION_PATTERN = re.compile(
    r"Q\d+:\s*(.+?)\n"
    r"A\)\s*(.+?)\n"
    r"B\)\s*(.+?)\n"
    r"C\)\s*(.+?)\n"
    r"D\)\s*(.+?)\n"
    r"Correct:\s*([ABCD])\n"
    r"Explanation:\s*(.+?)(?=\n\n|\nQ\d+|$)",
    re.DOTALL
)


def parse_quiz_response(response: str) -> List[Dict[str, Any]]:
    """
    Extract questions from text in the "Q1: / A) .. D) / Correct: / Explanation:" layout.

    Blocks that do not match the layout are skipped.
    """
    questions = []
    for match in QUESTION_PATTERN.finditer(response):
        questions.append({
            'id': str(uuid.uuid4()),
            'question_text': match.group(1).strip(),
            'options': [match.group(i).strip() for i in range(2, 6)],
            'correct_answer_index': "ABCD".index(match.group(6).strip()),
            'explanation': match.group(7).strip(),
            'points': 1,
        })
    return questions


def build_fallback_quiz(topic: str, number_of_questions: int) -> Dict[str, Any]:
    questions = []
    for _ in range(min(number_of_questions, FALLBACK_MAX_QUESTIONS)):
        questions.append({
            'id': str(uuid.uuid4()),
            'question_text': f"What is a key concept in {topic}?",
            'options': [
                "Fundamental principles and best practices",
                "Advanced theoretical frameworks",
                "Basic terminology and definitions",
                "Practical applications and examples",
            ],
            'correct_answer_index': 0,
            'explanation': f"Understanding fundamental principles is essential for mastering {topic}.",
            'points': 1,
        })

    return {
        'title': f"{topic} Quiz",
        'topic': topic,
        'questions': questions,
        'time_limit': QUIZ_TIME_LIMIT,
        'passing_score': QUIZ_PASSING_SCORE,
        'ai_generated': True,
    }


class GeminiQuizService:
    """
    Quiz generation on top of a content generator (GeminiService by default).
    """

    def __init__(self, generator=None):
        self.generator = generator or GeminiService()

    def generate_quiz(self, topic: str, content: str, number_of_questions: int = 5) -> Dict[str, Any]:
        prompt = build_quiz_prompt(topic, content or topic, number_of_questions)
        try:
            response = self.generator.generate(prompt)
        except ExternalServiceFailure as e:
            logger.warning(f"Quiz generation failed for '{topic}', using fallback: {e}")
            return build_fallback_quiz(topic, number_of_questions)

        questions = parse_quiz_response(response)
        if not questions:
            logger.warning(f"No questions parsed from AI response for '{topic}', using fallback")
            return build_fallback_quiz(topic, number_of_questions)

        logger.info(f"Generated {len(questions)} quiz questions for '{topic}'")
        return {
            'title': f"{topic} Quiz",
            'topic': topic,
            'questions': questions,
            'time_limit': QUIZ_TIME_LIMIT,
            'passing_score': QUIZ_PASSING_SCORE,
            'ai_generated': True,
        }
