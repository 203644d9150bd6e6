"""
GeminiCourseService - course summaries, lesson notes and course recommendations.

Every method returns usable content: generator failures are logged and
replaced with locally built text.
"""
import logging
import re
from typing import List, Optional

from .exceptions import ExternalServiceFailure
from .gemini_service import GeminiService
from .prompts import (
    build_summary_prompt, build_lesson_notes_prompt, build_regeneration_prompt,
    build_recommendation_prompt, LESSON_NOTES_SYSTEM_INSTRUCTION
)

logger = logging.getLogger(__name__)

RECOMMENDATION_PATTERN = re.compile(r"\d+\.\s*(.+)")


def parse_recommendations(response: str) -> List[str]:
    return [match.group(1).strip() for match in RECOMMENDATION_PATTERN.finditer(response)]


def build_fallback_summary(title: str, description: str, lesson_titles: List[str]) -> str:
    summary = f"{title}: {description}".strip()
    if lesson_titles:
        summary += f"\n\nThis course covers {len(lesson_titles)} lessons: {', '.join(lesson_titles)}."
    return summary


def build_fallback_lesson_notes(lesson_title: str, lesson_content: Optional[str], course_title: str, difficulty: str) -> str:
    topic = lesson_title.lower()
    overview = lesson_content or f"This lesson covers important concepts in {topic}"
    return (
        f"<h2>{lesson_title}</h2>\n\n"
        f"<h3>Lesson Overview</h3>\n<p>{overview}</p>\n\n"
        "<h3>Learning Objectives</h3>\n<ul>\n"
        f"<li>Understand the key concepts of {topic}</li>\n"
        "<li>Apply the knowledge in practical scenarios</li>\n"
        "<li>Build confidence in using these concepts</li>\n"
        "</ul>\n\n"
        "<h3>Key Topics Covered</h3>\n"
        f"<p>This lesson will cover the fundamental aspects of {topic} as part of the {course_title} course. "
        f"The content is designed for {difficulty.lower()} level learners.</p>\n\n"
        "<h3>Practice Exercises</h3>\n"
        "<p>After completing this lesson, you should practice the concepts through hands-on exercises and examples.</p>"
    )


def build_fallback_recommendations(interests: str) -> List[str]:
    return [
        f"Introduction to {interests}",
        f"{interests} Fundamentals",
        f"Practical {interests} Projects",
        f"Intermediate {interests}",
        f"Advanced {interests} Concepts",
    ]


class GeminiCourseService:

    def __init__(self, generator=None):
        self.generator = generator or GeminiService()

    def generate_course_summary(self, title: str, description: str, outline: str = '',
                                lessons: Optional[List[tuple]] = None) -> str:
        """
        Summarize a course from its title, description, outline and (title, content) lesson pairs.
        """
        lessons = lessons or []
        content = f"Course Title: {title}\nDescription: {description}\n"
        if outline:
            content += f"Outline: {outline}\n"
        if lessons:
            content += "Lessons:\n"
            for lesson_title, lesson_content in lessons:
                content += f"- {lesson_title}: {lesson_content}\n"

        try:
            return self.generator.generate(build_summary_prompt(content)).strip()
        except ExternalServiceFailure as e:
            logger.warning(f"Summary generation failed for '{title}', using fallback: {e}")
            return build_fallback_summary(title, description, [t for t, _ in lessons])

    def generate_lesson_notes(self, lesson_title: str, lesson_content: str, course_title: str, difficulty: str) -> str:
        prompt = build_lesson_notes_prompt(lesson_title, lesson_content, course_title, difficulty)
        try:
            return self.generator.generate(prompt, system_instruction=LESSON_NOTES_SYSTEM_INSTRUCTION)
        except ExternalServiceFailure as e:
            logger.warning(f"Lesson notes generation failed for '{lesson_title}', using fallback: {e}")
            return build_fallback_lesson_notes(lesson_title, lesson_content, course_title, difficulty)

    def regenerate_lesson_notes(self, lesson_title: str, lesson_content: str, course_title: str,
                                difficulty: str, previous_notes: str) -> str:
        prompt = build_regeneration_prompt(lesson_title, lesson_content, course_title, difficulty, previous_notes)
        try:
            return self.generator.generate(prompt, system_instruction=LESSON_NOTES_SYSTEM_INSTRUCTION, temperature=0.9)
        except ExternalServiceFailure as e:
            logger.warning(f"Lesson notes regeneration failed for '{lesson_title}', using fallback: {e}")
            return build_fallback_lesson_notes(lesson_title, lesson_content, course_title, difficulty)

    def generate_recommendations(self, interests: str, estimated_iq: Optional[int],
                                 completed_courses: List[str]) -> List[str]:
        prompt = build_recommendation_prompt(interests, estimated_iq, completed_courses)
        try:
            recommendations = parse_recommendations(self.generator.generate(prompt))
        except ExternalServiceFailure as e:
            logger.warning(f"Recommendation generation failed, using fallback: {e}")
            return build_fallback_recommendations(interests)

        return recommendations or build_fallback_recommendations(interests)
