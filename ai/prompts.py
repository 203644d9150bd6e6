"""
Prompt builders for every content generation type.

Kept apart from the services so the wording can change without touching
parsing or fallback logic.
"""
import json
from typing import Any, Dict, List, Optional

QUIZ_CONTENT_LIMIT = 1000


def build_quiz_prompt(topic: str, content: str, number_of_questions: int) -> str:
    if len(content) > QUIZ_CONTENT_LIMIT:
        content = content[:QUIZ_CONTENT_LIMIT] + "..."

    return f"""Create {number_of_questions} multiple-choice questions about "{topic}". Be concise and direct.

Content: {content}

Format (exactly):
Q1: [Question]
A) [Option]
B) [Option]
C) [Option]
D) [Option]
Correct: [A/B/C/D]
Explanation: [Brief explanation]

Q2: [Question]
A) [Option]
B) [Option]
C) [Option]
D) [Option]
Correct: [A/B/C/D]
Explanation: [Brief explanation]

Continue for all {number_of_questions} questions. Test understanding, not memorization.
"""


def build_summary_prompt(course_content: str) -> str:
    return f"""Please provide a concise summary of the following course content.
Focus on key learning objectives, main concepts, and takeaways.
Keep it under 200 words.

Course Content:
{course_content}
"""


LESSON_NOTES_SYSTEM_INSTRUCTION = (
    "You are an expert educational content creator. Create clear, user-friendly lesson "
    "content that students can easily understand and follow."
)


def build_lesson_notes_prompt(lesson_title: str, lesson_content: str, course_title: str, difficulty: str) -> str:
    level = difficulty.lower()
    return f"""Course: {course_title}
Difficulty Level: {difficulty}
Lesson Title: {lesson_title}
Lesson Topic: {lesson_content}

Create engaging lesson content with these sections:

1. LESSON OVERVIEW
- A friendly introduction (2-3 sentences) explaining what students will learn and why it matters

2. WHAT YOU'LL LEARN
- 3-4 specific, practical outcomes as bullet points

3. MAIN CONTENT
- The core concepts in plain language, broken into small steps, with everyday analogies

4. PRACTICAL EXAMPLES
- 1-2 concrete, real-world examples; short, commented code only if essential

5. TRY IT YOURSELF
- 1-2 practice activities achievable for {level} level students, with hints

6. KEY POINTS TO REMEMBER
- 3-5 memorable bullet points

Write in second person with short sentences and vocabulary suited to {level} level.
Use HTML formatting: <h2>, <h3>, <p>, <ul>, <li>, <strong>, <em>.
"""


def build_regeneration_prompt(lesson_title: str, lesson_content: str, course_title: str,
                              difficulty: str, previous_notes: str) -> str:
    return f"""The following lesson notes were previously generated, but we need a fresh perspective.

Course: {course_title}
Difficulty Level: {difficulty}
Lesson Title: {lesson_title}
Lesson Overview: {lesson_content}

Previous Notes (for reference, but create something different):
{previous_notes}

Please create NEW, comprehensive lesson notes with a different approach and structure. Include:
1. Alternative Learning Objectives
2. Different Key Concepts presentation
3. New Examples and Analogies
4. Different Practice Exercises
5. Alternative Explanations

Format the response in HTML with proper headings, lists, and formatting.
"""


def build_recommendation_prompt(interests: str, estimated_iq: Optional[int], completed_courses: List[str]) -> str:
    return f"""Based on the following student profile, recommend 5 relevant courses:

Student Interests: {interests}
Estimated IQ: {estimated_iq if estimated_iq is not None else 'unknown'}
Completed Courses: {', '.join(completed_courses) if completed_courses else 'none'}

Please suggest course titles that would be appropriate for this student's level and interests.
Format as a simple list:
1. [Course Title]
2. [Course Title]
3. [Course Title]
4. [Course Title]
5. [Course Title]
"""


def build_coding_assignment_prompt(course_title: str, topic: str, difficulty: str,
                                   programming_language: str, schema: Dict[str, Any]) -> str:
    schema_json = json.dumps(schema, indent=2)
    return f"""Generate a LeetCode-style coding assignment for the course '{course_title}' on topic '{topic}' with {difficulty.lower()} difficulty in {programming_language}.

Make it a practical, engaging problem that tests understanding of {topic} concepts.

IMPORTANT: Please respond with valid JSON matching this schema:
{schema_json}

Return ONLY valid JSON, no additional text before or after."""
