"""
GeminiAssignmentService - coding assignment generation

Produces a dict of assignment field values from the model's JSON output.
Fallback content is the caller's concern (see assignments.services), so this
service raises ExternalServiceFailure when the output cannot be used.
"""
import logging
from typing import Any, Dict

from .exceptions import ExternalServiceFailure
from .gemini_service import GeminiService, SERVICE_NAME
from .prompts import build_coding_assignment_prompt
from .schemas import get_coding_assignment_schema

logger = logging.getLogger(__name__)


class GeminiAssignmentService:

    def __init__(self, generator=None):
        self.generator = generator or GeminiService()

    def generate_coding_assignment(self, course_title: str, topic: str, difficulty: str,
                                   programming_language: str) -> Dict[str, Any]:
        prompt = build_coding_assignment_prompt(
            course_title, topic, difficulty, programming_language, get_coding_assignment_schema()
        )
        data = self.generator.generate_json(prompt, temperature=0.7)
        assignment = self._to_assignment_fields(data)
        logger.info(f"Generated coding assignment '{assignment['title']}' for topic '{topic}'")
        return assignment

    def _to_assignment_fields(self, data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise ExternalServiceFailure(SERVICE_NAME, "assignment response is not a JSON object")

        title = (data.get('title') or '').strip()
        problem_statement = (data.get('problemStatement') or '').strip()
        if not title or not problem_statement:
            raise ExternalServiceFailure(SERVICE_NAME, "assignment response is missing title or problemStatement")

        examples = [
            {
                'input': str(example.get('input', '')),
                'output': str(example.get('output', '')),
                'explanation': str(example.get('explanation', '')),
            }
            for example in data.get('examples') or []
            if isinstance(example, dict)
        ]
        test_cases = [
            {
                'input': str(test_case.get('input', '')),
                'expected_output': str(test_case.get('expectedOutput', '')),
                'is_hidden': bool(test_case.get('isHidden', False)),
            }
            for test_case in data.get('testCases') or []
            if isinstance(test_case, dict)
        ]

        return {
            'title': title[:200],
            'description': data.get('description') or '',
            'problem_statement': problem_statement,
            'constraints': data.get('constraints') or '',
            'examples': examples,
            'test_cases': test_cases,
            'starter_code': data.get('starterCode') or '',
            'solution': data.get('solution') or '',
        }
