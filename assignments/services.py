"""
AssignmentService - assignment authoring.

Generated content comes from Gemini (JSON) or the Codeforces problem bank.
When generation fails, a predefined problem chosen by topic keywords is used.
"""
import logging
from typing import Any, Dict, List, Optional

from ai.codeforces_service import CodeforcesService
from ai.exceptions import ExternalServiceFailure
from ai.gemini_assignment_service import GeminiAssignmentService
from backend.exceptions import NotFound, Unauthorized, InvalidInput
from courses.models import Course
from courses.services import is_owner
from .models import Assignment

logger = logging.getLogger(__name__)

FALLBACK_TIME_LIMIT = 30
FALLBACK_POINTS = 100
CODEFORCES_TIME_LIMIT = 60
CODEFORCES_POINTS = 150
DEFAULT_CODEFORCES_PROBLEM_COUNT = 3

TWO_SUM_STARTER = {
    'java': (
        "class Solution {\n"
        "    public int[] twoSum(int[] nums, int target) {\n"
        "        // Your code here\n"
        "        \n"
        "    }\n"
        "}"
    ),
    'python': (
        "def twoSum(nums, target):\n"
        "    \"\"\"\n"
        "    :type nums: List[int]\n"
        "    :type target: int\n"
        "    :rtype: List[int]\n"
        "    \"\"\"\n"
        "    # Your code here\n"
        "    pass"
    ),
}

TWO_SUM_SOLUTION = {
    'java': (
        "class Solution {\n"
        "    public int[] twoSum(int[] nums, int target) {\n"
        "        Map<Integer, Integer> map = new HashMap<>();\n"
        "        for (int i = 0; i < nums.length; i++) {\n"
        "            int complement = target - nums[i];\n"
        "            if (map.containsKey(complement)) {\n"
        "                return new int[] { map.get(complement), i };\n"
        "            }\n"
        "            map.put(nums[i], i);\n"
        "        }\n"
        "        return new int[0];\n"
        "    }\n"
        "}"
    ),
    'python': (
        "def twoSum(nums, target):\n"
        "    num_map = {}\n"
        "    for i, num in enumerate(nums):\n"
        "        complement = target - num\n"
        "        if complement in num_map:\n"
        "            return [num_map[complement], i]\n"
        "        num_map[num] = i\n"
        "    return []"
    ),
}

CODEFORCES_STARTER = {
    'java': (
        "import java.util.*;\n"
        "import java.io.*;\n\n"
        "public class Solution {\n"
        "    public static void main(String[] args) {\n"
        "        Scanner sc = new Scanner(System.in);\n"
        "        // Your code here\n"
        "        \n"
        "    }\n"
        "}"
    ),
    'python': (
        "# Read input\n"
        "# Your code here\n"
        "\n"
        "# Print output\n"
    ),
    'cpp': (
        "#include <iostream>\n"
        "#include <vector>\n"
        "#include <algorithm>\n"
        "using namespace std;\n\n"
        "int main() {\n"
        "    // Your code here\n"
        "    \n"
        "    return 0;\n"
        "}"
    ),
}


def _two_sum_problem(language: str) -> Dict[str, Any]:
    return {
        'title': "Two Sum Problem",
        'description': "Find two numbers in an array that add up to a target sum.",
        'problem_statement': (
            "Given an array of integers nums and an integer target, return indices of the two numbers "
            "such that they add up to target.\n\n"
            "You may assume that each input would have exactly one solution, and you may not use the "
            "same element twice.\n\n"
            "You can return the answer in any order."
        ),
        'constraints': (
            "• 2 ≤ nums.length ≤ 10^4\n"
            "• -10^9 ≤ nums[i] ≤ 10^9\n"
            "• -10^9 ≤ target ≤ 10^9\n"
            "• Only one valid answer exists."
        ),
        'examples': [
            {
                'input': "nums = [2,7,11,15], target = 9",
                'output': "[0,1]",
                'explanation': "Because nums[0] + nums[1] = 2 + 7 = 9, we return [0, 1].",
            },
            {
                'input': "nums = [3,2,4], target = 6",
                'output': "[1,2]",
                'explanation': "Because nums[1] + nums[2] = 2 + 4 = 6, we return [1, 2].",
            },
        ],
        'test_cases': [
            {'input': "[2,7,11,15]\n9", 'expected_output': "[0,1]", 'is_hidden': False},
            {'input': "[3,2,4]\n6", 'expected_output': "[1,2]", 'is_hidden': False},
            {'input': "[3,3]\n6", 'expected_output': "[0,1]", 'is_hidden': True},
        ],
        'starter_code': TWO_SUM_STARTER.get(language, ''),
        'solution': TWO_SUM_SOLUTION.get(language, ''),
    }


def _simple_problem(title: str, description: str, topic: str) -> Dict[str, Any]:
    return {
        'title': title,
        'description': description,
        'problem_statement': f"{description}\n\nFocus area: {topic}.",
        'constraints': '',
        'examples': [],
        'test_cases': [],
        'starter_code': '',
        'solution': '',
    }


def build_fallback_assignment(topic: str, difficulty: str, language: str) -> Dict[str, Any]:
    """
    Predefined CODING assignment fields for when generation is unavailable.

    Keyword order: array / data structure, then algorithm / sorting, then string.
    """
    lower_topic = topic.lower()
    if ('array' in lower_topic or 'data structure' in lower_topic) and difficulty == 'EASY':
        fields = _two_sum_problem(language)
    elif 'algorithm' in lower_topic or 'sorting' in lower_topic:
        fields = _simple_problem(
            "Sorting Algorithm Implementation",
            "Implement a sorting algorithm to sort an array of integers.",
            topic,
        )
    elif 'string' in lower_topic:
        fields = _simple_problem(
            "String Manipulation",
            "Solve string-related programming challenges.",
            topic,
        )
    else:
        fields = _simple_problem(
            "Programming Challenge",
            "Solve a general programming problem.",
            topic,
        )

    fields.update({
        'type': 'CODING',
        'difficulty': difficulty,
        'programming_language': language,
        'time_limit': FALLBACK_TIME_LIMIT,
        'points': FALLBACK_POINTS,
        'ai_generated': False,
        'source': 'AI_GENERATED',
    })
    return fields


def build_codeforces_assignment(topic: str, difficulty: str, language: str,
                                problems: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Assignment fields around the first problem; the rest become practice links.
    """
    main_problem = problems[0]
    description = f"Solve programming problems from Codeforces related to {topic}"
    description += "\n\n## Additional Practice Problems:\n"
    for problem in problems[1:]:
        description += f"- **{problem['name']}**: {problem['url']}\n"

    return {
        'title': main_problem.get('name') or f"Coding Challenge: {topic}",
        'description': description,
        'problem_statement': (
            "This is a Codeforces problem. Please visit the link below for the complete problem statement:\n\n"
            f"**Problem Link**: {main_problem['url']}\n\n"
            f"**Problem Rating**: {main_problem.get('rating')}\n"
            f"**Tags**: {', '.join(main_problem.get('tags', []))}"
        ),
        'constraints': "Please refer to the original problem on Codeforces for detailed constraints.",
        'examples': [{
            'input': "See problem link for examples",
            'output': "See problem link for expected output",
            'explanation': "Please refer to the Codeforces problem for detailed examples and explanations.",
        }],
        'test_cases': [],
        'starter_code': CODEFORCES_STARTER.get(language, ''),
        'solution': '',
        'type': 'CODING',
        'difficulty': difficulty,
        'programming_language': language,
        'time_limit': CODEFORCES_TIME_LIMIT,
        'points': CODEFORCES_POINTS,
        'ai_generated': False,
        'source': 'CODEFORCES',
    }


class AssignmentService:

    def __init__(self, assignment_ai=None, codeforces=None):
        self.assignment_ai = assignment_ai or GeminiAssignmentService()
        self.codeforces = codeforces or CodeforcesService()

    # Lookups

    def get_assignment(self, assignment_id) -> Assignment:
        assignment = Assignment.objects.select_related('course').filter(id=assignment_id).first()
        if assignment is None:
            raise NotFound("Assignment not found")
        return assignment

    def get_owned_course(self, course_id, user) -> Course:
        course = Course.objects.filter(id=course_id).first()
        if course is None:
            raise NotFound("Course not found")
        if not is_owner(course, user):
            raise Unauthorized("Unauthorized: You don't own this course")
        return course

    def _get_owned_assignment(self, assignment_id, user, action: str) -> Assignment:
        assignment = self.get_assignment(assignment_id)
        if not (is_owner(assignment.course, user) or assignment.instructor_id == user.id):
            logger.warning(f"User {user.email} tried to {action} assignment {assignment_id} they do not own")
            raise Unauthorized(f"Unauthorized to {action} this assignment")
        return assignment

    def course_assignments(self, course_id, user=None):
        """
        Course owners (and admins) see every assignment; everyone else only published ones.
        """
        course = Course.objects.filter(id=course_id).first()
        if course is None:
            raise NotFound("Course not found")
        assignments = Assignment.objects.filter(course=course)
        if user is not None and user.is_authenticated and is_owner(course, user):
            return assignments
        return assignments.filter(published=True)

    def instructor_assignments(self, instructor):
        return Assignment.objects.filter(instructor=instructor).select_related('course')

    def published_assignments_for_courses(self, courses):
        return Assignment.objects.filter(course__in=courses, published=True).select_related('course')

    # Authoring

    def create_assignment(self, course_id, instructor, data: Dict[str, Any]) -> Assignment:
        """
        Persist an assignment on an owned course. AI-generated assignments are published immediately.
        """
        course = self.get_owned_course(course_id, instructor)
        data = dict(data)
        if data.get('ai_generated'):
            data['published'] = True

        assignment = Assignment.objects.create(course=course, instructor=instructor, **data)
        logger.info(
            f"Assignment '{assignment.title}' ({assignment.id}) created on course {course.id} "
            f"[source={assignment.source}, published={assignment.published}]"
        )
        return assignment

    def publish_assignment(self, assignment_id, user) -> Assignment:
        assignment = self._get_owned_assignment(assignment_id, user, 'publish')
        assignment.published = True
        assignment.save(update_fields=['published', 'updated_at'])
        return assignment

    def unpublish_assignment(self, assignment_id, user) -> Assignment:
        assignment = self._get_owned_assignment(assignment_id, user, 'unpublish')
        assignment.published = False
        assignment.save(update_fields=['published', 'updated_at'])
        return assignment

    def delete_assignment(self, assignment_id, user) -> None:
        assignment = self._get_owned_assignment(assignment_id, user, 'delete')
        logger.info(f"Assignment {assignment.id} deleted by {user.email}")
        assignment.delete()

    # Generation

    def generate_coding_assignment(self, course_title: str, topic: str, difficulty: str,
                                   language: str) -> Dict[str, Any]:
        """
        Field values for a generated CODING assignment (not saved).
        """
        try:
            fields = self.assignment_ai.generate_coding_assignment(course_title, topic, difficulty, language)
        except ExternalServiceFailure as e:
            logger.warning(f"Assignment generation failed for '{topic}', using fallback: {e}")
            return build_fallback_assignment(topic, difficulty, language)

        fields.update({
            'type': 'CODING',
            'difficulty': difficulty,
            'programming_language': language,
            'ai_generated': True,
            'source': 'AI_GENERATED',
        })
        return fields

    def generate_assignment_with_codeforces(self, course_title: str, topic: str, difficulty: str,
                                            language: str, count: int = DEFAULT_CODEFORCES_PROBLEM_COUNT) -> Dict[str, Any]:
        problems = self.codeforces.get_problems_by_difficulty(difficulty, topic, count)
        if not problems:
            logger.warning(f"No Codeforces problems found for '{topic}', falling back to AI generation")
            return self.generate_coding_assignment(course_title, topic, difficulty, language)

        logger.info(f"Building assignment from {len(problems)} Codeforces problems for '{topic}'")
        return build_codeforces_assignment(topic, difficulty, language, problems)

    def create_generated_assignment(self, course_id, instructor, topic: str, difficulty: str,
                                    language: str) -> Assignment:
        course = self.get_owned_course(course_id, instructor)
        fields = self.generate_coding_assignment(course.title, topic, difficulty, language)
        return self.create_assignment(course.id, instructor, fields)

    def create_codeforces_assignment(self, course_id, instructor, topic: str, difficulty: str,
                                     language: str, count: int = DEFAULT_CODEFORCES_PROBLEM_COUNT) -> Assignment:
        course = self.get_owned_course(course_id, instructor)
        fields = self.generate_assignment_with_codeforces(course.title, topic, difficulty, language, count)
        fields['published'] = True
        return self.create_assignment(course.id, instructor, fields)

    def available_codeforces_problems(self, difficulty: str, topic: Optional[str], limit: int) -> List[Dict[str, Any]]:
        return self.codeforces.get_problems_by_difficulty(difficulty, topic, limit)

    def create_skipped_assignment(self, course_id, instructor, data: Dict[str, Any]) -> Assignment:
        """
        Published placeholder that marks a skipped assignment slot; it awards nothing and accepts no attempts.
        """
        if not data.get('title'):
            raise InvalidInput("Title is required")

        fields = {
            'title': data['title'],
            'description': data.get('description', ''),
            'type': data.get('type', 'CODING'),
            'difficulty': data.get('difficulty', 'EASY'),
            'source': 'SKIPPED',
            'published': True,
            'points': 0,
            'time_limit': 0,
            'max_attempts': 0,
        }
        return self.create_assignment(course_id, instructor, fields)
