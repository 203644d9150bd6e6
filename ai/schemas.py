"""
Output schemas for structured AI responses
"""
from typing import Dict, Any


def get_coding_assignment_schema() -> Dict[str, Any]:
    """
    Schema for coding assignment generation

    Returns:
        JSON Schema dict for a single coding assignment
    """
    return {
        "type": "object",
        "properties": {
            "title": {"type": "string", "description": "Assignment title"},
            "description": {"type": "string", "description": "Brief description"},
            "problemStatement": {"type": "string", "description": "Detailed problem statement"},
            "constraints": {"type": "string", "description": "Problem constraints"},
            "examples": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "input": {"type": "string"},
                        "output": {"type": "string"},
                        "explanation": {"type": "string"}
                    },
                    "required": ["input", "output"]
                }
            },
            "testCases": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "input": {"type": "string"},
                        "expectedOutput": {"type": "string"},
                        "isHidden": {"type": "boolean"}
                    },
                    "required": ["input", "expectedOutput"]
                }
            },
            "starterCode": {"type": "string", "description": "Starter code template"},
            "solution": {"type": "string", "description": "Complete reference solution"}
        },
        "required": ["title", "problemStatement", "testCases"]
    }
