"""JSON schemas for the structured call sites.

JSON mode of both providers requires an object at the top level, so list
payloads are wrapped in a single property named by `*_KEY`.
"""

from typing import Any, Dict, List, Optional

def _string() -> Dict[str, Any]:
    return {"type": "string"}

def _strings() -> Dict[str, Any]:
    return {"type": "array", "items": _string()}

def _enum(values: List[str]) -> Dict[str, Any]:
    return {"type": "string", "enum": values}

def _object(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "object", "properties": properties, "required": list(properties)}

def wrap_list(key: str, item_schema: Dict[str, Any]) -> Dict[str, Any]:
    return _object({key: {"type": "array", "items": item_schema}})

def _resource(types: Optional[List[str]] = None, categories: Optional[List[str]] = None) -> Dict[str, Any]:
    return _object({
        "id": _string(),
        "type": _enum(types) if types else _string(),
        "category": _enum(categories) if categories else _string(),
        "title": _string(),
        "provider": _string(),
        "url": _string(),
    })

JOBS_KEY = "jobs"
JOB_SCHEMA = wrap_list(JOBS_KEY, _object({
    "id": _string(),
    "company": _string(),
    "role": _string(),
    "location": _string(),
    "salary": _string(),
    "category": _enum(["job", "internship"]),
    "description": _string(),
    "eligibility": _strings(),
    "applyUrl": _string(),
}))

QUESTIONS_KEY = "questions"
QUIZ_SCHEMA = wrap_list(QUESTIONS_KEY, _object({
    "id": _string(),
    "question": _string(),
    "options": _strings(),
    "correctAnswer": _string(),
}))

PROBLEMS_KEY = "problems"
PROBLEM_SET_SCHEMA = wrap_list(PROBLEMS_KEY, _object({
    "id": _string(),
    "title": _string(),
    "difficulty": _enum(["Easy", "Medium", "Hard"]),
    "description": _string(),
    "starterCode": _string(),
    "testCases": _strings(),
}))

ARTICLES_KEY = "articles"
NEWS_SCHEMA = wrap_list(ARTICLES_KEY, _object({
    "title": _string(),
    "summary": _string(),
    "tag": _string(),
    "date": _string(),
    "source": _string(),
    "url": _string(),
}))

ROADMAP_SCHEMA = _object({
    "id": _string(),
    "title": _string(),
    "description": _string(),
    "tech": _strings(),
    "phases": {"type": "array", "items": _object({
        "id": _string(),
        "title": _string(),
        "tasks": _strings(),
        "details": _string(),
    })},
})

RESOURCES_KEY = "resources"
RESOURCES_SCHEMA = wrap_list(RESOURCES_KEY, _resource(["youtube", "pdf", "course"], ["free", "paid"]))
VIDEOS_SCHEMA = wrap_list(RESOURCES_KEY, _resource(["youtube"], ["free"]))

PATHS_KEY = "paths"
CAREER_PATHS_SCHEMA = wrap_list(PATHS_KEY, _object({
    "pathId": _string(),
    "title": _string(),
    "reason": _string(),
    "matchScore": {"type": "number"},
    "starterGuide": _string(),
    "milestones": {"type": "array", "items": _object({
        "title": _string(),
        "description": _string(),
        "topics": _strings(),
        "proTips": _string(),
        "resources": {"type": "array", "items": _resource()},
    })},
}))
