"""
Heuristic scorers, one per challenge type.

Every scorer takes the submitted ``solution`` and the challenge ``content``
payloads exactly as clients send them and returns
``{"score": int 0-100, "feedback": [str, ...]}``. Payloads are loosely
validated at best, so the scorers never raise: missing or malformed fields
degrade to a zero score with a single explanatory feedback line.

The checks are textual pattern matches, not program analysis.
"""

import json
import re
from typing import Any, Dict, List

from teamforge.services.similarity import (
    clamp,
    contains_any,
    has_function_definition,
    has_return,
    round_half_up,
    token_similarity,
    unterminated_statements,
)

DEFAULT_FALLBACK_SCORE = 85

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE")

EFFICIENT_SORT_RE = re.compile(r"(quick|merge|heap)[\s-]?sort")
QUADRATIC_SORT_RE = re.compile(r"(bubble|insertion)[\s-]?sort")


def _result(score: float, feedback: List[str]) -> Dict[str, Any]:
    return {"score": round_half_up(clamp(score)), "feedback": feedback}


def _as_dict(payload: Any) -> Dict[str, Any]:
    return payload if isinstance(payload, dict) else {}


def _serialize(payload: Any) -> str:
    return json.dumps(payload, default=str)


def _non_blank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


# ── Code ──

def score_code(solution: Any, content: Any) -> Dict[str, Any]:
    code = _as_dict(solution).get("code")
    correct_code = _as_dict(content).get("correctCode")

    if not _non_blank(code):
        return _result(0, ["No code submitted."])

    feedback: List[str] = []
    score = 60  # attempting the fix

    # 1. Statement terminators
    missing = unterminated_statements(code)
    if not missing:
        score += 15
        feedback.append("All semicolons correctly placed.")
    else:
        feedback.append(f"Missing {len(missing)} semicolon(s).")

    # 2. Functions must return something
    if not has_function_definition(code):
        score += 15
        feedback.append("No function definitions to check for return statements.")
    elif has_return(code):
        score += 15
        feedback.append("Function includes return statement.")
    else:
        feedback.append("Function missing return statement.")

    # 3. Closeness to the reference fix (up to 10 points)
    similarity = token_similarity(code, correct_code if isinstance(correct_code, str) else "")
    score += round_half_up(similarity * 10)

    if similarity > 0.9:
        feedback.append("Excellent! Code matches expected solution.")
    elif similarity > 0.7:
        feedback.append("Good solution with minor differences.")
    else:
        feedback.append("Solution needs improvement. Check logic and syntax.")

    return _result(score, feedback)


# ── Wireframe ──

def _requirement_satisfied(requirement: str, types: List[str], labels: List[str]) -> bool:
    req = requirement.lower()
    has_input = "input" in types
    has_button = "button" in types

    if "login" in req and "form" in req:
        return has_input and has_button
    if "button" in req:
        return has_button or any("button" in label for label in labels)
    if "input" in req or "field" in req:
        return has_input
    if "text" in req or "link" in req:
        return "text" in types or any(req in label for label in labels)
    return any(req in label for label in labels)


def score_wireframe(solution: Any, content: Any) -> Dict[str, Any]:
    elements = _as_dict(solution).get("elements")
    requirements = _as_dict(content).get("requirements")

    if not isinstance(elements, list) or not elements:
        return _result(0, ["No wireframe elements created."])
    if not isinstance(requirements, list):
        requirements = []
    requirements = [req for req in requirements if isinstance(req, str)]

    feedback: List[str] = []
    score = 40.0

    types = [str(_as_dict(el).get("type") or "").lower() for el in elements]
    labels = [str(_as_dict(el).get("label") or "").lower() for el in elements]

    fulfilled = 0
    for requirement in requirements:
        if _requirement_satisfied(requirement, types, labels):
            fulfilled += 1
            feedback.append(f"Requirement fulfilled: {requirement}")
        else:
            feedback.append(f"Missing requirement: {requirement}")

    if requirements:
        score += (fulfilled / len(requirements)) * 40

    if len(elements) >= 4:
        score += 10
        feedback.append("Good element variety.")

    if "input" in types and "button" in types:
        score += 10
        feedback.append("Proper form structure with inputs and buttons.")

    return _result(score, feedback)


# ── Algorithm ──

def score_algorithm(solution: Any, content: Any) -> Dict[str, Any]:
    payload = _as_dict(solution)
    parts = [payload.get(key) for key in ("code", "approach")]
    parts = [part for part in parts if _non_blank(part)]

    if not parts:
        return _result(0, ["No solution provided."])

    feedback: List[str] = []
    score = 50
    text = "\n".join(parts).lower()

    if EFFICIENT_SORT_RE.search(text):
        score += 25
        feedback.append("Efficient sorting algorithm identified.")
    elif QUADRATIC_SORT_RE.search(text):
        score += 10
        feedback.append("Basic sorting algorithm used - consider more efficient options.")

    if contains_any(text, ("o(n log n)", "time complexity")):
        score += 15
        feedback.append("Time complexity analysis provided.")

    if contains_any(text, ("optimiz", "efficien")):
        score += 10
        feedback.append("Performance optimization considered.")

    return _result(score, feedback)


# ── API design ──

def score_api(solution: Any, content: Any) -> Dict[str, Any]:
    payload = _as_dict(solution)
    endpoints = payload.get("endpoints")
    documentation = payload.get("documentation")

    if not endpoints:
        return _result(0, ["No API endpoints defined."])

    feedback: List[str] = []
    score = 40
    serialized = _serialize(endpoints)

    used = [method for method in HTTP_METHODS if re.search(rf"\b{method}\b", serialized)]
    score += min(40, len(used) * 10)
    feedback.append(f"{len(used)}/{len(HTTP_METHODS)} HTTP methods used: {', '.join(used)}")

    if "/api/" in serialized:
        score += 10
        feedback.append("RESTful API structure followed.")

    if isinstance(documentation, str) and len(documentation) > 50:
        score += 20
        feedback.append("Comprehensive API documentation provided.")

    return _result(score, feedback)


# ── Database design ──

def score_database(solution: Any, content: Any) -> Dict[str, Any]:
    payload = _as_dict(solution)
    schema = payload.get("schema")
    relationships = payload.get("relationships")

    if not schema:
        return _result(0, ["No database schema provided."])

    feedback: List[str] = []
    score = 50
    schema_text = _serialize(schema).lower()

    if "user" in schema_text:
        score += 15
        feedback.append("User table included.")

    if contains_any(schema_text, ("primary key", "id")):
        score += 10
        feedback.append("Primary keys defined.")

    if contains_any(schema_text, ("foreign key", "references")):
        score += 15
        feedback.append("Foreign key relationships established.")

    if isinstance(relationships, list) and relationships:
        score += 10
        feedback.append("Table relationships documented.")

    return _result(score, feedback)


# ── Test writing ──

def _coverage_value(raw: Any) -> float:
    if isinstance(raw, bool):
        return 0.0
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 0.0


def score_test(solution: Any, content: Any) -> Dict[str, Any]:
    payload = _as_dict(solution)
    test_cases = payload.get("testCases")

    if not test_cases:
        return _result(0, ["No test cases provided."])

    feedback: List[str] = []
    score = 40
    test_text = _serialize(test_cases).lower()

    if "should" in test_text:
        score += 15
        feedback.append("Descriptive test cases with 'should' statements.")

    if contains_any(test_text, ("edge case", "boundary")):
        score += 15
        feedback.append("Edge cases considered.")

    if contains_any(test_text, ("expect", "assert")):
        score += 15
        feedback.append("Proper assertions used.")

    if _coverage_value(payload.get("coverage")) > 80:
        score += 15
        feedback.append("High test coverage achieved.")

    return _result(score, feedback)


# ── Unknown types ──

def score_default(solution: Any, content: Any, fallback_score: int = DEFAULT_FALLBACK_SCORE) -> Dict[str, Any]:
    return _result(fallback_score, ["Solution evaluated with general criteria."])
