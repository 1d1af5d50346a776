import json
import re
from typing import Any, Dict, List, Optional

import structlog

from storytests.models.schemas import GenerateRequest, TestCase, TestCaseCategory

logger = structlog.get_logger()

SYSTEM_PROMPT = (
    "You are an expert QA engineer. Generate comprehensive, well-structured test cases for the user story provided.\n\n"
    "IMPORTANT: Reply with a single, valid JSON object ONLY (no surrounding markdown, explanation text, or backticks). "
    "The JSON must follow the schema below exactly.\n\n"
    "Required JSON structure:\n"
    "{\n"
    "  \"cases\": [\n"
    "    {\n"
    "      \"id\": \"TC-001\",\n"
    "      \"title\": string,\n"
    "      \"category\": \"Positive\" | \"Negative\" | \"Edge\" | \"Authorization\" | \"Non-Functional\",\n"
    "      \"steps\": [string],\n"
    "      \"testData\": string,\n"
    "      \"expectedResult\": string\n"
    "    }\n"
    "  ]\n"
    "}\n\n"
    "Additional notes:\n"
    "- Cover every acceptance criterion with at least one case.\n"
    "- Include negative and edge cases where they apply.\n"
    "- Each case needs at least one step; keep steps short and actionable.\n"
    "- Do NOT include any commentary or explanation outside the JSON object."
)

_CATEGORY_LOOKUP = {
    re.sub(r"[^a-z]", "", category.value.lower()): category for category in TestCaseCategory
}


def build_user_prompt(request: GenerateRequest) -> str:
    """Build the user prompt from story fields"""
    prompt = f"""Generate test cases for the following user story:

Story Title:
{request.story_title}

Acceptance Criteria:
{request.acceptance_criteria}
"""
    if request.description.strip():
        prompt += f"\nDescription:\n{request.description}\n"
    if request.additional_info.strip():
        prompt += f"\nAdditional Information:\n{request.additional_info}\n"
    return prompt


def _scan_balanced(text: str, opener: str, closer: str) -> Optional[str]:
    """Return the first balanced ``opener...closer`` span that parses as JSON."""
    depth = 0
    start = -1
    for i, ch in enumerate(text):
        if ch == opener:
            if depth == 0:
                start = i
            depth += 1
        elif ch == closer and depth > 0:
            depth -= 1
            if depth == 0 and start != -1:
                candidate = text[start : i + 1]
                try:
                    json.loads(candidate)
                    return candidate
                except ValueError:
                    start = -1
    return None


def extract_json(content: str) -> Optional[str]:
    """Extract a JSON object or array from content.
    Handles code fences; a bare array of cases is kept whole.
    """
    if not content:
        return None
    cleaned = content.strip()
    if cleaned.startswith("```"):
        # remove opening fence and optional language (e.g., ```json)
        cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else cleaned
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3]
    cleaned = cleaned.strip()

    try:
        if isinstance(json.loads(cleaned), (dict, list)):
            return cleaned
    except ValueError:
        pass

    first_object = cleaned.find("{")
    first_array = cleaned.find("[")
    if first_array != -1 and (first_object == -1 or first_array < first_object):
        found = _scan_balanced(cleaned, "[", "]")
        if found:
            return found

    m = re.search(r"\{[\s\S]*\}", cleaned)
    if m:
        try:
            json.loads(m.group())
            return m.group()
        except ValueError:
            pass

    return _scan_balanced(cleaned, "{", "}")


def normalize_category(value: Any) -> TestCaseCategory:
    key = re.sub(r"[^a-z]", "", str(value or "").lower())
    return _CATEGORY_LOOKUP.get(key, TestCaseCategory.POSITIVE)


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _normalize_steps(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [line.strip() for line in raw.splitlines() if line.strip()]
    if not isinstance(raw, list):
        raw = [raw]
    steps: List[str] = []
    for step in raw:
        if isinstance(step, dict):
            # tolerate {"action": ...} / {"step": ...} shaped steps
            text = step.get("action") or step.get("step") or step.get("description")
            text = _as_text(text) if text else json.dumps(step)
        else:
            text = _as_text(step)
        if text and text.strip():
            steps.append(text.strip())
    return steps


def _unique_id(case_id: str, index: int, seen_ids: set) -> str:
    candidate = case_id
    suffix = index
    while candidate in seen_ids:
        candidate = f"{case_id}-{suffix}"
        suffix += 1
    return candidate


def parse_cases(content: str) -> List[TestCase]:
    """Parse a provider reply into test cases; returns [] when nothing usable is found."""
    extracted = extract_json(content)
    if not extracted:
        logger.warning("No JSON object found in generation output", preview=(content or "")[:200])
        return []

    parsed = json.loads(extracted)
    if isinstance(parsed, list):
        raw_cases = parsed
    elif "cases" in parsed:
        raw_cases = parsed["cases"]
    elif "title" in parsed:
        raw_cases = [parsed]
    else:
        raw_cases = []
    if not isinstance(raw_cases, list):
        logger.warning("Generation output has no case list", cases_type=type(raw_cases).__name__)
        return []

    cases: List[TestCase] = []
    seen_ids: set = set()
    for index, raw in enumerate(raw_cases, start=1):
        if not isinstance(raw, dict):
            continue
        case_id = _unique_id(str(raw.get("id") or "").strip() or f"TC-{index:03d}", index, seen_ids)
        seen_ids.add(case_id)
        data: Dict[str, Any] = {
            "id": case_id,
            "title": _as_text(raw.get("title")) or f"Test case {index}",
            "category": normalize_category(raw.get("category")),
            "expected_result": _as_text(raw.get("expectedResult") or raw.get("expected_result")) or "",
            "steps": _normalize_steps(raw.get("steps")),
            "test_data": _as_text(raw.get("testData") or raw.get("test_data")),
        }
        cases.append(TestCase(**data))
    return cases
