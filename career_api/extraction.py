import json

from pydantic import ValidationError

from career_api.errors import ExtractionError, ParseError, SchemaError
from career_api.models import AnalysisResult


def extract_json_block(text: str | None) -> str:
    """Slice from the first '{' to the last '}'.

    Assumes the completion holds at most one JSON object and no stray
    braces in any surrounding prose.
    """
    text = text or ""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1:
        raise ExtractionError("No valid JSON boundaries found")
    return text[start:end + 1]


def parse_json_block(text: str | None):
    block = extract_json_block(text)
    try:
        return json.loads(block)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in completion: {e}") from e


def validate_analysis(data) -> dict:
    try:
        AnalysisResult.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise SchemaError(f"Analysis does not match expected shape: {problems}") from e
    return data


def parse_analysis(text: str | None) -> dict:
    # Callers get the object exactly as the model produced it
    return validate_analysis(parse_json_block(text))
