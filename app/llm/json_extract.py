"""LLM 출력에서 JSON을 추출하는 헬퍼.

Best-effort extraction of a JSON object from free-text model output.
No repair and no retry: extraction either finds parseable JSON or fails.
"""

import json
import logging
import re
from collections.abc import Iterator
from typing import Any

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


class JSONExtractionError(ValueError):
    """모델 출력에서 JSON 객체를 찾지 못함 (No JSON object found in model output)."""


def _balanced_objects(raw: str) -> Iterator[str]:
    """균형 잡힌 ``{...}`` 구간을 앞에서부터 차례로 반환합니다.

    Yield the balanced ``{...}`` span starting at each ``{`` in turn,
    ignoring braces inside strings.
    """
    start = raw.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for idx in range(start, len(raw)):
            char = raw[idx]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    yield raw[start : idx + 1]
                    break
        start = raw.find("{", start + 1)


def _loads_object(text: str) -> dict[str, Any] | None:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def extract_json_object(raw: str) -> dict[str, Any]:
    """모델 출력에서 JSON 객체를 추출합니다.

    Tried in order: a fenced ```json block, the whole output, then each
    balanced ``{...}`` span from left to right until one parses (also inside
    an unparseable fenced block).

    Raises:
        JSONExtractionError: 출력이 비었거나 파싱 가능한 객체가 없음
                             (Empty output or no parseable object)
    """
    if not raw or not raw.strip():
        raise JSONExtractionError("Model returned an empty response")

    fenced = _FENCED_JSON.search(raw)
    if fenced:
        data = _loads_object(fenced.group(1))
        if data is not None:
            return data
        logger.info("Fenced JSON block did not parse; falling back to raw output")

    data = _loads_object(raw.strip())
    if data is not None:
        return data

    for candidate in _balanced_objects(raw):
        data = _loads_object(candidate)
        if data is not None:
            logger.info("Recovered JSON object embedded in free text")
            return data

    raise JSONExtractionError("No valid JSON object found in model response")


def unwrap(data: dict[str, Any], key: str) -> dict[str, Any]:
    """``{"study_plan": {...}}`` 형태의 래퍼를 벗깁니다.

    Return ``data[key]`` when it is an object, otherwise ``data`` itself.
    """
    inner = data.get(key)
    return inner if isinstance(inner, dict) else data
