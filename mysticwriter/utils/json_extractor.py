"""
JSON object extraction from free-form LLM replies.

Writing-helper prompts ask for "ONLY a JSON object", but models still wrap
it in markdown fences or add a sentence before it.  Fenced blocks are tried
first, then a balanced-brace scan from the end of the reply.
"""
import json
import logging
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


def extract_json_object(text: str, required_keys: Iterable[str] = ()) -> Optional[dict]:
    """
    Return the JSON object embedded in *text*, or ``None``.

    When *required_keys* is given, an object missing all of them is rejected
    (one matching key is enough, the caller fills in per-field defaults).
    """
    if not text:
        return None

    stripped = text.strip()
    candidates = [_from_code_block(stripped), stripped, _by_brace_scan(stripped)]

    parsed = None
    for raw in candidates:
        if not raw:
            continue
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            break
        parsed = None

    if parsed is None:
        logger.info("json_extract_failed | text_len=%d | head=%.200s", len(text), text[:200])
        return None

    required = list(required_keys)
    if required and not any(key in parsed for key in required):
        logger.info("json_extract_failed | missing_keys=%s | keys=%s", required, list(parsed.keys()))
        return None

    return parsed


def _from_code_block(text: str) -> Optional[str]:
    """Body of the last ```json (or bare ```) fenced block."""
    for marker in ("```json", "```"):
        idx = text.rfind(marker) if marker == "```json" else text.find(marker)
        if idx == -1:
            continue
        start = idx + len(marker)
        end = text.find("```", start)
        body = text[start:] if end == -1 else text[start:end]
        body = body.strip()
        if body:
            return body
    return None


def _by_brace_scan(text: str) -> Optional[str]:
    """Last balanced ``{...}`` span that parses as JSON, scanning backwards."""
    cursor = len(text)
    while True:
        open_idx = text.rfind("{", 0, cursor)
        if open_idx == -1:
            return None
        close_idx = _matching_brace(text, open_idx)
        if close_idx is not None:
            candidate = text[open_idx:close_idx + 1]
            try:
                json.loads(candidate)
                return candidate
            except json.JSONDecodeError:
                pass
        cursor = open_idx


def _matching_brace(text: str, start: int) -> Optional[int]:
    # String-literal aware so braces inside values do not shift the depth
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if escaped:
            escaped = False
        elif ch == "\\" and in_string:
            escaped = True
        elif ch == '"':
            in_string = not in_string
        elif not in_string:
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return i
    return None
