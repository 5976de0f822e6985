"""Best-effort recovery of a JSON value from model output.

Generative models often return near-JSON: trailing commas, raw newlines inside
string values, prose around the payload, doubled quotes. Recovery is an ordered
list of strategies, from the least to the most invasive rewrite of the text.
Each strategy is a pure function returning a ``ParseOutcome``; the first one
that yields an object (dict or list) wins.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Sequence

logger = logging.getLogger(__name__)

_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
_OBJECT_SPAN_RE = re.compile(r"\{[\s\S]*\}")
_DOUBLED_QUOTES_RE = re.compile(r'""([^"]*)""')
_QUOTED_ARRAY_RE = re.compile(r'"\[([^\]]*)\]"')
_CONTROL_ESCAPES = {"\n": "\\n", "\t": "\\t", "\r": "\\r"}


class JsonParseFailure(ValueError):
    def __init__(self, last_error: str, attempts: Sequence["ParseOutcome"] = ()):
        super().__init__(f"JSON parsing failed: {last_error or 'Unknown error'}")
        self.last_error = last_error
        self.attempts = tuple(attempts)


@dataclass(frozen=True)
class ParseOutcome:
    strategy: str
    ok: bool
    value: Any = None
    error: str | None = None


Strategy = Callable[[str], ParseOutcome]


def _loads(strategy: str, text: str) -> ParseOutcome:
    try:
        value = json.loads(text)
    except (ValueError, RecursionError) as exc:
        return ParseOutcome(strategy=strategy, ok=False, error=str(exc))
    if not isinstance(value, (dict, list)):
        return ParseOutcome(
            strategy=strategy,
            ok=False,
            error=f"expected a JSON object, got {type(value).__name__}",
        )
    return ParseOutcome(strategy=strategy, ok=True, value=value)


def _escape_control_chars_in_strings(text: str) -> str:
    # Only characters inside string literals are touched; whitespace between
    # tokens is legal JSON and left alone.
    out: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            elif ch in _CONTROL_ESCAPES:
                out.append(_CONTROL_ESCAPES[ch])
                continue
        elif ch == '"':
            in_string = True
        out.append(ch)
    return "".join(out)


def parse_direct(text: str) -> ParseOutcome:
    return _loads("direct", text)


def parse_repaired(text: str) -> ParseOutcome:
    fixed = _TRAILING_COMMA_RE.sub(r"\1", text)
    fixed = _escape_control_chars_in_strings(fixed)
    return _loads("repair", fixed)


def parse_extracted(text: str) -> ParseOutcome:
    match = _OBJECT_SPAN_RE.search(text)
    if not match:
        return ParseOutcome(strategy="extract", ok=False, error="No JSON object found")
    return _loads("extract", match.group(0))


def parse_quote_normalized(text: str) -> ParseOutcome:
    fixed = _DOUBLED_QUOTES_RE.sub(r'"\1"', text)
    fixed = _QUOTED_ARRAY_RE.sub(r"[\1]", fixed)
    return _loads("quotes", fixed)


STRATEGIES: tuple[Strategy, ...] = (
    parse_direct,
    parse_repaired,
    parse_extracted,
    parse_quote_normalized,
)


def parse_ai_response(text: str, strategies: Sequence[Strategy] = STRATEGIES) -> Any:
    """Return the first object any strategy recovers from ``text``.

    ``text`` is expected to be already normalized. Raises ``JsonParseFailure``
    with the last error seen when every strategy fails.
    """
    attempts: list[ParseOutcome] = []
    for strategy in strategies:
        outcome = strategy(text)
        attempts.append(outcome)
        if outcome.ok:
            if len(attempts) > 1:
                logger.info("ai_json_recovered strategy=%s attempts=%s", outcome.strategy, len(attempts))
            return outcome.value
        logger.debug("ai_json_strategy_failed strategy=%s error=%s", outcome.strategy, outcome.error)

    last_error = attempts[-1].error if attempts else ""
    raise JsonParseFailure(last_error or "", attempts)
