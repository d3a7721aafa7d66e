"""Normalisation of widget actions into endpoint request bodies."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

QUIZ_SUBMIT = "question.submit"
SURVEY_SUBMIT = "skin.survey.submit"

ALLERGY_PREFIX = "q4_"
ALLERGY_NONE = "none"

SURVEY_LABELS: dict[str, str] = {
    "q1": "Skin type",
    "q2": "Primary concern",
    "q3": "Secondary concern",
    "q4": "Allergies",
    "q5": "Product preference",
    "q6": "Routine",
    "q7": "Sensitivity",
    "q8": "Desired results",
}

# (source, key) pairs evaluated in order; the first non-null value wins.
QUIZ_ID_RULES: tuple[tuple[str, str], ...] = (("payload", "quizId"), ("item", "quizId"))
ANSWER_RULES: tuple[tuple[str, str], ...] = (("payload", "answer"), ("form", "answer"))
FORM_RULES: tuple[tuple[str, str], ...] = (("item", "form"), ("payload", "form"))

_SEPARATORS = re.compile(r"[-_]")
_WORD_START = re.compile(r"\b\w")


@dataclass(slots=True)
class WidgetAction:
    """Canonical view of an action emitted by the widget runtime."""

    type: str
    payload: dict[str, Any]
    form: dict[str, Any]
    item_id: str | None = None


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _first_present(sources: Mapping[str, Mapping[str, Any]], rules: tuple[tuple[str, str], ...]) -> Any:
    for source, key in rules:
        value = sources.get(source, {}).get(key)
        if value is not None:
            return value
    return None


def parse_action(action: Any, item: Mapping[str, Any] | None = None) -> WidgetAction:
    """Turn a raw widget action and its originating item into a :class:`WidgetAction`.

    ``action`` is either a bare tag string or a mapping with ``type`` and
    ``payload`` keys. ``item`` is the widget message the action came from.
    """

    if isinstance(action, str):
        action_type = action
        payload: Mapping[str, Any] = {}
    else:
        raw = _as_mapping(action)
        action_type = str(raw.get("type") or "")
        payload = _as_mapping(raw.get("payload"))

    item_map = _as_mapping(item)
    sources = {"payload": payload, "item": item_map}
    form = _as_mapping(_first_present(sources, FORM_RULES))

    item_id = item_map.get("id")
    return WidgetAction(
        type=action_type,
        payload=dict(payload),
        form=dict(form),
        item_id=str(item_id) if item_id is not None else None,
    )


def extract_quiz_answer(action: WidgetAction, item: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Return the ``{quizId, answer}`` body for a quiz submission."""

    sources = {"payload": action.payload, "item": _as_mapping(item), "form": action.form}
    return {
        "quizId": _first_present(sources, QUIZ_ID_RULES),
        "answer": _first_present(sources, ANSWER_RULES),
    }


def normalise_allergies(payload: Mapping[str, Any]) -> list[str]:
    """Collect the truthy ``q4_<option>`` flags, collapsing to ``["none"]``."""

    allergies = [
        key[len(ALLERGY_PREFIX):]
        for key, value in payload.items()
        if key.startswith(ALLERGY_PREFIX) and value
    ]
    if ALLERGY_NONE in allergies:
        return [ALLERGY_NONE]
    return allergies


def build_survey_record(payload: Mapping[str, Any]) -> dict[str, Any]:
    record: dict[str, Any] = {key: payload.get(key) for key in ("q1", "q2", "q3")}
    record["q4"] = normalise_allergies(payload)
    for key in ("q5", "q6", "q7", "q8"):
        record[key] = payload.get(key)
    return record


def _display_text(value: Any) -> str:
    """Plain text for a non-string widget value, as the widget itself shows it."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else _display_text(item) for item in value)
    return str(value)


def prettify(value: Any) -> str:
    if isinstance(value, str):
        spaced = _SEPARATORS.sub(" ", value)
        return _WORD_START.sub(lambda match: match.group(0).upper(), spaced)
    return _display_text(value)


def format_list(values: list[Any] | None) -> str:
    if not values:
        return "None"
    return ", ".join(prettify(value) for value in values)


def render_survey_summary(record: Mapping[str, Any]) -> str:
    lines = ["Survey saved:"]
    for key, label in SURVEY_LABELS.items():
        if key == "q4":
            lines.append(f"- {label}: {format_list(record.get(key))}")
        else:
            lines.append(f"- {label}: {prettify(record.get(key))}")
    return "\n".join(lines)


def normalise_fact_text(text: str) -> str:
    return " ".join(text.split())


__all__ = [
    "QUIZ_SUBMIT",
    "SURVEY_SUBMIT",
    "WidgetAction",
    "build_survey_record",
    "extract_quiz_answer",
    "format_list",
    "normalise_allergies",
    "normalise_fact_text",
    "parse_action",
    "prettify",
    "render_survey_summary",
]
