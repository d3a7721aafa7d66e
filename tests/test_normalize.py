import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from chatpanel.core.errors import extract_error_detail
from chatpanel.core.normalize import (
    build_survey_record,
    extract_quiz_answer,
    format_list,
    normalise_allergies,
    normalise_fact_text,
    parse_action,
    prettify,
    render_survey_summary,
)


def test_error_detail_precedence():
    assert extract_error_detail({"error": "A"}, "fallback") == "A"
    assert extract_error_detail({"error": {"message": "B"}}, "fallback") == "B"
    assert extract_error_detail({"details": "C"}, "fallback") == "C"
    assert extract_error_detail({"details": {"error": "D"}}, "fallback") == "D"
    assert extract_error_detail({"details": {"error": {"message": "E"}}}, "fallback") == "E"
    assert extract_error_detail({"message": "F"}, "fallback") == "F"
    assert extract_error_detail({}, "Bad Gateway") == "Bad Gateway"
    assert extract_error_detail(None, "Bad Gateway") == "Bad Gateway"


def test_error_detail_skips_non_string_candidates():
    payload = {
        "error": {"code": 42},
        "details": {"error": {"code": "quota"}},
        "message": "top level wins",
    }
    assert extract_error_detail(payload, "fallback") == "top level wins"
    assert extract_error_detail({"error": "A", "message": "F"}, "fallback") == "A"
    assert extract_error_detail({"message": 3}, "fallback") == "fallback"


def test_allergy_normalisation():
    assert normalise_allergies({"q4_nuts": True, "q4_pollen": True}) == ["nuts", "pollen"]
    assert normalise_allergies({"q4_none": True, "q4_nuts": True}) == ["none"]
    assert normalise_allergies({"q4_nuts": False, "q1": "oily"}) == []
    assert normalise_allergies({"q4_latex": "yes", "q4_nuts": 0, "q4_fragrance": 1}) == ["latex", "fragrance"]


def test_survey_record_has_fixed_shape():
    record = build_survey_record({"q1": "oily", "q4_nuts": True, "q8": "glow", "extra": "ignored"})
    assert list(record) == ["q1", "q2", "q3", "q4", "q5", "q6", "q7", "q8"]
    assert record["q1"] == "oily"
    assert record["q2"] is None
    assert record["q4"] == ["nuts"]
    assert "extra" not in record


def test_prettify_and_lists():
    assert prettify("fragrance-free") == "Fragrance Free"
    assert prettify("dark_spots") == "Dark Spots"
    assert prettify(None) == "null"
    assert prettify(True) == "true"
    assert prettify(3) == "3"
    assert prettify(1.0) == "1"
    assert prettify(2.5) == "2.5"
    assert prettify(["a", "b"]) == "a,b"
    assert prettify(["dry", None, 2.0, False]) == "dry,,2,false"
    assert format_list([]) == "None"
    assert format_list(["tree-nuts", "pollen"]) == "Tree Nuts, Pollen"


def test_survey_summary_lines():
    record = build_survey_record(
        {
            "q1": "combination",
            "q2": "acne",
            "q3": "dark_spots",
            "q5": "fragrance-free",
            "q6": "minimal",
            "q7": "low",
            "q8": "even_tone",
        }
    )
    summary = render_survey_summary(record)
    lines = summary.split("\n")
    assert lines[0] == "Survey saved:"
    assert "- Skin type: Combination" in lines
    assert "- Secondary concern: Dark Spots" in lines
    assert "- Allergies: None" in lines
    assert "- Product preference: Fragrance Free" in lines
    assert "- Desired results: Even Tone" in lines
    assert len(lines) == 9


def test_parse_action_shapes():
    bare = parse_action("question.submit")
    assert bare.type == "question.submit"
    assert bare.payload == {}

    action = parse_action(
        {"type": "question.submit", "payload": {"quizId": "Q1", "form": {"answer": "A"}}},
        {"id": "msg-1"},
    )
    assert action.item_id == "msg-1"
    assert action.form == {"answer": "A"}

    untyped = parse_action({"payload": None})
    assert untyped.type == ""
    assert untyped.payload == {}


def test_quiz_answer_fallbacks():
    item = {"id": "w1", "quizId": "Q9", "form": {"answer": "C"}}
    action = parse_action({"type": "question.submit", "payload": {}}, item)
    assert extract_quiz_answer(action, item) == {"quizId": "Q9", "answer": "C"}

    direct = parse_action(
        {"type": "question.submit", "payload": {"quizId": "Q1", "answer": "B"}},
        item,
    )
    assert extract_quiz_answer(direct, item) == {"quizId": "Q1", "answer": "B"}

    empty = parse_action("question.submit")
    assert extract_quiz_answer(empty) == {"quizId": None, "answer": None}


def test_fact_text_whitespace_is_collapsed():
    assert normalise_fact_text("  likes \n  mint\ttea  ") == "likes mint tea"
    assert normalise_fact_text("") == ""
