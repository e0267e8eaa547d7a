"""Result validation: section defaults, score sanitization and parse failures."""
import json

import pytest

from credit_pipeline.analysis.errors import ResultValidationError
from credit_pipeline.analysis.extract import extract_json
from credit_pipeline.analysis.validator import ResultValidator

FULL = {
    "overview": {"score": 712, "summary": "Fair", "positiveFactors": ["on-time"], "negativeFactors": []},
    "disputes": {"items": [{"bureau": "Experian", "accountName": "Card", "accountNumber": "1234",
                            "issueType": "late", "recommendedAction": "dispute"}]},
    "creditHacks": {"recommendations": []},
    "creditCards": {"recommendations": [{"name": "Starter", "annualFee": 0, "apr": "24%"}]},
    "sideHustles": {"recommendations": [{"title": "Tutoring", "skills": "teaching"}]},
}


def test_full_result_round_trips_with_aliases() -> None:
    out = ResultValidator().validate(FULL)
    assert out.warnings == []
    assert out.score == 712
    dumped = out.result.to_json_dict()
    assert dumped["disputes"]["items"][0]["accountName"] == "Card"
    assert dumped["creditCards"]["recommendations"][0]["annualFee"] == "0"
    assert dumped["sideHustles"]["recommendations"][0]["skills"] == ["teaching"]


def test_out_of_range_score_becomes_null_not_clamped() -> None:
    data = json.loads(json.dumps(FULL))
    data["overview"]["score"] = 900
    out = ResultValidator(score_min=300, score_max=850).validate(data)
    assert out.score is None
    assert out.result.to_json_dict()["overview"]["score"] is None
    assert any("900" in w for w in out.warnings)


@pytest.mark.parametrize("value", [True, "abc", float("nan"), 299, 851, [700]])
def test_invalid_scores_become_null(value) -> None:
    score, warning = ResultValidator().sanitize_score(value)
    assert score is None
    assert warning


def test_boundary_and_numeric_string_scores_kept() -> None:
    v = ResultValidator()
    assert v.sanitize_score(300) == (300, None)
    assert v.sanitize_score(850.0) == (850, None)
    assert v.sanitize_score("720") == (720, None)
    assert v.sanitize_score(None) == (None, None)


def test_missing_sections_get_empty_defaults() -> None:
    out = ResultValidator().validate({"overview": {"score": None, "summary": "x"}})
    dumped = out.result.to_json_dict()
    assert dumped["disputes"] == {"items": []}
    assert dumped["creditHacks"] == {"recommendations": []}
    assert dumped["creditCards"] == {"recommendations": []}
    assert dumped["sideHustles"] == {"recommendations": []}
    assert len(out.warnings) == 4


def test_wrong_typed_section_replaced() -> None:
    out = ResultValidator().validate({"overview": "bad", "disputes": {"items": ["junk", {"bureau": "TU"}]}})
    assert out.result.overview.summary == ""
    assert [i.bureau for i in out.result.disputes.items] == ["TU"]


@pytest.mark.parametrize("data", [[], "text", {"unrelated": 1}])
def test_missing_entire_structure_is_validation_error(data) -> None:
    with pytest.raises(ResultValidationError) as ei:
        ResultValidator().validate(data)
    assert ei.value.retryable is True


def test_unparsable_text_is_validation_error() -> None:
    with pytest.raises(ResultValidationError):
        ResultValidator().validate_text("I could not analyze this report.")


def test_validate_text_accepts_fenced_json() -> None:
    text = "Here you go:\n```json\n" + json.dumps(FULL) + "\n```"
    assert ResultValidator().validate_text(text).score == 712


def test_extract_json_outer_braces() -> None:
    assert extract_json('prefix {"overview": {}} suffix') == {"overview": {}}


def test_extract_json_empty_raises() -> None:
    with pytest.raises(ValueError):
        extract_json("   ")


def test_min_greater_than_max_rejected() -> None:
    with pytest.raises(ValueError):
        ResultValidator(score_min=900, score_max=300)


@pytest.mark.parametrize(
    "value", [10**400, -(10**400), 10**5000], ids=["1e400", "-1e400", "1e5000"]
)
def test_huge_integer_score_becomes_null(value) -> None:
    data = json.loads(json.dumps(FULL))
    data["overview"]["score"] = value
    out = ResultValidator().validate(data)
    assert out.score is None
    assert out.result.to_json_dict()["overview"]["score"] is None
    assert any("outside" in w for w in out.warnings)


def test_huge_integer_score_in_model_text_becomes_null() -> None:
    text = json.dumps(FULL).replace('"score": 712', '"score": 1' + "0" * 400)
    out = ResultValidator().validate_text(text)
    assert out.score is None
