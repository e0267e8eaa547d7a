"""Pydantic schema for the structured analysis result. Wire keys are camelCase."""
from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

SECTION_KEYS = ("overview", "disputes", "creditHacks", "creditCards", "sideHustles")


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def _to_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return [value] if value.strip() else []
    return []


def _only_objects(value: Any) -> list[dict[str, Any]]:
    return [v for v in _to_list(value) if isinstance(v, dict)]


Text = Annotated[str, BeforeValidator(_to_text)]
TextList = Annotated[list[Text], BeforeValidator(_to_list)]


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Overview(_Model):
    score: int | float | None = None
    summary: Text = ""
    positive_factors: TextList = Field(default_factory=list, alias="positiveFactors")
    negative_factors: TextList = Field(default_factory=list, alias="negativeFactors")


class DisputeItem(_Model):
    bureau: Text = ""
    account_name: Text = Field(default="", alias="accountName")
    account_number: Text = Field(default="", alias="accountNumber")
    issue_type: Text = Field(default="", alias="issueType")
    recommended_action: Text = Field(default="", alias="recommendedAction")


class Disputes(_Model):
    items: Annotated[list[DisputeItem], BeforeValidator(_only_objects)] = Field(default_factory=list)


class CreditHack(_Model):
    title: Text = ""
    description: Text = ""
    impact: Text = ""
    timeframe: Text = ""
    steps: TextList = Field(default_factory=list)


class CreditHacks(_Model):
    recommendations: Annotated[list[CreditHack], BeforeValidator(_only_objects)] = Field(default_factory=list)


class CreditCard(_Model):
    name: Text = ""
    issuer: Text = ""
    annual_fee: Text = Field(default="", alias="annualFee")
    apr: Text = ""
    rewards: Text = ""
    approval_likelihood: Text = Field(default="", alias="approvalLikelihood")
    best_for: Text = Field(default="", alias="bestFor")


class CreditCards(_Model):
    recommendations: Annotated[list[CreditCard], BeforeValidator(_only_objects)] = Field(default_factory=list)


class SideHustle(_Model):
    title: Text = ""
    description: Text = ""
    potential_earnings: Text = Field(default="", alias="potentialEarnings")
    startup_cost: Text = Field(default="", alias="startupCost")
    difficulty: Text = ""
    time_commitment: Text = Field(default="", alias="timeCommitment")
    skills: TextList = Field(default_factory=list)


class SideHustles(_Model):
    recommendations: Annotated[list[SideHustle], BeforeValidator(_only_objects)] = Field(default_factory=list)


class AnalysisResult(_Model):
    """Every section is always present after validation, possibly empty."""

    overview: Overview = Field(default_factory=Overview)
    disputes: Disputes = Field(default_factory=Disputes)
    credit_hacks: CreditHacks = Field(default_factory=CreditHacks, alias="creditHacks")
    credit_cards: CreditCards = Field(default_factory=CreditCards, alias="creditCards")
    side_hustles: SideHustles = Field(default_factory=SideHustles, alias="sideHustles")

    @property
    def score(self) -> int | float | None:
        return self.overview.score

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
