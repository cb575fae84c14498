"""
Module: fixtures

Purpose:
    The TestFixture record: one (incorrect, correct) code pair extracted
    from a rule. Serialized with camelCase keys, the wire format consumed
    by downstream test harnesses.

Key Classes:
    - TestFixture: Immutable extracted example pair

Used By:
    - compiler.extractor: Creates fixtures
    - core.utils.serialization: Reads/writes the fixture corpus
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .rules import Impact


@dataclass(frozen=True, slots=True)
class TestFixture:
    """
    One extracted incorrect/correct pair.

    Attributes:
        rule_id: Id of the rule the pair came from
        category_id: Category the rule belongs to
        impact: Rule impact level
        language: Fence tag of the incorrect block, else of the correct block
        incorrect_code: Code of the i-th incorrect example
        correct_code: Code of the i-th correct example
        pair_index: i, 0-based position of the pair within the rule
        rule_title: Title of the rule
    """

    __test__ = False  # not a pytest test class

    rule_id: str
    category_id: str
    impact: Impact
    language: Optional[str]
    incorrect_code: str
    correct_code: str
    pair_index: int
    rule_title: str = ""

    def __post_init__(self) -> None:
        if self.pair_index < 0:
            raise ValueError(f"pair_index cannot be negative: {self.pair_index}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ruleId": self.rule_id,
            "ruleTitle": self.rule_title,
            "categoryId": self.category_id,
            "impact": self.impact.value,
            "language": self.language,
            "incorrectCode": self.incorrect_code,
            "correctCode": self.correct_code,
            "pairIndex": self.pair_index,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> TestFixture:
        return cls(
            rule_id=data["ruleId"],
            category_id=data["categoryId"],
            impact=Impact.parse(data["impact"]),
            language=data.get("language"),
            incorrect_code=data["incorrectCode"],
            correct_code=data["correctCode"],
            pair_index=data["pairIndex"],
            rule_title=data.get("ruleTitle", ""),
        )
