import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Pattern, Tuple

from resume_matcher.core import resume_rules
from resume_matcher.core.config import settings
from resume_matcher.core.exceptions import ClassificationRejection

logger = logging.getLogger(__name__)

RULE_KINDS = {
    resume_rules.MIN_LENGTH,
    resume_rules.MAX_LENGTH,
    resume_rules.REJECT_ANY,
    resume_rules.REQUIRE_ANY,
}


@dataclass(frozen=True)
class ContentRule:
    name: str
    kind: str
    reason: str
    phrases: Tuple[str, ...] = ()
    patterns: Tuple[Pattern, ...] = ()
    limit: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ContentRule":
        kind = raw["kind"]
        if kind not in RULE_KINDS:
            raise ValueError(f"Unknown rule kind {kind!r} in rule {raw.get('name')!r}")
        if kind in (resume_rules.MIN_LENGTH, resume_rules.MAX_LENGTH) and raw.get("limit") is None:
            raise ValueError(f"Length rule {raw['name']!r} needs a limit")
        return cls(
            name=raw["name"],
            kind=kind,
            reason=raw["reason"],
            phrases=tuple(p.lower() for p in raw.get("phrases", [])),
            patterns=tuple(re.compile(p) for p in raw.get("patterns", [])),
            limit=raw.get("limit"),
        )

    def _matches_any(self, lowered: str) -> bool:
        return any(p in lowered for p in self.phrases) or any(r.search(lowered) for r in self.patterns)

    def passes(self, text: str, lowered: str) -> bool:
        if self.kind == resume_rules.MIN_LENGTH:
            return len(text.strip()) >= self.limit
        if self.kind == resume_rules.MAX_LENGTH:
            return len(text) <= self.limit
        if self.kind == resume_rules.REJECT_ANY:
            return not self._matches_any(lowered)
        return self._matches_any(lowered)


@dataclass
class ClassificationResult:
    accepted: bool
    rule: Optional[str] = None
    reason: Optional[str] = None

    def raise_for_rejection(self):
        if not self.accepted:
            raise ClassificationRejection(self.reason, rule=self.rule)


@dataclass
class ResumeContentClassifier:
    """
    Ordered rule evaluator deciding whether extracted text is a resume.
    The first failing rule wins and its reason is reported verbatim.
    """
    rules: List[ContentRule] = field(default_factory=list)

    @classmethod
    def from_rule_dicts(cls, raw_rules: Iterable[Dict[str, Any]]) -> "ResumeContentClassifier":
        return cls(rules=[ContentRule.from_dict(r) for r in raw_rules])

    @classmethod
    def from_json_file(cls, path: str) -> "ResumeContentClassifier":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_rule_dicts(json.load(f))

    def classify(self, text: str) -> ClassificationResult:
        text = text or ""
        lowered = text.lower()
        for rule in self.rules:
            if not rule.passes(text, lowered):
                logger.info(f"Resume content rejected by rule '{rule.name}'")
                return ClassificationResult(accepted=False, rule=rule.name, reason=rule.reason)
        return ClassificationResult(accepted=True)


_default_classifier: Optional[ResumeContentClassifier] = None


def get_classifier() -> ResumeContentClassifier:
    """Classifier built from RESUME_RULES_FILE when set, otherwise the built-in table."""
    global _default_classifier
    if _default_classifier is None:
        if settings.resume_rules_file:
            logger.info(f"Loading resume rules from {settings.resume_rules_file}")
            _default_classifier = ResumeContentClassifier.from_json_file(settings.resume_rules_file)
        else:
            _default_classifier = ResumeContentClassifier.from_rule_dicts(resume_rules.DEFAULT_RULES)
    return _default_classifier
