"""Domain classification — keyword decision table over the corrected query text.

Decision table (first match wins):
    1. parts + create keyword, not past tense   → PARTS, creation not supported
    2. "contracts containing part ..." phrasing  → CONTRACT (contracts_by_parts)
    3. parts keyword                             → PARTS
    4. create / help keyword, not past tense     → HELP
       (unless a contract number is present without explicit help phrasing)
    5. anything else                             → CONTRACT

The action within the chosen domain is delegated to ActionTypeResolver.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass

from query_router.application.services.action_type_resolver import ActionTypeResolver
from query_router.application.services.keyword_matcher import (
    KeywordHit,
    compile_phrases,
    contains_any,
    find_all,
    rule,
)
from query_router.domain.entities import Domain, ExtractedEntity, Lexicon, RoutingDecision

logger = logging.getLogger(__name__)

_PAST_TENSE_RE = re.compile(r"\bcreated\b", re.IGNORECASE)
_PAST_TENSE_CONTEXT_RE = re.compile(
    r"\b(?:by|in|on|after|before|during|since|between|from|this|last)\b", re.IGNORECASE,
)

_PART_CONTAINMENT_RULES = (
    rule(
        r"\b(?:contracts?|agreements?)\b.*?\b(?:contain(?:s|ing)?|includ(?:e|es|ing)|with|having|that\s+have|has)"
        r"\s+(?:the\s+|a\s+|an\s+)?(?:parts?|components?|items?)\b",
        True,
    ),
)

_HELP_PHRASES = compile_phrases((
    "help", "guide", "how to", "how do i", "how can i", "steps", "tutorial",
    "instructions", "workflow", "process", "explain",
))


@dataclass(frozen=True)
class KeywordAnalysis:
    """Which lexicon keywords occur in a query."""

    parts: tuple[str, ...]
    create: tuple[str, ...]
    contract: tuple[str, ...]
    past_tense: bool

    def as_dict(self) -> dict[str, tuple[str, ...]]:
        return {"parts": self.parts, "create": self.create, "contract": self.contract}


class DomainClassifier:
    """Routes corrected query text to a domain and action type."""

    def __init__(self, lexicon: Lexicon, resolver: ActionTypeResolver | None = None):
        self._parts_rules = compile_phrases(lexicon.parts_keywords)
        self._create_rules = compile_phrases(lexicon.create_keywords)
        self._contract_rules = compile_phrases(lexicon.contract_keywords)
        self._resolver = resolver or ActionTypeResolver()

    def analyze(self, text: str) -> KeywordAnalysis:
        return KeywordAnalysis(
            parts=_payloads(find_all(text, self._parts_rules)),
            create=_payloads(find_all(text, self._create_rules)),
            contract=_payloads(find_all(text, self._contract_rules)),
            past_tense=is_past_tense(text),
        )

    def classify(self, text: str, entities: Mapping[str, ExtractedEntity]) -> RoutingDecision:
        analysis = self.analyze(text)
        creating = bool(analysis.create) and not analysis.past_tense
        violation = False
        containment = False

        if analysis.parts and creating:
            domain = Domain.PARTS
            violation = True
            reason = (
                f"Parts keyword '{analysis.parts[0]}' combined with create keyword "
                f"'{analysis.create[0]}': parts are loaded from files and cannot be created"
            )
        elif contains_any(text, _PART_CONTAINMENT_RULES):
            domain = Domain.CONTRACT
            containment = True
            reason = "Contracts filtered by the parts they contain"
        elif analysis.parts:
            domain = Domain.PARTS
            reason = f"Parts keyword '{analysis.parts[0]}' found"
        elif creating and not self._is_lookup("contractNumber" in entities, text):
            domain = Domain.HELP
            reason = f"Create/help keyword '{analysis.create[0]}' found"
        else:
            domain = Domain.CONTRACT
            if analysis.contract:
                reason = f"Contract keyword '{analysis.contract[0]}' found"
            elif entities:
                reason = "No domain keywords; routed by extracted entities"
            else:
                reason = "No domain keywords found; defaulting to contracts"

        action = self._resolver.resolve(
            domain,
            text,
            entities,
            business_rule_violation=violation,
            part_containment=containment,
        )
        logger.debug("Classified '%s' as %s/%s (%s)", text, domain.value, action.value, reason)
        return RoutingDecision(
            domain=domain,
            action_type=action,
            reason=reason,
            business_rule_violation=violation,
            matched_keywords=analysis.as_dict(),
        )

    @staticmethod
    def _is_lookup(has_contract_number: bool, text: str) -> bool:
        """A create-style word next to a concrete contract number reads as a lookup."""
        return has_contract_number and not contains_any(text, _HELP_PHRASES)


def is_past_tense(text: str) -> bool:
    """True for historical phrasing such as "created by ..." or "created in 2024"."""
    return bool(_PAST_TENSE_RE.search(text) and _PAST_TENSE_CONTEXT_RE.search(text))


def _payloads(hits: tuple[KeywordHit[str], ...]) -> tuple[str, ...]:
    return tuple(hit.payload for hit in hits)
