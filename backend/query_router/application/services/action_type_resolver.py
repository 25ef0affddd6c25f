"""Action-type resolution — picks one action label within a routed domain.

Each domain walks its own ordered rule list, most specific first; the
first rule that applies wins. A date-range operator on any extracted
entity finally overrides the choice with the domain's date-range listing.
"""

from collections.abc import Mapping

from query_router.application.services.keyword_matcher import KeywordRule, first_match, rule
from query_router.domain.entities import ActionType, Domain, ExtractedEntity

# refinements of a contract-number lookup, checked in order
_CONTRACT_DETAIL_RULES: tuple[KeywordRule[ActionType], ...] = (
    rule(r"\beffective\b|\bexpir\w*|\bexpiry\b|\bstart\s+date\b|\bend\s+date\b",
         ActionType.CONTRACTS_BY_CONTRACT_NUMBER_DATES),
    rule(r"\bpric\w*|\bcost\w*|\bamount\b|\bvalue\b|\brates?\b",
         ActionType.CONTRACTS_BY_CONTRACT_NUMBER_PRICING),
    rule(r"\bcustomers?\b|\bclients?\b",
         ActionType.CONTRACTS_BY_CONTRACT_NUMBER_CUSTOMER),
)

_HELP_RULES: tuple[KeywordRule[ActionType], ...] = (
    rule(r"\bcreat\w*|\bnew\b|\badd\b|\bmake\b|\bbuild\b|\bset\s*up\b|\bgenerate\b|\bestablish\b",
         ActionType.HELP_CONTRACT_CREATION),
    rule(r"\bworkflow\b|\bprocess\b|\bsteps?\b|\bprocedure\b|\blifecycle\b|\bapprov\w*|\bauthori[sz]e\b",
         ActionType.HELP_CONTRACT_WORKFLOW),
)

# (attribute, action) in priority order
_PARTS_BY_ENTITY: tuple[tuple[str, ActionType], ...] = (
    ("partNumber", ActionType.PARTS_BY_PART_NUMBER),
    ("contractNumber", ActionType.PARTS_BY_CONTRACT),
    ("createdBy", ActionType.PARTS_BY_USER),
    ("customerName", ActionType.PARTS_BY_CUSTOMER),
    ("customerNumber", ActionType.PARTS_BY_CUSTOMER),
)

_CONTRACTS_BY_ENTITY: tuple[tuple[str, ActionType], ...] = (
    ("customerName", ActionType.CONTRACTS_BY_CUSTOMER_NAME),
    ("customerNumber", ActionType.CONTRACTS_BY_CUSTOMER_NUMBER),
    ("accountNumber", ActionType.CONTRACTS_BY_ACCOUNT_NUMBER),
    ("createdBy", ActionType.CONTRACTS_BY_USER),
)


class ActionTypeResolver:
    """Maps (domain, text, entities) to one ActionType."""

    def resolve(
        self,
        domain: Domain,
        text: str,
        entities: Mapping[str, ExtractedEntity],
        *,
        business_rule_violation: bool = False,
        part_containment: bool = False,
    ) -> ActionType:
        if business_rule_violation:
            return ActionType.PARTS_CREATE_NOT_SUPPORTED

        if domain is Domain.PARTS:
            action = self._resolve_parts(entities)
        elif domain is Domain.HELP:
            action = self._resolve_help(text)
        else:
            action = self._resolve_contracts(text, entities, part_containment=part_containment)

        if _has_date_range(entities):
            if domain is Domain.PARTS:
                return ActionType.PARTS_BY_DATE_RANGE
            return ActionType.CONTRACTS_BY_DATE_RANGE
        return action

    @staticmethod
    def _resolve_parts(entities: Mapping[str, ExtractedEntity]) -> ActionType:
        for attribute, action in _PARTS_BY_ENTITY:
            if attribute in entities:
                return action
        return ActionType.PARTS_GENERAL

    @staticmethod
    def _resolve_help(text: str) -> ActionType:
        hit = first_match(text, _HELP_RULES)
        return hit.payload if hit else ActionType.HELP_GENERAL

    @staticmethod
    def _resolve_contracts(
        text: str,
        entities: Mapping[str, ExtractedEntity],
        *,
        part_containment: bool,
    ) -> ActionType:
        if part_containment:
            return ActionType.CONTRACTS_BY_PARTS
        if "contractNumber" in entities:
            hit = first_match(text, _CONTRACT_DETAIL_RULES)
            return hit.payload if hit else ActionType.CONTRACTS_BY_CONTRACT_NUMBER
        for attribute, action in _CONTRACTS_BY_ENTITY:
            if attribute in entities:
                return action
        return ActionType.CONTRACTS_GENERAL


def _has_date_range(entities: Mapping[str, ExtractedEntity]) -> bool:
    return any(entity.operator.is_date_range for entity in entities.values())
