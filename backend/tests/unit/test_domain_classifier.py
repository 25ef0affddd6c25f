"""Unit tests for domain classification and action-type resolution."""

import pytest

from query_router.application.services.action_type_resolver import ActionTypeResolver
from query_router.application.services.domain_classifier import DomainClassifier, is_past_tense
from query_router.application.services.entity_extractor import EntityExtractor
from query_router.domain.entities import (
    ActionType,
    Domain,
    ExtractedEntity,
    Lexicon,
    Operator,
)


@pytest.fixture
def classifier():
    return DomainClassifier(Lexicon.default())


@pytest.fixture
def extractor():
    return EntityExtractor()


def _route(classifier, extractor, text):
    return classifier.classify(text, extractor.extract(text))


# ── Decision table ───────────────────────────────────────────────────

class TestDomainClassifier:

    @pytest.mark.parametrize(
        "text, domain, action",
        [
            ("show contract 123456", Domain.CONTRACT, ActionType.CONTRACTS_BY_CONTRACT_NUMBER),
            ("show contract 123456 effective date", Domain.CONTRACT, ActionType.CONTRACTS_BY_CONTRACT_NUMBER_DATES),
            ("pricing for contract 123456", Domain.CONTRACT, ActionType.CONTRACTS_BY_CONTRACT_NUMBER_PRICING),
            ("contracts for customer acme corp", Domain.CONTRACT, ActionType.CONTRACTS_BY_CUSTOMER_NAME),
            ("customer 12345 contracts", Domain.CONTRACT, ActionType.CONTRACTS_BY_CUSTOMER_NUMBER),
            ("contracts for account 567890", Domain.CONTRACT, ActionType.CONTRACTS_BY_ACCOUNT_NUMBER),
            ("show contracts created by vinod kumar", Domain.CONTRACT, ActionType.CONTRACTS_BY_USER),
            ("contracts containing part AE125", Domain.CONTRACT, ActionType.CONTRACTS_BY_PARTS),
            ("list all contracts", Domain.CONTRACT, ActionType.CONTRACTS_GENERAL),
            ("show part P12345", Domain.PARTS, ActionType.PARTS_BY_PART_NUMBER),
            ("parts for contract ABC-789", Domain.PARTS, ActionType.PARTS_BY_CONTRACT),
            ("show inventory", Domain.PARTS, ActionType.PARTS_GENERAL),
            ("how to create contract", Domain.HELP, ActionType.HELP_CONTRACT_CREATION),
            ("what is the approval workflow", Domain.HELP, ActionType.HELP_CONTRACT_WORKFLOW),
            ("help", Domain.HELP, ActionType.HELP_GENERAL),
        ],
    )
    def test_routes_query(self, classifier, extractor, text, domain, action):
        decision = _route(classifier, extractor, text)

        assert decision.domain is domain
        assert decision.action_type is action
        assert decision.reason

    def test_parts_creation_is_a_business_rule_violation(self, classifier, extractor):
        """Parts are loaded from files; asking to create them is refused."""
        decision = _route(classifier, extractor, "create parts for contract 123456")

        assert decision.domain is Domain.PARTS
        assert decision.business_rule_violation is True
        assert decision.action_type is ActionType.PARTS_CREATE_NOT_SUPPORTED
        assert "cannot be created" in decision.reason

    @pytest.mark.parametrize(
        "text",
        [
            "parts to add for contract 123456",
            "components, how to generate them",
            "inventory set up for contract 123456",
            "line items: how do i set them up",
        ],
    )
    def test_parts_creation_regardless_of_word_order(self, classifier, extractor, text):
        """The parts keyword may come before the create phrase, which may span several words."""
        decision = _route(classifier, extractor, text)

        assert decision.domain is Domain.PARTS
        assert decision.business_rule_violation is True
        assert decision.action_type is ActionType.PARTS_CREATE_NOT_SUPPORTED

    def test_past_tense_create_is_not_a_violation(self, classifier, extractor):
        """'new parts created this month' is a lookup, not a creation request."""
        decision = _route(classifier, extractor, "new parts created this month")

        assert decision.domain is Domain.PARTS
        assert decision.business_rule_violation is False
        assert decision.action_type is ActionType.PARTS_BY_DATE_RANGE

    def test_create_word_next_to_contract_number_is_a_lookup(self, classifier, extractor):
        decision = _route(classifier, extractor, "new contract 123456")

        assert decision.domain is Domain.CONTRACT
        assert decision.action_type is ActionType.CONTRACTS_BY_CONTRACT_NUMBER

    def test_help_phrasing_wins_over_contract_number(self, classifier, extractor):
        decision = _route(classifier, extractor, "how to renew contract 123456")

        assert decision.domain is Domain.HELP

    def test_keywords_match_whole_words(self, classifier):
        """'show' does not contain the create phrase 'how', nor 'renewal' the word 'new'."""
        analysis = classifier.analyze("show renewal terms")

        assert analysis.create == ()
        assert "renewal" in analysis.contract

    def test_matched_keywords_are_reported(self, classifier, extractor):
        decision = _route(classifier, extractor, "create parts for contract 123456")

        assert decision.matched_keywords["parts"] == ("parts",)
        assert decision.matched_keywords["create"] == ("create",)
        assert "contract" in decision.matched_keywords["contract"]

    def test_custom_lexicon_changes_routing(self, extractor):
        lexicon = Lexicon.build(parts_keywords=("widgets",))
        classifier = DomainClassifier(lexicon)

        assert _route(classifier, extractor, "show widgets").domain is Domain.PARTS
        assert _route(classifier, extractor, "show parts").domain is Domain.CONTRACT


class TestPastTense:

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("contracts created by john", True),
            ("parts created this month", True),
            ("contracts created last year", True),
            ("create a contract", False),
            ("created", False),
            ("contract created", False),
        ],
    )
    def test_is_past_tense(self, text, expected):
        assert is_past_tense(text) is expected


# ── Action resolution ────────────────────────────────────────────────

class TestActionTypeResolver:

    @pytest.fixture
    def resolver(self):
        return ActionTypeResolver()

    @staticmethod
    def _entities(*items):
        return {attribute: ExtractedEntity(attribute, operator, value) for attribute, operator, value in items}

    def test_violation_overrides_everything(self, resolver):
        entities = self._entities(("createdDate", Operator.THIS_MONTH, "this month"))

        action = resolver.resolve(Domain.PARTS, "create parts", entities, business_rule_violation=True)

        assert action is ActionType.PARTS_CREATE_NOT_SUPPORTED

    def test_date_range_overrides_contract_lookup(self, resolver):
        entities = self._entities(
            ("contractNumber", Operator.EQUALS, "123456"),
            ("effectiveDate", Operator.BETWEEN, "01/01/2024 TO 12/31/2024"),
        )

        action = resolver.resolve(Domain.CONTRACT, "contract 123456 effective", entities)

        assert action is ActionType.CONTRACTS_BY_DATE_RANGE

    def test_date_range_in_parts_domain(self, resolver):
        entities = self._entities(("createdDate", Operator.TILL_DATE, "till date"))

        assert resolver.resolve(Domain.PARTS, "parts", entities) is ActionType.PARTS_BY_DATE_RANGE

    def test_point_comparison_is_not_a_date_range(self, resolver):
        entities = self._entities(("expirationDate", Operator.LESS_THAN, "2025-06-30"))

        assert resolver.resolve(Domain.CONTRACT, "contracts", entities) is ActionType.CONTRACTS_GENERAL

    def test_part_number_has_priority_in_parts(self, resolver):
        entities = self._entities(
            ("contractNumber", Operator.EQUALS, "123456"),
            ("partNumber", Operator.EQUALS, "AE125"),
        )

        assert resolver.resolve(Domain.PARTS, "parts", entities) is ActionType.PARTS_BY_PART_NUMBER

    @pytest.mark.parametrize(
        "attribute, action",
        [
            ("createdBy", ActionType.PARTS_BY_USER),
            ("customerName", ActionType.PARTS_BY_CUSTOMER),
            ("customerNumber", ActionType.PARTS_BY_CUSTOMER),
        ],
    )
    def test_parts_by_entity(self, resolver, attribute, action):
        entities = self._entities((attribute, Operator.EQUALS, "X1"))

        assert resolver.resolve(Domain.PARTS, "parts", entities) is action

    def test_contract_customer_detail(self, resolver):
        entities = self._entities(("contractNumber", Operator.EQUALS, "123456"))

        action = resolver.resolve(Domain.CONTRACT, "customer on contract 123456", entities)

        assert action is ActionType.CONTRACTS_BY_CONTRACT_NUMBER_CUSTOMER
