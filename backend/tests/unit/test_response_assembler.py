"""Unit tests for the ResponseAssembler and the full QueryPipeline."""

import logging

import pytest

from query_router.application.services.query_pipeline import QueryPipeline
from query_router.application.services.response_assembler import ResponseAssembler, build_header
from query_router.domain.entities import (
    ActionType,
    Domain,
    ErrorCode,
    ExtractedEntity,
    Lexicon,
    Operator,
    QueryText,
    RoutingDecision,
)


@pytest.fixture
def assembler():
    return ResponseAssembler(Lexicon.default())


@pytest.fixture
def pipeline():
    return QueryPipeline(Lexicon.default())


def _decision(domain, action, violation=False):
    return RoutingDecision(domain=domain, action_type=action, business_rule_violation=violation)


def _text(value):
    return QueryText(original=value, corrected=value)


# ── Assembler ────────────────────────────────────────────────────────

class TestResponseAssembler:

    def test_contract_defaults_then_requested_columns(self, assembler):
        decision = _decision(Domain.CONTRACT, ActionType.CONTRACTS_BY_CONTRACT_NUMBER_DATES)

        fields = assembler.display_fields("show contract 123456 effective date", decision)

        assert fields == ("CONTRACT_NUMBER", "CUSTOMER_NAME", "STATUS", "EFFECTIVE_DATE")

    def test_parts_defaults(self, assembler):
        decision = _decision(Domain.PARTS, ActionType.PARTS_GENERAL)

        fields = assembler.display_fields("show parts with warranty", decision)

        assert fields == ("PART_NUMBER", "DESCRIPTION", "QUANTITY", "WARRANTY")

    def test_display_keywords_match_as_prefixes(self, assembler):
        """'specifications' selects the column mapped from 'specification'."""
        decision = _decision(Domain.PARTS, ActionType.PARTS_GENERAL)

        fields = assembler.display_fields("part specifications", decision)

        assert "SPECIFICATION" in fields

    def test_columns_are_not_duplicated(self, assembler):
        decision = _decision(Domain.CONTRACT, ActionType.CONTRACTS_GENERAL)

        fields = assembler.display_fields("contract price pricing cost status", decision)

        assert fields.count("PRICE") == 1
        assert fields.count("STATUS") == 1

    @pytest.mark.parametrize(
        "decision",
        [
            _decision(Domain.HELP, ActionType.HELP_GENERAL),
            _decision(Domain.PARTS, ActionType.PARTS_CREATE_NOT_SUPPORTED, violation=True),
        ],
    )
    def test_no_display_fields_for_help_or_violation(self, assembler, decision):
        assert assembler.display_fields("price status effective", decision) == ()

    def test_violation_carries_remediation_error(self, assembler):
        decision = _decision(Domain.PARTS, ActionType.PARTS_CREATE_NOT_SUPPORTED, violation=True)

        response = assembler.assemble(_text("create parts"), decision, {})

        assert response.error_codes() == [ErrorCode.PARTS_CREATE_NOT_SUPPORTED]
        assert "show parts for contract" in response.errors[0].message
        assert response.is_valid is False

    def test_no_identifier_and_no_entities_is_invalid(self, assembler):
        decision = _decision(Domain.CONTRACT, ActionType.CONTRACTS_GENERAL)

        response = assembler.assemble(_text("show me everything"), decision, {})

        assert response.error_codes() == [ErrorCode.INVALID_QUERY]
        assert response.errors[0].message == "Query does not contain valid contract or part identifiers"

    def test_filter_entity_alone_is_valid(self, assembler):
        decision = _decision(Domain.CONTRACT, ActionType.CONTRACTS_GENERAL)
        entities = {"status": ExtractedEntity("status", Operator.EQUALS, "ACTIVE")}

        response = assembler.assemble(_text("show active contracts"), decision, entities)

        assert response.is_valid is True
        assert response.entities == (entities["status"],)

    def test_help_without_entities_is_valid(self, assembler):
        decision = _decision(Domain.HELP, ActionType.HELP_GENERAL)

        response = assembler.assemble(_text("help"), decision, {})

        assert response.is_valid is True

    def test_metadata(self, assembler):
        decision = _decision(Domain.HELP, ActionType.HELP_GENERAL)

        response = assembler.assemble(
            _text("help"), decision, {}, processing_time_ms=1.23456, session_id="s-1",
        )

        assert response.metadata.processing_time_ms == 1.235
        assert response.metadata.session_id == "s-1"
        assert response.metadata.cached is False
        assert response.metadata.timestamp.tzinfo is not None


class TestBuildHeader:

    def test_header_lifts_identifiers(self):
        header = build_header({
            "contractNumber": ExtractedEntity("contractNumber", Operator.EQUALS, "123456"),
            "createdBy": ExtractedEntity("createdBy", Operator.EQUALS, "Vinod Kumar"),
            "status": ExtractedEntity("status", Operator.EQUALS, "ACTIVE"),
        })

        assert header.contract_number == "123456"
        assert header.created_by == "Vinod Kumar"
        assert header.part_number is None
        assert header.has_identifier() is True

    def test_empty_header(self):
        assert build_header({}).has_identifier() is False


# ── Pipeline ─────────────────────────────────────────────────────────

class TestQueryPipeline:

    def test_misspelled_contract_lookup(self, pipeline):
        response = pipeline.run("shw contrct 123456 effectuve dat")

        assert response.query_text.corrected == "show contract 123456 effective date"
        assert response.has_spell_corrections is True
        assert response.decision.domain is Domain.CONTRACT
        assert response.decision.action_type is ActionType.CONTRACTS_BY_CONTRACT_NUMBER_DATES
        assert response.header.contract_number == "123456"
        assert response.display_fields == ("CONTRACT_NUMBER", "CUSTOMER_NAME", "STATUS", "EFFECTIVE_DATE")
        assert response.is_valid is True

    def test_parts_creation_request(self, pipeline):
        response = pipeline.run("Creat prts for contarct 123456", session_id="abc")

        assert response.query_text.corrected == "Create parts for contract 123456"
        assert response.decision.action_type is ActionType.PARTS_CREATE_NOT_SUPPORTED
        assert response.header.contract_number == "123456"
        assert response.error_codes() == [ErrorCode.PARTS_CREATE_NOT_SUPPORTED]
        assert response.display_fields == ()
        assert response.metadata.session_id == "abc"

    def test_help_request(self, pipeline):
        response = pipeline.run("how to create contract")

        assert response.decision.domain is Domain.HELP
        assert response.decision.action_type is ActionType.HELP_CONTRACT_CREATION
        assert response.entities == ()
        assert response.is_valid is True

    def test_date_range_listing(self, pipeline):
        response = pipeline.run("contracts effective between 01/01/2024 and 12/31/2024")

        assert response.decision.action_type is ActionType.CONTRACTS_BY_DATE_RANGE
        assert [e.attribute for e in response.entities] == ["effectiveDate"]
        assert response.is_valid is True

    def test_unroutable_text_is_invalid(self, pipeline):
        response = pipeline.run("show me everything")

        assert response.decision.domain is Domain.CONTRACT
        assert response.error_codes() == [ErrorCode.INVALID_QUERY]

    def test_stage_trace_is_logged_when_enabled(self, pipeline, caplog):
        with caplog.at_level(logging.INFO, logger="QueryPipeline"):
            pipeline.run("show contract 123456")

        assert "[SPELL]" in caplog.text
        assert "[CLASSIFY]" in caplog.text
        assert "contracts_by_contractNumber" in caplog.text

    def test_stage_trace_is_silent_by_default(self, pipeline, caplog):
        with caplog.at_level(logging.WARNING, logger="QueryPipeline"):
            pipeline.run("show contract 123456")

        assert "[CLASSIFY]" not in caplog.text
