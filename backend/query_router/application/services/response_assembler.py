"""Response assembly — header fields, filters, display columns and validity errors."""

from collections.abc import Mapping

from query_router.application.services.keyword_matcher import compile_mapping, find_all
from query_router.domain.entities import (
    Domain,
    ErrorCode,
    ExtractedEntity,
    Lexicon,
    QueryError,
    QueryHeader,
    QueryMetadata,
    QueryResponse,
    QueryText,
    RoutingDecision,
)

_DEFAULT_DISPLAY_FIELDS: dict[Domain, tuple[str, ...]] = {
    Domain.CONTRACT: ("CONTRACT_NUMBER", "CUSTOMER_NAME", "STATUS"),
    Domain.PARTS: ("PART_NUMBER", "DESCRIPTION", "QUANTITY"),
    Domain.ACCOUNTS: ("ACCOUNT_NUMBER", "CUSTOMER_NAME", "STATUS"),
    Domain.CUSTOMERS: ("CUSTOMER_NUMBER", "CUSTOMER_NAME"),
}

_PARTS_CREATE_MESSAGE = (
    "Parts creation is not supported: parts are loaded from the contract's parts files. "
    "To see existing parts, try 'show parts for contract <number>'."
)
_INVALID_QUERY_MESSAGE = "Query does not contain valid contract or part identifiers"


class ResponseAssembler:
    """Packages pipeline outputs into one immutable QueryResponse."""

    def __init__(self, lexicon: Lexicon):
        self._display_rules = compile_mapping(lexicon.display_fields, prefix=True)

    def assemble(
        self,
        query_text: QueryText,
        decision: RoutingDecision,
        entities: Mapping[str, ExtractedEntity],
        *,
        processing_time_ms: float = 0.0,
        session_id: str | None = None,
    ) -> QueryResponse:
        header = build_header(entities)

        errors: list[QueryError] = []
        if decision.business_rule_violation:
            errors.append(QueryError(ErrorCode.PARTS_CREATE_NOT_SUPPORTED, _PARTS_CREATE_MESSAGE))
        elif decision.domain is not Domain.HELP and not header.has_identifier() and not entities:
            errors.append(QueryError(ErrorCode.INVALID_QUERY, _INVALID_QUERY_MESSAGE))

        return QueryResponse(
            query_text=query_text,
            decision=decision,
            header=header,
            entities=tuple(entities.values()),
            display_fields=self.display_fields(query_text.corrected, decision),
            errors=tuple(errors),
            metadata=QueryMetadata(
                processing_time_ms=round(processing_time_ms, 3),
                session_id=session_id,
            ),
        )

    def display_fields(self, text: str, decision: RoutingDecision) -> tuple[str, ...]:
        """Domain defaults followed by columns named in the text, in lexicon order."""
        if decision.business_rule_violation or decision.domain is Domain.HELP:
            return ()

        fields: dict[str, None] = dict.fromkeys(_DEFAULT_DISPLAY_FIELDS.get(decision.domain, ()))
        for hit in find_all(text, self._display_rules):
            fields.setdefault(hit.payload, None)
        return tuple(fields)


def build_header(entities: Mapping[str, ExtractedEntity]) -> QueryHeader:
    def value(attribute: str) -> str | None:
        entity = entities.get(attribute)
        if entity is None or not entity.value:
            return None
        return entity.value

    return QueryHeader(
        contract_number=value("contractNumber"),
        part_number=value("partNumber"),
        customer_number=value("customerNumber"),
        account_number=value("accountNumber"),
        customer_name=value("customerName"),
        created_by=value("createdBy"),
    )
