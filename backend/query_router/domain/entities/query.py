"""Domain entities for routed queries — text, entities, routing decision, response."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Domain(str, Enum):
    """Top-level query category."""

    CONTRACT = "CONTRACT"
    PARTS = "PARTS"
    HELP = "HELP"
    ACCOUNTS = "ACCOUNTS"
    CUSTOMERS = "CUSTOMERS"
    UNKNOWN = "UNKNOWN"


class Operator(str, Enum):
    """Comparison applied to an extracted filter value."""

    EQUALS = "EQUALS"
    CONTAINS = "CONTAINS"
    BETWEEN = "BETWEEN"
    GREATER_THAN = "GREATER_THAN"
    LESS_THAN = "LESS_THAN"
    THIS_MONTH = "THIS_MONTH"
    THIS_YEAR = "THIS_YEAR"
    TILL_DATE = "TILL_DATE"

    @property
    def is_date_range(self) -> bool:
        return self in _DATE_RANGE_OPERATORS


_DATE_RANGE_OPERATORS = frozenset({
    Operator.BETWEEN,
    Operator.THIS_MONTH,
    Operator.THIS_YEAR,
    Operator.TILL_DATE,
})


class ActionType(str, Enum):
    """The specific operation a routed query maps to."""

    CONTRACTS_BY_CONTRACT_NUMBER = "contracts_by_contractNumber"
    CONTRACTS_BY_CONTRACT_NUMBER_DATES = "contracts_by_contractNumber_dates"
    CONTRACTS_BY_CONTRACT_NUMBER_PRICING = "contracts_by_contractNumber_pricing"
    CONTRACTS_BY_CONTRACT_NUMBER_CUSTOMER = "contracts_by_contractNumber_customer"
    CONTRACTS_BY_CUSTOMER_NAME = "contracts_by_customerName"
    CONTRACTS_BY_CUSTOMER_NUMBER = "contracts_by_customerNumber"
    CONTRACTS_BY_ACCOUNT_NUMBER = "contracts_by_accountNumber"
    CONTRACTS_BY_USER = "contracts_by_user"
    CONTRACTS_BY_PARTS = "contracts_by_parts"
    CONTRACTS_BY_DATE_RANGE = "contracts_by_date_range"
    CONTRACTS_GENERAL = "contracts_general"

    PARTS_BY_PART_NUMBER = "parts_by_partNumber"
    PARTS_BY_CONTRACT = "parts_by_contract"
    PARTS_BY_USER = "parts_by_user"
    PARTS_BY_CUSTOMER = "parts_by_customer"
    PARTS_BY_DATE_RANGE = "parts_by_date_range"
    PARTS_GENERAL = "parts_general"
    PARTS_CREATE_NOT_SUPPORTED = "parts_create_not_supported"

    HELP_CONTRACT_CREATION = "help_contract_creation"
    HELP_CONTRACT_WORKFLOW = "help_contract_workflow"
    HELP_GENERAL = "help_general"


class ErrorCode(str, Enum):
    """Error codes carried in a QueryResponse."""

    INVALID_INPUT = "INVALID_INPUT"
    INVALID_QUERY = "INVALID_QUERY"
    PARTS_CREATE_NOT_SUPPORTED = "PARTS_CREATE_NOT_SUPPORTED"
    PROCESSING_ERROR = "PROCESSING_ERROR"
    SYSTEM_ERROR = "SYSTEM_ERROR"


@dataclass(frozen=True)
class QueryText:
    """The user's text and its spell-corrected form."""

    original: str
    corrected: str
    changed: bool = False


@dataclass(frozen=True)
class ExtractedEntity:
    """A filter condition pulled out of the query text."""

    attribute: str       # "contractNumber" | "partNumber" | "effectiveDate" | ...
    operator: Operator
    value: str           # BETWEEN values are encoded "start TO end"


@dataclass(frozen=True)
class RoutingDecision:
    """Domain + action chosen for a query, with a human-readable reason."""

    domain: Domain
    action_type: ActionType
    reason: str = ""
    business_rule_violation: bool = False
    matched_keywords: dict[str, tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class QueryHeader:
    """Identifying fields lifted from the extracted entities."""

    contract_number: str | None = None
    part_number: str | None = None
    customer_number: str | None = None
    account_number: str | None = None
    customer_name: str | None = None
    created_by: str | None = None

    def has_identifier(self) -> bool:
        return any(
            value is not None
            for value in (
                self.contract_number,
                self.part_number,
                self.customer_number,
                self.account_number,
                self.customer_name,
                self.created_by,
            )
        )


@dataclass(frozen=True)
class QueryError:
    """A coded error attached to a response."""

    code: ErrorCode
    message: str


@dataclass(frozen=True)
class QueryMetadata:
    """Timing and correlation data for one processed query."""

    processing_time_ms: float = 0.0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    session_id: str | None = None
    cached: bool = False


@dataclass(frozen=True)
class QueryResponse:
    """Complete result of routing one query.

    ``decision`` is None only when the input was rejected before any
    processing (INVALID_INPUT) or the pipeline failed outright.
    """

    query_text: QueryText
    decision: RoutingDecision | None = None
    header: QueryHeader = field(default_factory=QueryHeader)
    entities: tuple[ExtractedEntity, ...] = ()
    display_fields: tuple[str, ...] = ()
    errors: tuple[QueryError, ...] = ()
    metadata: QueryMetadata = field(default_factory=QueryMetadata)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_spell_corrections(self) -> bool:
        return self.query_text.changed

    def error_codes(self) -> list[ErrorCode]:
        return [error.code for error in self.errors]
