"""Entity extraction — ordered regex patterns over the corrected query text.

Extraction order:
    createdBy → explicit contract/part numbers → standalone contract numbers
    → implicit part codes → customer/account numbers → customer name
    → keyword attributes (dates, status, amount) → bare dates / periods

Each attribute keeps the first pattern that matches. Text consumed by an
earlier attribute is claimed, so later implicit patterns cannot reuse it
("parts for contract ABC-789" yields a contract number, not a part number).
"""

import logging
import re
from collections.abc import Iterator

from query_router.application.services.keyword_matcher import KeywordRule, first_match, find_all, rule
from query_router.domain.entities import ExtractedEntity, Operator

logger = logging.getLogger(__name__)


# ── Building blocks ─────────────────────────────────────────────────

_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?"
_DATE = (
    r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}"
    r"|\d{4}[/-]\d{1,2}[/-]\d{1,2}"
    rf"|\d{{1,2}}\s+{_MONTH}\s+\d{{2,4}}"
)
_MONTH_YEAR = rf"{_MONTH}\s+\d{{4}}"
_NUMBER = r"\$?\d[\d,]*(?:\.\d+)?"
_OPERAND = rf"(?:{_DATE}|{_MONTH_YEAR}|{_NUMBER})"

# optional "number" / "no." / "#" / ":" between a label word and its value
_ID_LABEL = r"(?:\s+(?:number|num|no\.?|id))?\s*[:#]?\s*"
# an identifier token that contains at least one digit
_ID_VALUE = r"(?P<value>(?=[A-Z0-9-]*\d)[A-Z0-9][A-Z0-9-]*)"
_NAME_WORDS = r"(?P<name>[A-Za-z][A-Za-z.&'-]*(?:\s+[A-Za-z][A-Za-z.&'-]*){0,3})"

_FLAGS = re.IGNORECASE

_DATE_RE = re.compile(rf"\b(?:{_DATE})\b", _FLAGS)
_MONTH_YEAR_RE = re.compile(rf"\b{_MONTH_YEAR}\b", _FLAGS)

_CREATED_BY_RE = re.compile(rf"\b(?:created|made|signed|authored|entered)\s+by\s+{_NAME_WORDS}", _FLAGS)

_CONTRACT_EXPLICIT_RE = re.compile(rf"\b(?:contract|agreement|deal)s?{_ID_LABEL}{_ID_VALUE}", _FLAGS)
_CONTRACT_DIGITS_RE = re.compile(r"\b\d{4,8}\b")
_CONTRACT_CODE_RE = re.compile(r"\b[A-Z]{2,3}-\d{3,6}\b", _FLAGS)

_PART_EXPLICIT_RE = re.compile(rf"\b(?:part|component|item)s?{_ID_LABEL}{_ID_VALUE}", _FLAGS)
_PART_CODE_RES = (
    re.compile(r"\bP\d{3,6}\b", _FLAGS),
    re.compile(r"\b[A-Z]{1,3}\d{2,6}[A-Z]?\b", _FLAGS),
    re.compile(r"\b[A-Z]{2,4}-\d{2,6}\b", _FLAGS),
)

_CUSTOMER_NUMBER_RE = re.compile(rf"\b(?:customer|client)s?{_ID_LABEL}(?P<value>\d{{4,12}})\b", _FLAGS)
_ACCOUNT_NUMBER_RE = re.compile(rf"\b(?:account|acct)s?{_ID_LABEL}(?P<value>\d{{4,12}})\b", _FLAGS)

_CUSTOMER_NAME_RES = (
    re.compile(rf"\b(?:customer|client)s?(?:\s+name)?\s*[:=]?\s+{_NAME_WORDS}", _FLAGS),
    re.compile(rf"\b(?:for|by)\s+(?:(?:customer|client)s?\s+)?{_NAME_WORDS}", _FLAGS),
)

# A standalone number right after/before one of these words belongs to that word.
_NON_CONTRACT_BEFORE_RE = re.compile(
    rf"\b(?:account|acct|customer|client|part|component|item)s?{_ID_LABEL}$", _FLAGS,
)
_NON_CONTRACT_AFTER_RE = re.compile(r"^\s*(?:account|acct|customer|client|part|component|item)s?\b", _FLAGS)
_AMOUNT_BEFORE_RE = re.compile(
    r"(?:\$|\b(?:amount|value|price|cost|worth|than|over|under|above|below)\s*(?:of|is|=|:)?\s*\$?)$",
    _FLAGS,
)
_YEAR_BEFORE_RE = re.compile(
    rf"\b(?:in|since|during|year|after|before|between|from|to|and|until|till|of|{_MONTH})\s*$", _FLAGS,
)
_YEAR_RE = re.compile(r"^(?:19|20)\d{2}$")

_VALUE_AFTER_RE = re.compile(
    rf"^\s*(?:date\s+)?(?:(?:is|of|on|in|from)\s+|[=:]\s*)?(?P<value>{_OPERAND})", _FLAGS,
)
_RANGE_RE = re.compile(
    rf"\b(?:between|from)\s+(?P<start>{_OPERAND}|{_MONTH})\s+(?:and|to|till|until|through)\s+"
    rf"(?P<end>{_OPERAND}|{_MONTH})\b",
    _FLAGS,
)
# "from <start> till date": only the start is a real value
_OPEN_RANGE_RE = re.compile(
    rf"\b(?:from|since)\s+(?P<start>{_OPERAND}|{_MONTH})\s+(?:till|to|until)\s+(?:date|today|now)\b",
    _FLAGS,
)

_STATUS_WORDS = (
    "active", "inactive", "expired", "pending", "draft", "cancelled", "canceled",
    "terminated", "approved", "rejected", "suspended", "closed", "open",
)
_STATUS_RE = re.compile(rf"\b(?:{'|'.join(_STATUS_WORDS)})\b", _FLAGS)

_NAME_STOP_WORDS = frozenset({
    "contract", "contracts", "agreement", "agreements", "deal", "deals",
    "part", "parts", "component", "components", "item", "items",
    "customer", "customers", "client", "clients", "account", "accounts",
    "number", "numbers", "name", "date", "dates", "price", "pricing",
    "status", "terms", "effective", "expiration", "expired", "created",
    "signed", "amount", "value", "quantity", "details", "info", "information",
    "list", "show", "display", "get", "find", "search", "retrieve", "all",
    "the", "a", "an", "and", "or", "with", "for", "by", "in", "on", "at", "of",
    "to", "from", "this", "that", "these", "those", "last", "next", "month",
    "year", "today", "between", "after", "before", "since", "until", "till",
    "during", "is", "are", "was", "were", "which", "who", "what", "where",
    "when", "how", "me", "my", "our", "their", "create", "creating", "new",
    "add", "help", "active", "inactive", "pending", "draft", "closed", "open",
})


# ── Keyword attributes ──────────────────────────────────────────────

_ATTRIBUTE_TRIGGERS: tuple[KeywordRule[str], ...] = (
    rule(r"\beffective\b", "effectiveDate"),
    rule(r"\bexpir\w*|\bexpiry\b", "expirationDate"),
    rule(r"\bcreated\b(?!\s+by\b)", "createdDate"),
    rule(r"\b(?:amount|value|price|cost|worth)\b", "amount"),
)

# TILL_DATE precedes BETWEEN: "from X till date" is open-ended, not a range
_OPERATOR_RULES: tuple[KeywordRule[Operator], ...] = (
    rule(r"\b(?:till|to|until)\s+(?:date|today|now)\b|\bso\s+far\b", Operator.TILL_DATE),
    rule(r"\bbetween\b|\bfrom\b.+?\b(?:to|till|until|through)\b", Operator.BETWEEN),
    rule(r"\bthis\s+month\b", Operator.THIS_MONTH),
    rule(r"\bthis\s+year\b", Operator.THIS_YEAR),
    rule(r"\b(?:greater|more|higher)\s+than\b|\bafter\b|\babove\b|\bover\b|\bsince\b|>", Operator.GREATER_THAN),
    rule(r"\b(?:less|lower|fewer)\s+than\b|\bbefore\b|\bbelow\b|\bunder\b|<", Operator.LESS_THAN),
    rule(r"\bcontain(?:s|ing)?\b|\binclud(?:es|ing)\b|\blike\b", Operator.CONTAINS),
)

_PERIOD_OPERATORS = (Operator.THIS_MONTH, Operator.THIS_YEAR, Operator.TILL_DATE)

_CONTEXT_WINDOW = 20

# (value, span) of a matched identifier or name
_Found = tuple[str, tuple[int, int]]


class EntityExtractor:
    """Pulls identifiers and filter conditions out of query text.

    Stateless; one instance can serve any number of concurrent queries.
    """

    def extract(self, text: str) -> dict[str, ExtractedEntity]:
        entities: dict[str, ExtractedEntity] = {}
        if not text or not text.strip():
            return entities

        claimed: list[tuple[int, int]] = []
        date_spans = [m.span() for m in _DATE_RE.finditer(text)]
        date_spans += [m.span() for m in _MONTH_YEAR_RE.finditer(text)]

        # 1. creator — checked before customer name so "by <name>" is not reused
        created_by = self._match_name(_CREATED_BY_RE, text, claimed)
        if created_by:
            name, span = created_by
            _put(entities, "createdBy", name)
            claimed.append(span)

        # 2. explicit identifiers
        contract = self._match_explicit(_CONTRACT_EXPLICIT_RE, text, claimed)
        if contract:
            _put(entities, "contractNumber", contract[0])
            claimed.append(contract[1])

        part = self._match_explicit(_PART_EXPLICIT_RE, text, claimed)
        if part:
            _put(entities, "partNumber", part[0])
            claimed.append(part[1])

        # 3. implicit contract numbers / codes
        if "contractNumber" not in entities:
            implicit = self._match_contract_digits(text, claimed + date_spans)
            if implicit is None:
                implicit = self._match_code(_CONTRACT_CODE_RE, text, claimed, reject_after_label=True)
            if implicit:
                _put(entities, "contractNumber", implicit[0])
                claimed.append(implicit[1])

        # 4. implicit part codes
        if "partNumber" not in entities:
            for pattern in _PART_CODE_RES:
                implicit = self._match_code(pattern, text, claimed + date_spans)
                if implicit:
                    _put(entities, "partNumber", implicit[0])
                    claimed.append(implicit[1])
                    break

        # 5. customer / account numbers
        for attribute, pattern in (
            ("customerNumber", _CUSTOMER_NUMBER_RE),
            ("accountNumber", _ACCOUNT_NUMBER_RE),
        ):
            match = pattern.search(text)
            if match:
                _put(entities, attribute, match.group("value"))
                claimed.append(match.span("value"))

        # 6. customer name
        for pattern in _CUSTOMER_NAME_RES:
            found = self._match_name(pattern, text, claimed)
            if found:
                _put(entities, "customerName", found[0])
                claimed.append(found[1])
                break

        # 7. keyword attributes
        consumed: list[tuple[int, int]] = []
        for hit in find_all(text, _ATTRIBUTE_TRIGGERS):
            bound = self._bind_operator(text, hit.start, hit.end)
            if bound is None:
                continue
            operator, value, span = bound
            _put(entities, hit.payload, value, operator)
            consumed.append(span)

        status = _STATUS_RE.search(text)
        if status:
            _put(entities, "status", status.group(0).upper())

        # 8. bare dates and periods
        self._extract_date(text, entities, consumed)

        logger.debug("Extracted %d entities from '%s': %s", len(entities), text, list(entities))
        return entities

    # ── Identifier helpers ─────────────────────────────────────────

    @staticmethod
    def _match_explicit(pattern: re.Pattern[str], text: str, claimed: list[tuple[int, int]]) -> _Found | None:
        for match in pattern.finditer(text):
            span = match.span("value")
            if _overlaps(span, claimed):
                continue
            value = match.group("value").strip("-")
            if value:
                return value.upper(), span
        return None

    @staticmethod
    def _match_contract_digits(text: str, blocked: list[tuple[int, int]]) -> _Found | None:
        """Six-digit tokens first, then any other 4–8 digit token.

        Only account/customer/part labels and dates disqualify a six-digit
        token. Shorter and longer runs are also skipped after amount words,
        inside decimals, and as years after a temporal preposition.
        """
        candidates = []
        for match in _CONTRACT_DIGITS_RE.finditer(text):
            start, end = match.span()
            if _overlaps((start, end), blocked) or re.match(r"^\.\d", text[end:]):
                continue
            if _NON_CONTRACT_BEFORE_RE.search(text[:start]) or _NON_CONTRACT_AFTER_RE.match(text[end:]):
                continue
            candidates.append(match)

        for match in candidates:
            if len(match.group(0)) == 6:
                return match.group(0), match.span()

        for match in candidates:
            before = text[:match.start()]
            if _AMOUNT_BEFORE_RE.search(before) or re.match(r"^,\d", text[match.end():]):
                continue
            if _YEAR_RE.match(match.group(0)) and _YEAR_BEFORE_RE.search(before):
                continue
            return match.group(0), match.span()
        return None

    @staticmethod
    def _match_code(
        pattern: re.Pattern[str],
        text: str,
        blocked: list[tuple[int, int]],
        *,
        reject_after_label: bool = False,
    ) -> _Found | None:
        for match in pattern.finditer(text):
            if _overlaps(match.span(), blocked):
                continue
            if reject_after_label and _NON_CONTRACT_BEFORE_RE.search(text[:match.start()]):
                continue
            return match.group(0).upper(), match.span()
        return None

    @staticmethod
    def _match_name(pattern: re.Pattern[str], text: str, claimed: list[tuple[int, int]]) -> _Found | None:
        for match in pattern.finditer(text):
            if _overlaps(match.span(), claimed):
                continue
            words = list(_leading_name_words(match.group("name")))
            name = " ".join(words)
            if len(name) < 2:
                continue
            start = match.start("name")
            return name.title(), (match.start(), start + len(name))
        return None

    # ── Attribute helpers ──────────────────────────────────────────

    @staticmethod
    def _bind_operator(text: str, start: int, end: int) -> tuple[Operator, str, tuple[int, int]] | None:
        """Choose an operator from the context window and bind its operand.

        Returns ``(operator, value, value_span)`` or None when the keyword
        has nothing to bind to.
        """
        window_start = max(0, start - _CONTEXT_WINDOW)
        open_range = _OPEN_RANGE_RE.search(text, window_start)
        if open_range is not None and open_range.start() <= end + _CONTEXT_WINDOW:
            return Operator.TILL_DATE, open_range.group("start"), open_range.span()

        window = text[window_start:end + _CONTEXT_WINDOW]
        hit = first_match(window, _OPERATOR_RULES)
        operator = hit.payload if hit else Operator.EQUALS

        if operator is Operator.BETWEEN:
            match = _RANGE_RE.search(text, window_start)
            if match is None:
                return None
            value = f"{match.group('start')} TO {match.group('end')}"
            return operator, value, match.span()

        if operator in _PERIOD_OPERATORS:
            phrase = " ".join(hit.matched.lower().split())
            offset = window_start + hit.start
            return operator, phrase, (offset, window_start + hit.end)

        anchor = end
        if operator in (Operator.GREATER_THAN, Operator.LESS_THAN) and window_start + hit.start >= start:
            anchor = window_start + hit.end
        match = _VALUE_AFTER_RE.match(text[anchor:])
        if match is None:
            return None
        span = (anchor + match.start("value"), anchor + match.end("value"))
        return operator, match.group("value"), span

    def _extract_date(
        self,
        text: str,
        entities: dict[str, ExtractedEntity],
        consumed: list[tuple[int, int]],
    ) -> None:
        for match in _DATE_RE.finditer(text):
            if _overlaps(match.span(), consumed):
                continue
            start, end = match.span()
            window_start = max(0, start - _CONTEXT_WINDOW)
            hit = first_match(text[window_start:end + _CONTEXT_WINDOW], _OPERATOR_RULES)
            operator = hit.payload if hit else Operator.EQUALS
            if operator is Operator.BETWEEN:
                span = _RANGE_RE.search(text, window_start)
                if span and span.start("start") <= start and not _overlaps(span.span(), consumed):
                    _put(entities, "date", f"{span.group('start')} TO {span.group('end')}", operator)
                    return
            if operator not in (Operator.GREATER_THAN, Operator.LESS_THAN, Operator.TILL_DATE):
                operator = Operator.EQUALS
            _put(entities, "date", match.group(0), operator)
            return

        if "createdDate" in entities:
            return
        if any(entity.operator.is_date_range for entity in entities.values()):
            return

        period = first_match(text, _OPERATOR_RULES)
        if period is None:
            return
        if period.payload is Operator.TILL_DATE:
            match = _OPEN_RANGE_RE.search(text)
            if match and not _overlaps(match.span("start"), consumed):
                _put(entities, "createdDate", match.group("start"), Operator.TILL_DATE)
                return
        if period.payload in _PERIOD_OPERATORS:
            _put(entities, "createdDate", " ".join(period.matched.lower().split()), period.payload)
        elif period.payload is Operator.BETWEEN:
            match = _RANGE_RE.search(text)
            if match and _is_temporal(match.group("start")) and not _overlaps(match.span("start"), consumed):
                _put(entities, "date", f"{match.group('start')} TO {match.group('end')}", Operator.BETWEEN)


def _put(
    entities: dict[str, ExtractedEntity],
    attribute: str,
    value: str,
    operator: Operator = Operator.EQUALS,
) -> None:
    entities[attribute] = ExtractedEntity(attribute, operator, value)


def _leading_name_words(raw: str) -> Iterator[str]:
    for word in raw.split():
        word = word.strip(".,;:'")
        if not word or word.lower() in _NAME_STOP_WORDS:
            return
        yield word


def _overlaps(span: tuple[int, int], others: list[tuple[int, int]]) -> bool:
    start, end = span
    return any(start < other_end and other_start < end for other_start, other_end in others)


def _is_temporal(value: str) -> bool:
    return bool(
        _DATE_RE.fullmatch(value)
        or _MONTH_YEAR_RE.fullmatch(value)
        or re.fullmatch(_MONTH, value, _FLAGS)
    )
