"""Lexicon — keyword tables and spelling corrections that drive the query pipeline.

A Lexicon is an immutable snapshot. It is built once (from the embedded
defaults below or from configuration files) and handed to the pipeline
components; reloading means building a new Lexicon and swapping the
reference, never mutating an existing one.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

logger = logging.getLogger(__name__)


# ── Built-in defaults ───────────────────────────────────────────────

DEFAULT_PARTS_KEYWORDS: tuple[str, ...] = (
    "parts", "part", "components", "component", "items", "item",
    "inventory", "stock", "specifications", "specification", "specs",
    "lines", "line items",
)

DEFAULT_CREATE_KEYWORDS: tuple[str, ...] = (
    "create", "creating", "creation", "new", "add", "generate", "make",
    "build", "setup", "set up", "establish", "help", "guide", "steps",
    "how to", "how do i", "how can i", "process", "workflow", "tutorial",
    "instructions",
)

DEFAULT_CONTRACT_KEYWORDS: tuple[str, ...] = (
    "contract", "contracts", "agreement", "agreements", "deal", "deals",
    "effective", "expiration", "price", "pricing", "customer", "terms",
    "status", "created", "signed", "renewed", "renewal", "amendment",
    "billing", "payment",
)

DEFAULT_CORRECTIONS: dict[str, str] = {
    # contract / agreement
    "contrct": "contract", "contrat": "contract", "contarct": "contract",
    "cntract": "contract", "contracs": "contracts", "contrcts": "contracts",
    "agrement": "agreement", "agreemnt": "agreement",
    # dates
    "effectiv": "effective", "effctive": "effective", "effectuve": "effective",
    "efective": "effective", "expirtion": "expiration", "exipraion": "expiration",
    "expiraton": "expiration", "dat": "date", "dte": "date",
    # customers / accounts
    "custmer": "customer", "customr": "customer", "costumer": "customer",
    "acount": "account", "accont": "account", "nam": "name",
    # parts
    "prt": "part", "prts": "parts", "parst": "parts", "partz": "parts",
    "componnt": "component", "quantiy": "quantity", "quanity": "quantity",
    "availble": "available", "inventry": "inventory", "suppler": "supplier",
    "warenty": "warranty", "specfication": "specification",
    # verbs
    "shw": "show", "shwo": "show", "sho": "show", "dispaly": "display",
    "lst": "list", "cretae": "create", "creat": "create",
    "retreive": "retrieve", "serch": "search",
    # attributes
    "numbr": "number", "staus": "status", "pric": "price", "prce": "price",
    "prise": "price", "btwn": "between", "betwen": "between",
}

DEFAULT_DISPLAY_FIELDS: tuple[tuple[str, str], ...] = (
    ("effective", "EFFECTIVE_DATE"),
    ("expiration", "EXPIRATION_DATE"),
    ("expiry", "EXPIRATION_DATE"),
    ("price", "PRICE"),
    ("pricing", "PRICE"),
    ("cost", "PRICE"),
    ("customer", "CUSTOMER_NAME"),
    ("terms", "TERMS"),
    ("status", "STATUS"),
    ("created", "CREATED_DATE"),
    ("amount", "TOTAL_VALUE"),
    ("account", "ACCOUNT_NUMBER"),
    ("quantity", "QUANTITY"),
    ("available", "AVAILABLE_QUANTITY"),
    ("description", "DESCRIPTION"),
    ("specification", "SPECIFICATION"),
    ("model", "MODEL"),
    ("supplier", "SUPPLIER"),
    ("warranty", "WARRANTY"),
)


# ── Lexicon ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Lexicon:
    """Immutable keyword sets, correction map and display-column mapping."""

    parts_keywords: tuple[str, ...]
    create_keywords: tuple[str, ...]
    contract_keywords: tuple[str, ...]
    corrections: Mapping[str, str]
    display_fields: tuple[tuple[str, str], ...]
    source: str = "defaults"

    @classmethod
    def build(
        cls,
        *,
        parts_keywords: Iterable[str] = DEFAULT_PARTS_KEYWORDS,
        create_keywords: Iterable[str] = DEFAULT_CREATE_KEYWORDS,
        contract_keywords: Iterable[str] = DEFAULT_CONTRACT_KEYWORDS,
        corrections: Mapping[str, str] = DEFAULT_CORRECTIONS,
        display_fields: Iterable[tuple[str, str]] = DEFAULT_DISPLAY_FIELDS,
        source: str = "defaults",
    ) -> "Lexicon":
        """Normalize the raw tables and return a frozen Lexicon."""
        return cls(
            parts_keywords=_normalize_keywords(parts_keywords),
            create_keywords=_normalize_keywords(create_keywords),
            contract_keywords=_normalize_keywords(contract_keywords),
            corrections=MappingProxyType(_sanitize_corrections(corrections)),
            display_fields=_normalize_display_fields(display_fields),
            source=source,
        )

    @classmethod
    def default(cls) -> "Lexicon":
        return cls.build()

    def summary(self) -> dict[str, object]:
        """Table sizes for status endpoints and logs."""
        return {
            "source": self.source,
            "parts_keywords": len(self.parts_keywords),
            "create_keywords": len(self.create_keywords),
            "contract_keywords": len(self.contract_keywords),
            "corrections": len(self.corrections),
            "display_fields": len(self.display_fields),
        }


def _normalize_keywords(keywords: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for keyword in keywords:
        cleaned = " ".join(keyword.lower().split())
        if cleaned:
            seen.setdefault(cleaned, None)
    return tuple(seen)


def _normalize_display_fields(pairs: Iterable[tuple[str, str]]) -> tuple[tuple[str, str], ...]:
    result: list[tuple[str, str]] = []
    seen: set[str] = set()
    for keyword, column in pairs:
        keyword = keyword.strip().lower()
        column = column.strip().upper()
        if keyword and column and keyword not in seen:
            seen.add(keyword)
            result.append((keyword, column))
    return tuple(result)


def _sanitize_corrections(corrections: Mapping[str, str]) -> dict[str, str]:
    """Lower-case keys and drop entries whose canonical form is itself corrected.

    A chain like ``a -> b`` plus ``b -> c`` would make correction
    non-idempotent, so the ``a -> b`` entry is discarded.
    """
    cleaned: dict[str, str] = {}
    for wrong, right in corrections.items():
        wrong = wrong.strip().lower()
        right = " ".join(right.split())
        if wrong and right:
            cleaned[wrong] = right

    result: dict[str, str] = {}
    for wrong, right in cleaned.items():
        chained = [
            word for word in right.split()
            if word.lower() in cleaned and cleaned[word.lower()] != word
        ]
        if chained:
            logger.warning(
                "Dropping correction '%s' -> '%s': target is itself corrected (%s)",
                wrong, right, ", ".join(chained),
            )
            continue
        result[wrong] = right
    return result
