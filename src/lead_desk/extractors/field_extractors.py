"""
Lead field extractors.

One pure function per lead field. Every extractor takes the raw utterance and
returns the extracted value or None. Extractors never look at the lead state
and never raise: empty, punctuation-only, huge or non-string input simply
yields None.

Usage:
    from lead_desk.extractors import detect_budget, extract_fields

    detect_budget("Mera budget 50k hai per month")   # "50k"
    extract_fields("main Rohan sharma hoon")          # {"name": "Rohan Sharma"}
"""

import re
from typing import Callable, Dict, Optional, TYPE_CHECKING

from lead_desk.extraction_ssot import (
    BUSINESS_CATEGORIES,
    BUSINESS_EXPLICIT_PATTERN,
    GOAL_CATEGORIES,
    NAME_RULES,
    TIMELINE_CATEGORIES,
    classify,
)
from lead_desk.extractors.normalizers import (
    normalize_budget,
    sanitize_name,
    strip_phone_separators,
    trim_business,
)
from lead_desk.yaml_config.constants import LEAD_FIELDS

if TYPE_CHECKING:
    from lead_desk.lead_context import LeadContext


# =============================================================================
# PATTERNS
# =============================================================================

# Indian mobile: 10 digits, optionally +91. Applied after removing separators,
# so "98765 43210" and "+91-98765-43210" both match. Neighbouring digits
# disqualify the run: an 11-digit number is never a phone. Only ASCII digits
# count; any other script's digits next to the run still disqualify it.
PHONE_PATTERN = re.compile(r"(?<!\d)(?:\+91)?([0-9]{10})(?!\d)")

# A phone number as written in the raw text, separators included.
# Used to keep phone digits out of budget detection.
PHONE_SPAN_PATTERN = re.compile(r"(?<![\d+])(?:\+91[\s-]*)?[0-9](?:[\s-]*[0-9]){9}(?![\s-]*\d)")

BUDGET_PATTERN = re.compile(
    r"(?P<symbol>₹\s*)?\b(?P<amount>[0-9]+(?:,[0-9]{2,3})*(?:\.[0-9]+)?)(?!\d)"
    r"(?:\s*(?P<unit>k|lakhs?|lacs?|crores?|cr|rs|inr|usd|dollars?)\b|\s*(?P<suffix>₹))?",
    re.IGNORECASE,
)

# A bare number right before one of these is a duration or a share, not money
NOT_MONEY_AFTER = re.compile(
    r"\s*(?:-\s*\d+\s*)?(?:din|days?\b|weeks?\b|haft|months?\b|mahin|quarters?\b|saal|"
    r"years?\b|yrs?\b|hours?\b|hrs?\b|ghant|minutes?\b|mins?\b|%|x\b)",
    re.IGNORECASE,
)

MIN_BARE_BUDGET_DIGITS = 3
MAX_BARE_BUDGET_DIGITS = 9


def _usable(text) -> bool:
    return isinstance(text, str) and bool(text.strip())


# =============================================================================
# EXTRACTORS
# =============================================================================

def detect_business(text: str) -> Optional[str]:
    """
    Business label.

    1. Explicit form: "company is Acme Foods", "brand: Zara" -> captured text
    2. Otherwise first matching industry category ("Ecommerce", "Real Estate",
       "Healthcare", "Education", "F&B")
    """
    if not _usable(text):
        return None

    match = BUSINESS_EXPLICIT_PATTERN.search(text)
    if match:
        value = trim_business(match.group(1))
        if value:
            return value

    return classify(text, BUSINESS_CATEGORIES)


def detect_goal(text: str) -> Optional[str]:
    """Marketing objective, first matching category wins."""
    if not _usable(text):
        return None
    return classify(text, GOAL_CATEGORIES)


def _is_bare_budget(amount: str, text: str, end: int) -> bool:
    digits = amount.replace(",", "").split(".")[0]
    if not MIN_BARE_BUDGET_DIGITS <= len(digits) <= MAX_BARE_BUDGET_DIGITS:
        return False
    return NOT_MONEY_AFTER.match(text, end) is None


def detect_budget(text: str) -> Optional[str]:
    """
    Budget amount with its unit.

    "Mera budget 50k hai" -> "50k", "₹20000" -> "Rs 20000",
    "2 lakh inr" -> "2 lakh". Phone numbers, durations ("3 hafton", "7 din")
    and short bare numbers are skipped.
    """
    if not _usable(text):
        return None

    scan = PHONE_SPAN_PATTERN.sub(" ", text)

    for match in BUDGET_PATTERN.finditer(scan):
        has_money_marker = bool(match.group("unit") or match.group("symbol") or match.group("suffix"))
        if not has_money_marker and not _is_bare_budget(match.group("amount"), scan, match.end()):
            continue
        value = normalize_budget(match.group(0))
        if value:
            return value

    return None


def detect_timeline(text: str) -> Optional[str]:
    """Launch window. Order matters: weeks, month, quarter, ASAP."""
    if not _usable(text):
        return None
    return classify(text, TIMELINE_CATEGORIES)


def detect_name(text: str) -> Optional[str]:
    """
    Person name from a self-introduction.

    "mera naam Priya hai" -> "Priya", "main Rohan sharma hoon" -> "Rohan Sharma".
    """
    if not _usable(text):
        return None

    for match in NAME_RULES.lead_in.finditer(text):
        name = sanitize_name(match.group(1))
        if name:
            return name
    return None


def detect_phone(text: str) -> Optional[str]:
    """Bare 10-digit phone number, +91 prefix stripped."""
    if not _usable(text):
        return None

    match = PHONE_PATTERN.search(strip_phone_separators(text))
    if not match:
        return None
    return match.group(1)


# =============================================================================
# REGISTRY
# =============================================================================

FIELD_EXTRACTORS: Dict[str, Callable[[str], Optional[str]]] = {
    "business": detect_business,
    "goal": detect_goal,
    "budget": detect_budget,
    "timeline": detect_timeline,
    "name": detect_name,
    "phone": detect_phone,
}

def validate_registry(extractors: Dict[str, Callable], fields=LEAD_FIELDS) -> None:
    """
    Raises:
        ValueError: If the registry does not cover exactly `fields`, in order
    """
    if tuple(extractors) != tuple(fields):
        raise ValueError(
            f"FIELD_EXTRACTORS must list {', '.join(fields)} in order, got {', '.join(extractors)}"
        )


validate_registry(FIELD_EXTRACTORS)


def extract_fields(text: str, context: Optional["LeadContext"] = None) -> Dict[str, str]:
    """
    Run every extractor in field order.

    Fields already filled in `context` are skipped, so the result only holds
    values the context can still accept.

    Returns:
        Ordered dict field -> value (only fields that produced a value)
    """
    found: Dict[str, str] = {}
    for field_name, extractor in FIELD_EXTRACTORS.items():
        if context is not None and context.is_filled(field_name):
            continue
        value = extractor(text)
        if value:
            found[field_name] = value
    return found
