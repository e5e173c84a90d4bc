"""
Value normalizers shared by the field extractors.

Each function takes the raw fragment an extractor matched and returns the
canonical value, or None when nothing usable is left.
"""

import re
from typing import Optional

from lead_desk.extraction_ssot import NAME_RULES, NameRules

NON_LETTERS = re.compile(r"[^a-zA-Z\s]")
WHITESPACE = re.compile(r"\s+")
PHONE_SEPARATORS = re.compile(r"[-\s]")

# Currency names are dropped from a budget; unit tokens (k, lakh, cr) are kept
CURRENCY_WORDS = re.compile(r"(?<=[\d\s])(?:inr|rs|usd|dollars?)\b", re.IGNORECASE)
RUPEE_SIGN = "₹"

# Hinglish copulas that trail a business name: "business hai Sharma Sweets hai"
BUSINESS_TRAILING_FILLERS = frozenset({"hai", "hain", "hoon", "hun", "hu", "h", "he"})

# Conjunctions that start the next clause: "online store hai aur budget 50k"
BUSINESS_CLAUSE_BREAKS = frozenset({"aur", "and", "but"})


def collapse_whitespace(text: str) -> str:
    return WHITESPACE.sub(" ", text).strip()


def sanitize_name(raw: str, rules: NameRules = NAME_RULES) -> Optional[str]:
    """
    Proper-case a captured name fragment.

    "Rohan sharma hoon" -> "Rohan Sharma"
    "interested in ads" -> None

    Non-letters are removed, the fragment is cut at the first filler word
    (hoon, hai, aur, from, ...) and at most `rules.max_tokens` tokens are kept.
    """
    if not isinstance(raw, str):
        return None

    tokens = NON_LETTERS.sub("", raw).split()
    name_tokens = []
    for token in tokens:
        lowered = token.lower()
        if lowered in rules.terminators:
            break
        if lowered in rules.non_names:
            if not name_tokens:
                return None
            break
        name_tokens.append(token)
        if len(name_tokens) >= rules.max_tokens:
            break

    if not name_tokens:
        return None

    name = " ".join(token[0].upper() + token[1:].lower() for token in name_tokens)
    if len(name.replace(" ", "")) < 2:
        return None
    return name


def normalize_budget(raw: str) -> Optional[str]:
    """
    Canonical budget string.

    "50k" -> "50k", "50000 inr" -> "50000", "₹ 20,000" -> "Rs 20,000",
    "2 lakh" -> "2 lakh". Empty after stripping -> None.
    """
    if not isinstance(raw, str):
        return None

    value = CURRENCY_WORDS.sub("", raw)
    if RUPEE_SIGN in value:
        value = "Rs " + value.replace(RUPEE_SIGN, " ")
    value = collapse_whitespace(value)

    if not value or value == "Rs":
        return None
    return value


def trim_business(raw: str) -> Optional[str]:
    """
    Clean a captured business name.

    The capture is cut at the first conjunction ("Acme Foods aur budget 50k"
    -> "Acme Foods"), then trailing copulas are dropped.
    """
    if not isinstance(raw, str):
        return None
    tokens = collapse_whitespace(raw).split(" ")
    for index, token in enumerate(tokens):
        if token.lower() in BUSINESS_CLAUSE_BREAKS:
            tokens = tokens[:index]
            break
    while tokens and tokens[-1].lower() in BUSINESS_TRAILING_FILLERS:
        tokens.pop()
    value = " ".join(tokens).strip(" &")
    return value or None


def strip_phone_separators(text: str) -> str:
    """Remove hyphens and whitespace: '+91 98765-43210' -> '+919876543210'"""
    return PHONE_SEPARATORS.sub("", text)
