"""
Street name normalisation

Lets "W 4th Ave" on an address match "West 4th Avenue" on a map label.
"""

import re

_ABBREVIATIONS = [
    (re.compile(r"\bst\b"), "street"),
    (re.compile(r"\bave\b"), "avenue"),
    (re.compile(r"\bblvd\b"), "boulevard"),
    (re.compile(r"\brd\b"), "road"),
    (re.compile(r"\bdr\b"), "drive"),
    (re.compile(r"\bln\b"), "lane"),
    (re.compile(r"\bn\b"), "north"),
    (re.compile(r"\bs\b"), "south"),
    (re.compile(r"\be\b"), "east"),
    (re.compile(r"\bw\b"), "west"),
]

_CIVIC_NUMBER = re.compile(r"^\d+[a-zA-Z]?$")


def normalize_street_name(value: str) -> str:
    """Lowercase, strip punctuation and expand common abbreviations"""
    text = re.sub(r"[.,]", " ", value.lower())
    for pattern, replacement in _ABBREVIATIONS:
        text = pattern.sub(replacement, text)
    return re.sub(r"\s+", " ", text).strip()


def extract_primary_street(address: str, fallback_street_name: str) -> str:
    """
    Pull the street portion out of a civic address

    "1234 Main St" -> "Main St". Addresses that don't start with a civic
    number fall back to the declared street name.
    """
    trimmed = address.strip()
    if not trimmed:
        return fallback_street_name

    parts = trimmed.split()
    if len(parts) < 2:
        return fallback_street_name or trimmed

    if _CIVIC_NUMBER.match(parts[0]):
        return " ".join(parts[1:])
    return fallback_street_name or trimmed
