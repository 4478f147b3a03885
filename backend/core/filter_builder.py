"""
Filter builder — turns search phrases and names into data-platform filter
expressions, and normalizes filters written by the model.

The name-field heuristic is best effort: a schema whose ID-like columns carry
"name" in their label will be matched just like real name columns.
"""
import re
from typing import Iterable, Union
from urllib.parse import quote

from core.errors import NoSearchableFieldsError
from models.dataplatform import FieldSchema

RESERVED_PREFIX = "_"

# Quoted literals, with '' as the escaped quote
_LITERAL = re.compile(r"('(?:[^']|'')*')")
_COMPARISON = re.compile(r"\s*(!=|>=|<=|=|<|>)\s*")
_CONNECTOR = re.compile(r"\s*\b(and|or)\b\s*", re.IGNORECASE)
_SPACES = re.compile(r"\s+")


# ── Conditions ────────────────────────────────────────────────────────────────

def quote_literal(value: Union[str, int, float]) -> str:
    """Render a value as a filter literal. Numbers stay bare, strings are single-quoted."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return "'" + str(value).replace("'", "''") + "'"


def prefix_condition(field: str, term: str) -> str:
    escaped = str(term).replace("'", "''")
    return f"({field} like '{escaped}%')"


def equality_condition(field: str, value: Union[str, int, float]) -> str:
    return f"({field}={quote_literal(value)})"


def field_filter(field: str, value: Union[str, int, float], exact: bool = True) -> str:
    """Equality when `exact`, starts-with otherwise."""
    return equality_condition(field, value) if exact else prefix_condition(field, value)


def name_filter(first_name_field: str, last_name_field: str, name: str) -> str:
    """
    Two or more tokens: first token against the first-name field AND second
    against the last-name field. One token: either field may match.
    """
    terms = name.split()
    if len(terms) >= 2:
        return (
            f"{prefix_condition(first_name_field, terms[0])} and "
            f"{prefix_condition(last_name_field, terms[1])}"
        )
    term = terms[0] if terms else ""
    return f"{prefix_condition(first_name_field, term)} or {prefix_condition(last_name_field, term)}"


# ── Generalized string search ─────────────────────────────────────────────────

def searchable_fields(fields: Iterable[FieldSchema]) -> list[FieldSchema]:
    """String-typed fields whose names are not reserved."""
    return [f for f in fields if f.type == "string" and not f.name.startswith(RESERVED_PREFIX)]


def _is_name_field(field: FieldSchema) -> bool:
    return "name" in field.name.lower() or "name" in (field.label or "").lower()


def search_filter(table: str, fields: Iterable[FieldSchema], phrase: str) -> str:
    """
    Build a filter for a free-text phrase over a table's fields.

    Multi-word phrases are paired positionally with the table's name fields when
    at least two exist; otherwise every token is matched against every string
    field. A single word is matched against every string field.
    """
    terms = phrase.split()
    if not terms:
        raise ValueError("search phrase must contain at least one word")
    candidates = searchable_fields(fields)
    if not candidates:
        raise NoSearchableFieldsError(table)

    if len(terms) > 1:
        name_fields = [f for f in candidates if _is_name_field(f)]
        if len(name_fields) >= 2:
            n = min(len(terms), len(name_fields))
            return " and ".join(prefix_condition(name_fields[i].name, terms[i]) for i in range(n))
        return " or ".join(
            prefix_condition(f.name, term) for f in candidates for term in terms
        )

    return " or ".join(prefix_condition(f.name, terms[0]) for f in candidates)


def encode_filter(expression: str) -> str:
    """Percent-encode a filter for use as a URL query value."""
    return quote(expression, safe="")


# ── Normalization ─────────────────────────────────────────────────────────────

def _is_wrapped(expression: str) -> bool:
    return expression.startswith("(") and expression.endswith(")")


def normalize_filter(expression: str) -> str:
    """
    Canonical spacing outside quoted literals: no spaces around comparison
    operators, exactly one space around lower-case and/or. The result is
    wrapped in parentheses unless it already starts and ends with one.
    """
    parts = _LITERAL.split(expression.strip())
    out = []
    for i, part in enumerate(parts):
        if i % 2:
            out.append(part)
            continue
        part = _SPACES.sub(" ", part)
        part = _COMPARISON.sub(r"\1", part)
        part = _CONNECTOR.sub(lambda m: f" {m.group(1).lower()} ", part)
        out.append(part)
    normalized = "".join(out).strip()
    if not normalized:
        return normalized
    return normalized if _is_wrapped(normalized) else f"({normalized})"
