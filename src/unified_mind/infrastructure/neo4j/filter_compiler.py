"""Safe filter compilation for vector queries.

Only equality on the provenance properties copied onto each node is
supported. Property names are checked against a whitelist and values are
always passed as parameters.
"""

from __future__ import annotations

from typing import Any

from unified_mind.core.base import ValidationErrorDetails
from unified_mind.core.errors import InputValidationError
from unified_mind.domain.models.memory import ENTITY_NAME, MEMORY_TYPE, SOURCE_PLATFORM

FILTERABLE_PROPERTIES = frozenset({"namespace", ENTITY_NAME, MEMORY_TYPE, SOURCE_PLATFORM})


def _param_name(idx: int) -> str:
    return f"f_{idx}"


def compile_filters(filters: dict[str, Any] | None, alias: str = "node") -> tuple[str, dict[str, Any]]:
    """Compile an equality filter into a WHERE fragment and its parameters.

    Args:
        filters: Mapping of property name to required value
        alias: Node alias used in the query

    Returns:
        Tuple of (conditions joined with AND, or "" when there is no filter; parameters)

    Raises:
        InputValidationError: If a property is not filterable

    Examples:
        >>> compile_filters({"entity_name": "ada", "memory_type": "note"})
        ('node.entity_name = $f_0 AND node.memory_type = $f_1', {'f_0': 'ada', 'f_1': 'note'})
    """
    if not filters:
        return "", {}

    clauses: list[str] = []
    params: dict[str, Any] = {}
    for idx, (field, value) in enumerate(sorted(filters.items(), key=lambda kv: kv[0])):
        if field not in FILTERABLE_PROPERTIES:
            raise InputValidationError(
                message=f"Cannot filter on '{field}'",
                details=ValidationErrorDetails(
                    source="filter_compiler",
                    operation="compile_filters",
                    field=field,
                    constraint=", ".join(sorted(FILTERABLE_PROPERTIES)),
                ),
            )
        name = _param_name(idx)
        clauses.append(f"{alias}.{field} = ${name}")
        params[name] = value

    return " AND ".join(clauses), params
