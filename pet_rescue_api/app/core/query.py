"""
Composable WHERE conditions and a small SELECT builder for SQLite.

Services describe a listing as a ``SelectQuery``: a base table, optional
LEFT JOINs, AND-combined conditions and an ordering.  Conditions render
to parameterized SQL (``?`` placeholders) so user input never ends up in
the statement text.  Column and table names always come from code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type


class Condition:
    """A single ``column <operator> ?`` comparison."""

    def __init__(self, column: str, operator: str, value: Any):
        self.column = column
        self.operator = operator
        self.value = value

    def to_sql(self) -> Tuple[str, List[Any]]:
        return f"{self.column} {self.operator} ?", [self.value]


class NullCondition(Condition):
    """Represents IS NULL or IS NOT NULL conditions."""

    def __init__(self, column: str, operator: str):
        super().__init__(column, operator, None)

    def to_sql(self) -> Tuple[str, List[Any]]:
        return f"{self.column} {self.operator}", []


class ContainsCondition(Condition):
    """Case-insensitive substring match.

    ``%`` and ``_`` in the search term are escaped so they match
    literally.  NULL columns never match.
    """

    def __init__(self, column: str, term: str):
        super().__init__(column, "LIKE", term)

    def to_sql(self) -> Tuple[str, List[Any]]:
        escaped = (
            self.value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        )
        return (
            f"UPPER({self.column}) LIKE ? ESCAPE '\\'",
            [f"%{escaped.upper()}%"],
        )


class CompoundCondition:
    """Represents a compound condition (AND/OR)."""

    def __init__(self, operator: str, *conditions: Condition | CompoundCondition):
        self.operator = operator
        self.conditions = conditions

    def to_sql(self) -> Tuple[str, List[Any]]:
        clauses = []
        params: List[Any] = []
        for cond in self.conditions:
            clause, values = cond.to_sql()
            clauses.append(f"({clause})")
            params.extend(values)
        return f" {self.operator} ".join(clauses), params


def eq(column: str, value: Any) -> Condition:
    return Condition(column, "=", value)


def lt(column: str, value: Any) -> Condition:
    return Condition(column, "<", value)


def lte(column: str, value: Any) -> Condition:
    return Condition(column, "<=", value)


def gte(column: str, value: Any) -> Condition:
    return Condition(column, ">=", value)


def icontains(column: str, term: str) -> ContainsCondition:
    return ContainsCondition(column, term)


def is_null(column: str) -> NullCondition:
    return NullCondition(column, "IS NULL")


def is_not_null(column: str) -> NullCondition:
    return NullCondition(column, "IS NOT NULL")


def and_(*conditions: Condition | CompoundCondition) -> CompoundCondition:
    return CompoundCondition("AND", *conditions)


def or_(*conditions: Condition | CompoundCondition) -> CompoundCondition:
    return CompoundCondition("OR", *conditions)


def enum_rank(column: str, enum: Type[Enum]) -> str:
    """CASE expression ranking a text column by the declaration order of ``enum``.

    Values outside the enum rank last.
    """
    cases = " ".join(
        f"WHEN '{member.value}' THEN {rank}" for rank, member in enumerate(enum)
    )
    return f"CASE {column} {cases} ELSE {len(enum)} END"


@dataclass(frozen=True)
class Ordering:
    column: str
    descending: bool = False

    def to_sql(self) -> str:
        return f"{self.column} {'DESC' if self.descending else 'ASC'}"


def build_sort_table(
    sort_enum: Type[Enum], columns: Mapping[str, str], key_column: str
) -> Dict[Enum, Tuple[Ordering, ...]]:
    """Map every member of ``sort_enum`` to its ORDER BY terms.

    Member values have the form ``<field>_asc`` / ``<field>_desc`` and
    ``columns`` maps each field to a column expression.  The key column
    is appended as a tie-breaker in the same direction, so the ``_desc``
    ordering is the exact reverse of the ``_asc`` one.
    """
    table: Dict[Enum, Tuple[Ordering, ...]] = {}
    for member in sort_enum:
        field, _, direction = member.value.rpartition("_")
        if direction not in {"asc", "desc"} or field not in columns:
            raise ValueError(f"Unsupported sort key {member.value!r}")
        descending = direction == "desc"
        orderings = [Ordering(columns[field], descending)]
        if columns[field] != key_column:
            orderings.append(Ordering(key_column, descending))
        table[member] = tuple(orderings)
    return table


class SelectQuery:
    """Builder for a filtered and ordered SELECT statement."""

    def __init__(self, table: str, columns: Sequence[str], joins: Sequence[str] = ()):
        self.table = table
        self.columns = list(columns)
        self.joins = list(joins)
        self._conditions: List[Condition | CompoundCondition] = []
        self._order_by: List[Ordering] = []

    def where(self, *conditions: Condition | CompoundCondition) -> SelectQuery:
        self._conditions.extend(conditions)
        return self

    def order_by(self, *orderings: Ordering) -> SelectQuery:
        self._order_by.extend(orderings)
        return self

    def _from_where(self) -> Tuple[str, List[Any]]:
        sql = f"FROM {self.table}"
        if self.joins:
            sql += " " + " ".join(self.joins)
        params: List[Any] = []
        if self._conditions:
            clause, params = and_(*self._conditions).to_sql()
            sql += f" WHERE {clause}"
        return sql, params

    def count_sql(self) -> Tuple[str, List[Any]]:
        from_where, params = self._from_where()
        return f"SELECT COUNT(*) AS count {from_where}", params

    def to_sql(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Tuple[str, List[Any]]:
        from_where, params = self._from_where()
        sql = f"SELECT {', '.join(self.columns)} {from_where}"
        if self._order_by:
            sql += " ORDER BY " + ", ".join(o.to_sql() for o in self._order_by)
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params = params + [limit, offset or 0]
        return sql, params
