# Copyright 2026 castline.fm
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Pending (not yet executed) store queries over a typed field enumeration.

A PendingQuery accumulates conditions, ordering, projection and skip/take.
Only repositories execute it, so any problem found while building (unknown
field, uncoercible value) is recorded and raised as QueryError at execution
time rather than where the query was composed.

Every field a client can name is declared up front in a QuerySchema. Column
expressions come only from the schema, never from request input, which keeps
the generated SQL safe to interpolate.

Usage:
    query = PendingQuery(USER_SCHEMA, ["u.active = 1"])
    query.where("age", "18", op="gte").sort(["-created_at"]).skip(0).limit(20)
    sql, params = query.compile("SELECT u.* FROM users u")
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple

from ..utils.exceptions import QueryError

# Relational operators accepted in filters (key suffixes in the query string)
OPERATORS: Dict[str, str] = {
    "eq": "=",
    "gte": ">=",
    "gt": ">",
    "lte": "<=",
    "lt": "<",
}

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


@dataclass(frozen=True)
class FieldSpec:
    """
    A single client-addressable field.

    Attributes:
        name: Public name (document key, or dotted path for nested values)
        column: SQL expression used for filtering and sorting
        kind: Python type used to coerce raw string values
        filterable: Whether the field may appear in filters
        sortable: Whether the field may appear in sort keys
    """

    name: str
    column: str
    kind: type = str
    filterable: bool = True
    sortable: bool = True

    @property
    def document_key(self) -> str:
        """Top-level document key this field lives under."""
        return self.name.split(".")[0]


@dataclass(frozen=True)
class QuerySchema:
    """
    Typed field enumeration of one entity.

    Attributes:
        name: Entity name used in error messages
        fields: Field name -> FieldSpec
        id_column: SQL expression of the identifier (stable sort tiebreaker)
        default_sort: Sort keys applied when the client gives none
        internal_fields: Document keys hidden unless explicitly selected
    """

    name: str
    fields: Dict[str, FieldSpec]
    id_column: str
    default_sort: Tuple[str, ...] = ("-created_at",)
    internal_fields: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def build(cls, name: str, specs: Iterable[FieldSpec], id_column: str, **kwargs) -> "QuerySchema":
        return cls(name=name, fields={spec.name: spec for spec in specs}, id_column=id_column, **kwargs)

    def get(self, name: str) -> Optional[FieldSpec]:
        return self.fields.get(name)


def coerce_value(kind: type, raw: Any) -> Any:
    """
    Coerce a raw request value to the storage representation of ``kind``.

    Raises:
        ValueError: If the value cannot be represented as ``kind``
    """
    if raw is None or isinstance(raw, kind) and kind is not datetime:
        return raw
    text = str(raw).strip()
    if kind is bool:
        lowered = text.lower()
        if lowered in _TRUE_VALUES:
            return 1
        if lowered in _FALSE_VALUES:
            return 0
        raise ValueError(f"not a boolean: {raw!r}")
    if kind is int:
        return int(text)
    if kind is float:
        return float(text)
    if kind is datetime:
        value = raw if isinstance(raw, datetime) else datetime.fromisoformat(text)
        # Stored timestamps are UTC isoformat strings and compare lexically
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    return text


class PendingQuery:
    """
    Query specification built up by callers and executed by a repository.

    Builder methods mutate the query and return it for chaining.
    """

    def __init__(
        self,
        schema: QuerySchema,
        base_conditions: Optional[List[str]] = None,
        base_params: Optional[List[Any]] = None,
    ):
        """
        Args:
            schema: Field enumeration of the queried entity
            base_conditions: Trusted SQL conditions set by the repository
                (e.g. soft-delete or ownership filters)
            base_params: Parameters bound by ``base_conditions``
        """
        self.schema = schema
        self._conditions: List[str] = list(base_conditions or [])
        self._params: List[Any] = list(base_params or [])
        self._order: List[Tuple[FieldSpec, bool]] = []
        self._selected: Optional[List[str]] = None
        self._excluded: set = set()
        self._skip: Optional[int] = None
        self._take: Optional[int] = None
        self.errors: List[str] = []

    # =========================================================================
    # Builders
    # =========================================================================

    def where(self, name: str, value: Any, op: str = "eq") -> "PendingQuery":
        """Add ``name <op> value`` for a schema field."""
        spec = self.schema.get(name)
        if spec is None or not spec.filterable:
            self.errors.append(f"Cannot filter {self.schema.name} by '{name}'")
            return self
        if op not in OPERATORS:
            self.errors.append(f"Unsupported operator '{op}' for '{name}'")
            return self
        try:
            coerced = coerce_value(spec.kind, value)
        except (TypeError, ValueError):
            self.errors.append(f"Invalid value for '{name}': {value!r}")
            return self

        self._conditions.append(f"{spec.column} {OPERATORS[op]} ?")
        self._params.append(coerced)
        return self

    def sort(self, keys: List[str]) -> "PendingQuery":
        """Replace ordering with ``keys`` (``-`` prefix for descending)."""
        order = []
        for key in keys:
            descending = key.startswith("-")
            name = key[1:] if descending else key
            spec = self.schema.get(name)
            if spec is None or not spec.sortable:
                self.errors.append(f"Cannot sort {self.schema.name} by '{name}'")
                continue
            order.append((spec, descending))
        self._order = order
        return self

    def select(self, names: List[str]) -> "PendingQuery":
        """Restrict projection to ``names`` (the identifier is always kept)."""
        selected = []
        for name in names:
            spec = self.schema.get(name)
            if spec is None:
                self.errors.append(f"Unknown {self.schema.name} field '{name}'")
                continue
            selected.append(spec.document_key)
        self._selected = selected
        return self

    def exclude(self, names: Iterable[str]) -> "PendingQuery":
        """Drop document keys from the projection."""
        self._excluded.update(names)
        return self

    def skip(self, count: int) -> "PendingQuery":
        self._skip = count
        return self

    def limit(self, count: int) -> "PendingQuery":
        self._take = count
        return self

    # =========================================================================
    # Compilation (repositories)
    # =========================================================================

    def validate(self) -> None:
        """Raise QueryError if building recorded any problem."""
        if self.errors:
            raise QueryError("; ".join(self.errors), entity=self.schema.name)

    def where_clause(self) -> Tuple[str, List[Any]]:
        if not self._conditions:
            return "", []
        return "WHERE " + " AND ".join(f"({c})" for c in self._conditions), list(self._params)

    def order_clause(self) -> str:
        order = self._order
        if not order:
            order = []
            for key in self.schema.default_sort:
                name = key.lstrip("-")
                order.append((self.schema.fields[name], key.startswith("-")))

        terms = [f"{spec.column} {'DESC' if descending else 'ASC'}" for spec, descending in order]
        # Identifier tiebreaker keeps pagination stable when sort keys collide
        if self.schema.id_column not in {spec.column for spec, _ in order}:
            terms.append(f"{self.schema.id_column} ASC")
        return "ORDER BY " + ", ".join(terms)

    def limit_clause(self) -> Tuple[str, List[Any]]:
        if self._take is None and not self._skip:
            return "", []
        # SQLite requires LIMIT before OFFSET; -1 means unbounded
        take = self._take if self._take is not None else -1
        return "LIMIT ? OFFSET ?", [take, self._skip or 0]

    def compile(self, select_from: str) -> Tuple[str, List[Any]]:
        """
        Build the full SELECT statement.

        Args:
            select_from: ``SELECT ... FROM ...`` prefix (including joins)

        Returns:
            Tuple of (sql, params)

        Raises:
            QueryError: If the query is invalid
        """
        self.validate()
        where, params = self.where_clause()
        limit, limit_params = self.limit_clause()
        sql = " ".join(part for part in (select_from, where, self.order_clause(), limit) if part)
        return sql, params + limit_params

    def compile_count(self, from_clause: str) -> Tuple[str, List[Any]]:
        """Build ``SELECT COUNT(*)`` over the conditions only (ignores paging)."""
        self.validate()
        where, params = self.where_clause()
        sql = " ".join(part for part in (f"SELECT COUNT(*) AS count FROM {from_clause}", where) if part)
        return sql, params

    def project(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """Apply the field projection to an executed document."""
        keys = set(document)
        if self._selected is not None:
            keys &= set(self._selected) | {"id"}
        keys -= self._excluded
        return {key: value for key, value in document.items() if key in keys}
