"""SQL repository built on SQLAlchemy Core.

Dialect-neutral (SQLite and PostgreSQL): every entity type is mapped to a
Table whose column names match the entity's attribute names. Related
conditions compile to EXISTS sub-queries, so a JOIN never duplicates base
rows and the count query can reuse the same WHERE clause.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import sqlalchemy as sa

from pressroom.core.types import Entity, EntityId
from pressroom.persistence.adapter import QueryResult
from pressroom.query.composed import (
    AnyOf,
    ComposedQuery,
    Condition,
    Predicate,
    RelatedCondition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableMapping:
    """Maps an entity type onto a table.

    Attributes:
        entity_type: Entity type name (e.g., "Submission")
        table: SQLAlchemy Table holding the records
        id_column: Primary key column name
    """

    entity_type: str
    table: sa.Table
    id_column: str = "id"


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqlRepository:
    """Repository executing ComposedQuery values against SQL tables."""

    def __init__(self, engine: sa.engine.Engine, mappings: Iterable[TableMapping]):
        self._engine = engine
        self._mappings: dict[str, TableMapping] = {}
        for mapping in mappings:
            if mapping.entity_type in self._mappings:
                raise ValueError(f"Duplicate table mapping for '{mapping.entity_type}'")
            self._mappings[mapping.entity_type] = mapping

    @classmethod
    def from_url(cls, url: str, mappings: Iterable[TableMapping]) -> "SqlRepository":
        return cls(sa.create_engine(url), mappings)

    @property
    def engine(self) -> sa.engine.Engine:
        return self._engine

    def create_tables(self) -> None:
        """Create any mapped tables that don't exist yet."""
        tables = [m.table for m in self._mappings.values()]
        for metadata in {t.metadata for t in tables}:
            metadata.create_all(self._engine, tables=[t for t in tables if t.metadata is metadata])

    def close(self) -> None:
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def execute(self, query: ComposedQuery) -> QueryResult:
        """Fetch one page; the total counts the same query without offset/limit."""
        mapping = self._mapping(query.entity_type)
        table = mapping.table
        unpaged = query.without_pagination()
        where = [self._compile(table, p) for p in unpaged.predicates]

        stmt = sa.select(table).where(*where)
        order = []
        for clause in query.order:
            column = self._column(table, clause.field)
            expr = column.desc() if clause.direction == "desc" else column.asc()
            # NULLs last regardless of direction or dialect default
            order.extend([column.is_(None), expr])
        if not any(c.field == mapping.id_column for c in query.order):
            order.append(table.c[mapping.id_column].asc())
        stmt = stmt.order_by(*order)
        if query.limit is not None:
            stmt = stmt.limit(query.limit)
        if query.offset:
            stmt = stmt.offset(query.offset)

        count_stmt = sa.select(sa.func.count()).select_from(table).where(*where)

        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
            total = conn.execute(count_stmt).scalar_one()

        logger.debug("Fetched %d of %d %s rows", len(rows), total, query.entity_type)

        return QueryResult(items=[self._to_entity(mapping, row) for row in rows], total=total)

    def get(self, entity_type: str, id: EntityId) -> Entity | None:
        mapping = self._mapping(entity_type)
        table = mapping.table
        stmt = sa.select(table).where(table.c[mapping.id_column] == id)
        with self._engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return self._to_entity(mapping, row) if row else None

    def get_many(self, entity_type: str, ids: Iterable[EntityId]) -> list[Entity | None]:
        ids = list(ids)
        if not ids:
            return []
        mapping = self._mapping(entity_type)
        table = mapping.table
        stmt = sa.select(table).where(table.c[mapping.id_column].in_(set(ids)))
        with self._engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        found = {row[mapping.id_column]: self._to_entity(mapping, row) for row in rows}
        return [found.get(i) for i in ids]

    # ------------------------------------------------------------------
    # Writes (seeding and tests; lifecycle writes live outside the core)
    # ------------------------------------------------------------------

    def add(self, entity: Entity) -> Entity:
        mapping = self._mapping(entity.entity_type)
        table = mapping.table
        record = {k: v for k, v in entity.to_record().items() if k in table.c}
        record[mapping.id_column] = entity.id
        with self._engine.begin() as conn:
            conn.execute(table.delete().where(table.c[mapping.id_column] == entity.id))
            conn.execute(table.insert().values(**record))
        return entity

    def remove(self, entity_type: str, id: EntityId) -> bool:
        mapping = self._mapping(entity_type)
        table = mapping.table
        with self._engine.begin() as conn:
            result = conn.execute(table.delete().where(table.c[mapping.id_column] == id))
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _mapping(self, entity_type: str) -> TableMapping:
        if entity_type not in self._mappings:
            raise ValueError(f"No table mapped for entity type '{entity_type}'")
        return self._mappings[entity_type]

    def _column(self, table: sa.Table, field: str) -> sa.Column:
        if field not in table.c:
            raise ValueError(f"Unknown field '{field}' on table '{table.name}'")
        return table.c[field]

    def _to_entity(self, mapping: TableMapping, row: Any) -> Entity:
        record = dict(row)
        entity_id = record.pop(mapping.id_column)
        return Entity(mapping.entity_type, entity_id, record)

    def _compile(self, table: sa.Table, predicate: Predicate) -> Any:
        if isinstance(predicate, Condition):
            return self._condition(table, predicate)
        if isinstance(predicate, AnyOf):
            return sa.or_(*(self._condition(table, c) for c in predicate.conditions))
        if isinstance(predicate, RelatedCondition):
            related = self._mapping(predicate.entity_type).table
            return sa.exists().where(
                self._column(related, predicate.foreign_key)
                == self._column(table, predicate.local_key),
                *(self._condition(related, c) for c in predicate.conditions),
            )
        raise TypeError(f"Unsupported predicate {type(predicate).__name__}")

    def _condition(self, table: sa.Table, cond: Condition) -> Any:
        """Build a SQL expression from a condition."""
        column = self._column(table, cond.field)
        op = cond.operator
        value = cond.value

        if op == "eq":
            return column == value
        elif op == "neq":
            return column != value
        elif op == "gt":
            return column > value
        elif op == "gte":
            return column >= value
        elif op == "lt":
            return column < value
        elif op == "lte":
            return column <= value
        elif op == "in":
            return column.in_(value)
        elif op == "notIn":
            return column.not_in(value)
        elif op == "contains":
            return column.ilike(f"%{_escape_like(str(value))}%", escape="\\")
        elif op == "startsWith":
            return column.ilike(f"{_escape_like(str(value))}%", escape="\\")
        elif op == "isNull":
            return column.is_(None)
        elif op == "isNotNull":
            return column.is_not(None)
        elif op == "between":
            return column.between(value[0], value[1])

        raise ValueError(f"Unsupported operator '{op}'")
