# clinic_core/iam/introspection.py
"""
Discovery of foreign keys that point at a given (table, column).

The purge service asks for every inbound reference at call time, so adding a
new table that points at principals needs no change to the purge code.

Two sources:
- the model registry, which knows each field's on_delete behaviour
  (Django enforces on_delete in Python and declares every DB constraint as
  NO ACTION, so the catalog alone cannot tell PROTECT from SET_NULL);
- the live database catalog, which also sees tables no model declares.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from django.apps import apps
from django.core.exceptions import ImproperlyConfigured
from django.db import connection, models

from clinic_core.common.conf import access_setting

logger = logging.getLogger(__name__)

RESTRICT = "RESTRICT"
NO_ACTION = "NO ACTION"
CASCADE = "CASCADE"
SET_NULL = "SET NULL"
SET_DEFAULT = "SET DEFAULT"

# Rules that make the database refuse the parent delete while children exist.
BLOCKING_RULES = frozenset({RESTRICT, NO_ACTION})


@dataclass(frozen=True)
class ForeignKeyReference:
    table: str
    column: str
    delete_rule: str

    @property
    def requires_reassignment(self) -> bool:
        return self.delete_rule in BLOCKING_RULES


class SchemaIntrospector(Protocol):
    def list_foreign_keys_referencing(self, table: str, column: str) -> list[ForeignKeyReference]:
        ...


def delete_rule_for(on_delete) -> str:
    if on_delete in (models.PROTECT, models.RESTRICT):
        return RESTRICT
    if on_delete is models.DO_NOTHING:
        return NO_ACTION
    if on_delete is models.CASCADE:
        return CASCADE
    if on_delete is models.SET_NULL:
        return SET_NULL
    # SET_DEFAULT and SET(...)
    return SET_DEFAULT


class ModelRegistryIntrospector:
    """
    Every installed model field (auto-created M2M through tables included)
    whose target is `table.column`.
    """

    def list_foreign_keys_referencing(self, table: str, column: str) -> list[ForeignKeyReference]:
        refs: list[ForeignKeyReference] = []
        seen: set[tuple[str, str]] = set()

        for model in apps.get_models(include_auto_created=True):
            opts = model._meta
            if opts.proxy:
                continue

            for field in opts.local_fields:
                if not isinstance(field, models.ForeignKey):
                    continue

                target = field.target_field
                if target.model._meta.db_table != table or target.column != column:
                    continue

                key = (opts.db_table, field.column)
                if key in seen:
                    continue
                seen.add(key)

                refs.append(
                    ForeignKeyReference(
                        table=opts.db_table,
                        column=field.column,
                        delete_rule=delete_rule_for(field.remote_field.on_delete),
                    )
                )

        return refs


class CatalogIntrospector:
    """
    Reads declared constraints from the live database.
    information_schema on PostgreSQL and MySQL, PRAGMA foreign_key_list on SQLite.
    """

    POSTGRES_SQL = """
        SELECT kcu.table_name, kcu.column_name, rc.delete_rule
        FROM information_schema.referential_constraints rc
        JOIN information_schema.key_column_usage kcu
          ON kcu.constraint_name = rc.constraint_name
         AND kcu.constraint_schema = rc.constraint_schema
        JOIN information_schema.constraint_column_usage ccu
          ON ccu.constraint_name = rc.unique_constraint_name
         AND ccu.constraint_schema = rc.unique_constraint_schema
        WHERE rc.constraint_schema = current_schema()
          AND ccu.table_name = %s
          AND ccu.column_name = %s
    """

    MYSQL_SQL = """
        SELECT kcu.TABLE_NAME, kcu.COLUMN_NAME, rc.DELETE_RULE
        FROM information_schema.KEY_COLUMN_USAGE kcu
        JOIN information_schema.REFERENTIAL_CONSTRAINTS rc
          ON rc.CONSTRAINT_NAME = kcu.CONSTRAINT_NAME
         AND rc.CONSTRAINT_SCHEMA = kcu.CONSTRAINT_SCHEMA
        WHERE kcu.REFERENCED_TABLE_SCHEMA = DATABASE()
          AND kcu.REFERENCED_TABLE_NAME = %s
          AND kcu.REFERENCED_COLUMN_NAME = %s
    """

    def list_foreign_keys_referencing(self, table: str, column: str) -> list[ForeignKeyReference]:
        vendor = connection.vendor

        if vendor == "sqlite":
            return self._sqlite(table, column)

        if vendor == "postgresql":
            sql = self.POSTGRES_SQL
        elif vendor == "mysql":
            sql = self.MYSQL_SQL
        else:
            logger.warning("no catalog introspection for database vendor %s", vendor)
            return []

        with connection.cursor() as cursor:
            cursor.execute(sql, [table, column])
            rows = cursor.fetchall()

        return _dedupe(
            ForeignKeyReference(table=t, column=c, delete_rule=str(rule).upper())
            for t, c, rule in rows
        )

    def _sqlite(self, table: str, column: str) -> list[ForeignKeyReference]:
        qn = connection.ops.quote_name
        refs = []
        with connection.cursor() as cursor:
            for child in connection.introspection.table_names(cursor):
                cursor.execute(f"PRAGMA foreign_key_list({qn(child)})")
                # (id, seq, table, from, to, on_update, on_delete, match)
                for row in cursor.fetchall():
                    parent, from_col, to_col, on_delete = row[2], row[3], row[4], row[6]
                    if parent != table:
                        continue
                    # to_col is NULL when the FK targets the parent's primary key
                    if to_col is not None and to_col != column:
                        continue
                    refs.append(
                        ForeignKeyReference(table=child, column=from_col, delete_rule=str(on_delete).upper())
                    )
        return _dedupe(refs)


class DjangoSchemaIntrospector:
    """
    Model registry first (authoritative on_delete), then catalog references
    for (table, column) pairs no installed model declares.
    """

    def __init__(self, registry: SchemaIntrospector | None = None, catalog: SchemaIntrospector | None = None):
        self.registry = registry or ModelRegistryIntrospector()
        self.catalog = catalog or CatalogIntrospector()

    def list_foreign_keys_referencing(self, table: str, column: str) -> list[ForeignKeyReference]:
        refs = list(self.registry.list_foreign_keys_referencing(table, column))
        known = {(r.table, r.column) for r in refs}

        for ref in self.catalog.list_foreign_keys_referencing(table, column):
            if (ref.table, ref.column) in known:
                continue
            known.add((ref.table, ref.column))
            refs.append(ref)

        return refs


def _dedupe(refs) -> list[ForeignKeyReference]:
    out: list[ForeignKeyReference] = []
    seen: set[tuple[str, str]] = set()
    for ref in refs:
        key = (ref.table, ref.column)
        if key in seen:
            continue
        seen.add(key)
        out.append(ref)
    return out


INTROSPECTORS = {
    "django": DjangoSchemaIntrospector,
    "models": ModelRegistryIntrospector,
    "catalog": CatalogIntrospector,
}


def get_introspector() -> SchemaIntrospector:
    name = access_setting("SCHEMA_INTROSPECTOR")
    try:
        return INTROSPECTORS[name]()
    except KeyError:
        raise ImproperlyConfigured(
            f"ACCESS_CONTROL['SCHEMA_INTROSPECTOR'] must be one of {sorted(INTROSPECTORS)}, got {name!r}"
        )
