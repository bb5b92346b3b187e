"""Shared persistence primitives: filters, aggregation buckets, query execution."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from postgrest.exceptions import APIError

from ..errors import DuplicateValueError, RepositoryError

logger = logging.getLogger(__name__)

Filters = Mapping[str, Any]

# Default PostgREST max-rows per response
PAGE_SIZE = 1000

_UNIQUE_VIOLATION = "23505"
_DUPLICATE_KEY_PATTERN = re.compile(r"Key \((?P<field>[\w]+)\)=\((?P<value>.*?)\)")


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive datetime range usable as a filter value."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def contains(self, value: Optional[datetime]) -> bool:
        if value is None:
            return False
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


@dataclass(slots=True)
class AggregateBucket:
    """Result row of a group-by: record count and sum of ``total``."""

    key: Optional[str]
    count: int
    total: float


def plain_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def matches_filters(record: object, filters: Optional[Filters]) -> bool:
    """Field-equality match, with ``DateRange`` values matched as ranges."""

    for name, expected in (filters or {}).items():
        actual = getattr(record, name, None)
        if isinstance(expected, DateRange):
            if not expected.contains(actual):
                return False
        elif plain_value(actual) != plain_value(expected):
            return False
    return True


def apply_filters(query: Any, filters: Optional[Filters]) -> Any:
    """Translate a filter mapping onto a PostgREST query builder."""

    for name, expected in (filters or {}).items():
        if isinstance(expected, DateRange):
            if expected.start is not None:
                query = query.gte(name, expected.start.isoformat())
            if expected.end is not None:
                query = query.lte(name, expected.end.isoformat())
        elif expected is None:
            query = query.is_(name, "null")
        else:
            query = query.eq(name, plain_value(expected))
    return query


def group_rows(rows: list[Any], group_by: Optional[str]) -> list[AggregateBucket]:
    """Group records (objects or dicts) by a field, counting and summing ``total``."""

    buckets: dict[Optional[str], AggregateBucket] = {}
    for row in rows:
        if group_by is None:
            key = None
        elif isinstance(row, dict):
            key = plain_value(row.get(group_by))
        else:
            key = plain_value(getattr(row, group_by))
        total = float(row.get("total") or 0) if isinstance(row, dict) else float(row.total or 0)
        bucket = buckets.get(key)
        if bucket is None:
            buckets[key] = AggregateBucket(key=key, count=1, total=total)
        else:
            bucket.count += 1
            bucket.total += total
    return list(buckets.values())


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def fetch_all_rows(
    build_query: Callable[[], Any],
    action: str,
    *,
    limit: Optional[int] = None,
    skip: int = 0,
    batch_size: int = PAGE_SIZE,
) -> list[dict[str, Any]]:
    """Read every matching row, one ``range`` batch at a time.

    PostgREST caps each response (1000 rows by default), so a single select
    silently truncates. ``build_query`` must return a fresh builder per call.
    Stops on a short page or once ``limit`` rows are collected.
    """

    rows: list[dict[str, Any]] = []
    offset = skip
    while limit is None or len(rows) < limit:
        size = batch_size if limit is None else min(batch_size, limit - len(rows))
        response = run_query(build_query().range(offset, offset + size - 1), action)
        batch = response.data or []
        rows.extend(batch)
        if len(batch) < size:
            break
        offset += size
    return rows


def run_query(query: Any, action: str) -> Any:
    """Execute a PostgREST query, converting failures into billing errors."""

    try:
        return query.execute()
    except APIError as exc:
        if exc.code == _UNIQUE_VIOLATION:
            match = _DUPLICATE_KEY_PATTERN.search(exc.details or exc.message or "")
            field = match.group("field") if match else "unique field"
            value = match.group("value") if match else None
            raise DuplicateValueError(field, value) from exc
        logger.error(f"Supabase {action} failed: {exc.message}")
        raise RepositoryError(f"Storage error while trying to {action}") from exc
    except Exception as exc:
        logger.error(f"Supabase {action} failed: {exc}")
        raise RepositoryError(f"Storage error while trying to {action}") from exc
