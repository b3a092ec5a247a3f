"""
Translate list query-string parameters into MongoDB query parts.

    ?duration[gte]=5&difficulty=easy&sort=-ratings_average,price&fields=name,price&page=2&limit=10

Only whitelisted fields can be filtered on and only comparison operators are
accepted, so raw operators in client input never reach the database.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from pymongo import ASCENDING, DESCENDING

from natours.core.errors import ErrorResponse

RESERVED_PARAMS = {"page", "sort", "limit", "fields"}
OPERATORS = {"gte", "gt", "lte", "lt"}
FILTER_PATTERN = re.compile(r'^(\w+)(?:\[(\w+)\])?$')
FIELD_PATTERN = re.compile(r'^-?\w+$')

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 100
DEFAULT_SORT = [("created_at", DESCENDING)]


@dataclass
class ListQuery:
    filter: Dict[str, Any] = field(default_factory=dict)
    sort: List[Tuple[str, int]] = field(default_factory=lambda: list(DEFAULT_SORT))
    projection: Optional[Dict[str, int]] = None
    skip: int = 0
    limit: int = DEFAULT_LIMIT


def build_filter(params: Mapping[str, str], filterable: Mapping[str, Callable[[str], Any]]) -> Dict[str, Any]:
    """
    Build a MongoDB filter from query parameters.

    Args:
        params: raw query parameters
        filterable: field name -> converter for the field's values

    Raises:
        ErrorResponse: on an unknown operator or an unconvertible value
    """
    query: Dict[str, Any] = {}
    for key, raw_value in params.items():
        if key in RESERVED_PARAMS:
            continue

        match = FILTER_PATTERN.match(key)
        if not match or match.group(1) not in filterable:
            continue
        name, op = match.groups()

        if op is not None and op not in OPERATORS:
            raise ErrorResponse(f"Unsupported filter operator '{op}' on '{name}'", status_code=400)

        try:
            value = filterable[name](raw_value)
        except (TypeError, ValueError):
            raise ErrorResponse(f"Invalid value for '{name}': {raw_value}", status_code=400)

        if op is None:
            query[name] = value
        else:
            current = query.get(name)
            if not isinstance(current, dict):
                current = {}
            current[f"${op}"] = value
            query[name] = current
    return query


def build_sort(sort: Optional[str]) -> List[Tuple[str, int]]:
    """'-ratings_average,price' -> [('ratings_average', -1), ('price', 1)]"""
    if not sort:
        return list(DEFAULT_SORT)

    order = []
    for part in (p.strip() for p in sort.split(",")):
        if not part:
            continue
        if not FIELD_PATTERN.match(part):
            raise ErrorResponse(f"Invalid sort field '{part}'", status_code=400)
        if part.startswith("-"):
            order.append((part[1:], DESCENDING))
        else:
            order.append((part, ASCENDING))
    return order or list(DEFAULT_SORT)


def build_projection(fields: Optional[str]) -> Optional[Dict[str, int]]:
    """'name,price' -> include only those; '-description' -> exclude it"""
    if not fields:
        return None

    projection = {}
    for part in (p.strip() for p in fields.split(",")):
        if not part:
            continue
        if not FIELD_PATTERN.match(part):
            raise ErrorResponse(f"Invalid field '{part}'", status_code=400)
        if part.startswith("-"):
            projection[part[1:]] = 0
        else:
            projection[part] = 1

    # MongoDB rejects projections that mix inclusion and exclusion
    if len(set(projection.values())) > 1:
        raise ErrorResponse("Cannot mix included and excluded fields", status_code=400)
    return projection or None


def paginate(page: Optional[int], limit: Optional[int]) -> Tuple[int, int]:
    page = DEFAULT_PAGE if page is None else page
    limit = DEFAULT_LIMIT if limit is None else limit
    if page < 1 or limit < 1:
        raise ErrorResponse("page and limit must be positive", status_code=400)
    return (page - 1) * limit, limit


def build_list_query(
    params: Mapping[str, str],
    filterable: Mapping[str, Callable[[str], Any]],
) -> ListQuery:
    """Parse all list parameters (filters, sort, fields, page, limit) at once"""
    try:
        page = int(params["page"]) if params.get("page") else None
        limit = int(params["limit"]) if params.get("limit") else None
    except ValueError:
        raise ErrorResponse("page and limit must be integers", status_code=400)

    skip, limit = paginate(page, limit)
    return ListQuery(
        filter=build_filter(params, filterable),
        sort=build_sort(params.get("sort")),
        projection=build_projection(params.get("fields")),
        skip=skip,
        limit=limit,
    )
