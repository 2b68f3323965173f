"""
Course catalog queries and loading.

The catalog document (file or URL) looks like:
{
    "colleges": [
        {"name": "UC Berkeley", "majors": ["Computer Science", {"name": "Physics", "degree": "B.A."}]}
    ],
    "courses": [
        {"division": "MATH", "number": "101", "name": "Calculus I", "units": 5,
         "description": "...", "college": "UC Berkeley"}
    ]
}
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from decimal import Decimal, InvalidOperation

import requests
from django.db import transaction
from django.db.models import Q

from core.models import College, Course, Major

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 50
MAX_SEARCH_LIMIT = 200


class CatalogError(ValueError):
    """The catalog document is malformed or could not be fetched."""


def search_courses(query: str = "", division: str | None = None, limit: int = DEFAULT_SEARCH_LIMIT):
    """
    Case-insensitive lookup on acronym, division, number or name.
    "MATH-1" matches MATH 101, MATH 1A, ...
    """
    qs = Course.objects.all()
    if division:
        qs = qs.filter(division__iexact=division.strip())

    query = (query or "").strip()
    if query:
        cond = Q(name__icontains=query) | Q(division__iexact=query) | Q(number__iexact=query)
        div, sep, num = query.partition("-")
        if sep:
            cond |= Q(division__iexact=div.strip(), number__istartswith=num.strip())
        qs = qs.filter(cond)

    limit = max(1, min(int(limit or DEFAULT_SEARCH_LIMIT), MAX_SEARCH_LIMIT))
    return list(qs.order_by("division", "number")[:limit])


def majors_by_college() -> dict[str, list[str]]:
    out: "OrderedDict[str, list[str]]" = OrderedDict()
    for college in College.objects.order_by("name"):
        out[college.name] = []
    for major in Major.objects.select_related("college").order_by("college__name", "name"):
        out[major.college.name].append(major.name)
    return dict(out)


def get_courses(acronyms) -> dict[str, Course]:
    """Map acronym -> Course for every acronym that exists in the catalog."""
    pairs = set()
    for acr in acronyms:
        division, sep, number = str(acr).partition("-")
        if sep:
            pairs.add((division.upper(), number.upper()))
    if not pairs:
        return {}
    cond = Q()
    for division, number in pairs:
        cond |= Q(division=division, number=number)
    return {c.acronym: c for c in Course.objects.filter(cond)}


def _entries(container: dict, key: str) -> list:
    """A list member of the catalog document; missing or null means empty."""
    value = container.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise CatalogError(f"'{key}' must be a list, got {type(value).__name__}.")
    return value


def _units(value) -> Decimal:
    try:
        return Decimal(str(value if value not in (None, "") else 0))
    except InvalidOperation as e:
        raise CatalogError(f"Invalid units value: {value!r}") from e


@transaction.atomic
def load_catalog(payload: dict) -> dict[str, int]:
    """Upsert colleges, majors and courses. Safe to run repeatedly."""
    if not isinstance(payload, dict):
        raise CatalogError("Catalog document must be a JSON object.")

    counts = {"colleges": 0, "majors": 0, "courses": 0}
    colleges: dict[str, College] = {}

    for entry in _entries(payload, "colleges"):
        name = str((entry.get("name") if isinstance(entry, dict) else entry) or "").strip()
        if not name:
            raise CatalogError("College entries need a name.")
        college, created = College.objects.get_or_create(name=name)
        colleges[name] = college
        counts["colleges"] += int(created)

        for m in _entries(entry, "majors") if isinstance(entry, dict) else []:
            m_name = str((m.get("name") if isinstance(m, dict) else m) or "").strip()
            if not m_name:
                continue
            degree = (m.get("degree") or "") if isinstance(m, dict) else ""
            major = Major.objects.filter(college=college, name__iexact=m_name).first()
            if major is None:
                Major.objects.create(college=college, name=m_name, degree=degree)
                counts["majors"] += 1
            elif degree and major.degree != degree:
                major.degree = degree
                major.save(update_fields=["degree"])

    for row in _entries(payload, "courses"):
        if not isinstance(row, dict):
            raise CatalogError("Course entries must be objects.")
        division = str(row.get("division") or "").strip().upper()
        number = str(row.get("number") or "").strip().upper()
        if not division or not number:
            raise CatalogError(f"Course entry missing division/number: {row!r}")

        college = None
        college_name = str(row.get("college") or "").strip()
        if college_name:
            college = colleges.get(college_name)
            if college is None:
                college, _ = College.objects.get_or_create(name=college_name)
                colleges[college_name] = college

        _, created = Course.objects.update_or_create(
            division=division,
            number=number,
            defaults={
                "name": str(row.get("name") or acronym_of(division, number)).strip(),
                "units": _units(row.get("units")),
                "description": row.get("description") or "",
                "college": college,
            },
        )
        counts["courses"] += int(created)

    logger.info(
        "Catalog loaded: %d new colleges, %d new majors, %d new courses.",
        counts["colleges"], counts["majors"], counts["courses"],
    )
    return counts


def acronym_of(division: str, number: str) -> str:
    return f"{division.upper()}-{number.upper()}"


def fetch_catalog(url: str, timeout: int = 15) -> dict:
    """Download a catalog document."""
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except ValueError as e:
        raise CatalogError(f"Catalog at {url} is not valid JSON.") from e
    except requests.RequestException as e:
        logger.error("Catalog download failed: %s", e, exc_info=True)
        raise CatalogError(f"Could not download catalog from {url}: {e}") from e
