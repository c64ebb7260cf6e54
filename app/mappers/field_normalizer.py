"""
app/mappers/field_normalizer.py

Alias-driven header mapping from raw timesheet rows to canonical fields.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

from app.domain.timesheet import CANONICAL_FIELDS
from app.validators.value_parser import is_blank, stringify_value

DEFAULT_WORK_ITEM_BASE_URL = "https://projects.zoho.com/"

# canonical field -> accepted header aliases, highest priority first
DEFAULT_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "item_id": ("item_id",),
    "item_name": ("itemname", "name", "title", "item_name"),
    "item_detail": ("meetingtitle", "itemdetail", "detail", "description", "cts", "meeting_title"),
    "log_type": ("logtype", "type", "log_type"),
    "log_hours_decimal": ("log_hours",),
    "application": ("application", "app", "project_name"),
    "log_owner": ("logowner", "owner", "log_owner"),
    "log_date": ("logdate", "date", "log_date"),
    "remarks": ("description", "remarks", "notes", "comment", "descriptions"),
    "sprint": ("sprint",),
    "status": ("status",),
    "item_type": ("itemtype", "item_type"),
    "estimated_points": ("estimationpoints", "estimated", "points", "estimation_points"),
    "actual_points": ("actualpoints", "actual", "actual_points"),
    "requested_date": ("requesteddate", "requested", "requested_date"),
    "start_date": ("startdate", "start_date"),
    "release_date": ("end_date", "releasedate", "release_date"),
    "expected_start_date": ("startdate", "expectedstartdate", "expected_start_date"),
    "expected_release_date": ("end_date", "expectedreleasedate", "expected_release_date"),
    "actual_start_date": ("actualstartdate", "actual_start_date", "start_date"),
    "actual_release_date": ("actualreleasedate", "actual_release_date", "completed_on"),
    "completed_on": ("completedon", "completed_on"),
    "epic": ("epic",),
    "priority": ("priority",),
    "reported_by": ("reportedby", "reported_by"),
    "project_name": ("projectname", "project_name"),
    "team_name": ("teamname", "team_name", "team", "log_owner"),
    "zoho_link": ("zoholink", "zoho_link", "link", "url"),
}

# (target, sources): fill target from the first non-empty source when target is empty
DEFAULT_FALLBACK_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("application", ("project_name",)),
    ("team_name", ("log_owner",)),
    ("actual_points", ("log_hours_decimal",)),
    ("expected_start_date", ("start_date",)),
    ("expected_release_date", ("release_date",)),
    ("actual_start_date", ("start_date",)),
    ("actual_release_date", ("completed_on", "release_date")),
)

_SEPARATOR_RUNS = re.compile(r"[^a-z0-9]+")


def normalize_header(header: Any) -> str:
    """
    Lower-case a header and collapse every non-alphanumeric run to ``_``.

    ``"Item Name"``, ``"item_name"`` and ``"ITEM-NAME"`` all become
    ``"item_name"``.
    """

    if header is None:
        return ""
    return _SEPARATOR_RUNS.sub("_", str(header).strip().lower()).strip("_")


def build_work_item_link(*, base_url: str, project_name: Any, item_id: Any) -> str | None:
    """
    Deep link to a work item, or ``None`` when either part is missing.
    """

    project = stringify_value(project_name)
    identifier = stringify_value(item_id)
    if not project or not identifier:
        return None
    return f"{base_url.rstrip('/')}/{project.lower()}/item/{identifier}"


class FieldNormalizer:
    """
    Resolves raw rows keyed by arbitrary headers into canonical mappings.
    """

    def __init__(
        self,
        *,
        aliases: Mapping[str, Sequence[str]] | None = None,
        fallback_rules: Sequence[tuple[str, Sequence[str]]] | None = None,
        work_item_base_url: str = DEFAULT_WORK_ITEM_BASE_URL,
    ) -> None:
        self._aliases: dict[str, tuple[str, ...]] = {
            canonical: tuple(normalize_header(alias) for alias in values)
            for canonical, values in (aliases or DEFAULT_FIELD_ALIASES).items()
        }
        self._fallback_rules = tuple(
            (target, tuple(sources))
            for target, sources in (fallback_rules if fallback_rules is not None else DEFAULT_FALLBACK_RULES)
        )
        self._work_item_base_url = work_item_base_url

    def recognized_fields(self, headers: Sequence[Any]) -> dict[str, str]:
        """
        Map canonical fields to the first header that could feed them.
        """

        header_lookup: dict[str, str] = {}
        for header in headers:
            key = normalize_header(header)
            if key and key not in header_lookup:
                header_lookup[key] = str(header)

        recognized: dict[str, str] = {}
        for canonical, aliases in self._aliases.items():
            for alias in aliases:
                if alias in header_lookup:
                    recognized[canonical] = header_lookup[alias]
                    break
        return recognized

    def normalize_row(self, raw_row: Mapping[Any, Any]) -> dict[str, Any]:
        """
        Produce a mapping with every canonical field, unmatched ones ``None``.

        Alias lookup runs first, then the fallback rules, then link
        synthesis. Values keep their raw cell types.
        """

        keyed_row: dict[str, Any] = {}
        for header, value in raw_row.items():
            key = normalize_header(header)
            if not key:
                continue
            if key in keyed_row and not is_blank(keyed_row[key]):
                continue
            keyed_row[key] = value

        mapped: dict[str, Any] = {name: None for name in CANONICAL_FIELDS}
        for canonical, aliases in self._aliases.items():
            for alias in aliases:
                value = keyed_row.get(alias)
                if not is_blank(value):
                    mapped[canonical] = value
                    break

        self._apply_fallbacks(mapped)
        return mapped

    def _apply_fallbacks(self, mapped: dict[str, Any]) -> None:
        for target, sources in self._fallback_rules:
            if not is_blank(mapped.get(target)):
                continue
            for source in sources:
                if not is_blank(mapped.get(source)):
                    mapped[target] = mapped[source]
                    break

        if is_blank(mapped.get("zoho_link")):
            mapped["zoho_link"] = build_work_item_link(
                base_url=self._work_item_base_url,
                project_name=mapped.get("project_name"),
                item_id=mapped.get("item_id"),
            )
