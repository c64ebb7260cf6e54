"""
app/services/entry_reconciler.py

Collapses fragmented log rows into one record per (work item, owner).

A work item logged over several days by the same person arrives as
several rows. Reconciliation keeps the first row as the base record,
sums ``log_hours_decimal`` and ``actual_points`` across the group, and
backfills ``remarks`` / ``zoho_link`` from the first member that has one.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable

from app.domain.timesheet import CanonicalEntry, require_entries

logger = logging.getLogger(__name__)

MISSING_ITEM_ID = "no_id"
MISSING_OWNER = "no_owner"

SUMMED_FIELDS: tuple[str, ...] = ("log_hours_decimal", "actual_points")
BACKFILLED_FIELDS: tuple[str, ...] = ("remarks", "zoho_link")


def reconciliation_key(entry: CanonicalEntry) -> tuple[str, str]:
    return (entry.item_id or MISSING_ITEM_ID, entry.log_owner or MISSING_OWNER)


def group_entries(entries: Iterable[CanonicalEntry]) -> dict[tuple[str, str], list[CanonicalEntry]]:
    """
    Partition entries by reconciliation key in first-seen order.
    """

    groups: dict[tuple[str, str], list[CanonicalEntry]] = {}
    for entry in require_entries(entries, component="group_entries"):
        groups.setdefault(reconciliation_key(entry), []).append(entry)
    return groups


class EntryReconciler:
    """
    Stateless grouping of raw entries into one representative per work item and owner.
    """

    def reconcile(self, entries: Iterable[CanonicalEntry]) -> list[CanonicalEntry]:
        """
        Return one entry per (item_id, log_owner) in first-seen order.

        The representative carries no cached metrics: they belong to the
        individual rows, not the merged record.
        """

        groups = group_entries(entries)
        reconciled = [self._merge(members) for members in groups.values()]
        logger.debug("Reconciled %d group(s)", len(reconciled))
        return reconciled

    @staticmethod
    def _merge(members: list[CanonicalEntry]) -> CanonicalEntry:
        base = members[0]
        changes: dict[str, object] = {"metrics": None}

        for name in SUMMED_FIELDS:
            changes[name] = sum((getattr(member, name) or 0.0) for member in members)

        for name in BACKFILLED_FIELDS:
            if getattr(base, name):
                continue
            changes[name] = next(
                (getattr(member, name) for member in members if getattr(member, name)),
                getattr(base, name),
            )

        return replace(base, **changes)
