"""Merging of per-process records into a report."""

from collections.abc import Iterable
from itertools import groupby
from operator import attrgetter

from psmem.models import ProcessRecord, Report


def merge_by_name(records: Iterable[ProcessRecord]) -> list[ProcessRecord]:
    """
    Fold records sharing a name into one record each.

    The result is in name order; each merged record's ``count`` is the
    number of records folded into it.
    """
    by_name = sorted(records, key=attrgetter("name"))
    merged: list[ProcessRecord] = []
    for _, group in groupby(by_name, key=attrgetter("name")):
        first, *rest = group
        for rec in rest:
            first = first.merge(rec)
        merged.append(first)
    return merged


def aggregate(records: Iterable[ProcessRecord]) -> Report:
    """Merge records by name and order them by ascending PSS, heaviest last."""
    merged = merge_by_name(records)
    return Report(
        records=tuple(sorted(merged, key=attrgetter("pss"))),
        total_pss=sum(rec.pss for rec in merged),
        total_swap=sum(rec.swap for rec in merged),
    )
