"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/analysis/mapped_reads.py

Aligner-independent statistics over a SAM/BAM file.

floxer never writes supplementary records, so one showing up in its output
is a contract violation. Reference-aligner output is scanned with
``allow_supplementary=True``.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from statistics import fmean
from typing import Any, Iterable

import pysam

from mapbench.errors import ArtifactParseError, RecordContractError

logger = logging.getLogger(__name__)

EDIT_DISTANCE_TAG = "NM"


@dataclass(frozen=True)
class MappedReadsStats:
    num_mapped: int
    primary_alignment_edit_distances: list[int]
    num_unmapped: int = 0
    alignments_per_query: dict[str, int] = field(default_factory=dict)

    @property
    def mean_primary_edit_distance(self) -> float | None:
        if not self.primary_alignment_edit_distances:
            return None
        return fmean(self.primary_alignment_edit_distances)

    @property
    def num_multi_mapped(self) -> int:
        return sum(1 for count in self.alignments_per_query.values() if count > 1)

    def multiplicity_counts(self) -> dict[int, int]:
        """Number of queries per alignment multiplicity (1 -> n queries, 2 -> m queries, ...)."""
        return dict(sorted(Counter(self.alignments_per_query.values()).items()))


def _edit_distance(record: Any) -> int:
    try:
        value = record.get_tag(EDIT_DISTANCE_TAG)
    except KeyError as exc:
        raise RecordContractError(
            f"primary record {record.query_name!r} has no {EDIT_DISTANCE_TAG} tag"
        ) from exc
    # htslib hands back whichever integer width the writer chose
    if isinstance(value, bool):
        raise RecordContractError(f"wrong edit distance tag type for {record.query_name!r}: {value!r}")
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise RecordContractError(f"wrong edit distance tag type for {record.query_name!r}: {value!r}")


def summarize_records(records: Iterable[Any], *, allow_supplementary: bool = False) -> MappedReadsStats:
    """Scan alignment records (pysam.AlignedSegment-like) into MappedReadsStats."""
    edit_distances: list[int] = []
    mapped_queries: set[str] = set()
    unmapped_queries: set[str] = set()
    alignments_per_query: Counter[str] = Counter()

    for record in records:
        if record.is_supplementary and not allow_supplementary:
            raise RecordContractError(f"unexpected supplementary record {record.query_name!r} in floxer output")
        if record.is_unmapped:
            unmapped_queries.add(record.query_name)
            continue
        alignments_per_query[record.query_name] += 1
        if record.is_secondary or record.is_supplementary:
            continue
        mapped_queries.add(record.query_name)
        edit_distances.append(_edit_distance(record))

    return MappedReadsStats(
        num_mapped=len(mapped_queries),
        primary_alignment_edit_distances=edit_distances,
        num_unmapped=len(unmapped_queries - mapped_queries),
        alignments_per_query=dict(alignments_per_query),
    )


def _open_mode(path: Path) -> str:
    return "r" if path.suffix.lower() == ".sam" else "rb"


def analyze_mapped_reads(path: Path, *, allow_supplementary: bool = False) -> MappedReadsStats:
    if not path.exists():
        raise ArtifactParseError("Missing mapped reads file", path=path)
    logger.debug("Scanning alignments in %s", path)
    try:
        handle = pysam.AlignmentFile(str(path), _open_mode(path), check_sq=False)
    except (ValueError, OSError) as exc:
        raise ArtifactParseError(f"Unreadable mapped reads file: {exc}", path=path) from exc
    with handle:
        return summarize_records(handle, allow_supplementary=allow_supplementary)
