"""
werbench/grading.py — presentation helpers for WER values
==========================================================
Grades, percentage formatting, dashboard histogram and dataset summary.
None of this feeds back into the engine.
"""
from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from werbench import config
from werbench.wer import WerResult


class WerGrade(enum.Enum):
    GOOD = "good"
    MODERATE = "moderate"
    POOR = "poor"


def grade_wer(wer: float, good: float = config.WER_GOOD, moderate: float = config.WER_MODERATE) -> WerGrade:
    """GOOD below ``good``, MODERATE below ``moderate``, POOR otherwise (undefined included)."""
    if wer < good:
        return WerGrade.GOOD
    if wer < moderate:
        return WerGrade.MODERATE
    return WerGrade.POOR


def format_wer(wer: float) -> str:
    if not math.isfinite(wer):
        return "n/a"
    return f"{wer * 100:.1f}%"


# ─── Histogram ───────────────────────────────────────────────────────────────

WER_BINS = config.WER_BINS


def bin_wers(wers: Iterable[float], bins: Sequence[tuple[str, float]] = WER_BINS) -> dict[str, int]:
    """
    Count WER values per range. Upper bounds are inclusive, so 0.10 lands
    in "< 10%"; anything past the last finite bound (infinite included)
    lands in the last range.
    """
    labels = [label for label, _ in bins]
    edges = np.array([upper for _, upper in bins[:-1]], dtype=float)
    values = np.fromiter(wers, dtype=float)
    if values.size == 0:
        return {label: 0 for label in labels}

    idx = np.searchsorted(edges, values, side="left")
    counts = np.bincount(idx, minlength=len(labels))
    return {label: int(n) for label, n in zip(labels, counts)}


# ─── Dataset summary ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class WerSummary:
    samples: int
    undefined: int
    macro_wer: float | None
    micro_wer: float | None
    best_wer: float | None
    worst_wer: float | None
    substitutions: int
    deletions: int
    insertions: int
    reference_words: int


def summarize(results: Iterable[WerResult]) -> WerSummary:
    """
    Aggregate many comparisons.

    macro: unweighted mean of per-sample WER.
    micro: sum(S+D+I) / sum(reference words).
    Both only count samples whose WER is defined.
    """
    results = list(results)
    defined = [r for r in results if r.is_defined]
    scored = [r for r in defined if r.reference_words > 0]

    if defined:
        wers = np.array([r.wer for r in defined], dtype=float)
        macro, best, worst = float(wers.mean()), float(wers.min()), float(wers.max())
    else:
        macro = best = worst = None

    ref_words = sum(r.reference_words for r in scored)
    micro = sum(r.distance for r in scored) / ref_words if ref_words else None

    return WerSummary(
        samples=len(results),
        undefined=len(results) - len(defined),
        macro_wer=macro,
        micro_wer=micro,
        best_wer=best,
        worst_wer=worst,
        substitutions=sum(r.substitutions for r in results),
        deletions=sum(r.deletions for r in results),
        insertions=sum(r.insertions for r in results),
        reference_words=ref_words,
    )
