"""
werbench/wer.py — Word Error Rate engine
=========================================
Normalizes a reference and a hypothesis into word sequences, aligns them
with a Levenshtein table, backtraces the alignment to classify every edit
and derives the WER ratio.

    WER = (S + D + I) / N      N = number of reference words

Tie-break on equal cost: diagonal (match / substitution) first, then
deletion, then insertion. The total distance never depends on it, the
S/D/I split does.

Usage:
    from werbench.wer import compute_wer
    result = compute_wer("the cat sat", "the bat sat")
    result.wer            # 0.333...
    result.substitutions  # 1
"""
from __future__ import annotations

import enum
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Sequence

from werbench.logger import TRACE

logger = logging.getLogger(__name__)

# Anything that is not a word character or whitespace, plus the underscore
# that \w lets through.
_PUNCT_RE = re.compile(r"[^\w\s]|_")
_SPACE_RE = re.compile(r"\s+")


# ─── Normalization ───────────────────────────────────────────────────────────

def normalize_text(text: str) -> str:
    """
    Strip punctuation, collapse whitespace, lowercase and trim.

    Idempotent: normalize_text(normalize_text(t)) == normalize_text(t).
    """
    text = _PUNCT_RE.sub("", text)
    text = _SPACE_RE.sub(" ", text)
    return text.lower().strip()


def tokenize(text: str) -> tuple[str, ...]:
    """Normalized word sequence. Empty text gives an empty tuple, never ('',)."""
    normalized = normalize_text(text)
    if not normalized:
        return ()
    return tuple(normalized.split(" "))


# ─── Edit operations ─────────────────────────────────────────────────────────

class EditOp(enum.Enum):
    MATCH = "match"
    SUBSTITUTION = "sub"
    DELETION = "del"
    INSERTION = "ins"


@dataclass(frozen=True)
class EditOperation:
    """One step of the alignment. Indices are None on the side with no token."""
    op: EditOp
    ref_index: int | None
    hyp_index: int | None
    ref_word: str | None = None
    hyp_word: str | None = None

    @property
    def is_error(self) -> bool:
        return self.op is not EditOp.MATCH


# ─── Result ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class WerResult:
    """
    Outcome of one comparison.

    ``wer`` is ``math.inf`` when the reference is empty but the hypothesis
    is not: the ratio is undefined there and every hypothesis word counts
    as an insertion.
    """
    wer: float
    distance: int
    substitutions: int
    deletions: int
    insertions: int
    reference_words: int = 0
    hypothesis_words: int = 0

    @property
    def hits(self) -> int:
        return self.reference_words - self.substitutions - self.deletions

    @property
    def is_defined(self) -> bool:
        return math.isfinite(self.wer)

    def to_dict(self) -> dict[str, Any]:
        return {
            "wer": self.wer if self.is_defined else None,
            "distance": self.distance,
            "substitutions": self.substitutions,
            "deletions": self.deletions,
            "insertions": self.insertions,
            "hits": self.hits,
            "reference_words": self.reference_words,
            "hypothesis_words": self.hypothesis_words,
        }


# ─── Alignment ───────────────────────────────────────────────────────────────

def _distance_table(ref: Sequence[str], hyp: Sequence[str]) -> list[list[int]]:
    r, h = len(ref), len(hyp)
    d = [[0] * (h + 1) for _ in range(r + 1)]
    for i in range(r + 1):
        d[i][0] = i
    for j in range(h + 1):
        d[0][j] = j

    for i in range(1, r + 1):
        for j in range(1, h + 1):
            if ref[i - 1] == hyp[j - 1]:
                d[i][j] = d[i - 1][j - 1]
            else:
                d[i][j] = 1 + min(d[i - 1][j - 1], d[i - 1][j], d[i][j - 1])
    return d


def _backtrace(ref: Sequence[str], hyp: Sequence[str], d: list[list[int]]) -> list[EditOperation]:
    ops: list[EditOperation] = []
    i, j = len(ref), len(hyp)

    while i > 0 or j > 0:
        cost = d[i][j]
        if i > 0 and j > 0 and ref[i - 1] == hyp[j - 1]:
            ops.append(EditOperation(EditOp.MATCH, i - 1, j - 1, ref[i - 1], hyp[j - 1]))
            i -= 1
            j -= 1
        elif i > 0 and j > 0 and cost == d[i - 1][j - 1] + 1:
            ops.append(EditOperation(EditOp.SUBSTITUTION, i - 1, j - 1, ref[i - 1], hyp[j - 1]))
            i -= 1
            j -= 1
        elif i > 0 and cost == d[i - 1][j] + 1:
            ops.append(EditOperation(EditOp.DELETION, i - 1, None, ref[i - 1], None))
            i -= 1
        else:
            ops.append(EditOperation(EditOp.INSERTION, None, j - 1, None, hyp[j - 1]))
            j -= 1

    ops.reverse()
    return ops


def align(reference: Sequence[str], hypothesis: Sequence[str]) -> list[EditOperation]:
    """
    Minimum edit alignment between two word sequences.

    Returns the operations in reading order (start of the texts first).
    Every non-match step costs exactly one, so the number of error
    operations always equals the edit distance.
    """
    return _backtrace(reference, hypothesis, _distance_table(reference, hypothesis))


# ─── Public API ──────────────────────────────────────────────────────────────

def compute_wer(reference: str, hypothesis: str) -> WerResult:
    """
    Word error rate of ``hypothesis`` against ``reference``.

    Total over all strings: never raises, never divides by zero.
    """
    ref_words = tokenize(reference)
    hyp_words = tokenize(hypothesis)
    r, h = len(ref_words), len(hyp_words)

    d = _distance_table(ref_words, hyp_words)
    counts = {EditOp.SUBSTITUTION: 0, EditOp.DELETION: 0, EditOp.INSERTION: 0}
    for step in _backtrace(ref_words, hyp_words, d):
        if step.is_error:
            counts[step.op] += 1

    distance = d[r][h]
    if r > 0:
        wer = distance / r
    elif h > 0:
        wer = math.inf
    else:
        wer = 0.0

    logger.log(TRACE, "compute_wer ref_words=%d hyp_words=%d distance=%d wer=%s", r, h, distance, wer)
    return WerResult(
        wer=wer,
        distance=distance,
        substitutions=counts[EditOp.SUBSTITUTION],
        deletions=counts[EditOp.DELETION],
        insertions=counts[EditOp.INSERTION],
        reference_words=r,
        hypothesis_words=h,
    )
