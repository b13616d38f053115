"""
werbench — ASR evaluation workbench.

The core is the word error rate engine in ``werbench.wer``; everything
else (experiments, history store, reports, CLI) is built around it.
"""
from werbench.wer import EditOp, EditOperation, WerResult, align, compute_wer, normalize_text, tokenize

__version__ = "0.1.0"

__all__ = [
    "EditOp",
    "EditOperation",
    "WerResult",
    "align",
    "compute_wer",
    "normalize_text",
    "tokenize",
]
