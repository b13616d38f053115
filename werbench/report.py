"""
werbench/report.py
==================
Human-readable word-level diff reports for a single comparison.

    report = build_diff_report(ref, hyp, label="sample-1", threshold=0.25)
    print_wer_report(report)
"""
from __future__ import annotations

import sys
from typing import TextIO

from werbench import config
from werbench.grading import format_wer, grade_wer
from werbench.wer import EditOp, align, compute_wer, normalize_text, tokenize

_TAGS = {
    EditOp.MATCH: "match",
    EditOp.SUBSTITUTION: "sub",
    EditOp.DELETION: "del",
    EditOp.INSERTION: "ins",
}


# ─────────────────────────────────────────────────────────────
# Word-Level Diff
# ─────────────────────────────────────────────────────────────

def word_diff(reference: str, hypothesis: str) -> list[tuple[str, str]]:
    """
    Word-level diff between reference and hypothesis as (status, word) tuples:
      'match'  — word is correct
      'sub'    — substituted, rendered as "ref→hyp"
      'del'    — in reference, missing from hypothesis
      'ins'    — in hypothesis, not in reference
    """
    diff = []
    for step in align(tokenize(reference), tokenize(hypothesis)):
        if step.op is EditOp.SUBSTITUTION:
            word = f"{step.ref_word}→{step.hyp_word}"
        elif step.op is EditOp.INSERTION:
            word = step.hyp_word
        else:
            word = step.ref_word
        diff.append((_TAGS[step.op], word))
    return diff


# ─────────────────────────────────────────────────────────────
# Report Builder
# ─────────────────────────────────────────────────────────────

def build_diff_report(
    reference: str,
    hypothesis: str,
    label: str = "",
    threshold: float = config.DEFAULT_WER_THRESHOLD,
) -> dict:
    """Build a structured WER report dict."""
    result = compute_wer(reference, hypothesis)
    return {
        "label": label,
        "reference": normalize_text(reference),
        "hypothesis": normalize_text(hypothesis),
        "wer": result.wer,
        "result": result,
        "grade": grade_wer(result.wer).value,
        "threshold": threshold,
        "passed": result.wer <= threshold,
        "errors": {
            "substitutions": result.substitutions,
            "deletions": result.deletions,
            "insertions": result.insertions,
            "matches": result.hits,
        },
        "alignment": word_diff(reference, hypothesis),
    }


def report_to_json(report: dict) -> dict:
    """JSON-safe view of a report (undefined WER becomes null)."""
    out = {k: v for k, v in report.items() if k != "result"}
    out["wer"] = report["result"].to_dict()["wer"]
    out["alignment"] = [list(pair) for pair in report["alignment"]]
    return out


def print_wer_report(report: dict, max_errors: int = 10, stream: TextIO | None = None) -> None:
    """Print a formatted WER report (stdout by default)."""
    out = stream or sys.stdout
    GREEN = "\033[0;32m"
    RED = "\033[0;31m"
    YELLOW = "\033[1;33m"
    CYAN = "\033[0;36m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RESET = "\033[0m"

    def emit(line: str = "") -> None:
        out.write(line + "\n")

    status = f"{GREEN}PASS{RESET}" if report["passed"] else f"{RED}FAIL{RESET}"
    wer_color = GREEN if report["passed"] else RED

    emit(f"\n{CYAN}{'─'*62}{RESET}")
    if report["label"]:
        emit(f"{BOLD}  {report['label']}{RESET}")
        emit(f"{CYAN}{'─'*62}{RESET}")
    emit(f"  WER:       {wer_color}{format_wer(report['wer'])}{RESET}  "
         f"(threshold: {report['threshold']:.0%})  {status}  [{report['grade']}]")
    e = report["errors"]
    emit(f"  Errors:    {RED}{e['substitutions']} sub{RESET}  "
         f"{YELLOW}{e['deletions']} del{RESET}  "
         f"{CYAN}{e['insertions']} ins{RESET}  "
         f"{GREEN}{e['matches']} match{RESET}")

    emit(f"\n  {BOLD}Error Alignment{RESET}:")
    error_count = 0
    for tag, word in report["alignment"]:
        if tag == "match":
            continue
        if error_count >= max_errors:
            emit(f"  {DIM}... (more errors omitted){RESET}")
            break
        if tag == "sub":
            ref_w, hyp_w = word.split("→")
            emit(f"    {RED}SUB{RESET}  expected: '{ref_w}'  got: '{hyp_w}'")
        elif tag == "del":
            emit(f"    {YELLOW}DEL{RESET}  missing:  '{word}'")
        else:
            emit(f"    {CYAN}INS{RESET}  extra:    '{word}'")
        error_count += 1

    if error_count == 0:
        emit(f"    {GREEN}(no errors){RESET}")

    emit(f"{CYAN}{'─'*62}{RESET}\n")
