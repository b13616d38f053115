"""
werbench/cli.py — command line entry point
===========================================

Usage:
  werbench compare --ref "the cat sat" --hyp "the bat sat"
  werbench compare --ref-file ref.txt --hyp-file hyp.txt --json
  werbench batch pairs.csv --threshold 0.2
  werbench record --ref "the cat sat" --hyp "the bat sat" --model "Whisper (Tiny)"
  werbench history --limit 20
  werbench show <id>
  werbench delete <id>

Exit status: 0 ok, 1 WER above threshold, 2 usage / input errors.
"""
from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from typing import Sequence

from werbench.errors import InputFileError, WerbenchError
from werbench.experiments import run_experiment
from werbench.grading import bin_wers, format_wer, grade_wer, summarize
from werbench.logger import init_logging
from werbench.providers import AlignmentCommentaryProvider, ManualTranscriptionProvider
from werbench.report import build_diff_report, print_wer_report, report_to_json
from werbench.settings import SettingsManager
from werbench.store import ExperimentStore
from werbench.wer import compute_wer

logger = logging.getLogger(__name__)


# ─── Input helpers ────────────────────────────────────────────────────────────

def read_text_file(path: str) -> str:
    """utf-8-sig so a BOM does not become part of the first word."""
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            return f.read().strip()
    except UnicodeDecodeError as e:
        raise InputFileError(f"{path} is not valid UTF-8: {e}") from e


def _text_arg(args: argparse.Namespace, name: str) -> str:
    text = getattr(args, name)
    path = getattr(args, f"{name}_file")
    if path:
        return read_text_file(path)
    if text is None:
        raise WerbenchError(f"one of --{name} or --{name}-file is required")
    return text


def read_pairs(path: str) -> list[tuple[str, str, str]]:
    """
    CSV rows as (id, reference, hypothesis). Two-column rows get their
    row number as id; blank rows and rows starting with '#' are skipped.
    """
    pairs = []
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        try:
            for row in csv.reader(f):
                if not row or row[0].startswith("#"):
                    continue
                if len(row) >= 3:
                    pairs.append((row[0], row[1], row[2]))
                elif len(row) == 2:
                    pairs.append((str(len(pairs) + 1), row[0], row[1]))
                else:
                    logger.warning("Skipping malformed row in %s: %r", path, row)
        except UnicodeDecodeError as e:
            raise InputFileError(f"{path} is not valid UTF-8: {e}") from e
        except csv.Error as e:
            raise InputFileError(f"{path}: malformed CSV: {e}") from e
    return pairs


def _open_store(args: argparse.Namespace, settings: SettingsManager) -> ExperimentStore:
    return ExperimentStore(args.db or settings.get("db_path"))


# ─── Commands ─────────────────────────────────────────────────────────────────

def cmd_compare(args: argparse.Namespace, settings: SettingsManager) -> int:
    threshold = args.threshold if args.threshold is not None else settings.get("wer_threshold")
    report = build_diff_report(_text_arg(args, "ref"), _text_arg(args, "hyp"),
                               label=args.label, threshold=threshold)
    if args.json:
        print(json.dumps(report_to_json(report), ensure_ascii=False, indent=2))
    else:
        print_wer_report(report)
    return 0 if report["passed"] else 1


def cmd_batch(args: argparse.Namespace, settings: SettingsManager) -> int:
    threshold = args.threshold if args.threshold is not None else settings.get("wer_threshold")
    pairs = read_pairs(args.csv)
    if not pairs:
        print(f"[WER] No samples in {args.csv}", file=sys.stderr)
        return 2

    rows = []
    for pair_id, ref, hyp in pairs:
        rows.append((pair_id, compute_wer(ref, hyp)))

    summary = summarize(result for _, result in rows)
    histogram = bin_wers(result.wer for _, result in rows)

    if args.json:
        print(json.dumps({
            "samples": [{"id": pair_id, **result.to_dict()} for pair_id, result in rows],
            "summary": asdict(summary),
            "histogram": histogram,
            "threshold": threshold,
        }, ensure_ascii=False, indent=2))
    else:
        for pair_id, result in rows:
            print(f"{pair_id}: WER={format_wer(result.wer):>7} [{grade_wer(result.wer).value}] "
                  f"S={result.substitutions} D={result.deletions} I={result.insertions} "
                  f"N={result.reference_words}")
        print("\n--- Summary ---")
        print(f"Samples:    {summary.samples} ({summary.undefined} undefined)")
        print(f"Macro WER:  {format_wer(summary.macro_wer) if summary.macro_wer is not None else 'n/a'}")
        print(f"Micro WER:  {format_wer(summary.micro_wer) if summary.micro_wer is not None else 'n/a'}")
        print(f"Totals:     S={summary.substitutions} D={summary.deletions} "
              f"I={summary.insertions} N={summary.reference_words}")
        print("\n--- Distribution ---")
        for label, count in histogram.items():
            print(f"{label:>7}  {'#' * count} {count}")

    if summary.macro_wer is not None and summary.macro_wer > threshold:
        print(f"[WER] FAIL: macro WER {summary.macro_wer:.4f} > max {threshold:.4f}", file=sys.stderr)
        return 1
    return 0


def cmd_record(args: argparse.Namespace, settings: SettingsManager) -> int:
    reference = _text_arg(args, "ref")
    transcriber = ManualTranscriptionProvider(_text_arg(args, "hyp"))
    experiment = run_experiment(
        reference,
        b"",
        transcriber,
        AlignmentCommentaryProvider(),
        model_name=args.model or settings.get("model_name"),
        max_words=settings.get("max_input_words"),
        audio_path=args.audio,
    )
    store = _open_store(args, settings)
    try:
        store.save(experiment)
    finally:
        store.close()
    print(f"#{experiment.id}  WER={format_wer(experiment.wer)}  {experiment.analysis}")
    return 0


def cmd_history(args: argparse.Namespace, settings: SettingsManager) -> int:
    store = _open_store(args, settings)
    try:
        experiments = store.list(limit=args.limit)
    finally:
        store.close()
    if not experiments:
        print("No experiments yet.")
        return 0
    for exp in experiments:
        when = datetime.fromtimestamp(exp.timestamp).strftime("%Y-%m-%d %H:%M")
        preview = exp.reference_text if len(exp.reference_text) <= 40 else exp.reference_text[:37] + "..."
        print(f"#{exp.id[-4:]}  {exp.id}  {when}  {format_wer(exp.wer):>7}  {preview}")
    summary = summarize(exp.result for exp in experiments)
    if summary.macro_wer is not None:
        print(f"\nAverage WER: {format_wer(summary.macro_wer)} over {summary.samples} sample(s)")
    return 0


def cmd_show(args: argparse.Namespace, settings: SettingsManager) -> int:
    store = _open_store(args, settings)
    try:
        exp = store.get(args.id)
    finally:
        store.close()
    if exp is None:
        print(f"No experiment with id {args.id}", file=sys.stderr)
        return 2
    report = build_diff_report(exp.reference_text, exp.hypothesis_text,
                               label=f"{exp.model_name} — #{exp.id}",
                               threshold=settings.get("wer_threshold"))
    print_wer_report(report)
    print(f"Analysis: {exp.analysis or 'Analysis unavailable.'}")
    return 0


def cmd_delete(args: argparse.Namespace, settings: SettingsManager) -> int:
    store = _open_store(args, settings)
    try:
        removed = store.delete(args.id)
    finally:
        store.close()
    if not removed:
        print(f"No experiment with id {args.id}", file=sys.stderr)
        return 2
    print(f"Deleted {args.id}")
    return 0


# ─── Parser ───────────────────────────────────────────────────────────────────

def _add_text_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--ref", help="Reference (ground truth) text")
    p.add_argument("--ref-file", help="Read the reference from a file")
    p.add_argument("--hyp", help="Hypothesis (ASR output) text")
    p.add_argument("--hyp-file", help="Read the hypothesis from a file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="werbench", description="ASR word error rate workbench")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("compare", help="Score one hypothesis against a reference")
    _add_text_args(p)
    p.add_argument("--label", default="", help="Title shown in the report")
    p.add_argument("--threshold", type=float, help="Pass threshold (default from settings)")
    p.add_argument("--json", action="store_true", help="Emit JSON instead of the coloured report")
    p.set_defaults(func=cmd_compare)

    p = sub.add_parser("batch", help="Score every row of a CSV (ref,hyp or id,ref,hyp)")
    p.add_argument("csv")
    p.add_argument("--threshold", type=float)
    p.add_argument("--json", action="store_true")
    p.set_defaults(func=cmd_batch)

    p = sub.add_parser("record", help="Run and save an experiment")
    _add_text_args(p)
    p.add_argument("--model", help="Model name to record with the experiment")
    p.add_argument("--audio", help="Path of the audio the hypothesis came from")
    p.add_argument("--db", help="Experiment database path")
    p.set_defaults(func=cmd_record)

    p = sub.add_parser("history", help="List saved experiments, newest first")
    p.add_argument("--limit", type=int)
    p.add_argument("--db")
    p.set_defaults(func=cmd_history)

    for name, func, help_text in (("show", cmd_show, "Show one experiment"),
                                  ("delete", cmd_delete, "Delete one experiment")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("id")
        p.add_argument("--db")
        p.set_defaults(func=func)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        init_logging("werbench")
        settings = SettingsManager()
        return args.func(args, settings)
    except (WerbenchError, OSError) as e:
        logger.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
