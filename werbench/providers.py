"""
Collaborator ports around the WER engine.

A transcription provider turns audio into the hypothesis text; a
commentary provider writes a free-text note about a reference/hypothesis
pair. The engine consumes neither; ``werbench.experiments`` wires them up.
"""
from __future__ import annotations

from typing import Protocol

from werbench.errors import TranscriptionError
from werbench.wer import EditOp, align, compute_wer, tokenize


class TranscriptionProvider(Protocol):
    """Implementations return the transcript or raise TranscriptionError."""
    name: str

    def transcribe(self, audio: bytes, mime_type: str = "audio/wav") -> str:
        ...


class CommentaryProvider(Protocol):
    def analyze(self, reference: str, hypothesis: str) -> str:
        ...


class ManualTranscriptionProvider:
    """Hypothesis typed in by the user instead of produced by a model."""

    def __init__(self, text: str, name: str = "Manual entry"):
        self.text = text
        self.name = name

    def transcribe(self, audio: bytes, mime_type: str = "audio/wav") -> str:
        if not self.text or not self.text.strip():
            raise TranscriptionError("no hypothesis text entered")
        return self.text.strip()


class AlignmentCommentaryProvider:
    """
    Offline commentary derived from the alignment: praises a clean
    transcript, otherwise summarises the error counts and lists the
    first few errors.
    """

    def __init__(self, max_errors: int = 5):
        self.max_errors = max_errors

    def analyze(self, reference: str, hypothesis: str) -> str:
        result = compute_wer(reference, hypothesis)
        if result.distance == 0:
            return "Transcript matches the reference exactly. Clear, accurate recognition."
        if not result.is_defined:
            return (f"Reference is empty; all {result.insertions} hypothesis "
                    f"word(s) count as insertions and WER is undefined.")

        parts = [
            f"{result.distance} error(s) over {result.reference_words} reference word(s): "
            f"{result.substitutions} substitution(s), {result.deletions} deletion(s), "
            f"{result.insertions} insertion(s)."
        ]
        errors = [s for s in align(tokenize(reference), tokenize(hypothesis)) if s.is_error]
        for step in errors[:self.max_errors]:
            if step.op is EditOp.SUBSTITUTION:
                parts.append(f"'{step.ref_word}' heard as '{step.hyp_word}'.")
            elif step.op is EditOp.DELETION:
                parts.append(f"'{step.ref_word}' was dropped.")
            else:
                parts.append(f"'{step.hyp_word}' was added.")
        if len(errors) > self.max_errors:
            parts.append(f"{len(errors) - self.max_errors} more error(s) not listed.")
        return " ".join(parts)
