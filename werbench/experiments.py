"""
werbench/experiments.py — workbench application state
=======================================================
Experiments and the dashboard / new-experiment / details navigation,
held in an immutable ``WorkbenchState`` and changed only through the
transition functions below. ``run_experiment`` is the create step:
transcribe, score with the WER engine, attach commentary.
"""
from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, replace
from typing import Callable

from werbench import config
from werbench.errors import ExperimentError, ExperimentNotFoundError, InputTooLongError
from werbench.providers import CommentaryProvider, TranscriptionProvider
from werbench.wer import WerResult, compute_wer, tokenize

logger = logging.getLogger(__name__)

ANALYSIS_FAILED = "Could not generate analysis."


class PageState(enum.Enum):
    DASHBOARD = "dashboard"
    NEW_EXPERIMENT = "new_experiment"
    DETAILS = "details"


@dataclass(frozen=True)
class Experiment:
    id: str
    timestamp: float
    reference_text: str
    hypothesis_text: str
    result: WerResult
    model_name: str = config.DEFAULT_MODEL_NAME
    analysis: str | None = None
    audio_path: str | None = None

    @property
    def wer(self) -> float:
        return self.result.wer


@dataclass(frozen=True)
class WorkbenchState:
    experiments: tuple[Experiment, ...] = ()
    page: PageState = PageState.DASHBOARD
    selected_id: str | None = None

    @property
    def selected(self) -> Experiment | None:
        if self.selected_id is None:
            return None
        return find_experiment(self, self.selected_id)


# ─── Transitions ─────────────────────────────────────────────────────────────

def find_experiment(state: WorkbenchState, experiment_id: str) -> Experiment | None:
    for exp in state.experiments:
        if exp.id == experiment_id:
            return exp
    return None


def navigate(state: WorkbenchState, page: PageState) -> WorkbenchState:
    selected = state.selected_id if page is PageState.DETAILS else None
    return replace(state, page=page, selected_id=selected)


def add_experiment(state: WorkbenchState, experiment: Experiment) -> WorkbenchState:
    """Newest first, back to the dashboard."""
    return replace(
        state,
        experiments=(experiment,) + state.experiments,
        page=PageState.DASHBOARD,
        selected_id=None,
    )


def select_experiment(state: WorkbenchState, experiment_id: str) -> WorkbenchState:
    if find_experiment(state, experiment_id) is None:
        raise ExperimentNotFoundError(experiment_id)
    return replace(state, page=PageState.DETAILS, selected_id=experiment_id)


def delete_experiment(state: WorkbenchState, experiment_id: str) -> WorkbenchState:
    """Unknown ids leave the state untouched. Deleting the open experiment returns to the dashboard."""
    remaining = tuple(e for e in state.experiments if e.id != experiment_id)
    if len(remaining) == len(state.experiments):
        return state
    if state.selected_id == experiment_id:
        return replace(state, experiments=remaining, page=PageState.DASHBOARD, selected_id=None)
    return replace(state, experiments=remaining)


# ─── Create step ─────────────────────────────────────────────────────────────

def new_experiment_id(clock: Callable[[], float] = time.time) -> str:
    """Millisecond timestamp as a string."""
    return str(round(clock() * 1000))


def run_experiment(
    reference_text: str,
    audio: bytes,
    transcriber: TranscriptionProvider,
    commentator: CommentaryProvider | None = None,
    *,
    model_name: str | None = None,
    max_words: int | None = None,
    audio_path: str | None = None,
    mime_type: str = "audio/wav",
    clock: Callable[[], float] = time.time,
) -> Experiment:
    """
    Build one experiment. Transcription failures abort before any WER
    is computed; commentary failures only replace the analysis text.

    Raises:
        ExperimentError: blank reference or transcription failure.
        InputTooLongError: reference longer than ``max_words``.
    """
    if not reference_text or not reference_text.strip():
        raise ExperimentError("reference text is empty")

    if max_words is not None:
        n_words = len(tokenize(reference_text))
        if n_words > max_words:
            raise InputTooLongError(n_words, max_words)

    try:
        hypothesis = transcriber.transcribe(audio, mime_type)
    except Exception as e:
        logger.error("Transcription failed with %s: %s", getattr(transcriber, "name", transcriber), e)
        raise ExperimentError(f"transcription failed: {e}") from e

    result = compute_wer(reference_text, hypothesis)

    analysis = None
    if commentator is not None:
        try:
            analysis = commentator.analyze(reference_text, hypothesis)
        except Exception as e:
            logger.warning("Commentary failed: %s", e)
            analysis = ANALYSIS_FAILED

    now = clock()
    experiment = Experiment(
        id=new_experiment_id(lambda: now),
        timestamp=now,
        reference_text=reference_text,
        hypothesis_text=hypothesis,
        result=result,
        model_name=model_name or getattr(transcriber, "name", config.DEFAULT_MODEL_NAME),
        analysis=analysis,
        audio_path=audio_path,
    )
    logger.info("Experiment %s created: wer=%s distance=%d", experiment.id, result.wer, result.distance)
    return experiment
