"""Exception types raised around the WER engine. The engine itself never raises."""


class WerbenchError(Exception):
    """Base class for all werbench errors."""


class TranscriptionError(WerbenchError):
    """A transcription provider could not produce a hypothesis."""


class ExperimentError(WerbenchError):
    """An experiment could not be created."""


class InputTooLongError(ExperimentError):
    def __init__(self, words: int, limit: int):
        super().__init__(f"reference has {words} words, limit is {limit}")
        self.words = words
        self.limit = limit


class ExperimentNotFoundError(WerbenchError):
    def __init__(self, experiment_id: str):
        super().__init__(f"no experiment with id {experiment_id!r}")
        self.experiment_id = experiment_id


class InputFileError(WerbenchError):
    """A text or CSV input file could not be decoded or parsed."""


class StoreError(WerbenchError):
    """The experiment database could not be opened or read."""
