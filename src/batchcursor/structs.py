import enum
from dataclasses import dataclass


class IteratorState(enum.Enum):
    """
    Lifecycle state of a BatchItemIterator.

    - NOT_STARTED: No advance has been requested yet.
    - ACTIVE: Advancing through batches.
    - FINISHED: The batch source signalled exhaustion.
    - DISPOSED: Resources released. Terminal.
    """

    NOT_STARTED = "not_started"
    ACTIVE = "active"
    FINISHED = "finished"
    DISPOSED = "disposed"


@dataclass
class IteratorStats:
    """Counters collected while an iterator walks its batch source."""

    batches_fetched: int = 0
    empty_batches: int = 0
    items_yielded: int = 0
