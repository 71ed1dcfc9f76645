from pydantic import BaseModel, ConfigDict


class IteratorConfig(BaseModel):
    """
    Options shared by iterators and one-time iterables.

    Attributes:
        logger_name: Logger used when no explicit logger is given.
        warn_on_undisposed: Log a warning when an iterator holding a source
            is garbage collected without being disposed.
        close_batch_iterators: Call ``close()`` on released batch iterators
            that provide it (generators, for instance).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    logger_name: str = "batchcursor"
    warn_on_undisposed: bool = True
    close_batch_iterators: bool = True


__all__ = ["IteratorConfig"]
