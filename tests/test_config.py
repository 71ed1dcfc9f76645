import logging

import pytest
from pydantic import ValidationError

from batchcursor import BatchItemIterator, IteratorConfig, get_logger


class ClosingBatch:
    def __init__(self, items, closed):
        self.items = items
        self.closed = closed
        self.iterators = []

    def __iter__(self):
        closed = self.closed

        def _gen():
            try:
                yield from self.items
            finally:
                closed.append(True)

        iterator = _gen()
        # Keep a reference so only an explicit close() runs the finally block.
        self.iterators.append(iterator)
        return iterator


class ClosingSource:
    def __init__(self, closed):
        self.closed = closed
        self.served = False
        self.batches = []

    def advance_batch(self, cancellation=None):
        if self.served:
            return False
        self.served = True
        return True

    def current_batch(self):
        batch = ClosingBatch([1, 2], self.closed)
        self.batches.append(batch)
        return batch

    def dispose(self):
        pass


def test_config_defaults():
    config = IteratorConfig()
    assert config.logger_name == "batchcursor"
    assert config.warn_on_undisposed is True
    assert config.close_batch_iterators is True


def test_config_is_frozen_and_strict():
    config = IteratorConfig.model_validate({"logger_name": "cursor"})
    assert config.logger_name == "cursor"

    with pytest.raises(ValidationError):
        config.logger_name = "other"
    with pytest.raises(ValidationError):
        IteratorConfig(unknown=True)


def test_close_batch_iterators_can_be_disabled():
    closed = []
    source = ClosingSource(closed)
    iterator = BatchItemIterator(
        source, config=IteratorConfig(close_batch_iterators=False)
    )
    iterator.advance()
    iterator.dispose()
    assert closed == []

    closed_default = []
    iterator = BatchItemIterator(ClosingSource(closed_default))
    iterator.advance()
    iterator.dispose()
    assert closed_default == [True]


def test_logger_name_from_config():
    iterator = BatchItemIterator(
        ClosingSource([]), config=IteratorConfig(logger_name="batchcursor.test")
    )
    assert iterator.logger.name == "batchcursor.test"
    iterator.dispose()


def test_custom_logger_wins():
    logger = logging.getLogger("custom")
    iterator = BatchItemIterator(ClosingSource([]), logger=logger)
    assert iterator.logger is logger
    iterator.dispose()


def test_get_logger_adds_single_handler():
    logger = get_logger("batchcursor.handlers")
    get_logger("batchcursor.handlers")

    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO


def test_undisposed_warning_is_logged(caplog):
    logger = logging.getLogger("batchcursor.undisposed")
    iterator = BatchItemIterator(ClosingSource([]), logger=logger)

    with caplog.at_level(logging.WARNING, logger="batchcursor.undisposed"):
        iterator.__del__()

    assert "collected without being disposed" in caplog.text
    assert iterator.is_disposed
