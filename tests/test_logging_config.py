"""Tests for the centralised logging helpers."""

import logging
import os
import tempfile
import unittest

from indexed_merkle.logging_config import get_logger, get_test_logger, setup_logging


class TestSetupLogging(unittest.TestCase):
    """Each case starts from an unconfigured library logger."""

    def setUp(self):
        self.logger = logging.getLogger("indexed_merkle")
        saved = (list(self.logger.handlers), self.logger.level, self.logger.propagate)
        for handler in saved[0]:
            self.logger.removeHandler(handler)
        self.addCleanup(self._restore, saved)

    def _restore(self, saved):
        handlers, level, propagate = saved
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        for handler in handlers:
            self.logger.addHandler(handler)
        self.logger.setLevel(level)
        self.logger.propagate = propagate

    def _handler_types(self):
        return sorted(type(h).__name__ for h in self.logger.handlers)

    def test_stream(self):
        setup_logging(level=logging.WARNING)
        self.assertEqual(self._handler_types(), ["StreamHandler"])
        self.assertEqual(self.logger.level, logging.WARNING)
        self.assertFalse(self.logger.propagate)

    def test_file_and_both(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "imt.log")
            setup_logging(handler_type="file", log_file=path)
            self.assertEqual(self._handler_types(), ["FileHandler"])

            get_logger("IMT").info("written to file")
            for handler in self.logger.handlers:
                handler.flush()
            with open(path) as f:
                self.assertIn("indexed_merkle.IMT: written to file", f.read())

            self._restore(([], logging.NOTSET, True))
            setup_logging(handler_type="both", log_file=path)
            self.assertEqual(self._handler_types(), ["FileHandler", "StreamHandler"])

            # Release the file before the directory is removed.
            self._restore(([], logging.NOTSET, True))

    def test_configures_once(self):
        setup_logging()
        setup_logging(handler_type="both", log_file=os.devnull)
        self.assertEqual(self._handler_types(), ["StreamHandler"])

    def test_unknown_handler_type(self):
        with self.assertRaises(ValueError):
            setup_logging(handler_type="syslog")


class TestGetLogger(unittest.TestCase):

    def test_names(self):
        self.assertEqual(get_logger("IMT").name, "indexed_merkle.IMT")
        self.assertEqual(get_logger("indexed_merkle.tree_stats").name, "indexed_merkle.tree_stats")
        self.assertEqual(get_test_logger("X").name, "Tests.X")


if __name__ == "__main__":
    unittest.main()
