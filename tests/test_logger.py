import logging
import tempfile
import unittest
from pathlib import Path

from stockdata.utils.logger import setup_logger


class TestLogger(unittest.TestCase):
    def test_idempotent_handlers(self):
        a = setup_logger("stockdata.tests.idempotent")
        b = setup_logger("stockdata.tests.idempotent")
        self.assertIs(a, b)
        self.assertEqual(len(a.handlers), 1)

    def test_file_handler(self):
        with tempfile.TemporaryDirectory() as d:
            logger = setup_logger("stockdata.tests.filelog", log_dir=d, level="DEBUG")
            logger.debug("hello")
            for h in logger.handlers:
                h.flush()
            files = list(Path(d).glob("filelog_*.log"))
            self.assertEqual(len(files), 1)
            self.assertIn("hello", files[0].read_text(encoding="utf-8"))
            self.assertEqual(logger.level, logging.DEBUG)
            for h in list(logger.handlers):
                h.close()
                logger.removeHandler(h)


if __name__ == "__main__":
    unittest.main()
