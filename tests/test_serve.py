"""Tests for serve.py overrides and ui.logging_setup."""

import argparse
import logging
import os
import tempfile
import unittest
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler

from server.config import ServerConfig
from ui.logging_setup import configure_logging


class TestApplyOverrides(unittest.TestCase):
    def _args(self, **kwargs):
        values = dict(config=None, host=None, port=None, download_dir=None, public_dir=None, provision=False)
        values.update(kwargs)
        return argparse.Namespace(**values)

    def test_no_overrides(self):
        from serve import apply_overrides
        cfg = apply_overrides(ServerConfig(), self._args())
        self.assertEqual(cfg.port, 3000)
        self.assertEqual(cfg.host, "0.0.0.0")

    def test_overrides(self):
        from serve import apply_overrides
        cfg = apply_overrides(
            ServerConfig(),
            self._args(host="127.0.0.1", port=8081, download_dir="files"),
        )
        self.assertEqual(cfg.host, "127.0.0.1")
        self.assertEqual(cfg.port, 8081)
        self.assertEqual(cfg.download_dir, Path("files").resolve())


class TestConfigureLogging(unittest.TestCase):
    def setUp(self):
        root = logging.getLogger()
        self._saved = (list(root.handlers), root.level)

    def tearDown(self):
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in self._saved[0]:
            root.addHandler(handler)
        root.setLevel(self._saved[1])

    def test_console_only(self):
        configure_logging("debug")
        root = logging.getLogger()
        self.assertEqual(root.level, logging.DEBUG)
        self.assertEqual(len(root.handlers), 1)
        self.assertIsInstance(root.handlers[0], RichHandler)
        self.assertTrue(root.handlers[0].console.stderr)

    def test_with_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "logs", "server.log")
            configure_logging("INFO", path)
            root = logging.getLogger()
            self.assertTrue(any(isinstance(h, RotatingFileHandler) for h in root.handlers))
            logging.getLogger("serve").info("hello")
            for handler in root.handlers:
                handler.flush()
            with open(path, encoding="utf-8") as fh:
                self.assertIn("hello", fh.read())
            for handler in list(root.handlers):
                root.removeHandler(handler)
                handler.close()

    def test_unknown_level_falls_back(self):
        configure_logging("chatty")
        self.assertEqual(logging.getLogger().level, logging.INFO)


if __name__ == "__main__":
    unittest.main()
