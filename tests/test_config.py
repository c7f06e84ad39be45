"""Tests for client.config and server.config -- configuration loading."""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from client.config import (
    DEFAULTS,
    load_config,
    save_config,
)
from server.config import ServerConfig, load_server_config


class TestConfigDefaults(unittest.TestCase):
    def test_defaults_have_required_keys(self):
        for key in ("base_url", "download_file", "download_size", "upload_size"):
            self.assertIn(key, DEFAULTS)

    def test_agreed_sizes(self):
        self.assertEqual(DEFAULTS["download_size"], 10_485_760)
        self.assertEqual(DEFAULTS["upload_size"], 5_242_880)
        self.assertEqual(DEFAULTS["download_file"], "10MB.bin")


class TestLoadSaveConfig(unittest.TestCase):
    def test_load_defaults_when_missing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("client.config._config_path", return_value=path):
                cfg = load_config()
                self.assertEqual(cfg["base_url"], "http://localhost:3000/api")

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("client.config._config_path", return_value=path):
                save_config({"base_url": "http://example.net/api", "upload_size": 1024})
                cfg = load_config()
                self.assertEqual(cfg["base_url"], "http://example.net/api")
                self.assertEqual(cfg["upload_size"], 1024)
                # Defaults still present
                self.assertEqual(cfg["download_size"], 10_485_760)

    def test_corrupt_file_returns_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                f.write("NOT JSON")
            with mock.patch("client.config._config_path", return_value=path):
                cfg = load_config()
                self.assertEqual(cfg["upload_size"], 5_242_880)


class TestServerConfig(unittest.TestCase):
    def test_defaults_without_file(self):
        cfg = load_server_config(environ={})
        self.assertEqual(cfg.port, 3000)
        self.assertEqual(cfg.download_dir, (Path.cwd() / "download_files").resolve())
        self.assertEqual(cfg.upload_limit, 100 * 1024 * 1024)

    def test_port_from_environment(self):
        cfg = load_server_config(environ={"PORT": "8080"})
        self.assertEqual(cfg.port, 8080)

    def test_file_paths_relative_to_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "server.json")
            with open(path, "w", encoding="utf-8") as fh:
                json.dump({"port": 4000, "download_dir": "assets", "public_dir": "", "upload_limit": 2048}, fh)
            cfg = load_server_config(path, environ={})
            self.assertEqual(cfg.port, 4000)
            self.assertEqual(cfg.download_dir, (Path(tmpdir) / "assets").resolve())
            self.assertIsNone(cfg.public_dir)
            self.assertEqual(cfg.upload_limit, 2048)

    def test_env_beats_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "server.json")
            with open(path, "w", encoding="utf-8") as fh:
                json.dump({"port": 4000}, fh)
            cfg = load_server_config(path, environ={"PORT": "5000"})
            self.assertEqual(cfg.port, 5000)

    def test_missing_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            load_server_config("/nonexistent/server.json", environ={})

    def test_unknown_keys_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "server.json")
            with open(path, "w", encoding="utf-8") as fh:
                json.dump({"color": "blue"}, fh)
            self.assertIsInstance(load_server_config(path, environ={}), ServerConfig)


if __name__ == "__main__":
    unittest.main()
