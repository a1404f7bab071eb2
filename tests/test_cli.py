"""
ChillGamer core command-line interface tests
"""

import io
import os
import json
import secrets
import unittest
import contextlib
from unittest import mock

import pymongo.errors

from chillgamer_core import settings as _settings
from chillgamer_core.__main__ import main
from chillgamer_core.persistence import database

from . import conf, utils


class CommandLineTests(utils.BaseTest):
    def setUp(self) -> None:
        super().setUp()
        self.env = mock.patch.dict(os.environ, {}, clear=True)
        self.env.start()
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        self.temp_files = []

    def tearDown(self) -> None:
        self.env.stop()
        for path in self.temp_files:
            if os.path.exists(path):
                os.remove(path)
        _settings.SETTINGS_LOG_INFO_FUNCTION = None
        super().tearDown()

    def _temp_file(self, name: str) -> str:
        path = conf.TEMP_FILE_FORMAT.format(os.getpid(), secrets.token_hex(8), name)
        self.temp_files.append(path)
        return path

    def _run(self, *args: str) -> int:
        with contextlib.redirect_stdout(self.stdout), contextlib.redirect_stderr(self.stderr):
            return main(list(args))

    def _quiet_config(self, **sections) -> str:
        content = {"logging": conf.QUIET_LOGGING}
        content.update(sections)
        path = self._temp_file("config.json")
        with open(path, "w") as f:
            json.dump(content, f)
        return path

    def test_help(self):
        for args in ([], ["--help"], ["init", "--help"], ["run", "--help"], ["ping", "--help"], ["unknown"]):
            with self.assertRaises(SystemExit) as context:
                self._run(*args)
            self.assertEqual(0 if "--help" in args else 2, context.exception.code)

    def test_init(self):
        self.assertEqual(0, self._run("init"))
        self.assertIn("config file has been created", self.stdout.getvalue())
        with open(self.config_file) as f:
            content = json.load(f)
        self.assertEqual(5000, content["server"]["port"])
        self.assertEqual("mongodb://localhost:27017", content["database"]["connection"])
        self.assertEqual(_settings.get_default_config(), content)

        self.assertEqual(1, self._run("init"))
        self.assertIn("already exists", self.stderr.getvalue())

        self.assertEqual(0, self._run("init", "--force", "--database", "mongodb://db.example.com", "--port", "8000"))
        with open(self.config_file) as f:
            content = json.load(f)
        self.assertEqual(8000, content["server"]["port"])
        self.assertEqual("mongodb://db.example.com", content["database"]["connection"])

    def test_init_from_environment(self):
        os.environ["MONGODB_URI"] = "mongodb+srv://cluster.example.net"
        self.assertEqual(0, self._run("init"))
        with open(self.config_file) as f:
            self.assertEqual("mongodb+srv://cluster.example.net", json.load(f)["database"]["connection"])

    def test_init_invalid_port(self):
        for port in ("0", "70000", "-5"):
            self.assertEqual(1, self._run("init", "--port", port))
            self.assertFalse(os.path.exists(self.config_file))
        self.assertIn("Invalid port", self.stderr.getvalue())

    def test_systemd(self):
        path = self._temp_file("chillgamer_core.service")
        self.assertEqual(0, self._run("systemd", "--path", path))
        with open(path) as f:
            content = f.read()
        self.assertIn("-m chillgamer_core run", content)
        self.assertIn("[Install]", content)
        self.assertIn(f"Environment=CONFIG_PATH={os.path.abspath(self.config_file)}", content)

        self.assertEqual(1, self._run("systemd", "--path", path))
        self.assertEqual(0, self._run("systemd", "--path", path, "--force"))

    def test_ping(self):
        path = self._quiet_config()
        with mock.patch.object(database.DocumentStore, "ping", mock.AsyncMock(return_value=True)) as ping:
            self.assertEqual(0, self._run("ping", "--config", path))
        ping.assert_awaited_once()
        self.assertIn("Successfully connected", self.stdout.getvalue())

        fault = pymongo.errors.ServerSelectionTimeoutError("No servers found yet")
        with mock.patch.object(database.DocumentStore, "ping", mock.AsyncMock(side_effect=fault)):
            self.assertEqual(1, self._run("ping", "--config", path))
        self.assertIn("No servers found yet", self.stderr.getvalue())

    def test_invalid_config(self):
        path = self._quiet_config(server={"port": "foo"})
        self.assertEqual(1, self._run("ping", "--config", path))
        self.assertEqual(1, self._run("run", "--config", path))
        self.assertIn("Invalid configuration", self.stderr.getvalue())

    def test_run(self):
        path = self._quiet_config(server={"host": "0.0.0.0", "port": 8123})
        with mock.patch("uvicorn.run") as run:
            self.assertEqual(0, self._run("run", "--config", path))
        run.assert_called_once()
        args, kwargs = run.call_args
        self.assertEqual("ChillGamer core REST API", args[0].title)
        self.assertEqual(8123, kwargs["port"])
        self.assertEqual("0.0.0.0", kwargs["host"])
        self.assertTrue(kwargs["access_log"])
        self.assertEqual("", kwargs["root_path"])
        self.assertEqual(conf.QUIET_LOGGING["root"], kwargs["log_config"]["root"])

        with mock.patch("uvicorn.run") as run:
            self.assertEqual(0, self._run(
                "run",
                "--config", path,
                "--host", "::1",
                "--port", "9000",
                "--no-access-log",
                "--root-path", "/api"
            ))
        kwargs = run.call_args[1]
        self.assertEqual(9000, kwargs["port"])
        self.assertEqual("::1", kwargs["host"])
        self.assertFalse(kwargs["access_log"])
        self.assertEqual("/api", kwargs["root_path"])


if __name__ == '__main__':
    unittest.main()
