import os
import tempfile
import unittest
from unittest import mock

from neurochess.config import load_settings
from neurochess.debug_log import DebugEntry, DebugKind, DebugLog
from neurochess.models import Seat

SETTINGS_YAML = """
NEUROCHESS_DEFAULT_PROVIDER: anthropic
NEUROCHESS_MAX_RETRIES: 5
NEUROCHESS_BACKOFF_BASE_S: 0.1
ANTHROPIC_API_KEY: yaml-key
"""


class SettingsTests(unittest.TestCase):
    def test_yaml_overrides_environment(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "settings.yml")
            with open(path, "w", encoding="utf-8") as f:
                f.write(SETTINGS_YAML)
            env = {"ANTHROPIC_API_KEY": "env-key", "NEUROCHESS_TEMPERATURE": "0.9", "GEMINI_API_KEY": "gem-key"}
            with mock.patch.dict(os.environ, env):
                settings = load_settings(path)
        self.assertEqual(settings.default_provider, "anthropic")
        self.assertEqual(settings.max_retries, 5)
        self.assertEqual(settings.backoff_base_s, 0.1)
        self.assertEqual(settings.temperature, 0.9)
        self.assertEqual(settings.api_key_for("anthropic"), "yaml-key")
        self.assertEqual(settings.api_key_for("google"), os.environ.get("GOOGLE_API_KEY") or "gem-key")

    def test_missing_file_uses_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = load_settings("/nonexistent/settings.yml")
        self.assertEqual(settings.default_provider, "openrouter")
        self.assertEqual(settings.max_retries, 3)
        self.assertEqual(settings.api_key_for("openai"), "")


class DebugLogTests(unittest.TestCase):
    def test_bounded(self):
        log = DebugLog(limit=3)
        for i in range(5):
            log(DebugEntry(kind=DebugKind.move, seat=Seat.white, text=f"m{i}"))
        self.assertEqual([e.text for e in log.entries()], ["m2", "m3", "m4"])
        self.assertEqual(log.entries()[0].to_dict()["seat"], "white")
        log.clear()
        self.assertEqual(len(log), 0)


if __name__ == "__main__":
    unittest.main()
