import json
from pathlib import Path
import sys
import tempfile
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from infill.config.settings import (
    SettingsError,
    TimeoutSettings,
    load_settings,
    resolve_env_secret,
    settings_summary,
)


class SettingsLoaderTests(unittest.TestCase):
    def test_defaults_without_configuration(self):
        settings = load_settings(environ={})

        self.assertIsNone(settings.provider.model)
        self.assertEqual(settings.provider.api_key_env, "FIREWORKS_API_KEY")
        self.assertIsNone(settings.provider.base_url)
        self.assertIsNone(settings.timeouts.multiline)
        self.assertIsNone(settings.timeouts.singleline)
        self.assertEqual(settings.runtime.log_level, "INFO")

    def test_environment_overrides_config_file(self):
        config = {
            "provider": {"model": "starcoder-7b", "base_url": "https://proxy.internal/v1"},
            "timeouts": {"multiline_ms": 8000, "singleline_ms": 2000},
            "runtime": {"log_level": "debug"},
        }

        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.json"
            config_path.write_text(json.dumps(config), encoding="utf-8")

            settings = load_settings(
                config_path=config_path,
                environ={
                    "INFILL_PROVIDER_MODEL": "llama-code-13b",
                    "INFILL_TIMEOUTS_SINGLELINE_MS": "0",
                },
            )

        self.assertEqual(settings.provider.model, "llama-code-13b")
        self.assertEqual(settings.provider.base_url, "https://proxy.internal/v1")
        self.assertEqual(settings.timeouts.multiline, 8000)
        self.assertEqual(settings.timeouts.singleline, 0)
        self.assertEqual(settings.runtime.log_level, "DEBUG")

    def test_blank_model_means_default(self):
        settings = load_settings(config_path=None, environ={"INFILL_PROVIDER_MODEL": "   "})

        self.assertIsNone(settings.provider.model)

    def test_invalid_timeout_value_raises(self):
        with self.assertRaises(SettingsError):
            load_settings(environ={"INFILL_TIMEOUTS_MULTILINE_MS": "soon"})

    def test_negative_timeout_raises(self):
        with self.assertRaises(SettingsError):
            load_settings(environ={"INFILL_TIMEOUTS_MULTILINE_MS": "-1"})

        with self.assertRaises(SettingsError):
            TimeoutSettings(singleline=-5)

    def test_boolean_timeout_is_rejected(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.json"
            config_path.write_text(json.dumps({"timeouts": {"multiline_ms": True}}), encoding="utf-8")

            with self.assertRaises(SettingsError):
                load_settings(config_path=config_path, environ={})

    def test_invalid_log_level_raises(self):
        with self.assertRaises(SettingsError):
            load_settings(environ={"INFILL_RUNTIME_LOG_LEVEL": "LOUD"})

    def test_missing_config_file_raises(self):
        with self.assertRaises(SettingsError):
            load_settings(config_path=Path("/nonexistent/infill.json"), environ={})

    def test_config_section_must_be_object(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.json"
            config_path.write_text(json.dumps({"provider": "starcoder"}), encoding="utf-8")

            with self.assertRaises(SettingsError):
                load_settings(config_path=config_path, environ={})

    def test_resolve_env_secret(self):
        self.assertEqual(resolve_env_secret("FW", {"FW": "abc"}), "abc")

        with self.assertRaises(SettingsError):
            resolve_env_secret("FW", {})

        with self.assertRaises(SettingsError):
            resolve_env_secret("FW", {"FW": "  "})

    def test_summary_never_contains_secret(self):
        settings = load_settings(environ={"INFILL_TIMEOUTS_MULTILINE_MS": "7000"})

        summary = settings_summary(settings)

        self.assertEqual(summary["provider"]["api_key_env"], "FIREWORKS_API_KEY")
        self.assertEqual(summary["timeouts"]["multiline_ms"], 7000)
        self.assertNotIn("api_key", summary["provider"])


if __name__ == "__main__":
    unittest.main()
