import unittest
from foldertree.config import load_settings
from foldertree.errors import ValidationError


class TestConfig(unittest.TestCase):
    def test_defaults(self):
        settings = load_settings(env={})

        self.assertIsNone(settings.allowed_output_base)
        self.assertEqual(settings.default_output_dir, "./generated")
        self.assertEqual(settings.large_file_mb, 50)
        self.assertEqual(settings.duplicate_strategy, "size")
        self.assertEqual(settings.ai_provider, "ollama")
        self.assertEqual(settings.rate_limit_window_ms, 900000)
        self.assertEqual(settings.rate_limit_max_requests, 100)
        self.assertFalse(settings.follow_symlinks)

    def test_values_from_env(self):
        settings = load_settings(env={
            "ALLOWED_OUTPUT_BASE": "/srv/trees",
            "LARGE_FILE_MB": "200",
            "DUPLICATE_STRATEGY": "hash",
            "MAX_SCAN_DEPTH": "4",
            "FOLLOW_SYMLINKS": "true",
            "AI_PROVIDER": "OpenAI",
            "OPENAI_API_KEY": "sk-test",
            "LOG_LEVEL": "debug",
        })

        self.assertEqual(settings.allowed_output_base, "/srv/trees")
        self.assertEqual(settings.large_file_mb, 200)
        self.assertEqual(settings.duplicate_strategy, "hash")
        self.assertEqual(settings.max_scan_depth, 4)
        self.assertTrue(settings.follow_symlinks)
        self.assertEqual(settings.ai_provider, "openai")
        self.assertEqual(settings.openai_api_key, "sk-test")
        self.assertEqual(settings.log_level, "DEBUG")

    def test_invalid_number(self):
        with self.assertRaises(ValidationError):
            load_settings(env={"LARGE_FILE_MB": "lots"})

    def test_invalid_choices(self):
        with self.assertRaises(ValidationError) as ctx:
            load_settings(env={"DUPLICATE_STRATEGY": "fuzzy", "AI_PROVIDER": "skynet"})
        self.assertIn("DUPLICATE_STRATEGY", ctx.exception.message)
        self.assertIn("AI_PROVIDER", ctx.exception.message)


if __name__ == "__main__":
    unittest.main()
