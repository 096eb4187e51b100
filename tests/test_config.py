import os
import tempfile
import unittest
from unittest.mock import patch

from interior_ai import config, openai_client
from interior_ai.errors import ConfigurationError

import setup_env


class TestConfig(unittest.TestCase):

    def test_sample_images(self):
        self.assertEqual(len(config.SAMPLE_IMAGES), 3)
        self.assertEqual([s["label"] for s in config.SAMPLE_IMAGES],
                         ["Bohemian Living", "Modern Industrial", "Scandi Kitchen"])
        for sample in config.SAMPLE_IMAGES:
            self.assertTrue(sample["url"].startswith("https://"))

    def test_env_flag(self):
        with patch.dict(os.environ, {"SOME_FLAG": "Yes"}):
            self.assertTrue(config._env_flag("SOME_FLAG", "off"))
        with patch.dict(os.environ, {"SOME_FLAG": "off"}):
            self.assertFalse(config._env_flag("SOME_FLAG", "on"))
        self.assertTrue(config._env_flag("UNSET_FLAG_FOR_TEST", "on"))

    def test_env_float(self):
        with patch.dict(os.environ, {"SOME_TEMPERATURE": "0.7"}):
            self.assertEqual(config._env_float("SOME_TEMPERATURE"), 0.7)
        with patch.dict(os.environ, {"SOME_TEMPERATURE": ""}):
            self.assertIsNone(config._env_float("SOME_TEMPERATURE"))
        self.assertIsNone(config._env_float("UNSET_TEMPERATURE_FOR_TEST"))

    def test_check_api_keys(self):
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"}):
            self.assertTrue(config.check_api_keys())
        with patch.dict(os.environ, {"OPENAI_API_KEY": ""}):
            with self.assertLogs('interior_ai.config', level='WARNING'):
                self.assertFalse(config.check_api_keys())


class TestOpenAIClient(unittest.TestCase):

    def setUp(self):
        openai_client.reset_client()
        self.addCleanup(openai_client.reset_client)

    def test_missing_key_raises(self):
        with patch.dict(os.environ, {"OPENAI_API_KEY": ""}):
            with self.assertRaises(ConfigurationError):
                openai_client.get_client()

    @patch('interior_ai.openai_client.OpenAI')
    def test_client_is_cached(self, mock_openai):
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"}):
            first = openai_client.get_client()
            second = openai_client.get_client()
        self.assertIs(first, second)
        mock_openai.assert_called_once()
        self.assertEqual(mock_openai.call_args.kwargs["api_key"], "sk-test")


class TestSetupEnv(unittest.TestCase):

    def test_creates_template_once(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, ".env")
            self.assertTrue(setup_env.create_env_file(path))
            with open(path) as f:
                self.assertIn("OPENAI_API_KEY=", f.read())
            self.assertFalse(setup_env.create_env_file(path))


if __name__ == '__main__':
    unittest.main()
