import json
import unittest
from unittest.mock import MagicMock, patch
import requests
from foldertree.config import Settings
from foldertree.errors import ProviderError, ValidationError
from foldertree.llm.classifier import ClassifyResult, classify_item, classify_local
from foldertree.llm.client import (
    call_gemini,
    call_ollama,
    call_openai,
    generate_structure,
    parse_llm_json,
    strip_code_fences,
)

PROMPT = "A small Flask API with tests"


class TestLocalClassifier(unittest.TestCase):
    def test_keyword_categories(self):
        self.assertEqual(classify_local("UserController.ts").category, "Code")
        self.assertEqual(classify_local("logo.png").category, "Graphics")
        self.assertEqual(classify_local("faktura_2024.pdf").category, "Documents")
        self.assertEqual(classify_local("backup.zip").category, "Archives")

    def test_hints(self):
        result = classify_local("UserController.ts")
        self.assertEqual(result.language, "TypeScript")
        self.assertEqual(result.confidence, 0.7)
        self.assertEqual(result.source, "local")

        self.assertEqual(classify_local("tests").semantic_type, "tests")
        self.assertEqual(classify_local("App.tsx").framework, "React")

    def test_uncategorized(self):
        result = classify_local("zzz")
        self.assertEqual(result.category, "Uncategorized")
        self.assertEqual(result.confidence, 0.1)
        self.assertIsNone(result.semantic_type)

    def test_to_dict_uses_camel_case(self):
        data = classify_local("tests").to_dict()
        self.assertEqual(data["semanticType"], "tests")
        self.assertNotIn("language", data)
        self.assertEqual(ClassifyResult.from_dict(data).semantic_type, "tests")


class TestClassifyItem(unittest.TestCase):
    def test_empty_name_rejected(self):
        with self.assertRaises(ValidationError):
            classify_item("   ", provider="local", settings=Settings())

    def test_local_provider(self):
        result = classify_item("song.mp3", provider="local", settings=Settings())
        self.assertEqual(result.category, "Audio")

    @patch("foldertree.llm.classifier.call_ollama")
    def test_remote_result(self, mock_ollama):
        mock_ollama.return_value = '```json\n{"category": "Game", "confidence": 0.93}\n```'

        result = classify_item("boss_arena.py", settings=Settings(ai_provider="ollama"))

        self.assertEqual(result.category, "Game")
        self.assertEqual(result.confidence, 0.93)
        self.assertEqual(result.source, "ollama")
        self.assertEqual(result.language, "Python")

    @patch("foldertree.llm.classifier.call_openai")
    def test_provider_failure_falls_back(self, mock_openai):
        mock_openai.side_effect = ProviderError("OpenAI API key not configured")

        result = classify_item("logo.png", provider="openai", settings=Settings())

        self.assertEqual(result.category, "Graphics")
        self.assertEqual(result.source, "local")

    @patch("foldertree.llm.classifier.call_gemini")
    def test_unparseable_reply_falls_back(self, mock_gemini):
        mock_gemini.return_value = "I think this is code"
        result = classify_item("main.go", provider="gemini", settings=Settings())
        self.assertEqual(result.source, "local")

    @patch("foldertree.llm.client.requests.post")
    def test_non_object_reply_falls_back(self, mock_post):
        mock_post.return_value.json.return_value = ["not", "a", "dict"]
        result = classify_item("app.py", provider="ollama", settings=Settings())
        self.assertEqual(result.category, "Code")
        self.assertEqual(result.source, "local")

    @patch("foldertree.llm.classifier.call_ollama")
    def test_unexpected_error_falls_back(self, mock_ollama):
        mock_ollama.side_effect = AttributeError("'list' object has no attribute 'get'")
        result = classify_item("logo.png", settings=Settings())
        self.assertEqual(result.source, "local")

    @patch("foldertree.llm.classifier.call_ollama")
    def test_unknown_category_falls_back(self, mock_ollama):
        mock_ollama.return_value = '{"category": "Spreadsheets", "confidence": 1}'
        result = classify_item("budget.xlsx", settings=Settings())
        self.assertEqual(result.category, "Documents")
        self.assertEqual(result.source, "local")


class TestClient(unittest.TestCase):
    def test_strip_code_fences(self):
        self.assertEqual(strip_code_fences("```text\napp\n  main.py\n```"), "app\n  main.py")
        self.assertEqual(strip_code_fences("  app\n"), "app")

    def test_parse_llm_json(self):
        self.assertEqual(parse_llm_json('Sure! {"a": 1} Hope this helps'), {"a": 1})
        with self.assertRaises(json.JSONDecodeError):
            parse_llm_json("no json here")

    def test_prompt_validation(self):
        with self.assertRaises(ValidationError):
            generate_structure("short", settings=Settings())
        with self.assertRaises(ValidationError):
            generate_structure("x" * 5001, settings=Settings())
        with self.assertRaises(ValidationError):
            generate_structure(PROMPT, provider="claude", settings=Settings())

    @patch("foldertree.llm.client.requests.post")
    def test_ollama(self, mock_post):
        response = MagicMock()
        response.json.return_value = {"response": "```\napi\n  app.py\n```"}
        mock_post.return_value = response

        text = generate_structure(PROMPT, provider="ollama", settings=Settings())

        self.assertEqual(text, "api\n  app.py")
        payload = mock_post.call_args.kwargs["json"]
        self.assertEqual(payload["model"], "mistral")
        self.assertFalse(payload["stream"])
        self.assertIn(PROMPT, payload["prompt"])

    @patch("foldertree.llm.client.requests.post")
    def test_ollama_non_object_payload(self, mock_post):
        mock_post.return_value.json.return_value = ["not", "a", "dict"]
        with self.assertRaises(ProviderError):
            call_ollama(PROMPT, None, Settings())

    @patch("foldertree.llm.client.requests.post")
    def test_ollama_connection_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("refused")
        with self.assertRaises(ProviderError):
            call_ollama(PROMPT, None, Settings())

    def test_openai_requires_key(self):
        with self.assertRaises(ProviderError):
            call_openai(PROMPT, None, Settings(openai_api_key=None))

    @patch("foldertree.llm.client.OpenAI")
    def test_openai(self, mock_openai):
        completion = MagicMock()
        completion.choices = [MagicMock()]
        completion.choices[0].message.content = "api\n  app.py\n"
        mock_openai.return_value.chat.completions.create.return_value = completion

        text = generate_structure(PROMPT, provider="openai", settings=Settings(openai_api_key="sk-test"))

        self.assertEqual(text, "api\n  app.py")
        kwargs = mock_openai.return_value.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-4o-mini")
        self.assertEqual(kwargs["messages"][0]["role"], "system")

    def test_gemini_requires_key(self):
        with self.assertRaises(ProviderError):
            call_gemini(PROMPT, None, Settings(gemini_api_key=None))

    @patch("foldertree.llm.client.genai")
    def test_gemini(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.return_value = MagicMock(text="api\n")

        text = generate_structure(PROMPT, provider="gemini", model="pro", settings=Settings(gemini_api_key="k"))

        self.assertEqual(text, "api")
        mock_genai.configure.assert_called_once_with(api_key="k")
        mock_genai.GenerativeModel.assert_called_once_with("gemini-2.5-pro")

    @patch("foldertree.llm.client.genai")
    def test_gemini_failure(self, mock_genai):
        mock_genai.GenerativeModel.return_value.generate_content.side_effect = RuntimeError("quota")
        with self.assertRaises(ProviderError):
            call_gemini(PROMPT, None, Settings(gemini_api_key="k"))


if __name__ == "__main__":
    unittest.main()
