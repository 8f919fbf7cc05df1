import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch
from foldertree.config import Settings
from foldertree.errors import ProviderError
from foldertree.llm.classifier import classify_local
from foldertree.ratelimit import RateLimiter
from foldertree.service import FolderTreeService

LAYOUT = "shop\n  app.py\n  templates\n    index.html\n"


class ServiceTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.base = Path(self._tmp.name)
        self.settings = Settings(allowed_output_base=str(self.base))
        self.service = FolderTreeService(
            self.settings,
            generator=lambda prompt, provider, model: LAYOUT,
            classifier=lambda name, provider: classify_local(name),
        )

    def tearDown(self):
        self._tmp.cleanup()

    def assertFailure(self, result: dict, code: str):
        self.assertFalse(result["success"], result)
        self.assertEqual(result["code"], code)
        self.assertTrue(result["error"])


class TestTreeService(ServiceTestCase):
    def test_preview(self):
        result = self.service.preview(LAYOUT, "site")

        self.assertTrue(result["success"])
        data = result["data"]
        self.assertEqual(data["outputDir"], str(self.base / "site"))
        self.assertEqual(data["count"], 4)
        self.assertEqual(data["ops"][0], {"op": "mkdir", "path": str(self.base / "site" / "shop")})

    def test_default_output_dir(self):
        data = self.service.preview(LAYOUT)["data"]
        self.assertEqual(data["outputDir"], str(self.base / "generated"))

    def test_path_errors(self):
        self.assertFailure(self.service.preview(LAYOUT, "../outside"), "PATH_TRAVERSAL")
        self.assertFailure(self.service.preview(LAYOUT, "/etc"), "PATH_OUT_OF_BOUNDS")

    def test_entry_names_cannot_escape(self):
        result = self.service.apply("../../escaped\n", "site")
        self.assertFailure(result, "PATH_OUT_OF_BOUNDS")
        self.assertFalse((self.base.parent / "escaped").exists())

    def test_empty_text(self):
        self.assertFailure(self.service.plan_text("", "site"), "VALIDATION_ERROR")
        self.assertFailure(self.service.apply(None, "site"), "VALIDATION_ERROR")

    def test_dry_run_then_apply(self):
        dry = self.service.apply(LAYOUT, "site", dry_run=True)
        self.assertTrue(dry["data"]["dryRun"])
        self.assertEqual(dry["data"]["plan"]["stats"]["total"], 4)
        self.assertFalse((self.base / "site").exists())

        applied = self.service.apply(LAYOUT, "site")["data"]
        self.assertEqual(applied["created"], 4)
        self.assertTrue((self.base / "site" / "shop" / "templates" / "index.html").is_file())

        # Re-planning now reports the existing files as overwrites
        plan = self.service.plan_text(LAYOUT, "site")["data"]["plan"]
        self.assertEqual(plan["stats"]["overwriteCount"], 2)
        self.assertEqual(plan["rollback"]["deletePaths"], [])

    def test_plan_prompt(self):
        data = self.service.plan_prompt("An online shop in Flask", output_dir="site")["data"]
        self.assertEqual(data["plan"]["stats"]["files"], 2)
        self.assertIn("templates", data["text"])

    def test_generate(self):
        self.assertFailure(self.service.generate("tiny"), "VALIDATION_ERROR")

        def broken(prompt, provider, model):
            raise ProviderError("Ollama generation failed: connection refused")

        service = FolderTreeService(self.settings, generator=broken)
        self.assertFailure(service.generate("An online shop in Flask"), "PROVIDER_ERROR")

    def test_create_from_tree(self):
        tree = {
            "rootId": "r",
            "items": {
                "r": {"data": {"title": "notes"}, "children": ["a"]},
                "a": {"data": {"title": "todo.md", "content": "- milk\n"}},
            },
        }
        data = self.service.create_from_tree(tree)["data"]

        self.assertEqual(data["output"], str(self.base / "generated"))
        self.assertEqual(data["created"], 2)
        self.assertEqual((self.base / "generated" / "notes" / "todo.md").read_text(), "- milk\n")

        self.assertFailure(self.service.create_from_tree({"items": {}}), "VALIDATION_ERROR")


class TestCleanupService(ServiceTestCase):
    def setUp(self):
        super().setUp()
        self.project = self.base / "project"
        (self.project / "empty").mkdir(parents=True)
        (self.project / "a.txt").write_text("12345")
        (self.project / "b.txt").write_text("67890")

    def test_scan_and_apply(self):
        scanned = self.service.cleanup_scan("project", duplicateStrategy="hash")
        self.assertTrue(scanned["success"], scanned)
        plan = scanned["data"]["plan"]
        self.assertEqual(plan["root"], str(self.project))
        self.assertEqual(plan["summary"]["emptyDirs"], 1)
        self.assertEqual(plan["summary"]["duplicates"], 0)

        applied = self.service.cleanup_apply(plan)
        self.assertEqual(applied["data"], {"deleted": 1, "freedBytes": 0})
        self.assertFalse((self.project / "empty").exists())

    def test_settings_strategy_used_by_default(self):
        plan = self.service.cleanup_scan("project")["data"]["plan"]
        self.assertEqual(plan["summary"]["duplicates"], 1)

    def test_bad_root_and_options(self):
        self.assertFailure(self.service.cleanup_scan("missing"), "PATH_NOT_FOUND")
        self.assertFailure(self.service.cleanup_scan("project/a.txt"), "INVALID_PATH_TYPE")
        self.assertFailure(self.service.cleanup_scan("project", duplicateStrategy="fuzzy"), "VALIDATION_ERROR")

    def test_apply_revalidates_root(self):
        plan = self.service.cleanup_scan("project")["data"]["plan"]

        outside = dict(plan, root=os.path.dirname(str(self.base)))
        self.assertFailure(self.service.cleanup_apply(outside), "PATH_OUT_OF_BOUNDS")

        relative = dict(plan, root="project")
        self.assertFailure(self.service.cleanup_apply(relative), "VALIDATION_ERROR")

        self.assertFailure(self.service.cleanup_apply(None), "VALIDATION_ERROR")
        self.assertTrue((self.project / "empty").exists())

    def test_apply_selection(self):
        plan = self.service.cleanup_scan("project")["data"]["plan"]
        result = self.service.cleanup_apply(plan, paths=[str(self.project / "b.txt")])
        self.assertEqual(result["data"], {"deleted": 1, "freedBytes": 5})
        self.assertTrue((self.project / "empty").exists())


class TestOrganizeService(ServiceTestCase):
    def setUp(self):
        super().setUp()
        self.project = self.base / "project"
        (self.project / "api").mkdir(parents=True)
        (self.project / "api" / "server.py").write_text("x")
        (self.project / "readme.md").write_text("x")

    def test_analyze(self):
        data = self.service.organize_analyze("project")["data"]
        self.assertEqual(data["analysis"]["stats"]["totalFiles"], 2)
        self.assertEqual(data["analysis"]["stats"]["semanticTypes"], {"code": 2, "docs": 1})

    def test_analyze_excludes_names(self):
        data = self.service.organize_analyze("project", exclude_names=["api"])["data"]
        names = [item["name"] for item in data["analysis"]["items"]]
        self.assertEqual(names, ["readme.md"])

    def test_plan_and_apply(self):
        data = self.service.organize_plan("project")["data"]
        self.assertEqual(data["plan"]["creates"], [str(self.project / "code"), str(self.project / "docs")])

        result = self.service.organize_apply(data["plan"])["data"]
        self.assertEqual(result["created"], 2)
        self.assertTrue((self.project / "code" / "api" / "server.py").is_file())
        self.assertTrue((self.project / "docs" / "readme.md").is_file())

    def test_apply_confined(self):
        plan = {"moves": [{"from": str(self.project / "readme.md"), "to": "/tmp/readme.md"}], "creates": []}
        self.assertFailure(self.service.organize_apply(plan), "PATH_OUT_OF_BOUNDS")
        self.assertFailure(self.service.organize_apply("not a plan"), "VALIDATION_ERROR")

    def test_bad_group_by(self):
        self.assertFailure(self.service.organize_plan("project", group_by="colour"), "VALIDATION_ERROR")


class TestClassifyService(ServiceTestCase):
    def test_classify(self):
        data = self.service.classify("UserController.ts")["data"]
        self.assertEqual(data["category"], "Code")
        self.assertEqual(data["language"], "TypeScript")

    def test_empty_title(self):
        self.assertFailure(self.service.classify(""), "VALIDATION_ERROR")
        self.assertFailure(self.service.classify("   "), "VALIDATION_ERROR")

    @patch("foldertree.llm.client.requests.post")
    def test_non_object_provider_reply_uses_local(self, mock_post):
        mock_post.return_value.json.return_value = ["not", "a", "dict"]
        service = FolderTreeService(self.settings)

        result = service.classify("app.py", provider="ollama")

        self.assertTrue(result["success"], result)
        self.assertEqual(result["data"]["source"], "local")

    def test_unexpected_error_is_structured(self):
        def broken(name, provider):
            raise AttributeError("'list' object has no attribute 'get'")

        result = FolderTreeService(self.settings, classifier=broken).classify("app.py")

        self.assertFailure(result, "FILE_OP_ERROR")
        self.assertIn("Classify failed", result["error"])


class TestRateLimitedService(ServiceTestCase):
    def test_caller_limited(self):
        service = FolderTreeService(
            self.settings,
            rate_limiter=RateLimiter(max_requests=1, window_seconds=60),
            classifier=lambda name, provider: classify_local(name),
        )

        self.assertTrue(service.classify("a.py", caller="10.0.0.1")["success"])
        self.assertFailure(service.classify("a.py", caller="10.0.0.1"), "RATE_LIMIT_EXCEEDED")
        self.assertTrue(service.classify("a.py", caller="10.0.0.2")["success"])
        # Calls without an identity are not counted
        self.assertTrue(service.classify("a.py")["success"])


if __name__ == "__main__":
    unittest.main()
