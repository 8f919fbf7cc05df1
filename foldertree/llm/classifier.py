"""
File and folder name classification.

The local classifier is keyword based and always available. The AI
classifiers ask a provider for the category only; language, semantic type and
framework hints always come from the local heuristics. Any provider failure
falls back to the local result, so classify_item() never raises for a
well-formed name.
"""

import logging
import os
from dataclasses import dataclass

from ..config import Settings, load_settings
from ..errors import ValidationError
from .client import call_gemini, call_ollama, call_openai, parse_llm_json
from .prompts import CATEGORIES, build_classify_prompt

logger = logging.getLogger(__name__)

KEYWORDS = {
    "Code": ["script", "manager", "controller", ".cs", ".js", ".ts", ".tsx", ".py", ".java", ".cpp", ".go", ".rs"],
    "Graphics": ["button", "logo", "icon", "sprite", "canvas", ".png", ".jpg", ".jpeg", ".webp", ".svg", ".psd", ".ai"],
    "Audio": ["sound", "music", ".mp3", ".wav", ".flac", ".ogg", ".m4a"],
    "Video": [".mp4", ".mov", ".mkv", ".avi", ".webm"],
    "Documents": ["faktura", "podatek", "rachunek", "umowa", ".pdf", ".doc", ".docx", ".txt", ".md", ".xlsx", ".csv"],
    "Game": ["boss", "arena", "enemy", "player", "level", "quest", "weapon", "shader", "unity", "unreal"],
    "Archives": [".zip", ".rar", ".7z", ".tar", ".gz"],
}

LANGUAGE_EXTENSIONS = {
    ".js": "JavaScript",
    ".jsx": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TypeScript",
    ".py": "Python",
    ".java": "Java",
    ".cpp": "C++",
    ".c": "C",
    ".cs": "C#",
    ".go": "Go",
    ".rs": "Rust",
    ".php": "PHP",
    ".rb": "Ruby",
    ".swift": "Swift",
    ".kt": "Kotlin",
    ".scala": "Scala",
}

# Checked in order; the first keyword group that matches wins
SEMANTIC_TYPES = {
    "code": ["src", "lib", "server", "client", "api", "routes", "controllers", "models", "views",
             "components", "utils", "helpers", "services"],
    "tests": ["test", "tests", "__tests__", "spec", "specs", "e2e", "integration", "unit"],
    "config": ["config", "conf", "settings", ".vscode", ".idea", ".git"],
    "docs": ["docs", "documentation", "readme", "changelog", "license"],
    "build": ["dist", "build", "out", "target", "release", "bin", "obj"],
    "assets": ["assets", "static", "public", "resources", "images", "fonts", "styles", "css"],
    "data": ["data", "db", "database", "migrations", "seeds", "fixtures"],
    "logs": ["logs", "log", ".log"],
    "cache": ["cache", ".cache", "tmp", "temp", "node_modules", ".venv", "__pycache__"],
}

FRAMEWORK_HINTS = [
    ("react", "React"),
    (".tsx", "React"),
    ("vue", "Vue"),
    ("angular", "Angular"),
    ("next", "Next.js"),
    ("express", "Express"),
    ("django", "Django"),
    ("flask", "Flask"),
    ("spring", "Spring"),
]


@dataclass
class ClassifyResult:
    category: str
    confidence: float
    source: str
    language: str | None = None
    semantic_type: str | None = None
    framework: str | None = None

    def to_dict(self) -> dict:
        data = {
            "category": self.category,
            "confidence": self.confidence,
            "source": self.source,
        }
        if self.language:
            data["language"] = self.language
        if self.semantic_type:
            data["semanticType"] = self.semantic_type
        if self.framework:
            data["framework"] = self.framework
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ClassifyResult":
        return cls(
            category=data.get("category", "Uncategorized"),
            confidence=float(data.get("confidence", 0)),
            source=data.get("source", "local"),
            language=data.get("language"),
            semantic_type=data.get("semanticType"),
            framework=data.get("framework"),
        )


def detect_language(name: str) -> str | None:
    return LANGUAGE_EXTENSIONS.get(os.path.splitext(name)[1].lower())


def detect_semantic_type(name: str) -> str | None:
    lowered = name.lower()
    for semantic_type, keywords in SEMANTIC_TYPES.items():
        if any(keyword in lowered for keyword in keywords):
            return semantic_type
    return None


def detect_framework(name: str) -> str | None:
    lowered = name.lower()
    for hint, framework in FRAMEWORK_HINTS:
        if hint in lowered:
            return framework
    return None


def classify_local(name: str) -> ClassifyResult:
    """Keyword-based classification. Never fails."""
    name = str(name or "")
    lowered = name.lower()
    hints = {
        "language": detect_language(name),
        "semantic_type": detect_semantic_type(name),
        "framework": detect_framework(name),
    }

    for category, terms in KEYWORDS.items():
        if any(term in lowered for term in terms):
            return ClassifyResult(category=category, confidence=0.7, source="local", **hints)

    return ClassifyResult(category="Uncategorized", confidence=0.1, source="local", **hints)


def _classify_remote(name: str, provider: str, settings: Settings) -> ClassifyResult:
    prompt = build_classify_prompt(name)

    if provider == "openai":
        text = call_openai(prompt, None, settings, task="classify")
    elif provider == "gemini":
        text = call_gemini(prompt, None, settings, task="classify")
    else:
        text = call_ollama(prompt, None, settings, task="classify")

    data = parse_llm_json(text)
    category = str(data.get("category") or "Uncategorized")
    if category not in CATEGORIES:
        logger.debug("Provider returned unknown category %r for %s", category, name)
        return classify_local(name)

    try:
        confidence = float(data.get("confidence") or 0)
    except (TypeError, ValueError):
        confidence = 0.0

    return ClassifyResult(
        category=category,
        confidence=min(1.0, max(0.0, confidence)),
        source=provider,
        language=detect_language(name),
        semantic_type=detect_semantic_type(name),
        framework=detect_framework(name),
    )


def classify_item(name: str, provider: str | None = None, settings: Settings | None = None) -> ClassifyResult:
    """
    Classify a file or folder name with the configured provider.

    Args:
        name: Entry name (not a path), e.g. "UserController.ts".
        provider: "local", "openai", "ollama" or "gemini". Defaults to
            AI_PROVIDER.
        settings: Settings to use. Loaded from the environment if omitted.

    Returns:
        ClassifyResult. Falls back to the local classifier on any provider
        failure.

    Raises:
        ValidationError: If name is not a non-empty string.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Title must be a non-empty string")

    settings = settings or load_settings()
    provider = (provider or settings.ai_provider or "local").lower()

    if provider not in ("openai", "ollama", "gemini"):
        return classify_local(name)

    try:
        return _classify_remote(name, provider, settings)
    except Exception as e:
        logger.debug("Classifier %s failed for %s, using local: %s", provider, name, e)
        return classify_local(name)
