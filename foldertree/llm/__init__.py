"""
AI integration module for the FolderTree tool.

Provides:
- Tree generation through Ollama, OpenAI or Gemini
- File/folder name classification with a local fallback
- Model configurations and prompt builders
"""

from .client import generate_structure, parse_llm_json, strip_code_fences
from .classifier import ClassifyResult, classify_item, classify_local
from .models import GEMINI_MODELS, DEFAULT_MODELS, PROVIDERS
from .prompts import build_tree_prompt, build_classify_prompt

__all__ = [
    "generate_structure",
    "parse_llm_json",
    "strip_code_fences",
    "ClassifyResult",
    "classify_item",
    "classify_local",
    "GEMINI_MODELS",
    "DEFAULT_MODELS",
    "PROVIDERS",
    "build_tree_prompt",
    "build_classify_prompt",
]
