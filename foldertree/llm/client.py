"""
Text generation client for the FolderTree tool.

Talks to one of three providers and returns raw text:
- ollama: local server over HTTP
- openai: OpenAI chat completions
- gemini: Google Gemini
"""

import json
import logging
import re
from typing import Any

import google.generativeai as genai
import requests
from openai import OpenAI

from ..config import Settings, load_settings
from ..errors import ProviderError, ValidationError
from .models import DEFAULT_MODELS, PROVIDERS, get_model_config, resolve_gemini_model
from .prompts import TREE_SYSTEM_PROMPT, build_tree_prompt

logger = logging.getLogger(__name__)

MIN_PROMPT_LENGTH = 10
MAX_PROMPT_LENGTH = 5000


def call_ollama(prompt: str, model: str | None, settings: Settings, task: str = "generate") -> str:
    """
    Call a local Ollama server.

    Raises:
        ProviderError: On connection errors, HTTP errors or bad payloads.
    """
    config = get_model_config(task)
    payload = {
        "model": model or settings.ollama_model or DEFAULT_MODELS["ollama"],
        "prompt": prompt,
        "stream": False,
    }
    try:
        response = requests.post(settings.ollama_url, json=payload, timeout=config["timeout"])
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise ProviderError(f"Ollama generation failed: {e}") from e

    if not isinstance(data, dict):
        raise ProviderError(f"Ollama returned an unexpected payload: {type(data).__name__}")
    return str(data.get("response") or data.get("output") or "").strip()


def call_openai(
    prompt: str,
    model: str | None,
    settings: Settings,
    system: str | None = None,
    task: str = "generate",
) -> str:
    """
    Call OpenAI chat completions.

    Raises:
        ProviderError: If the API key is missing or the request fails.
    """
    if not settings.openai_api_key:
        raise ProviderError("OpenAI API key not configured (set OPENAI_API_KEY)")

    config = get_model_config(task)
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    try:
        client = OpenAI(api_key=settings.openai_api_key, timeout=config["timeout"])
        completion = client.chat.completions.create(
            model=model or settings.openai_model or DEFAULT_MODELS["openai"],
            messages=messages,
            temperature=config["temperature"],
        )
    except Exception as e:
        raise ProviderError(f"OpenAI generation failed: {e}") from e

    if not completion.choices:
        return ""
    return (completion.choices[0].message.content or "").strip()


def call_gemini(prompt: str, model: str | None, settings: Settings, task: str = "generate") -> str:
    """
    Call Google Gemini.

    Raises:
        ProviderError: If GEMINI_API_KEY is missing or the request fails.
    """
    if not settings.gemini_api_key:
        raise ProviderError("GEMINI_API_KEY environment variable not set")

    config = get_model_config(task)
    genai.configure(api_key=settings.gemini_api_key)

    model_id = resolve_gemini_model(model or settings.gemini_model)
    generation_config = genai.types.GenerationConfig(
        max_output_tokens=config["max_output_tokens"],
        temperature=config["temperature"],
    )

    try:
        response = genai.GenerativeModel(model_id).generate_content(
            prompt, generation_config=generation_config
        )
        return (response.text or "").strip()
    except Exception as e:
        raise ProviderError(f"Gemini generation failed: {e}") from e


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ``` block, which models add despite instructions."""
    text = text.strip()
    match = re.search(r"```[\w-]*\n([\s\S]*?)```", text)
    if match:
        return match.group(1).rstrip()
    return text


def generate_structure(
    prompt: str,
    provider: str | None = None,
    model: str | None = None,
    settings: Settings | None = None,
) -> str:
    """
    Ask a provider for an indented folder/file tree.

    Args:
        prompt: Description of the desired layout.
        provider: "ollama", "openai" or "gemini". Defaults to AI_PROVIDER.
        model: Provider-specific model name. Defaults per provider.
        settings: Settings to use. Loaded from the environment if omitted.

    Returns:
        Tree text, ready for the tree parser. Not validated further.

    Raises:
        ValidationError: If the prompt is invalid or the provider unknown.
        ProviderError: If the provider call fails.
    """
    if not isinstance(prompt, str) or len(prompt.strip()) < MIN_PROMPT_LENGTH:
        raise ValidationError(f"prompt must be at least {MIN_PROMPT_LENGTH} characters")
    if len(prompt) > MAX_PROMPT_LENGTH:
        raise ValidationError(f"prompt must not exceed {MAX_PROMPT_LENGTH} characters")

    settings = settings or load_settings()
    name = (provider or settings.ai_provider or "ollama").lower()
    prompt = prompt.strip()

    if name not in PROVIDERS:
        raise ValidationError(f"Unknown AI provider: {name}")

    logger.info("Generating tree with %s", name)

    if name == "openai":
        text = call_openai(build_tree_prompt(prompt), model, settings, system=TREE_SYSTEM_PROMPT)
    elif name == "gemini":
        text = call_gemini(build_tree_prompt(prompt, include_system=True), model, settings)
    else:
        text = call_ollama(build_tree_prompt(prompt, include_system=True), model, settings)

    return strip_code_fences(text)


def parse_llm_json(response_text: str) -> dict[str, Any]:
    """
    Parse a JSON object from an LLM response, handling markdown formatting.

    Args:
        response_text: Raw response text from LLM.

    Returns:
        The parsed JSON object.

    Raises:
        json.JSONDecodeError: If no JSON object can be parsed.
    """
    text = response_text.strip()

    # Try to extract JSON from markdown code blocks
    if "```" in text:
        json_match = re.search(r"```(?:json)?\s*([\s\S]*?)```", text)
        if json_match:
            text = json_match.group(1).strip()

    # Drop any chatter around the object
    first_brace = text.find("{")
    last_brace = text.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        text = text[first_brace:last_brace + 1]

    data = json.loads(text)
    if not isinstance(data, dict):
        raise json.JSONDecodeError("Expected a JSON object", text, 0)
    return data
