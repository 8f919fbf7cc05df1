"""
LLM provider and model configurations.
"""

# Supported Gemini models with their full identifiers
GEMINI_MODELS = {
    "flash": "gemini-2.0-flash",           # Best for free tier (15 RPM)
    "flash-lite": "gemini-2.0-flash-lite", # Even faster/cheaper
    "pro": "gemini-2.5-pro",               # Best quality, limited free tier
}

# Default model per provider when neither the caller nor settings pick one
DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "ollama": "mistral",
    "gemini": "flash",
}

PROVIDERS = ("ollama", "openai", "gemini")

# Generation settings. Trees should be stable but not fully deterministic.
MODEL_CONFIG = {
    "generate": {
        "max_output_tokens": 8192,
        "temperature": 0.2,
        "timeout": 60,
    },
    "classify": {
        "max_output_tokens": 256,
        "temperature": 0.2,
        "timeout": 30,
    },
}


def get_model_config(task: str) -> dict:
    """
    Get generation settings for a task.

    Args:
        task: "generate" or "classify".

    Returns:
        Dict with max_output_tokens, temperature and timeout.
    """
    return MODEL_CONFIG.get(task, MODEL_CONFIG["generate"])


def resolve_gemini_model(name: str | None) -> str:
    """Map a short Gemini name (flash, pro) to its full identifier."""
    if not name:
        return GEMINI_MODELS[DEFAULT_MODELS["gemini"]]
    return GEMINI_MODELS.get(name, name)
