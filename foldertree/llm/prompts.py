"""
Prompt builders for the AI providers.

Provides prompts for:
- Tree generation: the model returns a plain indented folder/file tree
- Classification: the model returns a category for a single name
"""

CATEGORIES = ["Code", "Graphics", "Audio", "Video", "Documents", "Game", "Archives", "Uncategorized"]

TREE_SYSTEM_PROMPT = (
    "Return ONLY a plain-text indented folder/file tree. "
    "2 spaces per level. No markdown, no explanations."
)


def build_tree_prompt(prompt: str, include_system: bool = False) -> str:
    """
    Build the user prompt for tree generation.

    Providers without a separate system message (Ollama, Gemini) get the
    instructions prepended.

    Args:
        prompt: What the user wants, e.g. "a Flask app with tests".
        include_system: Prepend the formatting instructions.

    Returns:
        Prompt string for the LLM.
    """
    if not include_system:
        return prompt

    return f"""{TREE_SYSTEM_PROMPT}

## Example

my-app
  src
    main.py
  tests
    test_main.py
  README.md

## Request

{prompt}
"""


def build_classify_prompt(name: str) -> str:
    """Build a prompt asking for the category of a single file/folder name."""
    return "\n".join([
        "Return ONLY valid JSON without markdown.",
        "Categorize the file/folder name.",
        f"Valid categories: {', '.join(CATEGORIES)}.",
        "Return fields: category (string), confidence (0..1).",
        f"Name: {name}",
    ])
