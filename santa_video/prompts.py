"""Built-in prompt for the Santa scene."""

from __future__ import annotations

SANTA_PROMPT = (
    "Santa Claus magically appears in the Christmas scene, walks gracefully to the "
    "Christmas tree with a bag of presents, carefully places beautifully wrapped gifts "
    "underneath the tree, steps back to admire his work with a warm smile, waves "
    "goodbye, and disappears in a shower of festive sparkles and twinkling lights. "
    "The scene is warm, magical, and filled with holiday spirit."
)

SANTA_PROMPT_SUMMARY = (
    "Santa Claus magically appears in the scene, walks gracefully",
    "to the Christmas tree, places beautifully wrapped gifts underneath,",
    "steps back to admire the scene, then disappears in a festive sparkle.",
)


def resolve_prompt(override: str | None = None) -> str:
    """Return the configured prompt, falling back to the Santa prompt."""
    if override and override.strip():
        return override.strip()
    return SANTA_PROMPT
