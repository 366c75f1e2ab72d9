"""Generation agents: prompt building, AI generation and deterministic fallback."""

from .fallback import HOME_SCREEN, LOGIN_SCREEN, FallbackGenerator, Templates, generate_fallback
from .features import DEFAULT_FEATURES, FeatureRef, extract_features, slugify, summarize_document
from .prompt import SYSTEM_PROMPT, build_screen_prompt
from .screen_generator import FALLBACK_NOTICE, CompletionBackend, GenerationResult, ScreenGenerator

__all__ = [
    "ScreenGenerator",
    "GenerationResult",
    "CompletionBackend",
    "FALLBACK_NOTICE",
    "FallbackGenerator",
    "Templates",
    "generate_fallback",
    "LOGIN_SCREEN",
    "HOME_SCREEN",
    "FeatureRef",
    "DEFAULT_FEATURES",
    "extract_features",
    "slugify",
    "summarize_document",
    "SYSTEM_PROMPT",
    "build_screen_prompt",
]
