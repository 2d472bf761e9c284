"""Text-generation providers and prompt builders."""

from .prompts import build_brief_prompt, build_system_prompt, format_items_block
from .providers import GenerationProvider, available_providers, create_provider

__all__ = [
    "GenerationProvider",
    "available_providers",
    "build_brief_prompt",
    "build_system_prompt",
    "create_provider",
    "format_items_block",
]
