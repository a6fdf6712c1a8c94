"""
mathtutor Model Service Providers

The model service is an opaque collaborator behind LLMProvider.

Usage:
    from mathtutor.providers import create_provider

    provider = create_provider("claude")
    response = await provider.create_message(messages=[...])
"""

from mathtutor.providers.base import ContentBlock, LLMProvider, LLMResponse, ProviderConfig
from mathtutor.providers.claude import ClaudeProvider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "ContentBlock",
    "ProviderConfig",
    "ClaudeProvider",
    "create_provider",
]


def create_provider(name: str = "claude", config: ProviderConfig | None = None) -> LLMProvider:
    """Factory function to create a provider by name.

    Args:
        name: Provider name ("claude" or "anthropic").
        config: Optional provider configuration.
    """
    if name.lower() in ("claude", "anthropic"):
        return ClaudeProvider(config)
    raise ValueError(f"Unknown provider: {name}. Supported: claude")
