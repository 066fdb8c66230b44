"""Provider registry for looking up metadata providers by name."""

from typing import Dict, List

from showfeed.providers.base import ContentProvider


class ProviderRegistry:
    """Registry for managing metadata providers."""

    _providers: Dict[str, ContentProvider] = {}

    @classmethod
    def register(cls, provider: ContentProvider) -> None:
        """Register a provider instance, replacing any with the same name."""
        cls._providers[provider.name] = provider

    @classmethod
    def get(cls, name: str) -> ContentProvider | None:
        """Get a provider by name."""
        return cls._providers.get(name)

    @classmethod
    def all(cls) -> List[ContentProvider]:
        """Get all registered providers."""
        return list(cls._providers.values())

    @classmethod
    def names(cls) -> List[str]:
        """Get names of all registered providers."""
        return list(cls._providers.keys())

    @classmethod
    def clear(cls) -> None:
        """Forget every registered provider (sessions are not closed)."""
        cls._providers.clear()


# Convenience function for registration
def register_provider(provider: ContentProvider) -> None:
    """Register a provider with the global registry."""
    ProviderRegistry.register(provider)
