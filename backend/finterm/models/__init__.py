"""
Typed records exchanged between the provider, the orchestrator and the renderer.
"""
from finterm.models.market import Quote, NewsItem, ProviderResponse

__all__ = ["Quote", "NewsItem", "ProviderResponse"]
