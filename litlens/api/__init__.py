from .openrouter import OpenRouterClient

__all__ = ['OpenRouterClient']
