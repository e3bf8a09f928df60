from .cache_loader import CacheNotFoundError, KnowledgeCache, get_cache

__all__ = ["CacheNotFoundError", "KnowledgeCache", "get_cache"]
