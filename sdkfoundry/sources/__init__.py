from .loader import DocSourceConfig, DocumentRef, SourceConfigError, SourceLoader

__all__ = ["DocSourceConfig", "DocumentRef", "SourceConfigError", "SourceLoader"]
