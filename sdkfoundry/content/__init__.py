from .loader import REFERENCE_PARTITIONS, ContentError, ContentLoader, get_content_loader

__all__ = ["REFERENCE_PARTITIONS", "ContentError", "ContentLoader", "get_content_loader"]
