from dataclasses import dataclass, field

from ...content import ContentLoader, get_content_loader
from ..cache_loader import KnowledgeCache


@dataclass
class ToolContext:
    """What every tool reads from: the ingested cache and the bundled content."""
    cache: KnowledgeCache
    content: ContentLoader = field(default_factory=get_content_loader)
