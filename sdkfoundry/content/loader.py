"""Hand-authored reference content shipped with the package as YAML."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent

# Cache partition file -> content document. These partitions do not depend on the SDK checkout.
REFERENCE_PARTITIONS = {
    'common-mistakes.json': 'common_mistakes',
    'best-practices.json': 'best_practices',
    'setup-guides.json': 'setup_guides',
    'asset-guides.json': 'asset_guides',
    'troubleshooting.json': 'troubleshooting',
}


class ContentError(ValueError):
    """Raised when a content document is missing or malformed."""


class ContentLoader:
    """Loads and memoizes content documents by name."""

    def __init__(self, content_dir: Optional[Path] = None):
        self.content_dir = Path(content_dir) if content_dir else CONTENT_DIR
        self._cache: Dict[str, Any] = {}

    def load(self, name: str) -> Any:
        if name in self._cache:
            return self._cache[name]

        path = self.content_dir / f"{name}.yaml"
        if not path.exists():
            raise ContentError(f"Content document not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ContentError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            raise ContentError(f"Empty content document: {path}")

        logger.debug(f"Loaded content document {name}")
        self._cache[name] = data
        return data

    def common_mistakes(self) -> List[Dict[str, str]]:
        return self.load('common_mistakes')

    def feature_compositions(self) -> List[Dict[str, Any]]:
        return self.load('feature_compositions')

    def implementation_patterns(self) -> Dict[str, Dict[str, Any]]:
        return self.load('implementation_patterns')

    def concepts(self) -> Dict[str, Any]:
        return self.load('concepts')

    def scaffold_templates(self) -> Dict[str, Dict[str, Any]]:
        return self.load('scaffold_templates')

    def reference_partitions(self) -> Dict[str, Any]:
        """Return partition file name -> data for every static partition."""
        return {filename: self.load(name) for filename, name in REFERENCE_PARTITIONS.items()}


_loader: Optional[ContentLoader] = None


def get_content_loader() -> ContentLoader:
    global _loader
    if _loader is None:
        _loader = ContentLoader()
    return _loader
