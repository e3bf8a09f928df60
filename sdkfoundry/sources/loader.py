"""Documentation source loader for SDKFoundry.

Loads and validates remote documentation source definitions from YAML files.
"""

import yaml
from pathlib import Path
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


class SourceConfigError(ValueError):
    """Raised when a documentation source definition is invalid."""


@dataclass
class DocumentRef:
    """One remote document and the file name it is cached under."""
    path: str
    name: str

    def __post_init__(self):
        if not self.path:
            raise SourceConfigError("Document path cannot be empty")
        if not self.name or '/' in self.name or '\\' in self.name:
            raise SourceConfigError(f"Invalid cache file name: {self.name!r}")

    def url(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/{self.path}/"


@dataclass
class DocSourceConfig:
    """Configuration for a remote documentation source."""
    name: str
    base_url: str
    documents: List[DocumentRef] = field(default_factory=list)
    title: Optional[str] = None
    license_hint: Optional[str] = None
    enabled: bool = True

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.name:
            raise SourceConfigError("Source name cannot be empty")

        if not self.base_url.startswith(("http://", "https://")):
            raise SourceConfigError(f"Invalid base URL for {self.name}: {self.base_url}")

        if not self.documents:
            raise SourceConfigError(f"Source {self.name} must list at least one document")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DocSourceConfig':
        """Create DocSourceConfig from dictionary."""
        return cls(
            name=data['name'],
            base_url=data['base_url'],
            documents=[DocumentRef(path=d['path'], name=d['name']) for d in data.get('documents', [])],
            title=data.get('title'),
            license_hint=data.get('license_hint'),
            enabled=data.get('enabled', True)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = {
            'name': self.name,
            'base_url': self.base_url,
            'documents': [{'path': d.path, 'name': d.name} for d in self.documents],
            'enabled': self.enabled
        }

        if self.title:
            result['title'] = self.title
        if self.license_hint:
            result['license_hint'] = self.license_hint

        return result


class SourceLoader:
    """Loads documentation source definitions from YAML files."""

    def __init__(self, sources_dir: Optional[Path] = None):
        """Initialize source loader.

        Args:
            sources_dir: Directory containing source YAML files.
                        Defaults to the directory of this module.
        """
        if sources_dir is None:
            sources_dir = Path(__file__).parent

        self.sources_dir = Path(sources_dir)

    def load_source_config(self, source_name: str) -> DocSourceConfig:
        """Load configuration for a specific source.

        Raises:
            SourceConfigError: if the file is missing, empty or invalid.
        """
        yaml_file = self.sources_dir / f"{source_name}.yaml"

        if not yaml_file.exists():
            raise SourceConfigError(f"Source configuration not found: {yaml_file}")

        try:
            with open(yaml_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SourceConfigError(f"Invalid YAML in {yaml_file}: {e}") from e

        if not data:
            raise SourceConfigError(f"Empty source configuration: {yaml_file}")

        if data.get('name') != source_name:
            if 'name' in data:
                logger.warning(f"Source name mismatch in {yaml_file}: {data['name']} != {source_name}")
            data['name'] = source_name

        try:
            return DocSourceConfig.from_dict(data)
        except KeyError as e:
            raise SourceConfigError(f"Missing required key {e} in {yaml_file}") from e

    def list_sources(self) -> List[str]:
        """List available source names."""
        return sorted(p.stem for p in self.sources_dir.glob("*.yaml"))

    def load_enabled_sources(self) -> List[DocSourceConfig]:
        """Load every enabled source definition."""
        sources = []
        for name in self.list_sources():
            config = self.load_source_config(name)
            if config.enabled:
                sources.append(config)
            else:
                logger.info(f"Source {name} is disabled, skipping")
        return sources
