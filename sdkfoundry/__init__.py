"""SDKFoundry: knowledge cache ingestion and lookup server for the Immersive Web SDK."""

__version__ = "0.1.0"
