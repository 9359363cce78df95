"""KGIC church site backend and podcast player."""

__version__ = "0.1.0"
