"""devgod — an intent-driven git workflow assistant."""

from devgod.identity import __codename__, __tagline__, __version__

__all__ = ["__codename__", "__tagline__", "__version__"]
