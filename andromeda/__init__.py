"""Andromeda: partition layout inspection and ring visualization for UDisks2 drives."""

from .__version__ import __version__

__all__ = ["__version__"]
