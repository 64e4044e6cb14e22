"""program-builder: compose multi-level training programs."""

__version__ = "0.1.0"
