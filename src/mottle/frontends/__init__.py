"""Frontend interfaces for diffusion growth."""

from .cli import CLIGrowth

__all__ = ["CLIGrowth"]
