"""Text analysis adapters."""
