"""Storage and authentication adapters."""
