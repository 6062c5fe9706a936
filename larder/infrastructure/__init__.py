"""Infrastructure layer: database lifecycle, event bus, adapters."""
