"""Infrastructure layer: provider clients, adapters, persistence and observability."""
