"""Application layer: use-case services orchestrating domain and infrastructure."""
