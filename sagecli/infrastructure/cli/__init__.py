"""Console presentation using rich."""
