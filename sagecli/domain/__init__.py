"""Domain Layer: models, ports, events and gateway errors."""
