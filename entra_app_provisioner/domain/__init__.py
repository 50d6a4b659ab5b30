"""Domain layer - Entities, value objects and services with no I/O."""
