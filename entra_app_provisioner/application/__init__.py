"""Application layer - Use cases orchestrating the domain through ports."""
