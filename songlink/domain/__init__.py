"""Domain layer: pure value types and the error taxonomy."""
