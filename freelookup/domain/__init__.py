"""Domain Layer: value objects, normalized results, errors and interfaces."""
