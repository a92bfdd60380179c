"""Domain Event definitions.

Represents significant occurrences during a provider rotation that other
parts of the system might react to (logging, metrics, tests).
"""
