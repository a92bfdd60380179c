"""Provider adapters for free public APIs.

Each adapter implements the `ProviderAdapter` interface from the domain layer
for one upstream API family and maps its raw JSON into a normalized result.
"""
