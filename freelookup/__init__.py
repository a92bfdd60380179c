"""freelookup: resilient lookups against free public APIs.

Search, translation, IP geolocation, geocoding and weather lookups that rotate
through interchangeable public service instances until one answers.
"""

__version__ = "0.3.0"
