"""API Resilience Implementations.

Contains the provider rotator (sequential fallback across interchangeable
public instances) and the rate limiter used to pace batch requests.
Bounded Context: API Resilience
"""
