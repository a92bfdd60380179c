"""Core Application Layer: Orchestrates lookup use cases.

Connects the domain layer with the infrastructure layer through interfaces.
Contains application services and the command handler.
"""
