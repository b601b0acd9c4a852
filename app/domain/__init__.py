"""
Domain layer for the catalog and order engine.

This layer contains business entities, value objects, and domain logic
independent of persistence and HTTP concerns.
"""
