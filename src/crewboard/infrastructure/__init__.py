"""Infrastructure layer for Crewboard.

This layer contains the adapters to external systems: the HTTP client
for the remote record store.
"""
