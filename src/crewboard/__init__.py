"""Crewboard - crew department dashboard client.

Keeps crew joining, arrival, update, memo, training and P&I tables,
a dashboard summary and a chat stream in sync with a remote tabular
record store.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
