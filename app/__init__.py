"""GrowSpace notification service package.

Keeps the local ``app`` package ahead of similarly named distributions that
might be installed in the environment.
"""

__version__ = "1.0.0"
