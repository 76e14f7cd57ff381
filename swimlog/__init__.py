"""
SwimLog - local swim practice time tracking.

This package contains the complete application:
- core: Framework-agnostic entity rules and time utilities
- infrastructure: Key-value persistence, entity repositories, migration
- api: FastAPI routes consumed by the app's screens
- config: Application configuration
"""

__version__ = "0.2.0"
