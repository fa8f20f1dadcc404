"""
BP Importer - Blood pressure monitor export importer.

Parses CSV exports from home blood pressure monitors, reconciles them
against an external health store to avoid duplicates, and keeps a
bounded audit trail of import attempts.
"""

__version__ = "0.1.0"
