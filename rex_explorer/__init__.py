"""
Rex explorer: type-filtered traversal of open metadata repository graphs.
"""

__version__ = "1.0.0"
