"""
entity-blocking - Blocking for Entity Resolution

Partitions record collections by derived blocking keys so that downstream
pairwise comparison only considers records sharing a key, while carrying
the schema correspondences that justify each candidate pair.
"""

__version__ = "1.0.0"
__author__ = "entity-blocking Team"
