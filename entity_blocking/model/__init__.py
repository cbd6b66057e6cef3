"""
Data model for entity-blocking.

Records, schema elements, datasets, correspondences and the per-key
distributions built during blocking.
"""

from .matchable import Attribute, Matchable, Record
from .dataset import DataSet
from .correspondence import Correspondence
from .distribution import Distribution

__all__ = ["Attribute", "Matchable", "Record", "DataSet", "Correspondence", "Distribution"]
