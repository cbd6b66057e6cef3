"""
Pipeline orchestration for entity-blocking.
"""

from .run_blocking import BlockingPipeline

__all__ = ["BlockingPipeline"]
