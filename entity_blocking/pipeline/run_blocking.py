"""
Blocking pipeline orchestrator for entity-blocking.

Coordinates a complete blocking run from configuration through candidate
generation to the efficiency report.
"""

import logging
import time
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..blocking.generators import BlockingKeyGenerator
from ..blocking.standard_blocker import StandardBlocker
from ..blocking.statistics import get_blocking_statistics
from ..config import (
    DEFAULT_CONFIG_PATH,
    configure_logging,
    get_default_blocking_config,
    load_blocking_config,
    merge_configs,
    validate_blocking_config,
)
from ..model.correspondence import Correspondence
from ..model.dataset import DataSet

logger = logging.getLogger(__name__)


class BlockingPipeline:
    """
    Runs blocking as a sequence of timed stages.

    Unlike the blockers, which return lazy results, the pipeline
    materialises the candidate pairs so it can report on them.
    """

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH,
                 config: Optional[Dict[str, Any]] = None, setup_logging: bool = False):
        """
        Initialize pipeline with configuration.

        Args:
            config_path: Path to configuration file
            config: Configuration dictionary, takes precedence over config_path
            setup_logging: Configure root logging from the ``logging`` section
        """
        self.config_path = config_path
        if config is not None:
            self.config = merge_configs(get_default_blocking_config(), config)
        else:
            self.config = load_blocking_config(config_path)

        if not validate_blocking_config(self.config):
            raise ValueError("Invalid blocking configuration (see log for details)")

        if setup_logging:
            logging_config = self.config.get("logging", {})
            configure_logging(logging_config.get("level", "INFO"), logging_config.get("file"))

        # Pipeline state
        self.pipeline_start_time = None
        self.stage_times: Dict[str, float] = {}
        self.stage_durations: Dict[str, float] = {}

        logger.info("Initialized blocking pipeline")

    def _start_stage_timer(self, stage_name: str):
        """Start timing for a pipeline stage."""
        self.stage_times[stage_name] = time.time()
        logger.info(f"Starting stage: {stage_name}")

    def _end_stage_timer(self, stage_name: str):
        """End timing for a pipeline stage."""
        if stage_name in self.stage_times:
            duration = time.time() - self.stage_times[stage_name]
            self.stage_durations[stage_name] = duration
            logger.info(f"Completed stage: {stage_name} in {duration:.2f} seconds")

    def create_blocker(self, key_generator: BlockingKeyGenerator,
                       second_key_generator: Optional[BlockingKeyGenerator] = None) -> StandardBlocker:
        """Build a blocker from the ``blocking`` configuration section."""
        return StandardBlocker(key_generator, second_key_generator, self.config.get("blocking", {}))

    def generate_candidates(self, blocker: StandardBlocker, dataset1: DataSet,
                            dataset2: Optional[DataSet] = None,
                            schema_correspondences: Optional[Iterable[Correspondence]] = None
                            ) -> List[Correspondence]:
        """
        Generate candidate pairs.

        Args:
            blocker: Configured blocker
            dataset1: First (or only) dataset
            dataset2: Second dataset; single dataset blocking when None
            schema_correspondences: Schema correspondences

        Returns:
            List of candidate correspondences
        """
        self._start_stage_timer("candidate_generation")

        try:
            if dataset2 is None:
                candidates = blocker.run_self_blocking(dataset1, schema_correspondences).get()
            else:
                candidates = blocker.run_blocking(dataset1, dataset2, schema_correspondences).get()

            logger.info(f"Generated {len(candidates)} candidate pairs")

            self._end_stage_timer("candidate_generation")
            return candidates

        except Exception as e:
            logger.error(f"Candidate generation failed: {e}")
            raise

    def generate_report(self, candidates: List[Correspondence], dataset1: DataSet,
                        dataset2: Optional[DataSet] = None,
                        blocker: Optional[StandardBlocker] = None) -> Dict[str, Any]:
        """
        Generate blocking performance report.

        Args:
            candidates: Generated candidate pairs
            dataset1: First (or only) dataset
            dataset2: Second dataset, if any
            blocker: Blocker of the run, for block size measurements

        Returns:
            Performance report dictionary
        """
        self._start_stage_timer("report_generation")

        statistics = get_blocking_statistics(
            len(candidates), len(dataset1), len(dataset2) if dataset2 is not None else None
        )

        report = {
            "pipeline_execution": {
                "start_time": datetime.fromtimestamp(self.pipeline_start_time) if self.pipeline_start_time else None,
                "end_time": datetime.now(),
                "stage_durations": dict(self.stage_durations),
                "total_duration": time.time() - self.pipeline_start_time if self.pipeline_start_time else 0
            },
            "blocking_statistics": statistics,
            "candidates_with_causes": sum(1 for c in candidates if c.causes)
        }

        block_sizes = blocker.block_sizes if blocker is not None else None
        if block_sizes is not None:
            report["block_sizes"] = {
                "num_blocks": len(block_sizes),
                "max_block_pairs": int(block_sizes["pairs"].max()) if len(block_sizes) else 0,
                "table": block_sizes
            }

        logger.info("Blocking report generated")

        self._end_stage_timer("report_generation")
        return report

    def run(self, dataset1: DataSet, key_generator: BlockingKeyGenerator,
            dataset2: Optional[DataSet] = None,
            schema_correspondences: Optional[Iterable[Correspondence]] = None,
            second_key_generator: Optional[BlockingKeyGenerator] = None
            ) -> Tuple[List[Correspondence], Dict[str, Any]]:
        """
        Run the complete blocking pipeline.

        Args:
            dataset1: First (or only) dataset
            key_generator: Blocking key generator
            dataset2: Second dataset; single dataset blocking when None
            schema_correspondences: Schema correspondences
            second_key_generator: Key generator for the second dataset

        Returns:
            Tuple of (candidate correspondences, report)
        """
        self.pipeline_start_time = time.time()
        self.stage_times = {}
        self.stage_durations = {}
        mode = "self" if dataset2 is None else "cross"
        logger.info(f"Starting {mode} blocking pipeline with {key_generator.name}")

        try:
            blocker = self.create_blocker(key_generator, second_key_generator)
            candidates = self.generate_candidates(blocker, dataset1, dataset2, schema_correspondences)
            report = self.generate_report(candidates, dataset1, dataset2, blocker)

            total_duration = time.time() - self.pipeline_start_time
            logger.info(f"Pipeline completed successfully in {total_duration:.2f} seconds")

            return candidates, report

        except Exception as e:
            logger.error(f"Pipeline failed: {e}")
            raise
