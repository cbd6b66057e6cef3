"""
Unit tests for blocking functionality.
"""

import pytest

from entity_blocking.blocking import (
    AttributeValueBlockingKeyGenerator,
    CorrespondenceJoiner,
    CrossDatasetBlocker,
    FunctionBlockingKeyGenerator,
    KeyGroupingEngine,
    SelfBlocker,
    StandardBlocker,
    TokenBlockingKeyGenerator,
    block_size_table,
    get_blocking_statistics,
    reduction_ratio,
)
from entity_blocking.blocking.correspondence_joiner import FIRST, ROLES, SECOND
from entity_blocking.model import Attribute, Correspondence, DataSet, Record
from entity_blocking.processing import ProcessableCollection


def pair_ids(candidates):
    return sorted((c.first.identifier, c.second.identifier) for c in candidates)


@pytest.fixture(params=[
    {"engine": "collection"},
    {"engine": "dataframe", "partitions": 1},
    {"engine": "dataframe", "partitions": 3},
])
def blocking_config(request):
    return dict(request.param)


class TestCorrespondenceJoiner:
    """Test cases for attaching schema correspondences."""

    def setup_method(self):
        """Setup test fixtures."""
        self.c01 = Correspondence(Attribute("name0", 0), Attribute("name1", 1))
        self.c02 = Correspondence(Attribute("zip0", 0), Attribute("zip2", 2))
        self.joiner = CorrespondenceJoiner([self.c01, self.c02])

    def test_applicable_by_role(self):
        """Records match correspondences on the side given by their role."""
        record0 = Record("r", 0)
        record1 = Record("s", 1)

        assert self.joiner.applicable(record0, FIRST) == (self.c01, self.c02)
        assert self.joiner.applicable(record0, SECOND) == ()
        assert self.joiner.applicable(record1, SECOND) == (self.c01,)
        assert self.joiner.applicable(Record("t", 7), FIRST) == ()

    def test_combine_single_role(self):
        """One entry per record."""
        records = ProcessableCollection([Record("r", 0), Record("s", 1)])

        combined = self.joiner.combine(records, roles=(SECOND,)).get()

        assert combined == [(Record("r", 0), ()), (Record("s", 1), (self.c01,))]

    def test_combine_both_roles(self):
        """One entry per record and role."""
        combined = self.joiner.combine(ProcessableCollection([Record("s", 1)]), roles=ROLES).get()

        assert combined == [(Record("s", 1), ()), (Record("s", 1), (self.c01,))]

    def test_no_correspondences(self):
        """None is treated as an empty sequence."""
        joiner = CorrespondenceJoiner(None)

        assert joiner.applicable(Record("r", 0), FIRST) == ()

    def test_unknown_role(self):
        """Test unknown role."""
        with pytest.raises(ValueError):
            self.joiner.applicable(Record("r", 0), "third")


class TestKeyGroupingEngine:
    """Test cases for grouping by blocking key."""

    def setup_method(self):
        """Setup test fixtures."""
        self.c1 = Correspondence(Attribute("a", 0), Attribute("b", 1))
        self.c2 = Correspondence(Attribute("c", 0), Attribute("d", 1))

        def by_entity(record, correspondences):
            if record.get_value("key"):
                yield record.get_value("key"), Record(record.get_value("entity"), 0)

        self.engine = KeyGroupingEngine(FunctionBlockingKeyGenerator(by_entity, emits_pairs=True))

    def test_coarse_elements_merge_provenance(self):
        """The same blocked element from several records merges its causes."""
        v1 = Record("v1", 0, {"entity": "e1", "key": "x"})
        v2 = Record("v2", 0, {"entity": "e1", "key": "x"})
        v3 = Record("v3", 0, {"entity": "e2", "key": "y"})

        grouped = dict(self.engine.group(ProcessableCollection([
            (v1, (self.c1,)),
            (v2, (self.c2, self.c1)),
            (v3, ()),
        ])).get())

        assert set(grouped) == {"x", "y"}
        distribution = grouped["x"]
        assert len(distribution) == 1
        assert distribution.get_causes(Record("e1", 0)) == (self.c1, self.c2)
        assert distribution.get_frequency(Record("e1", 0)) == 2

    def test_records_without_keys(self):
        """Records without keys do not produce groups."""
        grouped = self.engine.group(ProcessableCollection([(Record("v1", 0, {"entity": "e1"}), ())])).get()

        assert grouped == []


class TestCrossDatasetBlocking:
    """Test cases for blocking two datasets."""

    def setup_method(self):
        """Setup test fixtures."""
        self.name0 = Attribute("name0", 0, "name")
        self.name1 = Attribute("name1", 1, "name")
        self.zip0 = Attribute("zip0", 0, "zip")
        self.zip2 = Attribute("zip2", 2, "zip")
        self.c01 = Correspondence(self.name0, self.name1)
        self.c02 = Correspondence(self.zip0, self.zip2)

        self.r1 = Record("r1", 0, {"name": "a"})
        self.r2 = Record("r2", 0, {"name": "b"})
        self.s1 = Record("s1", 1, {"name": "a"})
        self.dataset1 = DataSet([self.r1, self.r2])
        self.dataset2 = DataSet([self.s1])

        self.by_name = AttributeValueBlockingKeyGenerator(["name"])

    def test_pairs_for_shared_keys(self, blocking_config):
        """Only elements sharing a key are paired."""
        blocker = CrossDatasetBlocker(self.by_name, config=blocking_config)

        candidates = blocker.run_blocking(self.dataset1, self.dataset2, [self.c01]).get()

        assert len(candidates) == 1
        candidate = candidates[0]
        assert candidate.first == self.r1
        assert candidate.second == self.s1
        assert candidate.similarity == 1.0
        assert candidate.causes == (self.c01,)

    def test_causes_of_third_sources_excluded(self, blocking_config):
        """Causes are restricted to correspondences between the paired sources."""
        blocker = CrossDatasetBlocker(self.by_name, config=blocking_config)

        candidates = blocker.run_blocking(self.dataset1, self.dataset2, [self.c01, self.c02]).get()

        assert [c.causes for c in candidates] == [(self.c01,)]

    def test_without_correspondences(self, blocking_config):
        """Blocking works without schema correspondences."""
        blocker = CrossDatasetBlocker(self.by_name, config=blocking_config)

        candidates = blocker.run_blocking(self.dataset1, self.dataset2).get()

        assert pair_ids(candidates) == [("r1", "s1")]
        assert candidates[0].causes == ()

    def test_pairs_repeat_across_keys(self, blocking_config):
        """A pair sharing two keys is produced once per key."""
        dataset1 = DataSet([Record("r1", 0, {"name": "john smith"})])
        dataset2 = DataSet([Record("s1", 1, {"name": "smith john"})])
        blocker = CrossDatasetBlocker(TokenBlockingKeyGenerator(["name"]), config=blocking_config)

        assert pair_ids(blocker.run_blocking(dataset1, dataset2).get()) == [("r1", "s1"), ("r1", "s1")]

    def test_records_without_key(self, blocking_config):
        """Records without a key are never paired."""
        dataset2 = DataSet([self.s1, Record("s2", 1, {})])
        blocker = CrossDatasetBlocker(self.by_name, config=blocking_config)

        assert pair_ids(blocker.run_blocking(self.dataset1, dataset2).get()) == [("r1", "s1")]

    def test_second_blocking_function(self, blocking_config):
        """The second key generator is applied to the second dataset."""
        dataset2 = DataSet([Record("s1", 1, {"full_name": "B"}), Record("s2", 1, {"name": "a"})])
        blocker = CrossDatasetBlocker(
            self.by_name,
            AttributeValueBlockingKeyGenerator(["full_name"]),
            config=blocking_config
        )

        assert pair_ids(blocker.run_blocking(self.dataset1, dataset2).get()) == [("r2", "s1")]

    def test_generator_errors_propagate(self, blocking_config):
        """Exceptions of the key generator reach the caller."""
        def failing(record):
            raise RuntimeError(f"cannot block {record.identifier}")

        blocker = CrossDatasetBlocker(FunctionBlockingKeyGenerator(failing), config=blocking_config)

        with pytest.raises(RuntimeError):
            blocker.run_blocking(self.dataset1, self.dataset2).get()

    def test_shared_sources_rejected(self):
        """Datasets must come from different sources."""
        blocker = CrossDatasetBlocker(self.by_name)

        with pytest.raises(ValueError):
            blocker.run_blocking(self.dataset1, DataSet([Record("x", 0, {"name": "a"})]))

    def test_unrelated_correspondence_rejected(self):
        """Correspondences must reference a blocked source."""
        unrelated = Correspondence(Attribute("x", 5), Attribute("y", 6))
        blocker = CrossDatasetBlocker(self.by_name)

        with pytest.raises(ValueError):
            blocker.run_blocking(self.dataset1, self.dataset2, [unrelated])

    def test_block_sizes(self, blocking_config):
        """Block sizes are measured on request."""
        blocking_config["measure_block_sizes"] = True
        dataset2 = DataSet([self.s1, Record("s2", 1, {"name": "c"})])
        blocker = CrossDatasetBlocker(self.by_name, config=blocking_config)

        blocker.run_blocking(self.dataset1, dataset2)

        table = blocker.block_sizes
        assert len(table) == 3
        assert table.iloc[0]["blocking_key"] == "a"
        assert table.iloc[0]["pairs"] == 1
        assert table["pairs"].sum() == 1

    def test_block_sizes_mixed_key_types(self, blocking_config):
        """Block sizes are measured when the two sides use different key types."""
        blocking_config["measure_block_sizes"] = True
        blocker = CrossDatasetBlocker(
            self.by_name,
            FunctionBlockingKeyGenerator(lambda record: 7),
            config=blocking_config
        )

        assert blocker.run_blocking(self.dataset1, self.dataset2).get() == []

        table = blocker.block_sizes
        assert set(table["blocking_key"]) == {"a", "b", 7}
        assert table["pairs"].sum() == 0


class TestSelfBlocking:
    """Test cases for blocking one dataset."""

    def setup_method(self):
        """Setup test fixtures."""
        self.name0 = Attribute("name0", 0, "name")
        self.name1 = Attribute("name1", 1, "name")
        self.name2 = Attribute("name2", 2, "name")
        self.c01 = Correspondence(self.name0, self.name1)
        self.c02 = Correspondence(self.name0, self.name2)
        self.c12 = Correspondence(self.name1, self.name2)

        self.a = Record("a", 0, {"name": "x"})
        self.b = Record("b", 1, {"name": "x"})
        self.c = Record("c", 2, {"name": "x"})
        self.dataset = DataSet([self.c, self.a, self.b])

        self.by_name = AttributeValueBlockingKeyGenerator(["name"])

    def test_pairs_within_block(self, blocking_config):
        """Every unordered pair is produced once with its own causes."""
        blocker = SelfBlocker(self.by_name, config=blocking_config)

        candidates = blocker.run_blocking(self.dataset, [self.c01, self.c02, self.c12]).get()

        by_pair = {(c.first.identifier, c.second.identifier): c.causes for c in candidates}
        assert by_pair == {
            ("a", "b"): (self.c01,),
            ("a", "c"): (self.c02,),
            ("b", "c"): (self.c12,),
        }

    def test_orientation(self, blocking_config):
        """The element with the lower source identifier comes first."""
        blocker = SelfBlocker(self.by_name, config=blocking_config)

        for candidate in blocker.run_blocking(self.dataset).get():
            assert candidate.first.data_source_identifier <= candidate.second.data_source_identifier
            assert candidate.first != candidate.second

    def test_no_duplicates_across_keys(self, blocking_config):
        """A pair sharing several keys is produced once."""
        dataset = DataSet([Record("a", 0, {"name": "john smith"}), Record("b", 1, {"name": "smith john"})])
        blocker = SelfBlocker(TokenBlockingKeyGenerator(["name"]), config=blocking_config)

        assert pair_ids(blocker.run_blocking(dataset, [self.c01]).get()) == [("a", "b")]

    def test_orientation_within_source(self, blocking_config):
        """Records of one source keep one orientation across shared keys."""
        dataset = DataSet([
            Record("r2", 0, {"name": "john smith"}),
            Record("r1", 0, {"name": "smith john"}),
            Record("s1", 1, {"name": "john"}),
        ])
        blocker = SelfBlocker(TokenBlockingKeyGenerator(["name"]), config=blocking_config)

        candidates = blocker.run_blocking(dataset).get()

        assert pair_ids(candidates) == [("r1", "r2"), ("r1", "s1"), ("r2", "s1")]
        for candidate in candidates:
            assert candidate.first.data_source_identifier <= candidate.second.data_source_identifier

    def test_single_source(self, blocking_config):
        """Records of one source are ordered by identifier."""
        dataset = DataSet([Record("r2", 0, {"name": "x"}), Record("r1", 0, {"name": "x"}),
                           Record("r3", 0, {"name": "y"})])
        blocker = SelfBlocker(self.by_name, config=blocking_config)

        assert pair_ids(blocker.run_blocking(dataset).get()) == [("r1", "r2")]

    def test_empty_dataset(self, blocking_config):
        """Test empty dataset."""
        blocker = SelfBlocker(self.by_name, config=blocking_config)

        assert blocker.run_blocking(DataSet([])).get() == []

    def test_block_sizes(self):
        """Block sizes count internal pairs."""
        blocker = SelfBlocker(self.by_name, config={"measure_block_sizes": True})

        blocker.run_blocking(self.dataset)

        assert blocker.block_sizes.to_dict(orient="records") == [
            {"blocking_key": "x", "block_size": 3, "pairs": 3}
        ]


class TestStandardBlocker:
    """Test cases for the combined blocker."""

    def test_delegation(self):
        """Both modes are available and block sizes follow the last run."""
        by_name = AttributeValueBlockingKeyGenerator(["name"])
        blocker = StandardBlocker(by_name, config={"measure_block_sizes": True})
        dataset1 = DataSet([Record("r1", 0, {"name": "a"}), Record("r2", 0, {"name": "a"})])
        dataset2 = DataSet([Record("s1", 1, {"name": "a"})])

        assert blocker.block_sizes is None
        assert blocker.second_blocking_function is by_name

        assert pair_ids(blocker.run_blocking(dataset1, dataset2).get()) == [("r1", "s1"), ("r2", "s1")]
        assert "right_size" in blocker.block_sizes.columns

        assert pair_ids(blocker.run_self_blocking(dataset1).get()) == [("r1", "r2")]
        assert "block_size" in blocker.block_sizes.columns


class TestBlockingStatistics:
    """Test cases for blocking statistics."""

    def test_reduction_ratio(self):
        """Test reduction ratio."""
        assert reduction_ratio(10, 10, 10) == pytest.approx(0.9)
        assert reduction_ratio(9, 10) == pytest.approx(0.8)
        assert reduction_ratio(0, 1) == 0.0

    def test_get_blocking_statistics(self):
        """Test statistics dictionary."""
        statistics = get_blocking_statistics(25, 10, 10)

        assert statistics["mode"] == "cross"
        assert statistics["total_possible_pairs"] == 100
        assert statistics["generated_candidates"] == 25
        assert statistics["reduction_percentage"] == pytest.approx(75.0)

        assert get_blocking_statistics(0, 4)["total_possible_pairs"] == 6

    def test_block_size_table_empty(self):
        """Test table without blocks."""
        table = block_size_table([])

        assert len(table) == 0
        assert list(table.columns) == ["blocking_key", "block_size", "pairs"]


if __name__ == "__main__":
    pytest.main([__file__])
