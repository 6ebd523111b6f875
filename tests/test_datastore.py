"""
Tests for the static data store

Covers branch-code normalization, table loading and the one-time
initialization of the process-wide store.
"""

import json
import threading
import pytest
from dataclasses import FrozenInstanceError

from ifsc_resolver.config import IFSCConfig
from ifsc_resolver.datastore import (
    BranchCode, DataStore, get_datastore, load_datastore, normalize_branch_code
)
from ifsc_resolver.errors import DataLoadError


def write_tables(directory, branches=None, bank_names=None, sublets=None, custom_sublets=None):
    """Write the four JSON tables into a directory"""
    tables = {
        "IFSC.json": branches if branches is not None else {"HDFC": [569, "0001"]},
        "banknames.json": bank_names if bank_names is not None else {"HDFC": "HDFC Bank"},
        "sublet.json": sublets if sublets is not None else {},
        "custom-sublets.json": custom_sublets if custom_sublets is not None else {},
    }
    for name, content in tables.items():
        (directory / name).write_text(json.dumps(content))
    return directory


class TestBranchCodeNormalization:
    """Test the canonical form of branch codes"""

    def test_integer_and_padded_string_agree(self):
        """Leading zeros are stripped from numeric strings"""
        assert normalize_branch_code("001934") == "1934"
        assert normalize_branch_code("1934") == "1934"
        assert normalize_branch_code(1934) == "1934"
        assert normalize_branch_code("000000") == "0"

    def test_alphanumeric_kept_as_is(self):
        """Non-numeric codes are not touched"""
        assert normalize_branch_code("0CNSBL") == "0CNSBL"
        assert normalize_branch_code("00J005") == "00J005"
        assert normalize_branch_code("DIGVIJ") == "DIGVIJ"

    def test_signed_and_spaced_values(self):
        """Only plain base-10 integers are rewritten"""
        assert normalize_branch_code("+12") == "12"
        assert normalize_branch_code(" 12") == " 12"
        assert normalize_branch_code("1_000") == "1_000"
        assert normalize_branch_code("") == ""

    def test_rejects_other_types(self):
        """Only ints and strings are branch codes"""
        with pytest.raises(TypeError):
            normalize_branch_code(True)
        with pytest.raises(TypeError):
            normalize_branch_code(12.5)
        with pytest.raises(TypeError):
            normalize_branch_code(None)

    def test_branch_code_equality(self):
        """Both JSON shapes of a code compare equal"""
        assert BranchCode(1934) == BranchCode("001934")
        assert BranchCode("001934").value == "1934"
        assert str(BranchCode(7)) == "7"
        assert len({BranchCode(7), BranchCode("000007"), BranchCode("7")}) == 1
        assert BranchCode("DIGVIJ") != BranchCode("digvij")


class TestDataStoreFromMappings:
    """Test building a store from in-memory tables"""

    def test_builds_immutable_tables(self):
        """Tables are read-only once built"""
        store = DataStore.from_mappings(
            {"HDFC": [569]}, {"HDFC": "HDFC Bank"}, {}, {"HDFC0CC": "HDFC"}
        )

        assert store.bank_names["HDFC"] == "HDFC Bank"
        with pytest.raises(TypeError):
            store.bank_names["NEWB"] = "New Bank"
        with pytest.raises(TypeError):
            store.branches["HDFC"] = frozenset()
        with pytest.raises(FrozenInstanceError):
            store.sublets = {}

    def test_source_mappings_are_copied(self):
        """Changing the source dict after load does not leak into the store"""
        names = {"HDFC": "HDFC Bank"}
        store = DataStore.from_mappings({"HDFC": [569]}, names, {}, {})
        names["SBIN"] = "State Bank of India"

        assert "SBIN" not in store.bank_names

    def test_has_branch_normalizes(self):
        """Branch membership uses the normalized form"""
        store = DataStore.from_mappings({"BDBL": [1934], "CNRB": ["0386"]}, {}, {}, {})

        assert store.has_branch("BDBL", "001934")
        assert store.has_branch("BDBL", "1934")
        assert store.has_branch("CNRB", "000386")
        assert not store.has_branch("BDBL", "001935")
        assert not store.has_branch("XXXX", "001934")

    def test_custom_sublet_order_is_longest_first(self):
        """Overlapping prefixes are scanned longest first, then by key"""
        store = DataStore.from_mappings(
            {}, {}, {}, {"AB": "X", "ABCD0": "Y", "ABCD01": "Z", "ZZ": "W"}
        )

        assert [k for k, _ in store.custom_sublet_order] == ["ABCD01", "ABCD0", "AB", "ZZ"]

    def test_stats(self):
        """Table sizes are reported"""
        store = DataStore.from_mappings(
            {"HDFC": [1, 2], "SBIN": [3]}, {"HDFC": "HDFC Bank"},
            {"HDFC0000001": "SBIN0000003"}, {}
        )

        assert store.stats() == {
            "bank_codes": 2,
            "branches": 3,
            "bank_names": 1,
            "sublets": 1,
            "custom_sublets": 0,
        }

    def test_rejects_bad_shapes(self):
        """Wrong table shapes fail with the offending table named"""
        with pytest.raises(DataLoadError, match="IFSC.json"):
            DataStore.from_mappings({"HDFC": 569}, {}, {}, {})
        with pytest.raises(DataLoadError, match="IFSC.json"):
            DataStore.from_mappings({"HDFC": [1.5]}, {}, {}, {})
        with pytest.raises(DataLoadError, match="IFSC.json"):
            DataStore.from_mappings(["HDFC"], {}, {}, {})
        with pytest.raises(DataLoadError, match="banknames.json"):
            DataStore.from_mappings({}, {"HDFC": 1}, {}, {})
        with pytest.raises(DataLoadError, match="sublet.json"):
            DataStore.from_mappings({}, {}, [], {})
        with pytest.raises(DataLoadError, match="custom-sublets.json"):
            DataStore.from_mappings({}, {}, {}, {"HDFC": None})

    def test_rejects_short_sublet_owner(self):
        """A sublet owner must hold at least a bank code"""
        with pytest.raises(DataLoadError, match="sublet.json"):
            DataStore.from_mappings({"ABCD": [1]}, {}, {"ABCD0000001": "AB"}, {})

        store = DataStore.from_mappings({"ABCD": [1]}, {}, {"ABCD0000001": "WXYZ"}, {})
        assert store.sublets["ABCD0000001"] == "WXYZ"


class TestDataStoreConstructor:
    """Test building a store with the dataclass constructor"""

    def test_direct_construction_normalizes(self):
        """Raw tables passed to DataStore are checked and frozen like loaded ones"""
        store = DataStore(
            branches={"ABCD": [1, "000002"]},
            bank_names={"ABCD": "Parent Bank", "CUSX": "Custom Bank"},
            sublets={},
            custom_sublets={"ABCD0": "CUSX", "AB": "Other"},
        )

        assert store.has_branch("ABCD", "000001")
        assert store.branches["ABCD"] == frozenset({BranchCode(1), BranchCode(2)})
        assert [k for k, _ in store.custom_sublet_order] == ["ABCD0", "AB"]
        with pytest.raises(TypeError):
            store.custom_sublets["ZZ"] = "X"

    def test_direct_construction_rejects_bad_shapes(self):
        """Shape errors surface from the constructor too"""
        with pytest.raises(DataLoadError, match="banknames.json"):
            DataStore(branches={}, bank_names={"ABCD": 1}, sublets={}, custom_sublets={})

    def test_rebuilding_from_a_store(self):
        """Tables of an existing store can seed a new one"""
        store = DataStore.from_mappings({"ABCD": [1]}, {"ABCD": "Parent Bank"}, {}, {"ABCD0": "CUSX"})

        rebuilt = DataStore(store.branches, store.bank_names, store.sublets, store.custom_sublets)

        assert rebuilt == store
        assert rebuilt.has_branch("ABCD", "1")

    def test_order_is_not_a_constructor_argument(self):
        """The scan order is always derived from the custom-sublet table"""
        with pytest.raises(TypeError):
            DataStore({}, {}, {}, {}, custom_sublet_order=(("X", "Y"),))


class TestLoadDataStore:
    """Test loading tables from JSON files"""

    def test_load_from_directory(self, tmp_path):
        """All four files are read and normalized"""
        write_tables(tmp_path, sublets={"HDFC0000569": "SBIN0000001"})

        store = load_datastore(tmp_path)

        assert store.has_branch("HDFC", "000569")
        assert store.has_branch("HDFC", "000001")
        assert store.sublets["HDFC0000569"] == "SBIN0000001"

    def test_load_with_configured_file_names(self, tmp_path):
        """File names come from the configuration"""
        write_tables(tmp_path)
        (tmp_path / "IFSC.json").rename(tmp_path / "branches.json")
        config = IFSCConfig(data_dir=str(tmp_path), ifsc_file="branches.json")

        store = load_datastore(config=config)

        assert "HDFC" in store.branches

    def test_missing_file_aborts_load(self, tmp_path):
        """A missing table is a load error, not an empty table"""
        write_tables(tmp_path)
        (tmp_path / "sublet.json").unlink()

        with pytest.raises(DataLoadError, match="sublet.json") as exc_info:
            load_datastore(tmp_path)
        assert exc_info.value.file_name == "sublet.json"

    def test_invalid_json_aborts_load(self, tmp_path):
        """Malformed JSON is a load error"""
        write_tables(tmp_path)
        (tmp_path / "banknames.json").write_text("{not json")

        with pytest.raises(DataLoadError, match="banknames.json"):
            load_datastore(tmp_path)

    def test_bundled_data_loads(self):
        """The tables shipped with the package are well formed"""
        store = load_datastore(config=IFSCConfig())

        assert store.bank_count() > 0
        assert store.branch_count() > 0
        assert "ABCX" in store.bank_names


class TestDefaultDataStore:
    """Test the process-wide store"""

    def test_same_instance_every_call(self):
        """The default store is loaded once"""
        assert get_datastore() is get_datastore()

    def test_concurrent_first_use(self):
        """Concurrent callers all observe the same fully loaded store"""
        results = []

        def worker():
            results.append(get_datastore())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 8
        assert all(store is results[0] for store in results)
        assert results[0].bank_count() > 0
