"""Tests for @nyth:blame fixture coverage."""

import pytest

from nyth.detectors import InstanceKey, IssueDetector, ZeroAddressCheckDetector, check_blame_coverage
from nyth.detectors.blame import blamed_names, expected_instances, same_file


class FixedInstancesDetector(IssueDetector):
    """Reports whatever keys it was built with."""

    def __init__(self, *keys):
        super().__init__()
        self._instances.update((key, 1) for key in keys)

    def detect(self, context):
        return bool(self._instances)

    def name(self):
        return "fixed-instances"

    def title(self):
        return "Fixed instances"

    def description(self):
        return "Test double."


@pytest.fixture
def blamed_fixture(tmp_path):
    path = tmp_path / "MyTest.sol"
    path.write_text("// @nyth:blame(fixed-instances)\nx = 1;\n", encoding="utf-8")
    return path


class TestMarkers:
    """Test marker parsing."""

    def test_single_name(self):
        assert blamed_names("    // @nyth:blame(zero-address-check)") == ["zero-address-check"]

    def test_several_names_are_stripped(self):
        line = "// @nyth:blame(zero-address-check, push-zero-opcode )"
        assert blamed_names(line) == ["zero-address-check", "push-zero-opcode"]

    def test_no_marker(self):
        assert blamed_names("// just a comment") == []
        assert blamed_names("// @nyth:blame(unterminated") == []

    def test_expected_instances(self, loops_source_path):
        expected = expected_instances(loops_source_path, "reverts-and-requires-in-loops")
        assert expected == [(str(loops_source_path), 8), (str(loops_source_path), 13)]
        assert expected_instances(loops_source_path, "zero-address-check") == []


class TestCoverage:
    """Test comparing findings against markers."""

    def test_covered(self, zero_address_context, zero_address_source_path):
        detector = ZeroAddressCheckDetector()
        detector.detect(zero_address_context)
        coverage = check_blame_coverage(detector, zero_address_source_path)

        assert coverage.covered
        assert coverage.detector == "zero-address-check"
        assert coverage.expected == [(str(zero_address_source_path), 10)]

    def test_missed_instance_reported(self, zero_address_source_path, caplog):
        """Test a detector that never ran misses every blamed line."""
        detector = ZeroAddressCheckDetector()
        coverage = detector.blame_coverage(zero_address_source_path)

        assert not coverage.covered
        assert len(coverage.missed) == 1
        missed = coverage.missed[0]
        assert missed.line == 10
        assert missed.source_line.strip() == "owner = newOwner;"
        assert "failed to capture 1 blamed instance" in caplog.text

    def test_no_markers_means_covered(self, loops_source_path):
        detector = ZeroAddressCheckDetector()
        assert detector.verify_blame_coverage(loops_source_path)

    def test_other_file_does_not_count(self, zero_address_context, zero_address_source, tmp_path):
        """Test findings from a different file do not satisfy a marker."""
        copy = tmp_path / "Other.sol"
        copy.write_text(zero_address_source, encoding="utf-8")

        detector = ZeroAddressCheckDetector()
        detector.detect(zero_address_context)
        assert not detector.verify_blame_coverage(copy)


class TestFileMatching:
    """Test instances are matched to fixtures by whole path components."""

    def test_matching_suffix(self, blamed_fixture):
        detector = FixedInstancesDetector(InstanceKey(blamed_fixture.name, 2, "0:1"))
        assert check_blame_coverage(detector, blamed_fixture).covered

    def test_partial_file_name_does_not_match(self, blamed_fixture):
        detector = FixedInstancesDetector(InstanceKey("Test.sol", 2, "0:1"))
        assert not check_blame_coverage(detector, blamed_fixture).covered

    def test_empty_path_does_not_match(self, blamed_fixture):
        """Test a unit without absolutePath cannot satisfy any marker."""
        detector = FixedInstancesDetector(InstanceKey("", 2, "0:1"))
        assert not check_blame_coverage(detector, blamed_fixture).covered

    def test_wrong_line(self, blamed_fixture):
        detector = FixedInstancesDetector(InstanceKey(blamed_fixture.name, 3, "0:1"))
        assert not check_blame_coverage(detector, blamed_fixture).covered

    @pytest.mark.parametrize(
        "fixture_path,instance_path,expected",
        [
            ("/repo/src/A.sol", "src/A.sol", True),
            ("/repo/src/A.sol", "A.sol", True),
            ("/repo/src/A.sol", "rc/A.sol", False),
            ("/repo/src/A.sol", "other/src/A.sol", False),
            ("/repo/src/A.sol", "", False),
        ],
    )
    def test_same_file(self, fixture_path, instance_path, expected):
        assert same_file(fixture_path, instance_path) is expected
