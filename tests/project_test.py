import difflib
import json

import pytest

from solcover.coverage.project import ProjectCoverage
from solcover.coverage.source_file import SourceFileCoverage
from solcover.exceptions import CompilerOutputError, SequencingError
from solcover.support.support_args import args
from tests import *

CONTRACT = TESTDATA_INPUTS_CONTRACTS / "cont.sol"
INTERFACE = TESTDATA_INPUTS_CONTRACTS / "iface.sol"


@pytest.fixture
def reset_args():
    args.reset()
    yield args
    args.reset()


def combined_output(*filenames):
    output = {"contracts": {}, "sources": {}}
    for filename in filenames:
        file_output = load_compiler_output(filename)
        output["contracts"].update(file_output["contracts"])
        output["sources"].update(file_output["sources"])
    return output


def test_single_path(reset_args):
    project = ProjectCoverage(str(CONTRACT))

    assert list(project.files) == ["cont.sol"]
    assert project.files["cont.sol"].path == str(CONTRACT)


def test_multiple_paths(reset_args):
    project = ProjectCoverage([CONTRACT, INTERFACE])

    assert sorted(project.files) == ["cont.sol", "iface.sol"]


def test_paths_relative_to_base_dir(reset_args):
    project = ProjectCoverage([CONTRACT], base_dir=TESTDATA)

    assert list(project.files) == ["input_contracts/cont.sol"]


def test_missing_file(reset_args):
    with pytest.raises(FileNotFoundError):
        ProjectCoverage(str(TESTDATA_INPUTS_CONTRACTS / "404.sol"))


def test_compiler_inputs(reset_args):
    project = ProjectCoverage(CONTRACT)

    inputs = project.to_compiler_inputs()

    assert list(inputs) == ["cont.sol"]
    assert inputs["cont.sol"]["content"] == CONTRACT.read_text()


def test_ingest_dispatches_per_file(reset_args, mocker):
    # Arrange
    project = ProjectCoverage([CONTRACT, INTERFACE])
    spy = mocker.spy(SourceFileCoverage, "ingest_compiler_output")
    output = combined_output("cont.sol", "iface.sol")

    # Act
    project.ingest_compiler_output(output)

    # Assert
    assert spy.call_count == 2
    assert project.files["cont.sol"].is_ingested
    assert project.files["iface.sol"].source_id == 1


def test_untracked_file(reset_args, mocker):
    project = ProjectCoverage(CONTRACT)
    spy = mocker.spy(SourceFileCoverage, "ingest_compiler_output")

    project.ingest_compiler_output(combined_output("cont.sol", "iface.sol"))

    assert spy.call_count == 1
    assert list(project.files) == ["cont.sol"]


def test_failed_file_does_not_stop_ingestion(reset_args):
    # Arrange
    project = ProjectCoverage([CONTRACT, INTERFACE])
    output = combined_output("cont.sol", "iface.sol")
    del output["contracts"]["cont.sol"]["x"]["evm"]["deployedBytecode"]

    # Act
    with pytest.raises(CompilerOutputError, match="cont.sol"):
        project.ingest_compiler_output(output)

    # Assert
    assert not project.files["cont.sol"].is_ingested
    assert project.files["iface.sol"].is_ingested


def test_record_before_ingest(reset_args):
    project = ProjectCoverage(CONTRACT)

    with pytest.raises(SequencingError):
        project.record_trace(load_trace("h-50"))


def test_interfaces_are_skipped(reset_args):
    # Arrange
    project = ProjectCoverage([CONTRACT, INTERFACE])
    project.ingest_compiler_output(combined_output("cont.sol", "iface.sol"))

    # Act
    result = project.record_trace(load_trace("h-50"))

    # Assert
    assert list(result) == ["cont.sol"]
    assert list(project.report()) == ["cont.sol"]


def test_interfaces_are_reported(reset_args):
    args.skip_interfaces = False
    project = ProjectCoverage([CONTRACT, INTERFACE])
    project.ingest_compiler_output(combined_output("cont.sol", "iface.sol"))

    result = project.record_trace(load_trace("h-50"))

    assert sorted(result) == ["cont.sol", "iface.sol"]
    assert result["iface.sol"].is_empty


def _assert_same_report(expected, current):
    """Asserts both reports are equal and otherwise shows their difference."""
    output_expected = json.dumps(expected, indent=2, sort_keys=True).splitlines(1)
    output_current = json.dumps(current, indent=2, sort_keys=True).splitlines(1)

    difference = "".join(difflib.unified_diff(output_expected, output_current))
    assert difference == "", "Found differing report: \n {} \n".format(difference)


def test_report(reset_args):
    # Arrange
    project = ProjectCoverage(CONTRACT)
    project.ingest_compiler_output(combined_output("cont.sol"))
    project.record_trace(load_trace("h-50"))
    expected = load_json(TESTDATA_OUTPUTS_EXPECTED / "cont.sol.h-50.json")

    # Act
    report = project.report()["cont.sol"]

    # Assert
    assert report.pop("path") == str(CONTRACT)
    _assert_same_report(expected, report)
