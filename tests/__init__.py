from pathlib import Path
import json

TESTS_DIR = Path(__file__).parent
PROJECT_DIR = TESTS_DIR.parent
TESTDATA = TESTS_DIR / "testdata"
TESTDATA_INPUTS = TESTDATA / "inputs"
TESTDATA_INPUTS_CONTRACTS = TESTDATA / "input_contracts"
TESTDATA_TRACES = TESTDATA / "traces"
TESTDATA_OUTPUTS_EXPECTED = TESTDATA / "outputs_expected"


def load_json(path):
    with open(str(path)) as f:
        return json.load(f)


def load_compiler_output(filename):
    """

    :param filename: The contract file the output was produced for
    :return: The solc standard JSON output of the file
    """
    return load_json(TESTDATA_INPUTS / "{}.json".format(filename))


def load_trace(name):
    return load_json(TESTDATA_TRACES / "{}.json".format(name))

