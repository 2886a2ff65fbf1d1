"""This module contains the coverage of a set of Solidity files compiled
together."""
import logging
import os
from typing import Dict, Iterable, Optional, Union

from solcover.coverage.fragment import CoverageFragment
from solcover.coverage.source_file import SourceFileCoverage
from solcover.coverage.trace import Trace
from solcover.exceptions import CompilerOutputError
from solcover.support.support_args import args

log = logging.getLogger(__name__)

PathType = Union[str, os.PathLike]


class ProjectCoverage:
    """Dispatches compiler output and traces to the :class:`SourceFileCoverage`
    of every file.

    Files are keyed by the name the compiler knows them by: the path
    relative to ``base_dir`` when given, the file name otherwise.
    """

    def __init__(
        self,
        paths: Union[PathType, Iterable[PathType]],
        base_dir: Optional[PathType] = None,
    ) -> None:
        if isinstance(paths, (str, os.PathLike)):
            paths = [paths]

        self.files = {}  # type: Dict[str, SourceFileCoverage]
        for path in paths:
            path = os.fspath(path)
            with open(path, "rb") as f:
                text = f.read().decode("utf-8")
            filename = self._display_name(path, base_dir)
            self.files[filename] = SourceFileCoverage(filename, path, text)

    @staticmethod
    def _display_name(path: str, base_dir: Optional[PathType]) -> str:
        if base_dir is None:
            return os.path.basename(path)
        return os.path.relpath(path, os.fspath(base_dir)).replace(os.sep, "/")

    def to_compiler_inputs(self) -> Dict[str, Dict[str, str]]:
        """Returns the ``sources`` section of a solc standard JSON input.

        :return: filename -> {"content": text}
        """
        return {
            filename: {"content": unit.text} for filename, unit in self.files.items()
        }

    def ingest_compiler_output(self, output: dict) -> None:
        """Hands every tracked file its part of a solc standard JSON output.

        Files that fail to decode keep their previous state, the other files
        are still ingested. A :class:`CompilerOutputError` naming the failed
        files is raised afterwards.

        :param output: The solc standard JSON output
        """
        contracts = output.get("contracts", {})
        sources = output.get("sources", {})

        failed = {}  # type: Dict[str, CompilerOutputError]
        filenames = list(contracts)
        filenames += [name for name in sources if name not in contracts]
        for filename in filenames:
            if filename not in self.files:
                log.warning("Compiler output for untracked file {}".format(filename))
                continue
            try:
                self.files[filename].ingest_compiler_output(
                    contracts.get(filename, {}), sources.get(filename)
                )
            except CompilerOutputError as e:
                log.error(
                    "Could not ingest compiler output for {}: {}".format(filename, e)
                )
                failed[filename] = e

        if failed:
            raise CompilerOutputError(
                "Could not ingest compiler output for {}".format(
                    ", ".join(
                        "{} ({})".format(filename, error)
                        for filename, error in failed.items()
                    )
                )
            )

    def _reported_files(self):
        for filename, unit in self.files.items():
            if args.skip_interfaces and unit.is_interface():
                log.debug("Skipping {}, it contains no code".format(filename))
                continue
            yield filename, unit

    def record_trace(
        self, trace: Union[Trace, dict, list]
    ) -> Dict[str, CoverageFragment]:
        """Replays a trace against every file.

        :param trace: The executed steps, see :meth:`Trace.load`
        :return: filename -> cumulative coverage of the file
        """
        trace = Trace.load(trace)
        return {
            filename: unit.record_trace(trace)
            for filename, unit in self._reported_files()
        }

    def report(self) -> Dict[str, dict]:
        """Returns the cumulative coverage of every file in the istanbul format.

        :return: filename -> coverage
        """
        return {
            filename: unit.coverage.to_dict()
            for filename, unit in self._reported_files()
        }
