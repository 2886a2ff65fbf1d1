"""This module contains the model of execution traces as produced by
``debug_traceTransaction`` style tracers."""
from typing import Iterable, List, Optional, Union

from solcover.exceptions import TraceError
from solcover.support.opcodes import normalize_opcode_name


class TraceStep:
    """One executed instruction.

    :param pc: The byte address of the instruction in the executing code
    :param op: The mnemonic reported by the tracer, if any
    :param depth: The call depth the instruction was executed at
    """

    def __init__(self, pc: Optional[int], op: Optional[str] = None, depth: int = 1):
        self.pc = pc
        self.op = normalize_opcode_name(op) if op else None
        self.depth = depth

    @classmethod
    def from_dict(cls, step: dict) -> "TraceStep":
        return cls(step.get("pc"), step.get("op"), step.get("depth", 1))

    def __repr__(self) -> str:
        return "<TraceStep {} {} @{}>".format(self.pc, self.op, self.depth)


class CallFrame:
    """The steps executed by one call, excluding the steps of nested calls."""

    def __init__(self, depth: int) -> None:
        self.depth = depth
        self.steps = []  # type: List[TraceStep]

    def __len__(self) -> int:
        return len(self.steps)


class Trace:
    """An ordered sequence of executed instructions."""

    def __init__(self, steps: Iterable[TraceStep]) -> None:
        self.steps = list(steps)

    def __len__(self) -> int:
        return len(self.steps)

    @classmethod
    def load(cls, trace: Union["Trace", dict, list]) -> "Trace":
        """Builds a trace from tracer output.

        Accepts a :class:`Trace`, a list of steps, a ``{"structLogs": [...]}``
        object or a JSON-RPC response wrapping one.

        :param trace:
        :return:
        """
        if isinstance(trace, Trace):
            return trace
        if isinstance(trace, dict):
            if "error" in trace:
                raise TraceError("Tracer returned an error: {}".format(trace["error"]))
            if "result" in trace:
                trace = trace["result"]
            if not isinstance(trace, dict):
                raise TraceError("Tracer response holds no structLogs")
            trace = trace.get("structLogs", [])
        return cls(
            step if isinstance(step, TraceStep) else TraceStep.from_dict(step)
            for step in trace
        )

    def frames(self) -> List[CallFrame]:
        """Splits the trace into call frames using the call depth of every step.

        Steps executed after a nested call returns belong to the frame of
        the caller again.

        :return: The frames in the order they were entered
        """
        frames = []  # type: List[CallFrame]
        active = []  # type: List[CallFrame]
        for step in self.steps:
            while active and active[-1].depth > step.depth:
                active.pop()
            if not active or active[-1].depth < step.depth:
                frame = CallFrame(step.depth)
                frames.append(frame)
                active.append(frame)
            active[-1].steps.append(step)
        return frames
