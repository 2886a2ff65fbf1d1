"""This module contains general exceptions used by solcover."""


class SolcoverBaseException(Exception):
    """The solcover exception base type."""

    pass


class CompilerOutputError(SolcoverBaseException):
    """A solcover exception denoting compiler output that cannot be ingested."""

    pass


class SourceMapDecodeError(CompilerOutputError):
    """A solcover exception denoting a malformed compact source map entry."""

    pass


class BytecodeDecodeError(CompilerOutputError):
    """A solcover exception denoting bytecode that is not valid hex."""

    pass


class SequencingError(SolcoverBaseException):
    """A solcover exception denoting that a trace was recorded before the
    compiler output was ingested."""

    pass


class PositionError(SolcoverBaseException, ValueError):
    """A solcover exception denoting an offset or range outside of a source file."""

    pass


class TraceError(SolcoverBaseException, ValueError):
    """A solcover exception denoting tracer output that holds no steps, e.g. a
    JSON-RPC error response."""

    pass
