"""Exception types raised by mailpipe."""


class PipelineError(Exception):
    pass


class ContractViolation(PipelineError):
    """A stage or builder was used in a way its contract does not allow.

    These are programming errors: the chain was wired by hand, or a builder
    was reused after ``build()``. They are never caught inside the package.
    """


class BuilderFinalizedError(ContractViolation):
    pass


class ConfigError(PipelineError, ValueError):
    pass
