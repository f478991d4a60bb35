"""Failure types; each carries the ``error_code`` logged on STAGE_FAIL."""


class PipelineError(Exception):
    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Bad or missing YAML config, run date, or overrides file."""

    error_code = "CONFIG_ERROR"


class ContractError(PipelineError):
    """A persisted file does not have the shape the next stage expects."""

    error_code = "CONTRACT_ERROR"


class StageError(PipelineError):
    error_code = "STAGE_ERROR"


class MissingInputError(StageError):
    """The file a stage reads was never produced by the stage before it."""

    error_code = "MISSING_INPUT"
