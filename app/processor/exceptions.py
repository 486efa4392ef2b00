class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class InputFileError(ProcessorError):
    """Raised when the uploaded source file cannot be read from disk."""


class NoValidPagesError(ProcessorError):
    """Raised when the page selection leaves nothing to convert."""


class PipelineStateError(ProcessorError):
    """Raised on a transition the pipeline state machine does not allow."""
