"""Exception classes for TimeWise.

Raised inside the pipeline and converted into ``PipelineFailure`` values by
the agents, so callers never have to catch them across the pipeline boundary.

    TimewiseError
    ├── ConfigurationError         missing credential, bad settings
    ├── LLMError
    │   └── LLMInvalidResponseError    text is not JSON / empty reply
    └── TimetableStructureError    JSON has no usable timetable shape
"""


class TimewiseError(Exception):
    """Base class for all project-specific errors."""
    pass


class ConfigurationError(TimewiseError):
    """Raised when the pipeline cannot start, e.g. no API credential."""
    pass


class LLMError(TimewiseError):
    """Base class for problems with a model reply."""
    pass


class LLMInvalidResponseError(LLMError):
    """The model replied, but the reply cannot be used.

    Attributes:
        response: the first 500 characters of the raw reply, if any
    """

    def __init__(self, message: str, response: str = None):
        super().__init__(message)
        self.response = response[:500] if response else response


class TimetableStructureError(TimewiseError):
    """Parsed JSON is neither a day array nor a day-keyed mapping.

    Attributes:
        payload_type: name of the top-level JSON type that was received
    """

    def __init__(self, message: str, payload_type: str = None):
        super().__init__(message)
        self.payload_type = payload_type
