from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# 1. What gets tried: one (api version, model) pair
class ModelCandidate(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_version: str = Field(description="Gemini endpoint version, e.g. 'v1beta'")
    model: str = Field(description="Model identifier, e.g. 'gemini-2.0-flash'")

    @property
    def label(self) -> str:
        return f"{self.api_version}/{self.model}"


class ErrorKind(str, Enum):
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    MALFORMED_OUTPUT = "malformed_output"


# 2. What happened on one attempt
class AttemptRecord(BaseModel):
    candidate: ModelCandidate
    succeeded: bool
    duration: float = 0.0
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


# 3. Requester outcome: exactly one of these two
class RequestSuccess(BaseModel):
    payload: Any
    candidate: ModelCandidate
    attempts: List[AttemptRecord] = Field(default_factory=list)


class RequestFailure(BaseModel):
    last_error: str
    last_error_kind: ErrorKind = ErrorKind.UPSTREAM_UNAVAILABLE
    last_candidate: Optional[ModelCandidate] = None
    attempts: List[AttemptRecord] = Field(default_factory=list)


RequestOutcome = Union[RequestSuccess, RequestFailure]


# 4. Terminal failure handed across the pipeline boundary
class FailureKind(str, Enum):
    CONFIGURATION = "configuration"
    EXHAUSTED = "exhausted"


class PipelineFailure(BaseModel):
    kind: FailureKind
    message: str
    cause: Optional[ErrorKind] = None
    candidate: Optional[ModelCandidate] = None
    attempts: List[AttemptRecord] = Field(default_factory=list)

    @classmethod
    def from_request_failure(cls, failure: RequestFailure) -> "PipelineFailure":
        return cls(
            kind=FailureKind.EXHAUSTED,
            message=failure.last_error,
            cause=failure.last_error_kind,
            candidate=failure.last_candidate,
            attempts=failure.attempts,
        )
