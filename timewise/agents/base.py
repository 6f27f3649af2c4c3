import time
import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from google import genai
from google.genai import types
from pydantic import ValidationError

from timewise.exceptions import ConfigurationError, LLMInvalidResponseError, TimetableStructureError
from timewise.models.results import (
    AttemptRecord, ErrorKind, ModelCandidate, PipelineFailure, FailureKind,
    RequestFailure, RequestOutcome, RequestSuccess
)
from timewise.utils.config import build_model_candidates, get_api_key
from timewise.utils.logger import DetailedLogger

# (api_key, api_version) -> client exposing `.aio.models.generate_content`
ClientFactory = Callable[[str, str], Any]
# (client, candidate) -> payload; raising means "try the next candidate"
Attempt = Callable[[Any, ModelCandidate], Awaitable[Any]]


def default_client_factory(api_key: str, api_version: str) -> genai.Client:
    return genai.Client(api_key=api_key, http_options=types.HttpOptions(api_version=api_version))


def classify_error(error: Exception) -> ErrorKind:
    if isinstance(error, (LLMInvalidResponseError, TimetableStructureError, ValidationError)):
        return ErrorKind.MALFORMED_OUTPUT
    return ErrorKind.UPSTREAM_UNAVAILABLE


def describe_error(error: Exception) -> str:
    message = str(error).strip()
    return message or type(error).__name__


class FallbackRequester:
    """
    Tries each (api version, model) candidate in order until one attempt succeeds.

    Requests run one after another. Every failure is recorded and the loop
    moves on; the same candidate is never retried.
    """

    def __init__(self, candidates: Sequence[ModelCandidate], api_key: str,
                 logger: DetailedLogger, client_factory: Optional[ClientFactory] = None):
        self.candidates = list(candidates)
        self.api_key = api_key
        self.logger = logger
        self.client_factory = client_factory or default_client_factory
        self._clients: Dict[str, Any] = {}

    def _client_for(self, candidate: ModelCandidate) -> Any:
        if candidate.api_version not in self._clients:
            self._clients[candidate.api_version] = self.client_factory(self.api_key, candidate.api_version)
        return self._clients[candidate.api_version]

    async def run(self, attempt: Attempt, log_context: Optional[Dict[str, Any]] = None) -> RequestOutcome:
        log_context = log_context or {}
        records: List[AttemptRecord] = []
        last_error = "No model candidates configured."
        last_kind = ErrorKind.UPSTREAM_UNAVAILABLE

        for index, candidate in enumerate(self.candidates, start=1):
            self.logger.log("INFO", {
                **log_context,
                "summary": f"Attempt {index}/{len(self.candidates)} with {candidate.label}",
            })
            start_time = time.time()
            try:
                client = self._client_for(candidate)
                payload = await attempt(client, candidate)
            except Exception as e:
                last_error = describe_error(e)
                last_kind = classify_error(e)
                records.append(AttemptRecord(
                    candidate=candidate, succeeded=False, duration=time.time() - start_time,
                    error=last_error, error_kind=last_kind,
                ))
                self.logger.log("ERROR", {
                    **log_context,
                    "summary": f"{candidate.label} failed ({last_kind.value}): {last_error}",
                })
                continue

            records.append(AttemptRecord(candidate=candidate, succeeded=True, duration=time.time() - start_time))
            self.logger.log("SUCCESS", {**log_context, "summary": f"Request satisfied by {candidate.label}"})
            return RequestSuccess(payload=payload, candidate=candidate, attempts=records)

        return RequestFailure(
            last_error=last_error,
            last_error_kind=last_kind,
            last_candidate=records[-1].candidate if records else None,
            attempts=records,
        )


class BaseAgent:
    def __init__(
        self,
        agent_name: str,
        run_name: Optional[str] = None,
        candidates: Optional[Sequence[ModelCandidate]] = None,
        client_factory: Optional[ClientFactory] = None,
        logger: Optional[DetailedLogger] = None,
        api_key: Optional[str] = None,
    ):
        self.agent_name = agent_name
        self.run_name = run_name or datetime.datetime.now().strftime("run_%Y%m%d_%H%M%S")
        self.candidates = list(candidates) if candidates is not None else build_model_candidates()
        self.client_factory = client_factory
        self.logger = logger or DetailedLogger(agent_name=agent_name, run_name=self.run_name)
        self._api_key = api_key

    def _require_api_key(self) -> str:
        api_key = (self._api_key if self._api_key is not None else get_api_key()).strip()
        if not api_key:
            raise ConfigurationError("Gemini API key missing: set GEMINI_API_KEY or GOOGLE_API_KEY.")
        return api_key

    def log_raw_response(self, candidate: ModelCandidate, response: Any, log_context: Dict[str, Any]):
        meta = getattr(response, "usage_metadata", None)
        self.logger.log("LLM_RAW_OUTPUT_TEXT", {
            **log_context,
            "summary": f"Response from {candidate.label}",
            "model": candidate.model,
            "api_version": candidate.api_version,
            "raw_response_str": getattr(response, "text", None) or "",
        })
        if meta is not None:
            self.logger.log("USAGE", {
                **log_context,
                "summary": f"Tokens {candidate.label}: {getattr(meta, 'total_token_count', 0) or 0}",
                "in_tokens": getattr(meta, "prompt_token_count", 0) or 0,
                "out_tokens": getattr(meta, "candidates_token_count", 0) or 0,
            })

    async def call_llm(self, attempt: Attempt,
                       log_context: Optional[Dict[str, Any]] = None) -> Union[RequestSuccess, PipelineFailure]:
        """
        Runs `attempt` over the fallback chain.
        Returns the RequestSuccess, or a PipelineFailure (never raises for API or credential problems).
        """
        log_context = log_context or {}
        try:
            api_key = self._require_api_key()
        except ConfigurationError as e:
            self.logger.log("CRITICAL_ERROR", {**log_context, "summary": str(e)})
            return PipelineFailure(kind=FailureKind.CONFIGURATION, message=str(e))

        requester = FallbackRequester(self.candidates, api_key, self.logger, self.client_factory)
        outcome = await requester.run(attempt, log_context)

        if isinstance(outcome, RequestFailure):
            self.logger.log("FATAL_ERROR", {
                **log_context,
                "summary": f"All {len(outcome.attempts)} candidates failed. Last error: {outcome.last_error}",
            })
            return PipelineFailure.from_request_failure(outcome)
        return outcome
