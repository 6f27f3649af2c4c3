import time
from pathlib import Path
from typing import Any, Collection, Optional, Union

from google.genai import types

from timewise.agents.base import BaseAgent
from timewise.constraints import TimetableValidator
from timewise.exceptions import LLMInvalidResponseError
from timewise.models.results import FailureKind, ModelCandidate, PipelineFailure
from timewise.models.schemas import Timetable
from timewise.processing.normalizer import ScheduleNormalizer
from timewise.utils.config import (
    MAX_OUTPUT_TOKENS, PARSER_JSON_MODE, PARSER_TEMPERATURE, TIMETABLE_PROMPT_FILE
)
from timewise.utils.file_io import extract_json_from_response, load_prompt


class TimetableParserAgent(BaseAgent):
    def __init__(self, run_name: Optional[str] = None, prompt_file: Path = TIMETABLE_PROMPT_FILE,
                 afternoon_hours: Optional[Collection[int]] = None, **kwargs):
        super().__init__(agent_name="parser", run_name=run_name, **kwargs)
        self.prompt_file = prompt_file
        self.afternoon_hours = afternoon_hours
        self.validator = TimetableValidator()

    def generation_config(self) -> types.GenerateContentConfig:
        if PARSER_JSON_MODE:
            return types.GenerateContentConfig(
                temperature=PARSER_TEMPERATURE,
                max_output_tokens=MAX_OUTPUT_TOKENS,
                response_mime_type="application/json",
            )
        return types.GenerateContentConfig(
            temperature=PARSER_TEMPERATURE,
            max_output_tokens=MAX_OUTPUT_TOKENS,
        )

    def _to_timetable(self, raw_text: Optional[str], log_context: dict) -> Timetable:
        if not raw_text or not raw_text.strip():
            raise LLMInvalidResponseError("Model returned an empty response.")

        payload = extract_json_from_response(raw_text)
        if payload is None:
            raise LLMInvalidResponseError("Model response is not valid JSON.", response=raw_text)

        normalizer = ScheduleNormalizer(self.afternoon_hours)
        timetable = normalizer.normalize(payload)
        for warning in normalizer.warnings:
            self.logger.log("WARNING", {**log_context, "summary": warning})
        return timetable

    async def parse(self, image_bytes: bytes, mime_type: str) -> Union[Timetable, PipelineFailure]:
        """
        Image -> canonical Timetable, trying every configured model in turn.
        Returns a PipelineFailure instead of raising when nothing works.
        """
        self.logger.log("MILESTONE", {"summary": "--- Timetable Parse Started ---"})
        start_time = time.time()

        prompt = load_prompt(self.prompt_file, "Timetable Prompt")
        if not prompt:
            return PipelineFailure(kind=FailureKind.CONFIGURATION,
                                   message=f"Timetable prompt missing or empty at {self.prompt_file}")

        contents = [
            types.Part.from_text(text=prompt),
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
        ]
        config = self.generation_config()
        log_context = {"mime_type": mime_type, "image_size": len(image_bytes)}

        async def attempt(client: Any, candidate: ModelCandidate) -> Timetable:
            response = await client.aio.models.generate_content(
                model=candidate.model,
                contents=contents,
                config=config,
            )
            self.log_raw_response(candidate, response, log_context)
            return self._to_timetable(getattr(response, "text", None), log_context)

        outcome = await self.call_llm(attempt, log_context)
        if isinstance(outcome, PipelineFailure):
            return outcome

        timetable = outcome.payload
        violations = self.validator.validate(timetable)
        if violations:
            self.logger.log("WARNING", {"summary": "Timetable invariant violations", "violations": violations})

        period_count = sum(len(d.periods) for d in timetable)
        self.logger.log("MILESTONE", {
            "summary": (
                f"--- Parsed {len(timetable)} day(s), {period_count} period(s) with "
                f"{outcome.candidate.label} in {time.time() - start_time:.2f}s ---"
            )
        })
        return timetable
