import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from google.genai import types

from timewise.agents.base import BaseAgent
from timewise.exceptions import LLMInvalidResponseError
from timewise.models.results import FailureKind, ModelCandidate, PipelineFailure
from timewise.models.schemas import DAY_ORDER, ChatReply, ToolInvocation
from timewise.utils.config import CHAT_PROMPT_FILE, CHAT_TEMPERATURE, MAX_OUTPUT_TOKENS
from timewise.utils.file_io import load_prompt

RESCHEDULE_TOOL_NAME = "reschedule_class"

ASSISTANT_GREETING = "Understood! I'm ready to help you manage your schedule. How can I assist you today?"


def build_reschedule_tool() -> types.Tool:
    return types.Tool(function_declarations=[
        types.FunctionDeclaration(
            name=RESCHEDULE_TOOL_NAME,
            description="Reschedule a class period from one day to another.",
            parameters=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "subject": types.Schema(type=types.Type.STRING,
                                            description="The name of the subject/class to move."),
                    "fromDay": types.Schema(type=types.Type.STRING, enum=DAY_ORDER,
                                            description="The current day of the class."),
                    "toDay": types.Schema(type=types.Type.STRING, enum=DAY_ORDER,
                                          description="The day to move the class to."),
                },
                required=["subject", "fromDay", "toDay"],
            ),
        )
    ])


def build_message(query: str, context: Any) -> str:
    return f"Context: {json.dumps(context, ensure_ascii=False, default=str)}\nUser Query: {query}"


class ChatAgent(BaseAgent):
    def __init__(self, run_name: Optional[str] = None, prompt_file: Path = CHAT_PROMPT_FILE, **kwargs):
        super().__init__(agent_name="chat", run_name=run_name, **kwargs)
        self.prompt_file = prompt_file

    def generation_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=CHAT_TEMPERATURE,
            max_output_tokens=MAX_OUTPUT_TOKENS,
            tools=[build_reschedule_tool()],
        )

    @staticmethod
    def _to_reply(response: Any) -> ChatReply:
        calls = getattr(response, "function_calls", None) or []
        invocations = [ToolInvocation(name=call.name, args=dict(call.args or {})) for call in calls]
        text = getattr(response, "text", None) or ""
        if not text.strip() and not invocations:
            raise LLMInvalidResponseError("Model returned neither text nor a function call.")
        return ChatReply(reply=text.strip(), tool_invocations=invocations)

    async def chat(self, query: str, context: Dict[str, Any]) -> Union[ChatReply, PipelineFailure]:
        """
        Relays one question plus the serialized app context to the model.
        Function calls come back untouched in `tool_invocations`.
        """
        system_prompt = load_prompt(self.prompt_file, "Chat Prompt")
        if not system_prompt:
            return PipelineFailure(kind=FailureKind.CONFIGURATION,
                                   message=f"Chat prompt missing or empty at {self.prompt_file}")

        # System prompt travels as a priming exchange rather than system_instruction.
        contents = [
            types.Content(role="user", parts=[types.Part.from_text(text=system_prompt)]),
            types.Content(role="model", parts=[types.Part.from_text(text=ASSISTANT_GREETING)]),
            types.Content(role="user", parts=[types.Part.from_text(text=build_message(query, context))]),
        ]
        config = self.generation_config()
        log_context = {"query": query[:200]}

        async def attempt(client: Any, candidate: ModelCandidate) -> ChatReply:
            response = await client.aio.models.generate_content(
                model=candidate.model,
                contents=contents,
                config=config,
            )
            self.log_raw_response(candidate, response, log_context)
            return self._to_reply(response)

        outcome = await self.call_llm(attempt, log_context)
        if isinstance(outcome, PipelineFailure):
            return outcome

        reply = outcome.payload
        for invocation in reply.tool_invocations:
            self.logger.log("TOOL_CALL", {"summary": f"{invocation.name}({invocation.args})"})
        return reply
