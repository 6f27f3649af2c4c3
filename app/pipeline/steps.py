import mimetypes
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from timewise.utils.config import STORE_FILE

# --- AGENTS ---
from timewise.agents.parser import TimetableParserAgent
from timewise.agents.chat import ChatAgent, RESCHEDULE_TOOL_NAME

# --- STATE ---
from timewise.models.results import PipelineFailure
from timewise.models.schemas import ChatReply, Timetable, ToolInvocation
from timewise.store.app_store import AppState, AppStore


def guess_mime_type(image_path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(str(image_path))
    return mime_type or "image/png"


def open_store(path: Optional[Path] = None) -> AppStore:
    return AppStore(path or STORE_FILE)


async def parse_schedule(image_bytes: bytes, mime_type: str, **agent_kwargs) -> Union[Timetable, PipelineFailure]:
    print("\n--- Step: Timetable Parser ---")
    agent = TimetableParserAgent(**agent_kwargs)
    return await agent.parse(image_bytes, mime_type)


async def import_timetable(store: AppStore, image_path: Path, **agent_kwargs) -> Union[AppState, PipelineFailure]:
    """Parses the image and replaces the stored timetable. The store is untouched on failure."""
    image_path = Path(image_path)
    result = await parse_schedule(image_path.read_bytes(), guess_mime_type(image_path), **agent_kwargs)
    if isinstance(result, PipelineFailure):
        print(f"ERROR: Timetable import failed ({result.kind.value}): {result.message}")
        return result

    store.set_timetable(result)
    return store.sync_attendance()


def apply_tool_invocations(store: AppStore, invocations: Iterable[ToolInvocation]) -> List[str]:
    """Executes the function calls the chat model asked for. Returns one note per call."""
    notes = []
    for invocation in invocations:
        if invocation.name != RESCHEDULE_TOOL_NAME:
            notes.append(f"Ignored unknown action '{invocation.name}'.")
            continue

        args = invocation.args
        subject = str(args.get("subject") or "")
        from_day, to_day = str(args.get("fromDay") or ""), str(args.get("toDay") or "")
        if not subject.strip() or not from_day.strip() or not to_day.strip():
            notes.append(f"Incomplete reschedule request (subject={subject!r}, fromDay={from_day!r}, toDay={to_day!r}); nothing was moved.")
            continue

        before = store.state
        after = store.reschedule_class(subject, from_day, to_day)
        if after is before:
            notes.append(f"Could not find '{subject}' on {from_day}; nothing was moved.")
        else:
            notes.append(f"Rescheduled {subject} from {from_day} to {to_day}.")
    return notes


async def chat(query: str, context: Dict[str, Any], **agent_kwargs) -> Union[ChatReply, PipelineFailure]:
    print("\n--- Step: Chat ---")
    agent = ChatAgent(**agent_kwargs)
    return await agent.chat(query, context)


async def ask_assistant(store: AppStore, query: str, **agent_kwargs) -> Union[ChatReply, PipelineFailure]:
    """Chat with the stored state as context, then apply whatever actions the model requested."""
    result = await chat(query, store.state.chat_context(), **agent_kwargs)
    if isinstance(result, PipelineFailure):
        return result

    for note in apply_tool_invocations(store, result.tool_invocations):
        print(f"ACTION: {note}")
    return result
