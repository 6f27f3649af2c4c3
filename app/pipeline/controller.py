import asyncio
import sys
from pathlib import Path

from app.pipeline.steps import ask_assistant, import_timetable, open_store
from timewise.models.results import PipelineFailure
from timewise.store.attendance import summarize


def print_timetable(store):
    state = store.state
    if not state.timetable:
        print("(no timetable stored)")
        return
    for day in state.timetable:
        print(f"\n{day.day}")
        for p in day.periods:
            room = f" @ {p.room}" if p.room else ""
            print(f"  {p.start_time}-{p.end_time}  {p.subject}{room}")


def print_attendance(store):
    for record in store.state.attendance:
        s = summarize(record)
        print(f"  {s.subject:<20} {s.attended}/{s.total} ({s.percentage}%) "
              f"[{s.status}] safe to miss: {s.safe_to_miss}, must attend: {s.must_attend}")


async def run_pipeline(command: str, argument: str) -> int:
    store = open_store()
    print(f"--- TIMEWISE: {command} (state: {store.path}) ---")

    if command == "import":
        image_path = Path(argument)
        if not image_path.is_file():
            print(f"CRITICAL ERROR: Image not found: {image_path}")
            return 1
        result = await import_timetable(store, image_path)
        if isinstance(result, PipelineFailure):
            return 1
        print_timetable(store)
        return 0

    if command == "chat":
        result = await ask_assistant(store, argument)
        if isinstance(result, PipelineFailure):
            print(f"ERROR: {result.message}")
            return 1
        print(f"\nTimeWise AI: {result.reply or '(action only)'}")
        return 0

    if command == "show":
        print_timetable(store)
        print("\nAttendance:")
        print_attendance(store)
        return 0

    print(f"Unknown command: {command}")
    return 2


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage:")
        print("  Import a timetable image: python -m app.pipeline.controller import <image_path>")
        print("  Ask the assistant:        python -m app.pipeline.controller chat \"<question>\"")
        print("  Show stored state:        python -m app.pipeline.controller show")
        print("\nExample: python -m app.pipeline.controller chat \"Move Physics from Monday to Friday\"")
        sys.exit(2)

    cmd = sys.argv[1]
    arg = " ".join(sys.argv[2:])
    sys.exit(asyncio.run(run_pipeline(cmd, arg)))
