import asyncio

from app.pipeline.steps import ask_assistant, open_store
from timewise.models.results import PipelineFailure

def main():
    print("--- Chat Runner --- (empty line to quit)")
    store = open_store()
    print(f"State file: {store.path} ({len(store.state.timetable)} day(s) loaded)")

    while True:
        query = input("\nYou: ").strip()
        if not query: break
        result = asyncio.run(ask_assistant(store, query, run_name="chat_runner"))
        if isinstance(result, PipelineFailure):
            print(f"ERROR: {result.message}")
            continue
        print(f"TimeWise AI: {result.reply or '(action only)'}")

if __name__ == "__main__":
    main()
