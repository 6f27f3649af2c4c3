import asyncio
from pathlib import Path

from timewise.agents.parser import TimetableParserAgent
from timewise.models.results import PipelineFailure
from timewise.models.schemas import dump_timetable
from timewise.utils.config import DATA_DIR
from timewise.utils.file_io import save_json_file
from app.pipeline.steps import guess_mime_type

def main():
    print("--- Timetable Parser Runner ---")
    while True:
        image_path = Path(input("Enter path to timetable image: ").strip())
        if image_path.is_file(): break
        print("Invalid file.")
    tag = input("Enter run tag: ").strip() or "default"

    agent = TimetableParserAgent(run_name=tag)
    result = asyncio.run(agent.parse(image_path.read_bytes(), guess_mime_type(image_path)))

    if isinstance(result, PipelineFailure):
        print(f"FAILED ({result.kind.value}): {result.message}")
        for attempt in result.attempts:
            print(f"  {attempt.candidate.label}: {attempt.error}")
        return

    out_path = DATA_DIR / f"parsed_timetable_{tag}.json"
    save_json_file(out_path, dump_timetable(result), "Parsed Timetable")
    print(f"Done. Output: {out_path}")

if __name__ == "__main__":
    main()
