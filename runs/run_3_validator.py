from pathlib import Path

from timewise.constraints.validator import TimetableValidator
from timewise.models.schemas import load_timetable
from timewise.utils.file_io import load_json_file

def main():
    print("--- Timetable Validator Script ---")
    while True:
        path = Path(input("Enter path to a timetable JSON file: ").strip())
        if path.is_file(): break
        print("Invalid file.")

    data = load_json_file(path, "Timetable")
    if data is None:
        return

    violations = TimetableValidator().validate(load_timetable(data))
    if not violations:
        print("Validation Complete. No violations found.")
        return

    print(f"Validation Complete. Days with violations: {len(violations)}")
    for day, messages in violations.items():
        for message in messages:
            print(f"  {day}: {message}")

if __name__ == "__main__":
    main()
