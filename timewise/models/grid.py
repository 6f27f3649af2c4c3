from typing import Dict, Tuple

# Printed timetable grid, column number -> (start, end).
# Column 3 (tea break) and column 6 (lunch) are breaks and have no entry:
# entries that start or end on them never become periods.
COLUMN_TIMES: Dict[int, Tuple[str, str]] = {
    1: ("09:00", "09:50"),
    2: ("09:50", "10:40"),
    4: ("11:00", "11:50"),
    5: ("11:50", "12:40"),
    7: ("13:30", "14:20"),
    8: ("14:20", "15:10"),
    9: ("15:10", "16:00"),
    10: ("16:00", "16:50"),
}

BREAK_COLUMNS = (3, 6)

# Slot numbers count teaching hours only, so they skip the breaks.
SLOT_START_TIMES: Dict[int, str] = {
    1: "09:00", 2: "09:50", 3: "11:00", 4: "11:50",
    5: "13:30", 6: "14:20", 7: "15:10", 8: "16:00",
}
SLOT_END_TIMES: Dict[int, str] = {
    1: "09:50", 2: "10:40", 3: "11:50", 4: "12:40",
    5: "14:20", 6: "15:10", 7: "16:00", 8: "16:50",
}
