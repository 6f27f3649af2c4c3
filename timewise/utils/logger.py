import json
import datetime
from pathlib import Path
from typing import Dict, Optional, Tuple

from .config import LOG_DIR

class DetailedLogger:
    """
    A centralized logger that saves logs to a structured directory.
    - Creates a main run log and a separate log for raw LLM responses.
    - Organizes logs into subdirectories for each agent (parser, chat, store).
    - One instance per (agent, run) pair, so every call in a run writes to the same files.
    """
    _instances: Dict[Tuple[str, str, str], "DetailedLogger"] = {}

    def __new__(cls, agent_name: str, run_name: str, log_dir: Optional[Path] = None):
        key = (agent_name, run_name, str(log_dir or LOG_DIR))
        if key not in cls._instances:
            cls._instances[key] = super(DetailedLogger, cls).__new__(cls)
        return cls._instances[key]

    def __init__(self, agent_name: str, run_name: str, log_dir: Optional[Path] = None):
        if hasattr(self, 'log_dir'):
            return

        self.agent_name = agent_name
        self.run_name = run_name

        # Structured log directory: log/{agent_name}/{run_name}/
        self.log_dir = Path(log_dir or LOG_DIR) / agent_name / run_name
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_file_main = self.log_dir / "run_main.log"
        self.log_file_llm_responses = self.log_dir / "llm_raw_responses.log"

    def log(self, message_type: str, data: dict):
        """
        Logs a message to the console and the appropriate log file.

        Args:
            message_type (str): The category of the log (e.g., "INFO", "ERROR", "LLM_RAW_OUTPUT_TEXT").
            data (dict): The data to be logged. Should contain a 'summary' key for console output.
        """
        log_entry = {
            "timestamp": datetime.datetime.now().isoformat(),
            "type": message_type,
            "data": data
        }

        summary = data.get('summary', str(data))
        print(f"LOG [{self.agent_name.upper()}|{message_type}]: {summary}")

        if message_type == "LLM_RAW_OUTPUT_TEXT":
            self._write_to_file(self.log_file_llm_responses, self._format_llm_log(data))
        else:
            self._write_to_file(self.log_file_main, json.dumps(log_entry, indent=2, default=str) + "\n---\n")

    def _format_llm_log(self, data: dict) -> str:
        """Helper to format raw LLM responses for readability."""
        timestamp = datetime.datetime.now().isoformat()
        header = (
            f"--- RAW RESPONSE | Model: {data.get('model', 'N/A')} "
            f"| API: {data.get('api_version', 'N/A')} @ {timestamp} ---\n"
        )
        content = data.get("raw_response_str") or "No content."
        footer = "\n--- END RAW RESPONSE ---\n\n"
        return header + content + footer

    def _write_to_file(self, filepath: Path, content: str):
        """Appends content to a specified file."""
        try:
            with open(filepath, "a", encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            print(f"CRITICAL: Failed to write to log file {filepath}: {e}")
