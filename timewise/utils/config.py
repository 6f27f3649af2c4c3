import os
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from timewise.models.results import ModelCandidate

# --- Core Path Configuration ---
PACKAGE_ROOT = Path(__file__).resolve().parent.parent
PROJECT_ROOT = PACKAGE_ROOT.parent

# Load environment variables from a .env file at the project root
dotenv_path = PROJECT_ROOT / '.env'
load_dotenv(dotenv_path=dotenv_path)

# --- API Configuration ---
# Checked in order, the first non-empty value wins.
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")


def get_api_key(environ: Optional[Mapping[str, str]] = None) -> str:
    """Returns the Gemini credential, or an empty string when none is set."""
    env = os.environ if environ is None else environ
    for name in API_KEY_ENV_VARS:
        value = (env.get(name) or "").strip()
        if value:
            return value
    return ""


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.environ.get(name, "")
    items = [item.strip() for item in raw.split(",") if item.strip()]
    return items or list(default)


# --- Model Configuration ---
# Cheaper/faster models first, more capable ones as later fallbacks.
DEFAULT_MODELS = [
    "gemini-2.0-flash-lite",
    "gemini-2.0-flash",
    "gemini-2.5-flash",
    "gemini-2.5-pro",
]
DEFAULT_API_VERSIONS = ["v1beta", "v1"]

MODELS = _env_list("TIMEWISE_MODELS", DEFAULT_MODELS)
API_VERSIONS = _env_list("TIMEWISE_API_VERSIONS", DEFAULT_API_VERSIONS)


def build_model_candidates(models: Optional[List[str]] = None,
                           api_versions: Optional[List[str]] = None) -> List[ModelCandidate]:
    """Model-major ordering: every api version of a model before the next model."""
    models = MODELS if models is None else models
    api_versions = API_VERSIONS if api_versions is None else api_versions
    return [
        ModelCandidate(api_version=version, model=model)
        for model in models
        for version in api_versions
    ]


# --- LLM Call Settings ---
PARSER_TEMPERATURE = 0.1
CHAT_TEMPERATURE = 0.7
MAX_OUTPUT_TOKENS = 8192
PARSER_JSON_MODE = True

# --- Normalizer Settings ---
# Hours below the cutoff (and above 0) are read as PM when no AM/PM marker is given.
PM_CUTOFF = int(os.environ.get("TIMEWISE_PM_CUTOFF", "6"))
AFTERNOON_HOURS = range(1, max(PM_CUTOFF, 1))

# --- Attendance ---
ATTENDANCE_TARGET = 0.75
ATTENDANCE_GOOD_PERCENT = 85

# --- Directory Paths ---
DATA_DIR = Path(os.environ.get("TIMEWISE_DATA_DIR", PROJECT_ROOT / "data"))
LOG_DIR = Path(os.environ.get("TIMEWISE_LOG_DIR", PROJECT_ROOT / "log"))
PROMPT_DIR = PACKAGE_ROOT / "prompt"

# --- Static File Paths ---
STORE_FILE = Path(os.environ.get("TIMEWISE_STORE_FILE", DATA_DIR / "timewise_state.json"))
TIMETABLE_PROMPT_FILE = PROMPT_DIR / "timetable_parser.txt"
CHAT_PROMPT_FILE = PROMPT_DIR / "chat_system.txt"

# --- Initial Check ---
if not get_api_key():
    print("WARNING: Neither GEMINI_API_KEY nor GOOGLE_API_KEY is set. LLM calls will fail.")
