import json
import re
from pathlib import Path
from typing import Any, Optional, Union

def load_json_file(filepath: Union[str, Path], entity_name: str = "JSON file") -> Optional[Any]:
    """Loads a JSON file with comprehensive error handling."""
    path = Path(filepath)
    if not path.exists():
        print(f"ERROR: Cannot load {entity_name}. File not found at: {path}")
        return None
    try:
        with open(path, "r", encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        print(f"ERROR: Failed to decode {entity_name} from {path}: {e}")
        return None
    except OSError as e:
        print(f"ERROR: Unexpected error loading {entity_name} from {path}: {e}")
        return None

def save_json_file(filepath: Union[str, Path], data: Any, entity_name: str = "JSON file") -> bool:
    """Saves data to a JSON file."""
    try:
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding='utf-8') as f:
            json.dump(data, f, indent=4, ensure_ascii=False)
        return True
    except (OSError, TypeError) as e:
        print(f"ERROR: Failed to save {entity_name} to {filepath}: {e}")
        return False

def load_text_file(filepath: Union[str, Path], entity_name: str = "Text file") -> Optional[str]:
    """Loads a plain text file."""
    path = Path(filepath)
    if not path.exists():
        print(f"ERROR: Cannot load {entity_name}. File not found at: {path}")
        return None
    try:
        with open(path, "r", encoding='utf-8') as f:
            return f.read()
    except OSError as e:
        print(f"ERROR: Error reading {entity_name} from {path}: {e}")
        return None

def load_prompt(filepath: Union[str, Path], entity_name: str = "Prompt") -> Optional[str]:
    """
    Loads a prompt template from timewise/prompt. Returns None when the file is
    missing or holds only whitespace, so agents can report a configuration failure.
    """
    text = load_text_file(filepath, entity_name)
    if text is None:
        return None
    text = text.strip()
    if not text:
        print(f"ERROR: {entity_name} at {filepath} is empty.")
        return None
    return text

def extract_json_from_response(raw_text: str) -> Optional[Any]:
    """
    Robustly extracts a JSON object or array from a string (LLM response).
    Handles markdown code blocks and raw JSON strings.
    Returns None when nothing parseable is found.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        return None

    # 1. Plain JSON, the common case when the request asked for a JSON mime type
    try:
        return json.loads(raw_text)
    except json.JSONDecodeError:
        pass

    # 2. Markdown code blocks: ```json ... ``` or just ``` ... ```
    match = re.search(r'```(?:json)?\s*([\s\S]*?)\s*```', raw_text, re.DOTALL)
    if match:
        json_str = match.group(1)
    else:
        # 3. Fallback: first open brace/bracket to the matching last close brace/bracket
        start_brace = raw_text.find('{')
        start_bracket = raw_text.find('[')

        if start_brace == -1 and start_bracket == -1:
            return None

        if start_bracket != -1 and (start_brace == -1 or start_bracket < start_brace):
            start_index = start_bracket
            end_index = raw_text.rfind(']')
        else:
            start_index = start_brace
            end_index = raw_text.rfind('}')

        if end_index > start_index:
            json_str = raw_text[start_index : end_index + 1]
        else:
            json_str = raw_text

    try:
        return json.loads(json_str)
    except json.JSONDecodeError:
        return None
