"""
Persistent preferences: tree history, last active block and format version
"""
import json
import os
from typing import Any, Dict, Optional


class Preferences:
    """A small JSON key-value document"""

    def __init__(self, file_path: str):
        self.file_path = file_path
        self.values: Dict[str, Any] = {}

    def load(self) -> None:
        if not os.path.exists(self.file_path):
            self.values = {}
            return
        with open(self.file_path, "r", encoding="utf-8") as f:
            self.values = json.load(f)

    def save(self) -> None:
        with open(self.file_path, "w", encoding="utf-8") as f:
            json.dump(self.values, f, indent=2)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self.values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a value and write the document"""
        self.values[key] = value
        self.save()

    def reset(self, values: Dict[str, Any]) -> None:
        """Replace every value and write the document"""
        self.values = dict(values)
        self.save()
