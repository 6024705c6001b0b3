import copy
import json
from pathlib import Path
from typing import Any, Dict


class TestDataLoader:
    """Actors and host object snapshots shared by the tests (test_data.json)"""

    _data: Dict[str, Any] = None

    @classmethod
    def load(cls) -> Dict[str, Any]:
        if cls._data is None:
            with open(Path(__file__).parent / "test_data.json") as f:
                cls._data = json.load(f)
        return cls._data

    @classmethod
    def get(cls, key: str) -> Any:
        return cls.load().get(key)

    @classmethod
    def get_copy(cls, key: str) -> Any:
        return copy.deepcopy(cls.get(key))

    @classmethod
    def object_payload(cls, object_type: str, key: str) -> Dict[str, Any]:
        """A snapshot entry of an observation request's `objects` list"""
        return {"type": object_type, "snapshot": cls.get_copy(key)}
