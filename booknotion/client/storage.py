import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

AUTH_TOKEN_KEY = "authToken"
API_URL_KEY = "apiUrl"
# Образ SQLite в base64 от старых версий клиента
LEGACY_DB_KEY = "booknotion_db"


class ClientStorage:
    """Постоянное key/value хранилище клиента в JSON файле"""

    def __init__(self, path: str):
        self.path = os.path.expanduser(path)

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError:
                logger.warning(f"Client storage {self.path} is corrupted, starting empty")
                return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, Any]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)
