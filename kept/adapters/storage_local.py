from __future__ import annotations
import json, os, tempfile
from typing import Any, Dict, Optional

from kept.domain.ports import KeyValueStorePort, SettingsStoragePort


class StorageLocal(KeyValueStorePort, SettingsStoragePort):
    """Local filesystem storage for the key-value store and user settings (JSON).

    Both files live under ``root_dir``, are written atomically and are only
    readable by the current user.
    """

    KV_FILENAME = "kept_store.json"
    SETTINGS_FILENAME = "user_settings.json"
    FILE_MODE = 0o600

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir

    # ---- Key-value store ----
    def get(self, key: str) -> Optional[str]:
        value = self._load_store().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"StorageLocal.set expects a string value for '{key}'")
        store = self._load_store()
        store[key] = value
        self._write_json(self.KV_FILENAME, store)

    def delete(self, key: str) -> None:
        store = self._load_store()
        if key not in store:
            return
        del store[key]
        self._write_json(self.KV_FILENAME, store)

    # ---- User settings (JSON) ----
    def save_user_settings(self, payload: Dict[str, Any]) -> None:
        self._write_json(self.SETTINGS_FILENAME, payload)

    def load_user_settings(self) -> Optional[Dict[str, Any]]:
        path = self._path(self.SETTINGS_FILENAME)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else None

    # ---- Helpers ----
    def _path(self, filename: str) -> str:
        return os.path.join(self.root, filename)

    def _load_store(self) -> Dict[str, Any]:
        path = self._path(self.KV_FILENAME)
        if not os.path.exists(path):
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError:
            # unreadable store behaves like an empty one
            return {}
        return data if isinstance(data, dict) else {}

    def _write_json(self, filename: str, payload: Dict[str, Any]) -> None:
        os.makedirs(self.root or ".", exist_ok=True)
        target = self._path(filename)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{filename}.", dir=self.root or ".")
        try:
            os.chmod(tmp_path, self.FILE_MODE)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, target)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
