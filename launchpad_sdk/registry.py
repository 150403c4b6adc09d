"""
Local registry of deployed and known tokens.
"""
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

import portalocker
from pydantic import ValidationError as ModelValidationError

from .exceptions import RegistryError
from .models import RegisteredToken

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_PATH = "~/.launchpad/tokens.json"


def _partition_key(chain_id: int, owner: str) -> str:
    return f"{int(chain_id)}:{owner.lower()}"


class LocalTokenRegistry:
    """
    Thread-safe and process-safe token registry.

    Entries are partitioned by ``(chain_id, owner)``. Appends never merge or
    deduplicate: deploying the same name/symbol twice yields two entries.
    Every read-modify-write runs under an in-process lock and a file lock,
    and neither is held across network calls.
    """

    def __init__(self, store_path: Optional[str] = None, lock_timeout: int = 10):
        """
        Initialize the registry.

        Args:
            store_path: Optional custom path for the registry file
            lock_timeout: Seconds to wait for the file lock
        """
        # Use LAUNCHPAD_REGISTRY_PATH env var or default to ~/.launchpad/tokens.json
        if store_path:
            self.store_path = Path(store_path)
        else:
            self.store_path = Path(os.path.expanduser(
                os.environ.get("LAUNCHPAD_REGISTRY_PATH", DEFAULT_REGISTRY_PATH)
            ))
        self.lock_timeout = lock_timeout
        self._lock = threading.RLock()
        self._ensure_store()

    def _ensure_store(self):
        try:
            self.store_path.parent.mkdir(parents=True, exist_ok=True)
            if not self.store_path.exists():
                with self._locked():
                    if not self.store_path.exists():
                        self._write({"tokens": {}})
        except (OSError, portalocker.exceptions.LockException) as e:
            raise RegistryError(f"Cannot initialise token registry at {self.store_path}: {str(e)}") from e

    def _get_lock_path(self) -> str:
        return str(self.store_path) + ".lock"

    def _locked(self) -> portalocker.Lock:
        return portalocker.Lock(self._get_lock_path(), timeout=self.lock_timeout)

    def _read(self) -> Dict[str, Any]:
        try:
            with open(self.store_path, "r") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {"tokens": {}}
        except json.JSONDecodeError as e:
            raise RegistryError(f"Token registry {self.store_path} is corrupt: {str(e)}") from e
        if not isinstance(data, dict) or not isinstance(data.get("tokens"), dict):
            raise RegistryError(f"Token registry {self.store_path} has an unexpected layout")
        return data

    def _write(self, data: Dict[str, Any]):
        tmp_path = self.store_path.with_suffix(self.store_path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.store_path)

    def _snapshot(self) -> Dict[str, Any]:
        with self._lock:
            try:
                with self._locked():
                    return self._read()
            except (OSError, portalocker.exceptions.LockException) as e:
                raise RegistryError(f"Failed to read token registry: {str(e)}") from e

    @staticmethod
    def _parse(entries: List[Dict[str, Any]]) -> List[RegisteredToken]:
        try:
            return [RegisteredToken.model_validate(entry) for entry in entries]
        except ModelValidationError as e:
            raise RegistryError(f"Invalid token entry in registry: {str(e)}") from e

    def record_deployed(self, token: RegisteredToken):
        """
        Append a token to its ``(chain_id, owner)`` partition.

        Args:
            token: Token to record

        Raises:
            RegistryError: If the registry cannot be updated
        """
        key = _partition_key(token.chain_id, token.owner_smart_account)
        entry = token.model_dump(by_alias=True)
        with self._lock:
            try:
                with self._locked():
                    store = self._read()
                    store["tokens"].setdefault(key, []).append(entry)
                    self._write(store)
            except (OSError, TypeError, portalocker.exceptions.LockException) as e:
                raise RegistryError(f"Failed to record token {token.address}: {str(e)}") from e
        logger.debug(f"Recorded token {token.symbol} at {token.address} under {key}")

    def list(self, chain_id: int, owner: str) -> List[RegisteredToken]:
        """
        Tokens recorded for one owner on one chain, in insertion order.

        An owner with no entries yields an empty list.
        """
        store = self._snapshot()
        return self._parse(store["tokens"].get(_partition_key(chain_id, owner), []))

    def list_known(self, chain_id: int) -> List[RegisteredToken]:
        """Every token recorded on a chain, regardless of owner"""
        store = self._snapshot()
        prefix = f"{int(chain_id)}:"
        entries: List[Dict[str, Any]] = []
        for key, items in store["tokens"].items():
            if key.startswith(prefix):
                entries.extend(items)
        return self._parse(entries)

    def update_balance(self, chain_id: int, owner: str, address: str, balance: str) -> int:
        """
        Set the last known balance of every matching entry.

        Returns:
            Number of entries updated
        """
        key = _partition_key(chain_id, owner)
        updated = 0
        with self._lock:
            try:
                with self._locked():
                    store = self._read()
                    for entry in store["tokens"].get(key, []):
                        if str(entry.get("address", "")).lower() == address.lower():
                            entry["lastKnownBalance"] = balance
                            updated += 1
                    if updated:
                        self._write(store)
            except (OSError, portalocker.exceptions.LockException) as e:
                raise RegistryError(f"Failed to update balance for {address}: {str(e)}") from e
        return updated
