"""Host bridge — decodes wire requests and dispatches them to the core.

Field names of the request models are the wire contract shared with the
host (``name``/``key`` for open, ``path`` for close and delete, ``dbargs`` and
``executes`` for batches). Call-level failures become an error reply; errors
inside a batch are already per-statement outcomes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from sqlcipher_storage.config import StorageSettings, get_settings
from sqlcipher_storage.db.database import load_driver
from sqlcipher_storage.errors import FileMissing, StorageError, UnknownAction
from sqlcipher_storage.services.batch_executor import BatchExecutor
from sqlcipher_storage.services.filesystem import LocalFilesystem
from sqlcipher_storage.services.registry import DatabaseRegistry

logger = logging.getLogger(__name__)


# Request Models
class OpenArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = ""
    key: Optional[str] = None
    asset_filename: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("assetFilename", "createFromLocation", "asset_filename"),
    )
    read_only: bool = Field(default=False, alias="readOnly")

    @field_validator("asset_filename", mode="before")
    @classmethod
    def _location_as_text(cls, v: Any) -> Any:
        # Hosts send createFromLocation: 1 as a number
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class PathArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: str = ""


class DbArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    dbname: str = ""


class BatchArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    dbargs: DbArgs = Field(default_factory=DbArgs)
    # Entries stay raw so a malformed one only fails its own statement.
    executes: list[Optional[dict[str, Any]]] = Field(default_factory=list)


class EchoArgs(BaseModel):
    model_config = ConfigDict(extra="ignore")

    value: str = ""


@dataclass
class BridgeReply:
    ok: bool
    result: Any = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"status": "success", "result": self.result}
        return {"status": "error", "message": self.error}


class SQLiteBridge:
    """Owns the registry for the host module's lifetime and dispatches by action."""

    def __init__(
        self,
        settings: Optional[StorageSettings] = None,
        registry: Optional[DatabaseRegistry] = None,
    ):
        self.settings = settings or get_settings()
        if registry is None:
            fs = LocalFilesystem(self.settings.STORAGE_ROOT, self.settings.ASSETS_DIR)
            registry = DatabaseRegistry(fs, driver=load_driver(self.settings.SQLITE_DRIVER))
        self.registry = registry
        self.executor = BatchExecutor(registry)
        self.sqlite_version: Optional[str] = None

        self._dispatch: dict[str, Callable[[dict[str, Any]], Any]] = {
            "echoStringValue":           self.echo_string_value,
            "open":                      self.open,
            "close":                     self.close,
            "delete":                    self.delete,
            "executeSqlBatch":           self.execute_sql_batch,
            "backgroundExecuteSqlBatch": self.execute_sql_batch,
        }

    # ── Actions ─────────────────────────────────────────────────

    def echo_string_value(self, args: dict[str, Any]) -> str:
        return EchoArgs.model_validate(args).value

    def open(self, args: dict[str, Any]) -> str:
        req = OpenArgs.model_validate(args)
        fs = self.registry.fs
        path = fs.resolve(req.name)
        read_only = False
        location = req.asset_filename
        if location and req.read_only and not fs.is_bundled(location):
            # External asset opened in place, never copied
            path = fs.asset_path(req.name, location)
            if not fs.exists(path):
                raise FileMissing(f"{path} not found")
            read_only = True
        elif location and not fs.exists(path):
            fs.copy_asset(req.name, location, path)
        handle = self.registry.open(req.name, req.key, path=path, read_only=read_only)
        if self.sqlite_version is None:
            self.sqlite_version = handle.sqlite_version()
            logger.info(f"SQLite version: {self.sqlite_version}")
        return "database open"

    def close(self, args: dict[str, Any]) -> str:
        self.registry.close(PathArgs.model_validate(args).path)
        return "database closed"

    def delete(self, args: dict[str, Any]) -> str:
        self.registry.delete(PathArgs.model_validate(args).path)
        return "database deleted"

    def execute_sql_batch(self, args: dict[str, Any]) -> list[dict[str, Any]]:
        req = BatchArgs.model_validate(args)
        executes = [e or {} for e in req.executes]
        outcomes = self.executor.execute_batch(req.dbargs.dbname, executes)
        return [o.to_dict() for o in outcomes]

    # ── Lifecycle ───────────────────────────────────────────────

    def on_suspend(self) -> None:
        self.registry.close_all()

    def on_resume(self) -> list[str]:
        return self.registry.reopen_all()

    def on_destroy(self) -> None:
        self.registry.close_all(forget=True)

    # ── Public API ──────────────────────────────────────────────

    def execute(self, action: str, args: Optional[dict[str, Any]] = None) -> BridgeReply:
        """Look up *action* and call it with *args*.  Never raises."""
        fn = self._dispatch.get(action)
        try:
            if fn is None:
                raise UnknownAction(f"Unknown action: '{action}'. Available: {', '.join(self.actions)}")
            return BridgeReply(ok=True, result=fn(args or {}))
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            logger.error(f"Action '{action}' rejected malformed arguments: {fields}")
            return BridgeReply(ok=False, error=f"Invalid arguments for '{action}': {fields}")
        except StorageError as e:
            logger.error(f"Action '{action}' failed: {e.message}")
            return BridgeReply(ok=False, error=e.message)

    @property
    def actions(self) -> list[str]:
        return sorted(self._dispatch.keys())
