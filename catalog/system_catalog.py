"""
Foreign Catalog Manager
=======================
Stores the PXF catalog objects and their option lists:
- Foreign-data wrappers, servers, user mappings, foreign tables (+ columns)
- System-wide OID allocation
- Persistence (foreign_catalog.json)

Every CREATE/ALTER runs the option validator for the affected level before
anything is changed, so a failing statement leaves the catalog untouched.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from pathlib import Path

from catalog.errors import CatalogError, DependentObjectsError, ObjectNotFoundError
from options.levels import CatalogLevel, ExecLocation
from options.validator import OptionValidator

logger = logging.getLogger(__name__)

# Low OIDs are left to built-in objects
OID_USER_START = 1000

# Generic option consumed by the catalog itself, never passed to PXF
MPP_EXECUTE = "mpp_execute"

# Mapping that applies to every user without a mapping of their own
PUBLIC_USER = "public"

OptionList = List[Tuple[str, str]]


@dataclass
class WrapperInfo:
    """Metadata for a foreign-data wrapper."""
    oid: int
    name: str
    options: OptionList = field(default_factory=list)
    exec_location: ExecLocation = ExecLocation.ANY

@dataclass
class ServerInfo:
    oid: int
    name: str
    wrapper_oid: int
    options: OptionList = field(default_factory=list)
    exec_location: ExecLocation = ExecLocation.ANY

@dataclass
class UserMappingInfo:
    oid: int
    user: str
    server_oid: int
    options: OptionList = field(default_factory=list)

@dataclass
class ForeignTableInfo:
    oid: int
    name: str
    server_oid: int
    options: OptionList = field(default_factory=list)
    columns: Dict[str, OptionList] = field(default_factory=dict)  # column -> options
    exec_location: ExecLocation = ExecLocation.ANY


def _option_list(options) -> OptionList:
    if options is None:
        return []
    items = options.items() if isinstance(options, dict) else options
    return [(str(name), str(value)) for name, value in items]


def _check_unique_names(options: OptionList):
    seen = set()
    for name, _ in options:
        if name in seen:
            raise ValueError(f'option "{name}" provided more than once')
        seen.add(name)


def _split_exec_location(options: OptionList) -> Tuple[OptionList, Optional[ExecLocation]]:
    """Remove mpp_execute from an option list and parse it."""
    location = None
    rest = []
    for name, value in options:
        if name == MPP_EXECUTE:
            location = ExecLocation.parse(value)
        else:
            rest.append((name, value))
    return rest, location


_OPTION_ACTIONS = ("ADD", "SET", "DROP")


def apply_option_changes(options: OptionList, changes: Iterable[Sequence[str]]) -> OptionList:
    """
    Apply ALTER ... OPTIONS changes: ("ADD", name, value), ("SET", name, value)
    or ("DROP", name). A bare (name, value) pair means ADD unless its first
    element is one of the action keywords.
    """
    result = list(options)
    for change in changes:
        if len(change) == 2 and change[0].upper() not in _OPTION_ACTIONS:
            action, name, value = "ADD", change[0], change[1]
        else:
            action, name = change[0].upper(), change[1]
            value = change[2] if len(change) > 2 else None

        if action in ("ADD", "SET"):
            if value is None:
                raise ValueError(f'option "{name}" requires a value for {action}')
            value = str(value)

        names = [n for n, _ in result]
        if action == "ADD":
            if name in names:
                raise ValueError(f'option "{name}" provided more than once')
            result.append((name, value))
        elif action == "SET":
            if name not in names:
                raise ValueError(f'option "{name}" not found')
            result[names.index(name)] = (name, value)
        elif action == "DROP":
            if name not in names:
                raise ValueError(f'option "{name}" not found')
            del result[names.index(name)]
        else:
            raise ValueError(f"Unknown option action: '{change[0]}'")
    return result


class ForeignCatalog:
    """
    The PXF foreign catalog.

    Responsibilities:
    1. Manage OID allocation (monotonic, durable).
    2. Track wrappers, servers, user mappings and foreign tables.
    3. Validate option lists on every CREATE/ALTER.
    4. Persist state to foreign_catalog.json (skipped when data_root is None).
    """

    def __init__(self, data_root: Optional[str] = None, validator: Optional[OptionValidator] = None):
        self.data_root = Path(data_root) if data_root is not None else None
        self.catalog_path = self.data_root / "foreign_catalog.json" if self.data_root else None
        self.validator = validator or OptionValidator()

        # Persistent state
        self.next_oid: int = OID_USER_START
        self.wrappers: Dict[int, WrapperInfo] = {}
        self.servers: Dict[int, ServerInfo] = {}
        self.user_mappings: Dict[int, UserMappingInfo] = {}
        self.foreign_tables: Dict[int, ForeignTableInfo] = {}

        # Versioning
        self.version: int = 1

        self._load()

    def allocate_oid(self) -> int:
        oid = self.next_oid
        self.next_oid += 1
        return oid

    # ─── CREATE ─────────────────────────────────────────────────────

    def create_wrapper(self, name: str, options=None) -> WrapperInfo:
        if self.get_wrapper_by_name(name):
            raise ValueError(f"Foreign-data wrapper '{name}' already exists.")

        opts, location = self._prepare(options, CatalogLevel.WRAPPER)
        info = WrapperInfo(self.allocate_oid(), name, opts, location or ExecLocation.ANY)
        self.wrappers[info.oid] = info
        self._save()
        logger.info("created foreign-data wrapper %s (oid=%d)", name, info.oid)
        return info

    def create_server(self, name: str, wrapper_name: str, options=None) -> ServerInfo:
        if self.get_server_by_name(name):
            raise ValueError(f"Server '{name}' already exists.")
        wrapper = self._require(self.get_wrapper_by_name(wrapper_name), wrapper_name, "Foreign-data wrapper")

        opts, location = self._prepare(options, CatalogLevel.SERVER)
        info = ServerInfo(self.allocate_oid(), name, wrapper.oid, opts, location or ExecLocation.ANY)
        self.servers[info.oid] = info
        self._save()
        logger.info("created server %s for wrapper %s (oid=%d)", name, wrapper_name, info.oid)
        return info

    def create_user_mapping(self, user: str, server_name: str, options=None) -> UserMappingInfo:
        server = self._require(self.get_server_by_name(server_name), server_name, "Server")
        if self._find_user_mapping(user, server.oid):
            raise ValueError(f"User mapping for '{user}' already exists for server '{server_name}'.")

        opts = _option_list(options)
        _check_unique_names(opts)
        self.validator.validate(opts, CatalogLevel.USER_MAPPING)

        info = UserMappingInfo(self.allocate_oid(), user, server.oid, opts)
        self.user_mappings[info.oid] = info
        self._save()
        logger.info("created user mapping for %s on server %s", user, server_name)
        return info

    def create_foreign_table(self, name: str, server_name: str, options=None,
                             columns: Optional[Dict[str, object]] = None) -> ForeignTableInfo:
        if self.get_foreign_table_by_name(name):
            raise ValueError(f"Foreign table '{name}' already exists.")
        server = self._require(self.get_server_by_name(server_name), server_name, "Server")

        opts, location = self._prepare(options, CatalogLevel.FOREIGN_TABLE)
        column_opts = {}
        for column, col_options in (columns or {}).items():
            col_list = _option_list(col_options)
            _check_unique_names(col_list)
            self.validator.validate(col_list, CatalogLevel.COLUMN)
            column_opts[column] = col_list

        info = ForeignTableInfo(self.allocate_oid(), name, server.oid, opts, column_opts,
                                location or ExecLocation.ANY)
        self.foreign_tables[info.oid] = info
        self._save()
        logger.info("created foreign table %s on server %s (oid=%d)", name, server_name, info.oid)
        return info

    # ─── ALTER ──────────────────────────────────────────────────────

    def alter_options(self, level: CatalogLevel, oid: int, changes) -> OptionList:
        """ALTER <object> OPTIONS (...). Returns the new option list."""
        obj = self._get_object(level, oid)
        exec_location = getattr(obj, "exec_location", None)

        current = list(obj.options)
        if exec_location is not None and exec_location is not ExecLocation.ANY:
            current.append((MPP_EXECUTE, exec_location.value))
        updated = apply_option_changes(current, changes)

        if exec_location is not None:
            updated, location = _split_exec_location(updated)
        self.validator.validate(updated, level)

        obj.options = updated
        if exec_location is not None:
            obj.exec_location = location or ExecLocation.ANY
        self._save()
        logger.info("altered options of %s oid=%d", level.relation_name, oid)
        return updated

    def alter_column_options(self, table_oid: int, column: str, changes) -> OptionList:
        table = self.get_foreign_table(table_oid)
        updated = apply_option_changes(table.columns.get(column, []), changes)
        self.validator.validate(updated, CatalogLevel.COLUMN)
        table.columns[column] = updated
        self._save()
        return updated

    # ─── DROP ───────────────────────────────────────────────────────

    def drop_wrapper(self, name: str, cascade: bool = False):
        wrapper = self._require(self.get_wrapper_by_name(name), name, "Foreign-data wrapper")
        dependents = [s for s in self.servers.values() if s.wrapper_oid == wrapper.oid]
        if dependents and not cascade:
            raise DependentObjectsError("foreign-data wrapper", name)
        for server in dependents:
            self.drop_server(server.name, cascade=True)
        del self.wrappers[wrapper.oid]
        self._save()

    def drop_server(self, name: str, cascade: bool = False):
        server = self._require(self.get_server_by_name(name), name, "Server")
        tables = [t for t in self.foreign_tables.values() if t.server_oid == server.oid]
        mappings = [m for m in self.user_mappings.values() if m.server_oid == server.oid]
        if (tables or mappings) and not cascade:
            raise DependentObjectsError("server", name)
        for table in tables:
            del self.foreign_tables[table.oid]
        for mapping in mappings:
            del self.user_mappings[mapping.oid]
        del self.servers[server.oid]
        self._save()

    def drop_user_mapping(self, user: str, server_name: str):
        server = self._require(self.get_server_by_name(server_name), server_name, "Server")
        mapping = self._require(self._find_user_mapping(user, server.oid),
                                f"{user}@{server_name}", "User mapping")
        del self.user_mappings[mapping.oid]
        self._save()

    def drop_foreign_table(self, name: str):
        table = self._require(self.get_foreign_table_by_name(name), name, "Foreign table")
        del self.foreign_tables[table.oid]
        self._save()

    # ─── Lookups ────────────────────────────────────────────────────

    def get_wrapper(self, oid: int) -> WrapperInfo:
        return self._require(self.wrappers.get(oid), str(oid), "Foreign-data wrapper OID")

    def get_server(self, oid: int) -> ServerInfo:
        return self._require(self.servers.get(oid), str(oid), "Server OID")

    def get_foreign_table(self, oid: int) -> ForeignTableInfo:
        return self._require(self.foreign_tables.get(oid), str(oid), "Foreign table OID")

    def get_user_mapping(self, user: str, server_oid: int) -> UserMappingInfo:
        """User's own mapping for the server, else the PUBLIC one."""
        mapping = self._find_user_mapping(user, server_oid) or \
            self._find_user_mapping(PUBLIC_USER, server_oid)
        if mapping is None:
            server = self.get_server(server_oid)
            raise ObjectNotFoundError(f"{user}@{server.name}", "User mapping")
        return mapping

    def get_wrapper_by_name(self, name: str) -> Optional[WrapperInfo]:
        return next((w for w in self.wrappers.values() if w.name == name), None)

    def get_server_by_name(self, name: str) -> Optional[ServerInfo]:
        return next((s for s in self.servers.values() if s.name == name), None)

    def get_foreign_table_by_name(self, name: str) -> Optional[ForeignTableInfo]:
        return next((t for t in self.foreign_tables.values() if t.name == name), None)

    def list_wrappers(self) -> List[WrapperInfo]:
        return list(self.wrappers.values())

    def list_servers(self) -> List[ServerInfo]:
        return list(self.servers.values())

    def list_foreign_tables(self) -> List[ForeignTableInfo]:
        return list(self.foreign_tables.values())

    def get_options(self, level: CatalogLevel, oid: int) -> OptionList:
        """Ordered (name, value) options of one catalog object."""
        return list(self._get_object(level, oid).options)

    def get_column_options(self, table_oid: int) -> Dict[str, OptionList]:
        table = self.get_foreign_table(table_oid)
        return {column: list(opts) for column, opts in table.columns.items()}

    # ─── Internals ──────────────────────────────────────────────────

    def _prepare(self, options, level: CatalogLevel) -> Tuple[OptionList, Optional[ExecLocation]]:
        opts = _option_list(options)
        _check_unique_names(opts)
        opts, location = _split_exec_location(opts)
        self.validator.validate(opts, level)
        return opts, location

    def _find_user_mapping(self, user: str, server_oid: int) -> Optional[UserMappingInfo]:
        return next((m for m in self.user_mappings.values()
                     if m.user == user and m.server_oid == server_oid), None)

    def _get_object(self, level: CatalogLevel, oid: int):
        if level is CatalogLevel.WRAPPER:
            return self.get_wrapper(oid)
        if level is CatalogLevel.SERVER:
            return self.get_server(oid)
        if level is CatalogLevel.USER_MAPPING:
            return self._require(self.user_mappings.get(oid), str(oid), "User mapping OID")
        if level is CatalogLevel.FOREIGN_TABLE:
            return self.get_foreign_table(oid)
        raise CatalogError(f"No catalog objects at level {level.name}; use get_column_options()")

    @staticmethod
    def _require(obj, name: str, context: str):
        if obj is None:
            raise ObjectNotFoundError(name, context)
        return obj

    def _load(self):
        """Load state from disk if exists."""
        if self.catalog_path is None or not self.catalog_path.exists():
            return

        try:
            with open(self.catalog_path, 'r') as f:
                data = json.load(f)

            self.version = data.get("version", 1)
            self.next_oid = data.get("next_oid", OID_USER_START)

            for w in data.get("wrappers", []):
                info = WrapperInfo(w["oid"], w["name"], _option_list(w.get("options")),
                                   ExecLocation(w.get("exec_location", "any")))
                self.wrappers[info.oid] = info
            for s in data.get("servers", []):
                info = ServerInfo(s["oid"], s["name"], s["wrapper_oid"], _option_list(s.get("options")),
                                  ExecLocation(s.get("exec_location", "any")))
                self.servers[info.oid] = info
            for m in data.get("user_mappings", []):
                info = UserMappingInfo(m["oid"], m["user"], m["server_oid"], _option_list(m.get("options")))
                self.user_mappings[info.oid] = info
            for t in data.get("foreign_tables", []):
                info = ForeignTableInfo(
                    t["oid"], t["name"], t["server_oid"], _option_list(t.get("options")),
                    {c: _option_list(o) for c, o in t.get("columns", {}).items()},
                    ExecLocation(t.get("exec_location", "any")),
                )
                self.foreign_tables[info.oid] = info

        except (json.JSONDecodeError, KeyError, ValueError) as e:
            # Fail fast on corruption
            raise RuntimeError(f"Corrupted foreign catalog at {self.catalog_path}: {e}")

    def _save(self):
        """Atomically save state to disk."""
        if self.catalog_path is None:
            return

        data = {
            "version": self.version,
            "next_oid": self.next_oid,
            "wrappers": [
                {"oid": w.oid, "name": w.name, "options": w.options,
                 "exec_location": w.exec_location.value}
                for w in self.wrappers.values()
            ],
            "servers": [
                {"oid": s.oid, "name": s.name, "wrapper_oid": s.wrapper_oid,
                 "options": s.options, "exec_location": s.exec_location.value}
                for s in self.servers.values()
            ],
            "user_mappings": [
                {"oid": m.oid, "user": m.user, "server_oid": m.server_oid, "options": m.options}
                for m in self.user_mappings.values()
            ],
            "foreign_tables": [
                {"oid": t.oid, "name": t.name, "server_oid": t.server_oid,
                 "options": t.options, "columns": t.columns,
                 "exec_location": t.exec_location.value}
                for t in self.foreign_tables.values()
            ],
        }

        # Atomic write: write to temp -> fsync -> rename
        self.data_root.mkdir(parents=True, exist_ok=True)
        tmp_path = self.catalog_path.with_suffix(".tmp")
        with open(tmp_path, 'w') as f:
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        tmp_path.replace(self.catalog_path)
