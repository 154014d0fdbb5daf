"""reqprep core - config loading, request and environment files."""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values

from reqprep.errors import ConfigError
from reqprep.models import (
    MULTIPART,
    URLENCODED,
    ApiKeyAuth,
    ApiKeyTarget,
    Auth,
    BasicAuth,
    BearerAuth,
    Body,
    Environment,
    FileBlob,
    FormDataEntry,
    KeyValue,
    MultipartBody,
    NoAuth,
    NoBody,
    OAuth2Auth,
    RawBody,
    Request,
    UrlEncodedBody,
    Variable,
)
from reqprep.scope import variables_from_mapping

GLOBAL_DIR = Path.home() / ".reqprep"
GLOBAL_CONFIG = GLOBAL_DIR / "config.yaml"

CWD_CONFIG_CANDIDATES = [
    ".reqprep.yaml",
    ".reqprep.yml",
    "reqprep.yaml",
    "reqprep.yml",
]


def resolve_path(
    candidates: list[Path],
    default: Path | None = None,
) -> Path | None:
    """Return the first existing path from candidates, else default."""
    for p in candidates:
        if p.exists():
            return p.resolve()
    return default


def resolve_config_path(config_file: str | None) -> Path | None:
    """Find the config file to use.

    Resolution order:
      1. Explicit -c flag (hard — no fallthrough if missing)
      2. .reqprep.yaml (variants) in CWD
      3. ~/.reqprep/config.yaml
    """
    if config_file:
        return resolve_path([Path(config_file)])
    return resolve_path([Path(c) for c in CWD_CONFIG_CANDIDATES] + [GLOBAL_CONFIG])


def load_config(config_path: str | Path | None) -> dict:
    """Load YAML config file. Returns empty defaults if not found.

    Stores '_config_dir' in the returned dict so relative paths in the
    config resolve against the config file.
    """
    if config_path is None:
        return {"defaults": {}, "_config_dir": None}
    path = Path(config_path)
    if not path.exists():
        return {"defaults": {}, "_config_dir": None}
    data = _read_yaml(path)
    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ConfigError(f"{path}: 'defaults' must be a mapping")
    return {
        "defaults": defaults,
        "_config_dir": path.resolve().parent,
    }


def load_env_file(env_file: str | Path | None, base_dir: str | Path = ".") -> tuple[Variable, ...]:
    """Read a .env file into variables, in file order.

    Keys without a value are skipped. A missing file yields no variables.
    """
    if not env_file:
        return ()
    dotenv_path = Path(base_dir) / env_file
    if not dotenv_path.exists():
        return ()
    values = dotenv_values(str(dotenv_path))
    return tuple(Variable(k, v) for k, v in values.items() if v is not None)


def parse_var_specs(specs: tuple[str, ...] | list[str]) -> tuple[Variable, ...]:
    """Parse ``key=value`` command line specs; specs without '=' are ignored."""
    out: list[Variable] = []
    for spec in specs:
        if "=" in spec:
            k, val = spec.split("=", 1)
            out.append(Variable(k.strip(), val.strip()))
    return tuple(out)


# ── Resource directories ─────────────────────────────────────────────────


def _resource_candidates(
    resource_name: str,
    cli_override: str | None,
    config: dict,
) -> list[Path]:
    """Build the ordered candidate list for a named resource directory."""
    if cli_override:
        p = Path(cli_override)
        if not p.is_absolute():
            p = Path.cwd() / p
        return [p]  # hard override — no fallthrough

    candidates: list[Path] = []

    defaults = config.get("defaults", {})
    config_value = defaults.get(f"{resource_name}_dir")
    config_dir = config.get("_config_dir")
    if config_value:
        p = Path(config_value)
        if not p.is_absolute() and config_dir:
            p = Path(config_dir) / p
        candidates.append(p)

    candidates.append(Path(resource_name))
    candidates.append(GLOBAL_DIR / resource_name)

    return candidates


def resolve_resource_dir(
    resource_name: str,
    cli_override: str | None,
    config: dict,
    default: Path | None = None,
) -> Path | None:
    """Find a resource directory by name.

    Resolution order:
      1. cli_override (absolute or relative to CWD; hard — no fallthrough)
      2. {resource_name}_dir from config defaults (relative to config file)
      3. ./{resource_name}/ in CWD
      4. ~/.reqprep/{resource_name}/
    """
    candidates = _resource_candidates(resource_name, cli_override, config)
    return resolve_path(candidates, default=default)


def find_resource_file(
    resource_name: str,
    name_or_path: str,
    config: dict,
    cli_override: str | None = None,
) -> Path | None:
    """Locate a YAML file given as a path, or as a name in a resource directory."""
    p = Path(name_or_path)
    if p.is_file():
        return p.resolve()
    for ext in (".yaml", ".yml"):
        candidate = Path(name_or_path + ext)
        if candidate.is_file():
            return candidate.resolve()

    rdir = resolve_resource_dir(resource_name, cli_override, config)
    if rdir and rdir.is_dir():
        for ext in (".yaml", ".yml"):
            candidate = rdir / (name_or_path + ext)
            if candidate.is_file():
                return candidate.resolve()
    return None


def resource_search_paths(
    resource_name: str,
    name: str,
    config: dict,
    cli_override: str | None = None,
) -> list[str]:
    """Return human-readable list of paths checked for a named resource."""
    paths = [name, f"{name}.yaml"]
    for c in _resource_candidates(resource_name, cli_override, config):
        paths.append(str(c / f"{name}.yaml"))
    return paths


def list_resources(
    resource_name: str,
    config: dict,
    cli_override: str | None = None,
) -> tuple[Path | None, list[Path]]:
    """List YAML files in the resolved resource directory."""
    rdir = resolve_resource_dir(resource_name, cli_override, config)
    if not rdir or not rdir.is_dir():
        return (rdir, [])
    files = [f for f in sorted(rdir.iterdir()) if f.suffix in (".yaml", ".yml") and f.is_file()]
    return (rdir, files)


def _read_yaml(path: Path) -> dict:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")
    return data


# ── Request / environment files ──────────────────────────────────────────


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _rows(data: Any, what: str) -> tuple[KeyValue, ...]:
    """Headers/params as a list of {key, value, active} or a plain mapping."""
    if data is None:
        return ()
    if isinstance(data, Mapping):
        return tuple(KeyValue(_str(k), _str(v)) for k, v in data.items())
    if isinstance(data, list):
        rows = []
        for item in data:
            if not isinstance(item, Mapping):
                raise ConfigError(f"{what}: expected a mapping, got {item!r}")
            rows.append(
                KeyValue(
                    key=_str(item.get("key")),
                    value=_str(item.get("value")),
                    active=bool(item.get("active", True)),
                )
            )
        return tuple(rows)
    raise ConfigError(f"{what}: expected a list or a mapping")


def _variables(data: Any, what: str) -> tuple[Variable, ...]:
    return tuple(Variable(row.key, row.value) for row in _rows(data, what))


def auth_from_dict(data: Mapping | None) -> Auth:
    """Build an auth config.

    Supports:
    - none
    - basic:   {type: basic, username, password}
    - bearer:  {type: bearer, token}
    - oauth-2: {type: oauth-2, token}
    - api-key: {type: api-key, key, value, add_to: headers | query}
    """
    if not data:
        return NoAuth()
    if not isinstance(data, Mapping):
        raise ConfigError("auth: expected a mapping")

    auth_type = _str(data.get("type", "none")).lower()
    active = bool(data.get("active", True))

    if auth_type == "none":
        return NoAuth()
    if auth_type == "basic":
        return BasicAuth(_str(data.get("username")), _str(data.get("password")), active=active)
    if auth_type == "bearer":
        return BearerAuth(_str(data.get("token")), active=active)
    if auth_type in ("oauth-2", "oauth2"):
        return OAuth2Auth(_str(data.get("token")), active=active)
    if auth_type == "api-key":
        add_to = _str(data.get("add_to", "headers")).lower()
        try:
            target = ApiKeyTarget(add_to)
        except ValueError:
            raise ConfigError(f"auth: unknown add_to '{add_to}' (headers | query)") from None
        return ApiKeyAuth(_str(data.get("key")), _str(data.get("value")), target, active=active)

    raise ConfigError(f"auth: unknown type '{auth_type}'")


def _form_entry(item: Any, base_dir: Path) -> FormDataEntry:
    if not isinstance(item, Mapping):
        raise ConfigError(f"body: expected a mapping, got {item!r}")
    key = _str(item.get("key"))
    active = bool(item.get("active", True))
    files = item.get("files")
    if files is not None:
        if isinstance(files, str):
            files = [files]
        try:
            blobs = tuple(FileBlob.from_path(base_dir / f) for f in files)
        except OSError as e:
            raise ConfigError(f"body: cannot read file for '{key}': {e}") from e
        return FormDataEntry(key=key, value=blobs, active=active, is_file=True)
    return FormDataEntry(key=key, value=_str(item.get("value")), active=active)


def body_from_dict(data: Mapping | None, base_dir: Path) -> Body:
    """Build a body. content_type picks the variant; anything else is raw text."""
    if not data:
        return NoBody()
    if not isinstance(data, Mapping):
        raise ConfigError("body: expected a mapping")

    content_type = data.get("content_type")
    raw = data.get("body")

    if content_type is None:
        return NoBody()
    if content_type == URLENCODED:
        if isinstance(raw, Mapping):
            raw = "\n".join(f"{k}={_str(v)}" for k, v in raw.items())
        return UrlEncodedBody(_str(raw))
    if content_type == MULTIPART:
        if raw is None:
            raw = []
        if not isinstance(raw, list):
            raise ConfigError("body: multipart body must be a list of entries")
        return MultipartBody(tuple(_form_entry(item, base_dir) for item in raw))
    return RawBody(_str(content_type), _str(raw))


def request_from_dict(data: Mapping, base_dir: str | Path = ".") -> Request:
    """Build a Request from parsed YAML/JSON data."""
    return Request(
        endpoint=_str(data.get("endpoint") or data.get("url")),
        method=_str(data.get("method") or "GET").upper(),
        name=_str(data.get("name")),
        headers=_rows(data.get("headers"), "headers"),
        params=_rows(data.get("params"), "params"),
        vars=_variables(data.get("vars"), "vars"),
        auth=auth_from_dict(data.get("auth")),
        body=body_from_dict(data.get("body"), Path(base_dir)),
    )


def environment_from_dict(data: Mapping) -> Environment:
    return Environment(
        name=_str(data.get("name")),
        variables=_variables(data.get("variables"), "variables"),
    )


def load_request(path: str | Path) -> Request:
    path = Path(path)
    data = _read_yaml(path)
    if "name" not in data:
        data["name"] = path.stem
    return request_from_dict(data, base_dir=path.resolve().parent)


def load_environment(path: str | Path) -> Environment:
    path = Path(path)
    data = _read_yaml(path)
    if "name" not in data:
        data["name"] = path.stem
    return environment_from_dict(data)


def config_globals(config: dict) -> tuple[Variable, ...]:
    """Global variables declared under defaults.globals."""
    data = config.get("defaults", {}).get("globals") or {}
    if not isinstance(data, Mapping):
        raise ConfigError("globals: expected a mapping")
    return variables_from_mapping(data)
