"""Configuration loading and validation.

Usage:
    config = load("advsec-config.yaml", scope="project")  # raises ConfigError
    generate_template("advsec-config.yaml")                # writes example file

Values are resolved once, in increasing order of precedence: the optional
YAML file, environment variables, then explicit overrides (CLI options).
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from advsec_report.client import organization_name

DEFAULT_REPORT_NAME = "advsec-report.csv"

#: Config key -> environment variable supplying its default
ENV_DEFAULTS = {
    "token":            "AZURE_DEVOPS_PAT",
    "organization_uri": "SYSTEM_COLLECTIONURI",
    "project":          "SYSTEM_TEAMPROJECT",
    "repository":       "BUILD_REPOSITORY_NAME",
    "report_name":      "ADVSEC_REPORT_NAME",
    "scope":            "ADVSEC_SCOPE",
}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Scope(str, Enum):
    ORGANIZATION = "organization"
    PROJECT = "project"
    REPOSITORY = "repository"


class Variant(str, Enum):
    ALERTS = "alerts"
    POSTURE = "posture"


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    token: str
    organization_uri: str
    project: str = ""
    repository: str = ""
    report_name: str = DEFAULT_REPORT_NAME
    scope: Scope = Scope.REPOSITORY
    variant: Variant = Variant.ALERTS
    hyperlinks: bool = False
    timeout: int = 30


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str | None = None, **overrides: Any) -> Config:
    """Build and validate a Config.

    *overrides* are keyword arguments named after Config fields; ``None``
    values are ignored so unset CLI options fall through to the environment.

    Raises:
        ConfigError: if the file is missing or malformed, or required fields
                     are absent.
    """
    values: dict[str, Any] = _read_file(config_path) if config_path else {}

    for key, env_var in ENV_DEFAULTS.items():
        env_value = os.environ.get(env_var)
        if env_value:
            values[key] = env_value

    values.update({k: v for k, v in overrides.items() if v is not None})

    # The credential is checked on its own so nothing else is reported
    # (or attempted) without it.
    token = str(values.get("token") or "").strip()
    if not token:
        raise ConfigError(
            "Missing credential: set 'token' in the config file, the "
            f"{ENV_DEFAULTS['token']} environment variable or --token."
        )

    errors: list[str] = []
    scope = _parse_enum(Scope, values.get("scope", Scope.REPOSITORY), "scope", errors)
    variant = _parse_enum(Variant, values.get("variant", Variant.ALERTS), "variant", errors)

    config = Config(
        token=token,
        organization_uri=str(values.get("organization_uri") or "").strip(),
        project=str(values.get("project") or "").strip(),
        repository=str(values.get("repository") or "").strip(),
        report_name=str(values.get("report_name") or DEFAULT_REPORT_NAME).strip(),
        scope=scope or Scope.REPOSITORY,
        variant=variant or Variant.ALERTS,
        hyperlinks=_parse_bool(values.get("hyperlinks", False)),
        timeout=_parse_int(values.get("timeout", 30), "organization.timeout", errors, default=30),
    )
    _validate(config, errors)
    return config


def _read_file(config_path: str) -> dict[str, Any]:
    path = Path(config_path)

    if not path.exists():
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `python -m advsec_report init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")

    organization = raw.get("organization") or {}
    report = raw.get("report") or {}
    values = {
        "token":            organization.get("token"),
        "organization_uri": organization.get("uri"),
        "project":          raw.get("project"),
        "repository":       raw.get("repository"),
        "scope":            raw.get("scope"),
        "report_name":      report.get("name"),
        "variant":          report.get("variant"),
        "hyperlinks":       report.get("hyperlinks"),
        "timeout":          organization.get("timeout"),
    }
    return {k: v for k, v in values.items() if v is not None}


def _parse_enum(enum_cls, raw, name: str, errors: list[str]):
    try:
        return enum_cls(str(getattr(raw, "value", raw)).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        errors.append(f"  - '{name}' must be one of: {allowed} (got '{raw}')")
        return None


def _parse_int(raw, name: str, errors: list[str], default: int) -> int:
    try:
        value = int(str(raw).strip())
    except ValueError:
        value = 0
    if value <= 0:
        errors.append(f"  - '{name}' must be a positive integer (got '{raw}')")
        return default
    return value


def _parse_bool(raw) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def _validate(config: Config, errors: list[str]) -> None:
    """Raise ConfigError if required fields are missing."""
    if not config.organization_uri:
        errors.append(
            "  - 'organization.uri' is missing "
            f"(or set the {ENV_DEFAULTS['organization_uri']} environment variable)"
        )
    else:
        try:
            organization_name(config.organization_uri)
        except ValueError as exc:
            errors.append(f"  - 'organization.uri' is invalid: {exc}")
    if config.scope in (Scope.PROJECT, Scope.REPOSITORY) and not config.project:
        errors.append(
            f"  - 'project' is required for scope '{config.scope.value}' "
            f"(or set the {ENV_DEFAULTS['project']} environment variable)"
        )
    if config.scope is Scope.REPOSITORY and not config.repository:
        errors.append(
            "  - 'repository' is required for scope 'repository' "
            f"(or set the {ENV_DEFAULTS['repository']} environment variable)"
        )

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
organization:
  uri: "https://dev.azure.com/contoso"
  token: "xxxxxxxxxxxx"       # PAT with Code (Read) and Advanced Security (Read)

# organization | project | repository
scope: "project"
project: "MyProject"
repository: "my-repo"         # only used with scope: repository

report:
  name: "advsec-report.csv"
  variant: "alerts"           # alerts | posture
  hyperlinks: false
"""


def generate_template(output_path: str = "advsec-config.yaml") -> None:
    """Write a template advsec-config.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists (to avoid overwriting secrets).
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
