"""TOML config loading for tyexpr.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "tyexpr.toml"


@dataclass
class ParseConfig:
    allow_plus: bool = True


@dataclass
class OutputConfig:
    color: bool = True


@dataclass
class TyexprConfig:
    parse: ParseConfig = field(default_factory=ParseConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find tyexpr.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> TyexprConfig:
    """Parse a tyexpr.toml file into a TyexprConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = TyexprConfig()

    if "parse" in data:
        prs = data["parse"]
        config.parse = ParseConfig(
            allow_plus=prs.get("allow_plus", True),
        )

    if "output" in data:
        out = data["output"]
        config.output = OutputConfig(
            color=out.get("color", True),
        )

    return config


def config_for(start_path: Path | None = None) -> TyexprConfig:
    """The config governing ``start_path``, or defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return TyexprConfig()
