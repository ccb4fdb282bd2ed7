"""TOML config loading for lambdac.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "lambdac.toml"


@dataclass
class PackageConfig:
    name: str = "untitled"
    version: str = "0.0.0"


@dataclass
class CheckConfig:
    strict: bool = True
    source_dir: str = "src"


@dataclass
class LambdacConfig:
    package: PackageConfig = field(default_factory=PackageConfig)
    check: CheckConfig = field(default_factory=CheckConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find lambdac.toml. Raises FileNotFoundError."""
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


def load_config(path: Path) -> LambdacConfig:
    """Parse a lambdac.toml file into a LambdacConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = LambdacConfig()

    if "package" in data:
        pkg = data["package"]
        config.package = PackageConfig(
            name=pkg.get("name", "untitled"),
            version=pkg.get("version", "0.0.0"),
        )

    if "check" in data:
        chk = data["check"]
        config.check = CheckConfig(
            strict=chk.get("strict", True),
            source_dir=chk.get("source_dir", "src"),
        )

    return config
