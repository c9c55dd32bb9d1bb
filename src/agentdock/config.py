"""Agent manager configuration from TOML files."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from .signatures import DEFAULT_SIGNATURES, AgentSignature


class ManagerConfig(BaseModel):
    """Process management settings."""

    one_shot_flag: str = "-p"  # `<command> -p <message>` for one-shot runs
    exit_grace_seconds: float = Field(default=0.5, ge=0.0)


class DiscoveryConfig(BaseModel):
    """Installed-agent discovery settings."""

    version_flag: str = "--version"
    version_timeout_seconds: float = Field(default=3.0, gt=0.0, le=5.0)
    scan_package_manager: bool = True
    package_manager_timeout_seconds: float = Field(default=10.0, gt=0.0)


class Config(BaseModel):
    """Complete agent manager configuration."""

    manager: ManagerConfig = Field(default_factory=ManagerConfig)
    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    signatures: list[AgentSignature] = Field(
        default_factory=lambda: list(DEFAULT_SIGNATURES)
    )


def load_config(config_path: Path) -> Config:
    """Read a TOML file into a validated Config.

    Sections left out of the file keep their defaults; a file without
    `[[signatures]]` entries uses the built-in agent catalog.

    Raises:
        FileNotFoundError: No file at config_path.
        tomllib.TOMLDecodeError: The file is not valid TOML.
        pydantic.ValidationError: A setting has the wrong type or is out of bounds.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return Config.model_validate(data)


def _configs_dir() -> Path:
    return Path(__file__).parent.parent.parent / "configs"


def find_config(name: str) -> Path:
    """Resolve a --config argument to a file.

    Anything that looks like a path (has a slash or a .toml suffix) is taken
    literally. A bare name such as "offline" is looked up among the bundled
    configs, with or without the .toml suffix.

    Raises:
        FileNotFoundError: Nothing matched; the message lists bundled names.
    """
    if "/" in name or name.endswith(".toml"):
        path = Path(name)
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {name}")

    configs_dir = _configs_dir()
    for candidate in (configs_dir / f"{name}.toml", configs_dir / name):
        if candidate.is_file():
            return candidate

    available = ", ".join(list_configs()) or "none"
    raise FileNotFoundError(f"No config named '{name}' (bundled: {available})")


def list_configs() -> list[str]:
    """Names of the bundled configs, usable with find_config."""
    configs_dir = _configs_dir()
    if not configs_dir.exists():
        return []
    return sorted(p.stem for p in configs_dir.glob("*.toml"))
