"""Game configuration loading from TOML files."""

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class GridConfig(BaseModel):
    """Patrol area bounds (inclusive)."""

    max_x: int = 19
    max_y: int = 19


class FleetConfig(BaseModel):
    """How many of each unit the setup phase places."""

    min_ships: int = 16
    max_ships: int = 30
    min_mines: int = 8
    max_mines: int = 16
    monsters: int = 4
    headquarters: int = 1

    @model_validator(mode="after")
    def _check_ranges(self) -> "FleetConfig":
        if self.min_ships < 1 or self.min_ships > self.max_ships:
            raise ValueError("need 1 <= min_ships <= max_ships")
        if self.min_mines < 0 or self.min_mines > self.max_mines:
            raise ValueError("need 0 <= min_mines <= max_mines")
        return self


class SubmarineConfig(BaseModel):
    """Starting position and stores of the submarine."""

    x: int = 9
    y: int = 9
    depth: int = 100
    power: int = 6000
    fuel: int = 2500
    torpedoes: int = 10
    missiles: int = 3
    crew: int = 30


class RulesConfig(BaseModel):
    """Tunable rule constants."""

    resupply_charges: int = 2
    challenge_timeout_s: float = 30.0
    drift_retry_limit: int = Field(default=8, ge=1)
    repairs_per_turn: int = 9
    placement_attempts: int = Field(default=10_000, ge=1)


class Config(BaseModel):
    """Complete configuration for a game session."""

    seed: int | None = None
    grid: GridConfig = Field(default_factory=GridConfig)
    fleet: FleetConfig = Field(default_factory=FleetConfig)
    submarine: SubmarineConfig = Field(default_factory=SubmarineConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)


def load_config(config_path: Path) -> Config:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML config file.

    Returns:
        Parsed Config object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        tomllib.TOMLDecodeError: If TOML is malformed.
    """
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return Config.model_validate(data)


def find_config(name: str) -> Path:
    """Find a config file by name.

    Searches in the following order:
    1. Exact path if name contains path separator or ends in .toml
    2. configs/{name}.toml
    3. configs/{name}

    Args:
        name: Config name or path.

    Returns:
        Path to the config file.

    Raises:
        FileNotFoundError: If config file is not found.
    """
    # If it looks like a path, use it directly
    if "/" in name or name.endswith(".toml"):
        path = Path(name)
        if path.exists():
            return path
        raise FileNotFoundError(f"Config file not found: {name}")

    configs_dir = _configs_dir()

    config_path = configs_dir / f"{name}.toml"
    if config_path.exists():
        return config_path

    config_path = configs_dir / name
    if config_path.exists():
        return config_path

    raise FileNotFoundError(
        f"Config '{name}' not found in {configs_dir}. "
        f"Available configs: {list_configs()}"
    )


def list_configs() -> list[str]:
    """List available config names."""
    configs_dir = _configs_dir()
    if not configs_dir.exists():
        return []
    return sorted(p.stem for p in configs_dir.glob("*.toml"))


def _configs_dir() -> Path:
    # src/seabattle/config.py -> project root
    return Path(__file__).parent.parent.parent / "configs"
