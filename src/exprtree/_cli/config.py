"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError


class ConfigError(Exception):
    """Error in exprtree configuration."""


class _ToolSection(BaseModel):
    """Schema of the [tool.exprtree] table."""

    model_config = ConfigDict(extra="forbid")

    variables: list[str] = []
    constants: dict[str, float] = {}


@dataclass(slots=True, frozen=True)
class ExprTreeConfig:
    """Configuration loaded from pyproject.toml.

    Attributes:
        variables: Variable labels declared for every parsed expression.
        constants: Constants registered in addition to the built-in ones.
        project_root: Directory containing the pyproject.toml, if any.

    """

    variables: tuple[str, ...] = ()
    constants: dict[str, float] = field(default_factory=dict)
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def load_config(pyproject_path: Path) -> ExprTreeConfig:
    """Load and validate [tool.exprtree] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed ExprTreeConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("exprtree", {})
    if not section:
        return ExprTreeConfig(project_root=project_root)

    try:
        parsed = _ToolSection.model_validate(section)
    except ValidationError as e:
        msg = f"Invalid [tool.exprtree] configuration in {pyproject_path}: {e}"
        raise ConfigError(msg) from e

    return ExprTreeConfig(
        variables=tuple(parsed.variables),
        constants=dict(parsed.constants),
        project_root=project_root,
    )


def get_config() -> ExprTreeConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        ExprTreeConfig (may be empty if no pyproject.toml or no [tool.exprtree] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return ExprTreeConfig()
    return load_config(pyproject_path)
