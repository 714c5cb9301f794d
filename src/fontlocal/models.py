"""Pydantic data models for fontlocal configuration.

The settings file describes which remote stylesheets to localize, where the
downloaded assets are written and under which URL prefix the site serves them.
"""

from pathlib import Path
from typing import Annotated

import yaml
from pydantic import BaseModel, BeforeValidator, Field, field_validator
from pydantic.fields import FieldInfo

DEFAULT_FONT_DIRECTORY = "./public/astro-fontaine"
DEFAULT_MOUNT_PREFIX = "/astro-fontaine"
DEFAULT_OUTPUT = "./public/astro-fontaine/generated.css"
DEFAULT_TIMEOUT = 30.0

# Some font hosts (Google Fonts) pick the served formats from the user agent;
# a desktop Chrome gets WOFF2.
CHROME_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_5) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/83.0.4103.61 Safari/537.36"
)


class Fields:
    """Proxy class for accessing Pydantic model field info via attributes.

    Enables ``Fields(Settings).font_directory.default`` instead of
    ``Settings.model_fields["font_directory"].default``.
    """

    def __init__(self, model_class: type[BaseModel]) -> None:
        """Initialize the accessor with a Pydantic model class."""
        self._model_class = model_class

    def __getattr__(self, name: str) -> FieldInfo:
        """Provide access to field info via attribute access."""
        return self._model_class.model_fields[name]


def _validate_not_empty_string(v: str) -> str:
    """Validate string is not empty or whitespace only."""
    if not isinstance(v, str) or not v.strip():
        raise ValueError("Field cannot be empty")
    return v.strip()


NonEmptyStr = Annotated[str, BeforeValidator(_validate_not_empty_string)]


def _validate_remote_url(v: str) -> str:
    """Validate an absolute http(s) URL."""
    v = _validate_not_empty_string(v)
    if not v.startswith(("https://", "http://")):
        raise ValueError(f"Expected an absolute http(s) URL, got: {v}")
    return v


RemoteURL = Annotated[str, BeforeValidator(_validate_remote_url)]


class CustomFont(BaseModel):
    """A font family the user wants a fallback for.

    Families found in the configured stylesheets take their fallbacks from
    here. Families that no stylesheet declares are added to the build as-is;
    ``src`` then points at the font file used to derive metrics when the
    built-in metrics table does not know the family.
    """

    family: NonEmptyStr = Field(..., description="Font family name")
    fallbacks: list[str] | None = Field(
        default=None,
        description="Local fonts for the fallback face (default: default_fallbacks)",
    )
    src: RemoteURL | None = Field(
        default=None,
        description="Remote font file for this family",
    )


class Settings(BaseModel):
    """Root configuration loaded from ``fontlocal.yaml``."""

    font_directory: str = Field(
        default=DEFAULT_FONT_DIRECTORY,
        description="Directory receiving font assets and cached stylesheets",
    )
    mount_prefix: str = Field(
        default=DEFAULT_MOUNT_PREFIX,
        description="URL prefix under which font_directory is served",
    )
    stylesheets: list[RemoteURL] = Field(
        default_factory=list,
        description="Remote @font-face stylesheets to localize",
    )
    fonts: list[CustomFont] = Field(
        default_factory=list,
        description="Per-family fallback configuration",
    )
    default_fallbacks: list[str] = Field(
        default_factory=list,
        description="Fallback fonts for families without their own list",
    )
    output: str = Field(
        default=DEFAULT_OUTPUT,
        description="Where the build command writes the generated stylesheet",
    )
    user_agent: str = Field(
        default=CHROME_USER_AGENT,
        description="User agent sent when fetching stylesheets in bulk",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        description="Network timeout in seconds",
    )
    max_concurrency: int | None = Field(
        default=None,
        description="Upper bound on parallel font downloads (default: unbounded)",
    )

    @field_validator("mount_prefix")
    @classmethod
    def validate_mount_prefix(cls, v: str) -> str:
        """Normalize the mount prefix to ``/segment`` form."""
        v = v.strip()
        if not v.startswith("/"):
            raise ValueError(f"Mount prefix must start with '/', got: {v!r}")
        return v.rstrip("/") or "/"

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate the timeout is positive."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    @field_validator("max_concurrency")
    @classmethod
    def validate_max_concurrency(cls, v: int | None) -> int | None:
        """Validate the concurrency bound is at least 1 when set."""
        if v is not None and v < 1:
            raise ValueError("max_concurrency must be at least 1")
        return v

    @property
    def font_path(self) -> Path:
        """Font directory as a path."""
        return Path(self.font_directory).expanduser()

    @property
    def output_path(self) -> Path:
        """Output stylesheet as a path."""
        return Path(self.output).expanduser()

    def fallbacks_for(self, family: str) -> list[str]:
        """Return the configured fallbacks for ``family``."""
        for font in self.fonts:
            if font.family == family and font.fallbacks is not None:
                return list(font.fallbacks)
        return list(self.default_fallbacks)

    @classmethod
    def from_yaml_file(cls, path: Path) -> "Settings":
        """Load settings from a YAML file.

        Args:
            path: Path to the YAML settings file

        Returns:
            Settings instance loaded from the file

        Raises:
            FileNotFoundError: If the settings file doesn't exist
            TypeError: If the YAML document is not a mapping
        """
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")

        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise TypeError(
                f"Invalid settings file format in {path}: expected a mapping"
            )

        return cls(**data)

    def to_yaml_file(self, path: Path) -> None:
        """Save settings to a YAML file.

        Args:
            path: Path where the settings file should be saved
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.model_dump(mode="python", exclude_none=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
