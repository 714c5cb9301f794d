"""Configuration management for fontlocal.

Loads and validates the ``fontlocal.yaml`` settings file of a site and
creates a starter file for new projects.
"""

from pathlib import Path

import yaml

from fontlocal.models import CustomFont, Settings

DEFAULT_CONFIG_NAME = "fontlocal.yaml"


class ConfigError(Exception):
    """Configuration-related error."""

    pass


def get_config_path() -> Path:
    """Default settings file: ``fontlocal.yaml`` in the working directory."""
    return Path.cwd() / DEFAULT_CONFIG_NAME


class Configurator:
    """Configuration manager for fontlocal.

    Examples:
        # Use ./fontlocal.yaml
        settings = Configurator().load()

        # Use a custom path (useful for testing)
        settings = Configurator(settings_path="/tmp/site/fontlocal.yaml").load()
    """

    def __init__(self, settings_path: Path | str | None = None) -> None:
        """Initialize configuration manager.

        Args:
            settings_path: Path to the settings file. If None, uses
                ``fontlocal.yaml`` in the current directory.
        """
        self.settings_path = Path(settings_path) if settings_path else get_config_path()

    def load(self) -> Settings:
        """Load and validate settings from the config file.

        Returns:
            Validated Settings instance

        Raises:
            ConfigError: If the config file doesn't exist or is invalid
        """
        try:
            return Settings.from_yaml_file(self.settings_path)
        except FileNotFoundError as e:
            raise ConfigError(
                f"Configuration file not found: {self.settings_path}\n\n"
                "Please run 'fontlocal config init' to create one."
            ) from e
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Invalid YAML in configuration file:\n{e}\n\n"
                f"Please check {self.settings_path} for syntax errors."
            ) from e
        except (TypeError, ValueError) as e:
            # pydantic's ValidationError is a ValueError
            raise ConfigError(
                f"Invalid configuration:\n{e}\n\n"
                f"Please check {self.settings_path}."
            ) from e

    def create_default(self, force: bool = False) -> Settings:
        """Write a starter settings file.

        Args:
            force: Overwrite an existing file

        Returns:
            The settings written

        Raises:
            ConfigError: If the file exists and ``force`` is False
        """
        if self.settings_path.exists() and not force:
            raise ConfigError(
                f"Configuration file already exists: {self.settings_path}\n\n"
                "Use --force to overwrite it."
            )
        settings = Settings(
            stylesheets=["https://fonts.googleapis.com/css2?family=Inter&display=swap"],
            fonts=[CustomFont(family="Inter", fallbacks=["Helvetica", "Arial"])],
            default_fallbacks=["Arial"],
        )
        settings.to_yaml_file(self.settings_path)
        return settings


def load_settings(settings_path: Path | str | None = None) -> Settings:
    """Load settings from ``settings_path`` (default: ./fontlocal.yaml)."""
    return Configurator(settings_path).load()


def create_default_config(
    settings_path: Path | str | None = None, force: bool = False
) -> Settings:
    """Write a starter settings file; see :meth:`Configurator.create_default`."""
    return Configurator(settings_path).create_default(force=force)
