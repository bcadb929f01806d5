"""
ConfigLoader module for loading and validating extraction configuration
"""

import os
import tempfile
import tomllib
from pathlib import Path
from dataclasses import dataclass, field, replace
from typing import Dict, Any, List, Optional, Tuple


DEFAULT_BASE_URL = "https://api.lever.co/v1"
DEFAULT_TOKEN_ENV = "LEVER_API_TOKEN"


class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete"""
    pass


@dataclass
class CacheConfig:
    """Development response cache settings"""
    enabled: bool = False
    directory: Path = Path("cache")
    expiration_seconds: int = 3600


@dataclass
class ExtractConfig:
    """Configuration for a single extraction run"""
    token: str
    endpoint: str
    input_path: Optional[Path] = None
    created_at_start: str = ""
    archived_at_start: str = ""
    perform_as: str = ""
    token_env: str = DEFAULT_TOKEN_ENV
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 10.0
    request_interval_seconds: float = 0.1
    checkpoint_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    output_path: Optional[Path] = None
    reset_checkpoint: bool = False
    cache: CacheConfig = field(default_factory=CacheConfig)
    debug: bool = False

    def query_parameters(self) -> List[Tuple[str, str]]:
        """
        Static query parameters sent with every request of the run

        Returns:
            Ordered list of (field, value) pairs, only for options that are set
        """
        params = []
        if self.created_at_start:
            params.append(('created_at_start', self.created_at_start))
        if self.archived_at_start:
            params.append(('archived_at_start', self.archived_at_start))
        if self.perform_as:
            params.append(('perform_as', self.perform_as))
        return params

    def without_token(self) -> 'ExtractConfig':
        """Copy safe to record in run history; the token is read again from token_env"""
        return replace(self, token="")


class ConfigLoader:
    """Loads TOML configuration files and merges them with command-line options"""

    # Known configuration sections and the keys each accepts
    KNOWN_SECTIONS = {
        'api': ['base_url', 'timeout_seconds'],
        'authentication': ['token_env'],
        'rate_limits': ['request_interval_seconds'],
        'checkpoint': ['directory'],
        'cache': ['enabled', 'directory', 'expiration_seconds'],
    }

    @staticmethod
    def load_toml_config(config_path: Path) -> Dict[str, Any]:
        """
        Load extraction settings from a TOML file

        Args:
            config_path: Path to the TOML configuration file

        Returns:
            Parsed configuration sections

        Raises:
            ConfigurationError: If the file is missing, unreadable, malformed
                or contains unknown sections or keys
        """
        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'rb') as f:
                config_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Unable to read configuration file {config_path}: {e}") from e

        ConfigLoader._validate_sections(config_data)
        return config_data

    @staticmethod
    def _validate_sections(config_data: Dict[str, Any]) -> None:
        """
        Validate that only known sections and keys are present

        Raises:
            ConfigurationError: If any section or key is not recognised
        """
        unknown_items = []

        for section_name, section_data in config_data.items():
            if section_name not in ConfigLoader.KNOWN_SECTIONS:
                unknown_items.append(f"Section [{section_name}]")
                continue
            if not isinstance(section_data, dict):
                unknown_items.append(f"Section [{section_name}] must be a table")
                continue
            for key in section_data:
                if key not in ConfigLoader.KNOWN_SECTIONS[section_name]:
                    unknown_items.append(f"Key '{key}' in section [{section_name}]")

        if unknown_items:
            raise ConfigurationError(
                f"Unknown configuration items: {', '.join(unknown_items)}"
            )

    @staticmethod
    def build_config(options: Any, file_config: Optional[Dict[str, Any]] = None) -> ExtractConfig:
        """
        Build the run configuration from parsed command-line options

        Command-line values take precedence over values from the config file.

        Args:
            options: argparse namespace produced by the command-line parser
            file_config: Sections loaded with load_toml_config, if any

        Returns:
            ExtractConfig for the run

        Raises:
            ConfigurationError: If no endpoint or API token is available
        """
        file_config = file_config or {}
        api = file_config.get('api', {})
        authentication = file_config.get('authentication', {})
        rate_limits = file_config.get('rate_limits', {})
        checkpoint = file_config.get('checkpoint', {})
        cache = file_config.get('cache', {})

        if not options.endpoint:
            raise ConfigurationError("No endpoint given use --endpoint= to specify one.")

        token_env = authentication.get('token_env', DEFAULT_TOKEN_ENV)
        token = ConfigLoader.resolve_token(token_env, options.token)

        checkpoint_dir = options.checkpoint_dir or checkpoint.get('directory')

        return ExtractConfig(
            token=token,
            endpoint=options.endpoint,
            input_path=Path(options.input) if options.input else None,
            created_at_start=options.created_at_start or "",
            archived_at_start=options.archived_at_start or "",
            perform_as=options.perform_as or "",
            token_env=token_env,
            base_url=api.get('base_url', DEFAULT_BASE_URL),
            timeout_seconds=float(api.get('timeout_seconds', 10.0)),
            request_interval_seconds=float(rate_limits.get('request_interval_seconds', 0.1)),
            checkpoint_dir=Path(checkpoint_dir) if checkpoint_dir else Path(tempfile.gettempdir()),
            output_path=Path(options.output) if options.output else None,
            reset_checkpoint=bool(options.reset_checkpoint),
            cache=CacheConfig(
                enabled=bool(options.cache or cache.get('enabled', False)),
                directory=Path(cache.get('directory', 'cache')),
                expiration_seconds=int(cache.get('expiration_seconds', 3600))
            ),
            debug=bool(options.debug)
        )

    @staticmethod
    def resolve_token(token_env: str, token: Optional[str] = None) -> str:
        """
        Use the given token, else read it from the named environment variable

        Raises:
            ConfigurationError: If neither source provides a token
        """
        token = token or ConfigLoader.get_environment_value(token_env)
        if not token:
            raise ConfigurationError("No api token given use --token= to specify one.")
        return token

    @staticmethod
    def get_environment_value(env_var_name: str) -> str:
        """
        Get environment variable value, empty when unset

        Args:
            env_var_name: Name of the environment variable

        Returns:
            Value of the environment variable or an empty string
        """
        return os.getenv(env_var_name, "")
