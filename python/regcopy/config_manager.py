#!/usr/bin/env python3
"""
Configuration Manager for the registry copier

This module handles loading configuration from application.yaml and
environment variables. All settings live under the top-level ``app`` key.
Keys are matched case-insensitively and without ``_``/``-``, so
``sourceUrl``, ``SourceUrl`` and ``source_url`` name the same setting.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Pattern

import yaml

from regcopy.error_utils import ConfigValidationError, create_config_error

DEFAULT_CONFIG_FILE = "application.yaml"
MATCH_ALL = ".*"


@dataclass
class RegistryConfig:
    """Connection settings for one registry"""

    url: str
    login: str = ""
    password: str = ""
    include: str = MATCH_ALL

    @property
    def host(self) -> str:
        """Registry address as used in image names (no scheme, no trailing slash)"""
        return re.sub(r"^https?://", "", self.url).rstrip("/")

    @property
    def base_url(self) -> str:
        """Registry address as used for HTTP calls (https unless a scheme is given)"""
        url = self.url.rstrip("/")
        if re.match(r"^https?://", url):
            return url
        return f"https://{url}"


def _normalize_key(key: Any) -> str:
    return re.sub(r"[_\-]", "", str(key)).lower()


def compile_include_pattern(pattern: Optional[str]) -> Pattern:
    """Compile the include pattern; an empty or missing pattern matches everything.

    Raises:
        ConfigValidationError: If the pattern is not a valid regular expression
    """
    try:
        return re.compile(pattern or MATCH_ALL)
    except re.error as e:
        raise create_config_error("sourceInclude", pattern, f"invalid regular expression: {e}")


class ConfigManager:
    """Manages configuration for the registry copier"""

    def __init__(self, config_file: str = None, validate: bool = True):
        """Initialize ConfigManager

        Args:
            config_file: Path to configuration YAML file (defaults to CONFIG_FILE env var or ./application.yaml)
            validate: If True, validate configuration on initialization

        Raises:
            ConfigValidationError: If the file cannot be read or validation fails
        """
        if config_file is None:
            config_file = os.environ.get("CONFIG_FILE", DEFAULT_CONFIG_FILE)
        self.config_file = config_file
        self.config = self._load_config()

        if validate:
            self.validate_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load the ``app`` section from the YAML file and merge it over defaults"""
        default_config = {
            "executable": "docker",
            "sourceurl": "",
            "sourcelogin": "",
            "sourcepassword": "",
            "sourceinclude": MATCH_ALL,
            "destinationurl": "",
            "destinationlogin": "",
            "destinationpassword": "",
            "cleanuponfailure": False,
            "requesttimeout": None,
            "loglevel": "INFO",
        }

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigValidationError(
                f"Unable to read config file {self.config_file}",
                suggestions=[
                    "Create application.yaml in the working directory",
                    "Or point --config / CONFIG_FILE at an existing file",
                ],
                details={"error_message": str(e)},
            )
        except UnicodeDecodeError as e:
            raise ConfigValidationError(
                f"Unable to decode config file {self.config_file}",
                suggestions=["Save the file as UTF-8 text"],
                details={"error_message": str(e)},
            )
        except yaml.YAMLError as e:
            raise ConfigValidationError(
                f"Unable to parse config file {self.config_file}",
                suggestions=["Check the file is valid YAML"],
                details={"error_message": str(e)},
            )

        if not isinstance(raw, dict):
            raise ConfigValidationError(f"Config file {self.config_file} must contain a mapping")

        app = {}
        for key, value in raw.items():
            if _normalize_key(key) == "app":
                app = value
        if app is None:
            app = {}
        if not isinstance(app, dict):
            raise create_config_error("app", app, "the 'app' key must hold a mapping of settings")
        if not app:
            logging.warning(f"No 'app' settings found in {self.config_file}, using defaults")

        return self._merge_config(default_config, app)

    def _merge_config(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Merge user settings over defaults, normalizing key spelling"""
        result = default.copy()
        for key, value in user.items():
            normalized = _normalize_key(key)
            if normalized not in default:
                logging.warning(f"Ignoring unknown configuration key 'app.{key}'")
                continue
            if value is None and default[normalized] is not None:
                # null in YAML keeps the default
                continue
            result[normalized] = value
        return result

    def _get_str(self, key: str) -> str:
        value = self.config.get(key)
        return "" if value is None else str(value)

    # Engine configuration
    def get_executable(self) -> str:
        """Get container engine executable from environment or config"""
        return os.environ.get("ENGINE_EXECUTABLE") or self._get_str("executable")

    # Registry configuration
    def get_source_registry(self) -> RegistryConfig:
        """Get source registry settings; SOURCE_PASSWORD overrides the configured password"""
        return RegistryConfig(
            url=self._get_str("sourceurl"),
            login=self._get_str("sourcelogin"),
            password=os.environ.get("SOURCE_PASSWORD") or self._get_str("sourcepassword"),
            include=self._get_str("sourceinclude") or MATCH_ALL,
        )

    def get_destination_registry(self) -> RegistryConfig:
        """Get destination registry settings; DESTINATION_PASSWORD overrides the configured password"""
        return RegistryConfig(
            url=self._get_str("destinationurl"),
            login=self._get_str("destinationlogin"),
            password=os.environ.get("DESTINATION_PASSWORD") or self._get_str("destinationpassword"),
        )

    def get_include_pattern(self) -> Pattern:
        """Get the compiled source include pattern"""
        return compile_include_pattern(self.get_source_registry().include)

    # Behaviour
    def get_cleanup_on_failure(self) -> bool:
        """Whether partially copied local images are removed after a failed step"""
        value = self.config.get("cleanuponfailure", False)
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return bool(value)

    def get_request_timeout(self) -> Optional[float]:
        """Get registry HTTP timeout in seconds, or None to wait indefinitely"""
        timeout = self.config.get("requesttimeout")
        if timeout is None or timeout == "":
            return None
        try:
            return float(timeout)
        except (ValueError, TypeError):
            raise ConfigValidationError(
                f"requestTimeout must be a number, got: {timeout} (type: {type(timeout).__name__})"
            )

    def get_log_level(self) -> str:
        """Get logging level name from config"""
        return self._get_str("loglevel").upper() or "INFO"

    def validate_config(self) -> None:
        """Validate configuration values

        Raises:
            ConfigValidationError: If configuration is invalid
        """
        errors = []
        warnings = []

        if not self.get_executable().strip():
            errors.append("executable is required and cannot be empty")

        for side, registry in (("source", self.get_source_registry()),
                               ("destination", self.get_destination_registry())):
            if not registry.url.strip():
                errors.append(f"{side}Url is required and cannot be empty")
            elif not self._is_valid_registry_url(registry.url):
                warnings.append(
                    f"{side}Url '{registry.url}' may be invalid (expected format: hostname[:port])"
                )
            if registry.login and not registry.password:
                warnings.append(f"{side}Login is set but {side}Password is empty")

        try:
            compile_include_pattern(self.get_source_registry().include)
        except ConfigValidationError as e:
            errors.append(e.details.get("reason", str(e)))

        try:
            timeout = self.get_request_timeout()
            if timeout is not None and timeout <= 0:
                errors.append(f"requestTimeout must be a positive number, got: {timeout}")
        except ConfigValidationError as e:
            errors.append(e.message)

        for warning in warnings:
            logging.warning(f"Configuration warning: {warning}")

        if errors:
            error_msg = "Configuration validation failed:\n  " + "\n  ".join(errors)
            logging.error(error_msg)
            raise ConfigValidationError(error_msg, details={"config_file": self.config_file})

    def _is_valid_registry_url(self, url: str) -> bool:
        """Validate registry URL format"""
        if not url:
            return False

        url = re.sub(r"^https?://", "", url).rstrip("/")

        # hostname[:port] with an optional path prefix
        pattern = r"^[a-zA-Z0-9]([a-zA-Z0-9\-\.]*[a-zA-Z0-9])?(:[0-9]{1,5})?(/[a-zA-Z0-9_\-\./]+)?$"
        return bool(re.match(pattern, url))

    def print_config(self):
        """Print current configuration"""
        source = self.get_source_registry()
        destination = self.get_destination_registry()
        print("Current Configuration:")
        print(f"  Config File: {self.config_file}")
        print(f"  Engine Executable: {self.get_executable()}")
        print(f"  Source Registry: {source.url}")
        print(f"  Source Login: {source.login or 'Not set'}")
        print(f"  Source Password: {'*' * len(source.password) if source.password else 'Not set'}")
        print(f"  Include Pattern: {source.include}")
        print(f"  Destination Registry: {destination.url}")
        print(f"  Destination Login: {destination.login or 'Not set'}")
        print(f"  Destination Password: {'*' * len(destination.password) if destination.password else 'Not set'}")
        print(f"  Cleanup On Failure: {self.get_cleanup_on_failure()}")
        print(f"  Request Timeout: {self.get_request_timeout() or 'None'}")
