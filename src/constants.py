"""Constants used in the project."""

import logging
import os
import sys
from enum import Enum

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    COMMAND_ERROR = 3
    NOT_IMPLEMENTED = 4
    USAGE_ERROR = 64


class OutputFormats(Enum):
    """Output formats for the listing verbs.

    Args:
        Enum (string): Output formats supported by the program.
    """

    TABLE = "table"
    JSON = "json"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    PROG_NAME = "upm"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    ENV_LOG_LEVEL = "UPM_LOG_LEVEL"
    ENV_CONFIG = "UPM_CONFIG"
    DEFAULT_CONFIG_FILE = ".upm.yml"

    REGISTRY_URL_PYPI_XMLRPC = "https://pypi.org/pypi"
    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    NPM_SEARCH_SIZE = 20

    PYTHON_EXECUTABLE = sys.executable or "python3"
    CASK_DEFAULT_SOURCES = ["gnu", "melpa", "org"]

    OUTPUT_FORMATS = [OutputFormats.TABLE.value, OutputFormats.JSON.value]


def _resolve_config_path(explicit_path=None):
    """Pick the config file: CLI flag, then environment, then ./.upm.yml."""
    if explicit_path:
        return explicit_path
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path:
        return env_path
    if os.path.isfile(Constants.DEFAULT_CONFIG_FILE):
        return Constants.DEFAULT_CONFIG_FILE
    return None


def _load_yaml_config(explicit_path=None):
    """Load the YAML config file and apply its overrides onto Constants.

    Args:
        explicit_path (str, optional): Path given on the command line.

    Returns:
        dict: The parsed configuration (empty when no file is in use).
    """
    import yaml  # pylint: disable=import-outside-toplevel

    path = _resolve_config_path(explicit_path)
    if not path:
        return {}

    try:
        with open(path, "r", encoding="utf-8") as fh:
            cfg = yaml.safe_load(fh) or {}
    except FileNotFoundError:
        logger.error("Config file not found: %s", path)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except (OSError, yaml.YAMLError) as e:
        logger.error("Failed to load config %s: %s", path, e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    if not isinstance(cfg, dict):
        logger.error("Config %s: expected a mapping at top level", path)
        sys.exit(ExitCodes.FILE_ERROR.value)

    apply_config(cfg)
    logger.debug("Loaded config from %s", path)
    return cfg


def _config_error(msg, *args):
    logger.error(msg, *args)
    sys.exit(ExitCodes.FILE_ERROR.value)


def _config_section(cfg, name):
    section = cfg.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        _config_error("Config section '%s': expected a mapping, got %s",
                      name, type(section).__name__)
    return section


def apply_config(cfg):
    """Apply a parsed configuration mapping onto Constants.

    Unknown sections and keys are ignored. Known keys with a value of the
    wrong type are fatal.
    """
    python_cfg = _config_section(cfg, "python")
    if python_cfg.get("executable"):
        Constants.PYTHON_EXECUTABLE = str(python_cfg["executable"])
    if python_cfg.get("xmlrpc_url"):
        Constants.REGISTRY_URL_PYPI_XMLRPC = str(python_cfg["xmlrpc_url"])

    npm_cfg = _config_section(cfg, "npm")
    if npm_cfg.get("registry_url"):
        url = str(npm_cfg["registry_url"])
        Constants.REGISTRY_URL_NPM = url if url.endswith("/") else url + "/"
    timeout = npm_cfg.get("request_timeout")
    if timeout is not None:
        # bool is an int subclass; `request_timeout: yes` is not a timeout.
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
            _config_error("Config npm.request_timeout: expected a positive integer, got %r",
                          timeout)
        Constants.REQUEST_TIMEOUT = timeout

    cask_cfg = _config_section(cfg, "cask")
    sources = cask_cfg.get("sources")
    if sources is not None:
        if not isinstance(sources, list):
            _config_error("Config cask.sources: expected a list, got %r", sources)
        Constants.CASK_DEFAULT_SOURCES = [str(s) for s in sources]
