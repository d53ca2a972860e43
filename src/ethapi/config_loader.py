"""
Configuration Loading.

One YAML file configures a watcher process:
- `mqtt:`  how `MqttTransport` reaches the broker.
- `api:`   the `ApiConfig` (polling, subscriptions, middleware).
- `watch:` which topics the runner subscribes to.

A section of the wrong shape raises ConfigurationError naming the section.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import yaml

from ethapi.errors import ConfigurationError
from ethapi.models import ApiConfig

logger = logging.getLogger(__name__)

SECTIONS = ('api', 'mqtt', 'watch')


def load_config(config_path: Union[str, Path] = "config.yaml") -> Dict[str, Any]:
    """
    Reads and checks the config file. A missing file means defaults (`{}`);
    empty sections are normalised to `{}`.
    """
    path = Path(config_path)
    if not path.exists():
        logger.warning(f"No config at {path}, running on defaults")
        return {}

    try:
        with path.open('r') as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Cannot parse {path}: {e}")
        raise

    config = validate_config(raw, source=str(path))
    logger.info(f"Loaded {', '.join(sorted(config)) or 'no'} section(s) from {path}")
    return config


def validate_config(raw: Any, source: str = "config") -> Dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{source}: expected a mapping at the top level, got {type(raw).__name__}")

    config = dict(raw)
    for section in SECTIONS:
        value = config.get(section)
        if value is None:
            if section in config:
                config[section] = {}
            continue
        if not isinstance(value, dict):
            raise ConfigurationError(f"{source}: section '{section}' must be a mapping, got {type(value).__name__}")

    unknown = sorted(set(config) - set(SECTIONS))
    if unknown:
        logger.warning(f"{source}: ignoring unknown section(s) {', '.join(map(str, unknown))}")

    configured_topics(config, source)
    return config


def configured_topics(config: Dict[str, Any], source: str = "config") -> List[str]:
    """The `watch.topics` list, or the default block number topic."""
    topics = config.get('watch', {}).get('topics', ['eth_blockNumber'])
    if not isinstance(topics, list) or not all(isinstance(topic, str) for topic in topics):
        raise ConfigurationError(f"{source}: 'watch.topics' must be a list of topic names")
    return topics


def load_api_config(config_path: Union[str, Path] = "config.yaml") -> Tuple[ApiConfig, Dict[str, Any]]:
    """Loads the file and builds the ApiConfig, returning it with the raw sections."""
    config = load_config(config_path)
    try:
        api_config = ApiConfig.from_dict(config)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{config_path}: invalid 'api' section: {e}") from e
    return api_config, config
