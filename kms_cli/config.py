import json
import logging
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from kms_cli.exceptions import ConfigurationException
from kms_cli.models import Configuration

logger = logging.getLogger(__name__)


def read_configuration(path: Union[str, Path]) -> Configuration:
    """Load and validate the JSON configuration; any failure is fatal to the CLI"""
    try:
        with open(path, "rb") as configuration_file:
            content = json.loads(configuration_file.read())
    except OSError as exc:
        raise ConfigurationException(f"Read config {path} failed: {exc.strerror or exc}", path=str(path))
    except ValueError as exc:
        raise ConfigurationException(f"Read config {path} failed: {exc}", path=str(path))

    if not isinstance(content, dict):
        raise ConfigurationException(f"Read config {path} failed: expected a JSON object", path=str(path))

    try:
        configuration = Configuration.model_validate(content)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
        )
        raise ConfigurationException(f"Read config {path} failed: {errors}", path=str(path))

    logger.debug("Loaded configuration from %s", path)
    return configuration
