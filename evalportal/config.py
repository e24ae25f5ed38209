"""Runtime configuration loaded from the environment and an optional .env file."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from .const import (
	DEFAULT_API_URL,
	DEFAULT_TIMEOUT,
	DEFAULT_TOKEN_FILE,
	ENV_API_URL,
	ENV_TIMEOUT,
	ENV_TOKEN_FILE,
)

_LOGGER = logging.getLogger(__name__)


@dataclass
class EvalPortalConfig:
	"""Settings shared by the client, the token store and the CLI."""
	api_url: str = DEFAULT_API_URL
	token_file: Path = Path(DEFAULT_TOKEN_FILE).expanduser()
	timeout: float = DEFAULT_TIMEOUT


def load_config(env_file: Optional[Union[str, Path]] = None) -> EvalPortalConfig:
	"""Build the configuration from environment variables.

	Values from ``env_file`` (or a ``.env`` found from the working directory)
	are loaded first without overriding variables that are already set.
	"""
	if env_file is not None:
		load_dotenv(env_file)
	else:
		load_dotenv()

	api_url = os.getenv(ENV_API_URL) or DEFAULT_API_URL
	token_file = Path(os.getenv(ENV_TOKEN_FILE) or DEFAULT_TOKEN_FILE).expanduser()

	timeout = DEFAULT_TIMEOUT
	raw_timeout = os.getenv(ENV_TIMEOUT)
	if raw_timeout:
		try:
			timeout = float(raw_timeout)
		except ValueError:
			_LOGGER.warning(f"Ignoring invalid {ENV_TIMEOUT} value {raw_timeout!r}, using {DEFAULT_TIMEOUT}s")

	return EvalPortalConfig(api_url=api_url.rstrip("/"), token_file=token_file, timeout=timeout)
