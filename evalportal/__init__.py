"""Client and screen controllers for the student evaluation portal."""

import logging
from typing import Optional

import aiohttp

from .api.client import EvalPortalClient
from .config import EvalPortalConfig, load_config
from .storage import FileTokenSession

_LOGGER = logging.getLogger(__name__)

__version__ = "1.0.0"


def create_client(
	config: Optional[EvalPortalConfig] = None,
	session: Optional[aiohttp.ClientSession] = None,
) -> EvalPortalClient:
	"""Build a client that keeps its token in the configured token file.

	Use the result as an async context manager so the HTTP session is closed.
	"""
	if config is None:
		config = load_config()
	_LOGGER.debug(f"Creating client for {config.api_url} (token file {config.token_file})")
	return EvalPortalClient(
		session=session,
		token_session=FileTokenSession(config.token_file),
		base_url=config.api_url,
		timeout=config.timeout,
	)
