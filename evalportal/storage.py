"""Persistent token storage for the evaluation portal."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .api.auth import TokenSession
from .const import TOKEN_STORAGE_KEY

_LOGGER = logging.getLogger(__name__)


class FileTokenSession(TokenSession):
	"""Keeps the bearer token in a small JSON file.

	The file holds a single object with the token under ``TOKEN_STORAGE_KEY``.
	A missing or unreadable file means no token. Writes replace the file as a
	whole, so the last write wins.
	"""

	def __init__(self, path: Union[str, Path], key: str = TOKEN_STORAGE_KEY) -> None:
		"""Initialise storage handler."""
		self.path = Path(path).expanduser()
		self.key = key

	def get(self) -> Optional[str]:
		token = self._load().get(self.key)
		if isinstance(token, str) and token:
			return token
		return None

	def set(self, token: str) -> None:
		data = self._load()
		data[self.key] = token
		self._save(data)
		_LOGGER.debug(f"Stored token in {self.path}")

	def clear(self) -> None:
		data = self._load()
		if self.key not in data:
			return
		del data[self.key]
		if data:
			self._save(data)
		else:
			try:
				self.path.unlink()
			except FileNotFoundError:
				pass
		_LOGGER.debug(f"Removed token from {self.path}")

	def _load(self) -> Dict[str, Any]:
		try:
			with open(self.path, "r", encoding="utf-8") as f:
				data = json.load(f)
		except FileNotFoundError:
			return {}
		except (OSError, json.JSONDecodeError) as e:
			_LOGGER.warning(f"Could not read token storage {self.path}: {e}")
			return {}

		if not isinstance(data, dict):
			_LOGGER.warning(f"Ignoring token storage {self.path}: expected an object")
			return {}
		return data

	def _save(self, data: Dict[str, Any]) -> None:
		self.path.parent.mkdir(parents=True, exist_ok=True)
		tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
		with open(tmp_path, "w", encoding="utf-8") as f:
			json.dump(data, f)
		os.replace(tmp_path, self.path)
