"""
Persistent credentials for :class:`~remonline_client.RemOnlineClient`.

The API key lives in a JSON file of the form ``{"apiKey": "..."}`` and
is never written back.  The bearer token lives in a separate
``{"token": "..."}`` file which is overwritten every time a new token
is issued.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Union

from .exceptions import RemOnlineConfigError

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def _read_json_object(path: PathLike) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        content = json.load(fh)
    if not isinstance(content, dict):
        raise RemOnlineConfigError(f"{os.fspath(path)} does not hold a JSON object")
    return content


class Credentials:
    """API key plus the current bearer token and where it is stored.

    Parameters
    ----------
    api_key : str
        Long-lived RemOnline API key.
    token : str
        Bearer token currently in use.
    token_path : str or path-like
        File the token is persisted to on :meth:`update_token`.
    """

    def __init__(self, api_key: str, token: str, token_path: PathLike) -> None:
        self._api_key = api_key
        self.token = token
        self.token_path = token_path

    @property
    def api_key(self) -> str:
        return self._api_key

    @classmethod
    def load(cls, key_path: PathLike, token_path: PathLike) -> "Credentials":
        """Read both credential files.

        ``FileNotFoundError`` and ``json.JSONDecodeError`` propagate
        unchanged.  A key file without ``apiKey`` or a file that is not
        a JSON object raises :class:`RemOnlineConfigError`.  A missing
        or empty ``token`` is accepted.
        """
        api_key = _read_json_object(key_path).get("apiKey")
        if not api_key:
            raise RemOnlineConfigError(f"{os.fspath(key_path)} has no 'apiKey' field")
        # an empty token is rejected by the API and refreshed on the first call
        token = _read_json_object(token_path).get("token") or ""
        logger.debug("Loaded RemOnline credentials from %s", os.fspath(key_path))
        return cls(str(api_key), str(token), token_path)

    def update_token(self, token: str) -> None:
        """Replace the token in memory and on disk.

        The file is rewritten in full before the in-memory token
        changes.  Any ``OSError`` from the write propagates and leaves
        the current token in place.
        """
        with open(self.token_path, "w", encoding="utf-8") as fh:
            json.dump({"token": token}, fh, separators=(",", ":"))
        self.token = token

    def __repr__(self) -> str:
        return f"Credentials(token_path={os.fspath(self.token_path)!r})"
