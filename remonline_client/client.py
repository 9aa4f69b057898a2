"""
Client implementation for the RemOnline REST API.

This module defines the :class:`RemOnlineClient` class which
exchanges a RemOnline API key for a bearer token, keeps that token
in a JSON file between runs and performs HTTP requests against the
RemOnline API.  RemOnline reports an expired token in the response
body (``{"success": false}``) rather than through the HTTP status,
so the client refreshes the token and retries the request once
whenever it sees such an envelope.

Usage
-----

.. code-block:: python

    from remonline_client import RemOnlineClient

    client = RemOnlineClient(
        key_path="apiKey.json",      # {"apiKey": "..."}
        token_path="apiToken.json",  # {"token": "..."}
    )

    for branch in client.get_branches():
        print(branch["name"])

    client_id = client.create_client(name="Vasya", phone=79157877757)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

import requests

from .credentials import Credentials, PathLike
from .exceptions import RemOnlineAPIError, RemOnlineAuthError

logger = logging.getLogger(__name__)


class HTTPMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @classmethod
    def coerce(cls, value: Union[str, "HTTPMethod"]) -> "HTTPMethod":
        if isinstance(value, cls):
            return value
        return cls(str(value).upper())


@dataclass
class RemOnlineRequest:
    """Everything needed to issue one API call, minus the token.

    ``path`` is relative to the client's base URL and never carries a
    query string.  ``params`` holds scalar query parameters while
    ``repeated`` maps a key such as ``"ids[]"`` to the values that are
    sent as one ``key=value`` pair each, in order.
    """

    method: HTTPMethod
    path: str
    params: Dict[str, Any] = field(default_factory=dict)
    repeated: Dict[str, List[Any]] = field(default_factory=dict)
    body: Optional[Any] = None

    def __post_init__(self) -> None:
        self.method = HTTPMethod.coerce(self.method)
        if "?" in self.path:
            raise ValueError("path must not contain a query string: %r" % self.path)


def build_query(token: str, request: RemOnlineRequest) -> List[Tuple[str, str]]:
    """Return the ordered query pairs for ``request``.

    The token comes first, followed by the scalar parameters and then
    one pair per element of every repeated parameter.
    """
    pairs: List[Tuple[str, str]] = [("token", token)]
    for key, value in request.params.items():
        pairs.append((key, _query_value(value)))
    for key, values in request.repeated.items():
        for value in values:
            pairs.append((key, _query_value(value)))
    return pairs


def _query_value(value: Any) -> str:
    # JSON spelling for booleans and null
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return ""
    return str(value)


def _as_list(values: Tuple[Any, ...]) -> List[Any]:
    # f(1, 2, 3) and f([1, 2, 3]) are equivalent
    if len(values) == 1 and isinstance(values[0], (list, tuple)):
        return list(values[0])
    return list(values)


def _data(envelope: Any) -> Any:
    """Return ``envelope["data"]``, or ``None`` for a refused request."""
    if not isinstance(envelope, dict):
        return None
    return envelope.get("data")


def _created_id(envelope: Any) -> Any:
    data = _data(envelope)
    if not isinstance(data, dict) or "id" not in data:
        raise RemOnlineAPIError(
            f"RemOnline did not return a created id: {envelope!r}",
            envelope=envelope,
        )
    return data["id"]


class RemOnlineClient:
    """A small client for the RemOnline REST API.

    Parameters
    ----------
    key_path : str or path-like
        JSON file holding ``{"apiKey": "..."}``.  It is read once.
    token_path : str or path-like
        JSON file holding ``{"token": "..."}``.  It is read once and
        rewritten every time a new token is issued.
    base_url : str, optional
        Override the API base URL.  Defaults to
        ``https://api.remonline.ru/``.
    timeout : float, optional
        Timeout in seconds handed to ``requests`` for every call.  The
        default of ``None`` waits indefinitely.

    Notes
    -----
    The token is refreshed at most once per call.  Two calls running
    at the same time may both refresh; the token file then holds
    whichever token was written last.
    """

    _DEFAULT_BASE_URL = "https://api.remonline.ru/"
    _TOKEN_PATH = "token/new"

    def __init__(
        self,
        *,
        key_path: PathLike,
        token_path: PathLike,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        if not key_path:
            raise ValueError("key_path must be provided")
        if not token_path:
            raise ValueError("token_path must be provided")

        self.credentials = Credentials.load(key_path, token_path)
        self.base_url = (base_url or self._DEFAULT_BASE_URL).rstrip("/") + "/"
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def refresh_token(self) -> str:
        """Exchange the API key for a new token and persist it.

        Raises
        ------
        RemOnlineAuthError
            If the token endpoint answers without ``success``.
        OSError
            If the token file cannot be written.
        """
        logger.info("Requesting a new RemOnline token")
        response = requests.post(
            self._prepare_url(self._TOKEN_PATH),
            params={"api_key": self.credentials.api_key},
            timeout=self.timeout,
        )
        payload = response.json()
        if not isinstance(payload, dict) or not payload.get("success"):
            raise RemOnlineAuthError(
                f"Token refresh rejected: {response.text}",
                response_text=response.text,
                payload=payload,
            )

        token = payload.get("token")
        if not token:
            raise RemOnlineAuthError(
                "Token refresh response did not contain a token",
                response_text=response.text,
                payload=payload,
            )
        self.credentials.update_token(token)
        logger.info("Stored new RemOnline token in %s", self.credentials.token_path)
        return self.credentials.token

    # ------------------------------------------------------------------
    # HTTP request helpers
    # ------------------------------------------------------------------
    def _prepare_url(self, path: str) -> str:
        return f"{self.base_url}{path.lstrip('/')}"

    def _send(self, request: RemOnlineRequest) -> Any:
        url = self._prepare_url(request.path)
        logger.debug("%s %s", request.method.value, url)
        kwargs: Dict[str, Any] = {}
        if request.body is not None:
            kwargs["json"] = request.body
        response = requests.request(
            method=request.method.value,
            url=url,
            params=build_query(self.credentials.token, request),
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
            **kwargs,
        )
        return response.json()

    def _request(self, request: RemOnlineRequest) -> Any:
        """Perform ``request`` and return the parsed JSON envelope.

        When the envelope has ``"success": false`` the token is
        refreshed and the request is sent exactly once more with the
        new token.  The second envelope is returned as is, even if it
        reports another failure.  Transport and JSON errors from either
        attempt propagate unchanged.
        """
        envelope = self._send(request)
        if isinstance(envelope, dict) and envelope.get("success") is False:
            logger.warning(
                "RemOnline rejected %s %s, refreshing token",
                request.method.value,
                request.path,
            )
            self.refresh_token()
            envelope = self._send(request)
        return envelope

    # ------------------------------------------------------------------
    # Generic verbs
    # ------------------------------------------------------------------
    def get(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        """Perform a GET request and return the raw envelope."""
        return self._request(RemOnlineRequest(HTTPMethod.GET, path, params=dict(params or {})))

    def post(
        self,
        path: str,
        *,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Perform a POST request and return the raw envelope."""
        return self._request(
            RemOnlineRequest(HTTPMethod.POST, path, params=dict(params or {}), body=json)
        )

    def patch(
        self,
        path: str,
        *,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Perform a PATCH request and return the raw envelope."""
        return self._request(
            RemOnlineRequest(HTTPMethod.PATCH, path, params=dict(params or {}), body=json)
        )

    # ------------------------------------------------------------------
    # RemOnline operations
    # ------------------------------------------------------------------
    def get_branches(self) -> Any:
        """Return the list of branches in the account."""
        envelope = self._request(RemOnlineRequest(HTTPMethod.GET, "branches/"))
        return _data(envelope)

    def get_orders_by_id(self, *ids: Any) -> Any:
        """Return the orders with the given ids.

        Accepts ``get_orders_by_id(1, 2)`` as well as
        ``get_orders_by_id([1, 2])``.
        """
        envelope = self._request(
            RemOnlineRequest(HTTPMethod.GET, "order/", repeated={"ids[]": _as_list(ids)})
        )
        return _data(envelope)

    def get_statuses(self) -> Any:
        """Return the order statuses configured in the account."""
        envelope = self._request(RemOnlineRequest(HTTPMethod.GET, "statuses/"))
        return _data(envelope)

    def get_client_by_phone(self, *phones: Any) -> Optional[Dict[str, Any]]:
        """Return the first client matching any of ``phones``, or ``None``."""
        numbers = [str(phone) for phone in _as_list(phones)]
        envelope = self._request(
            RemOnlineRequest(HTTPMethod.GET, "clients/", repeated={"phones[]": numbers})
        )
        matches = _data(envelope)
        return matches[0] if matches else None

    def create_client(self, name: str, phone: Any) -> Any:
        """Create a client and return its id.

        Raises :class:`RemOnlineAPIError` if the request is refused even
        after a token refresh.
        """
        phone = str(phone)
        envelope = self._request(
            RemOnlineRequest(
                HTTPMethod.POST,
                "clients/",
                repeated={"name": [name], "phone[]": [phone]},
                body={"name": name, "phone[]": phone},
            )
        )
        return _created_id(envelope)

    def create_order(self, order_data: Dict[str, Any]) -> Any:
        """Create an order and return its id.

        ``order_data`` is sent both as query parameters and as the JSON
        body, e.g. ``{"branch_id": 21464, "order_type": 36099,
        "kindof_good": "iPhone", "malfunction": "..."}``.  Raises
        :class:`RemOnlineAPIError` if no id comes back.
        """
        envelope = self._request(
            RemOnlineRequest(
                HTTPMethod.POST, "order/", params=dict(order_data), body=order_data
            )
        )
        return _created_id(envelope)

    # Older method names kept for callers of the first release
    get_branches_list = get_branches
    create_new_order = create_order
