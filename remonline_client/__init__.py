"""
Python client for interacting with the RemOnline REST API.

This package provides a `RemOnlineClient` class that exchanges a
RemOnline API key for a bearer token, stores that token in a JSON
file and makes authenticated requests to API endpoints.

RemOnline signals an expired token with ``{"success": false}`` in
the response body.  The client then requests a new token from
``token/new``, writes it to the token file and repeats the original
request once.

Examples
--------

```python
from remonline_client import RemOnlineClient

client = RemOnlineClient(key_path="apiKey.json", token_path="apiToken.json")

orders = client.get_orders_by_id(7777777)
customer = client.get_client_by_phone("+79157877757")
order_id = client.create_order({
    "branch_id": 21464,
    "order_type": 36099,
    "kindof_good": "iPhone",
    "malfunction": "Broken screen",
})
```
"""

from .client import HTTPMethod, RemOnlineClient, RemOnlineRequest
from .credentials import Credentials
from .exceptions import (
    RemOnlineAPIError,
    RemOnlineAuthError,
    RemOnlineConfigError,
    RemOnlineError,
)

__all__ = [
    "RemOnlineClient",
    "RemOnlineRequest",
    "HTTPMethod",
    "Credentials",
    "RemOnlineError",
    "RemOnlineAuthError",
    "RemOnlineAPIError",
    "RemOnlineConfigError",
]
