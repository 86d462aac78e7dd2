"""Minimal JSON-over-HTTP GET for the rate providers.

Stdlib urllib only, so the widget process can share the provider code without
extra dependencies. One attempt by default: a failed refresh waits for the
next trigger instead of retrying.
"""

from __future__ import annotations

import json
import time
import urllib.error
import urllib.request
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode

USER_AGENT = "tripbudget/0.1 (+rates)"


class HttpError(Exception):
    def __init__(self, message: str, url: str, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


def build_url(base_url: str, params: Optional[Mapping[str, str]] = None) -> str:
    if not params:
        return base_url
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}{urlencode(params)}"


def get_json(
    base_url: str,
    params: Optional[Mapping[str, str]] = None,
    *,
    timeout: float = 10.0,
    retries: int = 0,
    backoff: float = 0.5,
) -> Dict[str, Any]:
    url = build_url(base_url, params)
    request = urllib.request.Request(
        url, headers={"Accept": "application/json", "User-Agent": USER_AGENT}
    )
    last_err: Optional[Exception] = None
    status: Optional[int] = None
    for attempt in range(retries + 1):
        try:
            with urllib.request.urlopen(request, timeout=timeout) as resp:  # nosec B310
                payload = json.loads(resp.read().decode("utf-8"))
            if not isinstance(payload, dict):
                raise ValueError("response body is not a JSON object")
            return payload
        except urllib.error.HTTPError as e:
            last_err, status = e, e.code
        except (urllib.error.URLError, TimeoutError, ValueError) as e:
            # ValueError covers JSON and UTF-8 decode failures
            last_err = e
        if attempt < retries:
            time.sleep(backoff * (2**attempt))
    raise HttpError(f"GET {url} failed: {last_err}", url=url, status=status)
