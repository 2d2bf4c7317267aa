from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from tailwind_cli.common.config import RuntimeConfig


def build_session(runtime: RuntimeConfig) -> requests.Session:
    """Session shared by metadata and asset requests.

    Retries stay off unless ``max_retries`` is raised; callers retry whole operations.
    """
    session = requests.Session()
    retry = Retry(
        total=runtime.max_retries,
        connect=runtime.max_retries,
        read=runtime.max_retries,
        status=runtime.max_retries,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry, pool_maxsize=max(runtime.max_workers, 1))
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers["User-Agent"] = runtime.user_agent
    return session
