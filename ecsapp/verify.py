"""Post-deploy smoke check: probe the load balancer until the service answers.

Mirrors the target group health check from outside: GET http://<dns><path>,
retried with linear backoff. Exit 0 = healthy. Exit 1 = never became healthy.
"""

from collections.abc import Callable
from dataclasses import dataclass
import time

import httpx


class ProbeFailed(Exception):
    """Endpoint answered with an error status."""


@dataclass
class CheckResult:
    url: str
    status: str
    attempts: int
    status_code: int | None = None
    error: str | None = None

    @property
    def passed(self) -> bool:
        return self.status == "PASS"


def probe(url: str, timeout: float) -> int:
    """GET url; return status code. Raises ProbeFailed on 4xx/5xx."""
    resp = httpx.get(url, timeout=timeout, follow_redirects=False)
    if resp.status_code >= 400:
        raise ProbeFailed(f"{url} returned {resp.status_code}")
    return resp.status_code


def check_endpoint(
    dns_name: str,
    path: str = "/",
    retries: int = 10,
    backoff: float = 6.0,
    timeout: float = 5.0,
    sleep: Callable[[float], None] = time.sleep,
) -> CheckResult:
    """Probe http://dns_name/path up to retries times."""
    url = f"http://{dns_name}{path}"
    last_error = ""
    for attempt in range(1, retries + 1):
        try:
            code = probe(url, timeout)
            return CheckResult(url=url, status="PASS", attempts=attempt, status_code=code)
        except (ProbeFailed, httpx.HTTPError) as e:
            last_error = str(e)
            if attempt < retries:
                sleep(backoff * attempt)
    return CheckResult(url=url, status="FAIL", attempts=retries, error=last_error)
