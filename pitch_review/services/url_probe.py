"""
Reachability probe for product URLs.

Issues a single HEAD request with a bounded timeout. Never raises: every
outcome, including transport errors, is reported as a UrlProbeResult.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

from ..config.settings import PROBE_CONFIG
from ..models.schemas import ProbeOutcome, UrlProbeResult

log = logging.getLogger(__name__)


def extract_host(url: str) -> Optional[str]:
    """Return the lower-cased host of an http(s) URL, or None if malformed"""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return None
    return parsed.hostname.lower()


class UrlProbe:
    """HEAD-request probe backed by httpx"""

    def __init__(self, timeout: Optional[float] = None, client: Optional[httpx.Client] = None):
        self.timeout = timeout or PROBE_CONFIG["timeout_seconds"]
        self._client = client

    def probe(self, url: Optional[str]) -> UrlProbeResult:
        if not url or not url.strip():
            return UrlProbeResult(outcome=ProbeOutcome.MISSING)

        host = extract_host(url)
        if host is None:
            return UrlProbeResult(outcome=ProbeOutcome.MALFORMED, error="Not an http(s) URL")

        try:
            response = self._head(url.strip())
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            return UrlProbeResult(outcome=ProbeOutcome.MALFORMED, host=host, error=str(exc))
        except (UnicodeError, ValueError) as exc:
            # Hostnames the idna codec refuses, e.g. empty labels in "a..b.com"
            return UrlProbeResult(outcome=ProbeOutcome.MALFORMED, host=host, error=str(exc))
        except httpx.HTTPError as exc:
            log.warning("Product URL probe failed for %s: %s", url, exc)
            return UrlProbeResult(
                outcome=ProbeOutcome.UNREACHABLE,
                host=host,
                error=f"{type(exc).__name__}: {exc}",
            )
        except Exception as exc:
            log.warning("Unexpected error probing %s: %s", url, exc, exc_info=exc)
            return UrlProbeResult(
                outcome=ProbeOutcome.UNREACHABLE,
                host=host,
                error=f"{type(exc).__name__}: {exc}",
            )

        outcome = ProbeOutcome.REACHABLE if response.is_success else ProbeOutcome.BAD_STATUS
        return UrlProbeResult(outcome=outcome, host=host, status_code=response.status_code)

    def _head(self, url: str) -> httpx.Response:
        if self._client is not None:
            return self._client.head(url, timeout=self.timeout, follow_redirects=True)
        with httpx.Client(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={"User-Agent": PROBE_CONFIG["user_agent"]},
        ) as client:
            return client.head(url)
