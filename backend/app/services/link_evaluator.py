"""Link reachability checks.

Each link gets a lightweight HEAD probe first, escalating to a ranged GET
when servers reject HEAD or the connection drops. Document and cloud-storage
URLs ("special" links) are judged more loosely: an access-gated file on a
cloud host exists, so it is not reported as broken.
"""

import logging
import re
from collections.abc import Mapping, Sequence
from urllib.parse import urlparse

import httpx

from app.config import Settings
from app.models import Link, LinkEvaluation, ProbeMethod

logger = logging.getLogger(__name__)

MAX_LINKS_PER_RUN = 20

# HEAD statuses some servers return for HEAD only; retry those with GET
ESCALATE_STATUSES = {401, 403, 405}
RANGE_NOT_SATISFIABLE = 416
PRIVATE_FILE_ISSUE = "Private file (access restricted)"

# Network failures worth a second attempt with GET
RETRIABLE_ERROR_CODES = {"ECONNREFUSED", "ECONNRESET", "ETIMEDOUT", "ECONNABORTED"}

STATUS_MESSAGES = {
    400: "Bad request",
    401: "Authentication required",
    403: "Access forbidden",
    404: "Page not found",
    405: "Method not allowed",
    408: "Request timeout",
    410: "Page permanently removed",
    429: "Too many requests (rate limited)",
    500: "Server error",
    502: "Bad gateway",
    503: "Service unavailable",
    504: "Gateway timeout",
}

NETWORK_ERROR_MESSAGES = {
    "ENOTFOUND": "Domain not found - URL may be invalid or site is down",
    "ECONNREFUSED": "Connection refused by server",
    "ECONNRESET": "Connection was reset",
    "ETIMEDOUT": "Request timed out",
    "ECONNABORTED": "Connection was aborted",
    "ERR_TLS_CERT": "SSL certificate error",
    "DEPTH_ZERO_SELF_SIGNED_CERT": "Self-signed SSL certificate",
    "CERT_HAS_EXPIRED": "SSL certificate has expired",
    "ERR_TOO_MANY_REDIRECTS": "Too many redirects",
}

# Ordered: more specific TLS failures must win over the generic one
_ERROR_TEXT_CODES = [
    ("certificate has expired", "CERT_HAS_EXPIRED"),
    ("self-signed", "DEPTH_ZERO_SELF_SIGNED_CERT"),
    ("self signed", "DEPTH_ZERO_SELF_SIGNED_CERT"),
    ("certificate", "ERR_TLS_CERT"),
    ("ssl", "ERR_TLS_CERT"),
    ("name or service not known", "ENOTFOUND"),
    ("nodename nor servname", "ENOTFOUND"),
    ("getaddrinfo", "ENOTFOUND"),
    ("name resolution", "ENOTFOUND"),
    ("no address associated", "ENOTFOUND"),
    ("connection refused", "ECONNREFUSED"),
    ("connection reset", "ECONNRESET"),
    ("reset by peer", "ECONNRESET"),
    ("aborted", "ECONNABORTED"),
]

_DRIVE_FILE_RE = re.compile(r"/file/d/([^/?#]+)")


def status_message(status: int) -> str:
    """Human-readable issue for a failing HTTP status."""
    return STATUS_MESSAGES.get(status, f"HTTP error (status {status})")


def network_error_message(code: str) -> str:
    """Human-readable issue for a network error code."""
    return NETWORK_ERROR_MESSAGES.get(code, f"Connection failed ({code})")


def classify_network_error(error: Exception) -> str:
    """Map an httpx exception onto a stable network error code."""
    if isinstance(error, httpx.TimeoutException):
        return "ETIMEDOUT"
    if isinstance(error, httpx.TooManyRedirects):
        return "ERR_TOO_MANY_REDIRECTS"

    # The useful detail usually lives in the wrapped socket/ssl error
    texts = [str(error)]
    cause = error.__cause__ or error.__context__
    if cause is not None:
        texts.append(str(cause))
    text = " ".join(texts).lower()

    for needle, code in _ERROR_TEXT_CODES:
        if needle in text:
            return code

    if isinstance(error, httpx.RemoteProtocolError):
        return "ECONNABORTED"
    if isinstance(error, httpx.ReadError):
        return "ECONNRESET"
    if isinstance(error, httpx.ConnectError):
        return "ECONNREFUSED"
    return type(error).__name__.upper()


def is_ok_status(status: int) -> bool:
    return 200 <= status < 400


def _host(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def is_cloud_host(url: str) -> bool:
    """Hosts where files can exist behind an access gate."""
    host = _host(url)
    return (
        host in ("drive.google.com", "docs.google.com")
        or host == "dropbox.com"
        or host.endswith(".dropbox.com")
        or host in ("onedrive.live.com", "1drv.ms")
        or host.endswith(".sharepoint.com")
        or _is_s3_host(host)
    )


def _is_s3_host(host: str) -> bool:
    if not host.endswith(".amazonaws.com"):
        return False
    labels = host.split(".")
    return any(label == "s3" or label.startswith("s3-") for label in labels)


def is_special_url(url: str) -> bool:
    """Document files and cloud-storage links that need looser checks."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    host = (parsed.hostname or "").lower()
    path = parsed.path.lower()

    if path.endswith(".pdf"):
        return True
    if is_cloud_host(url):
        return True
    if host == "raw.githubusercontent.com":
        return True
    if host in ("github.com", "www.github.com") and ("/blob/" in path or "/raw/" in path):
        return True
    return False


def normalize_drive_url(url: str) -> str:
    """Rewrite Drive share/edit links to the direct view form.

    Falls back to the original URL when no file id can be found.
    """
    if _host(url) != "drive.google.com":
        return url
    match = _DRIVE_FILE_RE.search(url)
    if not match:
        return url
    return f"https://drive.google.com/file/d/{match.group(1)}/view"


class LinkEvaluator:
    """Checks whether each link in a post still resolves."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self.client = client
        self.max_links = min(settings.link_check_max_links, MAX_LINKS_PER_RUN)
        self.head_timeout = settings.link_head_timeout_seconds
        self.get_timeout = settings.link_get_timeout_seconds

    async def evaluate(self, links: Sequence[Link | Mapping]) -> list[LinkEvaluation]:
        """Evaluate up to ``max_links`` links, in input order.

        Probes run one after another to bound simultaneous outbound
        connections. A failing link never raises; it is reported with
        ``working=False`` and an ``issue``.
        """
        if isinstance(links, (str, bytes)) or not isinstance(links, Sequence):
            raise TypeError("links must be a sequence of Link records")

        evaluations = []
        for raw_link in links[:self.max_links]:
            link = raw_link if isinstance(raw_link, Link) else Link.model_validate(raw_link)
            evaluations.append(await self._evaluate_one(link))

        broken = sum(1 for e in evaluations if not e.working)
        logger.info(f"Link check complete: {broken}/{len(evaluations)} broken (of {len(links)} found)")
        return evaluations

    async def _evaluate_one(self, link: Link) -> LinkEvaluation:
        special = is_special_url(link.url)
        method: ProbeMethod = "HEAD-SPECIAL" if special else "HEAD"
        try:
            if special:
                return await self._check_special(link)
            return await self._check_standard(link)
        except httpx.InvalidURL:
            return self._result(link, 0, False, "Invalid URL", method)
        except Exception as e:
            logger.warning(f"Unexpected error checking {link.url}: {e}")
            code = type(e).__name__.upper()
            return self._result(link, 0, False, network_error_message(code), method)

    # -- probes --------------------------------------------------------------

    async def _head(self, url: str) -> int:
        response = await self.client.head(url, timeout=self.head_timeout, follow_redirects=True)
        return response.status_code

    async def _get(self, url: str) -> int:
        """Ranged GET whose body is closed unread."""
        async with self.client.stream(
            "GET",
            url,
            headers={"Range": "bytes=0-1023"},
            timeout=self.get_timeout,
            follow_redirects=True,
        ) as response:
            return response.status_code

    # -- ordinary links ------------------------------------------------------

    async def _check_standard(self, link: Link) -> LinkEvaluation:
        try:
            status = await self._head(link.url)
        except httpx.HTTPError as e:
            code = classify_network_error(e)
            if code in RETRIABLE_ERROR_CODES:
                logger.debug(f"HEAD failed for {link.url} ({code}), retrying with GET")
                return await self._fallback_standard(link)
            return self._network_failure(link, code, "HEAD")

        if is_ok_status(status):
            return self._result(link, status, True, None, "HEAD")
        if status in ESCALATE_STATUSES:
            logger.debug(f"HEAD returned {status} for {link.url}, retrying with GET")
            return await self._fallback_standard(link)
        return self._http_failure(link, status, "HEAD")

    async def _fallback_standard(self, link: Link) -> LinkEvaluation:
        try:
            status = await self._get(link.url)
        except httpx.HTTPError as e:
            return self._network_failure(link, classify_network_error(e), "GET")

        if is_ok_status(status):
            return self._result(link, status, True, None, "GET")
        if status == RANGE_NOT_SATISFIABLE:
            # Server refused the byte range, so the resource exists
            return self._result(link, 200, True, None, "GET")
        return self._http_failure(link, status, "GET")

    # -- special links -------------------------------------------------------

    async def _check_special(self, link: Link) -> LinkEvaluation:
        probe_url = normalize_drive_url(link.url)
        cloud = is_cloud_host(probe_url)

        try:
            status = await self._head(probe_url)
        except httpx.HTTPError as e:
            code = classify_network_error(e)
            if code in RETRIABLE_ERROR_CODES:
                return await self._fallback_special(link, probe_url, cloud)
            return self._network_failure(link, code, "HEAD-SPECIAL")

        if is_ok_status(status):
            return self._result(link, status, True, None, "HEAD-SPECIAL")
        if status == 403 and cloud:
            return self._result(link, 200, True, PRIVATE_FILE_ISSUE, "HEAD-SPECIAL")
        if status in ESCALATE_STATUSES:
            return await self._fallback_special(link, probe_url, cloud)
        return self._http_failure(link, status, "HEAD-SPECIAL")

    async def _fallback_special(self, link: Link, probe_url: str, cloud: bool) -> LinkEvaluation:
        try:
            status = await self._get(probe_url)
        except httpx.HTTPError as e:
            return self._network_failure(link, classify_network_error(e), "GET-SPECIAL")

        if is_ok_status(status):
            return self._result(link, status, True, None, "GET-SPECIAL")
        if status == RANGE_NOT_SATISFIABLE:
            return self._result(link, 200, True, None, "GET-SPECIAL")
        if status in (401, 403) and cloud:
            return self._result(link, 200, True, PRIVATE_FILE_ISSUE, "GET-SPECIAL")
        return self._http_failure(link, status, "GET-SPECIAL")

    # -- result builders -----------------------------------------------------

    def _result(
        self,
        link: Link,
        status: int,
        working: bool,
        issue: str | None,
        method: ProbeMethod,
    ) -> LinkEvaluation:
        return LinkEvaluation(
            **link.model_dump(),
            status=status,
            working=working,
            issue=issue,
            method=method,
        )

    def _http_failure(self, link: Link, status: int, method: ProbeMethod) -> LinkEvaluation:
        return self._result(link, status, False, status_message(status), method)

    def _network_failure(self, link: Link, code: str, method: ProbeMethod) -> LinkEvaluation:
        logger.info(f"Link unreachable: {link.url} ({code})")
        return self._result(link, 0, False, network_error_message(code), method)
