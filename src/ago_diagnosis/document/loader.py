"""Fetch and parse the page under diagnosis."""

import structlog
from bs4 import BeautifulSoup

from ago_diagnosis.document.accessor import HtmlDocument
from ago_diagnosis.document.errors import DocumentFetchError
from ago_diagnosis.fetch.client import HttpFetcher
from ago_diagnosis.fetch.constants import HTML_CONTENT_TYPES
from ago_diagnosis.fetch.models import FetchError, FetchErrorClass
from ago_diagnosis.fetch.redact import redact_url


logger = structlog.get_logger()


def load_document(fetcher: HttpFetcher, url: str) -> HtmlDocument:
    """Fetch ``url`` and parse it into an HtmlDocument.

    A missing Content-Type header is tolerated; any other non-HTML media
    type is rejected.

    Args:
        fetcher: HTTP fetcher.
        url: Target page URL.

    Returns:
        Parsed document.

    Raises:
        DocumentFetchError: On network failure, non-2xx status, non-HTML
            content, or an unparseable body.
    """
    log = logger.bind(component="document", url=redact_url(url))

    result = fetcher.fetch(url)
    if result.error is not None:
        raise DocumentFetchError(url, result.error)

    content_type = result.content_type
    if content_type and content_type not in HTML_CONTENT_TYPES:
        log.warning("content_type_rejected", content_type=content_type)
        raise DocumentFetchError(
            url,
            FetchError(
                error_class=FetchErrorClass.CONTENT_TYPE,
                message=f"Content-Type not allowed: {content_type}",
                status_code=result.status_code,
            ),
        )

    if not result.body_bytes.strip():
        raise DocumentFetchError(
            url,
            FetchError(
                error_class=FetchErrorClass.PARSE_ERROR,
                message="Empty response body",
                status_code=result.status_code,
            ),
        )

    try:
        soup = BeautifulSoup(result.body_bytes, "lxml")
    except Exception as exc:  # noqa: BLE001
        raise DocumentFetchError(
            url,
            FetchError(
                error_class=FetchErrorClass.PARSE_ERROR,
                message=f"Failed to parse HTML: {exc}",
                status_code=result.status_code,
            ),
        ) from exc

    log.info("document_parsed", final_url=redact_url(result.final_url))
    return HtmlDocument(soup, url=result.final_url)
