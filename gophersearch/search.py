import threading
from typing import Optional

from .client import GopherClient, TWITTER_KIND
from .config import ClientConfig
from .errors import GopherError
from .logger import get_logger
from .retry import deadline_after
from .schema import JobRequest, SearchOutput


def build_search_request(query: str, max_results: int) -> JobRequest:
    """
    Returns the twitter ``searchbyquery`` job for a free-text query.
    Raises ValueError for an empty query or a non-positive max_results.
    """
    return JobRequest(
        job_kind=TWITTER_KIND,
        operation="searchbyquery",
        query=query.strip() if isinstance(query, str) else query,
        max_results=max_results,
    )


def search(
    query: str,
    config: Optional[ClientConfig] = None,
    client: Optional[GopherClient] = None,
    cancel: Optional[threading.Event] = None,
    timeout: Optional[float] = None,
) -> SearchOutput:
    """
    Search twitter through the Gopher API.

    Never raises: every failure (bad input, missing configuration, service
    rejection, transport failure, timeout, cancellation) comes back as an
    empty item list with ``error`` set.

    Args:
        query: Search terms
        config: Client settings (default: read from the environment)
        client: Existing client to reuse; takes precedence over ``config``
        cancel: Event that stops polling when set
        timeout: Overall seconds allowed for polling
    """
    logger = get_logger()
    owned = client is None
    try:
        if client is None:
            client = GopherClient(config or ClientConfig.from_env())
        request = build_search_request(query, client.config.max_results)
        items = client.run(
            request, cancel=cancel, deadline=deadline_after(timeout)
        ).unwrap()
    except (GopherError, ValueError) as e:
        logger.warning("Search failed", query=query, error=str(e))
        return SearchOutput(items=[], error=str(e))
    finally:
        if owned and client is not None:
            client.close()

    return SearchOutput(items=items)
