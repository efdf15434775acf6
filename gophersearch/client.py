"""
HTTP client for the Gopher AI data API.

Searches are asynchronous jobs: ``submit`` creates the job and returns a
handle, ``poll`` asks for the result until the job resolves, fails, or the
attempt budget runs out.
"""

import threading
from typing import List, Optional

import requests
from requests.adapters import HTTPAdapter

from .config import ClientConfig
from .errors import GopherError, ServiceError, TransportError
from .logger import StructuredLogger, get_logger
from .responses import (
    error_from_response,
    handle_from_submission,
    is_processing,
    is_success_status,
    parse_result_items,
)
from .retry import PollSchedule, should_keep_polling_status
from .schema import JobHandle, JobRequest, OutcomeKind, PollOutcome, ResultItem

TWITTER_KIND = "twitter"


def search_endpoint(job_kind: str) -> str:
    return f"/search/live/{job_kind}"


def result_endpoint(job_kind: str, job_id: str) -> str:
    return f"/search/live/{job_kind}/result/{job_id}"


class GopherClient:
    """
    Submit-and-poll client.

    One instance can serve concurrent searches: per-call state (attempt
    counter, handle, cancel event) lives on the stack, and the pooled
    session is the only thing shared between calls.
    """

    def __init__(
        self,
        config: ClientConfig,
        session: Optional[requests.Session] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.config = config
        self.logger = logger or get_logger()
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=4, pool_maxsize=16)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self.session = session

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _headers(self, with_body: bool = False) -> dict:
        headers = {"Authorization": f"Bearer {self.config.api_key}"}
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _request(self, method: str, path: str, timeout: float, **kwargs) -> requests.Response:
        """Send one request; network failures become TransportError."""
        url = self.config.base_url + path
        self.logger.record_api_call()
        try:
            return self.session.request(method, url, timeout=timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            self.logger.record_error("Timeout")
            self.logger.warning("Gopher request timed out", method=method, url=url)
            raise TransportError(f"request timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            self.logger.record_error("RequestException")
            self.logger.error("Gopher request error", method=method, url=url, error=str(e))
            raise TransportError(f"failed to make request: {e}") from e

    def submit(self, endpoint_path: str, job_request: JobRequest) -> JobHandle:
        """
        Create a search job.

        Args:
            endpoint_path: Path under the base URL, e.g. "/search/live/twitter"
            job_request: Validated job description

        Returns:
            Handle of the created job

        Raises:
            ServiceError: The service rejected the job
            TransportError: The request failed or the answer was unreadable
        """
        resp = self._request(
            "POST",
            endpoint_path,
            timeout=self.config.request_timeout,
            json=job_request.to_payload(),
            headers=self._headers(with_body=True),
        )
        body = resp.text

        if not is_success_status(resp.status_code):
            error = error_from_response(resp.status_code, body)
            self.logger.record_error(type(error).__name__)
            self.logger.error(
                "Job submission rejected",
                path=endpoint_path,
                status=resp.status_code,
                error=str(error),
            )
            raise error

        try:
            handle = handle_from_submission(body, job_request.job_kind)
        except GopherError as e:
            self.logger.record_error(type(e).__name__)
            self.logger.error("Job submission failed", path=endpoint_path, error=str(e))
            raise

        self.logger.record_submission()
        self.logger.info("Job submitted", kind=handle.job_kind, job_id=handle.id)
        return handle

    def poll(
        self,
        job_handle: JobHandle,
        cancel: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> PollOutcome:
        """
        Fetch the job result until it resolves.

        404 and ``{"status": "processing"}`` mean the job is still running.
        Unrecognized 2xx bodies are treated the same way unless
        ``config.unrecognized_limit`` is set. Any other non-2xx status ends
        the poll at once.

        Args:
            job_handle: Handle returned by ``submit``
            cancel: Event that stops the poll when set
            deadline: ``time.monotonic()`` value after which the poll gives up

        Returns:
            PollOutcome; never raises for service or transport failures
        """
        outcome = self._poll(job_handle, cancel, deadline)
        self.logger.record_outcome(outcome.kind.value)
        if outcome.ok:
            self.logger.info(
                "Job finished",
                job_id=job_handle.id,
                attempts=outcome.attempts,
                items=len(outcome.items),
            )
        else:
            self.logger.record_error(type(outcome.error).__name__)
            self.logger.warning(
                "Job did not finish",
                job_id=job_handle.id,
                outcome=outcome.kind.value,
                attempts=outcome.attempts,
                error=str(outcome.error),
            )
        return outcome

    def _poll(
        self,
        job_handle: JobHandle,
        cancel: Optional[threading.Event],
        deadline: Optional[float],
    ) -> PollOutcome:
        schedule = PollSchedule(self.config.poll_attempts, self.config.poll_interval)
        path = result_endpoint(job_handle.job_kind, job_handle.id)
        attempts = 0
        unrecognized = 0

        for attempt in schedule:
            if cancel is not None and cancel.is_set():
                return PollOutcome.cancelled(attempts)
            if schedule.expired(deadline):
                return PollOutcome.timeout(attempts)

            timeout = self.config.request_timeout
            left = schedule.remaining(deadline)
            if left is not None:
                timeout = min(timeout, left)

            attempts = attempt
            self.logger.record_poll_attempt()
            try:
                resp = self._request("GET", path, timeout=timeout, headers=self._headers())
            except TransportError as e:
                return PollOutcome.failed(OutcomeKind.TRANSPORT_ERROR, e, attempts)

            status = resp.status_code
            body = resp.text

            if should_keep_polling_status(status):
                self.logger.debug("Job not ready", job_id=job_handle.id, attempt=attempt, status=status)
                unrecognized = 0
            elif not is_success_status(status):
                error = error_from_response(status, body)
                kind = (
                    OutcomeKind.SERVICE_ERROR
                    if isinstance(error, ServiceError)
                    else OutcomeKind.TRANSPORT_ERROR
                )
                return PollOutcome.failed(kind, error, attempts)
            else:
                items = parse_result_items(body)
                if items is not None:
                    return PollOutcome.success(items, attempts)
                if is_processing(body):
                    self.logger.debug("Job processing", job_id=job_handle.id, attempt=attempt)
                    unrecognized = 0
                else:
                    unrecognized += 1
                    self.logger.warning(
                        "Unrecognized result body",
                        job_id=job_handle.id,
                        attempt=attempt,
                        body=body[:200],
                    )
                    limit = self.config.unrecognized_limit
                    if limit is not None and unrecognized >= limit:
                        error = TransportError(
                            f"unrecognized result body after {unrecognized} attempts: {body}",
                            status,
                            body,
                        )
                        return PollOutcome.failed(OutcomeKind.TRANSPORT_ERROR, error, attempts)

            if attempt == schedule.attempts:
                break
            if not schedule.wait(cancel, deadline):
                if cancel is not None and cancel.is_set():
                    return PollOutcome.cancelled(attempts)
                return PollOutcome.timeout(attempts)

        return PollOutcome.timeout(attempts)

    def run(
        self,
        job_request: JobRequest,
        cancel: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> PollOutcome:
        """Submit a job and poll it. Submission failures propagate."""
        handle = self.submit(search_endpoint(job_request.job_kind), job_request)
        return self.poll(handle, cancel=cancel, deadline=deadline)

    def search_twitter(
        self,
        query: str,
        max_results: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
        deadline: Optional[float] = None,
    ) -> List[ResultItem]:
        """
        Run a twitter ``searchbyquery`` job and return its items.

        Raises:
            ValueError: Invalid query or max_results
            GopherError: Any failure while submitting or polling
        """
        request = JobRequest(
            job_kind=TWITTER_KIND,
            operation="searchbyquery",
            query=query,
            max_results=max_results or self.config.max_results,
        )
        return self.run(request, cancel=cancel, deadline=deadline).unwrap()
