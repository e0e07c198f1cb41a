"""HTTP transport for the leaderboard RPC service."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ascnd.api.config import ClientConfig
from ascnd.api.errors import ProtocolError, RequestTimeoutError, ServiceError, TransportError
from ascnd.api.models import (
    LeaderboardPage,
    LeaderboardQuery,
    RankQuery,
    RankResult,
    ScoreResult,
    ScoreSubmission,
)
from ascnd.runtime import codec

_LOG = logging.getLogger("ascnd.transport")

SERVICE_PATH = "/ascnd.v1.AscndService"
USER_AGENT = "ascnd-python"


class HttpLeaderboardTransport:
    """Connect-style JSON RPC client over one pooled `httpx.Client`.

    Blocking; the facade only calls it from worker threads. `httpx.Client` is
    safe to share across those threads.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout_seconds = config.timeout_seconds
        self._client = httpx.Client(
            base_url=config.base_url.rstrip("/"),
            timeout=httpx.Timeout(float(config.timeout_seconds)),
            headers={
                "Accept": "application/json",
                "Connect-Protocol-Version": "1",
                "Connect-Timeout-Ms": str(config.timeout_seconds * 1000),
                "User-Agent": USER_AGENT,
                "X-API-Key": config.api_key,
            },
            transport=transport,
        )
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def submit_score(self, submission: ScoreSubmission) -> ScoreResult:
        payload = self._call("SubmitScore", codec.encode_submit_score(submission))
        return codec.decode_score_result(payload)

    def get_leaderboard(self, query: LeaderboardQuery) -> LeaderboardPage:
        payload = self._call("GetLeaderboard", codec.encode_get_leaderboard(query))
        return codec.decode_leaderboard_page(payload, query)

    def get_player_rank(self, query: RankQuery) -> RankResult:
        payload = self._call("GetPlayerRank", codec.encode_get_player_rank(query))
        return codec.decode_rank_result(payload)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._client.close()
        _LOG.debug("transport_closed")

    def _call(self, method: str, body: dict[str, Any]) -> dict[str, Any]:
        path = f"{SERVICE_PATH}/{method}"
        try:
            response = self._client.post(
                path,
                content=codec.dumps_bytes(body),
                headers={"Content-Type": "application/json"},
            )
        except httpx.TimeoutException as exc:
            raise RequestTimeoutError(
                f"request timed out after {self._timeout_seconds}s"
            ) from exc
        except httpx.TransportError as exc:
            raise TransportError(f"transport error: {exc}") from exc
        if response.is_success:
            return codec.loads(response.content)
        raise _service_error(response)


def _service_error(response: httpx.Response) -> ServiceError:
    code = "unknown"
    message = f"service returned HTTP {response.status_code}"
    try:
        payload = codec.loads(response.content)
    except ProtocolError:
        payload = {}
    raw_code = payload.get("code")
    raw_message = payload.get("message")
    if isinstance(raw_code, str) and raw_code:
        code = raw_code
    if isinstance(raw_message, str) and raw_message:
        message = raw_message
    _LOG.debug("service_error status=%d code=%s", response.status_code, code)
    return ServiceError(message, code=code, status_code=response.status_code)


__all__ = ["HttpLeaderboardTransport", "SERVICE_PATH"]
