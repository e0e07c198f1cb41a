"""Public leaderboard bridge API contracts."""

from ascnd.api.config import ClientConfig, load_client_config
from ascnd.api.errors import (
    AscndError,
    ConfigurationError,
    FacadeClosedError,
    FailureKind,
    ProtocolError,
    RequestTimeoutError,
    RequestValidationError,
    ServiceError,
    TransportError,
)
from ascnd.api.facade import LeaderboardFacade, create_leaderboard_facade
from ascnd.api.logging import LoggingConfig
from ascnd.api.models import (
    MAX_LEADERBOARD_LIMIT,
    Bracket,
    LeaderboardEntry,
    LeaderboardPage,
    LeaderboardQuery,
    RankQuery,
    RankResult,
    ScoreResult,
    ScoreSubmission,
)
from ascnd.api.outcomes import (
    OP_GET_LEADERBOARD,
    OP_GET_PLAYER_RANK,
    OP_SUBMIT_SCORE,
    Failure,
    LeaderboardObserver,
    OperationFailure,
    Outcome,
    Subscription,
    Success,
)
from ascnd.api.transport import LeaderboardTransport, TransportFactory, create_http_transport

__all__ = [
    "AscndError",
    "Bracket",
    "ClientConfig",
    "ConfigurationError",
    "FacadeClosedError",
    "Failure",
    "FailureKind",
    "LeaderboardEntry",
    "LeaderboardFacade",
    "LeaderboardObserver",
    "LeaderboardPage",
    "LeaderboardQuery",
    "LeaderboardTransport",
    "LoggingConfig",
    "MAX_LEADERBOARD_LIMIT",
    "OP_GET_LEADERBOARD",
    "OP_GET_PLAYER_RANK",
    "OP_SUBMIT_SCORE",
    "OperationFailure",
    "Outcome",
    "ProtocolError",
    "RankQuery",
    "RankResult",
    "RequestTimeoutError",
    "RequestValidationError",
    "ScoreResult",
    "ScoreSubmission",
    "ServiceError",
    "Subscription",
    "Success",
    "TransportError",
    "TransportFactory",
    "create_http_transport",
    "create_leaderboard_facade",
    "load_client_config",
]
