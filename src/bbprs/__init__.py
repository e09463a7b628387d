from .client import BitbucketClient
from .errors import (
    ApiError,
    AuthError,
    BbPrsError,
    ConfigError,
    InvalidResponseFormatError,
    MalformedTimestampError,
    NetworkError,
    NotFoundError,
    RemoteAPIError,
    TransportError,
)
from .models import Page, PullRequest, PullRequestComment
from .options import PullRequestCommentOptions, PullRequestOptions, PullRequestsOptions
from .pullrequests import PullRequests

__all__ = [
    "ApiError",
    "AuthError",
    "BbPrsError",
    "BitbucketClient",
    "ConfigError",
    "InvalidResponseFormatError",
    "MalformedTimestampError",
    "NetworkError",
    "NotFoundError",
    "Page",
    "PullRequest",
    "PullRequestComment",
    "PullRequestCommentOptions",
    "PullRequestOptions",
    "PullRequests",
    "PullRequestsOptions",
    "RemoteAPIError",
    "TransportError",
]
