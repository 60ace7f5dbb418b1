"""Remote sync of encrypted vault artifacts through GitHub gists."""

from .gist import (
    API_ERROR,
    AUTH_FAILED,
    GIST_NOT_FOUND,
    NETWORK_ERROR,
    NO_GIST_LINKED,
    NO_TOKEN,
    NO_VAULT,
    NOT_A_VAULT_GIST,
    GistSync,
    SyncResult,
    gh_cli_token,
)

__all__ = [
    "GistSync",
    "SyncResult",
    "gh_cli_token",
    # Error codes
    "NO_TOKEN",
    "NO_VAULT",
    "NO_GIST_LINKED",
    "GIST_NOT_FOUND",
    "AUTH_FAILED",
    "NOT_A_VAULT_GIST",
    "API_ERROR",
    "NETWORK_ERROR",
]
