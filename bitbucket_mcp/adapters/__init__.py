"""Remote repository adapters (base and Bitbucket implementation)."""

from bitbucket_mcp.adapters.base import RepositoryAdapter
from bitbucket_mcp.adapters.bitbucket import BitbucketAdapter

__all__ = ["BitbucketAdapter", "RepositoryAdapter"]
