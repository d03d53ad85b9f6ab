"""Git access for repository analysis."""

from .fetcher import DEFAULT_BRANCH, RepositoryFetcher, repository_name

__all__ = ["DEFAULT_BRANCH", "RepositoryFetcher", "repository_name"]
