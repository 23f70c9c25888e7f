from porter.remote.github import GitHubSource, fetch_github_repo, parse_github_source

__all__ = ["GitHubSource", "fetch_github_repo", "parse_github_source"]
