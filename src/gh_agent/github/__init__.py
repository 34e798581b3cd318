"""GitHub API access for gh-agent."""
