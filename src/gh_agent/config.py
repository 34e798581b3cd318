"""Runtime configuration read from the environment."""

import os
import subprocess

from pydantic import BaseModel, ConfigDict

from gh_agent.github.exceptions import GitHubAuthError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "gh-agent/0.1"


class AgentConfig(BaseModel):
    """Settings shared by the GitHub client and the commands."""

    model_config = ConfigDict(frozen=True)

    github_token: str
    api_url: str = DEFAULT_API_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_workers: int = 0  # 0 = one worker per file
    user_agent: str = DEFAULT_USER_AGENT
    sem_command: str | None = None  # External semantic-diff command
    ast_grep_binary: str | None = None  # Defaults to ast-grep/sg on PATH

    @classmethod
    def from_env(cls, github_token: str | None = None) -> "AgentConfig":
        """Build config from GH_AGENT_* variables and the GitHub token.

        Raises:
            GitHubAuthError: If no token is set and `gh auth token` fails.
        """
        token = github_token or resolve_github_token()
        return cls(
            github_token=token,
            api_url=os.getenv("GH_AGENT_API_URL", DEFAULT_API_URL).rstrip("/"),
            timeout_seconds=float(os.getenv("GH_AGENT_TIMEOUT", DEFAULT_TIMEOUT_SECONDS)),
            max_workers=int(os.getenv("GH_AGENT_MAX_WORKERS", "0")),
            sem_command=os.getenv("GH_AGENT_SEM_COMMAND") or None,
            ast_grep_binary=os.getenv("GH_AGENT_AST_GREP") or None,
        )


def token_from_gh_cli() -> str | None:
    """Return the token of an authenticated `gh` CLI, if any."""
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    token = result.stdout.decode("utf-8").strip()
    return token or None


def resolve_github_token() -> str:
    token = os.getenv("GITHUB_TOKEN") or token_from_gh_cli()
    if not token:
        raise GitHubAuthError("Set GITHUB_TOKEN or install/auth gh CLI")
    return token
