"""Models for GitHub pull request data and review payloads."""

from pydantic import BaseModel, ConfigDict, Field


class PrFile(BaseModel):
    """A changed file in a pull request."""

    model_config = ConfigDict(frozen=False)

    filename: str
    status: str  # "added" | "modified" | "removed" | "renamed" | "copied"
    additions: int = 0
    deletions: int = 0
    patch: str | None = None  # Per-file unified diff, populated on demand


class PullRequest(BaseModel):
    """Pull request metadata plus its changed files."""

    model_config = ConfigDict(frozen=False)

    number: int
    title: str
    body: str | None = None
    state: str
    additions: int = 0
    deletions: int = 0
    changed_files: int = 0
    head_ref: str
    base_ref: str
    head_sha: str
    files: list[PrFile] = Field(default_factory=list)


class FileContentPair(BaseModel):
    """Base and head contents of one changed file."""

    model_config = ConfigDict(frozen=True)

    filename: str
    status: str
    before_content: str | None = None  # None for added files or failed fetches
    after_content: str | None = None  # None for removed files or failed fetches


class ReviewCommentInput(BaseModel):
    """One inline comment in a review submission."""

    path: str
    line: int  # New-file line; last line of the span for ranged comments
    body: str
    start_line: int | None = None  # First line of a multi-line span


class CreateReview(BaseModel):
    """Body of POST /repos/{repo}/pulls/{number}/reviews."""

    commit_id: str
    event: str = "COMMENT"
    body: str
    comments: list[ReviewCommentInput] = Field(default_factory=list)


class CreateReviewResponse(BaseModel):
    id: int
    html_url: str


class ReviewInput(BaseModel):
    """Comments file read by `pr review`."""

    body: str = "Review from gh-agent"
    comments: list[ReviewCommentInput]


class TextMatch(BaseModel):
    fragment: str
    matches: list[dict] = Field(default_factory=list)


class CodeSearchItem(BaseModel):
    name: str
    path: str
    html_url: str = ""
    text_matches: list[TextMatch] | None = None


class CodeSearchResponse(BaseModel):
    total_count: int = 0
    items: list[CodeSearchItem] = Field(default_factory=list)
