"""Filter for lock files, build output and other files not worth reviewing."""

from pydantic import BaseModel, ConfigDict

DEFAULT_NOISE_EXACT: tuple[str, ...] = (
    # JS/TS
    "pnpm-lock.yaml",
    "package-lock.json",
    "yarn.lock",
    "npm-shrinkwrap.json",
    "bun.lockb",
    # Rust
    "Cargo.lock",
    # Ruby
    "Gemfile.lock",
    # Python
    "poetry.lock",
    "Pipfile.lock",
    "uv.lock",
    # Go
    "go.sum",
    # PHP
    "composer.lock",
    # .NET
    "packages.lock.json",
    # Dart/Flutter
    "pubspec.lock",
    # Swift
    "Package.resolved",
    # Elixir
    "mix.lock",
    # OS artifacts
    ".DS_Store",
)

DEFAULT_NOISE_SUFFIXES: tuple[str, ...] = (
    ".min.js",
    ".min.css",
    ".map",
    ".chunk.js",
    ".bundle.js",
)

DEFAULT_NOISE_PREFIXES: tuple[str, ...] = (
    "dist/",
    ".next/",
    "build/",
    "__generated__/",
    ".turbo/",
)


class NoiseRules(BaseModel):
    """Rule sets deciding which changed files are hidden by default.

    A path is noise when its file name is in `exact`, the path ends with one
    of `suffixes`, or it starts with one of `prefixes`.
    """

    model_config = ConfigDict(frozen=True)

    exact: frozenset[str] = frozenset()
    suffixes: tuple[str, ...] = ()
    prefixes: tuple[str, ...] = ()

    @classmethod
    def default(cls) -> "NoiseRules":
        return cls(
            exact=frozenset(DEFAULT_NOISE_EXACT),
            suffixes=DEFAULT_NOISE_SUFFIXES,
            prefixes=DEFAULT_NOISE_PREFIXES,
        )

    def is_noise(self, path: str) -> bool:
        if not path:
            return False
        filename = path.rsplit("/", 1)[-1]
        if filename in self.exact:
            return True
        if path.endswith(self.suffixes):
            return True
        return path.startswith(self.prefixes)


def is_noise(path: str, rules: NoiseRules | None = None) -> bool:
    """Return True if `path` should be hidden from diffs, search and grep."""
    if rules is None:
        rules = NoiseRules.default()
    return rules.is_noise(path)


def filter_noise(
    paths: list[str],
    rules: NoiseRules | None = None,
) -> tuple[list[str], int]:
    """Drop noise paths, preserving order.

    Returns:
        Tuple of (kept_paths, skipped_count).
    """
    if rules is None:
        rules = NoiseRules.default()
    kept = [path for path in paths if not rules.is_noise(path)]
    return kept, len(paths) - len(kept)
