"""Code-quality heuristics derived from a repository's recursive file tree."""

from __future__ import annotations

from devcritic.models import CodeQualitySignals

CI_PATTERNS = (".github/workflows", ".gitlab-ci.yml", "jenkinsfile", ".circleci", ".travis.yml")
TEST_PATTERNS = ("test", "tests", "__tests__", "spec", "specs", ".test.", ".spec.")
LINT_PATTERNS = (
    ".eslintrc",
    ".eslintrc.js",
    ".eslintrc.json",
    "eslint.config",
    ".prettierrc",
    ".pylintrc",
    "pyproject.toml",
    ".flake8",
    "biome.json",
)
DOC_PREFIXES = ("docs", "documentation", "doc")

_MAX_DIRECTORIES = 15


def split_tree(entries: list[dict]) -> tuple[list[str], list[str]]:
    """Split raw git tree entries into (file paths, directory paths)."""
    files = [e["path"] for e in entries if e.get("type") == "blob" and e.get("path")]
    dirs = [e["path"] for e in entries if e.get("type") == "tree" and e.get("path")]
    return files, dirs


def _contains_any(paths: list[str], patterns: tuple[str, ...]) -> bool:
    return any(p in path for p in patterns for path in paths)


def analyze_tree(repo: str, entries: list[dict]) -> CodeQualitySignals:
    files, dirs = split_tree(entries)
    paths = [p.lower() for p in files + dirs]

    return CodeQualitySignals(
        repo=repo,
        has_ci=_contains_any(paths, CI_PATTERNS),
        has_tests=_contains_any(paths, TEST_PATTERNS),
        has_docs=any(path.startswith(DOC_PREFIXES) for path in paths),
        has_linting=_contains_any(paths, LINT_PATTERNS),
        has_gitignore=".gitignore" in paths,
        has_contributing=_contains_any(paths, ("contributing",)),
        has_changelog=_contains_any(paths, ("changelog",)),
        has_dot_github=any(path.startswith(".github") for path in paths),
        has_env_example=_contains_any(paths, (".env.example", ".env.sample")),
        has_dockerfile=_contains_any(paths, ("dockerfile",)),
        file_count=len(files),
        directory_structure=dirs[:_MAX_DIRECTORIES],
    )
