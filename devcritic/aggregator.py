from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed, wait
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Callable, TypeVar

from loguru import logger

from devcritic.github import GitHubClient
from devcritic.models import (
    AggregatedBundle,
    CodeQualitySignals,
    CommitActivity,
    Profile,
    Repository,
    account_age_days,
)
from devcritic.signals import analyze_tree, split_tree

T = TypeVar("T")

REPO_PAGE_SIZE = 30
LANGUAGE_SAMPLE_SIZE = 15
RANKED_REPO_COUNT = 6
RECENT_WINDOW_DAYS = 30
RECENT_COMMITS_CAP = 100
TOP_TREE_LIMIT = 50
README_EXCERPT_CHARS = 3000


def _safe(label: str, fn: Callable[[], T], default: T) -> T:
    """Run ``fn`` and return ``default`` if it raises, so sibling tasks keep going."""
    try:
        return fn()
    except Exception as exc:
        logger.warning("{} failed, using placeholder: {}", label, exc)
        return default


def _stars(raw: dict) -> int:
    return raw.get("stargazers_count") or 0


def _collect_languages(
    pool: ThreadPoolExecutor, github: GitHubClient, owner: str, repos: list[dict]
) -> dict[str, int]:
    futures = [
        pool.submit(
            _safe,
            f"Languages for {owner}/{repo['name']}",
            partial(github.get_languages, owner, repo["name"]),
            {},
        )
        for repo in repos
    ]

    stats: dict[str, int] = {}
    for future in as_completed(futures):
        for language, size in future.result().items():
            stats[language] = stats.get(language, 0) + size
    return stats


def _fetch_commit_activity(
    github: GitHubClient, owner: str, repo: str, since: str
) -> CommitActivity:
    latest = github.list_commits(owner, repo, per_page=1)
    recent = github.list_commits(owner, repo, since=since, per_page=RECENT_COMMITS_CAP)

    last_commit_date = None
    if latest:
        committer = (latest[0].get("commit") or {}).get("committer") or {}
        last_commit_date = committer.get("date")

    return CommitActivity(
        repo=repo,
        has_commits=bool(latest),
        recent_commits=len(recent),
        last_commit_date=last_commit_date,
    )


def fetch_profile_bundle(
    github: GitHubClient,
    username: str,
    *,
    max_workers: int = 8,
    now: datetime | None = None,
) -> AggregatedBundle:
    """Fetch a profile and its repository signals into one bundle.

    Only profile resolution may fail the call (``GitHubNotFoundError`` or the
    underlying HTTP error). Every later sub-fetch degrades to an empty, false
    or zero placeholder.
    """
    now = now or datetime.now(timezone.utc)

    profile = Profile.from_github(github.get_user(username))
    age_days = account_age_days(profile.created_at, now) if profile.created_at else 0

    owned = [r for r in github.list_repos(username, per_page=REPO_PAGE_SIZE) if not r.get("fork")]
    logger.info("Found {} non-fork repos for {}", len(owned), username)

    total_stars = sum(_stars(r) for r in owned)
    total_forks = sum(r.get("forks_count") or 0 for r in owned)

    ranked = sorted(owned, key=_stars, reverse=True)[:RANKED_REPO_COUNT]
    since = (now - timedelta(days=RECENT_WINDOW_DAYS)).strftime("%Y-%m-%dT%H:%M:%SZ")

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        language_stats = _collect_languages(pool, github, username, owned[:LANGUAGE_SAMPLE_SIZE])

        readme_futures: dict[str, Future[bool]] = {}
        tree_futures: dict[str, Future[list[dict] | None]] = {}
        commit_futures: dict[str, Future[CommitActivity]] = {}
        for raw in ranked:
            name = raw["name"]
            label = f"{username}/{name}"
            readme_futures[name] = pool.submit(
                _safe, f"README probe for {label}", partial(github.has_readme, username, name), False
            )
            tree_futures[name] = pool.submit(
                _safe, f"File tree for {label}", partial(github.get_file_tree, username, name), None
            )
            commit_futures[name] = pool.submit(
                _safe,
                f"Commit history for {label}",
                partial(_fetch_commit_activity, github, username, name, since),
                CommitActivity(repo=name),
            )

        wait([*readme_futures.values(), *tree_futures.values(), *commit_futures.values()])

    trees = {name: future.result() for name, future in tree_futures.items()}

    repos = [
        Repository.from_github(raw, has_readme=readme_futures[raw["name"]].result())
        for raw in ranked
    ]
    repos.sort(key=lambda r: r.stargazers_count, reverse=True)

    commit_activity = [commit_futures[r.name].result() for r in repos]
    code_quality = [
        analyze_tree(r.name, trees[r.name]) if trees[r.name] is not None
        else CodeQualitySignals(repo=r.name)
        for r in repos
    ]

    top_repo_tree: list[str] | None = None
    top_repo_readme: str | None = None
    if repos:
        top = repos[0]
        top_files, _ = split_tree(trees[top.name] or [])
        if top_files:
            top_repo_tree = top_files[:TOP_TREE_LIMIT]

        readme = _safe(
            f"README content for {username}/{top.name}",
            partial(github.get_readme_raw, username, top.name),
            None,
        )
        if readme:
            top_repo_readme = readme[:README_EXCERPT_CHARS]

    logger.info(
        "Bundle for {}: {} ranked repos, {} languages, {} stars",
        username, len(repos), len(language_stats), total_stars,
    )

    return AggregatedBundle(
        user=profile,
        repos=repos,
        top_repo_tree=top_repo_tree,
        top_repo_readme=top_repo_readme,
        commit_activity=commit_activity,
        code_quality=code_quality,
        language_stats=language_stats,
        total_stars=total_stars,
        total_forks=total_forks,
        account_age_days=age_days,
    )
