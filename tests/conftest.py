from __future__ import annotations

from datetime import datetime, timezone

import pytest

from devcritic.models import (
    AggregatedBundle,
    CodeQualitySignals,
    CommitActivity,
    Profile,
    Repository,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_raw_repo(name: str, stars: int = 0, forks: int = 0, fork: bool = False, **extra) -> dict:
    raw = {
        "name": name,
        "full_name": f"octocat/{name}",
        "description": f"{name} description",
        "html_url": f"https://github.com/octocat/{name}",
        "language": "Python",
        "stargazers_count": stars,
        "forks_count": forks,
        "open_issues_count": 1,
        "topics": ["cli"],
        "license": {"name": "MIT License"},
        "fork": fork,
        "updated_at": "2025-05-30T10:00:00Z",
        "created_at": "2020-01-01T00:00:00Z",
    }
    raw.update(extra)
    return raw


@pytest.fixture
def raw_user() -> dict:
    return {
        "login": "octocat",
        "name": "The Octocat",
        "avatar_url": "https://avatars.githubusercontent.com/u/583231",
        "bio": "Mascot",
        "company": "@github",
        "location": "San Francisco",
        "blog": "https://github.blog",
        "public_repos": 8,
        "followers": 100,
        "following": 9,
        "created_at": "2011-01-25T18:44:36Z",
    }


@pytest.fixture
def bundle() -> AggregatedBundle:
    return AggregatedBundle(
        user=Profile(login="octocat", name="The Octocat", public_repos=2, created_at="2011-01-25T18:44:36Z"),
        repos=[
            Repository(name="alpha", full_name="octocat/alpha", stargazers_count=50, has_readme=True),
            Repository(name="beta", full_name="octocat/beta", stargazers_count=5),
        ],
        top_repo_tree=["README.md", "src/main.py"],
        top_repo_readme="# alpha",
        commit_activity=[
            CommitActivity(repo="alpha", has_commits=True, recent_commits=12, last_commit_date="2025-05-30T10:00:00Z"),
            CommitActivity(repo="beta", has_commits=True, recent_commits=0, last_commit_date="2023-02-01T00:00:00Z"),
        ],
        code_quality=[
            CodeQualitySignals(repo="alpha", has_ci=True, has_tests=True, file_count=40),
            CodeQualitySignals(repo="beta", file_count=3),
        ],
        language_stats={"Python": 20480, "Shell": 1024},
        total_stars=55,
        total_forks=4,
        account_age_days=5240,
    )


@pytest.fixture
def llm_payload() -> dict:
    return {
        "score": 72,
        "headline": "Solid Engineer, Zero DevOps",
        "red_flags": ["No CI on beta"],
        "green_flags": ["Tests in alpha"],
        "readme_score": 7,
        "code_quality_score": 6,
        "consistency_score": 8,
        "diversity_score": 4,
        "improvement_plan": ["Add a workflow to beta"],
        "tech_stack_verdict": "Python heavy.",
        "commit_verdict": "Active this month.",
    }
