from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO-8601 timestamp such as ``2011-01-25T18:44:36Z``."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def account_age_days(created_at: str, now: datetime | None = None) -> int:
    now = now or datetime.now(timezone.utc)
    return (now - parse_timestamp(created_at)).days


@dataclass
class Profile:
    """Normalized representation of a GitHub user."""

    login: str
    name: str | None = None
    avatar_url: str = ""
    bio: str | None = None
    company: str | None = None
    location: str | None = None
    blog: str | None = None
    public_repos: int = 0
    followers: int = 0
    following: int = 0
    created_at: str = ""

    @classmethod
    def from_github(cls, raw: dict) -> Profile:
        return cls(
            login=raw["login"],
            name=raw.get("name"),
            avatar_url=raw.get("avatar_url") or "",
            bio=raw.get("bio"),
            company=raw.get("company"),
            location=raw.get("location"),
            blog=raw.get("blog"),
            public_repos=raw.get("public_repos", 0),
            followers=raw.get("followers", 0),
            following=raw.get("following", 0),
            created_at=raw.get("created_at") or "",
        )


@dataclass
class Repository:
    """Normalized representation of a GitHub repository."""

    name: str
    full_name: str
    description: str | None = None
    html_url: str = ""
    language: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    topics: list[str] = field(default_factory=list)
    has_readme: bool = False
    license: str | None = None
    updated_at: str = ""
    created_at: str = ""

    @classmethod
    def from_github(cls, raw: dict, has_readme: bool = False) -> Repository:
        license_info = raw.get("license")
        return cls(
            name=raw["name"],
            full_name=raw.get("full_name") or raw["name"],
            description=raw.get("description"),
            html_url=raw.get("html_url") or "",
            language=raw.get("language"),
            stargazers_count=raw.get("stargazers_count") or 0,
            forks_count=raw.get("forks_count") or 0,
            open_issues_count=raw.get("open_issues_count") or 0,
            topics=raw.get("topics") or [],
            has_readme=has_readme,
            license=(license_info.get("name") or "Unknown") if license_info else None,
            updated_at=raw.get("updated_at") or "",
            created_at=raw.get("created_at") or "",
        )


@dataclass
class CommitActivity:
    repo: str
    has_commits: bool = False
    recent_commits: int = 0
    last_commit_date: str | None = None


@dataclass
class CodeQualitySignals:
    repo: str
    has_ci: bool = False
    has_tests: bool = False
    has_docs: bool = False
    has_linting: bool = False
    has_gitignore: bool = False
    has_contributing: bool = False
    has_changelog: bool = False
    has_dot_github: bool = False
    has_env_example: bool = False
    has_dockerfile: bool = False
    file_count: int = 0
    directory_structure: list[str] = field(default_factory=list)


@dataclass
class AggregatedBundle:
    """Everything fetched for one profile, ready to be turned into a prompt."""

    user: Profile
    repos: list[Repository] = field(default_factory=list)
    top_repo_tree: list[str] | None = None
    top_repo_readme: str | None = None
    commit_activity: list[CommitActivity] = field(default_factory=list)
    code_quality: list[CodeQualitySignals] = field(default_factory=list)
    language_stats: dict[str, int] = field(default_factory=dict)
    total_stars: int = 0
    total_forks: int = 0
    account_age_days: int = 0

    # Auxiliary lists are joined to repos by name; their order carries no meaning.

    def activity_for(self, repo_name: str) -> CommitActivity:
        for activity in self.commit_activity:
            if activity.repo == repo_name:
                return activity
        return CommitActivity(repo=repo_name)

    def quality_for(self, repo_name: str) -> CodeQualitySignals:
        for quality in self.code_quality:
            if quality.repo == repo_name:
                return quality
        return CodeQualitySignals(repo=repo_name)

    def top_languages(self, limit: int = 10) -> list[tuple[str, int]]:
        ranked = sorted(self.language_stats.items(), key=lambda item: item[1], reverse=True)
        return ranked[:limit]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Critique:
    score: int
    headline: str
    red_flags: list[str] = field(default_factory=list)
    green_flags: list[str] = field(default_factory=list)
    readme_score: int = 5
    code_quality_score: int = 5
    consistency_score: int = 5
    diversity_score: int = 5
    improvement_plan: list[str] = field(default_factory=list)
    tech_stack_verdict: str = "No assessment available."
    commit_verdict: str = "No assessment available."

    def to_dict(self) -> dict:
        return asdict(self)
