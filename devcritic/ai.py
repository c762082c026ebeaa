from __future__ import annotations

import json
import math

from loguru import logger
from openai import OpenAI

from devcritic.models import AggregatedBundle, Critique

_TEMPERATURE = 0.3
_MAX_TOKENS = 2048
_NO_ASSESSMENT = "No assessment available."

SYSTEM_PROMPT = """\
You are a strict, high-standards technical reviewer and engineering manager \
conducting a deep review of a candidate's GitHub portfolio. Judge not only what \
they built but how they build it: engineering practices, consistency, \
documentation discipline, testing habits, CI/CD maturity and breadth of \
technology. Be direct, data-driven and slightly harsh, but constructive. \
Respond ONLY with a valid JSON object."""

USER_PROMPT = """\
Analyze this GitHub profile with deep technical scrutiny. Return a JSON object strictly matching this schema:
{{
  "score": <number 0-100, overall employability score>,
  "headline": <string, a one-liner such as "Solid Engineer, Zero DevOps">,
  "red_flags": <string[], specific concerning findings backed by data, max 6>,
  "green_flags": <string[], specific positive signals backed by data, max 6>,
  "readme_score": <number 0-10, quality of the top repo README: structure, badges, install instructions, screenshots>,
  "code_quality_score": <number 0-10, based on CI/CD, testing, linting, .gitignore, project structure>,
  "consistency_score": <number 0-10, based on commit frequency, recency, account age vs activity>,
  "diversity_score": <number 0-10, based on language variety, stack breadth, project types>,
  "improvement_plan": <string[], actionable suggestions naming actual repos, max 6>,
  "tech_stack_verdict": <string, 1-2 sentences on their technology choices and breadth>,
  "commit_verdict": <string, 1-2 sentences on their commit consistency and activity>
}}

=== CANDIDATE DATA ===

Profile:
- Username: {login}
- Name: {name}
- Bio: {bio}
- Company: {company}
- Location: {location}
- Public Repos: {public_repos}
- Followers: {followers} | Following: {following}
- Account Age: {age_days} days ({age_years:.1f} years)
- Total Stars (all repos): {total_stars}
- Total Forks (all repos): {total_forks}

Language Distribution (across {language_count} languages):
{languages}

Top Repositories:
{repos}

Commit Activity (last 30 days):
Total recent commits across repos: {recent_total}
{commits}

Code Quality Signals (per repo):
Repos with CI/CD: {with_ci}/{quality_count}
Repos with Tests: {with_tests}/{quality_count}
Repos with Linting: {with_lint}/{quality_count}
Repos with Docs folder: {with_docs}/{quality_count}
{quality}

Top Repo (#1) File Tree:
{tree}

Top Repo (#1) README Content:
{readme}

Respond ONLY with the JSON object. Be specific and reference actual repo names and data points."""


class CritiqueError(RuntimeError):
    """The LLM returned nothing usable."""


def _mark(flag: bool) -> str:
    return "yes" if flag else "no"


def build_prompt(bundle: AggregatedBundle) -> str:
    user = bundle.user

    languages = "\n".join(
        f"{language}: {size / 1024:.0f}KB" for language, size in bundle.top_languages(10)
    )

    repo_lines = []
    for i, r in enumerate(bundle.repos, start=1):
        repo_lines.append(
            f"{i}. {r.name} - {r.description or 'No description'}\n"
            f"   Language: {r.language or 'N/A'} | Stars: {r.stargazers_count} | "
            f"Forks: {r.forks_count} | Issues: {r.open_issues_count}\n"
            f"   License: {r.license or 'NONE'} | README: {_mark(r.has_readme)}\n"
            f"   Topics: {', '.join(r.topics) if r.topics else 'None tagged'}\n"
            f"   Last Updated: {r.updated_at}"
        )

    activities = [bundle.activity_for(r.name) for r in bundle.repos]
    commit_lines = [
        f"- {a.repo}: {a.recent_commits} commits (last 30d) | "
        f"Last commit: {a.last_commit_date or 'Unknown'}"
        for a in activities
    ]

    signals = [bundle.quality_for(r.name) for r in bundle.repos]
    quality_lines = [
        f"- {q.repo}: CI:{_mark(q.has_ci)} Tests:{_mark(q.has_tests)} "
        f"Lint:{_mark(q.has_linting)} .gitignore:{_mark(q.has_gitignore)} "
        f"Docker:{_mark(q.has_dockerfile)} Docs:{_mark(q.has_docs)} "
        f"CONTRIBUTING:{_mark(q.has_contributing)} | {q.file_count} files"
        for q in signals
    ]

    return USER_PROMPT.format(
        login=user.login,
        name=user.name or "Not set",
        bio=user.bio or "No bio set",
        company=user.company or "None",
        location=user.location or "Unknown",
        public_repos=user.public_repos,
        followers=user.followers,
        following=user.following,
        age_days=bundle.account_age_days,
        age_years=bundle.account_age_days / 365,
        total_stars=bundle.total_stars,
        total_forks=bundle.total_forks,
        language_count=len(bundle.language_stats),
        languages=languages or "No language data available",
        repos="\n".join(repo_lines) or "No public repositories",
        recent_total=sum(a.recent_commits for a in activities),
        commits="\n".join(commit_lines),
        quality_count=len(signals),
        with_ci=sum(q.has_ci for q in signals),
        with_tests=sum(q.has_tests for q in signals),
        with_lint=sum(q.has_linting for q in signals),
        with_docs=sum(q.has_docs for q in signals),
        quality="\n".join(quality_lines),
        tree="\n".join(bundle.top_repo_tree) if bundle.top_repo_tree else "Could not fetch.",
        readme=bundle.top_repo_readme or "No README found.",
    )


# -- validation -------------------------------------------------------------


def _is_number(value: object) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and not (isinstance(value, float) and math.isnan(value))
    )


def _is_string_list(value: object) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _clamp(value: float, low: int, high: int) -> int:
    # Clamp before rounding half up; inputs may be inf or arbitrarily large ints.
    return math.floor(max(low, min(high, value)) + 0.5)


def _sub_score(data: dict, key: str) -> int:
    value = data.get(key)
    return _clamp(value, 0, 10) if _is_number(value) else 5


def _verdict(data: dict, key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else _NO_ASSESSMENT


def parse_critique(content: str) -> Critique:
    """Validate raw LLM JSON into a ``Critique``, clamping out-of-range scores."""
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise CritiqueError(f"LLM response is not valid JSON: {exc}") from exc

    if not (
        isinstance(data, dict)
        and _is_number(data.get("score"))
        and isinstance(data.get("headline"), str)
        and _is_string_list(data.get("red_flags"))
        and _is_string_list(data.get("green_flags"))
        and _is_number(data.get("readme_score"))
        and _is_string_list(data.get("improvement_plan"))
    ):
        raise CritiqueError("LLM response did not match expected schema")

    return Critique(
        score=_clamp(data["score"], 0, 100),
        headline=data["headline"],
        red_flags=data["red_flags"],
        green_flags=data["green_flags"],
        readme_score=_clamp(data["readme_score"], 0, 10),
        code_quality_score=_sub_score(data, "code_quality_score"),
        consistency_score=_sub_score(data, "consistency_score"),
        diversity_score=_sub_score(data, "diversity_score"),
        improvement_plan=data["improvement_plan"],
        tech_stack_verdict=_verdict(data, "tech_stack_verdict"),
        commit_verdict=_verdict(data, "commit_verdict"),
    )


class CritiqueEngine:
    def __init__(self, api_key: str, base_url: str, model: str):
        self.client = OpenAI(api_key=api_key, base_url=base_url)
        self.model = model

    def critique(self, bundle: AggregatedBundle) -> Critique:
        login = bundle.user.login
        resp = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(bundle)},
            ],
            response_format={"type": "json_object"},
            max_tokens=_MAX_TOKENS,
            temperature=_TEMPERATURE,
        )
        usage = resp.usage
        logger.info(
            "Token usage for {}: {} prompt + {} completion = {} total",
            login,
            usage.prompt_tokens if usage else "?",
            usage.completion_tokens if usage else "?",
            usage.total_tokens if usage else "?",
        )

        content = (resp.choices[0].message.content or "").strip() if resp.choices else ""
        if not content:
            raise CritiqueError(f"LLM returned an empty response for {login}")

        critique = parse_critique(content)
        logger.info("Critique for {}: {} ({}/100)", login, critique.headline, critique.score)
        return critique
