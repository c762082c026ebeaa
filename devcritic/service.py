from __future__ import annotations

import re

from devcritic.ai import CritiqueEngine
from devcritic.aggregator import fetch_profile_bundle
from devcritic.config import Config
from devcritic.github import GitHubClient
from devcritic.models import AggregatedBundle, Critique

_DISALLOWED = re.compile(r"[^a-zA-Z0-9-]")


def sanitize_username(raw: str) -> str:
    """Trim whitespace and drop everything but ASCII letters, digits and hyphens."""
    return _DISALLOWED.sub("", raw.strip())


def merge_response(bundle: AggregatedBundle, critique: Critique) -> dict:
    return {**bundle.to_dict(), **critique.to_dict()}


def fetch_bundle(username: str, config: Config) -> AggregatedBundle:
    with GitHubClient(config.github_token) as github:
        return fetch_profile_bundle(github, username, max_workers=config.fetch_concurrency)


def run_analysis(username: str, config: Config) -> dict:
    """Fetch ``username``'s profile bundle, critique it, and merge both into one dict."""
    bundle = fetch_bundle(username, config)
    engine = CritiqueEngine(
        config.openai_api_key,
        config.openai_base_url,
        config.openai_model,
    )
    return merge_response(bundle, engine.critique(bundle))
