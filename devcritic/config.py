from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass
class Config:
    github_token: str = ""
    openai_api_key: str = ""
    openai_base_url: str = "https://api.groq.com/openai/v1"
    openai_model: str = "llama-3.3-70b-versatile"
    fetch_concurrency: int = 8
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls) -> Config:
        load_dotenv()

        return cls(
            github_token=os.environ.get("GITHUB_TOKEN", ""),
            openai_api_key=os.environ.get("OPENAI_API_KEY", ""),
            openai_base_url=os.environ.get(
                "OPENAI_BASE_URL", "https://api.groq.com/openai/v1"
            ),
            openai_model=os.environ.get("OPENAI_MODEL", "llama-3.3-70b-versatile"),
            fetch_concurrency=int(os.environ.get("FETCH_CONCURRENCY", "8")),
            host=os.environ.get("HOST", "127.0.0.1"),
            port=int(os.environ.get("PORT", "8000")),
        )
