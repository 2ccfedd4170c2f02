"""
Shared test fixtures: sample requirements, fake completion client, app.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from flask.testing import FlaskClient

from projectgen.core.config import Settings
from projectgen.core.requirements import Requirements
from projectgen.web import create_app


class FakeClient:
    """Stands in for OpenAIClient: returns a canned reply or raises."""

    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    def ask(self, system: str, user: str, max_tokens: int = 4000, temperature: float = 0.7) -> str:
        self.calls.append({
            "system": system,
            "user": user,
            "max_tokens": max_tokens,
            "temperature": temperature,
        })
        if self.error is not None:
            raise self.error
        return self.reply


def ai_reply(**overrides) -> str:
    body = {
        "architecture": "React SPA talking to an Express API",
        "files": [
            {"path": "src/routes/tasks.ts", "content": "export const router = 1\n", "type": "service"},
            {"path": "src/components/TaskList.tsx", "content": "export default () => null\n", "type": "component"},
        ],
        "dependencies": ["react", "express", "react"],
        "scripts": {"dev": "vite"},
        "environment": {"PORT": "port"},
    }
    body.update(overrides)
    return "Here is your project:\n```json\n" + json.dumps(body) + "\n```\n"


@pytest.fixture()
def payload() -> dict:
    return {
        "name": "Task Tracker",
        "description": "Track tasks for a small team",
        "type": "fullstack",
        "framework": "react",
        "features": ["Task CRUD", "Email Notifications"],
        "database": "postgresql",
        "authentication": True,
        "deployment": "docker",
    }


@pytest.fixture()
def requirements(payload: dict) -> Requirements:
    return Requirements.from_payload(payload)


@pytest.fixture()
def output_root(tmp_path: Path) -> Path:
    return tmp_path / "generated_projects"


@pytest.fixture()
def failing_client() -> FakeClient:
    return FakeClient(error=TimeoutError("completion timed out"))


@pytest.fixture()
def app_factory(output_root: Path):
    def _make(client=None):
        app = create_app(Settings(output_root=output_root), client=client)
        app.config["TESTING"] = True
        return app
    return _make


@pytest.fixture()
def client(app_factory, failing_client: FakeClient) -> FlaskClient:
    return app_factory(failing_client).test_client()
