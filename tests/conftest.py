"""Shared test fixtures for ghastly."""

from __future__ import annotations

from pathlib import Path

import pytest

from ghastly.checker import WorkflowChecker
from ghastly.models.workflow import Workflow
from ghastly.parser.decoder import WorkflowDecoder, parse_workflow_string
from ghastly.parser.loader import TrackedLoader
from ghastly.settings import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"
WORKFLOWS_DIR = FIXTURES_DIR / "workflows"


@pytest.fixture
def loader() -> TrackedLoader:
    return TrackedLoader()


@pytest.fixture
def decoder() -> WorkflowDecoder:
    return WorkflowDecoder()


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the caller's environment."""
    return Settings(log_level="WARNING", policy_timeout_seconds=None, isolate_policy_failures=True)


@pytest.fixture
def checker(settings: Settings) -> WorkflowChecker:
    return WorkflowChecker(settings=settings)


def load_workflow(content: str) -> Workflow:
    return parse_workflow_string(content)


# Line numbers below are relied on by span assertions.
SAMPLE_WORKFLOW_YAML = """\
name: CI
on: [push, pull_request]
permissions:
  contents: read
jobs:
  build:
    runs-on: ubuntu-latest
    permissions: read-all
    steps:
      - uses: actions/checkout@v4
      - name: Greet
        run: echo "${{ github.event.pull_request.title }}"
  test:
    runs-on: ubuntu-latest
    steps:
      - run: echo "$TITLE"
        env:
          TITLE: ${{ github.event.pull_request.title }}
"""

CLEAN_WORKFLOW_YAML = """\
name: Clean
on: push
permissions: {}
jobs:
  lint:
    runs-on: ubuntu-latest
    permissions:
      contents: read
    steps:
      - uses: actions/checkout@v4
      - run: make lint
"""

FULL_STEP_YAML = """\
name: Release
run-name: Release by ${{ github.actor }}
env:
  RETRIES: 3
  VERBOSE: true
jobs:
  release:
    runs-on: [self-hosted, linux]
    shell: bash
    permissions:
      contents: write
      id-token: write
      pull-requests: read
    steps:
      - id: build
        if: github.ref == 'refs/heads/main'
        name: Build
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"
        working-directory: ./src
        shell: pwsh
        env:
          EMPTY:
          NAME: release
        run: |
          make dist
          make upload
"""
