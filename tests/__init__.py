"""Paint Quest Test Suite

Tests for the painting backlog, session log and recommenders.

Test organization:
- unit/: Unit tests for individual modules
  - attempts/: Session log tests (fsm, review, service)
  - recommend/: Recommender tests (scoring, attempts, tasks, service)
  - quests/: Template provisioning and CRUD
  - tasks/: Backlog manager
  - profile/: Profile and recommendation config
  - arsenal/: Owned tools and paints
  - test_cli.py, test_config_models.py, test_errors.py, test_tags.py: shared modules

Running tests:
    # All tests
    uv run pytest

    # Specific module
    uv run pytest tests/unit/attempts/

    # With coverage
    uv run pytest --cov=paintquest --cov-report=term-missing
"""
