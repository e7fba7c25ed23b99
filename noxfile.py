"""Local QA sessions for currencyapi-service."""

from __future__ import annotations

import nox

PACKAGES = ("domain", "infrastructure", "services", "shared", "tools")
SOURCE_DIRS = (*PACKAGES, "tests")

nox.options.reuse_existing_virtualenvs = True
nox.options.sessions = ("lint", "typecheck", "tests", "security")


def _install_project(session: nox.Session, *extra: str) -> None:
    """Install the project with its test extra plus the session tools."""

    session.install("-e", ".[test]")
    if extra:
        session.install(*extra)


@nox.session
def lint(session: nox.Session) -> None:
    """Run flake8 over the packages and tests."""

    _install_project(session, "flake8>=7.0.0")
    session.run("flake8", "--max-line-length=120", *SOURCE_DIRS)


@nox.session
def typecheck(session: nox.Session) -> None:
    """Type-check with mypy."""

    _install_project(session, "mypy>=1.11.0", "types-requests>=2.31.0")
    session.run("mypy", *PACKAGES)


@nox.session
def tests(session: nox.Session) -> None:
    """Run the pytest suite with coverage."""

    _install_project(session)
    cov = [f"--cov={package}" for package in PACKAGES]
    session.run("pytest", *cov, "--cov-report=term-missing", *session.posargs)


@nox.session
def security(session: nox.Session) -> None:
    """Run bandit and pip-audit."""

    _install_project(session, "bandit>=1.7.9", "pip-audit>=2.7.3")
    session.run("bandit", "-q", "-r", *PACKAGES)
    session.run("pip-audit")
