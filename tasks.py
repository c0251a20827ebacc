"""Invoke tasks for working on dirwise.

Every task shells out to ``uv`` so local runs use the same locked
environment as CI.
"""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"
SOURCES = ("src", "tests")


def _uv(ctx: Context, *args: str, dry_run: bool = False) -> None:
    """Run ``uv`` with ``args``, or only print the command when ``dry_run`` is set."""
    command = shlex.join(("uv", *args))
    if dry_run:
        print(f"[dry-run] {command}")
        return
    ctx.run(command, echo=True, pty=True)


@task(help={"dev": "Install the dev extra (pytest, ruff, mypy, invoke)."})
def sync(ctx: Context, dev: bool = True) -> None:
    """Create or refresh the virtual environment."""
    args = ["sync"]
    if dev:
        args += ["--extra", "dev"]
    _uv(ctx, *args)


@task(help={"clean": "Empty dist/ first."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build the sdist and wheel into ``dist/``."""
    if clean and DIST_DIR.exists():
        shutil.rmtree(DIST_DIR)
    _uv(ctx, "build")


@task(
    help={
        "k": "pytest -k expression.",
        "target": "Test file or directory (defaults to tests/).",
        "options": "Extra flags passed to pytest unchanged.",
    }
)
def tests(ctx: Context, k: str = "", target: str = "tests", options: str = "") -> None:
    """Run the test suite."""
    args: list[str] = ["run", "pytest"]
    if k:
        args += ["-k", k]
    args += shlex.split(options)
    args.append(target)
    _uv(ctx, *args)


@task(help={"fix": "Let ruff rewrite what it can."})
def lint(ctx: Context, fix: bool = False) -> None:
    """Check formatting and lint rules with ruff."""
    _uv(ctx, "run", "ruff", "format", "--check", *SOURCES)
    check: Sequence[str] = ("run", "ruff", "check", *SOURCES, *(("--fix",) if fix else ()))
    _uv(ctx, *check)


@task
def typecheck(ctx: Context) -> None:
    """Type-check the package with mypy."""
    _uv(ctx, "run", "mypy", "src")


@task
def ci(ctx: Context) -> None:
    """Run lint, type checks and tests in the same order as CI."""
    ctx.invoke(lint)
    ctx.invoke(typecheck)
    ctx.invoke(tests)


namespace = Collection(sync, build, tests, lint, typecheck, ci)
