"""Run the git binary against a working directory.

The working directory is always passed explicitly. A directory has a single
checked-out ref at any time, so callers must never run commands against the
same directory concurrently.
"""

import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

import anyio

from repostate.exceptions import GitCommandError
from repostate.utils import get_logger


async def run_git(
    directory: Path,
    *args: str,
    env: Mapping[str, str] | None = None,
) -> str:
    """Run git in a directory and return its standard output.

    Args:
        directory: Working directory of the command.
        *args: Arguments passed to git.
        env: Extra environment variables, merged over os.environ.

    Returns:
        Standard output without its trailing newline.

    Raises:
        GitCommandError: If git exits with a non-zero status or cannot be run.
    """
    command = ["git", *args]
    full_env = {**os.environ, **env} if env else None
    get_logger().debug("git_command", args=list(args), directory=str(directory))

    try:
        result = await anyio.run_process(
            command,
            cwd=directory,
            env=full_env,
            check=False,
            stdin=subprocess.DEVNULL,
        )
    except OSError as e:
        msg = f"Failed to run git {' '.join(args)}: {e}"
        raise GitCommandError(
            msg, args=args, returncode=None, directory=directory
        ) from e

    stdout = result.stdout.decode("utf-8", errors="replace")
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace")
        msg = f"git {' '.join(args)} failed with exit code {result.returncode}: {stderr.strip()}"
        raise GitCommandError(
            msg,
            args=args,
            returncode=result.returncode,
            stderr=stderr,
            directory=directory,
        )
    return stdout.removesuffix("\n")


async def checkout(directory: Path, ref: str) -> None:
    """Check out a branch or commit."""
    _ = await run_git(directory, "checkout", "--quiet", ref)


async def execute_git_command(
    directory: Path,
    args: Sequence[str],
    *,
    ref: str,
    env: Mapping[str, str] | None = None,
) -> str:
    """Check out ref, then run a git command on it.

    Args:
        directory: Working directory of the repository.
        args: Arguments passed to git.
        ref: Branch or commit to check out first.
        env: Extra environment variables for the command.

    Returns:
        Standard output of the command.
    """
    await checkout(directory, ref)
    return await run_git(directory, *args, env=env)
