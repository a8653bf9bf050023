"""Branch reconciliation between a remote repository and a local clone.

Uses subprocess + git CLI directly (no gitpython dependency).
"""

import os
import subprocess
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

from gitrieve.core.exceptions import BranchReconciliationError, GitCommandError
from gitrieve.core.models.branch import BranchState, BranchStatus

logger = structlog.get_logger(__name__)

REMOTE = "origin"


class ReconcileResult(BaseModel):
    """Outcome of one reconciliation run."""

    updated: bool = False
    cloned: bool = False
    default_branch: str = ""
    branches: list[BranchState] = Field(default_factory=list)


class BranchReconciler:
    """Mirrors a remote's branches into a local working tree.

    After ``reconcile()`` every selected remote branch has a local
    tracking branch fast-forwarded to the remote tip, and the remote's
    default branch is checked out.
    """

    def __init__(
        self,
        clone_url: str,
        git_dir: str | Path,
        all_branches: bool = False,
        depth: int = 0,
    ) -> None:
        self._clone_url = clone_url
        self._git_dir = Path(git_dir)
        self._all_branches = all_branches
        self._depth = depth

    @property
    def git_dir(self) -> Path:
        return self._git_dir

    def _run_git(self, *args: str, cwd: Path | None = None) -> str:
        """Run a git command and return stdout."""
        command = ["git", *args]
        try:
            result = subprocess.run(
                command,
                cwd=cwd or self._git_dir,
                capture_output=True,
                text=True,
                check=True,
                env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
            )
        except subprocess.CalledProcessError as e:
            raise GitCommandError(
                f"git {args[0]} failed: {e.stderr.strip()}",
                command=command,
                stderr=e.stderr,
                details={"git_dir": str(self._git_dir)},
            ) from e
        except FileNotFoundError as e:
            raise GitCommandError("git executable not found", command=command) from e
        return result.stdout.strip()

    def _depth_args(self) -> list[str]:
        return ["--depth", str(self._depth)] if self._depth > 0 else []

    def has_repository(self) -> bool:
        return (self._git_dir / ".git").exists()

    def clone(self) -> None:
        """Clone the remote into the working path."""
        self._git_dir.parent.mkdir(parents=True, exist_ok=True)
        args = ["clone", *self._depth_args()]
        if self._depth > 0:
            # --depth implies --single-branch
            args.append("--no-single-branch")
        self._run_git(*args, self._clone_url, str(self._git_dir), cwd=self._git_dir.parent)
        logger.info("Repository cloned", url=self._clone_url, path=str(self._git_dir))

    def fetch(self) -> None:
        """Fetch every remote head, overwriting diverged tracking refs."""
        self._run_git(
            "fetch",
            "--force",
            *self._depth_args(),
            REMOTE,
            f"+refs/heads/*:refs/remotes/{REMOTE}/*",
        )

    def default_branch(self) -> str:
        """Resolve the branch the remote's symbolic HEAD points to.

        Returns an empty string when the remote advertises no symbolic HEAD.
        """
        output = self._run_git("ls-remote", "--symref", REMOTE, "HEAD")
        for line in output.splitlines():
            if line.startswith("ref: ") and line.endswith("\tHEAD"):
                target = line[len("ref: "):].split("\t", 1)[0]
                return target.removeprefix("refs/heads/")
        return ""

    def remote_branches(self) -> list[tuple[str, str]]:
        """List ``(remote ref short name, commit)`` for each tracking branch."""
        output = self._run_git(
            "for-each-ref", "--format=%(refname)%09%(objectname)", f"refs/remotes/{REMOTE}/"
        )
        branches = []
        for line in output.splitlines():
            ref, _, sha = line.partition("\t")
            name = ref.removeprefix("refs/remotes/")
            # origin/HEAD is a symbolic alias, not a branch
            if name == f"{REMOTE}/HEAD":
                continue
            branches.append((name, sha))
        return branches

    def local_branch_exists(self, branch: str) -> bool:
        try:
            self._run_git("show-ref", "--verify", "--quiet", f"refs/heads/{branch}")
            return True
        except GitCommandError:
            return False

    def head(self) -> str:
        return self._run_git("rev-parse", "HEAD")

    def reconcile(self) -> ReconcileResult:
        """Clone or fetch, sync every selected branch, restore the default branch.

        Clone, fetch and remote listing errors abort the run. A failure on a
        single branch is logged and that branch is skipped.
        """
        result = ReconcileResult()

        if not self.has_repository():
            self.clone()
            result.cloned = True
            result.updated = True

        self.fetch()
        result.default_branch = self.default_branch()

        for remote_ref, sha in self.remote_branches():
            local_name = remote_ref[len(f"{REMOTE}/"):]
            is_default = local_name == result.default_branch
            if not self._all_branches and not is_default:
                continue

            state = BranchState(
                remote_ref=remote_ref,
                local_name=local_name,
                existed=self.local_branch_exists(local_name),
                is_default=is_default,
            )
            self._sync_branch(state, sha)
            result.branches.append(state)
            if state.changed:
                result.updated = True

        if not result.default_branch:
            raise BranchReconciliationError(
                "Remote has no symbolic HEAD; cannot restore the default branch",
                details={"git_dir": str(self._git_dir)},
            )
        try:
            self._run_git("checkout", "--force", result.default_branch)
        except GitCommandError as e:
            raise BranchReconciliationError(
                f"Failed to check out default branch {result.default_branch}: {e.message}",
                details={"git_dir": str(self._git_dir), "branch": result.default_branch},
            ) from e

        logger.info(
            "Branches reconciled",
            path=str(self._git_dir),
            default_branch=result.default_branch,
            branches=len(result.branches),
            updated=result.updated,
        )
        return result

    def is_ancestor(self, commit: str, descendant: str) -> bool:
        """True when ``commit`` is reachable from ``descendant``."""
        try:
            self._run_git("merge-base", "--is-ancestor", commit, descendant)
            return True
        except GitCommandError:
            return False

    def _sync_branch(self, state: BranchState, remote_sha: str) -> None:
        """Move one local branch to the fetched remote tip.

        The fetch already brought the objects in, so the branch is advanced
        with ``reset --hard`` instead of a merge. With full history a tip
        that is not an ancestor of the remote tip means the remote was
        force-pushed; the branch is left alone and marked failed. Shallow
        mirrors cannot see that ancestry and always follow the remote.
        """
        local_name = state.local_name
        try:
            if not state.existed:
                # Anchor the new branch at the remote tip, not at the current
                # checkout, or later updates would be non-fast-forward
                self._run_git("checkout", "--force", "-b", local_name, remote_sha)
                self._run_git(
                    "branch", f"--set-upstream-to={state.remote_ref}", local_name
                )
                state.status = BranchStatus.CREATED
                logger.debug("Local branch created", branch=local_name, tip=remote_sha)

            self._run_git("checkout", "--force", local_name)
            before = self.head()
        except GitCommandError as e:
            state.status = BranchStatus.FAILED
            logger.error("Failed to check out branch", branch=local_name, error=e.message)
            return

        if before == remote_sha:
            state.tip = before
            logger.debug("Branch already up to date", branch=local_name)
            return

        if self._depth == 0 and not self.is_ancestor(before, remote_sha):
            state.status = BranchStatus.FAILED
            logger.error(
                "Remote branch diverged, not a fast-forward",
                branch=local_name,
                local=before,
                remote=remote_sha,
            )
            return

        try:
            self._run_git("reset", "--hard", remote_sha)
            state.tip = self.head()
        except GitCommandError as e:
            state.status = BranchStatus.FAILED
            logger.error("Failed to update branch", branch=local_name, error=e.message)
            return

        if state.status != BranchStatus.CREATED:
            state.status = BranchStatus.FAST_FORWARDED
        logger.debug("Branch fast-forwarded", branch=local_name, tip=state.tip)
