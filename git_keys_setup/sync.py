"""Turn a local folder into a git repo tracking (and pushed to) a remote."""

from pathlib import Path

from .errors import RemoteSyncError
from .shell import first_line, run
from .ui import banner, dim_output, done, info, ok, phase, warn

DEFAULT_COMMIT_MSG = "Initial commit or update from script"
BRANCH = "main"


def repo_dir_name(url):
    """Folder name for a clone URL: its last path segment without `.git`.

    Handles both https://host/owner/repo.git and git@host:owner/repo.git.
    """
    tail = url.rstrip("/").replace(":", "/").rsplit("/", 1)[-1]
    if tail.endswith(".git"):
        tail = tail[:-len(".git")]
    return tail


class RepoSync:
    def __init__(self, url, commit_msg=None, target_dir=None):
        self.url = url
        self.commit_msg = commit_msg or DEFAULT_COMMIT_MSG
        self.target = Path(target_dir or repo_dir_name(url))

    def git(self, *args):
        return run(["git", *args], cwd=str(self.target))

    def set_remote(self):
        current = self.git("remote", "get-url", "origin")
        if current.returncode != 0:
            r = self.git("remote", "add", "origin", self.url)
        elif current.stdout.strip() == self.url:
            ok("Remote origin already set")
            return
        else:
            warn(f"Re-pointing origin (was {current.stdout.strip()})")
            r = self.git("remote", "set-url", "origin", self.url)
        if r.returncode != 0:
            raise RemoteSyncError(f"Could not set remote origin: {first_line(r.stderr)}")
        ok(f"Remote origin → {self.url}")

    def run(self):
        banner("Sync to GitHub", self.url)

        phase(1, "Local Repository", str(self.target))
        self.target.mkdir(parents=True, exist_ok=True)
        r = self.git("init")
        if r.returncode != 0:
            raise RemoteSyncError(f"git init failed: {first_line(r.stderr)}")
        ok("Git repository initialized")
        self.set_remote()

        phase(2, "Merge Remote History")
        info(f"Pulling origin/{BRANCH} (if it exists)...")
        r = self.git("pull", "origin", BRANCH, "--allow-unrelated-histories")
        if r.returncode != 0:
            warn("Could not pull (maybe remote is empty or branch is missing).")
            if r.stderr.strip():
                dim_output(first_line(r.stderr))
        else:
            ok("Remote history merged")

        phase(3, "Commit")
        self.git("add", ".")
        r = self.git("commit", "-m", self.commit_msg)
        if r.returncode != 0:
            warn("Nothing committed.")
            dim_output(first_line(r.stdout) or first_line(r.stderr))
        else:
            ok(f"Committed: {self.commit_msg}")

        phase(4, "Push")
        self.git("branch", "-M", BRANCH)
        r = self.git("push", "-u", "origin", BRANCH)
        if r.returncode != 0:
            raise RemoteSyncError(f"Push to {self.url} failed: {first_line(r.stderr)}")
        done("Sync Complete", f"Local repo synced with {self.url}")
        return 0
