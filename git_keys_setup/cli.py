"""Console entry points. Exit codes: 0 done or declined, 1 fatal, 130 interrupted."""

import argparse
import sys

from .errors import SetupError
from .gitsetup import GitConfigWizard
from .lifecycle import KeyLifecycleManager
from .ssh import SshKeySetup
from .sync import DEFAULT_COMMIT_MSG, RepoSync
from .ui import console, dim, fail, reattach_tty


def guarded(task):
    """Run `task()` and turn the outcome into an exit code."""
    try:
        return task()
    except SetupError as e:
        fail(str(e))
        return 1
    except KeyboardInterrupt:
        console.print("\n\n  [dim]Cancelled. Run again whenever you're ready.[/]\n")
        return 130
    except Exception as e:
        console.print(f"\n  [red]Something broke: {e}[/]")
        console.print("  [dim]Re-run the command. It's safe to retry.[/]\n")
        raise


def gpg_main():
    reattach_tty()
    sys.exit(guarded(KeyLifecycleManager().run))


def ssh_main():
    reattach_tty()
    sys.exit(guarded(SshKeySetup().run))


def config_main():
    reattach_tty()
    sys.exit(guarded(GitConfigWizard().run))


def sync_main(argv=None):
    parser = argparse.ArgumentParser(
        prog="sync-to-github",
        description="Initialize a local folder as a git repo and push it to a remote.",
    )
    parser.add_argument("url", nargs="?", help="remote repository URL")
    parser.add_argument("commit_msg", nargs="?", default=DEFAULT_COMMIT_MSG,
                        help="commit message")
    parser.add_argument("target_dir", nargs="?", help="local folder (default: repo name)")
    args = parser.parse_args(argv)

    if not args.url:
        fail("No GitHub URL provided.")
        dim("Usage: sync-to-github <github_repo_url> [commit_message] [target_directory]")
        sys.exit(1)

    sys.exit(guarded(RepoSync(args.url, args.commit_msg, args.target_dir).run))


if __name__ == "__main__":
    gpg_main()
