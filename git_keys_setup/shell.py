"""Thin wrappers around subprocess. Commands are argument lists, never shell strings."""

import subprocess


def run(args, input=None, cwd=None, env=None):
    """Run a command and capture its output.

    Returns the CompletedProcess. A missing binary is reported the same way
    a failing one is: returncode 127 with the error on stderr.
    """
    try:
        return subprocess.run(
            args, input=input, cwd=cwd, env=env,
            capture_output=True, text=True,
        )
    except OSError as e:
        return subprocess.CompletedProcess(args, 127, stdout="", stderr=str(e))


def feed(args, text):
    """Pipe `text` into a command and discard its output. Returns True on exit 0.

    Nothing is captured, so a background child left holding stdout
    (xclip, wl-copy) can't keep us waiting for EOF.
    """
    try:
        r = subprocess.run(
            args, input=text, text=True,
            stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
        )
    except OSError:
        return False
    return r.returncode == 0


def sh(args, input=None, cwd=None):
    """Run a command, return stdout (empty string on failure)."""
    r = run(args, input=input, cwd=cwd)
    if r.returncode != 0:
        return ""
    return r.stdout.strip()


def sh_ok(args, input=None, cwd=None):
    """Return True if a command exits 0."""
    return run(args, input=input, cwd=cwd).returncode == 0


def cmd_exists(name):
    """Check if a command exists on PATH."""
    return sh_ok(["which", name])


def first_line(text, limit=120):
    """First non-empty line of tool output, trimmed for a one-line message."""
    for line in (text or "").splitlines():
        line = line.strip()
        if line:
            return line[:limit]
    return ""
