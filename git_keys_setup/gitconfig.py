"""Git's global configuration store, seen as a key-value collaborator."""

from .shell import run, sh


class GitConfig:
    """`git config --global` behind get/set."""

    def __init__(self, scope="--global"):
        self.scope = scope

    def get(self, key):
        """Value for `key`, or "" when unset."""
        return sh(["git", "config", self.scope, "--get", key])

    def set(self, key, value):
        """Store `key` = `value`. Returns True if git accepted the write."""
        return run(["git", "config", self.scope, key, str(value)]).returncode == 0

    def entries(self):
        """All (key, value) pairs in the store, in file order."""
        r = run(["git", "config", self.scope, "--list"])
        if r.returncode != 0:
            return []
        pairs = []
        for line in r.stdout.splitlines():
            key, sep, value = line.partition("=")
            if sep:
                pairs.append((key, value))
        return pairs


def apply_signing_key(config, key_id):
    """Point commit signing at `key_id`. Returns the keys left unwritten.

    commit.gpgsign goes last and nothing is written after the first failure,
    so signing is never switched on without a key to sign with.
    """
    settings = [
        ("user.signingkey", key_id),
        ("gpg.format", "gpg"),
        ("commit.gpgsign", "true"),
    ]
    for i, (key, value) in enumerate(settings):
        if not config.set(key, value):
            return [k for k, _ in settings[i:]]
    return []
