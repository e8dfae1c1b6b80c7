"""
In-memory stand-ins for the external collaborators: git config, the GPG
keyring, clipboard, browser opener and the interactive prompter.
"""

from pathlib import Path

import pytest

from git_keys_setup.errors import KeyGenerationError
from git_keys_setup.lifecycle import KeyLifecycleManager

ADA = ("Ada Lovelace", "ada@example.com")

K1 = "1111AAAA1111AAAA"
K2 = "2222BBBB2222BBBB"
K3 = "3333CCCC3333CCCC"

ARMOR = (
    "-----BEGIN PGP PUBLIC KEY BLOCK-----\n"
    "\n"
    "mQINBGXfakekeymaterial\n"
    "-----END PGP PUBLIC KEY BLOCK-----"
)


class FakeConfig:
    def __init__(self, values=None, fail_keys=()):
        self.values = dict(values or {})
        self.fail_keys = set(fail_keys)
        self.writes = []

    def get(self, key):
        return self.values.get(key, "")

    def set(self, key, value):
        if key in self.fail_keys:
            return False
        self.writes.append((key, value))
        self.values[key] = str(value)
        return True

    def entries(self):
        return list(self.values.items())


class FakeKeyring:
    """Keeps ids in creation order and renders them like gpg does."""

    def __init__(self, existing=(), new_ids=(K3,), email=ADA[1]):
        self.keys = list(existing)
        self.new_ids = list(new_ids)
        self.email = email
        self.fail_generate = False
        self.fail_revoke = set()
        self.fail_import = set()
        self.fail_delete_secret = set()
        self.export_text = ARMOR
        self.calls = []
        self.generated = []
        self.revoked = []
        self.cert_paths = []
        self.last_error = ""

    def generate(self, name, email, passphrase=None):
        self.calls.append(("generate", name, email))
        if self.fail_generate:
            raise KeyGenerationError("gpg could not generate a key: boom")
        self.generated.append((name, email, passphrase))
        if self.new_ids:
            self.keys.append(self.new_ids.pop(0))

    def list_secret_keys(self, email=None):
        self.calls.append(("list", email))
        if email and email != self.email:
            return ""
        out = ["/home/ada/.gnupg/pubring.kbx", "-----------------------------"]
        for key_id in self.keys:
            out += [
                f"sec   rsa4096/{key_id} 2024-01-15 [SC]",
                f"      {'F' * 24}{key_id}",
                f"uid                 [ultimate] {ADA[0]} <{self.email}>",
                f"ssb   rsa4096/{key_id[::-1]} 2024-01-15 [E]",
                "",
            ]
        return "\n".join(out)

    def gen_revoke(self, key_id, reason_code, reason_text, output):
        self.calls.append(("gen_revoke", key_id, reason_code, reason_text))
        self.cert_paths.append(Path(output))
        if key_id in self.fail_revoke:
            self.last_error = "gpg: secret key not available"
            return False
        Path(output).write_text(f"revocation for {key_id}\n")
        return True

    def import_file(self, path):
        self.calls.append(("import", Path(path).name))
        assert Path(path).exists(), "certificate must exist while it is imported"
        key_id = Path(path).stem.replace("revoke-", "")
        if key_id in self.fail_import:
            self.last_error = "gpg: import failed"
            return False
        self.revoked.append(key_id)
        return True

    def delete_secret_key(self, key_id):
        self.calls.append(("delete_secret", key_id))
        if key_id in self.fail_delete_secret:
            self.last_error = "gpg: deleting secret key failed"
            return False
        return True

    def delete_public_key(self, key_id):
        self.calls.append(("delete_public", key_id))
        self.keys.remove(key_id)
        return True

    def export_armored(self, key_id):
        self.calls.append(("export", key_id))
        return self.export_text


class ScriptedPrompter:
    """Answers prompts from pre-loaded queues; runs dry loudly."""

    def __init__(self, confirms=(), asks=(), secrets=()):
        self.confirms = list(confirms)
        self.asks = list(asks)
        self.secrets = list(secrets)
        self.prompts = []
        self.paused = 0

    def confirm(self, prompt, default=False):
        self.prompts.append(prompt)
        assert self.confirms, f"unexpected confirm: {prompt}"
        return self.confirms.pop(0)

    def ask(self, prompt, default=None):
        self.prompts.append(prompt)
        assert self.asks, f"unexpected question: {prompt}"
        answer = self.asks.pop(0)
        return (default or "") if answer is None else answer

    def secret(self, prompt):
        self.prompts.append(prompt)
        assert self.secrets, f"unexpected secret prompt: {prompt}"
        return self.secrets.pop(0)

    def pause(self, msg=""):
        self.paused += 1


class FakeClipboard:
    def __init__(self, tool="xclip"):
        self.tool = tool
        self.copied = []

    def copy(self, text):
        if self.tool:
            self.copied.append(text)
        return self.tool


class FakeOpener:
    def __init__(self, works=True):
        self.works = works
        self.opened = []

    def open(self, url):
        self.opened.append(url)
        return self.works


@pytest.fixture
def config():
    return FakeConfig({"user.name": ADA[0], "user.email": ADA[1]})


@pytest.fixture
def keyring():
    return FakeKeyring()


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def opener():
    return FakeOpener()


@pytest.fixture
def make_manager(config, keyring, clipboard, opener):
    """Build a KeyLifecycleManager around the fakes with scripted answers."""
    def build(confirms=(), secrets=(), **overrides):
        parts = dict(config=config, keyring=keyring, clipboard=clipboard, opener=opener)
        parts.update(overrides)
        prompter = ScriptedPrompter(confirms=confirms, secrets=secrets)
        return KeyLifecycleManager(prompter=prompter, **parts)
    return build
