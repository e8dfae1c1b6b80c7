"""
GPG key lifecycle: generate a signing key, retire the ones it replaces,
and point Git at it.

    resolve identity → confirm → generate → identify → enumerate old keys
      → (confirm) revoke + delete each → git signing config
      → public key to clipboard → GitHub upload page

Identity, key generation, key lookup and the git config write are fatal
when they fail. Everything after the new key exists is best-effort.
"""

import tempfile
from collections import namedtuple
from pathlib import Path

from .desktop import Clipboard, UrlOpener
from .errors import ConfigurationError, KeyLookupError, SigningConfigError
from .gitconfig import GitConfig, apply_signing_key
from .keyring import KEY_LENGTH, KEY_TYPE, REVOKE_SUPERSEDED, GpgKeyring, parse_key_ids
from .ui import (
    Prompter, banner, collect_passphrase, dim, dim_output, done, github_action, info,
    ok, phase, show_block, show_settings, warn,
)

GITHUB_KEYS_URL = "https://github.com/settings/keys"

Identity = namedtuple("Identity", ["name", "email"])
KeyRecord = namedtuple("KeyRecord", ["id", "is_current"])


class KeyLifecycleManager:
    """Runs one key rotation against injected collaborators.

    config     get/set store for git settings (GitConfig)
    keyring    GpgKeyring or anything with the same methods
    prompter   confirm/ask/secret/pause
    clipboard  copy(text) -> tool name or None
    opener     open(url) -> bool
    """

    def __init__(self, config=None, keyring=None, prompter=None,
                 clipboard=None, opener=None):
        self.config = config or GitConfig()
        self.keyring = keyring or GpgKeyring()
        self.prompter = prompter or Prompter()
        self.clipboard = clipboard or Clipboard()
        self.opener = opener or UrlOpener()

    # ── Identity ──────────────────────────────────────────────────────────
    def resolve_identity(self):
        name = self.config.get("user.name").strip()
        email = self.config.get("user.email").strip()
        if not name or not email:
            dim("Set them with:")
            dim("  git config --global user.name 'Your Name'")
            dim("  git config --global user.email 'you@example.com'")
            raise ConfigurationError("Git user name or email not configured.")
        return Identity(name, email)

    def confirm_intent(self, identity):
        show_settings([("Name", identity.name), ("Email", identity.email)])
        return self.prompter.confirm(
            f"Generate a new {KEY_TYPE} {KEY_LENGTH}-bit signing key for this identity?",
            default=True,
        )

    # ── New key ───────────────────────────────────────────────────────────
    def generate_key(self, identity):
        passphrase = collect_passphrase(self.prompter)
        info(f"Generating GPG key ({KEY_TYPE}, {KEY_LENGTH}-bit, no expiry)...")
        dim("This can take a minute while gpg gathers entropy.")
        self.keyring.generate(identity.name, identity.email, passphrase)
        ok("GPG key generated")

    def key_records(self, identity, current_id):
        """Every secret key listed for the identity's email, in listing order."""
        listing = self.keyring.list_secret_keys(identity.email)
        return [KeyRecord(key_id, key_id == current_id) for key_id in parse_key_ids(listing)]

    def identify_new_key(self, identity):
        """Id of the newest key for the email.

        gpg lists keys oldest first, so the newest is the last `sec` line.
        """
        records = self.key_records(identity, None)
        if not records:
            raise KeyLookupError(f"Could not find the generated GPG key for {identity.email}.")
        return records[-1].id

    # ── Old keys ──────────────────────────────────────────────────────────
    def enumerate_old_keys(self, identity, current_id):
        old = []
        for record in self.key_records(identity, current_id):
            if not record.is_current and record.id not in old:
                old.append(record.id)
        return old

    def retire_key(self, old_id, current_id):
        """Revoke `old_id` in place, then delete both halves of it.

        Returns True only if every step worked. A key is never deleted
        unless its revocation certificate was created and imported.
        """
        reason = f"Superseded by new key {current_id}"
        info(f"Revoking old key {old_id}...")

        with tempfile.TemporaryDirectory(prefix="gpg-revoke-") as tmp:
            cert = Path(tmp) / f"revoke-{old_id}.asc"

            if not self.keyring.gen_revoke(old_id, REVOKE_SUPERSEDED, reason, cert):
                warn(f"Could not create a revocation certificate for {old_id}; key left untouched")
                self._show_error()
                return False

            if not self.keyring.import_file(cert):
                warn(f"Could not import the revocation certificate for {old_id}; key not deleted")
                self._show_error()
                return False
            ok(f"Revoked {old_id}")

        if not self.keyring.delete_secret_key(old_id):
            warn(f"Could not delete the secret key {old_id}; remove it with: "
                 f"gpg --delete-secret-keys {old_id}")
            self._show_error()
            return False
        if not self.keyring.delete_public_key(old_id):
            warn(f"Could not delete the public key {old_id}; remove it with: "
                 f"gpg --delete-keys {old_id}")
            self._show_error()
            return False
        ok(f"Deleted {old_id}")
        return True

    def retire_old_keys(self, old_ids, current_id):
        """Retire every old key after one confirmation. Returns the ids fully retired."""
        if not old_ids:
            ok("No older keys found. Nothing to retire.")
            return []

        warn(f"Found {len(old_ids)} older key(s) for this identity:")
        for key_id in old_ids:
            dim(f"  {key_id}")
        warn("Revoking and deleting them can't be undone.")
        if not self.prompter.confirm("Revoke and delete these keys?", default=False):
            info("Keeping older keys.")
            return []

        retired = []
        for key_id in old_ids:
            if self.retire_key(key_id, current_id):
                retired.append(key_id)
        return retired

    # ── Git + GitHub ──────────────────────────────────────────────────────
    def apply_signing_config(self, current_id):
        failed = apply_signing_key(self.config, current_id)
        if failed:
            raise SigningConfigError(f"Could not write git config, left unset: {', '.join(failed)}")
        ok("Git is now configured to sign commits with your GPG key")
        show_settings([(key, self.config.get(key))
                       for key in ("user.signingkey", "commit.gpgsign", "gpg.format")])

    def publish_public_key(self, current_id):
        """Public key to the clipboard, or to the screen. Returns the clipboard tool used."""
        armor = self.keyring.export_armored(current_id)
        if not armor:
            warn(f"Could not export the public key for {current_id}. Try: gpg --armor --export {current_id}")
            return None

        tool = self.clipboard.copy(armor)
        if tool:
            ok(f"Public GPG key copied to clipboard using {tool}")
        else:
            warn("Could not copy to clipboard automatically. Here's your public key:")
            show_block(armor)
        return tool

    def open_upload_page(self, copied=None):
        opened = self.opener.open(GITHUB_KEYS_URL)
        github_action(
            "Your GPG public key" if copied else None,
            GITHUB_KEYS_URL,
            opened,
            "  1. Click [bold]New GPG key[/]\n"
            "  2. [bold]Title[/]: something like \"Laptop Signing Key\"\n"
            "  3. [bold]Key[/]:   paste the key\n"
            "     It starts with: [dim]-----BEGIN PGP PUBLIC KEY BLOCK-----[/]\n"
            "  4. Click [bold]Add GPG key[/]",
        )
        return opened

    # ── Run ───────────────────────────────────────────────────────────────
    def run(self):
        """Whole rotation. Returns 0; fatal problems raise SetupError."""
        banner("GitHub GPG Key Setup", "New signing key, with cleanup of the old ones")

        phase(1, "Your Identity", "Read from your global git config")
        identity = self.resolve_identity()
        if not self.confirm_intent(identity):
            info("No key generated. Run again whenever.")
            return 0

        phase(2, "New Signing Key")
        self.generate_key(identity)
        current_id = self.identify_new_key(identity)
        ok(f"GPG key ID: [bold]{current_id}[/]")

        phase(3, "Older Keys", "Revoke and delete keys this one replaces")
        old_ids = self.enumerate_old_keys(identity, current_id)
        self.retire_old_keys(old_ids, current_id)

        phase(4, "Commit Signing")
        self.apply_signing_config(current_id)

        phase(5, "GitHub", "Register the public key")
        copied = self.publish_public_key(current_id)
        self.open_upload_page(copied)

        done(
            "GPG Setup Complete",
            "Paste your key on GitHub, then try:\n"
            "  [dim]git commit -S -m 'Signed commit'[/]\n\n"
            "Look for the [green]Verified[/] badge after you push.",
        )
        return 0

    def _show_error(self):
        detail = getattr(self.keyring, "last_error", "")
        if detail:
            dim_output(detail)
