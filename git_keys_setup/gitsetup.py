"""Global git identity, editor and defaults, with optional commit signing."""

from .errors import ConfigurationError, SigningConfigError, ValidationError
from .gitconfig import GitConfig, apply_signing_key
from .keyring import GpgKeyring, parse_key_ids
from .ui import (
    Prompter, banner, dim, done, info, ok, phase, show_block, show_settings, warn,
)

DEFAULT_EDITOR = "nano"

DEFAULTS = [
    ("color.ui", "auto"),
    ("init.defaultBranch", "main"),
]


class GitConfigWizard:
    def __init__(self, config=None, keyring=None, prompter=None):
        self.config = config or GitConfig()
        self.keyring = keyring or GpgKeyring()
        self.prompter = prompter or Prompter()

    def collect_identity(self):
        existing_name = self.config.get("user.name")
        existing_email = self.config.get("user.email")
        if existing_name:
            dim(f"Current git config: {existing_name} <{existing_email}>")

        name = self.prompter.ask("Full name", default=existing_name or None)
        email = self.prompter.ask("Email address", default=existing_email or None)
        if not name or not email:
            raise ValidationError("Both a name and an email are required.")
        return name, email

    def write(self, settings):
        failed = [key for key, value in settings if not self.config.set(key, value)]
        if failed:
            raise ConfigurationError(f"Could not write git config: {', '.join(failed)}")

    def setup_signing(self):
        """Optional: pick an existing secret key and sign commits with it."""
        if not self.prompter.confirm("Enable commit signing with GPG?", default=False):
            info("Skipping GPG signing setup.")
            return None

        listing = self.keyring.list_secret_keys()
        ids = parse_key_ids(listing)
        if ids:
            info("Available GPG keys:")
            show_block(listing.rstrip())
        else:
            warn("No GPG secret keys found. Run gpg-key-setup to create one.")

        key_id = self.prompter.ask(
            "GPG key ID (e.g. ABCDEF1234567890)",
            default=ids[-1] if ids else None,
        )
        if not key_id:
            warn("No key ID given. Skipping GPG signing setup.")
            return None

        failed = apply_signing_key(self.config, key_id)
        if failed:
            raise SigningConfigError(f"Could not write git config, left unset: {', '.join(failed)}")
        ok("Git commit signing enabled")
        return key_id

    def run(self):
        banner("Git Configuration Setup")

        phase(1, "Your Identity")
        name, email = self.collect_identity()
        self.write([("user.name", name), ("user.email", email)])
        ok(f"Using {name} <{email}>")

        phase(2, "Editor & Defaults")
        editor = self.prompter.ask(
            "Preferred git editor (nano/vim/code --wait/...)", default=DEFAULT_EDITOR,
        ) or DEFAULT_EDITOR
        self.write([("core.editor", editor)] + DEFAULTS)
        ok("Editor, colors and default branch set")

        phase(3, "Commit Signing")
        self.setup_signing()

        phase(4, "Summary", "Your global git configuration")
        show_settings(self.config.entries())
        done("Git Config Complete", "Global git configuration is in place.")
        return 0
