"""
GPG keyring access.

Everything goes through the `gpg` binary; this module only builds argument
lists, feeds stdin, and reads the text gpg prints back.
"""

import re
from pathlib import Path

from .errors import KeyGenerationError, ValidationError
from .shell import first_line, run

KEY_TYPE   = "RSA"
KEY_LENGTH = 4096
KEY_EXPIRY = "0"  # never

# gpg --gen-revoke menu: 0 none, 1 compromised, 2 superseded, 3 no longer used
REVOKE_SUPERSEDED = 2

# `sec   rsa4096/ABCDEF1234567890 2024-01-15 [SC]`; `sec#` / `sec>` mark
# offline and smartcard-held secrets.
SEC_LINE = re.compile(r"^sec[#>]?\s+\S*?/([0-9A-Fa-f]{8,})\b")


def parse_key_ids(listing):
    """Key ids from `gpg --list-secret-keys --keyid-format=long` output.

    Only primary secret-key summary lines count; subkeys (`ssb`), uids and
    fingerprints are skipped. Order is the order gpg printed them in.
    """
    ids = []
    for line in (listing or "").splitlines():
        m = SEC_LINE.match(line.strip())
        if m:
            ids.append(m.group(1).upper())
    return ids


def batch_params(name, email, passphrase=None):
    """Unattended key-generation parameters for `gpg --batch --generate-key`."""
    for label, value in (("name", name), ("email", email), ("passphrase", passphrase or "")):
        if "\n" in value or "\r" in value:
            raise ValidationError(f"The {label} can't contain line breaks")

    lines = []
    if passphrase:
        lines.append(f"Passphrase: {passphrase}")
    else:
        lines.append("%no-protection")
    lines += [
        f"Key-Type: {KEY_TYPE}",
        f"Key-Length: {KEY_LENGTH}",
        f"Name-Real: {name}",
        f"Name-Email: {email}",
        f"Expire-Date: {KEY_EXPIRY}",
        "%commit",
    ]
    return "\n".join(lines) + "\n"


def revoke_answers(reason_code, reason_text):
    """Answers for gen-revoke's questions, in the order gpg asks them."""
    return "\n".join([
        "y",               # create a revocation certificate?
        str(reason_code),  # reason
        reason_text,       # description ...
        "",                # ... terminated by an empty line
        "y",               # is this okay?
    ]) + "\n"


class GpgKeyring:
    """The user's GnuPG keyring. Honors GNUPGHOME like gpg itself does."""

    def __init__(self, program="gpg"):
        self.program = program
        self.last_error = ""

    def _gpg(self, *args, input=None):
        r = run([self.program, *args], input=input)
        self.last_error = "" if r.returncode == 0 else first_line(r.stderr)
        return r

    def generate(self, name, email, passphrase=None):
        """Create an RSA-4096, non-expiring key pair.

        The parameters (and any passphrase) travel on stdin, so nothing
        about the request is written to disk.
        """
        params = batch_params(name, email, passphrase)
        r = self._gpg("--batch", "--pinentry-mode", "loopback",
                      "--generate-key", input=params)
        if r.returncode != 0:
            raise KeyGenerationError(
                f"gpg could not generate a key: {self.last_error or 'unknown error'}"
            )

    def list_secret_keys(self, email=None):
        """Raw listing of secret keys for `email` (all keys when None, empty when none match)."""
        args = ["--list-secret-keys", "--keyid-format=long"]
        if email:
            args.append(email)
        return self._gpg(*args).stdout

    def gen_revoke(self, key_id, reason_code, reason_text, output):
        """Write a revocation certificate for `key_id` to `output`.

        gpg refuses --gen-revoke under --batch; answers come from stdin instead.
        """
        r = self._gpg("--no-tty", "--yes", "--command-fd", "0", "--pinentry-mode", "loopback",
                      "--output", str(output), "--gen-revoke", key_id,
                      input=revoke_answers(reason_code, reason_text))
        if r.returncode != 0:
            return False
        path = Path(output)
        if not path.exists() or path.stat().st_size == 0:
            self.last_error = "gpg produced an empty certificate"
            return False
        return True

    def import_file(self, path):
        return self._gpg("--batch", "--import", str(path)).returncode == 0

    def fingerprint(self, key_id):
        """Full fingerprint for `key_id`; batch-mode deletion won't accept less."""
        r = self._gpg("--with-colons", "--fingerprint", "--list-keys", key_id)
        for line in r.stdout.splitlines():
            fields = line.split(":")
            if fields[0] == "fpr" and len(fields) > 9 and fields[9]:
                return fields[9]
        return key_id

    def delete_secret_key(self, key_id):
        fpr = self.fingerprint(key_id)
        return self._gpg("--batch", "--yes", "--delete-secret-keys", fpr).returncode == 0

    def delete_public_key(self, key_id):
        fpr = self.fingerprint(key_id)
        return self._gpg("--batch", "--yes", "--delete-keys", fpr).returncode == 0

    def export_armored(self, key_id):
        """ASCII-armored public key, or "" if gpg couldn't export it."""
        r = self._gpg("--armor", "--export", key_id)
        if r.returncode != 0:
            return ""
        return r.stdout.strip()
