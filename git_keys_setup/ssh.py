"""SSH key generation and GitHub registration."""

import getpass
import os
import re
import socket
import time
from pathlib import Path

from .desktop import Clipboard, UrlOpener
from .errors import ConfigurationError, KeyGenerationError, SshError
from .gitconfig import GitConfig
from .shell import cmd_exists, first_line, run
from .ui import (
    Prompter, banner, collect_passphrase, dim, dim_output, done, fail, github_action,
    info, ok, phase, show_block, show_settings, warn,
)

SSH_DIR  = Path.home() / ".ssh"
SSH_KEY  = SSH_DIR / "id_rsa"
KEY_BITS = 4096

GITHUB_SSH_URL = "https://github.com/settings/ssh/new"
GITHUB_SSH_HOST = "git@github.com"

AGENT_VAR = re.compile(r"(SSH_AUTH_SOCK|SSH_AGENT_PID)=([^;\s]+)")


def default_email(config):
    """Git's user.email, else user@hostname."""
    return config.get("user.email") or f"{getpass.getuser()}@{socket.gethostname()}"


def parse_agent_env(output):
    """Variables from `ssh-agent -s` output (`SSH_AUTH_SOCK=...; export SSH_AUTH_SOCK;`)."""
    return dict(AGENT_VAR.findall(output or ""))


class SshKeySetup:
    def __init__(self, key_path=None, config=None, prompter=None,
                 clipboard=None, opener=None):
        self.key = Path(key_path) if key_path else SSH_KEY
        self.pub = self.key.with_name(self.key.name + ".pub")
        self.config = config or GitConfig()
        self.prompter = prompter or Prompter()
        self.clipboard = clipboard or Clipboard()
        self.opener = opener or UrlOpener()

    def check_tools(self):
        for tool in ("ssh-keygen", "ssh-agent"):
            if not cmd_exists(tool):
                raise ConfigurationError(f"'{tool}' command not found. Please install OpenSSH.")
        ok("OpenSSH tools found")

    def confirm_replace(self):
        """True when it's fine to write a key at self.key."""
        if not self.key.exists():
            return True
        warn(f"An SSH key already exists at {self.key}")
        if not self.prompter.confirm("Overwrite it and generate a new one?", default=False):
            return False
        self.backup_existing()
        return True

    def backup_existing(self):
        ts = int(time.time())
        self.key.rename(self.key.with_name(f"{self.key.name}.bak.{ts}"))
        if self.pub.exists():
            self.pub.rename(self.pub.with_name(f"{self.pub.name}.bak.{ts}"))
        ok("Old key backed up")

    def generate(self, email, passphrase=None):
        self.key.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        info(f"Generating new SSH key (RSA, {KEY_BITS}-bit)...")
        # ssh-keygen has no non-interactive way to read -N from stdin, so the
        # passphrase is visible in the process table while this runs.
        r = run(["ssh-keygen", "-t", "rsa", "-b", str(KEY_BITS), "-C", email,
                 "-f", str(self.key), "-N", passphrase or ""])
        if r.returncode != 0 or not self.key.exists():
            raise KeyGenerationError(
                f"Failed to generate SSH key: {first_line(r.stderr) or 'no key file written'}"
            )
        self.key.chmod(0o600)
        ok(f"SSH key generated at {self.key}")

    def add_to_agent(self):
        """Load the key into ssh-agent, starting one for this process if needed."""
        if not os.environ.get("SSH_AUTH_SOCK"):
            info("Starting ssh-agent...")
            agent = parse_agent_env(run(["ssh-agent", "-s"]).stdout)
            if "SSH_AUTH_SOCK" not in agent:
                raise SshError("Could not start ssh-agent.")
            os.environ.update(agent)
            dim(f"Agent pid {agent.get('SSH_AGENT_PID', '?')}; new shells need their own agent.")

        r = run(["ssh-add", str(self.key)])
        if r.returncode != 0:
            raise SshError(
                "Failed to add SSH key to ssh-agent. Ensure the key exists and permissions "
                f"are correct. {first_line(r.stderr)}".strip()
            )
        ok("SSH key added to ssh-agent")

    def publish(self):
        """Public key to clipboard (or screen), then the GitHub page."""
        if not self.pub.exists():
            raise KeyGenerationError(f"Could not read public key file: {self.pub}")
        pub_text = self.pub.read_text().strip()

        tool = self.clipboard.copy(pub_text)
        if tool:
            ok(f"Public key copied to clipboard using {tool}")
        else:
            warn("Could not copy to clipboard automatically. Copy it from below:")
            show_block(pub_text)

        opened = self.opener.open(GITHUB_SSH_URL)
        github_action(
            "Your SSH public key" if tool else None,
            GITHUB_SSH_URL,
            opened,
            "  1. Click [bold]New SSH key[/]\n"
            "  2. [bold]Title[/]:    something like \"Work Laptop\"\n"
            "  3. [bold]Key type[/]: Authentication Key\n"
            "  4. [bold]Key[/]:      paste the key\n"
            "  5. Click [bold]Add SSH key[/]",
        )

    def test_connection(self):
        info("Testing SSH connection to GitHub (this may prompt for your passphrase)...")
        r = run(["ssh", "-T", GITHUB_SSH_HOST])
        output = (r.stderr + r.stdout).lower()
        if "successfully authenticated" in output:
            ok("SSH connection to GitHub successful!")
            return
        fail("Failed to establish SSH connection to GitHub.")
        if output.strip():
            dim_output(first_line(r.stderr or r.stdout))
        dim("For more detail run: ssh -vT git@github.com")
        raise SshError("GitHub did not accept the SSH key.")

    def run(self):
        banner("SSH Key Setup", "So GitHub knows your machine")

        phase(1, "Preflight")
        self.check_tools()
        email = default_email(self.config)
        show_settings([("Key path", str(self.key)), ("Comment", email)])
        if not self.confirm_replace():
            ok("Keeping existing SSH key.")
            return 0

        phase(2, "Generate")
        passphrase = collect_passphrase(self.prompter)
        self.generate(email, passphrase)

        phase(3, "ssh-agent")
        self.add_to_agent()

        phase(4, "GitHub", "Register the public key")
        self.publish()
        self.prompter.pause("Press Enter after you've added the SSH key on GitHub...")
        self.test_connection()

        done(
            "SSH Setup Complete",
            "Clone over SSH to try it:\n"
            "  [dim]git clone git@github.com:your-org/your-repo.git[/]",
        )
        return 0
