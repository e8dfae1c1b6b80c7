"""
Git Keys Setup: GPG signing keys, SSH keys and Git config from the terminal.

Commands:
  gpg-key-setup      generate a GPG key, retire older ones, sign commits with it
  ssh-key-setup      generate an SSH key and register it with GitHub
  git-config-setup   set global Git identity, editor and defaults
  sync-to-github     turn a local folder into a repo pushed to a remote
"""

__version__ = "0.1.0"
