"""Clipboard and browser launchers, tried in a fixed priority order."""

import subprocess

from .shell import cmd_exists, feed

# (binary, full command) in the order they're tried
CLIPBOARD_TOOLS = [
    ("pbcopy",  ["pbcopy"]),
    ("xclip",   ["xclip", "-selection", "clipboard"]),
    ("wl-copy", ["wl-copy"]),
]

URL_OPENERS = ["xdg-open", "open"]


class Clipboard:
    def __init__(self, tools=None):
        self.tools = CLIPBOARD_TOOLS if tools is None else tools

    def copy(self, text):
        """Copy `text` with the first tool that's installed.

        Returns the tool's name, or None if nothing could take it.
        """
        for name, cmd in self.tools:
            if not cmd_exists(name):
                continue
            if feed(cmd, text):
                return name
            return None
        return None


class UrlOpener:
    def __init__(self, openers=None):
        self.openers = URL_OPENERS if openers is None else openers

    def open(self, url):
        """Launch the default browser on `url`. Returns True if an opener ran.

        The opener is detached: xdg-open can block until the browser exits.
        """
        for name in self.openers:
            if not cmd_exists(name):
                continue
            try:
                subprocess.Popen(
                    [name, url],
                    stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
            except OSError:
                return False
            return True
        return False
