"""Terminal output and prompts (rich)."""

import sys

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.padding import Padding
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from .errors import ValidationError

console = Console()


# ─── Output Helpers ──────────────────────────────────────────────────────────
def banner(title, subtitle=""):
    text = f"[bold bright_cyan]{title}[/]"
    if subtitle:
        text += f"\n[white]{subtitle}[/]"
    console.print(Panel(text, box=box.DOUBLE, border_style="bright_blue", padding=(0, 2)))


def phase(num, title, subtitle=""):
    text = f"[bold cyan]STEP {num}[/]  [bold white]{title}[/]"
    if subtitle:
        text += f"\n[dim]{subtitle}[/]"
    console.print()
    console.print(Panel(text, box=box.ROUNDED, border_style="cyan", padding=(0, 2)))


def ok(msg):
    console.print(f"  [green]✓[/] {msg}")


def info(msg):
    console.print(f"  [cyan]›[/] {msg}")


def warn(msg):
    console.print(f"  [yellow]![/] {msg}")


def fail(msg):
    console.print(f"  [red]✗[/] {msg}")


def dim(msg):
    console.print(f"  [dim]{msg}[/]")


def dim_output(text):
    """Dim a line of tool output, which may contain brackets rich would parse."""
    dim(escape(text))


def show_block(text):
    """Print multi-line tool output (a public key, a listing) verbatim."""
    console.print()
    console.print(text, markup=False, highlight=False)
    console.print()


def show_settings(rows):
    """Render (key, value) pairs as a borderless two-column table."""
    table = Table(box=box.SIMPLE, padding=(0, 2), show_header=False)
    table.add_column(style="dim")
    table.add_column(style="white")
    for key, value in rows:
        table.add_row(escape(str(key)), escape(str(value)))
    console.print(Padding(table, (0, 4)))


def github_action(copied_what, url, opened, steps_text):
    """Show a panel telling the user what to do on GitHub.

    `copied_what` is None when nothing reached the clipboard, `opened` is
    False when no browser could be launched and the URL must be visited by hand.
    """
    if copied_what:
        head = f"[bold green]Copied to clipboard:[/] {copied_what}\n\n"
    else:
        head = "[bold yellow]Clipboard unavailable:[/] copy the key printed above\n\n"
    if opened:
        head += f"[bold]Opened in your browser:[/]  {url}\n\n"
    else:
        head += f"[bold]Open this page manually:[/]  {url}\n\n"

    console.print()
    console.print(Panel(
        head + steps_text,
        title="[bold yellow] Action Required: GitHub [/]",
        border_style="yellow",
        box=box.HEAVY,
        padding=(1, 2),
    ))


def done(title, body):
    console.print()
    console.print(Panel(
        body,
        title=f"[bold green] {title} [/]",
        border_style="green",
        box=box.DOUBLE,
        padding=(1, 2),
    ))
    console.print()


# ─── Prompts ─────────────────────────────────────────────────────────────────
class Prompter:
    """Interactive questions. Swapped for a scripted fake in tests."""

    def confirm(self, prompt, default=False):
        return Confirm.ask(f"  [bold]{prompt}[/]", default=default)

    def ask(self, prompt, default=None):
        answer = Prompt.ask(f"  [bold]{prompt}[/]", default=default)
        return (answer or "").strip()

    def secret(self, prompt):
        return Prompt.ask(f"  [bold]{prompt}[/]", password=True)

    def pause(self, msg="Press Enter to continue..."):
        console.print()
        Prompt.ask(f"  [dim]{msg}[/]", default="")


def collect_passphrase(prompter, what="key"):
    """Ask whether to protect the new key and, if so, read the passphrase twice.

    Returns None for an unprotected key. Raises ValidationError when the two
    entries differ.
    """
    if not prompter.confirm(f"Protect the new {what} with a passphrase? (recommended)", default=True):
        dim(f"Generating the {what} without a passphrase.")
        return None
    first = prompter.secret("Passphrase")
    second = prompter.secret("Confirm passphrase")
    if first != second:
        raise ValidationError("Passphrases do not match. Aborting key generation.")
    if not first:
        dim(f"Empty passphrase: generating the {what} without one.")
        return None
    return first


def reattach_tty():
    """Reopen stdin from the terminal when the script itself arrived on stdin.

    Covers `curl ... | python3 -m git_keys_setup.cli`, where stdin is
    exhausted before the first prompt runs.
    """
    if sys.stdin.isatty():
        return
    try:
        sys.stdin = open("/dev/tty", "r")
    except OSError:
        pass  # no controlling terminal (CI, pytest)
