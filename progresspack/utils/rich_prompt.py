from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme
from rich import box

# Shared palette for messages and the progress prompt
PROGRESS_THEME = Theme({
    "info": "bold yellow3",
    "warning": "bold magenta",
    "error": "bold red",
    "success": "bold green3",
    "prompt": "bold cyan",
    "banner": "bold green_yellow",
    "primary": "cyan",
    "muted": "grey50",
    "submitted": "bold green3",
    "cancelled": "bold red",
})

console = Console(theme=PROGRESS_THEME)

ICON = "⏳"


def rich_info(message):
    console.print(f"{ICON} [info]{message}[/info]")

def rich_error(message, suggestion=None):
    """
    Print an error panel with an optional suggestion/example.
    """
    error_text = f"{ICON} {message}"
    if suggestion:
        error_text += f"\nHint: {suggestion}"
    console.print(Panel(Text(error_text, style="bold red"), title="[bold red]Error![/]", border_style="red"))

def rich_success(message):
    console.print(f"{ICON} [success]{message}[/success]")

def rich_panel(message, title=None, style="banner"):
    console.print(Panel(message, title=title, style=style, box=box.ROUNDED))
