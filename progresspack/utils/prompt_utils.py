"""
Prompt utilities for the progresspack CLI.
Handles menu selection prompts.
"""
import questionary
from questionary import Choice, Style as QStyle
from progresspack.utils.rich_prompt import rich_panel

DEFAULT_PROMPT_STYLE = QStyle([
    ("selected", "fg:#22bb22 bold"),
    ("pointer", "fg:#ffcc00 bold"),
    ("question", "fg:#00aaee bold"),
    ("answer", "fg:#ffaa00 bold"),
    ("highlighted", "fg:#ffcc00 bold"),
])

def prompt_select(message, choices, **kwargs):
    style = kwargs.pop('style', DEFAULT_PROMPT_STYLE)
    if choices and isinstance(choices[0], dict) and 'name' in choices[0] and 'value' in choices[0]:
        choices = [Choice(title=c['name'], value=c['value']) for c in choices]
    rich_panel(message, style="prompt")
    picked = questionary.select(message, choices=choices, style=style, **kwargs).ask()
    if isinstance(picked, Choice):
        picked = picked.value
    return picked
