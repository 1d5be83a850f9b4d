import os
import yaml
from marshmallow import Schema, fields, validate, pre_load, ValidationError, EXCLUDE
from progresspack.utils.logging import contextual_log
from progresspack.utils.rich_prompt import rich_error

"""
config.py

Handles option loading for progress indicators. Supports YAML, environment variables and
explicit keyword overrides, validated through a Marshmallow schema so every indicator receives
a complete, typed option set. Priority: explicit overrides > environment variables > YAML > defaults.
"""

DEFAULT_CONFIG_FILE = "progresspack.yaml"
ENV_PREFIX = "PROGRESSPACK_"
DEFAULT_SPINNER_FRAMES = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
FRAME_INTERVAL_MS = 80

# camelCase spellings accepted for compatibility with option dicts written for other prompt libraries
OPTION_ALIASES = {
    'barLength': 'bar_length',
    'showPercentage': 'show_percentage',
    'showValue': 'show_value',
    'showETA': 'show_eta',
    'showEta': 'show_eta',
    'completeChar': 'complete_char',
    'incompleteChar': 'incomplete_char',
    'spinnerFrames': 'spinner_frames',
    'spinner': 'spinner_frames',
    'workingLabel': 'working_label',
    'intervalMs': 'interval_ms',
}


def canonical_options(options=None):
    """
    Return a copy of an option mapping with camelCase aliases renamed to their snake_case names.
    An explicit snake_case key wins over its alias.
    """
    data = dict(options or {})
    for alias, name in OPTION_ALIASES.items():
        if alias in data:
            value = data.pop(alias)
            data.setdefault(name, value)
    return data


class NumberField(fields.Float):
    """
    Float field that keeps integers as integers so value fractions render as "3/5", not "3.0/5.0".
    """
    def _format_num(self, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return super()._format_num(value)


class ProgressOptionsSchema(Schema):
    """
    Marshmallow schema for progress indicator options.
    Normalizes strings, maps camelCase aliases to snake_case and fills in defaults.
    """
    class Meta:
        unknown = EXCLUDE

    message = fields.Str(load_default='')
    total = NumberField(allow_none=True, load_default=None)
    initial = NumberField(load_default=0, validate=validate.Range(min=0))
    bar_length = fields.Int(load_default=40, validate=validate.Range(min=1))
    show_percentage = fields.Bool(load_default=True)
    show_value = fields.Bool(load_default=False)
    show_eta = fields.Bool(load_default=True)
    complete_char = fields.Str(load_default='█', validate=validate.Length(min=1))
    incomplete_char = fields.Str(load_default='░', validate=validate.Length(min=1))
    spinner_frames = fields.List(fields.Str(), load_default=lambda: list(DEFAULT_SPINNER_FRAMES), validate=validate.Length(min=1))
    animate = fields.Bool(load_default=False)
    status = fields.Str(load_default='')
    header = fields.Str(load_default='')
    footer = fields.Str(load_default='')
    working_label = fields.Str(load_default='Processing...')
    interval_ms = fields.Int(load_default=FRAME_INTERVAL_MS, validate=validate.Range(min=1))

    @pre_load
    def normalize(self, data, **kwargs):
        data = canonical_options(data)
        for k, v in list(data.items()):
            if v is None and k != 'total':
                # None means "not configured"; let the default apply
                del data[k]
                continue
            if isinstance(v, str) and k not in ('complete_char', 'incomplete_char'):
                v = v.strip()
                if k == 'total' and v == '':
                    v = None
                data[k] = v
        frames = data.get('spinner_frames')
        if isinstance(frames, str):
            data['spinner_frames'] = [f.strip() for f in frames.split(',') if f.strip()]
        elif isinstance(frames, tuple):
            data['spinner_frames'] = list(frames)
        return data


OPTION_NAMES = tuple(ProgressOptionsSchema().fields)


def load_progress_options(options=None, schema=None):
    """
    Validate a raw option mapping.
    Fields that fail validation are logged and fall back to their defaults instead of raising.
    Args:
        options (dict, optional): Raw options (snake_case or camelCase keys).
        schema (ProgressOptionsSchema, optional): Schema instance to use.
    Returns:
        dict: Complete option set.
    """
    schema = schema or ProgressOptionsSchema()
    try:
        return schema.load(dict(options or {}))
    except ValidationError as err:
        contextual_log('warning', f"[Config] Invalid progress options ignored: {err.messages}", operation="load_options", status="invalid", params=err.messages)
        return schema.load(err.valid_data or {})


class ConfigLoader:
    """
    Loads progress options for the CLI and demos.
    - Loads from a YAML file ('progress' section) and PROGRESSPACK_* environment variables.
    - Priority: explicit override > environment variable > YAML config > default.
    """
    def __init__(self, config_path=None):
        """
        Initialize the ConfigLoader.
        Args:
            config_path (str, optional): Path to the YAML config file. Defaults to 'progresspack.yaml'.
        """
        self.config = {}
        if not config_path:
            config_path = DEFAULT_CONFIG_FILE
        self.config_path = config_path
        if os.path.exists(config_path):
            with open(config_path, 'r') as file:
                self.config = yaml.safe_load(file) or {}

    def get(self, key, default=None):
        """
        Retrieve a config value by key, checking environment variables first, then YAML, then default.
        """
        env_key = f"{ENV_PREFIX}{key.upper()}"
        if env_key in os.environ:
            return os.environ[env_key]
        section = self.config.get('progress') or {}
        if key in section:
            return section[key]
        if key in self.config:
            return self.config[key]
        return default

    def get_progress_options(self, defaults=None, **overrides):
        """
        Compose and validate indicator options.
        Priority: overrides > PROGRESSPACK_* environment > YAML 'progress' section > defaults > schema defaults.
        Args:
            defaults (dict, optional): Caller defaults (e.g. a demo's own total and message).
            **overrides: Explicit option values; None values are ignored.
        Returns:
            dict: Validated options.
        """
        options = canonical_options(defaults)
        options.update(canonical_options(self.config.get('progress')))
        for name in OPTION_NAMES:
            env_key = f"{ENV_PREFIX}{name.upper()}"
            if env_key in os.environ:
                options[name] = os.environ[env_key]
        options.update(canonical_options({k: v for k, v in overrides.items() if v is not None}))
        schema = ProgressOptionsSchema()
        try:
            return schema.load(options)
        except ValidationError as err:
            rich_error(f"Progress config validation error: {err.messages}", "Invalid values fall back to their defaults.")
            contextual_log('warning', f"[Config] Progress config validation error: {err.messages}", operation="get_progress_options", status="invalid", params=err.messages)
            return schema.load(err.valid_data or {})
