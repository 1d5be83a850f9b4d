"""
progresspack CLI.

Runs the bundled progress demos:
- Interactive menu when no demo is given on the command line
- Options from progresspack.yaml / PROGRESSPACK_* environment variables / .env
- Structured JSON logging to a rotating file (see cli_logging_setup)
- Ctrl-C cancels the running indicator and exits with status 130
"""
import argparse
import sys
from dotenv import load_dotenv
from progresspack.config import ConfigLoader
from progresspack.cli_logging_setup import configure_logging
from progresspack.demos import DEMO_MANIFEST, DEMOS
from progresspack.utils.logging import contextual_log
from progresspack.utils.message_utils import info, success
from progresspack.utils.prompt_utils import prompt_select

EXIT_CHOICE = "exit"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="progresspack", description="Terminal progress bars and spinners.")
    parser.add_argument("demo", nargs="?", choices=sorted(DEMOS), help="Demo to run (prompted for when omitted).")
    parser.add_argument("--config", help="Path to a YAML config file (default: progresspack.yaml).")
    parser.add_argument("--log-level", help="Log level (default: PROGRESSPACK_LOG_LEVEL or INFO).")
    parser.add_argument("--log-file", help="Log file path (default: PROGRESSPACK_LOG_FILE or progresspack.log).")
    parser.add_argument("--list", action="store_true", help="List available demos and exit.")
    return parser


def select_demo() -> str:
    choices = [{"name": f"{demo['emoji']} {demo['label']}", "value": demo["key"]} for demo in DEMO_MANIFEST]
    choices.append({"name": "❌ Exit", "value": EXIT_CHOICE})
    return prompt_select("Select a demo to run:", choices=choices)


def main(argv=None) -> int:
    """
    Entrypoint for the progresspack command. Returns the process exit status.
    """
    load_dotenv()
    args = build_parser().parse_args(argv)
    config = ConfigLoader(args.config)
    configure_logging(level=args.log_level or config.get('log_level'), log_file=args.log_file)
    contextual_log('info', "[CLI] Started.", operation="cli_start", params={"demo": args.demo, "config": config.config_path})

    if args.list:
        for demo in DEMO_MANIFEST:
            info(f"{demo['key']:<8} {demo['label']} - {demo['description']}")
        return 0

    demo_key = args.demo or select_demo()
    if not demo_key or demo_key == EXIT_CHOICE:
        contextual_log('info', "[CLI] User exited from demo menu.", operation="cli_end", status="exit")
        return 0

    try:
        result = DEMOS[demo_key]["handler"](config=config)
    except KeyboardInterrupt:
        contextual_log('warning', f"[CLI] Demo '{demo_key}' interrupted.", operation="cli_end", status="interrupted", demo=demo_key)
        return 130
    success(f"Finished '{demo_key}' with value {result}.", demo=demo_key)
    return 0


if __name__ == "__main__":
    sys.exit(main())
