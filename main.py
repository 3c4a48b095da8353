import argparse
import sys
import os

import colorama

# Patch sys.path for local imports
ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from cli.cli_render_command import handle_render_command
from cli.cli_serve_command import handle_serve_command
from cli.cli_validator import handle_validate_settings


# --- CLI Setup ---
def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="📈 beaconcatch: Resource Timing beacon receiver and waterfall renderer",
        epilog="""Examples:
  beaconcatch serve --config pipeline.yaml
  beaconcatch render beacon.json --referer https://example.com/ --output waterfall.html
  beaconcatch render beacon.json --format table
  beaconcatch validate-settings my-settings.json""",
        formatter_class=argparse.RawTextHelpFormatter
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="Available Commands",
        metavar="{serve, render, validate-settings}"
    )

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the beacon receiver")
    serve_parser.add_argument("--config", type=str, help="Pipeline YAML config file")
    serve_parser.add_argument("--host", type=str)
    serve_parser.add_argument("--port", type=int)
    serve_parser.add_argument("--svg-settings", type=str, help="SVG settings JSON file")
    serve_parser.add_argument("--svg-template", type=str, help="Waterfall template file")
    serve_parser.add_argument("-v", "--verbose", action="store_true")
    serve_parser.set_defaults(func=handle_serve_command)

    # render
    render_parser = subparsers.add_parser("render", help="Render the waterfall for a beacon JSON file")
    render_parser.add_argument("beacon", type=str, help="Beacon JSON file with a 'restiming' list")
    render_parser.add_argument("--referer", type=str, default="", help="Page the beacon was sent from")
    render_parser.add_argument("--format", choices=["html", "json", "table"], default="html")
    render_parser.add_argument("--output", "-o", type=str)
    render_parser.add_argument("--svg-settings", type=str)
    render_parser.add_argument("--svg-template", type=str)
    render_parser.add_argument("-v", "--verbose", action="store_true")
    render_parser.set_defaults(func=handle_render_command)

    # validate-settings
    validate_parser = subparsers.add_parser("validate-settings", help="Validate an SVG settings file")
    validate_parser.add_argument("path", type=str, nargs="?", help="Settings JSON (defaults to the bundled one)")
    validate_parser.add_argument("-v", "--verbose", action="store_true")
    validate_parser.set_defaults(func=handle_validate_settings)

    return parser


def main():
    colorama.init()
    parser = create_parser()
    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
