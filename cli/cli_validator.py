import argparse
import logging
import sys

from colorama import Fore, Style

from core.exceptions import ConfigurationError
from waterfall.settings import DEFAULT_SETTINGS_PATH, load_settings

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    logging.basicConfig(level=log_level, format=log_format)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("jsonschema").setLevel(logging.WARNING)


def report_configuration_error(error: ConfigurationError) -> None:
    print(f"{Fore.RED}❌ Configuration error: {error}{Style.RESET_ALL}", file=sys.stderr)
    if isinstance(error.details, list) and len(error.details) > 1:
        for detail in error.details:
            print(f"  - {detail}", file=sys.stderr)
    elif error.details:
        print(f"Details:\n{error.details}", file=sys.stderr)


def handle_validate_settings(args: argparse.Namespace) -> int:
    """
    Handles the 'validate-settings' command: load and check an SVG settings file.
    """
    setup_logging(args.verbose)
    path = args.path or str(DEFAULT_SETTINGS_PATH)

    try:
        settings = load_settings({"svgSettings": path})
    except ConfigurationError as e:
        report_configuration_error(e)
        return 1

    print(f"{Fore.GREEN}✅ SVG settings are valid: {path}{Style.RESET_ALL}")
    print(f"   width={settings.width} resourceHeight={settings.resource_height} "
          f"barPadding={settings.bar_padding} colours={', '.join(c.name for c in settings.colours)}")
    return 0
