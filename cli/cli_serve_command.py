import argparse
import logging

import uvicorn
from colorama import Fore, Style

from cli.cli_validator import report_configuration_error, setup_logging
from core.config import load_config, load_config_file
from core.exceptions import ConfigurationError
from core.server_factory import create_server
from forwarders.registry import get_forwarder
from waterfall.mapper import initialise

logger = logging.getLogger(__name__)


def handle_serve_command(args: argparse.Namespace) -> int:
    """
    Handles the 'serve' CLI command by starting the beacon receiver.
    """
    setup_logging(args.verbose)
    overrides = {
        "host": args.host,
        "port": args.port,
        "svgSettings": args.svg_settings,
        "svgTemplate": args.svg_template,
    }

    # Settings problems must stop the receiver before it accepts any beacon
    try:
        if args.config:
            config = load_config_file(args.config, **overrides)
        else:
            config = load_config(**overrides)
        mapper = initialise(config.mapper_options())
        forwarder = get_forwarder(config.forwarder)
    except ConfigurationError as e:
        report_configuration_error(e)
        return 1

    if not args.verbose:
        logging.getLogger().setLevel(config.log_level)

    app = create_server(config, mapper, forwarder)

    print(f"{Fore.GREEN}🚀 Beacon receiver running at http://{config.host}:{config.port}{config.path}")
    print(f"Forwarding waterfalls to '{config.forwarder}'{Style.RESET_ALL}")

    uvicorn.run(app, host=config.host, port=config.port, log_level="debug" if args.verbose else "warning")
    return 0
