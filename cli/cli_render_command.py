import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from colorama import Fore, Style
from tabulate import tabulate

from cli.cli_validator import report_configuration_error, setup_logging
from core.exceptions import ConfigurationError, GeometryError
from waterfall.assembler import RenderModel
from waterfall.mapper import initialise
from waterfall.resources import TIMING_NAMES

logger = logging.getLogger(__name__)


def format_table(model: RenderModel) -> str:
    headers = ["Resource", "Type", "Start", "Duration", *TIMING_NAMES]
    rows: List[list] = []
    for resource in model.details:
        rows.append([
            resource.name,
            resource.type,
            resource.start,
            resource.duration,
            *[timing.duration for timing in resource.timings],
        ])
    return tabulate(rows, headers=headers, tablefmt="github")


def handle_render_command(args: argparse.Namespace) -> int:
    """
    Handles the 'render' command: map one beacon file into a waterfall offline.
    """
    setup_logging(args.verbose)

    try:
        mapper = initialise({"svgSettings": args.svg_settings, "svgTemplate": args.svg_template})
    except ConfigurationError as e:
        report_configuration_error(e)
        return 1

    try:
        with open(args.beacon, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"{Fore.RED}❌ Could not read beacon {args.beacon}: {e}{Style.RESET_ALL}", file=sys.stderr)
        return 1

    try:
        model = mapper.model(data, args.referer)
    except GeometryError as e:
        print(f"{Fore.RED}❌ Cannot draw waterfall: {e}{Style.RESET_ALL}", file=sys.stderr)
        return 1

    if model is None:
        print(f"{Fore.YELLOW}⚠️  Beacon carries no resource timing data{Style.RESET_ALL}", file=sys.stderr)
        return 0

    if args.format == "json":
        output = json.dumps(model.to_dict(), indent=2)
    elif args.format == "table":
        output = format_table(model)
    else:
        output = mapper.render(model)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"{Fore.GREEN}✅ Waterfall for {len(model.details)} resources written to {args.output}{Style.RESET_ALL}")
    else:
        print(output)

    return 0
