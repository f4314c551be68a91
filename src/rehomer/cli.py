"""rehome - command line front end for the converter.

Usage:
    rehome convert <models...> --source-root <dir> --target-root <dir> [--target-path <path>]
                               [--script <file>]... [--probe <options>] [--config <file>]
    rehome probe <models...> [--source-root <dir>] [--options <options>]
    rehome init-config <file> [same flags as convert]

Output formats (before the command):
    --format table    (default, human-readable)
    --format json     (machine-readable)
    --format yaml

Example:
    rehome convert --source-root downloads/CoolModel --target-root assets \\
        --target-path Models/CoolModel downloads/CoolModel/thing.gltf

  converts thing.gltf into assets/Models/CoolModel/thing.gltf.scene and
  copies every texture and material it uses from under downloads/CoolModel
  to the matching place under assets/Models/CoolModel.
"""

import argparse
import json
import logging
import sys
from typing import List

from .core import ALL_PROBE_OPTIONS, Convert, ConvertConfig, ConversionReport, get_version
from .errors import ConversionError

logger = logging.getLogger("rehomer")

PROBE_HELP = (
    "probe options: A all (same as " + ALL_PROBE_OPTIONS + "), b bounds, "
    "t translations, r rotations, s scales, p material parameters, "
    "u user data, d dependencies, i texture image info"
)


def configure_logging(args) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def format_reports(reports: List[ConversionReport], fmt: str) -> str:
    if fmt == "json":
        return json.dumps([r.to_dict() for r in reports], indent=2)
    if fmt == "yaml":
        return "\n".join(f"---\n{r.to_yaml()}" for r in reports)
    return "\n\n".join(r.to_table() for r in reports)


def config_from_args(args) -> ConvertConfig:
    """Config file values (if any) overridden by explicit flags."""
    config = ConvertConfig.load(args.config) if getattr(args, "config", None) else ConvertConfig()
    return config.merged(
        source_root=args.source_root,
        target_root=getattr(args, "target_root", None),
        target_path=getattr(args, "target_path", None),
        scripts=getattr(args, "script", None) or None,
        probe=getattr(args, "probe", None),
    )


def run_models(convert: Convert, models: List[str]) -> List[ConversionReport]:
    reports = []
    for model in models:
        info = convert.convert(model)
        reports.append(info.report())
    return reports


def cmd_convert(args):
    """Convert models into the target tree."""
    config = config_from_args(args)
    if config.target_root is None:
        logger.warning("No target root given, models will only be probed.")
    convert = Convert.from_config(config)
    print(format_reports(run_models(convert, args.models), args.format))


def cmd_probe(args):
    """Load models and log their structure without writing anything."""
    config = ConvertConfig(source_root=args.source_root)
    convert = Convert.from_config(config)
    convert.set_probe_options(args.options)
    print(format_reports(run_models(convert, args.models), args.format))


def cmd_init_config(args):
    """Write a config file from the given flags."""
    config = config_from_args(args)
    config.save(args.file)
    print(f"Wrote {args.file}")


def add_conversion_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", help="JSON config file; flags override its values")
    p.add_argument("--source-root", help="Asset root of the models. Dependency paths are relative to it.")
    p.add_argument("--target-root", help="Asset root to write converted models and dependencies into")
    p.add_argument("--target-path", help="Path inside the target root for the converted assets. "
                                          "All asset keys are rehomed under it.")
    p.add_argument("--script", action="append", default=[],
                   help="Python script run against each model before writing (repeatable, run in order)")
    p.add_argument("--probe", help=PROBE_HELP)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="rehome",
        description="Convert 3D models and rehome their asset dependencies into a new asset tree.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Version {get_version()}",
    )
    parser.add_argument("--format", choices=["table", "json", "yaml"],
                        default="table", help="Output format (default: table)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    # convert
    p = sub.add_parser("convert", help="Convert models and copy their dependencies")
    p.add_argument("models", nargs="+", help="Model files (.gltf, .glb, .scene)")
    add_conversion_flags(p)

    # probe
    p = sub.add_parser("probe", help="Log model structure without writing")
    p.add_argument("models", nargs="+", help="Model files")
    p.add_argument("--source-root", help="Asset root of the models")
    p.add_argument("--options", default="d", help=PROBE_HELP + " (default: d)")

    # init-config
    p = sub.add_parser("init-config", help="Write a JSON config file")
    p.add_argument("file", help="Config file to write")
    add_conversion_flags(p)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args)

    commands = {
        "convert": cmd_convert,
        "probe": cmd_probe,
        "init-config": cmd_init_config,
    }

    try:
        commands[args.command](args)
    except ConversionError as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
