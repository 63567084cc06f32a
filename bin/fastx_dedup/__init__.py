"""Exact-match deduplication of FASTA/FASTQ reads."""
import argparse
import glob
import importlib
import logging
import os

from .util import _log_level, get_main_logger  # noqa: ABS101


__version__ = "0.1.0"
_package_name = "fastx_dedup"


def get_components(allowed_components=None):
    """Find a list of workflow command scripts."""
    logger = get_main_logger(_package_name)
    path = os.path.dirname(os.path.abspath(__file__))
    components = dict()
    for fname in sorted(glob.glob(os.path.join(path, "*.py"))):
        name = os.path.splitext(os.path.basename(fname))[0]
        if name in ("__init__", "util"):
            continue
        if allowed_components is not None and name not in allowed_components:
            continue
        # leniently attempt to import module
        try:
            mod = importlib.import_module(f"{_package_name}.{name}")
        except ModuleNotFoundError as e:
            # if imports cannot be satisfied, refuse to add the component
            # rather than exploding
            logger.warning(f"Could not load {name} due to missing module {e.name}")
            continue

        # if theres a main() and and argparser() thats good enough for us.
        req = "main", "argparser"
        if all(callable(getattr(mod, x, None)) for x in req):
            components[name] = mod
    return components


def cli(argv=None):
    """Run workflow entry points."""
    logger = get_main_logger(_package_name)
    logger.info("Bootstrapping CLI.")
    parser = argparse.ArgumentParser(
        'fastx-dedup',
        parents=[_log_level()],
        formatter_class=argparse.ArgumentDefaultsHelpFormatter)

    parser.add_argument(
        '-v', '--version', action='version',
        version='%(prog)s {}'.format(__version__))

    subparsers = parser.add_subparsers(
        title='subcommands', description='valid commands',
        help='additional help', dest='command')
    subparsers.required = True

    components = get_components()
    for name, module in components.items():
        p = subparsers.add_parser(
            name, parents=[module.argparser()])
        p.set_defaults(func=module.main)

    args = parser.parse_args(argv)

    logging.getLogger(_package_name).setLevel(args.log_level)
    logger.info(f"Starting entrypoint: {args.command}.")
    args.func(args)
