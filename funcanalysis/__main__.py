r"""@package funcanalysis.__main__

Command line interface.

Runs one operation and prints the JSON payload, e.g.

    python -m funcanalysis analyze "x^3-3*x" --mode 3 --iterations 50
    python -m funcanalysis differentiate "sin(x)*y" --variable y --reverse
    python -m funcanalysis plot "1/x" -1 1 --resolution 100
    python -m funcanalysis benchmark "exp(-x^2)" --iterations 10000

The exit status is 0 if the operation succeeded and 1 otherwise.
"""

import argparse
import json
import logging
import sys

from . import api
from .config import Settings
from .utils import timethis


logger = logging.getLogger(__name__)


def _parser():
    parser = argparse.ArgumentParser(prog='funcanalysis', description=__doc__.split('\n')[2])
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help="increase logging verbosity (-v: info, -vv: debug)")
    parser.add_argument('-c', '--config', action='append', default=[],
                        help="configuration file (may be given multiple times)")
    parser.add_argument('--indent', type=int, default=None,
                        help="pretty print the JSON output")
    sub = parser.add_subparsers(dest='operation')
    sub.required = True

    p = sub.add_parser('analyze', help="evaluate, simplify, classify or find critical points")
    p.add_argument('expression')
    p.add_argument('--mode', type=int, default=0)
    p.add_argument('--iterations', type=int, default=100)

    p = sub.add_parser('differentiate', help="symbolic derivative and its value")
    p.add_argument('expression')
    p.add_argument('--variable', default='x')
    p.add_argument('--reverse', action='store_true',
                   help="use reverse mode instead of forward mode")
    p.add_argument('--point', type=float, default=None)

    p = sub.add_parser('plot', help="sample on a uniform grid")
    p.add_argument('expression')
    p.add_argument('x_min', type=float)
    p.add_argument('x_max', type=float)
    p.add_argument('--resolution', type=int, default=200)
    p.add_argument('--derivative', action='store_true')

    p = sub.add_parser('benchmark', help="time repeated evaluation")
    p.add_argument('expression')
    p.add_argument('--iterations', type=int, default=1000)
    return parser


def main(argv=None):
    args = _parser().parse_args(argv)
    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    settings = Settings.from_config(*args.config)
    logger.info("Settings: %r", settings)
    with timethis(args.operation, log=logger, level=logging.INFO):
        if args.operation == 'analyze':
            payload = api.analyze(args.expression, args.iterations, args.mode,
                                  settings=settings)
        elif args.operation == 'differentiate':
            payload = api.differentiate(args.expression, args.variable,
                                        not args.reverse, args.point,
                                        settings=settings)
        elif args.operation == 'plot':
            payload = api.plot(args.expression, args.x_min, args.x_max,
                               args.resolution, args.derivative,
                               settings=settings)
        else:
            payload = api.benchmark(args.expression, args.iterations,
                                    settings=settings)
    if args.indent is not None:
        payload = json.dumps(json.loads(payload), indent=args.indent)
    print(payload)
    return 0 if json.loads(payload)['ok'] else 1


if __name__ == '__main__':
    sys.exit(main())
