#! /usr/bin/env python
"""Command-line report of what is consuming memory in a Ruby heap dump"""
import argparse, logging, sys
from gettext import gettext as _
from reap import __version__
from reap import heaploader, dominators, relevance, reports, dotwriter
from reap.records import MalformedRecord

log = logging.getLogger(__name__)


def threshold_type(text):
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(_('%r is not a number') % (text,))
    if value < 0:
        raise argparse.ArgumentTypeError(_('threshold must not be negative'))
    return value


def get_options():
    parser = argparse.ArgumentParser(
        prog='reap',
        description=_('A tool for parsing Ruby heap dumps.'),
    )
    parser.add_argument(
        'input', metavar='INPUT',
        help=_('Path to JSON heap dump file'),
    )
    parser.add_argument(
        '-d', '--dot', metavar='DOT', default=None,
        help=_('Dot file output'),
    )
    parser.add_argument(
        '-t', '--threshold', metavar='THRESHOLD', type=threshold_type,
        default=relevance.DEFAULT_RELEVANCE_THRESHOLD,
        help=_(
            'Include nodes retaining at least this fraction of memory '
            'in dot output (defaults to %s)'
        ) % (relevance.DEFAULT_RELEVANCE_THRESHOLD,),
    )
    parser.add_argument(
        '-v', '--verbose', action='store_true', default=False,
        help=_('Log progress and diagnostics'),
    )
    parser.add_argument('--version', action='version', version='%(prog)s ' + __version__)
    return parser


def report(options, stream):
    graph = heaploader.load(options.input)

    stream.write(_('Object types using the most memory:') + '\n')
    reports.print_largest(
        reports.stats_by_kind(graph), reports.KIND_REPORT_SIZE, stream=stream,
    )

    retained = dominators.retained_stats(graph)
    stream.write('\n' + _('Objects retaining the most memory:') + '\n')
    reports.print_largest(retained, reports.RETAINED_REPORT_SIZE, stream=stream)

    if options.dot:
        subgraph = relevance.relevant_subgraph(graph, retained, options.threshold)
        dotwriter.write_dot(subgraph, options.dot)


def main(argv=None, stream=None):
    """Run the report, returns the process exit code"""
    options = get_options().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if options.verbose else logging.WARNING)
    try:
        report(options, stream or sys.stdout)
    except MalformedRecord as err:
        log.error('Malformed heap dump record: %s', ' '.join([str(arg) for arg in err.args]))
        return 1
    except OSError as err:
        log.error('%s', err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
