"""Ranked summaries of raw and retained memory usage"""
import sys
from reap.heapobject import Stats

KIND_REPORT_SIZE = 10
RETAINED_REPORT_SIZE = 25
REST_LABEL = '...'


def stats_by_kind(graph):
    """Sum the own Stats of every object in graph by kind"""
    by_kind = {}
    for obj in graph:
        by_kind[obj.kind] = by_kind.get(obj.kind, Stats()) + obj.stats()
    return by_kind


def largest(table, count):
    """Split table into its count largest entries (by bytes) and the rest

    returns [(key, Stats), ...], Stats of everything else
    """
    ordered = sorted(table.items(), key=lambda item: item[1].bytes, reverse=True)
    rest = sum([stats for _, stats in ordered[count:]], Stats())
    return ordered[:count], rest


def format_row(key, stats):
    return '%s: %s bytes (%s objects)' % (key, stats.bytes, stats.count)


def print_largest(table, count, stream=None):
    """Write the count largest table entries plus a summary of the remainder"""
    stream = stream or sys.stdout
    rows, rest = largest(table, count)
    for key, stats in rows:
        stream.write(format_row(key, stats) + '\n')
    stream.write(format_row(REST_LABEL, rest) + '\n')
