"""
a command-line interface to the Lookup directory client.  The :py:func:`main` function
provides the implementation
"""
import sys, json, logging
from argparse import ArgumentParser

import yaml

from ucam.base import config
from ucam.base.config import ConfigurationException
from . import system
from .crsid import valid_crsid
from .client import LookupClient, lookup_config
from .search import MODES, PLAIN_MODE

class Failure(Exception):
    """
    an exception indicating that the command failed and should exit with a given code
    """
    def __init__(self, message, exitcode=1, cause=None):
        super(Failure, self).__init__(message)
        self.exitcode = exitcode
        self.cause = cause

def define_options(progname):
    """
    return an ArgumentParser instance that is configured with options
    for the command-line interface.
    """
    description = "Look up people and institutions in the University of Cambridge Lookup " \
                  "directory.  By default, the given CRSIDs are looked up and their " \
                  "directory records are printed."
    epilog = None

    parser = ArgumentParser(progname, None, description, epilog)

    parser.add_argument('-g', '--group', type=str, dest='group', metavar='ID',
                        help="list the members of the group (institution) with the given ID")
    parser.add_argument('-i', '--institutions', action='store_true', dest='insts',
                        help="treat the arguments as institution codes and print their names")
    parser.add_argument('-s', '--search', type=str, dest='search', metavar='TERM',
                        help="search for people matching TERM, as an autocomplete widget would")
    parser.add_argument('-m', '--mode', type=str, dest='mode', metavar='MODE', default=PLAIN_MODE,
                        choices=MODES,
                        help="the shape of the search results, one of "+", ".join(MODES))
    parser.add_argument('-k', '--keyed', action='store_true', dest='keyed',
                        help="return search results as an object keyed by CRSID")
    parser.add_argument('-V', '--validate', action='store_true', dest='validate',
                        help="only check the syntax of the given CRSIDs (no lookup is done)")
    parser.add_argument('-L', '--lowercase', action='store_true', dest='lowercase',
                        help="with -V, require CRSIDs to be all lower-case")
    parser.add_argument('-f', '--format', type=str, dest='format', metavar='FMT', default='json',
                        choices=['json', 'yaml'], help="the output format: json or yaml")
    parser.add_argument('-c', '--config-file', type=str, dest='cfgfile', metavar='FILE',
                        help="a file containing the client configuration to use")
    parser.add_argument('-u', '--service-url', type=str, dest='svcurl', metavar='URL',
                        help="the base URL of the Lookup service; this overrides the "+
                             "'service_endpoint' config property")
    parser.add_argument('-l', '--logfile', action='store', dest='logfile', type=str, metavar='FILE',
                        help="write messages that normally go to standard error to FILE as well.  "+
                             "If -q is also specified, the messages will only go to the logfile")
    parser.add_argument('-v', '--verbose', action='store_true', dest='verbose',
                        help="print more (debug) messages to standard error and/or the log file")
    parser.add_argument('-q', '--quiet', action='store_true', dest='quiet',
                        help="suppress all error and warning messages to standard error")
    parser.add_argument('--version', action='version', version=f"%(prog)s {system.system_version}")
    parser.add_argument('ids', metavar='ID', type=str, nargs='*', default=[],
                        help="CRSIDs (or institution codes with -i) to look up")
    return parser

def main(progname, args, ostrm=None):
    """
    carry out the requested lookup and print the results
    """
    if ostrm is None:
        ostrm = sys.stdout
    parser = define_options(progname)
    opts = parser.parse_args(args)

    rootlog = logging.getLogger()
    level = (opts.verbose and logging.DEBUG) or logging.INFO
    if opts.logfile:
        # write messages to a log file
        try:
            config.configure_log(opts.logfile, level,
                                 "%(asctime)s " + progname + ".%(name)s %(levelname)s: %(message)s")
        except OSError as ex:
            raise Failure("problem opening log file, {0}: {1}".format(opts.logfile, ex.strerror))

    # configure a default log handler
    if not opts.quiet:
        fmt = progname + ": %(levelname)s: %(message)s"
        hdlr = logging.StreamHandler(sys.stderr)
        hdlr.setFormatter(logging.Formatter(fmt))
        hdlr.setLevel(logging.DEBUG)
        rootlog.addHandler(hdlr)
        rootlog.setLevel(level)
    elif not rootlog.handlers:
        rootlog.addHandler(logging.NullHandler())

    if opts.validate:
        if not opts.ids:
            raise Failure("No CRSIDs given to validate", 2)
        result = dict((c, valid_crsid(c, opts.lowercase)) for c in opts.ids)
        write_result(result, ostrm, opts.format)
        if not all(result.values()):
            raise Failure("Invalid CRSID(s): "+" ".join(c for c in result if not result[c]), 4)
        return

    # look for a provided configuration file
    cfg = {}
    if opts.cfgfile:
        try:
            cfg = read_config(opts.cfgfile)
        except EnvironmentError as ex:
            raise Failure("problem reading config file, {0}: {1}"
                          .format(opts.cfgfile, ex.strerror)) from ex
    try:
        cli = LookupClient(opts.svcurl, lookup_config(cfg))
    except ConfigurationException as ex:
        raise Failure("Configuration error: "+str(ex), 3) from ex

    if opts.search:
        result = cli.search(opts.search, opts.mode, opts.keyed)
    elif opts.group:
        result = to_jsonable(cli.get_group_members(opts.group))
    elif opts.insts:
        if not opts.ids:
            raise Failure("No institution codes given", 2)
        result = cli.get_institutions(opts.ids)
    elif opts.ids:
        if len(opts.ids) == 1:
            result = to_jsonable(cli.get_lookup_data(opts.ids[0]))
        else:
            result = to_jsonable(cli.get_lookup_data(opts.ids))
    else:
        raise Failure("Nothing to look up; give CRSIDs or one of -g, -i, -s", 2)

    write_result(result, ostrm, opts.format)

def to_jsonable(result):
    """
    convert a lookup result--a UserRecord, a dictionary of them, or None--into
    plain dictionaries
    """
    if result is None:
        return None
    if hasattr(result, '_asdict'):
        return result._asdict()
    return dict((k, to_jsonable(v)) for k, v in result.items())

def write_result(result, ostrm, format='json'):
    if format == 'yaml':
        yaml.safe_dump(result, ostrm, default_flow_style=False, sort_keys=False)
    else:
        json.dump(result, ostrm, indent=2)
        ostrm.write("\n")

def read_config(filepath):
    """
    read the configuration from a file having the given filepath

    :except Failure:  if the contents contains syntax or format errors
    :except IOError:  if a failure occurs while opening or reading the file
    """
    try:
        return config.load_from_file(filepath)
    except (ValueError, yaml.YAMLError) as ex:
        raise Failure("Config parsing error: "+str(ex), 3, ex)
