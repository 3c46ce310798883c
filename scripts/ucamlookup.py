#! /usr/bin/env python3
"""
Print University of Cambridge Lookup directory data for CRSIDs, a group, a set of
institution codes, or a search term; or just check that CRSIDs are well-formed.

Execute this script with the -h option to display the list of options.
"""
# ucamlookup [-h] [-c CONFFILE] [-u URL] [-g GROUP | -i | -s TERM [-m MODE] [-k] | -V [-L]] [ID ...]
import sys, os, logging, traceback as tb
from ucam.lookup import cli

prog = os.path.splitext(os.path.basename(sys.argv[0]))[0]

def report(msg):
    # after cli.main() has set up logging, the message goes wherever the log goes
    if logging.getLogger().handlers:
        logging.getLogger().error(msg)
    else:
        print(f"{prog}: {msg}", file=sys.stderr)

try:
    cli.main(prog, sys.argv[1:])

except cli.Failure as ex:
    report(str(ex))
    sys.exit(ex.exitcode)

except Exception as ex:
    # a bug rather than a lookup failure
    tb.print_exc()
    report(str(ex))
    sys.exit(1)
