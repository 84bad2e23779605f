#+
# Command-line entry point: explodes a .blend file into a ZIP or tar archive.
#
# This program is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License as published by the Free Software
# Foundation, either version 3 of the License, or (at your option) any later version.
#
# This program is distributed in the hope that it will be useful, but WITHOUT ANY
# WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS FOR
# A PARTICULAR PURPOSE. See the GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <http://www.gnu.org/licenses/>.
#-

import sys
import argparse

from . import __version__
from .errors import \
    BlendError, \
    OutputSelectionError
from .explode import \
    explode
from .input import \
    select_input
from .output import \
    GlobFilterOutput, \
    select_output

def make_parser() :
    parser = argparse.ArgumentParser \
      (
        prog = "blend2zip",
        description = "Explode a .blend file into its many parts.",
      )
    parser.add_argument \
      (
        "src",
        metavar = "FILE",
        help = "the .blend file to explode, or “-” to read from standard input",
      )
    parser.add_argument \
      (
        "dst",
        metavar = "OUT",
        help =
            "where to write the parts: a .zip or .tar file, or “-” to write"
            " a tar archive to standard output",
      )
    parser.add_argument \
      (
        "-x", "--exclude",
        metavar = "GLOB",
        action = "append",
        default = [],
        help = "leave out parts with paths matching this glob pattern (may be repeated)",
      )
    parser.add_argument \
      (
        "-q", "--quiet",
        action = "store_true",
        help = "do not report progress on standard error",
      )
    parser.add_argument \
      (
        "--debug",
        action = "store_true",
        help = "also trace every block header and DNA entry on standard error",
      )
    parser.add_argument("--version", action = "version", version = "%(prog)s " + __version__)
    return \
        parser
#end make_parser

def main(argv = None) :
    parser = make_parser()
    args = parser.parse_args(argv)
    log = (sys.stderr, None)[args.quiet]
    debug_log = (None, sys.stderr)[args.debug]
    try :
        with select_input(args.src, log) as fromfile :
            # input must open successfully before any output file is created
            try :
                output = select_output(args.dst, log)
            except OutputSelectionError as err :
                parser.error(str(err))
            except OSError as err :
                parser.error("cannot open output %s: %s" % (repr(args.dst), err))
            #end try
            if len(args.exclude) != 0 :
                output = GlobFilterOutput(args.exclude, output, log)
            #end if
            summary = explode(fromfile, output, log, debug_log)
        #end with
    except (BlendError, OSError) as err :
        sys.stderr.write("blend2zip: %s\n" % err)
        return \
            1
    #end try
    if log != None :
        log.write \
          (
                "Done: %d block(s), %d part(s) not written.\n"
            %
                (summary.nr_chunks, summary.nr_failed)
          )
    #end if
    return \
        0
#end main

if __name__ == "__main__" :
    sys.exit(main())
#end if
