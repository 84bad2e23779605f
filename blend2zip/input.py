#+
# Opening of the .blend file to be exploded.
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

import gzip
from contextlib import contextmanager

gzip_sig = b"\x1F\x8B"

class PrefixedReader :
    "read-only stream returning the already-read bytes prefix, followed by" \
    " whatever is left in fromfile."

    def __init__(self, prefix, fromfile) :
        self.prefix = prefix
        self.fromfile = fromfile
    #end __init__

    def read(self, size = -1) :
        if len(self.prefix) != 0 :
            if size == None or size < 0 :
                result = self.prefix + self.fromfile.read()
                self.prefix = b""
            else :
                result = self.prefix[:size]
                self.prefix = self.prefix[size:]
            #end if
        else :
            result = self.fromfile.read(size)
        #end if
        return \
            result
    #end read

    def readable(self) :
        return \
            True
    #end readable

#end PrefixedReader

def maybe_decompress(origfd) :
    "returns a tuple of a file object giving the decompressed contents of origfd" \
    " if it looks like it is gzip-compressed, else its plain contents, and a flag" \
    " indicating which. The signature is collected even from a source like a pipe" \
    " that delivers fewer bytes per read."
    sig = b""
    while len(sig) < len(gzip_sig) :
        got = origfd.read(len(gzip_sig) - len(sig))
        if len(got) == 0 :
            break
        sig += got
    #end while
    fd = PrefixedReader(sig, origfd)
    compressed = sig == gzip_sig
    if compressed :
        fd = gzip.GzipFile(mode = "rb", fileobj = fd)
    #end if
    return \
        fd, compressed
#end maybe_decompress

@contextmanager
def select_input(src, log = None) :
    "context manager that opens src for reading, “-” meaning standard input." \
    " Compressed .blend files are decompressed on the fly."
    if src == "-" :
        if log != None :
            log.write("Reading blend from STDIN.\n")
        #end if
        origfd = sys.stdin.buffer
        owned = False
    else :
        if log != None :
            log.write("Reading blend from %s.\n" % repr(src))
        #end if
        origfd = open(src, "rb")
        owned = True
    #end if
    try :
        fd, compressed = maybe_decompress(origfd)
        if compressed and log != None :
            log.write("Input is gzip-compressed.\n")
        #end if
        try :
            yield fd
        finally :
            if compressed :
                fd.close()
            #end if
        #end try
    finally :
        if owned :
            origfd.close()
        #end if
    #end try
#end select_input
