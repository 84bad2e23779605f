#+
# Destinations for the exploded parts of a .blend file. Each destination
# implements the Output interface: write_file is called once per part, and
# finish once at the end.
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
import os
import io
import time
import fnmatch
import tarfile
import zipfile

from .errors import \
    OutputSelectionError
from .readext import \
    COPY_CHUNK, \
    drain

def copy_data(data, out, size) :
    "copies up to size bytes from data to out, returning the number copied."
    copied = 0
    while copied < size :
        got = data.read(min(size - copied, COPY_CHUNK))
        if len(got) == 0 :
            break
        out.write(got)
        copied += len(got)
    #end while
    return \
        copied
#end copy_data

def write_text(output, path, text) :
    "writes a str to output as a UTF-8-encoded file."
    contents = text.encode("utf-8")
    output.write_file(path, len(contents), io.BytesIO(contents))
#end write_text

class Output :
    "interface for destinations. write_file must consume exactly size bytes from" \
    " data, even if it decides not to keep them; finish is called once after the" \
    " last write_file."

    def write_file(self, path, size, data) :
        raise NotImplementedError("write_file")
    #end write_file

    def finish(self) :
        raise NotImplementedError("finish")
    #end finish

#end Output

class ZipOutput(Output) :
    "writes the parts to a ZIP archive."

    def __init__(self, dst, log = None) :
        self.archive = zipfile.ZipFile(dst, "w", compression = zipfile.ZIP_DEFLATED)
        self.log = log
    #end __init__

    def write_file(self, path, size, data) :
        if self.log != None :
            self.log.write("Writing file `%s` of %d byte/s.\n" % (path, size))
        #end if
        info = zipfile.ZipInfo(path, date_time = time.localtime()[:6])
        info.compress_type = zipfile.ZIP_DEFLATED
        with self.archive.open(info, "w", force_zip64 = size >= zipfile.ZIP64_LIMIT) as out :
            copy_data(data, out, size)
        #end with
    #end write_file

    def finish(self) :
        self.archive.close()
    #end finish

#end ZipOutput

class TarOutput(Output) :
    "writes the parts to a tar archive. dst is either a pathname, or a binary" \
    " file object which is left open; stream must be True if the file object" \
    " is not seekable."

    def __init__(self, dst, stream = False, log = None) :
        if isinstance(dst, (str, os.PathLike)) :
            self.archive = tarfile.open(name = dst, mode = "w", format = tarfile.GNU_FORMAT)
        else :
            self.archive = tarfile.open \
              (
                fileobj = dst,
                mode = ("w", "w|")[stream],
                format = tarfile.GNU_FORMAT
              )
        #end if
        self.log = log
    #end __init__

    def write_file(self, path, size, data) :
        if self.log != None :
            self.log.write("Writing file `%s` of %d byte/s.\n" % (path, size))
        #end if
        info = tarfile.TarInfo(path)
        info.size = size
        info.mtime = int(time.time())
        info.mode = 0o644
        self.archive.addfile(info, data)
    #end write_file

    def finish(self) :
        self.archive.close()
    #end finish

#end TarOutput

class GlobFilterOutput(Output) :
    "wraps another Output, discarding any files with paths matching one of" \
    " the given glob patterns."

    def __init__(self, patterns, output, log = None) :
        self.patterns = list(patterns)
        self.output = output
        self.log = log
    #end __init__

    def excluded(self, path) :
        return \
            any(fnmatch.fnmatchcase(path, pattern) for pattern in self.patterns)
    #end excluded

    def write_file(self, path, size, data) :
        if self.excluded(path) :
            if self.log != None :
                self.log.write("Voiding file `%s` of %d byte/s.\n" % (path, size))
            #end if
            drain(data, size)
        else :
            self.output.write_file(path, size, data)
        #end if
    #end write_file

    def finish(self) :
        self.output.finish()
    #end finish

#end GlobFilterOutput

def select_output(dst, log = None) :
    "works out what kind of Output to create from the destination name: “-” for" \
    " a tar stream on standard output, else by file extension."
    if dst == "-" :
        if log != None :
            log.write("Writing output to STDOUT as TAR\n")
        #end if
        result = TarOutput(sys.stdout.buffer, stream = True, log = log)
    else :
        ext = os.path.splitext(dst)[1].lower()
        if ext == ".zip" :
            if log != None :
                log.write("Writing output to %s as ZIP\n" % repr(dst))
            #end if
            result = ZipOutput(dst, log = log)
        elif ext == ".tar" :
            if log != None :
                log.write("Writing output to %s as TAR\n" % repr(dst))
            #end if
            result = TarOutput(dst, log = log)
        elif ext == "" :
            raise OutputSelectionError \
              (
                "unable to determine output format: %s has no file extension" % repr(dst)
              )
        else :
            raise OutputSelectionError \
              (
                "unable to determine output format from %s: expecting .zip or .tar" % repr(dst)
              )
        #end if
    #end if
    return \
        result
#end select_output
