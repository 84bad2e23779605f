#+
# Splitting a .blend file into its separate blocks, writing each one out
# to an Output together with a description of it.
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

import io
from collections import namedtuple

from .blendfile import \
    decode_sdna, \
    end_block_code, \
    read_chunk_header, \
    read_header, \
    sdna_block_code
from .catalog import \
    write_catalog
from .output import \
    write_text
from .readext import \
    ReadStream

header_info_path = "blend.txt"
sdna_raw_path = "DNA1.bin"

ExplodeSummary = namedtuple("ExplodeSummary", ("header", "nr_chunks", "nr_failed", "sdna_seen"))

def header_info(header) :
    "the contents of the file describing the file header."
    return \
        (
            "ptrsize\t%d\nendian\t%s\nversion\t%s\n"
        %
            (header.ptrsize, header.endian_name, header.version)
        )
#end header_info

def chunk_stem(chunk) :
    "common part of the pathnames for the files describing a block."
    return \
        "%s/0x%X" % (chunk.code_str, chunk.addr)
#end chunk_stem

def chunk_info(chunk) :
    "the contents of the file describing a block header."
    return \
        (
            "code\t%s\nsize\t0x%X\naddr\t0x%X\nsdna\t0x%X\ncount\t%d\n"
        %
            (chunk.code_str, chunk.size, chunk.addr, chunk.sdna, chunk.count)
        )
#end chunk_info

def explode(fromfile, output, log = None, debug_log = None) :
    "reads a .blend file from fromfile and writes its parts to output, calling" \
    " output.finish() at the end. Errors decoding the file structure are fatal;" \
    " errors writing individual parts are reported to log and otherwise ignored." \
    " debug_log, if not None, receives a detailed trace of the block headers and" \
    " the DNA decoding."
    fromfile = ReadStream(fromfile)
    header = read_header(fromfile, log)
    write_text(output, header_info_path, header_info(header))
    nr_chunks = 0
    nr_failed = 0
    sdna_seen = False
    while True :
        chunkpos = fromfile.pos
        chunk = read_chunk_header(header, fromfile)
        if debug_log != None :
            debug_log.write("block[%d] at 0x%08x %s\n" % (nr_chunks, chunkpos, chunk)) # debug
        #end if
        nr_chunks += 1
        if chunk.code == sdna_block_code :
            sdna_data = fromfile.read_exact(chunk.size, "DNA1 block")
            try :
                output.write_file(sdna_raw_path, len(sdna_data), io.BytesIO(sdna_data))
            except OSError as err :
                if log != None :
                    log.write("ERROR while writing `%s`: %s\n" % (sdna_raw_path, err))
                #end if
                nr_failed += 1
            #end try
            catalog = decode_sdna(header, sdna_data, debug_log)
            if log != None :
                log.write("Decoded %s\n" % repr(catalog))
            #end if
            nr_failed += write_catalog(header, catalog, output, log)
            sdna_seen = True
            continue
        #end if
        stem = chunk_stem(chunk)
        if chunk.code == end_block_code :
            # ENDB may be incomplete in some files: keep whatever data is present.
            contents = fromfile.read_upto(chunk.size)
            if len(contents) != chunk.size and log != None :
                log.write \
                  (
                    "ENDB block declares %d byte(s) but only %d present.\n" % (chunk.size, len(contents))
                  )
            #end if
            data = io.BytesIO(contents)
            size = len(contents)
        else :
            data = fromfile.take(chunk.size)
            size = chunk.size
        #end if
        try :
            output.write_file(stem + ".bin", size, data)
        except OSError as err :
            if log != None :
                log.write("ERROR while writing `%s.bin`: %s\n" % (stem, err))
            #end if
            nr_failed += 1
        #end try
        if chunk.code != end_block_code :
            data.drain()
              # in case output did not consume it all
        #end if
        try :
            write_text(output, stem + ".txt", chunk_info(chunk))
        except OSError as err :
            if log != None :
                log.write("ERROR while writing `%s.txt`: %s\n" % (stem, err))
            #end if
            nr_failed += 1
        #end try
        if chunk.code == end_block_code :
            if log != None :
                log.write("Reached ENDB block.\n")
            #end if
            break
        #end if
    #end while
    output.finish()
    return \
        ExplodeSummary(header, nr_chunks, nr_failed, sdna_seen)
#end explode
