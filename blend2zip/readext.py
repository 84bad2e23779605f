#+
# Helpers for reading binary data from byte streams and buffers.
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

import struct

from .errors import \
    BlendFormatError, \
    BlendTruncatedError

COPY_CHUNK = 65536 # max bytes to move in one read when copying/draining

def align_adjust(offset, multiple) :
    "returns amount to add to offset [0 .. multiple - 1] to" \
    " ensure it can be divided by multiple exactly."
    return \
        (multiple - offset % multiple) % multiple
#end align_adjust

def align_up(offset, multiple) :
    return \
        offset + align_adjust(offset, multiple)
#end align_up

def byte_slice(buf, offset, count, what = None) :
    "returns exactly count bytes from buf starting at offset, raising" \
    " BlendFormatError if buf is too short."
    if offset < 0 or offset + count > len(buf) :
        raise BlendFormatError \
          (
                "premature end of data%s: wanted %d byte(s), only %d available"
            %
                (("", " reading %s" % what)[what != None], count, max(len(buf) - offset, 0)),
            offset
          )
    #end if
    return \
        bytes(buf[offset : offset + count])
#end byte_slice

def drain(data, size) :
    "reads and discards exactly size bytes from data, returning the number" \
    " actually consumed (less than size only if data ran out)."
    consumed = 0
    while consumed < size :
        got = data.read(min(size - consumed, COPY_CHUNK))
        if len(got) == 0 :
            break
        consumed += len(got)
    #end while
    return \
        consumed
#end drain

class ReadStream :
    "wrapper around a binary file object (anything with a read method) that keeps" \
    " track of the current position and provides exact-length reads."

    def __init__(self, fromfile) :
        self.fromfile = fromfile
        self.pos = 0
    #end __init__

    def read(self, nrbytes = -1) :
        "plain read, may return fewer bytes than requested."
        result = self.fromfile.read(nrbytes)
        self.pos += len(result)
        return \
            result
    #end read

    def read_exact(self, nrbytes, what = None) :
        "reads and returns exactly nrbytes bytes, raising BlendTruncatedError if" \
        " the stream ends first."
        startpos = self.pos
        parts = []
        remaining = nrbytes
        while remaining > 0 :
            got = self.read(remaining)
            if len(got) == 0 :
                raise BlendTruncatedError(startpos, nrbytes, nrbytes - remaining, what)
            #end if
            parts.append(got)
            remaining -= len(got)
        #end while
        return \
            b"".join(parts)
    #end read_exact

    def read_upto(self, nrbytes) :
        "reads up to nrbytes bytes, returning fewer only if the stream ends first."
        parts = []
        remaining = nrbytes
        while remaining > 0 :
            got = self.read(min(remaining, COPY_CHUNK))
            if len(got) == 0 :
                break
            parts.append(got)
            remaining -= len(got)
        #end while
        return \
            b"".join(parts)
    #end read_upto

    def read_byte(self, what = None) :
        return \
            self.read_exact(1, what)
    #end read_byte

    def unpack(self, decode_struct, what = None) :
        "reads sufficient bytes to be unpacked according to decode_struct, and" \
        " returns the unpacked results."
        return \
            struct.unpack(decode_struct, self.read_exact(struct.calcsize(decode_struct), what))
    #end unpack

    def read_cstr(self, what = None) :
        "reads a NUL-terminated string, returning its bytes without the terminator."
        startpos = self.pos
        result = bytearray()
        while True :
            got = self.read(1)
            if len(got) == 0 :
                raise BlendTruncatedError \
                  (
                    startpos,
                    len(result) + 1,
                    len(result),
                    ("string", what)[what != None] + " (no NUL terminator)"
                  )
            #end if
            if got == b"\0" :
                break
            result.extend(got)
        #end while
        return \
            bytes(result)
    #end read_cstr

    def take(self, nrbytes) :
        "returns a BorrowedTake giving access to just the next nrbytes bytes."
        return \
            BorrowedTake(self, nrbytes)
    #end take

#end ReadStream

class BorrowedTake :
    "read-only view of the next remaining bytes of a ReadStream. Reports end" \
    " of data once that many bytes have been consumed, regardless of how much" \
    " more the underlying stream holds. Does not own or close the stream."

    def __init__(self, parent, remaining) :
        self.parent = parent
        self.remaining = remaining
    #end __init__

    def read(self, size = -1) :
        if self.remaining == 0 :
            result = b""
        else :
            if size == None or size < 0 or size > self.remaining :
                size = self.remaining
            #end if
            result = self.parent.read(size)
            self.remaining -= len(result)
        #end if
        return \
            result
    #end read

    def readable(self) :
        return \
            True
    #end readable

    def drain(self) :
        "discards whatever is left, so the parent stream ends up positioned just" \
        " past the borrowed range."
        if self.remaining != 0 :
            startpos = self.parent.pos
            wanted = self.remaining
            consumed = drain(self, wanted)
            if consumed != wanted :
                raise BlendTruncatedError(startpos, wanted, consumed, "chunk data")
            #end if
        #end if
    #end drain

#end BorrowedTake
