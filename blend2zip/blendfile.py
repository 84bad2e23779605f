#+
# Decoding of the overall structure of .blend files created by Blender
# <http://www.blender.org/>: the file header, the block (chunk) headers,
# and the "structure DNA" describing the layout of every struct type.
#
# For some info, see
#     "The Mystery of the Blend" <http://www.atmind.nl/blender/mystery_ot_blend.html>
#     The Blender source code, doc/blender_file_format subdirectory
#
# A .blend file consists of a 12-byte header, followed by a sequence of blocks,
# each of which has a header giving a 4-byte code, the size of the data following,
# the in-memory address the data had when it was saved, the index of its struct
# type in the DNA, and the number of elements of that type it contains.
#
# Most blocks have code "DATA", however a few have special codes:
#     * always 1 block with code "GLOB", type FileGlobal
#     * 1 block with code "REND", contents are actually the RenderInfo struct
#     * 1 block with code "TEST", contents are the preview image bitmap
#     * blocks with 2-letter codes followed by two zero bytes, e.g. "OB\x00\x00"
#       for type Object, "ME\x00\x00" for type Mesh, "SC\x00\x00" for type Scene.
#       These are the blocks with user-visible names. The codes may be found in
#       source file source/blender/makesdna/DNA_ID.h.
#     * always 1 block with code "DNA1", containing the "structure DNA" (struct type
#       definitions). Normally the last block, except for "ENDB".
#     * always 1 block with code "ENDB", marking the end of the file.
#
# The header and block headers are decoded here; apart from the DNA1 block,
# no attempt is made to interpret block contents.
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
from collections import namedtuple

from .errors import \
    BlendFormatError, \
    SchemaIndexError
from .readext import \
    ReadStream, \
    align_up, \
    byte_slice

blender_sig = b"BLENDER"
  # file must begin with this
header_size = 12

ptrsize_codes = {b"_" : 4, b"-" : 8}
endian_codes = {b"v" : False, b"V" : True} # value is big_endian

sdna_block_code = b"DNA1"
end_block_code = b"ENDB"

#+
# File header
#-

class BlendVersion(namedtuple("BlendVersion", ("major", "minor", "patch"))) :
    "the 3-digit Blender version from the file header, e.g. “300” for 3.00." \
    " Each component is a single-character string."

    __slots__ = ()

    def __str__(self) :
        return \
            "%s.%s%s" % (self.major, self.minor, self.patch)
    #end __str__

#end BlendVersion

class BlendHeader(namedtuple("BlendHeader", ("ptrsize", "big_endian", "version"))) :
    "information from the file header, needed to decode the rest of the file."

    __slots__ = ()

    @property
    def endian(self) :
        "prefix code to use with struct.unpack to indicate endianness of data."
        return \
            (">" if self.big_endian else "<")
    #end endian

    @property
    def endian_name(self) :
        return \
            ("big" if self.big_endian else "little")
    #end endian_name

    @property
    def ptrcode(self) :
        "code to use to struct.unpack to decode a pointer field."
        return \
            {4 : "I", 8 : "Q"}[self.ptrsize]
    #end ptrcode

    @property
    def chunk_header_size(self) :
        return \
            struct.calcsize(self.endian + "4sI" + self.ptrcode + "II")
    #end chunk_header_size

    def __str__(self) :
        return \
            "ptrsize = %d, endian = %s, version = %s" % (self.ptrsize, self.endian_name, self.version)
    #end __str__

#end BlendHeader

def read_header(fromfile, log = None) :
    "reads and checks the 12-byte file header, returning a BlendHeader."
    if not isinstance(fromfile, ReadStream) :
        fromfile = ReadStream(fromfile)
    #end if
    startpos = fromfile.pos
    sig, ptrcode, endiancode, version = fromfile.unpack("7s1s1s3s", "file header")
      # note not endian-dependent
    if sig != blender_sig :
        raise BlendFormatError \
          (
            "unrecognized file header signature %r, expecting %r" % (sig, blender_sig),
            startpos
          )
    #end if
    if ptrcode not in ptrsize_codes :
        raise BlendFormatError("invalid pointer-size code %r in file header" % ptrcode, startpos + 7)
    #end if
    if endiancode not in endian_codes :
        raise BlendFormatError("invalid endianness code %r in file header" % endiancode, startpos + 8)
    #end if
    if not all(c in b"0123456789" for c in version) :
        raise BlendFormatError("invalid version %r in file header" % version, startpos + 9)
    #end if
    version = version.decode("ascii")
    result = BlendHeader \
      (
        ptrsize = ptrsize_codes[ptrcode],
        big_endian = endian_codes[endiancode],
        version = BlendVersion(version[0], version[1], version[2]),
      )
    if log != None :
        log.write("File Blender version = %s, ptrsize = %d, endian = %s\n" % (result.version, result.ptrsize, result.endian_name))
    #end if
    return \
        result
#end read_header

#+
# Block headers
#-

class ChunkHeader(namedtuple("ChunkHeader", ("code", "size", "addr", "sdna", "count"))) :
    "header of one block: code is the raw 4-byte code, addr the saved in-memory" \
    " address (opaque), sdna the index into the DNA struct list, count the number of" \
    " elements of that struct type in the block."

    __slots__ = ()

    @property
    def code_str(self) :
        "the block code as a string, up to the first null byte."
        return \
            self.code.split(b"\0", 1)[0].decode("latin-1")
    #end code_str

    def __str__(self) :
        return \
            (
                "code = %s, size = %d, addr = 0x%x, sdna = %d, count = %d"
            %
                (self.code_str, self.size, self.addr, self.sdna, self.count)
            )
    #end __str__

#end ChunkHeader

def read_chunk_header(header, fromfile) :
    "reads the next block header, according to the pointer size and endianness" \
    " given by header."
    if not isinstance(fromfile, ReadStream) :
        fromfile = ReadStream(fromfile)
    #end if
    code, size, addr, sdna, count = fromfile.unpack \
      (
        "%s4sI%sII" % (header.endian, header.ptrcode),
        "block header"
      )
    return \
        ChunkHeader(code, size, addr, sdna, count)
#end read_chunk_header

#+
# Structure DNA
#-

class StructDef(namedtuple("StructDef", ("type_index", "fields"))) :
    "one struct definition from the DNA: type_index is the index into the type" \
    " tables of the struct type, fields is a list of (type_index, name_index) pairs."

    __slots__ = ()

#end StructDef

class SchemaCatalog :
    "the decoded contents of a DNA1 block. Indexes held in structs are not checked" \
    " until looked up via the type_name, type_size and field_name methods."

    def __init__(self, names, types, sizes, structs) :
        self.names = names
        self.types = types
        self.sizes = sizes
        self.structs = structs
    #end __init__

    @staticmethod
    def lookup(table_name, table, index) :
        if index >= len(table) :
            raise SchemaIndexError(table_name, index, len(table))
        #end if
        return \
            table[index]
    #end lookup

    def field_name(self, index) :
        return \
            self.lookup("NAME", self.names, index)
    #end field_name

    def type_name(self, index) :
        return \
            self.lookup("TYPE", self.types, index)
    #end type_name

    def type_size(self, index) :
        return \
            self.lookup("TLEN", self.sizes, index)
    #end type_size

    def __repr__(self) :
        return \
            (
                "<SchemaCatalog: %d names, %d types, %d structs>"
            %
                (len(self.names), len(self.types), len(self.structs))
            )
    #end __repr__

#end SchemaCatalog

def decode_sdna(header, sdna_data, log = None) :
    "decodes the contents of a DNA1 block and returns a SchemaCatalog. Only the" \
    " endianness from header is relevant; the DNA itself contains no pointers."

    endian = header.endian
    data_offset = 0

    def expect_id(expect) :
        nonlocal data_offset
        got = bytes(sdna_data[data_offset : data_offset + 4])
        if got != expect :
            raise BlendFormatError \
              (
                "expecting %s sub-block in DNA block, found %r" % (expect.decode(), got),
                data_offset
              )
        #end if
        data_offset += 4
    #end expect_id

    def get(decode_struct, what) :
        nonlocal data_offset
        nrbytes = struct.calcsize(endian + decode_struct)
        result = struct.unpack(endian + decode_struct, byte_slice(sdna_data, data_offset, nrbytes, what))
        data_offset += nrbytes
        return \
            result
    #end get

    def get_names(what) :
        # collects a counted list of null-terminated strings.
        nonlocal data_offset
        nr_names = get("I", "%s count" % what)[0]
        collect = []
        for i in range(nr_names) :
            str_end = sdna_data.find(b"\0", data_offset)
            if str_end < 0 :
                raise BlendFormatError \
                  (
                    "premature end of DNA block reading %s[%d]: no null terminator" % (what, i),
                    data_offset
                  )
            #end if
            collect.append(bytes(sdna_data[data_offset:str_end]).decode("utf-8", errors = "replace"))
            if log != None :
                log.write("%s[%d] = %s\n" % (what, i, repr(collect[i]))) # debug
            #end if
            data_offset = str_end + 1
        #end for
        align_sdna()
        return \
            collect
    #end get_names

    def align_sdna() :
        nonlocal data_offset
        data_offset = align_up(data_offset, 4)
    #end align_sdna

#begin decode_sdna
    expect_id(b"SDNA")
    expect_id(b"NAME")
    names = get_names("name")
    expect_id(b"TYPE")
    types = get_names("type")
    expect_id(b"TLEN")
    sizes = list(get("H" * len(types), "type lengths"))
    if log != None :
        for i, s in enumerate(sizes) :
            log.write("sizeof(%s) = %d\n" % (types[i], s)) # debug
        #end for
    #end if
    align_sdna()
    expect_id(b"STRC")
    nr_structs = get("I", "struct count")[0]
    structs = []
    for i in range(nr_structs) :
        struct_type, nr_fields = get("HH", "struct[%d] header" % i)
        fieldcodes = get("HH" * nr_fields, "struct[%d] fields" % i)
        fields = list(zip(fieldcodes[0::2], fieldcodes[1::2]))
        structs.append(StructDef(struct_type, fields))
        if log != None :
            log.write("struct[%d] is type %d, %d fields\n" % (i, struct_type, nr_fields)) # debug
        #end if
    #end for
    return \
        SchemaCatalog(names, types, sizes, structs)
#end decode_sdna
