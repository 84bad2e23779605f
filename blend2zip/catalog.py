#+
# Rendering of the decoded structure DNA as readable text files.
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

from .errors import \
    SchemaIndexError
from .output import \
    write_text

catalog_dir = "DNA1"
index_path = "DNA1.tsv"

builtin_types = \
    ( # sizes of types that have no struct definition; "void" is only sized as a pointer.
        ("char", 1),
        ("short", 2),
        ("int", 4),
        ("float", 4),
        ("long", 8),
        ("double", 8),
    )

def builtin_rows(header) :
    "returns (name, size) for each builtin type row in the index."
    return \
        list(builtin_types) + [("void", header.ptrsize)]
#end builtin_rows

def struct_path(catalog, struct_def) :
    return \
        "%s/%s.txt" % (catalog_dir, catalog.type_name(struct_def.type_index))
#end struct_path

def render_struct(catalog, struct_def) :
    "returns the text describing the struct type defined by struct_def."
    lines = \
        [
            "# name %s @%d" % (catalog.type_name(struct_def.type_index), struct_def.type_index),
            "# size %d" % catalog.type_size(struct_def.type_index),
            "# fields %d" % len(struct_def.fields),
        ]
    for field_type, field_name in struct_def.fields :
        lines.append("%s\t%s" % (catalog.field_name(field_name), catalog.type_name(field_type)))
    #end for
    return \
        "".join(line + "\n" for line in lines)
#end render_struct

def render_index(header, rows) :
    "returns the text of the index file, given (sdna, size, path) rows for the" \
    " structs that were rendered."
    lines = ["sdna\tsize\tpath"]
    for name, size in builtin_rows(header) :
        lines.append("-\t0x%X\tbuiltin:%s" % (size, name))
    #end for
    for sdna, size, path in rows :
        lines.append("0x%X\t0x%X\t%s" % (sdna, size, path))
    #end for
    return \
        "".join(line + "\n" for line in lines)
#end render_index

def write_catalog(header, catalog, output, log = None) :
    "writes one file per struct in catalog, followed by the index. Structs that" \
    " refer to nonexistent table entries are reported and left out, as are errors" \
    " writing struct files. Returns the number of struct files not written."
    rows = []
    skipped = 0
    for sdna, struct_def in enumerate(catalog.structs) :
        try :
            path = struct_path(catalog, struct_def)
            size = catalog.type_size(struct_def.type_index)
            text = render_struct(catalog, struct_def)
        except SchemaIndexError as err :
            if log != None :
                log.write("ERROR skipping struct[%d]: %s\n" % (sdna, err))
            #end if
            skipped += 1
            continue
        #end try
        try :
            write_text(output, path, text)
        except OSError as err :
            if log != None :
                log.write("ERROR while writing `%s`: %s\n" % (path, err))
            #end if
            skipped += 1
        #end try
        rows.append((sdna, size, path))
    #end for
    write_text(output, index_path, render_index(header, rows))
    return \
        skipped
#end write_catalog
