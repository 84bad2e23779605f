import io

import pytest

from blend2zip.blendfile import \
    BlendHeader, \
    BlendVersion, \
    SchemaCatalog, \
    StructDef, \
    decode_sdna
from blend2zip.catalog import \
    builtin_rows, \
    render_index, \
    render_struct, \
    struct_path, \
    write_catalog
from blend2zip.errors import \
    SchemaIndexError

from blendbuild import \
    MemoryOutput, \
    encode_sdna, \
    foo_sdna

header32 = BlendHeader(4, False, BlendVersion("3", "0", "0"))
header64 = BlendHeader(8, False, BlendVersion("3", "0", "0"))

builtin_lines = \
    (
        "sdna\tsize\tpath\n"
        "-\t0x1\tbuiltin:char\n"
        "-\t0x2\tbuiltin:short\n"
        "-\t0x4\tbuiltin:int\n"
        "-\t0x4\tbuiltin:float\n"
        "-\t0x8\tbuiltin:long\n"
        "-\t0x8\tbuiltin:double\n"
    )

def test_render_struct_foo() :
    catalog = decode_sdna(header32, foo_sdna())
    assert render_struct(catalog, catalog.structs[0]) == \
        (
            "# name Foo @1\n"
            "# size 8\n"
            "# fields 2\n"
            "a\tint\n"
            "b\tint\n"
        )
    assert struct_path(catalog, catalog.structs[0]) == "DNA1/Foo.txt"
#end test_render_struct_foo

def test_write_catalog_foo() :
    catalog = decode_sdna(header32, foo_sdna())
    output = MemoryOutput()
    assert write_catalog(header32, catalog, output) == 0
    assert output.paths == ["DNA1/Foo.txt", "DNA1.tsv"]
    index = output.contents("DNA1.tsv").decode()
    assert index == builtin_lines + "-\t0x4\tbuiltin:void\n" + "0x0\t0x8\tDNA1/Foo.txt\n"
    assert b"a\tint\nb\tint\n" in output.contents("DNA1/Foo.txt")
#end test_write_catalog_foo

@pytest.mark.parametrize("header, void_size", [(header32, 4), (header64, 8)])
def test_builtin_void_sized_as_pointer(header, void_size) :
    assert builtin_rows(header)[-1] == ("void", void_size)
    assert render_index(header, []).endswith("-\t0x%X\tbuiltin:void\n" % void_size)
#end test_builtin_void_sized_as_pointer

def test_index_hex_columns() :
    text = render_index(header32, [(26, 1032, "DNA1/Object.txt")])
    assert text.splitlines()[-1] == "0x1A\t0x408\tDNA1/Object.txt"
#end test_index_hex_columns

@pytest.mark.parametrize \
  (
    "struct_def, table",
    [
        (StructDef(5, []), "TYPE"),
        (StructDef(1, [(0, 2)]), "NAME"),
        (StructDef(1, [(3, 0)]), "TYPE"),
    ]
  )
def test_render_struct_bad_index(struct_def, table) :
    catalog = SchemaCatalog(["a", "b"], ["int", "Foo"], [4, 8], [struct_def])
    with pytest.raises(SchemaIndexError) as excinfo :
        render_struct(catalog, struct_def)
    #end with
    assert excinfo.value.table == table
    assert isinstance(excinfo.value, IndexError)
#end test_render_struct_bad_index

def test_sizes_table_shorter_than_types() :
    catalog = SchemaCatalog([], ["int", "Foo"], [4], [StructDef(1, [])])
    with pytest.raises(SchemaIndexError) as excinfo :
        render_struct(catalog, catalog.structs[0])
    #end with
    assert excinfo.value.table == "TLEN"
    assert (excinfo.value.index, excinfo.value.size) == (1, 1)
#end test_sizes_table_shorter_than_types

def test_write_catalog_skips_bad_structs() :
    blob = encode_sdna \
      (
        ["a", "b"],
        ["int", "Foo", "Bar", "Baz"],
        [4, 8, 4, 4],
        [
            (1, [(0, 0), (0, 1)]),
            (2, [(0, 9)]), # name index out of range
            (3, [(0, 0)]),
        ]
      )
    catalog = decode_sdna(header32, blob)
    output = MemoryOutput()
    log = io.StringIO()
    assert write_catalog(header32, catalog, output, log) == 1
    assert output.paths == ["DNA1/Foo.txt", "DNA1/Baz.txt", "DNA1.tsv"]
    index = output.contents("DNA1.tsv").decode().splitlines()
    assert index[-2:] == ["0x0\t0x8\tDNA1/Foo.txt", "0x2\t0x4\tDNA1/Baz.txt"]
    assert "struct[1]" in log.getvalue()
    assert "NAME index 9" in log.getvalue()
#end test_write_catalog_skips_bad_structs

class FailingOutput(MemoryOutput) :

    def __init__(self, fail_paths) :
        super().__init__()
        self.fail_paths = fail_paths
    #end __init__

    def write_file(self, path, size, data) :
        if path in self.fail_paths :
            raise OSError("disk full")
        #end if
        super().write_file(path, size, data)
    #end write_file

#end FailingOutput

def test_write_catalog_continues_after_write_error() :
    catalog = decode_sdna(header32, foo_sdna())
    output = FailingOutput({"DNA1/Foo.txt"})
    log = io.StringIO()
    assert write_catalog(header32, catalog, output, log) == 1
    assert output.paths == ["DNA1.tsv"]
    assert "DNA1/Foo.txt" in output.contents("DNA1.tsv").decode()
    assert "disk full" in log.getvalue()
#end test_write_catalog_continues_after_write_error

def test_write_catalog_index_error_propagates() :
    catalog = decode_sdna(header32, foo_sdna())
    with pytest.raises(OSError) :
        write_catalog(header32, catalog, FailingOutput({"DNA1.tsv"}))
    #end with
#end test_write_catalog_index_error_propagates
