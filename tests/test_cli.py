import zipfile

import pytest

from blend2zip.__main__ import \
    main

from blendbuild import \
    foo_sdna, \
    make_blend

def test_main_writes_zip(tmp_path, capsys) :
    src = tmp_path / "scene.blend"
    src.write_bytes(make_blend([(b"OB\0\0", b"object", 0x40), (b"DNA1", foo_sdna(), 0)]))
    dst = tmp_path / "scene.zip"
    assert main([str(src), str(dst), "-x", "ENDB/*"]) == 0
    with zipfile.ZipFile(str(dst)) as archive :
        names = archive.namelist()
    #end with
    assert "OB/0x40.bin" in names
    assert "DNA1/Foo.txt" in names
    assert not any(name.startswith("ENDB/") for name in names)
    err = capsys.readouterr().err
    assert "Reading blend from" in err
    assert "Done: 3 block(s), 0 part(s) not written." in err
#end test_main_writes_zip

def test_main_quiet(tmp_path, capsys) :
    src = tmp_path / "scene.blend"
    src.write_bytes(make_blend([]))
    assert main(["-q", str(src), str(tmp_path / "scene.tar")]) == 0
    assert capsys.readouterr().err == ""
#end test_main_quiet

def test_main_bad_file(tmp_path, capsys) :
    src = tmp_path / "bad.blend"
    src.write_bytes(b"not a blend file at all")
    assert main(["-q", str(src), str(tmp_path / "bad.zip")]) == 1
    assert "blend2zip: unrecognized file header signature" in capsys.readouterr().err
#end test_main_bad_file

def test_main_missing_file(tmp_path, capsys) :
    assert main(["-q", str(tmp_path / "nowhere.blend"), str(tmp_path / "x.zip")]) == 1
    assert "blend2zip:" in capsys.readouterr().err
#end test_main_missing_file

def test_main_bad_output(tmp_path) :
    src = tmp_path / "scene.blend"
    src.write_bytes(make_blend([]))
    with pytest.raises(SystemExit) as excinfo :
        main(["-q", str(src), str(tmp_path / "scene.rar")])
    #end with
    assert excinfo.value.code == 2
#end test_main_bad_output

def test_main_missing_file_leaves_no_output(tmp_path, capsys) :
    dst = tmp_path / "x.zip"
    assert main(["-q", str(tmp_path / "nowhere.blend"), str(dst)]) == 1
    assert not dst.exists()
    assert "No such file" in capsys.readouterr().err
#end test_main_missing_file_leaves_no_output
