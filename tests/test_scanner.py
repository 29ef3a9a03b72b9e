from oskit.scanner import CHUNK_SIZE, SIGNATURE, file_contains, main, scan_directory


def test_detects_signature(tmp_path):
    path = tmp_path / "bad.bin"
    path.write_bytes(b"prefix" + SIGNATURE + b"suffix")
    assert file_contains(path) is True


def test_clean_file(tmp_path):
    path = tmp_path / "clean.bin"
    path.write_bytes(b"nothing to see here")
    assert file_contains(path) is False


def test_signature_across_chunk_boundary(tmp_path):
    path = tmp_path / "edge.bin"
    path.write_bytes(b"x" * (CHUNK_SIZE - 5) + SIGNATURE)
    assert file_contains(path) is True


def test_missing_file_is_clean(tmp_path):
    assert file_contains(tmp_path / "absent") is False


def test_custom_text_signature(tmp_path):
    path = tmp_path / "f.txt"
    path.write_text("hello marker world")
    assert file_contains(path, "marker") is True
    assert file_contains(path, "other") is False


def test_scan_directory_only_regular_files(tmp_path):
    (tmp_path / "a.bin").write_bytes(SIGNATURE)
    (tmp_path / "b.bin").write_bytes(b"clean")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "c.bin").write_bytes(SIGNATURE)
    assert scan_directory(tmp_path) == [f"{tmp_path}/a.bin"]


def test_main_reports_infected(tmp_path, capsys):
    (tmp_path / "a.bin").write_bytes(SIGNATURE)
    assert main([str(tmp_path)]) == 0
    assert capsys.readouterr().out == f"Warning: file {tmp_path}/a.bin is infected!\n"


def test_main_usage_error(capsys):
    assert main([]) == 1
    assert "Usage:" in capsys.readouterr().err


def test_main_missing_directory(tmp_path, capsys):
    assert main([str(tmp_path / "nope")]) == 1
    assert capsys.readouterr().err.startswith("opendir:")