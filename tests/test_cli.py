"""
Lumasort — CLI Tests

Run with: pytest tests/test_cli.py -v
"""

import os
import sys

import pytest
from PIL import Image

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import lumasort


def _run(argv):
    lumasort.main(argv)


class TestSortCommand:

    def test_writes_sweep(self, sample_png, tmp_path, capsys):
        out = tmp_path / "out"
        _run(["sort", str(sample_png), "--out", str(out),
              "--tmin", "0", "--tmax", "20000", "--tinc", "10000"])
        assert sorted(p.name for p in out.iterdir()) == [
            "sorted_1x_0.000000l_sample.png",
            "sorted_1x_10000.000000l_sample.png",
        ]
        assert "2 thresholds" in capsys.readouterr().out

    def test_passes_in_name(self, sample_png, tmp_path):
        out = tmp_path / "out"
        _run(["sort", str(sample_png), "--out", str(out), "-p", "3",
              "--norow", "--tmin", "0", "--tmax", "1", "--tinc", "1"])
        assert [p.name for p in out.iterdir()] == ["sorted_3x_0.000000l_sample.png"]

    def test_multiple_files(self, sample_png, sample_gif, tmp_path):
        out = tmp_path / "out"
        _run(["sort", str(sample_png), str(sample_gif), "--out", str(out),
              "--tmin", "0", "--tmax", "1", "--tinc", "1"])
        assert sorted(p.name for p in out.iterdir()) == [
            "sorted_1x_0.000000l_anim.jpeg",
            "sorted_1x_0.000000l_sample.png",
        ]

    def test_zero_increment_fails_before_writing(self, sample_png, tmp_path, capsys):
        out = tmp_path / "out"
        with pytest.raises(SystemExit) as exc:
            _run(["sort", str(sample_png), "--out", str(out), "--tinc", "0"])
        assert exc.value.code == 1
        assert "threshold_increment" in capsys.readouterr().err
        assert not out.exists()

    def test_camera_jpeg(self, sample_mpo, tmp_path):
        out = tmp_path / "out"
        _run(["sort", str(sample_mpo), "--out", str(out),
              "--tmin", "0", "--tmax", "1", "--tinc", "1"])
        paths = list(out.iterdir())
        assert [p.name for p in paths] == ["sorted_1x_0.000000l_cam.jpg"]
        with Image.open(paths[0]) as img:
            assert img.format == "JPEG"

    def test_unsupported_format_fails_before_sorting(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "scan.png"
        Image.new("RGB", (4, 4)).save(path, format="TIFF")

        def no_sorting(*args, **kwargs):
            raise AssertionError("sorted an image that cannot be written")

        monkeypatch.setattr(lumasort, "process", no_sorting)
        out = tmp_path / "out"
        with pytest.raises(SystemExit) as exc:
            _run(["sort", str(path), "--out", str(out)])
        assert exc.value.code == 1
        captured = capsys.readouterr()
        assert "Unsupported image format 'TIFF'" in captured.err
        assert "Sorting" not in captured.out
        assert not out.exists()

    def test_missing_file_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            _run(["sort", str(tmp_path / "missing.png"), "--out", str(tmp_path)])
        assert exc.value.code == 1
        assert "not found" in capsys.readouterr().err

    def test_no_files_prints_usage(self, capsys):
        with pytest.raises(SystemExit):
            _run(["sort"])
        assert "usage" in capsys.readouterr().err.lower()

    def test_empty_sweep(self, sample_png, tmp_path, capsys):
        out = tmp_path / "out"
        _run(["sort", str(sample_png), "--out", str(out), "--tmin", "10", "--tmax", "10"])
        assert "Empty sweep" in capsys.readouterr().out
        assert not out.exists()


class TestOtherCommands:

    def test_info_lists_default_sweep(self, capsys):
        _run(["info"])
        out = capsys.readouterr().out
        assert "0, 5000, 10000" in out
        assert "55000" in out

    def test_no_command_prints_help(self, capsys):
        _run([])
        assert "usage" in capsys.readouterr().out.lower()

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            _run(["--version"])
        assert lumasort.__version__ in capsys.readouterr().out
