"""
Tests for the CLI module.
"""

import json

import pyarrow.parquet as pq

from hklmerge.cli.main import app


class TestCLIDetect:
    """Tests for the detect command."""

    def test_detect_xds_file(self, xds_file, capsys):
        result = app(["detect", str(xds_file)])

        assert result == 0
        assert "Type: xds_ascii" in capsys.readouterr().out

    def test_detect_json_output(self, merged_mtz_file, capsys):
        """Test JSON output from detect."""
        result = app(["detect", "--json", str(merged_mtz_file)])

        assert result == 0
        output = json.loads(capsys.readouterr().out)
        assert output["file_type"] == "mtz"
        assert output["supported"] is True

    def test_detect_nonexistent_file(self):
        result = app(["detect", "/nonexistent/file.mtz"])
        assert result == 1


class TestCLIFind:
    """Tests for the find command."""

    def test_find(self, tmp_path, xds_file, cif_merged_file, capsys):
        result = app(["find", "--json", "-s", str(tmp_path)])

        assert result == 0
        output = json.loads(capsys.readouterr().out)
        assert sorted(f["file_type"] for f in output) == ["mmcif", "xds_ascii"]

    def test_find_empty_directory(self, tmp_path, capsys):
        result = app(["find", "-s", str(tmp_path)])

        assert result == 0
        assert "Found 0 reflection file(s)" in capsys.readouterr().out


class TestCLIStats:
    """Tests for the stats command."""

    def test_stats(self, xds_file, capsys):
        result = app(["stats", str(xds_file)])

        assert result == 0
        assert "Unique reflections: 2" in capsys.readouterr().out

    def test_stats_json(self, cif_merged_file, capsys):
        result = app(["stats", "--json", "--anomalous", str(cif_merged_file)])

        assert result == 0
        output = json.loads(capsys.readouterr().out)
        assert output["dataset"]["kind"] == "anomalous"
        assert output["dataset"]["unique_reflections"] == 3

    def test_stats_bad_labels(self, merged_mtz_file):
        """An empty label in the list is rejected."""
        result = app(["stats", "--labels", "IMEAN,,I", str(merged_mtz_file)])
        assert result == 1

    def test_stats_kind_not_in_file(self, xds_file):
        result = app(["stats", "--kind", "mean", str(xds_file)])
        assert result == 1

    def test_stats_missing_index(self, tmp_path, cif_header):
        path = tmp_path / "holes.cif"
        path.write_text(
            cif_header
            + "loop_\n_refln.index_h\n_refln.index_k\n_refln.index_l\n"
            "_refln.intensity_meas\n_refln.intensity_sigma\n? 2 3 10 1\n"
        )

        result = app(["stats", str(path)])
        assert result == 1


class TestCLIValidate:
    """Tests for the validate command."""

    def test_validate(self, xds_file, capsys):
        result = app(["validate", str(xds_file)])

        assert result == 0
        assert "PASSED" in capsys.readouterr().out

    def test_validate_json(self, merged_mtz_file, capsys):
        result = app(["validate", "--json", str(merged_mtz_file)])

        assert result == 0
        output = json.loads(capsys.readouterr().out)
        assert output["is_valid"] is True
        assert output["merge"]["unique_reflections"] == 2

    def test_validate_no_observations(self, tmp_path, cif_header, capsys):
        path = tmp_path / "blank.cif"
        path.write_text(
            cif_header
            + "loop_\n_refln.index_h\n_refln.index_k\n_refln.index_l\n"
            "_refln.intensity_meas\n_refln.intensity_sigma\n1 2 3 ? ?\n2 0 0 ? ?\n"
        )

        result = app(["validate", str(path)])

        assert result == 1
        assert "FAILED" in capsys.readouterr().out


class TestCLIMerge:
    """Tests for the merge command."""

    def test_merge_dry_run(self, tmp_path, xds_file, capsys):
        """Test merge with --dry-run."""
        out = tmp_path / "out"

        result = app(["merge", str(xds_file), "-o", str(out), "--dry-run"])

        assert result == 0
        assert "Dry run" in capsys.readouterr().out
        assert not (out / "intensities").exists()

    def test_merge_parquet(self, tmp_path, xds_file):
        out = tmp_path / "out"

        result = app(["merge", str(xds_file), "-o", str(out), "--anomalous"])

        assert result == 0
        table = pq.read_table(out / "intensities" / "XDS_ASCII.parquet")
        assert table.column("sign").to_pylist() == [1, -1, 1]
        assert (out / "dataset" / "XDS_ASCII.parquet").exists()

    def test_merge_json(self, tmp_path, cif_unmerged_file):
        out = tmp_path / "out"

        result = app(["merge", str(cif_unmerged_file), "-o", str(out), "--format", "json"])

        assert result == 0
        with open(out / "unmerged_intensities.json") as f:
            data = json.load(f)
        assert len(data["reflections"]) == 2

    def test_merge_keep_absences(self, tmp_path, xds_file, capsys):
        result = app(
            ["merge", str(xds_file), "-o", str(tmp_path), "--keep-absences", "--dry-run", "--json"]
        )

        assert result == 0
        output = json.loads(capsys.readouterr().out.split("\nDry run")[0])
        assert output["dataset"]["unique_reflections"] == 3

    def test_merge_unsupported_file(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        result = app(["merge", str(path), "-o", str(tmp_path / "out")])
        assert result == 1


class TestCLIBatch:
    """Tests for the batch command."""

    def test_batch(self, tmp_path, xds_file, merged_mtz_file, capsys):
        out = tmp_path / "out"

        result = app(["batch", "-s", str(tmp_path), "-o", str(out), "--json"])

        assert result == 0
        output = json.loads(capsys.readouterr().out)
        assert len(output["merged"]) == 2
        assert output["failed"] == {}
        assert (out / "intensities" / "scaled.parquet").exists()

    def test_batch_with_broken_file(self, tmp_path, xds_content):
        data = tmp_path / "data"
        data.mkdir()
        (data / "XDS_ASCII.HKL").write_text(xds_content)
        (data / "BROKEN.HKL").write_text("!FORMAT=XDS_ASCII    MERGE=FALSE\n!END_OF_HEADER\n")

        result = app(["batch", "-s", str(data), "-o", str(tmp_path / "out")])

        assert result == 1
        assert (tmp_path / "out" / "intensities" / "XDS_ASCII.parquet").exists()
