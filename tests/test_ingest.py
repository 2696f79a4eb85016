"""
Tests for format adapters, ingestion readers and format handlers.
"""

import math

import gemmi
import numpy as np
import pytest

from hklmerge.adapters import (
    MERGED_CATEGORY,
    ReflectionTable,
    RowSource,
    SourceMetadata,
    find_reflection_block,
    read_block_metadata,
    read_cif_document,
    read_mtz_table,
    read_xds_table,
    table_from_block,
    table_from_mtz,
)
from hklmerge.config import MergeOptions
from hklmerge.enums import DataKind, SignTag
from hklmerge.errors import DomainError, FormatMismatch, SchemaError, UnsupportedFormatError
from hklmerge.ingest import (
    CifHandler,
    FormatRegistry,
    MtzHandler,
    XdsHandler,
    read_anomalous_intensities_from_mmcif,
    read_anomalous_intensities_from_mtz,
    read_data,
    read_mean_intensities_from_mmcif,
    read_mean_intensities_from_mtz,
    read_unmerged_intensities_from_mmcif,
    read_unmerged_intensities_from_mtz,
    read_unmerged_intensities_from_xds,
    select_columns,
)
from hklmerge.models import Intensities, MillerIndex
from hklmerge.tools import FileType

P1 = gemmi.find_spacegroup_by_name("P 1")
CELL = gemmi.UnitCell(50, 60, 70, 90, 90, 90)


def unmerged_table(rows, labels=("H", "K", "L", "M/ISYM", "BATCH", "I", "SIGI")):
    """Unmerged MTZ-like table in P 1 with two batch headers."""
    metadata = SourceMetadata(
        unit_cell=CELL,
        spacegroup=P1,
        merged=False,
        batch_cells=[(50.0, 60.0, 70.0, 90, 90, 90), (52.0, 62.0, 72.0, 90, 90, 90)],
    )
    return ReflectionTable(
        list(labels),
        np.array(rows, dtype=np.float64),
        metadata=metadata,
        column_wavelengths={"I": 1.54},
    )


def cif_block(text):
    return gemmi.cif.read_string(text).sole_block()


class TestReflectionTable:
    """Tests for the numpy-backed row source."""

    def test_row_contract(self):
        table = ReflectionTable(["H", "K", "L", "I"], [[1, 2, 3, 10.0], [-1, 0, 2, 5.0]])

        assert isinstance(table, RowSource)
        assert table.row_count == 2
        assert table.row_stride == 4
        assert table.lattice_index_at(1) == MillerIndex(-1, 0, 2)
        assert table.numeric_field_at(0, 3) == pytest.approx(10.0)

    def test_missing_index(self):
        table = ReflectionTable(["H", "K", "L", "I"], [[1, 2, 3, 10.0], [math.nan, 2, 3, 5.0]])

        with pytest.raises(SchemaError, match="row 2"):
            table.lattice_index_at(1)

    def test_column_lookup(self):
        table = ReflectionTable(["H", "K", "L", "IMEAN", "SIGIMEAN"], np.zeros((0, 5)))

        assert table.column_index("IMEAN") == 3
        assert table.find_column(["I", "IMEAN"]) == "IMEAN"
        assert table.find_column(["F"]) is None
        with pytest.raises(SchemaError, match="Column not found: I"):
            table.column_index("I")

    def test_shape_mismatch(self):
        with pytest.raises(SchemaError):
            ReflectionTable(["H", "K", "L"], [[1, 2, 3, 4]])

    def test_missing_index_columns(self):
        with pytest.raises(SchemaError):
            ReflectionTable(["A", "B", "C"], [[1, 2, 3]])

    def test_empty(self):
        table = ReflectionTable(["H", "K", "L"], np.array([]))
        assert len(table) == 0

    def test_average_batch_cell(self):
        cell = unmerged_table([]).metadata.average_batch_cell()
        assert cell.a == pytest.approx(51.0)
        assert cell.c == pytest.approx(71.0)
        assert SourceMetadata().average_batch_cell() is None


class TestCoreStrategies:
    """Tests for the format-independent strategies."""

    def test_read_data(self):
        table = ReflectionTable(
            ["H", "K", "L", "I", "SIGI"],
            [[1, 2, 3, 10.0, 2.0], [0, 0, 1, math.nan, 1.0], [1, 1, 1, 5.0, 0.0]],
        )
        intensities = Intensities(spacegroup=P1, unit_cell=CELL)

        added = read_data(intensities, table, 3, 4)

        assert added == 1
        assert intensities.data[0].hkl == (1, 2, 3)

    def test_offset_outside_row(self):
        table = ReflectionTable(["H", "K", "L"], [[1, 2, 3]])
        with pytest.raises(SchemaError):
            read_data(Intensities(spacegroup=P1, unit_cell=CELL), table, 3, 4)

    def test_select_columns(self):
        table = ReflectionTable(["H", "K", "L", "I", "SIGI"], np.zeros((0, 5)))
        assert select_columns(table, [("IMEAN", "SIGIMEAN"), ("I", "SIGI")]) == ("I", "SIGI")
        with pytest.raises(SchemaError):
            select_columns(table, [("F", "SIGF")])


class TestMtzReaders:
    """Tests for the MTZ readers."""

    def test_unmerged(self):
        table = unmerged_table(
            [
                [1, 2, 3, 1, 1, 10.0, 2.0],
                [1, 2, 3, 2, 1, 14.0, 2.0],
                [1, 2, 3, 1, 2, 12.0, 2.0],
                [0, 0, 1, 1, 2, math.nan, 1.0],
            ]
        )

        intensities = read_unmerged_intensities_from_mtz(table)

        assert len(intensities) == 3
        assert [o.sign for o in intensities] == [SignTag.PLUS, SignTag.MINUS, SignTag.PLUS]
        assert intensities.wavelength == pytest.approx(1.54)
        assert intensities.unit_cell.a == pytest.approx(51.0)

    def test_unmerged_original_indices(self):
        """Files with original indices and ISYM=1 are reduced afterwards."""
        table = unmerged_table([[-1, -2, -3, 1, 1, 14.0, 2.0]])

        intensities = read_unmerged_intensities_from_mtz(table)

        assert intensities.data[0].hkl == (1, 2, 3)
        assert intensities.data[0].sign == SignTag.MINUS

    def test_unmerged_isym_position(self):
        table = unmerged_table(
            [[1, 2, 3, 1, 1, 10.0, 2.0]],
            labels=("H", "K", "L", "BATCH", "M/ISYM", "I", "SIGI"),
        )
        with pytest.raises(SchemaError, match="4th column"):
            read_unmerged_intensities_from_mtz(table)

    def test_unmerged_on_merged_file(self, merged_mtz):
        with pytest.raises(FormatMismatch):
            read_unmerged_intensities_from_mtz(table_from_mtz(merged_mtz))

    def test_merged_reader_on_unmerged_file(self):
        table = unmerged_table([[1, 2, 3, 1, 1, 10.0, 2.0]])
        with pytest.raises(FormatMismatch):
            read_mean_intensities_from_mtz(table)
        with pytest.raises(FormatMismatch):
            read_anomalous_intensities_from_mtz(table)

    def test_mean(self, merged_mtz):
        table = table_from_mtz(merged_mtz)

        intensities = read_mean_intensities_from_mtz(table)

        assert len(intensities) == 3
        assert not intensities.have_sign()
        assert intensities.spacegroup_str() == "P 21 21 21"
        assert intensities.wavelength == pytest.approx(0.9795)
        assert intensities.data[0].value == pytest.approx(100.0)

    def test_mean_labels_missing(self, merged_mtz):
        table = table_from_mtz(merged_mtz)
        with pytest.raises(SchemaError):
            read_mean_intensities_from_mtz(table, labels=("F", "I"))

    def test_anomalous(self, merged_mtz):
        intensities = read_anomalous_intensities_from_mtz(table_from_mtz(merged_mtz))

        assert len(intensities) == 4
        signs = [(o.hkl, o.sign) for o in intensities]
        assert ((1, 2, 3), SignTag.PLUS) in signs
        assert ((1, 2, 3), SignTag.MINUS) in signs
        assert ((2, 0, 0), SignTag.MINUS) in signs
        assert ((0, 0, 1), SignTag.PLUS) in signs

    def test_unknown_spacegroup(self):
        table = ReflectionTable(
            ["H", "K", "L", "IMEAN", "SIGIMEAN"],
            [[1, 2, 3, 10.0, 1.0]],
            metadata=SourceMetadata(unit_cell=CELL, spacegroup=None),
        )
        with pytest.raises(DomainError):
            read_mean_intensities_from_mtz(table)

    def test_read_file(self, merged_mtz_file):
        table = read_mtz_table(merged_mtz_file)
        assert table.labels[:3] == ["H", "K", "L"]
        assert table.metadata.merged
        assert table.row_count == 4

    def test_read_unmerged_file(self, unmerged_mtz_file):
        table = read_mtz_table(unmerged_mtz_file)

        assert not table.metadata.merged
        assert table.metadata.batch_cells == [(50.0, 60.0, 70.0, 90.0, 90.0, 90.0)]

        intensities = read_unmerged_intensities_from_mtz(table)

        assert [o.sign for o in intensities] == [SignTag.PLUS, SignTag.MINUS]
        assert intensities.wavelength == pytest.approx(1.54)

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_mtz_table(tmp_path / "missing.mtz")


class TestCifReaders:
    """Tests for the mmCIF readers."""

    def test_table_labels(self, cif_merged_file):
        block = find_reflection_block(read_cif_document(cif_merged_file))
        table = table_from_block(block, MERGED_CATEGORY)

        assert table.labels[:4] == ["index_h", "index_k", "index_l", "intensity_meas"]
        assert table.row_count == 4
        assert math.isnan(table.numeric_field_at(3, 3))

    def test_metadata(self, cif_merged_file):
        block = find_reflection_block(read_cif_document(cif_merged_file))
        metadata = read_block_metadata(block)

        assert metadata.spacegroup.number == 19
        assert metadata.unit_cell.b == pytest.approx(60.0)
        assert metadata.wavelength == pytest.approx(0.9795)
        assert metadata.merged

    def test_mean(self, cif_merged):
        intensities = read_mean_intensities_from_mmcif(cif_block(cif_merged))

        assert len(intensities) == 3
        assert intensities.wavelength == pytest.approx(0.9795)
        assert not intensities.have_sign()

    def test_anomalous(self, cif_merged):
        intensities = read_anomalous_intensities_from_mmcif(cif_block(cif_merged))
        assert len(intensities) == 4
        assert intensities.have_sign()

    def test_unmerged(self, cif_unmerged_file):
        block = find_reflection_block(read_cif_document(cif_unmerged_file))

        intensities = read_unmerged_intensities_from_mmcif(block)

        assert len(intensities) == 4
        assert intensities.data[1].hkl == (1, 2, 3)
        assert intensities.data[1].sign == SignTag.MINUS

    def test_unmerged_reader_on_merged_block(self, cif_merged):
        with pytest.raises(FormatMismatch):
            read_unmerged_intensities_from_mmcif(cif_block(cif_merged))

    def test_merged_reader_on_unmerged_block(self, cif_unmerged_file):
        block = find_reflection_block(read_cif_document(cif_unmerged_file))
        with pytest.raises(FormatMismatch):
            read_mean_intensities_from_mmcif(block)

    def test_missing_intensities(self, cif_merged):
        text = cif_merged.replace("_refln.intensity_meas", "_refln.F_meas_au")
        with pytest.raises(SchemaError):
            read_mean_intensities_from_mmcif(cif_block(text))

    def test_scalar_category(self):
        text = (
            "data_x\n_cell.length_a 10\n_cell.length_b 10\n_cell.length_c 10\n"
            "_cell.angle_alpha 90\n_cell.angle_beta 90\n_cell.angle_gamma 90\n"
            "_symmetry.Int_Tables_number 1\n"
            "_refln.index_h 1\n_refln.index_k 2\n_refln.index_l 3\n"
            "_refln.intensity_meas 10.0\n_refln.intensity_sigma 1.0\n"
        )
        with pytest.raises(SchemaError, match="must be a loop"):
            read_mean_intensities_from_mmcif(cif_block(text))

    def test_no_reflections(self):
        doc = gemmi.cif.read_string("data_x\n_cell.length_a 10\n")
        with pytest.raises(SchemaError):
            find_reflection_block(doc)

    def test_mmjson(self, tmp_path):
        path = tmp_path / "r1abcsf.json"
        path.write_text(
            '{"data_1ABC": {'
            '"cell": {"length_a": [50.0], "length_b": [60.0], "length_c": [70.0], '
            '"angle_alpha": [90.0], "angle_beta": [90.0], "angle_gamma": [90.0]}, '
            '"symmetry": {"Int_Tables_number": [19]}, '
            '"refln": {"index_h": [1, 2], "index_k": [2, 0], "index_l": [3, 0], '
            '"intensity_meas": [100.0, 40.0], "intensity_sigma": [5.0, 2.0]}}}'
        )
        block = find_reflection_block(read_cif_document(path))

        intensities = read_mean_intensities_from_mmcif(block)

        assert len(intensities) == 2
        assert intensities.spacegroup.number == 19


class TestXdsReader:
    """Tests for the XDS_ASCII reader."""

    def test_read(self, xds_file):
        _, table = read_xds_table(xds_file)

        intensities = read_unmerged_intensities_from_xds(table)

        # the negative-sigma record is dropped
        assert len(intensities) == 4
        assert intensities.wavelength == pytest.approx(0.9795)
        minus = [o for o in intensities if o.sign == SignTag.MINUS]
        assert [o.hkl for o in minus] == [(1, 2, 3)]

    def test_unknown_spacegroup(self, tmp_path, xds_content):
        path = tmp_path / "XDS_ASCII.HKL"
        path.write_text(xds_content.replace("NUMBER=   19", "NUMBER=   0"))
        _, table = read_xds_table(path)
        with pytest.raises(DomainError):
            read_unmerged_intensities_from_xds(table)

    def test_missing_cell(self, tmp_path, xds_content):
        path = tmp_path / "XDS_ASCII.HKL"
        lines = [line for line in xds_content.splitlines() if "UNIT_CELL" not in line]
        path.write_text("\n".join(lines) + "\n")
        _, table = read_xds_table(path)
        with pytest.raises(DomainError):
            read_unmerged_intensities_from_xds(table)


class TestFormatRegistry:
    """Tests for handler selection and kind detection."""

    def test_get_handler(self):
        assert FormatRegistry.get_handler(FileType.MTZ) is MtzHandler
        assert FormatRegistry.get_handler(FileType.MMCIF) is CifHandler
        assert FormatRegistry.get_handler(FileType.MMJSON) is CifHandler
        assert FormatRegistry.get_handler(FileType.XDS_ASCII) is XdsHandler

    def test_unknown_type(self):
        with pytest.raises(UnsupportedFormatError):
            FormatRegistry.get_handler(FileType.UNKNOWN)

    def test_list_formats(self):
        assert FormatRegistry.list_formats() == ["mmcif", "mmjson", "mtz", "xds_ascii"]

    def test_mtz_kinds(self, merged_mtz):
        table = table_from_mtz(merged_mtz)
        options = MergeOptions()

        assert MtzHandler.available_kinds(table, options) == [DataKind.MEAN, DataKind.ANOMALOUS]
        assert MtzHandler.detect_kind(table) == DataKind.MEAN
        assert MtzHandler.detect_kind(table, MergeOptions(anomalous=True)) == DataKind.ANOMALOUS

    def test_mtz_unmerged_kind(self):
        table = unmerged_table([[1, 2, 3, 1, 1, 10.0, 2.0]])
        assert MtzHandler.detect_kind(table) == DataKind.UNMERGED
        with pytest.raises(FormatMismatch):
            MtzHandler.read(table, DataKind.MEAN)

    def test_mtz_custom_labels(self, merged_mtz):
        table = table_from_mtz(merged_mtz)
        with pytest.raises(FormatMismatch):
            MtzHandler.read(table, DataKind.MEAN, MergeOptions(mean_labels=("F",)))

    def test_cif_handler(self, cif_merged_file):
        block = CifHandler.load(cif_merged_file)

        assert CifHandler.available_kinds(block, MergeOptions()) == [
            DataKind.MEAN,
            DataKind.ANOMALOUS,
        ]
        assert CifHandler.row_count(block) == 4
        assert len(CifHandler.read(block)) == 3

    def test_cif_unmerged_handler(self, cif_unmerged_file):
        block = CifHandler.load(cif_unmerged_file)
        assert CifHandler.detect_kind(block) == DataKind.UNMERGED
        with pytest.raises(FormatMismatch):
            CifHandler.read(block, DataKind.ANOMALOUS)

    def test_xds_handler(self, xds_file):
        table = XdsHandler.load(xds_file)
        assert XdsHandler.detect_kind(table) == DataKind.UNMERGED
        assert XdsHandler.row_count(table) == 5
        with pytest.raises(FormatMismatch):
            XdsHandler.read(table, DataKind.MEAN)
