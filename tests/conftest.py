"""
Shared fixtures: small reflection files in each supported format.

All fixtures use a P 21 21 21 crystal with a 50 x 60 x 70 Å cell, where
(0,0,l), (0,k,0) and (h,0,0) with odd index are systematically absent.
"""

import gemmi
import numpy as np
import pytest

CELL = (50.0, 60.0, 70.0, 90.0, 90.0, 90.0)

XDS_CONTENT = """\
!FORMAT=XDS_ASCII    MERGE=FALSE    FRIEDEL'S_LAW=FALSE
!OUTPUT_FILE=XDS_ASCII.HKL        DATE= 5-Jan-2024
!Generated by CORRECT   (VERSION Jan 10, 2022  BUILT=20220820)
!SPACE_GROUP_NUMBER=   19
!UNIT_CELL_CONSTANTS=    50.000    60.000    70.000  90.000  90.000  90.000
!X-RAY_WAVELENGTH=  0.979500
!NUMBER_OF_ITEMS_IN_EACH_DATA_RECORD=5
!ITEM_H=1
!ITEM_K=2
!ITEM_L=3
!ITEM_IOBS=4
!ITEM_SIGMA(IOBS)=5
!END_OF_HEADER
     1     2     3  1.000E+01  2.000E+00
    -1    -2    -3  1.400E+01  2.000E+00
     0     0     1  5.000E+00  1.000E+00
     0     0     2  8.000E+00  1.000E+00
     2     0     0  4.000E+01 -1.000E+00
!END_OF_DATA
"""

CIF_HEADER = """\
data_r1abcsf
_cell.length_a    50.000
_cell.length_b    60.000
_cell.length_c    70.000
_cell.angle_alpha 90.00
_cell.angle_beta  90.00
_cell.angle_gamma 90.00
_symmetry.space_group_name_H-M 'P 21 21 21'
_diffrn_radiation_wavelength.wavelength 0.9795
"""

CIF_MERGED = CIF_HEADER + """\
loop_
_refln.index_h
_refln.index_k
_refln.index_l
_refln.intensity_meas
_refln.intensity_sigma
_refln.pdbx_I_plus
_refln.pdbx_I_plus_sigma
_refln.pdbx_I_minus
_refln.pdbx_I_minus_sigma
1 2 3 100.0 5.0 102.0 6.0 98.0 6.0
2 0 0 40.0 2.0 ? ? 41.0 3.0
0 0 1 10.0 1.0 10.0 1.0 ? ?
3 4 5 ? ? ? ? ? ?
"""

CIF_UNMERGED = CIF_HEADER + """\
loop_
_diffrn_refln.index_h
_diffrn_refln.index_k
_diffrn_refln.index_l
_diffrn_refln.intensity_net
_diffrn_refln.intensity_sigma
1 2 3 10.0 2.0
-1 -2 -3 14.0 2.0
0 0 2 8.0 1.0
0 0 3 6.0 1.0
"""


@pytest.fixture
def xds_content():
    """XDS_ASCII file content: five records, one rejected (negative sigma)."""
    return XDS_CONTENT


@pytest.fixture
def xds_file(tmp_path, xds_content):
    """XDS_ASCII file on disk."""
    path = tmp_path / "XDS_ASCII.HKL"
    path.write_text(xds_content)
    return path


@pytest.fixture
def cif_header():
    """mmCIF header with cell, space group and wavelength but no reflections."""
    return CIF_HEADER


@pytest.fixture
def cif_merged():
    """mmCIF content with a merged _refln loop."""
    return CIF_MERGED


@pytest.fixture
def cif_merged_file(tmp_path):
    """mmCIF file with mean and anomalous intensities in _refln."""
    path = tmp_path / "r1abcsf.cif"
    path.write_text(CIF_MERGED)
    return path


@pytest.fixture
def cif_unmerged_file(tmp_path):
    """mmCIF file with unmerged intensities in _diffrn_refln."""
    path = tmp_path / "unmerged.cif"
    path.write_text(CIF_UNMERGED)
    return path


@pytest.fixture
def merged_mtz():
    """In-memory merged MTZ with IMEAN and I(+)/I(-) columns."""
    mtz = gemmi.Mtz(with_base=True)
    mtz.spacegroup = gemmi.find_spacegroup_by_name("P 21 21 21")
    mtz.set_cell_for_all(gemmi.UnitCell(*CELL))
    dataset = mtz.add_dataset("synthetic")
    dataset.wavelength = 0.9795
    for label, column_type in [
        ("IMEAN", "J"),
        ("SIGIMEAN", "Q"),
        ("I(+)", "K"),
        ("SIGI(+)", "M"),
        ("I(-)", "K"),
        ("SIGI(-)", "M"),
    ]:
        mtz.add_column(label, column_type)
    nan = float("nan")
    data = np.array(
        [
            [1, 2, 3, 100.0, 5.0, 102.0, 6.0, 98.0, 6.0],
            [2, 0, 0, 40.0, 2.0, nan, nan, 41.0, 3.0],
            [0, 0, 1, 10.0, 1.0, 10.0, 1.0, nan, nan],
            [3, 4, 5, nan, nan, nan, nan, nan, nan],
        ],
        dtype=np.float32,
    )
    mtz.set_data(data)
    return mtz


@pytest.fixture
def merged_mtz_file(tmp_path, merged_mtz):
    """Merged MTZ written to disk."""
    path = tmp_path / "scaled.mtz"
    merged_mtz.write_to_file(str(path))
    return path


@pytest.fixture
def unmerged_mtz_file(tmp_path):
    """Unmerged P 1 MTZ with one batch header, written to disk."""
    mtz = gemmi.Mtz(with_base=True)
    mtz.spacegroup = gemmi.find_spacegroup_by_name("P 1")
    mtz.set_cell_for_all(gemmi.UnitCell(*CELL))
    dataset = mtz.add_dataset("synthetic")
    dataset.wavelength = 1.54
    for label, column_type in [
        ("M/ISYM", "Y"),
        ("BATCH", "B"),
        ("I", "J"),
        ("SIGI", "Q"),
    ]:
        mtz.add_column(label, column_type)

    batch = gemmi.Mtz.Batch()
    batch.number = 1
    batch.cell = gemmi.UnitCell(*CELL)
    mtz.batches.append(batch)

    mtz.set_data(
        np.array(
            [
                [1, 2, 3, 1, 1, 10.0, 2.0],
                [1, 2, 3, 2, 1, 14.0, 2.0],
            ],
            dtype=np.float32,
        )
    )
    path = tmp_path / "unmerged.mtz"
    mtz.write_to_file(str(path))
    return path
