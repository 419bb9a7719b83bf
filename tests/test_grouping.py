"""Tests for grouping records by gene id, taxon and lineage."""

import math
from uuid import UUID

import pytest

from pnps_utils.config.schema import ResultType
from pnps_utils.pnps.grouping import group_pnps
from pnps_utils.pnps.models import GroupKey, GroupPnPs, PnPsRecord, divide, get_ratio, is_normal

UID1 = UUID("00000000-0000-0000-0000-000000000001")
UID2 = UUID("00000000-0000-0000-0000-000000000002")


@pytest.fixture
def pnps_map():
    return {
        "A": {
            UID1: PnPsRecord(uid=UID1, exp_syn=10, exp_nonsyn=20, syn=2, nonsyn=4),
            UID2: PnPsRecord(uid=UID2, exp_syn=30, exp_nonsyn=60, syn=2, nonsyn=2),
        },
        "B": {
            UID2: PnPsRecord(uid=UID2, exp_syn=30, exp_nonsyn=60, syn=3, nonsyn=0),
        },
    }


# ============================================================================
# Ratios
# ============================================================================

def test_divide_ieee_semantics():
    """Test x/0 as signed infinity and 0/0 as NaN."""
    assert divide(1, 4) == 0.25
    assert divide(3, 0) == math.inf
    assert divide(-3, 0) == -math.inf
    assert math.isnan(divide(0, 0))
    assert math.isnan(divide(math.nan, 0))


def test_is_normal():
    """Test the normal float predicate."""
    assert is_normal(0.2)
    assert is_normal(-1.0)
    assert not is_normal(0.0)
    assert not is_normal(5e-324)
    assert not is_normal(math.inf)
    assert not is_normal(math.nan)


def test_record_ratios():
    """Test pN, pS and pN/pS of a single record."""
    record = PnPsRecord(uid=UID1, exp_syn=10, exp_nonsyn=20, syn=2, nonsyn=4)

    assert record.get_pn() == pytest.approx(0.2)
    assert record.get_ps() == pytest.approx(0.2)
    assert record.get_pnps() == pytest.approx(1.0)
    assert get_ratio(record, ResultType.PN) == record.get_pn()
    assert record.get_value(ResultType.PS) == record.get_ps()


def test_record_without_synonymous_changes():
    """Test that pS of 0 gives an infinite pN/pS."""
    record = PnPsRecord(uid=UID1, exp_syn=10, exp_nonsyn=20, syn=0, nonsyn=4)

    assert record.get_pnps() == math.inf


def test_group_pools_counts():
    """Test that group ratios sum the member counts before dividing."""
    group = GroupPnPs(
        gene_id="K00001",
        pnps=[
            PnPsRecord(uid=UID1, exp_syn=10, exp_nonsyn=20, syn=2, nonsyn=4),
            PnPsRecord(uid=UID2, exp_syn=30, exp_nonsyn=60, syn=2, nonsyn=2),
        ],
    )

    assert group.key == GroupKey("K00001", 0, "")
    assert (group.syn, group.nonsyn, group.exp_syn, group.exp_nonsyn) == (4, 6, 40, 80)
    assert group.get_pn() == pytest.approx(0.075)
    assert group.get_ps() == pytest.approx(0.1)
    assert group.get_pnps() == pytest.approx(0.75)


def test_empty_group_is_nan():
    """Test that a group without members has NaN ratios."""
    assert math.isnan(GroupPnPs(gene_id="K00001").get_pnps())


# ============================================================================
# Grouping
# ============================================================================

def test_group_without_maps(pnps_map):
    """Test that without maps each UID is its own group with defaults."""
    grouped = group_pnps(pnps_map)

    assert list(grouped) == ["A", "B"]
    assert list(grouped["A"]) == [GroupKey(str(UID1), 0, ""), GroupKey(str(UID2), 0, "")]
    group = grouped["A"][GroupKey(str(UID1))]
    assert group.pnps == [pnps_map["A"][UID1]]


def test_group_with_maps(pnps_map):
    """Test that UIDs sharing gene, taxon and lineage share a group."""
    grouped = group_pnps(
        pnps_map,
        gene_map={UID1: ["K00001"], UID2: ["K00001"]},
        taxon_map={UID1: 3, UID2: 3},
    )

    assert list(grouped["A"]) == [GroupKey("K00001", 3, "")]
    group = grouped["A"][GroupKey("K00001", 3, "")]
    assert len(group.pnps) == 2
    assert list(grouped["B"]) == [GroupKey("K00001", 3, "")]


def test_group_with_lineage_map(pnps_map):
    """Test that lineage strings are part of the key."""
    grouped = group_pnps(
        pnps_map,
        gene_map={UID1: ["K00001"], UID2: ["K00001"]},
        lineage_map={UID1: "Bacteria", UID2: "Archaea"},
    )

    assert set(grouped["A"]) == {
        GroupKey("K00001", 0, "Bacteria"),
        GroupKey("K00001", 0, "Archaea"),
    }


def test_fan_out_shares_records(pnps_map):
    """Test that a UID with two gene ids feeds two groups with one record."""
    grouped = group_pnps(pnps_map, gene_map={UID1: ["K00001", "K00002"]})

    first = grouped["A"][GroupKey("K00001")]
    second = grouped["A"][GroupKey("K00002")]
    assert first.pnps[0] is second.pnps[0]
    assert first.pnps[0] is pnps_map["A"][UID1]
    assert first.get_pnps() == second.get_pnps()

    # later updates to the owned record are seen by both groups
    pnps_map["A"][UID1].nonsyn += 1
    assert first.nonsyn == second.nonsyn == 5
