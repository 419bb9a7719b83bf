"""Tests for the GFF, FASTA, VCF and depth readers."""

import gzip
from pathlib import Path
from uuid import UUID

import pytest

from pnps_utils.errors import InputFormatError
from pnps_utils.formats.depth import DepthMap, read_depth_file
from pnps_utils.formats.fasta import read_fasta
from pnps_utils.formats.files import open_text
from pnps_utils.formats.gff import Annotation, read_gff
from pnps_utils.formats.vcf import VariantRecord, VcfReader

UID1 = UUID("00000000-0000-0000-0000-000000000001")
UID2 = UUID("00000000-0000-0000-0000-000000000002")
UID3 = UUID("00000000-0000-0000-0000-000000000003")


@pytest.fixture
def gff_file(tmp_path):
    """GFF3 file with two CDS, a gene line and an embedded FASTA section."""
    path = tmp_path / "genes.gff"
    path.write_text(
        "##gff-version 3\n"
        f"seq1\tprodigal\tgene\t1\t9\t.\t+\t0\tuid={UID3}\n"
        f"seq1\tprodigal\tCDS\t1\t9\t.\t+\t0\tuid={UID1};name=test%3Bgene\n"
        f"seq2\tprodigal\tCDS\t4\t12\t.\t-\t0\tuid={UID2}\n"
        "##FASTA\n"
        ">seq1\n"
        "ATGGCTTAA\n"
    )
    return path


# ============================================================================
# Files
# ============================================================================

def test_open_text_gzip_roundtrip(tmp_path):
    """Test that .gz files are compressed on write and read back as text."""
    path = tmp_path / "data.txt.gz"
    with open_text(path, "w") as handle:
        handle.write("hello\n")

    with gzip.open(path, "rt") as handle:
        assert handle.read() == "hello\n"
    with open_text(path) as handle:
        assert handle.read() == "hello\n"


# ============================================================================
# GFF
# ============================================================================

def test_annotation_contains_is_one_based():
    """Test containment of 1-based positions in a 0-based half-open interval."""
    annotation = Annotation(uid=UID1, seq_id="seq1", start=0, end=9)

    assert not annotation.contains(0)
    assert annotation.contains(1)
    assert annotation.contains(9)
    assert not annotation.contains(10)
    assert len(annotation) == 9


def test_read_gff_cds_only(gff_file):
    """Test that only CDS features are read, with 0-based coordinates."""
    annotations = read_gff(gff_file)

    assert set(annotations) == {UID1, UID2}
    first = annotations[UID1]
    assert (first.seq_id, first.start, first.end, first.strand) == ("seq1", 0, 9, "+")
    second = annotations[UID2]
    assert (second.seq_id, second.start, second.end, second.strand) == ("seq2", 3, 12, "-")


def test_read_gff_other_feature_type(gff_file):
    """Test selecting a different feature type."""
    annotations = read_gff(gff_file, feature_type="gene")

    assert list(annotations) == [UID3]
    assert annotations[UID3].feature_type == "gene"


def test_read_gff_nested_cds(tmp_path):
    """Test that a CDS with a Parent gene is found under that gene."""
    path = tmp_path / "nested.gff"
    path.write_text(
        "##gff-version 3\n"
        f"seq1\tx\tgene\t1\t30\t.\t-\t.\tID=g1;uid={UID3}\n"
        f"seq1\tx\tCDS\t4\t30\t.\t-\t0\tID=c1;Parent=g1;uid={UID1}\n"
    )

    annotations = read_gff(path)

    assert set(annotations) == {UID1}
    cds = annotations[UID1]
    assert (cds.seq_id, cds.start, cds.end, cds.strand) == ("seq1", 3, 30, "-")


def test_read_gff_missing_uid(tmp_path):
    """Test that a CDS without uid attribute is an input error."""
    path = tmp_path / "bad.gff"
    path.write_text("##gff-version 3\nseq1\tx\tCDS\t1\t9\t.\t+\t0\tID=cds1\n")

    with pytest.raises(InputFormatError, match="Missing uid") as exc_info:
        read_gff(path)

    assert "cds1" in str(exc_info.value)
    assert exc_info.value.file_name == str(path)


def test_read_gff_bad_uid(tmp_path):
    """Test that a malformed uid is an input error."""
    path = tmp_path / "bad.gff"
    path.write_text("seq1\tx\tCDS\t1\t9\t.\t+\t0\tuid=not-a-uuid\n")

    with pytest.raises(InputFormatError, match="Cannot parse UID"):
        read_gff(path)


def test_read_gff_short_line(tmp_path):
    """Test that lines with too few columns are rejected."""
    path = tmp_path / "bad.gff"
    path.write_text("seq1\tx\tCDS\t1\t9\n")

    with pytest.raises(InputFormatError):
        read_gff(path)


def test_read_gff_not_utf8(tmp_path):
    """Test that a GFF file that is not UTF-8 names the file in the error."""
    path = tmp_path / "bad.gff"
    path.write_bytes(b"##gff-version 3\nseq1\tx\tCDS\t1\t9\t.\t+\t0\tuid=\xff\xfe\n")

    with pytest.raises(InputFormatError) as exc_info:
        read_gff(path)

    assert exc_info.value.file_name == str(path)


# ============================================================================
# FASTA
# ============================================================================

def test_read_fasta_uppercases(tmp_path):
    """Test that sequences are keyed by id and upper cased."""
    path = tmp_path / "genome.fna"
    path.write_text(">seq1 some description\natggct\ntaa\n>seq2\nTTAAGCCAT\n")

    sequences = read_fasta(path)

    assert sequences == {"seq1": "ATGGCTTAA", "seq2": "TTAAGCCAT"}


def test_read_fasta_gzipped(tmp_path):
    """Test reading a gzipped FASTA file."""
    path = tmp_path / "genome.fna.gz"
    with gzip.open(path, "wt") as handle:
        handle.write(">seq1\nACGT\n")

    assert read_fasta(path) == {"seq1": "ACGT"}


def test_read_fasta_empty(tmp_path):
    """Test that a file without records is an input error."""
    path = tmp_path / "empty.fna"
    path.write_text("")

    with pytest.raises(InputFormatError):
        read_fasta(path)


def test_read_fasta_not_utf8(tmp_path):
    """Test that a FASTA file that is not UTF-8 names the file in the error."""
    path = tmp_path / "genome.fna"
    path.write_bytes(b">seq1\nACGT\xff\xfe\n")

    with pytest.raises(InputFormatError, match="Cannot decode") as exc_info:
        read_fasta(path)

    assert exc_info.value.file_name == str(path)


# ============================================================================
# VCF
# ============================================================================

VCF_HEADER = (
    "##fileformat=VCFv4.2\n"
    "##contig=<ID=seq1>\n"
    "##INFO=<ID=DP,Number=1,Type=Integer,Description=\"Raw read depth\">\n"
    "##INFO=<ID=INDEL,Number=0,Type=Flag,Description=\"Indel\">\n"
    "##INFO=<ID=NOTE,Number=1,Type=String,Description=\"Free text\">\n"
    "##FORMAT=<ID=GT,Number=1,Type=String,Description=\"Genotype\">\n"
    "##FORMAT=<ID=PL,Number=G,Type=Integer,Description=\"Phred likelihoods\">\n"
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tbams/A.bam\tbams/B.bam\n"
)


def test_vcf_reader_samples_and_records(tmp_path):
    """Test header sample names and parsed record fields."""
    path = tmp_path / "calls.vcf"
    path.write_text(
        VCF_HEADER
        + "seq1\t6\t.\tT\tC,G\t50\t.\tDP=12\tGT:PL\t0/1:0,1,2\t2/2:1,0,2\n"
        + "seq1\t7\t.\tTA\tT\t.\t.\tINDEL;DP=3\tGT\t1\t.\n"
    )

    with VcfReader(path) as reader:
        assert reader.sample_names == ["bams/A.bam", "bams/B.bam"]
        records = list(reader)

    assert len(records) == 2
    first = records[0]
    assert (first.chrom, first.pos, first.ref, first.alts) == ("seq1", 6, "T", ["C", "G"])
    assert first.qual == 50.0
    assert first.depth == 12
    assert not first.indel
    assert first.genotypes == {"bams/A.bam": (0, 1), "bams/B.bam": (2, 2)}

    second = records[1]
    assert second.indel
    assert second.qual == 0.0
    assert second.depth == 3
    assert second.genotypes["bams/A.bam"] == (1,)
    assert list(second.sample_snps()) == [("bams/A.bam", "T")]


def test_vcf_missing_header(tmp_path):
    """Test that a VCF without header is rejected."""
    path = tmp_path / "calls.vcf"
    path.write_text("seq1\t6\t.\tT\tC\t50\t.\tDP=12\n")

    with pytest.raises(InputFormatError, match="Cannot read VCF header"):
        VcfReader(path)


def test_vcf_bad_position(tmp_path):
    """Test that a non integer position reports the record number."""
    path = tmp_path / "calls.vcf"
    path.write_text(VCF_HEADER + "seq1\tsix\t.\tT\tC\t50\t.\tDP=12\tGT\t1\t0\n")

    with pytest.raises(InputFormatError, match="Cannot parse record 1") as exc_info:
        list(VcfReader(path))

    assert exc_info.value.file_name == str(path)


def test_vcf_non_utf8_info_value(tmp_path):
    """Test that stray bytes in a text INFO value do not stop the record."""
    path = tmp_path / "calls.vcf"
    path.write_bytes(
        VCF_HEADER.encode()
        + b"seq1\t6\t.\tT\tC\t50\t.\tDP=12;NOTE=\xff\xfe\tGT\t1\t0\n"
    )

    records = list(VcfReader(path))

    assert len(records) == 1
    assert records[0].depth == 12
    assert list(records[0].sample_snps()) == [("bams/A.bam", "C")]


def test_sample_snps_first_non_reference_allele():
    """Test that the first non reference allele of the genotype is the call."""
    record = VariantRecord(
        chrom="seq1",
        pos=6,
        ref="T",
        alts=["C", "G"],
        genotypes={
            "A": (0, 2),
            "B": (0, 0),
            "C": (None, None),
            "D": (1, 2),
            "E": (1,),
            "F": (3,),
        },
    )

    assert list(record.sample_snps()) == [("A", "G"), ("D", "C"), ("E", "C")]


# ============================================================================
# Depth
# ============================================================================

def test_depth_map_coverage():
    """Test floor mean coverage with missing positions counted as zero."""
    depth_map = DepthMap()
    depth_map.add_sequence("seq1", [1, 2, 3, 5], [10, 10, 10, 3])

    # [0, 5) holds 10 + 10 + 10 + 0 + 3
    assert depth_map.total_depth("seq1", 0, 5) == 33
    assert depth_map.coverage_at("seq1", 0, 5) == 6
    assert depth_map.coverage_at("seq1", 1, 3) == 10
    assert depth_map.coverage_at("seq1", 5, 9) == 0
    assert depth_map.coverage_at("other", 0, 5) == 0
    assert depth_map.coverage_at("seq1", 3, 3) == 0


def test_read_depth_file(tmp_path):
    """Test reading a samtools depth file, unsorted, extra columns ignored."""
    path = tmp_path / "A.depth"
    path.write_text(
        "seq1\t2\t8\t1\n"
        "seq1\t1\t4\t1\n"
        "seq2\t1\t20\t1\n"
        "seq1\t3\t6\t1\n"
    )

    depth_map = read_depth_file(path)

    assert len(depth_map) == 2
    assert "seq1" in depth_map
    assert depth_map.total_depth("seq1", 0, 3) == 18
    assert depth_map.coverage_at("seq1", 0, 3) == 6
    assert depth_map.coverage_at("seq2", 0, 1) == 20


def test_read_empty_depth_file(tmp_path):
    """Test that an empty depth file gives an empty map."""
    path = tmp_path / "empty.depth"
    path.write_text("")

    depth_map = read_depth_file(path)

    assert len(depth_map) == 0
    assert depth_map.coverage_at("seq1", 0, 9) == 0


def test_read_depth_file_bad_value(tmp_path):
    """Test that a non integer depth is an input error."""
    path = tmp_path / "bad.depth"
    path.write_text("seq1\t1\tmany\n")

    with pytest.raises(InputFormatError):
        read_depth_file(path)


def test_read_depth_file_missing_depth(tmp_path):
    """Test that an empty depth column is an input error naming the file."""
    path = tmp_path / "gap.depth"
    path.write_text("seq1\t1\t5\nseq1\t2\t\nseq1\t3\t7\n")

    with pytest.raises(InputFormatError, match="Missing values") as exc_info:
        read_depth_file(path)

    assert exc_info.value.file_name == str(path)


def test_read_depth_file_ragged_row(tmp_path):
    """Test that a row with too few columns is an input error."""
    path = tmp_path / "ragged.depth"
    path.write_text("seq1\t1\t5\nseq1\t2\nseq1\t3\t7\n")

    with pytest.raises(InputFormatError) as exc_info:
        read_depth_file(path)

    assert exc_info.value.file_name == str(path)


def test_read_depth_file_not_utf8(tmp_path):
    """Test that a depth file that is not UTF-8 is an input error."""
    path = tmp_path / "binary.depth"
    path.write_bytes(b"seq1\t1\t5\n\xff\xfe\t2\t6\n")

    with pytest.raises(InputFormatError):
        read_depth_file(path)


def test_read_depth_file_running_sum_per_sequence(tmp_path):
    """Test that running sums restart for every sequence."""
    path = tmp_path / "two.depth"
    path.write_text("seq2\t1\t100\nseq1\t1\t1\nseq1\t2\t2\nseq2\t2\t200\n")

    depth_map = read_depth_file(path)

    assert depth_map.total_depth("seq1", 0, 2) == 3
    assert depth_map.total_depth("seq1", 1, 2) == 2
    assert depth_map.total_depth("seq2", 0, 2) == 300
    assert depth_map.total_depth("seq2", 1, 2) == 200
