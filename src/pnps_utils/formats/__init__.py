"""Readers and writers for the file formats consumed by pnps-utils."""

from pnps_utils.formats.depth import DepthMap, read_depth_file
from pnps_utils.formats.fasta import read_fasta
from pnps_utils.formats.files import open_text
from pnps_utils.formats.gff import Annotation, read_gff
from pnps_utils.formats.maps import (
    GeneMap,
    LineageMap,
    TaxonMap,
    read_gene_map,
    read_lineage_map,
    read_taxon_map,
)
from pnps_utils.formats.sample_config import (
    SampleEntry,
    SampleInfo,
    build_sample_config,
    read_sample_config,
    write_sample_config,
)
from pnps_utils.formats.taxonomy import Taxon, Taxonomy
from pnps_utils.formats.vcf import VariantRecord, VcfReader

__all__ = [
    "Annotation",
    "read_gff",
    "read_fasta",
    "open_text",
    "DepthMap",
    "read_depth_file",
    "VariantRecord",
    "VcfReader",
    "GeneMap",
    "TaxonMap",
    "LineageMap",
    "read_gene_map",
    "read_taxon_map",
    "read_lineage_map",
    "SampleEntry",
    "SampleInfo",
    "read_sample_config",
    "build_sample_config",
    "write_sample_config",
    "Taxon",
    "Taxonomy",
]
