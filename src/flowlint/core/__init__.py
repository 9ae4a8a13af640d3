"""Core - document model, tree queries, flow complexity, file discovery."""

from flowlint.core.complexity import (
    ComplexityDetail,
    ComplexityResult,
    calculate_flow_complexity,
    complexity_label,
)
from flowlint.core.discovery import (
    PROJECT_MARKERS,
    ScannedFile,
    find_project_root,
    matches_glob,
    scan_directory,
)
from flowlint.core.document import Document, Element, ParseResult, looks_like_xml, parse_xml
from flowlint.core.query import (
    QueryError,
    attribute,
    column_of,
    compile_path,
    count,
    exists,
    has_attribute,
    line_of,
    select_all,
    select_first,
)

__all__ = [
    "PROJECT_MARKERS",
    "ComplexityDetail",
    "ComplexityResult",
    "Document",
    "Element",
    "ParseResult",
    "QueryError",
    "ScannedFile",
    "attribute",
    "calculate_flow_complexity",
    "column_of",
    "compile_path",
    "complexity_label",
    "count",
    "exists",
    "find_project_root",
    "has_attribute",
    "line_of",
    "looks_like_xml",
    "matches_glob",
    "parse_xml",
    "scan_directory",
    "select_all",
    "select_first",
]
