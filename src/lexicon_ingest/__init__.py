__version__ = "0.1.0"

from .exceptions import (
    LexiconIngestError as LexiconIngestError,
    DataImportError as DataImportError,
    PatchTableError as PatchTableError,
    ReportError as ReportError,
)

from .models import (
    Example as Example,
    Definition as Definition,
    Sense as Sense,
    Subentry as Subentry,
    Lemma as Lemma,
    IssueType as IssueType,
    IntegrityIssue as IntegrityIssue,
    StructureGroup as StructureGroup,
    lemmas_to_json as lemmas_to_json,
)

from .markup import (
    normalize_markup as normalize_markup,
    strip_tags as strip_tags,
    strip_brackets as strip_brackets,
    Style as Style,
    Emphasis as Emphasis,
    to_spans as to_spans,
    from_spans as from_spans,
)

from .parser import (
    load_root as load_root,
    parse_document as parse_document,
    parse_xml_string as parse_xml_string,
    parse_xml_file as parse_xml_file,
    load_dictionary as load_dictionary,
)

from .signature import (
    node_signature as node_signature,
    analyze_structure as analyze_structure,
)

from .auditor import (
    audit_definitions as audit_definitions,
    audit_definition_markup as audit_definition_markup,
)

from .reports import write_report as write_report

from .search import (
    DictionaryIndex as DictionaryIndex,
    FilterOptions as FilterOptions,
)

# Patch layer - import as submodule to keep its names namespaced
from . import patches

__all__ = [
    # Patch layer
    "patches",
    # Exceptions
    "LexiconIngestError",
    "DataImportError",
    "PatchTableError",
    "ReportError",
    # Models
    "Example",
    "Definition",
    "Sense",
    "Subentry",
    "Lemma",
    "IssueType",
    "IntegrityIssue",
    "StructureGroup",
    "lemmas_to_json",
    # Markup
    "normalize_markup",
    "strip_tags",
    "strip_brackets",
    "Style",
    "Emphasis",
    "to_spans",
    "from_spans",
    # Parsing
    "load_root",
    "parse_document",
    "parse_xml_string",
    "parse_xml_file",
    "load_dictionary",
    # Diagnostics
    "node_signature",
    "analyze_structure",
    "audit_definitions",
    "audit_definition_markup",
    "write_report",
    # Queries
    "DictionaryIndex",
    "FilterOptions",
]
