"""
Data patch layer for lexicon-ingest.

Known defects in the source corpus are corrected in memory after parsing,
driven by a YAML table that maps headwords to repair operations. The
source XML is never modified.

Example usage:
    from lexicon_ingest.patches import (
        load_patch_table,
        validate_patch_table,
        apply_patches,
    )

    table = load_patch_table("patches.yaml")

    validation = validate_patch_table(table)
    if not validation.is_valid:
        for error in validation.errors:
            print(f"[{error.headword}] {error.operation}: {error.message}")

    lemmas = apply_patches(lemmas, table)
"""

from .schema import (
    # Enums and constants
    RepairOperation as RepairOperation,
    APPLICATION_ORDER as APPLICATION_ORDER,
    PLACEHOLDER_GLOSS as PLACEHOLDER_GLOSS,
    CROSS_REFERENCE_MARKER as CROSS_REFERENCE_MARKER,
    CROSS_REFERENCE_MAX_LENGTH as CROSS_REFERENCE_MAX_LENGTH,
    REQUIRED_PARAMS as REQUIRED_PARAMS,
    OPTIONAL_PARAMS as OPTIONAL_PARAMS,
    normalize_headword as normalize_headword,
    # Data classes
    PatchStep as PatchStep,
    PatchTable as PatchTable,
    PatchResult as PatchResult,
    PatchReport as PatchReport,
    ValidationError as ValidationError,
    ValidationWarning as ValidationWarning,
    ValidationResult as ValidationResult,
)

from .loader import (
    load_patch_table as load_patch_table,
    default_patch_table as default_patch_table,
    dump_patch_table as dump_patch_table,
)

from .validator import (
    validate_patch_table as validate_patch_table,
    suggest_patch_table as suggest_patch_table,
)

from .executor import (
    apply_patches as apply_patches,
    apply_patches_with_report as apply_patches_with_report,
)

__all__ = [
    # Enums and constants
    "RepairOperation",
    "APPLICATION_ORDER",
    "PLACEHOLDER_GLOSS",
    "CROSS_REFERENCE_MARKER",
    "CROSS_REFERENCE_MAX_LENGTH",
    "REQUIRED_PARAMS",
    "OPTIONAL_PARAMS",
    "normalize_headword",
    # Data classes
    "PatchStep",
    "PatchTable",
    "PatchResult",
    "PatchReport",
    "ValidationError",
    "ValidationWarning",
    "ValidationResult",
    # Functions
    "load_patch_table",
    "default_patch_table",
    "dump_patch_table",
    "validate_patch_table",
    "suggest_patch_table",
    "apply_patches",
    "apply_patches_with_report",
]
