"""
======================================================
Reserved metadata columns of engine-managed tables.
======================================================

These names are never user data. Records may set them directly by name
(no column-mapping entry required); the writer fills defaults for the
ones a record leaves out.
"""

from typing import Dict, Tuple

COLUMN_NAME_AB_RAW_ID = '_airbyte_raw_id'
COLUMN_NAME_AB_EXTRACTED_AT = '_airbyte_extracted_at'
COLUMN_NAME_AB_LOADED_AT = '_airbyte_loaded_at'
COLUMN_NAME_AB_GENERATION_ID = '_airbyte_generation_id'
COLUMN_NAME_AB_CDC_DELETED_AT = '_ab_cdc_deleted_at'

# Ordered: DDL and copy statements list them in this order
META_COLUMNS: Tuple[str, ...] = (
    COLUMN_NAME_AB_RAW_ID,
    COLUMN_NAME_AB_EXTRACTED_AT,
    COLUMN_NAME_AB_LOADED_AT,
    COLUMN_NAME_AB_GENERATION_ID,
    COLUMN_NAME_AB_CDC_DELETED_AT,
)

# PostgreSQL column definitions
META_COLUMN_DEFINITIONS: Dict[str, str] = {
    COLUMN_NAME_AB_RAW_ID: 'VARCHAR(64) NOT NULL',
    COLUMN_NAME_AB_EXTRACTED_AT: 'TIMESTAMP WITH TIME ZONE NOT NULL',
    COLUMN_NAME_AB_LOADED_AT: 'TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT CURRENT_TIMESTAMP',
    COLUMN_NAME_AB_GENERATION_ID: 'BIGINT NOT NULL DEFAULT 0',
    COLUMN_NAME_AB_CDC_DELETED_AT: 'TIMESTAMP WITH TIME ZONE',
}

DEFAULT_GENERATION_ID = 0


def is_meta_column(name: str) -> bool:
    """Return True if ``name`` is one of the reserved metadata columns."""
    return name in META_COLUMN_DEFINITIONS
