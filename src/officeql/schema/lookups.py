"""Lookup (reference) tables addressed as ``lookup:<name>``.

Every lookup table has ``id``, ``code`` and ``is_active``; the display text
lives in ``translations`` keyed by ``code`` unless the table is listed as
untranslated in the settings.
"""

from typing import Dict

from officeql.schema.models import LookupTableConfig

_OBJECT_TYPE_SCOPED = dict(extra_columns=("object_type_id",), filter_columns=("object_type_id",))

LOOKUP_TABLES: Dict[str, LookupTableConfig] = {
    lookup.name: lookup
    for lookup in (
        LookupTableConfig(name="languages", table_name="languages", translated=False),
        LookupTableConfig(name="object-types", table_name="object_types"),
        LookupTableConfig(name="object-statuses", table_name="object_statuses", **_OBJECT_TYPE_SCOPED),
        LookupTableConfig(name="sexes", table_name="sexes"),
        LookupTableConfig(name="salutations", table_name="salutations"),
        LookupTableConfig(name="product-categories", table_name="product_categories"),
        LookupTableConfig(name="countries", table_name="countries"),
        LookupTableConfig(name="address-types", table_name="address_types"),
        LookupTableConfig(name="address-area-types", table_name="address_area_types"),
        LookupTableConfig(name="contact-types", table_name="contact_types"),
        LookupTableConfig(
            name="identification-types", table_name="identification_types", **_OBJECT_TYPE_SCOPED
        ),
        LookupTableConfig(name="transaction-types", table_name="transaction_types"),
        LookupTableConfig(name="currencies", table_name="currencies", translated=False),
        LookupTableConfig(
            name="object-relation-types",
            table_name="object_relation_types",
            extra_columns=("parent_object_type_id", "child_object_type_id", "mirrored_type_id"),
            filter_columns=("parent_object_type_id", "child_object_type_id"),
        ),
        LookupTableConfig(name="note-types", table_name="note_types"),
        LookupTableConfig(name="document-types", table_name="document_types"),
        LookupTableConfig(name="audit-actions", table_name="audit_actions", **_OBJECT_TYPE_SCOPED),
    )
}
