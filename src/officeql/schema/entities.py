"""Built-in entity configurations.

Shared primary key entities (persons, companies, users, invoices,
transactions, documents, files) own a row in ``objects`` with the same id.
Child entities (addresses, contacts, identifications, notes, relations,
audits) have their own auto-increment id and point at an object through
their parent column.
"""

from typing import Dict

from officeql.constants import (
    ColumnType,
    DeletePolicy,
    IdentityModel,
    JoinType,
    SortDirection,
)
from officeql.schema.models import ColumnDefinition, EntityConfig, JoinDefinition

_OBJECT_JOIN_COLUMNS = ("object_status_id", "object_type_id")


def _col(name: str, type_: ColumnType, **kwargs) -> ColumnDefinition:
    return ColumnDefinition(name=name, type=type_, **kwargs)


def _object_join(alias: str) -> JoinDefinition:
    return JoinDefinition(
        table="objects",
        alias="o",
        type=JoinType.INNER,
        on=f"o.id = {alias}.id",
        columns=_OBJECT_JOIN_COLUMNS,
    )


def _audit_columns(*, created_by: bool = True, updated_at: bool = True):
    columns = [_col("is_active", ColumnType.BOOLEAN)]
    if created_by:
        columns.append(_col("created_by", ColumnType.BIGINT, nullable=True))
    columns.append(_col("created_at", ColumnType.TIMESTAMP))
    if updated_at:
        columns.append(_col("updated_at", ColumnType.TIMESTAMP))
    return columns


PERSONS = EntityConfig(
    table_name="persons",
    table_alias="p",
    object_type_code="person",
    identity=IdentityModel.SHARED_PRIMARY_KEY,
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("first_name", ColumnType.VARCHAR, searchable=True, track_changes=True),
        _col("middle_name", ColumnType.VARCHAR, nullable=True, track_changes=True),
        _col("last_name", ColumnType.VARCHAR, searchable=True, track_changes=True),
        _col("mother_name", ColumnType.VARCHAR, nullable=True, track_changes=True),
        _col("sex_id", ColumnType.INTEGER, nullable=True, track_changes=True),
        _col("salutation_id", ColumnType.INTEGER, nullable=True, track_changes=True),
        _col("birth_date", ColumnType.DATE, nullable=True, track_changes=True),
    ),
    default_select_columns=(
        "id", "first_name", "middle_name", "last_name", "mother_name",
        "sex_id", "salutation_id", "birth_date",
    ),
    search_columns=("first_name", "last_name"),
    default_sort_column="last_name",
    default_sort_direction=SortDirection.ASC,
    joins=(_object_join("p"),),
    delete_policy=DeletePolicy.OBJECT_CASCADE,
    filter_columns=("sex_id", "salutation_id"),
    display_name_columns=("first_name", "last_name"),
)

COMPANIES = EntityConfig(
    table_name="companies",
    table_alias="c",
    object_type_code="company",
    identity=IdentityModel.SHARED_PRIMARY_KEY,
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("company_id", ColumnType.VARCHAR, searchable=True, track_changes=True),
        _col("company_name", ColumnType.VARCHAR, searchable=True, track_changes=True),
    ),
    default_select_columns=("id", "company_id", "company_name"),
    search_columns=("company_id", "company_name"),
    default_sort_column="company_name",
    default_sort_direction=SortDirection.ASC,
    joins=(_object_join("c"),),
    delete_policy=DeletePolicy.OBJECT_CASCADE,
    display_name_columns=("company_name",),
)

USERS = EntityConfig(
    table_name="users",
    table_alias="u",
    object_type_code="user",
    identity=IdentityModel.SHARED_PRIMARY_KEY,
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("username", ColumnType.VARCHAR, searchable=True, track_changes=True),
    ),
    default_select_columns=("id", "username"),
    search_columns=("username",),
    default_sort_column="username",
    default_sort_direction=SortDirection.ASC,
    joins=(_object_join("u"),),
    delete_policy=DeletePolicy.OBJECT_CASCADE,
    display_name_columns=("username",),
)

INVOICES = EntityConfig(
    table_name="invoices",
    table_alias="i",
    object_type_code="invoice",
    identity=IdentityModel.SHARED_PRIMARY_KEY,
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("transaction_id", ColumnType.BIGINT, nullable=True),
        _col("invoice_number", ColumnType.VARCHAR, searchable=True, track_changes=True),
        _col("issue_date", ColumnType.DATE, track_changes=True),
        _col("due_date", ColumnType.DATE, nullable=True, track_changes=True),
        _col("payment_date", ColumnType.DATE, nullable=True, track_changes=True),
        _col("partner_id_from", ColumnType.BIGINT, nullable=True),
        _col("partner_id_to", ColumnType.BIGINT, nullable=True),
        _col("note", ColumnType.TEXT, nullable=True, track_changes=True),
        _col("reference_number", ColumnType.VARCHAR, nullable=True, searchable=True,
             track_changes=True),
        _col("is_mirror", ColumnType.BOOLEAN, nullable=True),
        _col("currency_id", ColumnType.INTEGER, track_changes=True),
        _col("netto_amount", ColumnType.DECIMAL, nullable=True, track_changes=True),
        _col("tax", ColumnType.DECIMAL, nullable=True, track_changes=True),
        _col("final_amount", ColumnType.DECIMAL, nullable=True, track_changes=True),
        _col("is_paid", ColumnType.BOOLEAN, track_changes=True),
        _col("is_void", ColumnType.BOOLEAN, track_changes=True),
    ),
    default_select_columns=(
        "id", "transaction_id", "invoice_number", "issue_date", "due_date",
        "payment_date", "partner_id_from", "partner_id_to", "note",
        "reference_number", "is_mirror", "currency_id", "netto_amount", "tax",
        "final_amount", "is_paid", "is_void",
    ),
    search_columns=("invoice_number", "reference_number"),
    default_sort_column="issue_date",
    default_sort_direction=SortDirection.DESC,
    joins=(_object_join("i"),),
    delete_policy=DeletePolicy.OBJECT_CASCADE,
    filter_columns=("transaction_id", "currency_id", "is_paid", "is_void"),
    display_name_columns=("invoice_number",),
)

TRANSACTIONS = EntityConfig(
    table_name="transactions",
    table_alias="t",
    object_type_code="transaction",
    identity=IdentityModel.SHARED_PRIMARY_KEY,
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("transaction_type_id", ColumnType.INTEGER, track_changes=True),
        _col("transaction_date_start", ColumnType.TIMESTAMP, track_changes=True),
        _col("transaction_date_end", ColumnType.TIMESTAMP, nullable=True, track_changes=True),
        _col("is_active", ColumnType.BOOLEAN),
        _col("note", ColumnType.TEXT, nullable=True, searchable=True, track_changes=True),
        _col("created_at", ColumnType.TIMESTAMP),
        _col("updated_at", ColumnType.TIMESTAMP),
    ),
    default_select_columns=(
        "id", "transaction_type_id", "transaction_date_start",
        "transaction_date_end", "is_active", "note",
    ),
    search_columns=("note",),
    default_sort_column="transaction_date_start",
    default_sort_direction=SortDirection.DESC,
    joins=(_object_join("t"),),
    delete_policy=DeletePolicy.SOFT,
    filter_columns=("transaction_type_id",),
)

DOCUMENTS = EntityConfig(
    table_name="documents",
    table_alias="d",
    object_type_code="document",
    identity=IdentityModel.SHARED_PRIMARY_KEY,
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("title_code", ColumnType.VARCHAR, track_changes=True),
        _col("document_type_id", ColumnType.INTEGER, nullable=True, track_changes=True),
        _col("document_date", ColumnType.DATE, nullable=True, track_changes=True),
        _col("document_number", ColumnType.VARCHAR, nullable=True, searchable=True,
             track_changes=True),
        _col("expiry_date", ColumnType.DATE, nullable=True, track_changes=True),
        *_audit_columns(),
    ),
    default_select_columns=(
        "id", "title_code", "document_type_id", "document_date",
        "document_number", "expiry_date", "is_active", "created_by",
        "created_at", "updated_at",
    ),
    search_columns=("document_number",),
    default_sort_column="created_at",
    default_sort_direction=SortDirection.DESC,
    joins=(_object_join("d"),),
    translation_columns=("title_code",),
    delete_policy=DeletePolicy.SOFT,
    filter_columns=("document_type_id",),
    display_name_columns=("title_code",),
)

FILES = EntityConfig(
    table_name="files",
    table_alias="f",
    object_type_code="file",
    identity=IdentityModel.SHARED_PRIMARY_KEY,
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("filename", ColumnType.VARCHAR, searchable=True, track_changes=True),
        _col("original_filename", ColumnType.VARCHAR, nullable=True, track_changes=True),
        _col("file_path", ColumnType.TEXT, nullable=True, track_changes=True),
        _col("mime_type", ColumnType.VARCHAR, nullable=True, track_changes=True),
        _col("file_size", ColumnType.BIGINT, nullable=True, track_changes=True),
        _col("upload_date", ColumnType.TIMESTAMP),
        _col("checksum", ColumnType.VARCHAR, nullable=True),
        _col("storage_type", ColumnType.VARCHAR, nullable=True, track_changes=True),
        _col("bucket_name", ColumnType.VARCHAR, nullable=True, track_changes=True),
        _col("storage_key", ColumnType.VARCHAR, nullable=True, track_changes=True),
        *_audit_columns(),
    ),
    default_select_columns=(
        "id", "filename", "original_filename", "file_path", "mime_type",
        "file_size", "upload_date", "checksum", "storage_type", "bucket_name",
        "storage_key", "is_active", "created_by", "created_at", "updated_at",
    ),
    search_columns=("filename", "original_filename"),
    default_sort_column="created_at",
    default_sort_direction=SortDirection.DESC,
    joins=(_object_join("f"),),
    delete_policy=DeletePolicy.SOFT,
    filter_columns=("mime_type", "storage_type"),
    display_name_columns=("filename",),
)

ADDRESSES = EntityConfig(
    table_name="object_addresses",
    table_alias="a",
    object_type_code="address",
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("object_id", ColumnType.BIGINT),
        _col("address_type_id", ColumnType.INTEGER, track_changes=True),
        _col("street_address_1", ColumnType.VARCHAR, track_changes=True),
        _col("street_address_2", ColumnType.VARCHAR, nullable=True, track_changes=True),
        _col("address_area_type_id", ColumnType.INTEGER, nullable=True, track_changes=True),
        _col("city", ColumnType.VARCHAR, searchable=True, track_changes=True),
        _col("state_province", ColumnType.VARCHAR, nullable=True, track_changes=True),
        _col("postal_code", ColumnType.VARCHAR, nullable=True, track_changes=True),
        _col("country_id", ColumnType.INTEGER, track_changes=True),
        _col("latitude", ColumnType.DECIMAL, nullable=True),
        _col("longitude", ColumnType.DECIMAL, nullable=True),
        *_audit_columns(),
    ),
    default_select_columns=(
        "id", "object_id", "address_type_id", "street_address_1",
        "street_address_2", "address_area_type_id", "city", "state_province",
        "postal_code", "country_id", "latitude", "longitude", "is_active",
        "created_by", "created_at", "updated_at",
    ),
    search_columns=("city", "street_address_1"),
    default_sort_column="created_at",
    default_sort_direction=SortDirection.DESC,
    delete_policy=DeletePolicy.SOFT,
    parent_column="object_id",
    filter_columns=("address_type_id", "country_id"),
)

CONTACTS = EntityConfig(
    table_name="object_contacts",
    table_alias="oc",
    object_type_code="contact",
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("object_id", ColumnType.BIGINT),
        _col("contact_type_id", ColumnType.INTEGER, track_changes=True),
        _col("contact_value", ColumnType.VARCHAR, searchable=True, track_changes=True),
        *_audit_columns(),
    ),
    default_select_columns=(
        "id", "object_id", "contact_type_id", "contact_value", "is_active",
        "created_by", "created_at", "updated_at",
    ),
    search_columns=("contact_value",),
    default_sort_column="created_at",
    default_sort_direction=SortDirection.DESC,
    delete_policy=DeletePolicy.SOFT,
    parent_column="object_id",
    filter_columns=("contact_type_id",),
)

IDENTIFICATIONS = EntityConfig(
    table_name="object_identifications",
    table_alias="oi",
    object_type_code="identification",
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("object_id", ColumnType.BIGINT),
        _col("identification_type_id", ColumnType.INTEGER, track_changes=True),
        _col("identification_value", ColumnType.VARCHAR, searchable=True, track_changes=True),
        *_audit_columns(),
    ),
    default_select_columns=(
        "id", "object_id", "identification_type_id", "identification_value",
        "is_active", "created_by", "created_at", "updated_at",
    ),
    search_columns=("identification_value",),
    default_sort_column="created_at",
    default_sort_direction=SortDirection.DESC,
    delete_policy=DeletePolicy.SOFT,
    parent_column="object_id",
    filter_columns=("identification_type_id",),
)

NOTES = EntityConfig(
    table_name="object_notes",
    table_alias="n",
    object_type_code="note",
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("object_id", ColumnType.BIGINT),
        _col("note_type_id", ColumnType.INTEGER, nullable=True, track_changes=True),
        _col("subject_code", ColumnType.VARCHAR, nullable=True, track_changes=True),
        _col("note_text_code", ColumnType.VARCHAR, track_changes=True),
        _col("is_pinned", ColumnType.BOOLEAN),
        *_audit_columns(),
    ),
    default_select_columns=(
        "id", "object_id", "note_type_id", "subject_code", "note_text_code",
        "is_pinned", "is_active", "created_by", "created_at", "updated_at",
    ),
    default_sort_column="created_at",
    default_sort_direction=SortDirection.DESC,
    translation_columns=("subject_code", "note_text_code"),
    delete_policy=DeletePolicy.SOFT,
    parent_column="object_id",
    filter_columns=("note_type_id", "is_pinned"),
    pinned_column="is_pinned",
)

RELATIONS = EntityConfig(
    table_name="object_relations",
    table_alias="rel",
    object_type_code="relation",
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("object_from_id", ColumnType.BIGINT),
        _col("object_to_id", ColumnType.BIGINT),
        _col("object_relation_type_id", ColumnType.INTEGER, track_changes=True),
        _col("note", ColumnType.TEXT, nullable=True, track_changes=True),
        *_audit_columns(),
    ),
    default_select_columns=(
        "id", "object_from_id", "object_to_id", "object_relation_type_id",
        "note", "is_active", "created_by", "created_at", "updated_at",
    ),
    default_sort_column="created_at",
    default_sort_direction=SortDirection.DESC,
    delete_policy=DeletePolicy.SOFT,
    parent_column="object_from_id",
    filter_columns=("object_to_id", "object_relation_type_id"),
)

AUDITS = EntityConfig(
    table_name="object_audits",
    table_alias="oa",
    object_type_code="audit",
    columns=(
        _col("id", ColumnType.BIGINT, is_primary_key=True),
        _col("object_id", ColumnType.BIGINT),
        _col("audit_action_id", ColumnType.INTEGER),
        _col("created_by", ColumnType.BIGINT, nullable=True),
        _col("old_values", ColumnType.JSON, nullable=True),
        _col("new_values", ColumnType.JSON, nullable=True),
        _col("ip_address", ColumnType.VARCHAR, nullable=True),
        _col("user_agent", ColumnType.TEXT, nullable=True),
        _col("notes", ColumnType.TEXT, nullable=True),
        _col("created_at", ColumnType.TIMESTAMP),
    ),
    default_select_columns=(
        "id", "object_id", "audit_action_id", "created_by", "old_values",
        "new_values", "ip_address", "user_agent", "notes", "created_at",
    ),
    default_sort_column="created_at",
    default_sort_direction=SortDirection.DESC,
    delete_policy=DeletePolicy.HARD,
    parent_column="object_id",
    filter_columns=("audit_action_id", "created_by"),
)

# Entity type token -> configuration
ENTITY_CONFIGS: Dict[str, EntityConfig] = {
    "persons": PERSONS,
    "companies": COMPANIES,
    "users": USERS,
    "invoices": INVOICES,
    "transactions": TRANSACTIONS,
    "documents": DOCUMENTS,
    "files": FILES,
    "object_addresses": ADDRESSES,
    "object_contacts": CONTACTS,
    "object_identifications": IDENTIFICATIONS,
    "object_notes": NOTES,
    "object_relations": RELATIONS,
    "object_audits": AUDITS,
}
