"""
Unit tests for the declarative model mapping.
"""
from sqlalchemy import UniqueConstraint, inspect

from shopcore.models.base import Base
from shopcore.models.tenant_document import TenantDocument


class TestMapping:

    def test_tenant_document_maps_tenant_id(self):
        mapper = inspect(TenantDocument)

        column = mapper.columns["tenant_id"]

        assert column.nullable is False
        assert [fk.target_fullname for fk in column.foreign_keys] == ["tenants.id"]

    def test_all_tables_registered(self):
        assert {
            "tenants",
            "users",
            "tenant_documents",
            "ledger_entities",
            "ledger_transactions",
        } <= set(Base.metadata.tables)

    def test_document_key_unique_per_tenant(self):
        table = TenantDocument.__table__

        unique_sets = [
            {column.name for column in constraint.columns}
            for constraint in table.constraints
            if isinstance(constraint, UniqueConstraint)
        ] + [
            {column.name for column in index.columns}
            for index in table.indexes
            if index.unique
        ]

        assert {"tenant_id", "key"} in unique_sets
