"""init ledger tables

Revision ID: 0001_init
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


# (index name, column, unique)
INDEXES = {
    "companies": [("ix_companies_id", "id", False), ("ix_companies_code", "code", True)],
    "suppliers": [
        ("ix_suppliers_id", "id", False),
        ("ix_suppliers_name", "name", False),
        ("ix_suppliers_code", "code", True),
    ],
    "hotels": [
        ("ix_hotels_id", "id", False),
        ("ix_hotels_name", "name", False),
        ("ix_hotels_code", "code", True),
    ],
    "sales": [
        ("ix_sales_id", "id", False),
        ("ix_sales_company_id", "company_id", False),
        ("ix_sales_hotel_id", "hotel_id", False),
    ],
    "purchases": [
        ("ix_purchases_id", "id", False),
        ("ix_purchases_company_id", "company_id", False),
        ("ix_purchases_supplier_id", "supplier_id", False),
    ],
    "payments": [("ix_payments_id", "id", False), ("ix_payments_sale_id", "sale_id", False)],
}


def _inspector():
    from sqlalchemy import inspect as sa_inspect
    return sa_inspect(op.get_bind())


def _directory_columns(with_tax_id: bool) -> list:
    cols = [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("contact_person", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
    ]
    if with_tax_id:
        cols.append(sa.Column("tax_id", sa.String(), nullable=True))
    cols.append(sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()))
    return cols


def upgrade() -> None:
    inspector = _inspector()
    existing_tables = set(inspector.get_table_names())

    if "companies" not in existing_tables:
        op.create_table(
            "companies",
            *_directory_columns(with_tax_id=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)")),
        )

    if "suppliers" not in existing_tables:
        op.create_table(
            "suppliers",
            *_directory_columns(with_tax_id=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)")),
        )

    if "hotels" not in existing_tables:
        op.create_table("hotels", *_directory_columns(with_tax_id=False))

    if "sales" not in existing_tables:
        op.create_table(
            "sales",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=True),
            sa.Column("hotel_id", sa.Integer(), sa.ForeignKey("hotels.id"), nullable=False),
            sa.Column("date", sa.DateTime(timezone=True), nullable=False),
            sa.Column("quantity", sa.Numeric(10, 2), nullable=False),
            sa.Column("rate_per_kg", sa.Numeric(10, 2), nullable=False),
            sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)")),
        )

    if "purchases" not in existing_tables:
        op.create_table(
            "purchases",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=True),
            sa.Column("supplier_id", sa.Integer(), sa.ForeignKey("suppliers.id"), nullable=False),
            sa.Column("date", sa.DateTime(timezone=True), nullable=True),
            sa.Column("quantity", sa.Numeric(10, 2), nullable=False),
            sa.Column("rate_per_kg", sa.Numeric(10, 2), nullable=False),
            sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
            sa.Column("invoice_number", sa.String(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)")),
        )

    if "payments" not in existing_tables:
        op.create_table(
            "payments",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("sale_id", sa.Integer(), sa.ForeignKey("sales.id"), nullable=False),
            sa.Column("amount", sa.Numeric(12, 2), nullable=False),
            sa.Column("payment_date", sa.DateTime(timezone=True), nullable=False),
            sa.Column("payment_method", sa.String(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)")),
        )

    inspector = _inspector()
    for table, specs in INDEXES.items():
        idxs = {idx["name"] for idx in inspector.get_indexes(table)}
        for name, column, unique in specs:
            if name not in idxs:
                op.create_index(name, table, [column], unique=unique)


def downgrade() -> None:
    for table in ("payments", "purchases", "sales", "hotels", "suppliers", "companies"):
        for name, _, _ in INDEXES[table]:
            op.drop_index(name, table_name=table)
        op.drop_table(table)
