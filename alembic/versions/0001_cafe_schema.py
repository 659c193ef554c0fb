"""cafe schema: profiles, catalog, tables, coupons, orders, settings

Revision ID: 0001_cafe_schema
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_cafe_schema"
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum("customer", "admin", name="user_role")
discount_type = sa.Enum("percent", "fixed", name="discount_type")
order_status = sa.Enum("pending", "preparing", "ready", "served", name="order_status")
payment_status = sa.Enum("pending", "completed", name="payment_status")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("full_name", sa.String(128), nullable=True),
        sa.Column("role", user_role, nullable=False, server_default="customer"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "menu_items",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "category_id",
            sa.Integer,
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("image_url", sa.String(512), nullable=True),
        sa.Column("available", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "cafe_tables",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("table_number", sa.Integer, nullable=False, unique=True),
        sa.Column("capacity", sa.Integer, nullable=False, server_default="2"),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.CheckConstraint("capacity > 0", name="ck_cafe_tables_capacity_positive"),
    )

    op.create_table(
        "coupons",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("code", sa.String(64), nullable=False, unique=True),
        sa.Column("discount_type", discount_type, nullable=False),
        sa.Column("discount_value", sa.Numeric(10, 2), nullable=False),
        sa.Column("min_order", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("max_uses", sa.Integer, nullable=False, server_default="100"),
        sa.Column("used_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("used_count >= 0", name="ck_coupons_used_count_non_negative"),
        sa.CheckConstraint("used_count <= max_uses", name="ck_coupons_used_count_within_cap"),
        sa.CheckConstraint("max_uses > 0", name="ck_coupons_max_uses_positive"),
        sa.CheckConstraint("discount_value > 0", name="ck_coupons_discount_value_positive"),
    )
    op.create_index("ix_coupons_code", "coupons", ["code"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("order_number", sa.String(32), nullable=True, unique=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("table_id", sa.Integer, sa.ForeignKey("cafe_tables.id", ondelete="SET NULL"), nullable=True),
        sa.Column("coupon_id", sa.Integer, sa.ForeignKey("coupons.id", ondelete="SET NULL"), nullable=True),
        sa.Column("subtotal", sa.Numeric(10, 2), nullable=False),
        sa.Column("discount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("total", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", order_status, nullable=False, server_default="pending"),
        sa.Column("payment_id", sa.String(64), nullable=True, unique=True),
        sa.Column("payment_status", payment_status, nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])
    op.create_index("ix_orders_status", "orders", ["status"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("menu_item_id", sa.Integer, sa.ForeignKey("menu_items.id"), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
    )

    op.create_table(
        "cafe_settings",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("cafe_name", sa.String(128), nullable=False),
        sa.Column("logo_url", sa.String(512), nullable=False, server_default=""),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("cafe_settings")
    op.drop_table("order_items")
    op.drop_index("ix_orders_status", table_name="orders")
    op.drop_index("ix_orders_user_id", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_coupons_code", table_name="coupons")
    op.drop_table("coupons")
    op.drop_table("cafe_tables")
    op.drop_table("menu_items")
    op.drop_table("categories")
    op.drop_table("profiles")

    bind = op.get_bind()
    for enum_type in (payment_status, order_status, discount_type, user_role):
        enum_type.drop(bind, checkfirst=True)
