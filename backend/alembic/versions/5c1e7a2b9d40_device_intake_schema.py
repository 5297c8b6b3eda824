"""device intake schema

Revision ID: 5c1e7a2b9d40
Revises:
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '5c1e7a2b9d40'
down_revision = None
branch_labels = None
depends_on = None

_STATUS_CHECK = "status IN ('qc_required','repair','in_stock')"


def _device_columns():
    return [
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('color', sa.String(50)),
        sa.Column('status', sa.String(20), nullable=False, server_default=sa.text("'qc_required'")),
        sa.Column('grade_id', sa.Integer(), sa.ForeignKey('product_grades.id')),
        sa.Column('location_id', sa.Integer(), sa.ForeignKey('storage_locations.id')),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('app_users.id')),
        sa.Column('updated_by', sa.Integer(), sa.ForeignKey('app_users.id')),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade():
    op.create_table(
        'app_users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(50), nullable=False, unique=True),
        sa.Column('full_name', sa.String(100)),
        sa.Column('email', sa.String(200)),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default=sa.text("'viewer'")),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("role in ('viewer','intake','qc','admin')", name='CK_AppUser_Role'),
    )
    op.create_table(
        'suppliers',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('phone', sa.String(50)),
        sa.Column('email', sa.String(200)),
    )
    op.create_table(
        'purchase_orders',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('po_number', sa.String(50), nullable=False, unique=True),
        sa.Column('supplier_id', sa.Integer(), sa.ForeignKey('suppliers.id'), nullable=False),
        sa.Column('order_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default=sa.text("'pending'")),
        sa.Column('requires_qc', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('requires_repair', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.CheckConstraint("status IN ('draft','pending','received','cancelled')", name='CK_PO_Status'),
    )
    op.create_table(
        'storage_locations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('location_code', sa.String(20), nullable=False, unique=True),
        sa.Column('capacity', sa.Integer(), nullable=False, server_default=sa.text('50')),
        sa.CheckConstraint('capacity > 0', name='CK_Location_Capacity_Positive'),
    )
    op.create_table(
        'tac_codes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('tac_code', sa.String(8), nullable=False, unique=True),
        sa.Column('manufacturer', sa.String(100)),
        sa.Column('model_name', sa.String(200)),
    )
    op.create_table(
        'device_configurations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('manufacturer', sa.String(100), nullable=False),
        sa.Column('model_name', sa.String(200), nullable=False),
        sa.Column('available_colors', sa.JSON(), nullable=False),
        sa.Column('storage_options', sa.JSON(), nullable=False),
        sa.UniqueConstraint('manufacturer', 'model_name', name='UQ_DeviceConfig_Model'),
    )
    op.create_table(
        'product_grades',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('grade', sa.String(5), nullable=False, unique=True),
    )
    op.create_table(
        'cellular_devices',
        *_device_columns(),
        sa.Column('imei', sa.String(15), nullable=False, unique=True),
        sa.Column('tac_id', sa.Integer(), sa.ForeignKey('tac_codes.id'), nullable=False),
        sa.Column('storage_gb', sa.Integer()),
        sa.CheckConstraint(_STATUS_CHECK, name='CK_Cellular_Status'),
    )
    op.create_table(
        'serial_devices',
        *_device_columns(),
        sa.Column('serial_number', sa.String(100), nullable=False, unique=True),
        sa.Column('manufacturer', sa.String(100)),
        sa.Column('model_name', sa.String(200)),
        sa.CheckConstraint(_STATUS_CHECK, name='CK_Serial_Status'),
    )


def downgrade():
    op.drop_table('serial_devices')
    op.drop_table('cellular_devices')
    op.drop_table('product_grades')
    op.drop_table('device_configurations')
    op.drop_table('tac_codes')
    op.drop_table('storage_locations')
    op.drop_table('purchase_orders')
    op.drop_table('suppliers')
    op.drop_table('app_users')
