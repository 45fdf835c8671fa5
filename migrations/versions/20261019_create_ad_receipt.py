"""create organization, user and ad_receipt tables"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261019'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'organization',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=160), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('organization_id', sa.Integer(), sa.ForeignKey('organization.id')),
        sa.Column('created_at', sa.DateTime()),
    )
    op.create_index('ix_user_email', 'user', ['email'], unique=True)
    op.create_index('ix_user_organization_id', 'user', ['organization_id'])
    op.create_table(
        'ad_receipt',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('organization_id', sa.Integer(), sa.ForeignKey('organization.id'), nullable=False),
        sa.Column('campaign_id', sa.String(length=64)),
        sa.Column('receipt_number', sa.String(length=40), nullable=False, unique=True),
        sa.Column('platform', sa.String(length=32), nullable=False),
        sa.Column('payment_method', sa.String(length=32), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2)),
        sa.Column('currency', sa.String(length=8)),
        sa.Column('amount_detected', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('detect_method', sa.String(length=24), nullable=False, server_default='NONE'),
        sa.Column('detect_reason', sa.String(length=255)),
        sa.Column('receipt_url', sa.String(length=255), nullable=False),
        sa.Column('original_filename', sa.String(length=255)),
        sa.Column('mime', sa.String(length=64)),
        sa.Column('size', sa.Integer()),
        sa.Column('qr_code_data', sa.Text()),
        sa.Column('file_hash', sa.String(length=64)),
        sa.Column('qr_hash', sa.String(length=64)),
        sa.Column('is_processed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('paid_at', sa.DateTime()),
        sa.Column('created_at', sa.DateTime()),
        sa.UniqueConstraint('organization_id', 'file_hash', name='uq_ad_receipt_org_file_hash'),
        sa.UniqueConstraint('organization_id', 'qr_hash', name='uq_ad_receipt_org_qr_hash'),
    )
    op.create_index('ix_ad_receipt_organization_id', 'ad_receipt', ['organization_id'])
    op.create_index('ix_ad_receipt_campaign_id', 'ad_receipt', ['campaign_id'])
    op.create_index('ix_ad_receipt_file_hash', 'ad_receipt', ['file_hash'])
    op.create_index('ix_ad_receipt_qr_hash', 'ad_receipt', ['qr_hash'])


def downgrade():
    op.drop_table('ad_receipt')
    op.drop_index('ix_user_organization_id', table_name='user')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_table('user')
    op.drop_table('organization')
