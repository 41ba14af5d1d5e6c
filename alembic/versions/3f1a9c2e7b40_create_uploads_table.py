"""create uploads table

Revision ID: 3f1a9c2e7b40
Revises:
Create Date: 2026-10-12 10:24:18.402117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'uploads',
        sa.Column('id', sa.String(16), primary_key=True, comment='文件ID（对外公开的短ID）'),
        sa.Column('stored_name', sa.String(64), nullable=False, comment='磁盘文件名（ID+扩展名）'),
        sa.Column('display_name', sa.String(255), nullable=False, comment='展示名称（自定义名称或原始文件名）'),
        sa.Column('extension', sa.String(32), nullable=False, server_default='', comment='扩展名'),
        sa.Column('size_bytes', sa.BigInteger(), nullable=False, comment='文件大小（字节）'),
        sa.Column('content_type', sa.String(255), nullable=True, comment='文件MIME类型'),
        sa.Column('is_text', sa.Boolean(), nullable=False, server_default=sa.false(), comment='是否按文本内联展示'),
        sa.Column('expires_at', sa.DateTime(), nullable=True, comment='过期时间（空表示永不过期）'),
        sa.Column('created_at', sa.DateTime(), nullable=False, comment='创建时间'),
    )
    # 清理任务按 expires_at 扫描
    op.create_index('ix_uploads_expires_at', 'uploads', ['expires_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_uploads_expires_at', table_name='uploads')
    op.drop_table('uploads')
