"""create_hrms_tables

Создание таблиц пользователей, сотрудников, отпусков, посещаемости
и зарплатных ведомостей.

Revision ID: a1c9e4f27b3d
Revises:
Create Date: 2026-10-19 10:12:31.402118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c9e4f27b3d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Создание таблиц HRMS."""

    # === 1. USERS ===

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), server_default='EMPLOYEE', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # === 2. EMPLOYEES ===

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('employee_code', sa.String(length=50), nullable=False),
        sa.Column('department', sa.String(length=100), nullable=True),
        sa.Column('designation', sa.String(length=100), nullable=True),
        sa.Column('base_salary', sa.Numeric(12, 2), nullable=False),
        sa.Column('allowances', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('pf_applicable', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('professional_tax_applicable', sa.Boolean(), server_default='true', nullable=False),
        sa.Column('join_date', sa.Date(), nullable=False),
        sa.Column('bank_details', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='ACTIVE', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_employees_id', 'employees', ['id'])
    op.create_index('ix_employees_user_id', 'employees', ['user_id'], unique=True)
    op.create_index('ix_employees_employee_code', 'employees', ['employee_code'], unique=True)
    op.create_index('ix_employees_join_date', 'employees', ['join_date'])
    op.create_index('ix_employees_status', 'employees', ['status'])

    op.create_check_constraint('ck_employees_base_salary_non_negative', 'employees', 'base_salary >= 0')
    op.create_check_constraint('ck_employees_allowances_non_negative', 'employees', 'allowances >= 0')

    # === 3. TIME_OFF ===

    op.create_table(
        'time_off',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('from_date', sa.Date(), nullable=False),
        sa.Column('to_date', sa.Date(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='PENDING', nullable=False),
        sa.Column('approver_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['approver_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_time_off_id', 'time_off', ['id'])
    op.create_index('ix_time_off_employee_id', 'time_off', ['employee_id'])
    op.create_index('ix_time_off_from_date', 'time_off', ['from_date'])
    op.create_index('ix_time_off_to_date', 'time_off', ['to_date'])
    op.create_index('ix_time_off_type', 'time_off', ['type'])
    op.create_index('ix_time_off_status', 'time_off', ['status'])

    # === 4. ATTENDANCE ===

    op.create_table(
        'attendance',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('check_in', sa.DateTime(timezone=True), nullable=True),
        sa.Column('check_out', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_hours', sa.Numeric(5, 2), nullable=True),
        sa.Column('status', sa.String(length=20), server_default='PRESENT', nullable=False),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employee_id', 'date', name='uq_attendance_employee_date')
    )
    op.create_index('ix_attendance_id', 'attendance', ['id'])
    op.create_index('ix_attendance_employee_id', 'attendance', ['employee_id'])
    op.create_index('ix_attendance_date', 'attendance', ['date'])
    op.create_index('ix_attendance_status', 'attendance', ['status'])

    # === 5. PAYRUNS ===

    op.create_table(
        'payruns',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('period_start', sa.Date(), nullable=False),
        sa.Column('period_end', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='FINALIZED', nullable=False),
        sa.Column('total_gross', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_deductions', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_net', sa.Numeric(14, 2), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('period_start', 'period_end', name='uq_payruns_period')
    )
    op.create_index('ix_payruns_id', 'payruns', ['id'])
    op.create_index('ix_payruns_period_start', 'payruns', ['period_start'])
    op.create_index('ix_payruns_period_end', 'payruns', ['period_end'])
    op.create_index('ix_payruns_status', 'payruns', ['status'])

    # === 6. PAYRUN_LINES ===

    op.create_table(
        'payrun_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('payrun_id', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=False),
        sa.Column('gross', sa.Numeric(12, 2), nullable=False),
        sa.Column('unpaid_deduction', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('pf_employee', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('professional_tax', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('other_deductions', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('net', sa.Numeric(12, 2), nullable=False),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['payrun_id'], ['payruns.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['employee_id'], ['employees.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payrun_lines_id', 'payrun_lines', ['id'])
    op.create_index('ix_payrun_lines_payrun_id', 'payrun_lines', ['payrun_id'])
    op.create_index('ix_payrun_lines_employee_id', 'payrun_lines', ['employee_id'])

    # === 7. PAYSLIPS ===

    op.create_table(
        'payslips',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('payrun_line_id', sa.Integer(), nullable=False),
        sa.Column('file_path', sa.String(length=500), nullable=False),
        sa.Column('generated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['payrun_line_id'], ['payrun_lines.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payslips_id', 'payslips', ['id'])
    op.create_index('ix_payslips_payrun_line_id', 'payslips', ['payrun_line_id'], unique=True)


def downgrade() -> None:
    """Удаление таблиц HRMS."""
    op.drop_table('payslips')
    op.drop_table('payrun_lines')
    op.drop_table('payruns')
    op.drop_table('attendance')
    op.drop_table('time_off')
    op.drop_constraint('ck_employees_allowances_non_negative', 'employees', type_='check')
    op.drop_constraint('ck_employees_base_salary_non_negative', 'employees', type_='check')
    op.drop_table('employees')
    op.drop_table('users')
