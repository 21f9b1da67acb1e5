# ledger/reports.py

"""
Read-only statements and reports built from the ledger.

Nothing here writes to the database.
"""

from django.db.models import QuerySet, Sum, Q
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.enums import TA_CENTER
from decimal import Decimal
from io import BytesIO
import logging

from core.exceptions import MemberNotFound, InvestmentNotFound
from core.utils import to_date, fetch_or_raise, get_base_currency, format_money, get_sacco_current_time
from .models import LedgerEntry

logger = logging.getLogger(__name__)


def _entry_row(entry):
    return {
        'id': entry.pk,
        'date': entry.date,
        'period_month': entry.period_month,
        'period_year': entry.period_year,
        'kind': entry.kind,
        'category': entry.category,
        'subcategory': entry.subcategory,
        'amount': entry.amount,
        'signed_amount': entry.signed_amount,
        'remarks': entry.remarks,
        'recorded_by_id': entry.recorded_by_id,
    }


# =============================================================================
# MEMBER STATEMENT
# =============================================================================

def get_member_statement(member_id, start_date=None, end_date=None):
    """
    Statement of a member's ledger history.

    Args:
        member_id: Member primary key
        start_date: Optional first date (inclusive)
        end_date: Optional last date (inclusive)

    Returns:
        dict: member, period, entries (with running share total), summary
    """
    from members.models import Member
    from fines.services import FineService

    member = fetch_or_raise(Member, member_id, MemberNotFound)

    entries = LedgerEntry.objects.filter(member=member).order_by('date', 'created_at')
    start = to_date(start_date, 'start_date') if start_date else None
    end = to_date(end_date, 'end_date') if end_date else None

    opening_shares = Decimal('0.00')
    if start:
        opening_shares = entries.filter(
            date__lt=start, category=LedgerEntry.MONTHLY_DEPOSIT, kind='DEPOSIT'
        ).aggregate(total=Sum('amount'))['total'] or Decimal('0.00')
        entries = entries.filter(date__gte=start)
    if end:
        entries = entries.filter(date__lte=end)

    rows = []
    running = opening_shares
    for entry in entries:
        if entry.is_share_deposit:
            running += entry.amount
        row = _entry_row(entry)
        row['running_share_total'] = running
        rows.append(row)

    totals = entries.aggregate(
        shares=Sum('amount', filter=Q(kind='DEPOSIT', category=LedgerEntry.MONTHLY_DEPOSIT)),
        fines_paid=Sum('amount', filter=Q(category=LedgerEntry.FINE_PAYMENT)),
        fines_waived=Sum('amount', filter=Q(category=LedgerEntry.FINE_WAIVER)),
    )
    accrual = FineService.get_member_fine(member)

    return {
        'member': {
            'id': member.pk,
            'member_number': member.member_number,
            'full_name': member.full_name,
            'branch': member.branch,
            'shares': member.shares,
            'monthly_installment': member.monthly_installment,
            'joining_date': member.joining_date,
            'status': member.status,
        },
        'period': {'start_date': start, 'end_date': end},
        'currency': get_base_currency(),
        'entries': rows,
        'summary': {
            'opening_share_total': opening_shares,
            'share_deposits': totals['shares'] or Decimal('0.00'),
            'fines_paid': totals['fines_paid'] or Decimal('0.00'),
            'fines_waived': totals['fines_waived'] or Decimal('0.00'),
            'closing_share_total': running,
            'lifetime_deposited': member.lifetime_deposited,
            'outstanding_fine': accrual['fine'],
            'overdue_months': accrual['months'],
        },
    }


# =============================================================================
# INVESTMENT REPORT
# =============================================================================

def get_investment_report(investment_id):
    """
    Performance report for an investment project.

    Inflow is everything the project paid back (profits, liquidation);
    outflow is its expenses plus the initial capital.

    Returns:
        dict: project, transactions, summary
    """
    from investments.models import Investment

    investment = fetch_or_raise(Investment, investment_id, InvestmentNotFound)
    entries = list(
        LedgerEntry.objects.filter(investment=investment).order_by('date', 'created_at')
    )

    total_inflow = sum((e.amount for e in entries if e.kind == 'DEPOSIT'), Decimal('0.00'))
    total_expenses = sum((e.amount for e in entries if e.kind == 'EXPENSE'), Decimal('0.00'))

    return {
        'project': {
            'id': investment.pk,
            'name': investment.project_name,
            'capital': investment.capital_amount,
            'net_yield': investment.cumulative_profit,
            'roi': investment.roi,
            'status': investment.status,
            'date': investment.date,
            'funding_account': str(investment.funding_account) if investment.funding_account else None,
            'recorded_by_id': investment.recorded_by_id,
            'remarks': investment.remarks,
        },
        'transactions': [_entry_row(entry) for entry in entries],
        'summary': {
            'total_inflow': total_inflow,
            'total_outflow': total_expenses + investment.capital_amount,
            'transaction_count': len(entries),
        },
    }


# =============================================================================
# PDF STATEMENT
# =============================================================================

def render_member_statement_pdf(member_id, start_date=None, end_date=None):
    """
    Member statement as a PDF document.

    Returns:
        bytes: the rendered PDF
    """
    from core.models import SaccoConfiguration

    statement = get_member_statement(member_id, start_date=start_date, end_date=end_date)
    member = statement['member']
    summary = statement['summary']

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=40,
        leftMargin=40,
        topMargin=40,
        bottomMargin=30,
    )

    elements = []

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'StatementTitle',
        parent=styles['Heading1'],
        fontSize=20,
        textColor=colors.HexColor('#4472C4'),
        spaceAfter=6,
        alignment=TA_CENTER,
    )
    subtitle_style = ParagraphStyle(
        'StatementSubtitle',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.grey,
        spaceAfter=16,
        alignment=TA_CENTER,
    )

    elements.append(Paragraph(SaccoConfiguration.get_instance().society_name, title_style))
    subtitle = f"Member Statement | Generated on: {get_sacco_current_time().strftime('%Y-%m-%d %H:%M')}"
    if statement['period']['start_date'] or statement['period']['end_date']:
        subtitle += f" | Period: {statement['period']['start_date'] or '...'} to {statement['period']['end_date'] or '...'}"
    elements.append(Paragraph(subtitle, subtitle_style))

    for label, value in (
        ('Member', f"{member['full_name']} ({member['member_number']})"),
        ('Branch', member['branch'] or '-'),
        ('Shares', member['shares']),
        ('Monthly Installment', format_money(member['monthly_installment'])),
    ):
        elements.append(Paragraph(f"<b>{label}:</b> {value}", styles['Normal']))
    elements.append(Spacer(1, 0.2*inch))

    data = [['Date', 'Period', 'Category', 'Amount', 'Share Total']]
    for row in statement['entries']:
        data.append([
            row['date'].strftime('%Y-%m-%d'),
            f"{row['period_month']:02d}/{row['period_year']}",
            row['category'].replace('_', ' ').title(),
            f"{row['amount']:,.2f}",
            f"{row['running_share_total']:,.2f}",
        ])

    table = Table(data, colWidths=[1.1*inch, 0.9*inch, 2*inch, 1.2*inch, 1.2*inch], repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#4472C4')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 9),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 10),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 8),
        ('ALIGN', (3, 1), (-1, -1), 'RIGHT'),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F5F5F5')]),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
    ]))
    elements.append(table)

    elements.append(Spacer(1, 0.3*inch))
    for label, value in (
        ('Share deposits', summary['share_deposits']),
        ('Lifetime deposited', summary['lifetime_deposited']),
        ('Fines paid', summary['fines_paid']),
        ('Fines waived', summary['fines_waived']),
        ('Outstanding fine', summary['outstanding_fine']),
    ):
        elements.append(Paragraph(f"<b>{label}:</b> {format_money(value)}", styles['Normal']))

    doc.build(elements)
    pdf = buffer.getvalue()
    buffer.close()

    logger.info(f"Rendered PDF statement for member {member['member_number']}")
    return pdf


# =============================================================================
# AUDIT EXPORT
# =============================================================================

AUDIT_HEADERS = [
    '#', 'Date', 'Period', 'Kind', 'Category', 'Subcategory', 'Member No.', 'Member',
    'Account', 'From Account', 'Investment', 'Amount', 'Signed Amount', 'Recorded By', 'Remarks',
]


def export_ledger_workbook(entries=None):
    """
    Full audit statement as an openpyxl workbook.

    Args:
        entries: LedgerEntry queryset or list (defaults to the whole ledger)

    Returns:
        Workbook
    """
    if entries is None:
        entries = LedgerEntry.objects.all()
    if isinstance(entries, QuerySet):
        entries = entries.select_related(
            'member', 'treasury_account', 'transfer_from_account', 'investment'
        ).order_by('date', 'created_at')

    wb = Workbook()
    ws = wb.active
    ws.title = "Ledger"

    # Define styles
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF", size=12)

    ws.append(AUDIT_HEADERS)
    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal='center')

    total = Decimal('0.00')
    count = 0
    for idx, entry in enumerate(entries, start=1):
        ws.append([
            idx,
            entry.date,
            f"{entry.period_month:02d}/{entry.period_year}",
            entry.get_kind_display(),
            entry.category,
            entry.subcategory or '',
            entry.member.member_number if entry.member else '',
            entry.member.full_name if entry.member else 'Society',
            str(entry.treasury_account) if entry.treasury_account else '',
            str(entry.transfer_from_account) if entry.transfer_from_account else '',
            entry.investment.project_name if entry.investment else '',
            float(entry.amount),
            float(entry.signed_amount),
            entry.recorded_by_id or '',
            entry.remarks or '',
        ])
        total += entry.signed_amount
        count = idx

    ws.append([])
    ws.append(['', '', '', '', '', '', '', '', '', '', 'Net cash movement', '', float(total)])
    ws.cell(row=ws.max_row, column=11).font = Font(bold=True)

    for column, width in zip('ABCDEFGHIJKLMNO', (6, 12, 10, 18, 22, 22, 12, 28, 28, 28, 24, 14, 14, 14, 40)):
        ws.column_dimensions[column].width = width

    logger.info(f"Exported {count} ledger entries")
    return wb
