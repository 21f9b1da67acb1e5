# tests/test_reports_stats.py
"""
Tests for statements, reports, exports and dashboard statistics.
"""

from decimal import Decimal

import pytest
from dateutil.relativedelta import relativedelta

from investments.services import InvestmentService
from ledger.models import LedgerEntry
from ledger.reports import (
    AUDIT_HEADERS, export_ledger_workbook, get_investment_report, get_member_statement,
    render_member_statement_pdf,
)
from ledger.services import DepositService, ExpenseService
from ledger.stats import get_branch_summary, get_collection_trend, get_paid_member_ids, get_society_summary
from members.services import MemberService
from members.stats import get_member_dashboard, get_member_statistics


@pytest.mark.django_db
class TestMemberStatement:

    def test_running_share_total(self, primary_account, members, today):
        last_month = today - relativedelta(months=1)
        DepositService.process_deposit_batch([members[0].pk], last_month.month, last_month.year)
        DepositService.process_deposit_batch([members[0].pk])

        statement = get_member_statement(members[0].pk)

        assert [row["running_share_total"] for row in statement["entries"]] == [
            Decimal("2000.00"), Decimal("4000.00")
        ]
        assert statement["summary"]["closing_share_total"] == Decimal("4000.00")
        assert statement["summary"]["lifetime_deposited"] == Decimal("4000.00")
        assert statement["member"]["member_number"] == members[0].member_number

    def test_date_range_opening_total(self, primary_account, members, today):
        DepositService.process_deposit_batch([members[0].pk])
        LedgerEntry.objects.filter(member=members[0]).update(date=today - relativedelta(days=40))
        DepositService.process_deposit_batch([members[0].pk])

        statement = get_member_statement(members[0].pk, start_date=today - relativedelta(days=5))

        assert statement["summary"]["opening_share_total"] == Decimal("2000.00")
        assert len(statement["entries"]) == 1
        assert statement["summary"]["closing_share_total"] == Decimal("4000.00")


@pytest.mark.django_db
class TestInvestmentReport:

    def test_report(self, funded_account):
        investment = InvestmentService.fund_investment("Dairy", "20000", funded_account.pk)
        InvestmentService.record_investment_outcome(investment.pk, "5000", "profit", funded_account.pk)
        InvestmentService.record_investment_outcome(investment.pk, "1000", "expense", funded_account.pk)

        report = get_investment_report(investment.pk)

        assert report["project"]["net_yield"] == Decimal("4000.00")
        assert report["project"]["roi"] == Decimal("20.00")
        assert report["summary"]["total_inflow"] == Decimal("5000.00")
        assert report["summary"]["total_outflow"] == Decimal("21000.00")
        assert report["summary"]["transaction_count"] == 3


@pytest.mark.django_db
class TestLedgerExport:

    def test_workbook(self, primary_account, funded_account, members, categories):
        DepositService.process_deposit_batch([m.pk for m in members])
        ExpenseService.add_expense("500", funded_account.pk, "rent")

        ws = export_ledger_workbook().active

        assert [cell.value for cell in ws[1]] == AUDIT_HEADERS
        # header, opening balance, three deposits, expense, blank, total
        assert ws.max_row == 8
        assert ws.cell(row=ws.max_row, column=13).value == pytest.approx(105500.0)


@pytest.mark.django_db
class TestDashboards:

    def test_society_summary(self, primary_account, funded_account, members):
        DepositService.process_deposit_batch([m.pk for m in members])
        InvestmentService.fund_investment("Dairy", "20000", funded_account.pk)

        summary = get_society_summary()

        assert summary["share_deposits"] == Decimal("6000.00")
        assert summary["total_investments"] == Decimal("20000.00")
        assert summary["treasury_balance"] == Decimal("86000.00")
        assert summary["active_members"] == 3
        assert summary["account_count"] == 2

    def test_collection_trend(self, primary_account, members, today):
        DepositService.process_deposit_batch([members[0].pk], 1, today.year)
        DepositService.process_deposit_batch([members[1].pk, members[2].pk], 3, today.year)

        trend = get_collection_trend(today.year)

        assert [(row["month"], row["total"]) for row in trend] == [
            (1, Decimal("2000.00")), (3, Decimal("4000.00"))
        ]
        assert trend[0]["name"] == "Jan"

    def test_paid_member_ids(self, primary_account, make_member, today):
        dhaka = make_member(branch="Dhaka")
        ctg = make_member(branch="Chattogram")
        make_member(branch="Chattogram")
        DepositService.process_deposit_batch([dhaka.pk, ctg.pk])

        assert set(get_paid_member_ids(today.month, today.year)) == {dhaka.pk, ctg.pk}
        assert get_paid_member_ids(today.month, today.year, branch="Chattogram") == [ctg.pk]

    def test_branch_summary(self, primary_account, make_member):
        member = make_member(branch="Sylhet", shares=3)
        DepositService.process_deposit_batch([member.pk])

        summary = get_branch_summary("Sylhet")

        assert summary["data"] == [{"kind": "DEPOSIT", "total_amount": Decimal("3000.00"), "count": 1}]

    def test_member_statistics(self, members):
        MemberService.set_status(members[2].pk, "INACTIVE")

        stats = get_member_statistics()

        assert stats["total_members"] == 3
        assert stats["active_members"] == 2
        assert stats["total_shares"] == 4

    def test_member_dashboard(self, primary_account, members):
        DepositService.process_deposit_batch([members[0].pk])

        dashboard = get_member_dashboard(members[0].pk)

        assert dashboard["paid_this_month"]
        assert dashboard["months_paid"] == 1
        assert dashboard["lifetime_deposited"] == Decimal("2000.00")
        assert dashboard["fine"] == Decimal("0")


@pytest.mark.django_db
class TestStatementPdf:

    def test_renders_pdf(self, primary_account, members, fine_policy):
        DepositService.process_deposit_batch([members[0].pk])

        pdf = render_member_statement_pdf(members[0].pk)

        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000
