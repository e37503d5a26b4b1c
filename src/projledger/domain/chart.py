"""Default chart of accounts for a project contractor."""

from projledger.domain.account import AccountService
from projledger.domain.entities import AccountType, CashflowActivity

A = AccountType

# (code, name, type, category)
DEFAULT_CHART_OF_ACCOUNTS: list[tuple[str, str, AccountType, str]] = [
    ("1101", "Cash", A.ASSET, "cash"),
    ("1102", "Bank BCA", A.ASSET, "bank"),
    ("1103", "Bank Mandiri", A.ASSET, "bank"),
    ("1104", "Bank BNI", A.ASSET, "bank"),
    ("1105", "Bank BRI", A.ASSET, "bank"),
    ("1201", "Accounts Receivable", A.ASSET, "receivable"),
    ("1301", "Work In Progress", A.ASSET, "wip"),
    ("1501", "Boring Machine", A.ASSET, "fixed asset"),
    ("1502", "Sondir Machine", A.ASSET, "fixed asset"),
    ("1503", "Operational Vehicles", A.ASSET, "fixed asset"),
    ("1504", "Office Equipment", A.ASSET, "fixed asset"),
    ("1505", "Office Building", A.ASSET, "fixed asset"),
    ("1601", "Accumulated Depreciation - Boring Machine", A.CONTRA_ASSET, "accumulated depreciation"),
    ("1602", "Accumulated Depreciation - Sondir Machine", A.CONTRA_ASSET, "accumulated depreciation"),
    ("1603", "Accumulated Depreciation - Vehicles", A.CONTRA_ASSET, "accumulated depreciation"),
    ("1604", "Accumulated Depreciation - Office Equipment", A.CONTRA_ASSET, "accumulated depreciation"),
    ("1605", "Accumulated Depreciation - Building", A.CONTRA_ASSET, "accumulated depreciation"),
    ("2101", "Short-term Bank Loan", A.LIABILITY, "current liability"),
    ("2102", "Accounts Payable", A.LIABILITY, "current liability"),
    ("2103", "Tax Payable", A.LIABILITY, "current liability"),
    ("2104", "Accrued Expenses", A.LIABILITY, "current liability"),
    ("2201", "Long-term Bank Loan", A.LIABILITY, "long-term liability"),
    ("2202", "Lease Payable", A.LIABILITY, "long-term liability"),
    ("3101", "Share Capital", A.EQUITY, "capital"),
    ("3102", "Retained Earnings", A.EQUITY, "capital"),
    ("4001", "Boring Service Revenue", A.REVENUE, "service revenue"),
    ("4002", "Sondir Service Revenue", A.REVENUE, "service revenue"),
    ("4003", "Consulting Revenue", A.REVENUE, "service revenue"),
    ("5101", "Project Expense - Material", A.EXPENSE, "project expense"),
    ("5102", "Project Expense - Labor", A.EXPENSE, "project expense"),
    ("5103", "Project Expense - Equipment Rental", A.EXPENSE, "project expense"),
    ("5104", "Project Expense - Transportation", A.EXPENSE, "project expense"),
    ("5105", "Project Expense - Other", A.EXPENSE, "project expense"),
    ("6101", "Office Operating Expense", A.EXPENSE, "operating expense"),
    ("6102", "Salaries and Benefits", A.EXPENSE, "operating expense"),
    ("6103", "Electricity and Water", A.EXPENSE, "operating expense"),
    ("6104", "Internet and Telecommunication", A.EXPENSE, "operating expense"),
    ("6105", "Depreciation Expense", A.EXPENSE, "depreciation"),
]

OPERATING = CashflowActivity.OPERATING
INVESTING = CashflowActivity.INVESTING
FINANCING = CashflowActivity.FINANCING

# (account code, activity, subcategory)
DEFAULT_CASHFLOW_CATEGORIES: list[tuple[str, CashflowActivity, str]] = [
    ("1101", OPERATING, "cash"),
    ("1102", OPERATING, "bank"),
    ("1103", OPERATING, "bank"),
    ("1104", OPERATING, "bank"),
    ("1105", OPERATING, "bank"),
    ("1201", OPERATING, "accounts_receivable"),
    ("1301", OPERATING, "wip"),
    ("4001", OPERATING, "revenue"),
    ("4002", OPERATING, "revenue"),
    ("4003", OPERATING, "revenue"),
    ("5101", OPERATING, "project_cost"),
    ("5102", OPERATING, "project_cost"),
    ("5103", OPERATING, "project_cost"),
    ("5104", OPERATING, "project_cost"),
    ("5105", OPERATING, "project_cost"),
    ("6101", OPERATING, "operational_expense"),
    ("6102", OPERATING, "operational_expense"),
    ("6103", OPERATING, "operational_expense"),
    ("6104", OPERATING, "operational_expense"),
    ("6105", OPERATING, "depreciation_expense"),
    ("1501", INVESTING, "fixed_asset"),
    ("1502", INVESTING, "fixed_asset"),
    ("1503", INVESTING, "fixed_asset"),
    ("1504", INVESTING, "fixed_asset"),
    ("1505", INVESTING, "fixed_asset"),
    ("1601", INVESTING, "accumulated_depreciation"),
    ("1602", INVESTING, "accumulated_depreciation"),
    ("1603", INVESTING, "accumulated_depreciation"),
    ("1604", INVESTING, "accumulated_depreciation"),
    ("1605", INVESTING, "accumulated_depreciation"),
    ("2101", FINANCING, "short_term_loan"),
    ("2201", FINANCING, "long_term_loan"),
    ("2202", FINANCING, "leasing"),
    ("3101", FINANCING, "share_capital"),
    ("3102", FINANCING, "retained_earnings"),
]


def install_default_chart(service: AccountService) -> tuple[int, int]:
    """Create missing default accounts and their cashflow classification.

    Existing accounts are left untouched.

    Returns:
        Tuple of (accounts created, accounts skipped)
    """
    created = 0
    skipped = 0
    for code, name, account_type, category in DEFAULT_CHART_OF_ACCOUNTS:
        if service.get_account(code) is not None:
            skipped += 1
            continue
        service.create_account(code, name, account_type, category)
        created += 1

    for code, activity, subcategory in DEFAULT_CASHFLOW_CATEGORIES:
        if service.get_cashflow_category(code) is None:
            service.set_cashflow_category(code, activity, subcategory)

    return created, skipped
