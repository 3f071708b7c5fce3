"""loan-register — Keep a loan-agreement register in a spreadsheet grid."""

__version__ = "0.2.0"

HEADERS: list[str] = [
    "Serial No.",
    "Membership No.",
    "Name of Member",
    "Father/Husband Name",
    "Society Name & Address",
    "Loan Amount (Figures)",
    "Loan Amount (Words)",
    "Loan Start Month/Year",
    "Loan Installment Amount (Figures)",
    "Loan Installment Amount (Words)",
    "Number of Installments",
    "Share Value Amount (Figures)",
    "Share Value Amount (Words)",
    "Share Value Start Month/Year",
    "Fixed Deposit Amount (Figures)",
    "Fixed Deposit Amount (Words)",
    "Fixed Deposit Start Month/Year",
    "Employee Number (P.No.)",
    "Department Name",
    "Designation",
    "Salary Amount (Figures)",
    "Salary Amount (Words)",
    "Monthly Deduction Amount (Figures)",
    "Monthly Deduction Amount (Words)",
    "Total Deduction per Month (Figures)",
    "Total Deduction per Month (Words)",
    "Agreement Date",
    "Witness Name 1",
    "Witness Name 2",
    "Member Signature",
    "Manager Signature",
]

# Ordinal positions of the identity fields (Membership No., Employee Number).
MEMBERSHIP_NO_COLUMN = 1
EMPLOYEE_NO_COLUMN = 17
