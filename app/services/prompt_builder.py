"""
System prompt assembly for the TaxSage chat assistant.

``build_prompt`` is a pure function: the only outside input is ``today``,
which callers may pass explicitly to get byte-identical output.
"""
import datetime as dt
import math
from typing import Dict, Iterable, List, Optional, Tuple, Union

from app.schemas.finance import ExpenseEntry, IncomeEntry, Profile, UserContext

NOT_PROVIDED = "Not provided"
RECENT_EXPENSES = 10
TOP_CATEGORIES = 3

PREAMBLE = (
    "You are TaxSage AI, a helpful Chartered Accountant and financial advisor specializing in "
    "Indian tax laws, loan eligibility, and financial planning.\n\n"
    "When users ask for roadmaps, plans, or strategies for financial goals (like buying something, "
    "saving, investing), provide detailed step-by-step actionable plans with specific timelines, "
    "amounts, and tax-saving strategies."
)

PROFILE_INCOMPLETE = (
    "CLIENT PROFILE INCOMPLETE: The user has not shared their financial profile yet. "
    "Give general guidance and encourage them to complete their profile (income, expenses, "
    "budget and goals) so you can personalise your advice."
)

CREDIT_NOT_ANALYZED = (
    "IMPORTANT: The user has NOT analyzed their credit score yet. For ANY loan-related queries, "
    "banking questions, or credit advice, you MUST first direct them to check their credit score "
    "by visiting the Credit Analysis page and using their Aadhaar and PAN. Say something like: "
    "\"Before I can provide specific loan advice, please first analyze your credit score by going "
    "to the Credit Analysis page and entering your Aadhaar and PAN. This will help me give you "
    "personalized recommendations based on your actual creditworthiness.\""
)

CLOSING = (
    "Provide practical, actionable advice considering Indian financial regulations, tax laws "
    "(Sections 80C, 80D, 24b, etc.), and current market conditions. Always refer to the client's "
    "concrete figures above when giving advice, and mention TaxSage when appropriate."
)

# (lower bound, band, guidance) from best to worst
CREDIT_BANDS: List[Tuple[int, str, str]] = [
    (750, "Excellent",
     "They qualify for premium loan products with lowest interest rates (7-9%). Suggest tax-efficient "
     "loans like home loans (Section 80C + 24b deductions up to ₹3.5L total)."),
    (720, "Very Good",
     "They qualify for good loan products with competitive rates (8-11%). Focus on home loans and "
     "business loans with tax benefits."),
    (680, "Good",
     "They qualify for standard loan products (9-13% rates). Focus on improving score while "
     "accessing necessary credit."),
    (650, "Fair",
     "They may get higher interest rates (12-16%). Suggest credit improvement before major loans."),
]
POOR_BAND = (
    "Poor",
    "They may face loan rejections or very high rates (15%+). Focus on credit repair strategies first.",
)


def credit_band(score: int) -> Tuple[str, str]:
    """Return ``(band, guidance)`` for a numeric credit score."""
    for lower, band, guidance in CREDIT_BANDS:
        if score >= lower:
            return band, guidance
    return POOR_BAND


def parse_credit_score(value: Union[int, float, str, None]) -> Optional[int]:
    """Request-level score; ``None`` for missing, ``"null"`` or unparsable values."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    else:
        text = value.strip()
        if not text or text.lower() in ("null", "undefined"):
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    # "Infinity", "NaN" and "1e999" parse as floats but have no integer value
    if not math.isfinite(number):
        return None
    return int(number)


def monthly_amount(entry: IncomeEntry) -> float:
    # Only "annual" is converted; every other frequency counts as monthly.
    if (entry.frequency or "").lower() == "annual":
        return entry.amount / 12
    return entry.amount


def monthly_income_total(entries: Iterable[IncomeEntry]) -> float:
    return sum(monthly_amount(e) for e in entries)


def months_remaining(target_date: dt.date, today: dt.date) -> int:
    return math.ceil((target_date - today).days / 30)


def summarize_expenses(entries: Iterable[ExpenseEntry]) -> Tuple[List[ExpenseEntry], Dict[str, float], List[Tuple[str, float]]]:
    """
    Most recent expenses (newest first), per-category totals over them, and
    the top categories by total.
    """
    recent = sorted(entries, key=lambda e: e.date, reverse=True)[:RECENT_EXPENSES]
    totals: Dict[str, float] = {}
    for expense in recent:
        totals[expense.category] = totals.get(expense.category, 0.0) + expense.amount
    top = sorted(totals.items(), key=lambda item: item[1], reverse=True)[:TOP_CATEGORIES]
    return recent, totals, top


def money(amount: float) -> str:
    return f"₹{amount:,.2f}"


def _or_default(value) -> str:
    if value is None or value == "":
        return NOT_PROVIDED
    return str(value)


def _format_date(value: str) -> str:
    try:
        parsed = dt.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%d %b %Y")


def _profile_section(profile: Profile, context: UserContext, today: dt.date) -> str:
    lines = [
        "CLIENT PROFILE:",
        f"- Name: {_or_default(profile.full_name)}",
        f"- Age: {_or_default(profile.age)}",
        f"- Location: {_or_default(profile.location)}",
        f"- Filing status: {_or_default(profile.filing_status)}",
        f"- Dependents: {_or_default(profile.dependents)}",
    ]

    if profile.credit_score is not None:
        band = profile.credit_band or credit_band(profile.credit_score)[0]
        lines.append("")
        lines.append("CREDIT ON FILE:")
        lines.append(f"- Score: {profile.credit_score} ({band})")
        if profile.credit_provider:
            lines.append(f"- Provider: {profile.credit_provider}")
        if profile.credit_retrieved_at:
            lines.append(f"- Retrieved: {profile.credit_retrieved_at.date().isoformat()}")

    if context.income:
        lines.append("")
        lines.append("INCOME:")
        for entry in context.income:
            lines.append(f"- {entry.source}: {money(entry.amount)} ({entry.frequency})")
        lines.append(f"- Total monthly income: {money(monthly_income_total(context.income))}")

    if context.expenses:
        recent, totals, top = summarize_expenses(context.expenses)
        lines.append("")
        lines.append(f"RECENT EXPENSES (last {len(recent)}):")
        for category, total in totals.items():
            lines.append(f"- {category}: {money(total)}")
        lines.append("- Top categories: " + ", ".join(f"{c} ({money(t)})" for c, t in top))

    if context.budget:
        lines.append("")
        lines.append("MONTHLY BUDGET:")
        for allocation in context.budget:
            lines.append(f"- {allocation.category}: {money(allocation.monthly_amount)}")
        total = sum(a.monthly_amount for a in context.budget)
        lines.append(f"- Total budgeted: {money(total)}")

    if context.goals:
        lines.append("")
        lines.append("FINANCIAL GOALS:")
        for goal in context.goals:
            line = f"- {goal.name}: {money(goal.target_amount)} by {goal.target_date.isoformat()}"
            months = months_remaining(goal.target_date, today)
            if months > 0:
                required = goal.target_amount / months
                line += f" ({months} months remaining, need to save {money(required)}/month)"
            lines.append(line)

    return "\n".join(lines)


def _credit_section(credit_score, credit_analysis_date: Optional[str]) -> str:
    score = parse_credit_score(credit_score)
    if score is None:
        return CREDIT_NOT_ANALYZED

    band, guidance = credit_band(score)
    analysed = _format_date(credit_analysis_date) if credit_analysis_date else "recently"
    return (
        f"IMPORTANT: The user has analyzed their credit score ({analysed}). Their current credit score "
        f"is {score} ({band} category). Use this information to provide personalized loan eligibility "
        "advice, interest rate estimates, and tax-saving strategies. Consider their creditworthiness "
        "when suggesting loan amounts and types.\n" + guidance
    )


def build_prompt(
    credit_score: Union[int, float, str, None],
    credit_analysis_date: Optional[str],
    context: Optional[UserContext] = None,
    today: Optional[dt.date] = None,
) -> str:
    """
    Assemble the system prompt.

    The request-level ``credit_score`` drives the credit band section even
    when it disagrees with the score stored on the profile.
    """
    context = context or UserContext()
    today = today or dt.date.today()

    parts = [PREAMBLE]
    if context.profile is not None:
        parts.append(_profile_section(context.profile, context, today))
    else:
        parts.append(PROFILE_INCOMPLETE)
    parts.append(_credit_section(credit_score, credit_analysis_date))
    parts.append(CLOSING)
    return "\n\n".join(parts)
