import datetime as dt

import pytest

from app.schemas.finance import BudgetAllocation, ExpenseEntry, Goal, IncomeEntry, Profile, UserContext
from app.services.prompt_builder import (
    CREDIT_NOT_ANALYZED,
    NOT_PROVIDED,
    PROFILE_INCOMPLETE,
    build_prompt,
    credit_band,
    monthly_income_total,
    months_remaining,
    parse_credit_score,
    summarize_expenses,
)

TODAY = dt.date(2025, 1, 1)
NOW = dt.datetime(2025, 1, 1, 9, 0)


def income(amount, frequency, source="Salary"):
    return IncomeEntry(id=f"i-{source}-{amount}", user_id="u1", source=source, amount=amount,
                       frequency=frequency, created_at=NOW)


def expense(category, amount, day):
    return ExpenseEntry(id=f"e-{day}", user_id="u1", category=category, amount=amount,
                        date=dt.date(2024, 12, 1) + dt.timedelta(days=day))


def full_context():
    return UserContext(
        profile=Profile(user_id="u1", full_name="Asha Rao", age=31, location="Pune",
                        dependents=1, filing_status="individual", credit_score=742,
                        credit_provider="CIBIL"),
        income=[income(1200, "annual", "Bonus"), income(100, "monthly", "Rent")],
        expenses=[expense("Food", 500, 1), expense("Travel", 300, 2)],
        budget=[BudgetAllocation(id="b1", user_id="u1", category="Food", monthly_amount=8000),
                BudgetAllocation(id="b2", user_id="u1", category="Rent", monthly_amount=15000)],
        goals=[Goal(id="g1", user_id="u1", name="Car", target_amount=6000,
                    target_date=TODAY + dt.timedelta(days=60))],
    )


class TestCreditBand:

    @pytest.mark.parametrize("score,band", [
        (900, "Excellent"),
        (750, "Excellent"),
        (749, "Very Good"),
        (720, "Very Good"),
        (719, "Good"),
        (680, "Good"),
        (679, "Fair"),
        (650, "Fair"),
        (649, "Poor"),
        (300, "Poor"),
    ])
    def test_thresholds(self, score, band):
        assert credit_band(score)[0] == band

    def test_quality_never_drops_as_score_rises(self):
        order = ["Poor", "Fair", "Good", "Very Good", "Excellent"]
        ranks = [order.index(credit_band(s)[0]) for s in range(300, 901)]
        assert ranks == sorted(ranks)

    @pytest.mark.parametrize("value", [
        None, "", "null", "NULL", "undefined", "abc",
        "Infinity", "-Infinity", "NaN", "1e999", float("inf"), float("nan"),
    ])
    def test_unusable_scores_parse_to_none(self, value):
        assert parse_credit_score(value) is None

    @pytest.mark.parametrize("value", ["Infinity", "1e999", float("inf")])
    def test_non_finite_score_still_builds_a_prompt(self, value):
        assert CREDIT_NOT_ANALYZED in build_prompt(value, None, None, TODAY)

    def test_numeric_strings_parse(self):
        assert parse_credit_score("755") == 755
        assert parse_credit_score(701.0) == 701


class TestHelpers:

    def test_monthly_income_total_normalizes_annual(self):
        entries = [income(1200, "annual"), income(100, "monthly", "Rent")]
        assert monthly_income_total(entries) == pytest.approx(200)

    def test_other_frequencies_count_as_monthly(self):
        assert monthly_income_total([income(500, "weekly")]) == 500

    def test_months_remaining_rounds_up(self):
        assert months_remaining(TODAY + dt.timedelta(days=60), TODAY) == 2
        assert months_remaining(TODAY + dt.timedelta(days=61), TODAY) == 3
        assert months_remaining(TODAY - dt.timedelta(days=5), TODAY) <= 0

    def test_summarize_expenses_uses_ten_most_recent(self):
        entries = [expense("Old", 1000, 0), expense("Old", 1000, 1)]
        entries += [expense("Food", 10 * d, d) for d in range(2, 12)]
        recent, totals, top = summarize_expenses(entries)
        assert len(recent) == 10
        assert "Old" not in totals
        assert totals["Food"] == sum(10 * d for d in range(2, 12))

    def test_top_three_categories_descending(self):
        entries = [expense("A", 10, 1), expense("B", 50, 2), expense("C", 30, 3),
                   expense("D", 5, 4), expense("B", 5, 5)]
        _, _, top = summarize_expenses(entries)
        assert [c for c, _ in top] == ["B", "C", "A"]


class TestBuildPrompt:

    def test_deterministic_for_fixed_today(self):
        ctx = full_context()
        assert build_prompt("760", "2025-01-01", ctx, TODAY) == build_prompt("760", "2025-01-01", ctx, TODAY)

    def test_profile_details_and_totals(self):
        prompt = build_prompt(None, None, full_context(), TODAY)
        assert "Asha Rao" in prompt
        assert "Pune" in prompt
        assert "Total monthly income: ₹200.00" in prompt
        assert "Total budgeted: ₹23,000.00" in prompt
        assert "Score: 742 (Very Good)" in prompt
        assert "Provider: CIBIL" in prompt

    def test_goal_required_monthly_saving(self):
        prompt = build_prompt(None, None, full_context(), TODAY)
        assert "2 months remaining, need to save ₹3,000.00/month" in prompt

    def test_past_goal_has_no_saving_clause(self):
        ctx = full_context()
        ctx.goals = [Goal(id="g2", user_id="u1", name="Trip", target_amount=1000,
                          target_date=TODAY - dt.timedelta(days=10))]
        prompt = build_prompt(None, None, ctx, TODAY)
        assert "Trip" in prompt
        assert "need to save" not in prompt

    def test_missing_profile_fields_use_placeholder(self):
        ctx = UserContext(profile=Profile(user_id="u1"))
        prompt = build_prompt(None, None, ctx, TODAY)
        assert f"Name: {NOT_PROVIDED}" in prompt
        assert f"Dependents: {NOT_PROVIDED}" in prompt
        assert "CREDIT ON FILE" not in prompt

    def test_no_profile_adds_incomplete_notice(self):
        prompt = build_prompt(None, None, UserContext(), TODAY)
        assert PROFILE_INCOMPLETE in prompt
        assert "CLIENT PROFILE:" not in prompt

    @pytest.mark.parametrize("score", [None, "null"])
    def test_requires_credit_analysis_without_score(self, score):
        prompt = build_prompt(score, None, None, TODAY)
        assert CREDIT_NOT_ANALYZED in prompt

    def test_request_score_takes_precedence_over_profile(self):
        ctx = full_context()
        ctx.profile.credit_score = 600
        prompt = build_prompt("780", "2025-01-01", ctx, TODAY)
        assert "credit score is 780 (Excellent category)" in prompt
        assert "7-9%" in prompt
        assert CREDIT_NOT_ANALYZED not in prompt

    def test_poor_score_asks_for_repair(self):
        prompt = build_prompt(600, None, None, TODAY)
        assert "(Poor category)" in prompt
        assert "credit repair" in prompt
        assert "(recently)" in prompt

    def test_closing_mentions_tax_sections(self):
        prompt = build_prompt(None, None, None, TODAY)
        assert prompt.rstrip().endswith("mention TaxSage when appropriate.")
        assert "80C" in prompt
