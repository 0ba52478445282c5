"""AI advice, monthly reports and saving tips via an OpenAI-compatible chat completions API."""

import json
import logging
import re
from typing import Any, Dict, Mapping, Optional, Sequence

import httpx

from ..config import Config
from ..domain.models import (
    FinancialTip,
    InvestmentAdvice,
    InvestmentHolding,
    MonthlyReport,
    Signal,
)

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "This is AI-generated analysis and not financial advice. Always do your own "
    "research and consult with a qualified financial advisor before making "
    "investment decisions."
)

FALLBACK_ADVICE = (
    "AI analysis is currently unavailable for this asset. Review recent price "
    "performance, fees and your own allocation targets before acting."
)

SYSTEM_PROMPT = (
    "You are an expert financial analyst. Assess current market conditions for the "
    "given asset and decide whether it is a good time to buy, sell, or hold. "
    "Reply with a JSON object with exactly two keys: "
    "\"signal\" (one of \"BUY\", \"SELL\", \"HOLD\") and "
    "\"advice\" (one concise paragraph explaining the recommendation). "
    "Use BUY for a buying opportunity, SELL for signs of a downturn or overvaluation, "
    "HOLD otherwise."
)

REPORT_PROMPT = (
    "You are an AI financial advisor. Analyze the user's financial data for the month "
    "and write a concise monthly financial report covering income, expenses, spending "
    "by category and the investment portfolio. Then give specific, actionable feedback "
    "on how to improve their finances. Reply with a JSON object with exactly two keys: "
    "\"report\" and \"feedback\"."
)

TIP_PROMPT = (
    "You are a personal finance advisor. Using the user's spending, savings, investment "
    "performance and goals, give one short personalized tip. If they spent less than "
    "last month, congratulate them first. Reply with a JSON object with one key: \"tip\"."
)


class AdviceService:
    """Generates asset advice, monthly reports and saving tips."""

    def __init__(self, config: Config, http_client: httpx.AsyncClient):
        self.config = config
        self.http_client = http_client

    @property
    def enabled(self) -> bool:
        return bool(self.config.openai_api_key)

    async def generate_advice(self, asset_name: str) -> InvestmentAdvice:
        """
        Ask the model for a recommendation on ``asset_name``.

        Returns a HOLD fallback when no API key is set or the call fails.
        """
        if not self.enabled:
            logger.info("OpenAI key not configured, returning fallback advice for %s", asset_name)
            return self._fallback()

        content = await self._complete(SYSTEM_PROMPT, f"Asset: {asset_name}", asset_name)
        if content is None:
            return self._fallback()
        return parse_advice(content)

    async def generate_monthly_report(
        self,
        income: float,
        expenses: float,
        spending_by_category: Mapping[str, float],
        holdings: Sequence[InvestmentHolding],
    ) -> MonthlyReport:
        """
        Summarize a month of income, spending and investments.

        Without an API key, or when the call fails, the report is built
        from the figures themselves.
        """
        fallback = fallback_report(income, expenses, spending_by_category, holdings)
        if not self.enabled:
            logger.info("OpenAI key not configured, returning computed monthly report")
            return fallback

        user_prompt = json.dumps(
            {
                "income": income,
                "expenses": expenses,
                "spendingByCategory": dict(spending_by_category),
                "investmentPortfolio": [
                    {"name": h.name, "type": h.type, "value": h.value} for h in holdings
                ],
            }
        )
        content = await self._complete(REPORT_PROMPT, user_prompt, "monthly report")
        data = _load_json_object(content) if content is not None else None
        if data is None:
            return fallback

        return MonthlyReport(
            report=str(data.get("report", "")).strip() or fallback.report,
            feedback=str(data.get("feedback", "")).strip() or fallback.feedback,
        )

    async def generate_financial_tip(
        self,
        current_month_spending: float,
        previous_month_spending: float,
        savings: float,
        investment_performance: str = "",
        financial_goals: str = "",
    ) -> FinancialTip:
        """One personalized tip; falls back to a spending comparison."""
        fallback = fallback_tip(current_month_spending, previous_month_spending, financial_goals)
        if not self.enabled:
            logger.info("OpenAI key not configured, returning computed financial tip")
            return fallback

        user_prompt = json.dumps(
            {
                "currentMonthSpending": current_month_spending,
                "previousMonthSpending": previous_month_spending,
                "savings": savings,
                "investmentPerformance": investment_performance,
                "financialGoals": financial_goals,
            }
        )
        content = await self._complete(TIP_PROMPT, user_prompt, "financial tip")
        data = _load_json_object(content) if content is not None else None
        if data is None:
            return fallback

        tip = str(data.get("tip", "")).strip()
        return FinancialTip(tip=tip) if tip else fallback

    async def _complete(self, system_prompt: str, user_prompt: str, subject: str) -> Optional[str]:
        """Run one chat completion and return the message content, or None on failure."""
        payload = {
            "model": self.config.openai_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": 0.2,
            "response_format": {"type": "json_object"},
        }

        try:
            response = await self.http_client.post(
                self.config.openai_url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {self.config.openai_api_key}",
                    "Content-Type": "application/json",
                },
                timeout=25,
            )
            response.raise_for_status()
            parsed = response.json()
            return parsed["choices"][0]["message"]["content"]
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("OpenAI request failed for %s: %s", subject, exc)
            return None

    @staticmethod
    def _fallback() -> InvestmentAdvice:
        return InvestmentAdvice(signal=Signal.HOLD, advice=FALLBACK_ADVICE, disclaimer=DISCLAIMER)


def _load_json_object(content: Optional[str]) -> Optional[Dict[str, Any]]:
    try:
        loaded = json.loads(content)
    except (TypeError, ValueError):
        # Models sometimes wrap the object in prose or code fences
        match = re.search(r"\{.*\}", content or "", re.DOTALL)
        if not match:
            return None
        try:
            loaded = json.loads(match.group(0))
        except ValueError:
            return None
    return loaded if isinstance(loaded, dict) else None


def parse_advice(content: str) -> InvestmentAdvice:
    """Parse model output into InvestmentAdvice; unknown signals become HOLD."""
    data = _load_json_object(content)

    if data is None:
        text = (content or "").strip()
        return InvestmentAdvice(
            signal=Signal.HOLD,
            advice=text or FALLBACK_ADVICE,
            disclaimer=DISCLAIMER,
        )

    raw_signal = str(data.get("signal", "")).strip().upper()
    try:
        signal = Signal(raw_signal)
    except ValueError:
        signal = Signal.HOLD

    advice = str(data.get("advice", "")).strip() or FALLBACK_ADVICE
    return InvestmentAdvice(signal=signal, advice=advice, disclaimer=DISCLAIMER)


def fallback_report(
    income: float,
    expenses: float,
    spending_by_category: Mapping[str, float],
    holdings: Sequence[InvestmentHolding],
) -> MonthlyReport:
    """Plain summary computed from the month's figures."""
    net = income - expenses
    lines = [f"This month you earned {income:,.2f} and spent {expenses:,.2f}, leaving {net:,.2f}."]

    savings_rate = net / income * 100 if income > 0 else None
    if savings_rate is not None:
        lines.append(f"Your savings rate was {savings_rate:.0f}% of income.")

    top_category = None
    if spending_by_category:
        top_category, top_amount = max(spending_by_category.items(), key=lambda item: item[1])
        lines.append(f"Your largest spending category was {top_category} at {top_amount:,.2f}.")

    if holdings:
        total = sum(h.value for h in holdings)
        lines.append(f"Your investments total {total:,.2f} across {len(holdings)} holdings.")

    focus = f" Start with {top_category}." if top_category else ""
    if net < 0:
        feedback = "Spending exceeded income this month; cut back before adding new commitments." + focus
    elif savings_rate is not None and savings_rate < 20:
        feedback = "Aim to save at least 20% of income." + focus
    else:
        feedback = "Solid month. Consider moving the surplus toward your investment goals."

    return MonthlyReport(report=" ".join(lines), feedback=feedback)


def fallback_tip(
    current_month_spending: float,
    previous_month_spending: float,
    financial_goals: str = "",
) -> FinancialTip:
    """Spending comparison against last month."""
    goals = financial_goals.strip() or "your goals"
    difference = previous_month_spending - current_month_spending

    if difference > 0:
        return FinancialTip(
            tip=f"Congratulations, you spent {difference:,.2f} less than last month. "
            f"Move that amount into savings to get closer to {goals}."
        )
    if difference < 0:
        return FinancialTip(
            tip=f"Spending rose by {-difference:,.2f} compared with last month. "
            f"Set a weekly budget for your biggest category to stay on track for {goals}."
        )
    return FinancialTip(
        tip=f"Spending matched last month. Automating a fixed transfer to savings keeps progress toward {goals} steady."
    )
