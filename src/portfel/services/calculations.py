"""Profit/loss arithmetic for positions and portfolios."""

from __future__ import annotations

from typing import Iterable

from ..models.position import PortfolioSummary, Position


def calculate_pnl(position: Position) -> float:
    """Unrealized profit (positive) or loss (negative) in PLN."""

    if position.quantity <= 0:
        raise ValueError("Invalid quantity: must be greater than 0")
    return (position.current_price - position.purchase_price) * position.quantity


def calculate_pnl_percent(position: Position) -> float:
    if position.purchase_price <= 0:
        raise ValueError("Invalid purchase price: must be greater than 0")
    total_cost = position.purchase_price * position.quantity
    return calculate_pnl(position) / total_cost * 100


def calculate_position_value(position: Position) -> float:
    return position.current_price * position.quantity


def calculate_portfolio_value(positions: Iterable[Position]) -> float:
    return sum((calculate_position_value(pos) for pos in positions), 0.0)


def calculate_portfolio_summary(positions: Iterable[Position]) -> PortfolioSummary:
    """Aggregate value, cost and P&L; the percentage is 0 for a zero-cost portfolio."""

    items = list(positions)
    total_cost = sum((pos.purchase_price * pos.quantity for pos in items), 0.0)
    total_value = calculate_portfolio_value(items)
    total_pnl = total_value - total_cost
    total_pnl_percent = total_pnl / total_cost * 100 if total_cost > 0 else 0.0
    return PortfolioSummary(
        total_value=total_value,
        total_cost=total_cost,
        total_pnl=total_pnl,
        total_pnl_percent=total_pnl_percent,
        positions=items,
    )
