"""Schedule roll-forward: next due date from the current one."""

from datetime import date, datetime

from dateutil.relativedelta import relativedelta


def next_due_date(current_due_date: date, frequency_months: int) -> date:
    """
    Add ``frequency_months`` calendar months to the schedule's own due date.

    Anchoring on the due date (not today) keeps batch-run timing from drifting the
    cycle. Day-of-month overflow clamps to the last day of the target month:
    Jan 31 + 1 month is Feb 28 (Feb 29 in leap years).
    """
    if frequency_months < 1:
        raise ValueError(f"frequency_months must be >= 1, got {frequency_months}")
    if isinstance(current_due_date, datetime):
        current_due_date = current_due_date.date()
    return current_due_date + relativedelta(months=frequency_months)
