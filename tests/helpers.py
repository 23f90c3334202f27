from datetime import date, timedelta

# Monday of the first week used throughout the suite
WEEK0 = date(2024, 1, 1)


def week(n):
    """Monday ``n`` weeks after 2024-01-01."""
    return WEEK0 + timedelta(weeks=n)


def midweek(n):
    """Wednesday of ``week(n)``."""
    return week(n) + timedelta(days=2)
