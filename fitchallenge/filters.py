def format_date(value, fmt="%d %b %Y"):
    """Format a date for display; empty values render as a dash."""
    if not value:
        return "--"
    return value.strftime(fmt)


def format_percent(value):
    if value is None:
        return "0%"
    return f"{int(value)}%"


def register_filters(app):
    """Register custom Jinja2 filters."""
    app.jinja_env.filters['format_date'] = format_date
    app.jinja_env.filters['format_percent'] = format_percent
