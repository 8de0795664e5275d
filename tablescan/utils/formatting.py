def safe_value(value):
    """Flatten a cell so it fits on one line of a report or a table cell"""
    return value.replace("\r\n", " ").replace("\n", " ").replace("\r", " ").replace("|", "/")


def safe_name(name):
    name = name.strip()
    return name if name else "(unnamed)"


def truncate(value, limit=80):
    if len(value) > limit:
        return value[:limit - 3] + "..."
    return value
