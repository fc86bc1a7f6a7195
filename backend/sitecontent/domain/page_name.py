HOME_PAGE = "home"

_HOME_ALIASES = {"", "/", "index", "index.html", "home.html"}


def normalize_page_name(value) -> str:
    """
    Canonicalize a page identifier to a lowercase slug.

    Total: never raises. Missing or empty input, "/", "index" and
    "index.html" all map to "home"; a trailing ".html" is dropped.
    """
    if value is None:
        return HOME_PAGE

    name = str(value).strip().lower()
    if name in _HOME_ALIASES:
        return HOME_PAGE

    if name.startswith("/"):
        name = name[1:]
    if name.endswith(".html"):
        name = name[: -len(".html")]

    name = name.strip()
    if name in _HOME_ALIASES:
        return HOME_PAGE
    return name
