import re

CONTENT_LIMIT = 4000
SENTENCE_BUDGET = 3800
ELLIPSIS = "..."

_SENTENCE_END = re.compile(r"[.!?]+")


def truncate_html(content: str, limit: int = CONTENT_LIMIT, budget: int = SENTENCE_BUDGET) -> str:
    """
    Bound serialized markup to roughly `limit` characters.

    Content over the limit is reassembled sentence by sentence while it
    stays within `budget`; when not even one sentence fits, it is cut
    hard at `limit` and an ellipsis is appended.
    """
    if content is None or len(content) <= limit:
        return content

    result = ""
    for sentence in _SENTENCE_END.split(content):
        if len(result) + len(sentence) + 1 > budget:
            break
        result += sentence + "."

    if not result.strip(". \n\t"):
        return content[:limit] + ELLIPSIS
    return result
