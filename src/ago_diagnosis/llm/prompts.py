"""Prompt construction for AI-judged rubric items."""

from ago_diagnosis.rubric.models import EvaluationMethod, RubricItem


SYSTEM_INSTRUCTION = (
    "You review web pages for AI search readiness: how easily AI assistants "
    "and AI search engines can find, understand and cite the page. "
    "Answer with a single digit from 0 (very poor) to 5 (excellent) on the "
    "first line, followed by one or two sentences explaining the score."
)

# Matched text appended as context for AI-judged items
MAX_CONTEXT_CHARS = 300

# Matched markup embedded as evidence for hybrid items
MAX_EVIDENCE_CHARS = 1000

CONTENT_PLACEHOLDER = "{content}"
URL_PLACEHOLDER = "{url}"

_NO_MATCH_NOTICE = "(no element on the page matches this check)"
_DEFAULT_PROMPT = "Evaluate the page for the check '{label}'."


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters, marking the cut."""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[: max(limit - 1, 0)].rstrip() + "…"


def build_judgment_prompt(
    item: RubricItem,
    content: str,
    url: str = "",
) -> str:
    """Build the prompt sent to the judgment backend.

    ``content`` is the text (AI-judged) or outer markup (hybrid) matched
    by the item's selector. It is truncated, then substituted for a
    ``{content}`` placeholder in the template or appended after it.

    Args:
        item: Rubric item being evaluated.
        content: Extracted page content; may be empty.
        url: Target page URL, substituted for ``{url}``.

    Returns:
        Prompt text.
    """
    template = item.prompt_template or _DEFAULT_PROMPT.format(
        label=item.display_label
    )
    template = template.replace(URL_PLACEHOLDER, url)

    if item.method == EvaluationMethod.HYBRID:
        excerpt = truncate(content, MAX_EVIDENCE_CHARS) or _NO_MATCH_NOTICE
        section = f"Evidence (markup matched by `{item.selector.strip()}`):\n{excerpt}"
    else:
        excerpt = truncate(content, MAX_CONTEXT_CHARS)
        section = f"Page content:\n{excerpt}" if excerpt else ""

    if CONTENT_PLACEHOLDER in template:
        return template.replace(CONTENT_PLACEHOLDER, excerpt)
    if not section:
        return template
    return f"{template}\n\n{section}"
