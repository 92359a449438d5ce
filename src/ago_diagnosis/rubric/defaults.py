"""Built-in rubric used when no rubric file is configured."""

from ago_diagnosis.rubric.models import RubricItem


DEFAULT_RUBRIC: tuple[RubricItem, ...] = (
    RubricItem(
        id="structured_data",
        label="Structured data (JSON-LD)",
        selector='script[type="application/ld+json"]',
        method_code="0",
        recommendation_template=(
            "Add schema.org structured data as a JSON-LD script "
            "(Organization, WebSite, Article or Product as appropriate)."
            "|JSON-LD structured data is present; keep it in sync with page content."
        ),
    ),
    RubricItem(
        id="html_lang",
        label="Document language",
        selector="html[lang]",
        method_code="0",
        recommendation_template=(
            'Declare the page language on the root element, e.g. <html lang="ja">.'
            "|The page language is declared."
        ),
    ),
    RubricItem(
        id="title",
        label="Page title",
        selector="head > title",
        method_code="0",
        recommendation_template=(
            "Add a descriptive <title> that names the page topic."
            "|A page title is present."
        ),
    ),
    RubricItem(
        id="meta_description",
        label="Meta description",
        selector='meta[name="description"]',
        method_code="0",
        recommendation_template=(
            "Add a meta description summarising the page in one or two sentences."
            "|A meta description is present."
        ),
    ),
    RubricItem(
        id="canonical",
        label="Canonical URL",
        selector='link[rel="canonical"]',
        method_code="0",
        recommendation_template=(
            "Add a canonical link so crawlers resolve duplicates to one URL."
            "|A canonical URL is declared."
        ),
    ),
    RubricItem(
        id="open_graph",
        label="Open Graph metadata",
        selector='meta[property^="og:"]',
        method_code="0",
        recommendation_template=(
            "Add Open Graph tags (og:title, og:description, og:image)."
            "|Open Graph metadata is present."
        ),
    ),
    RubricItem(
        id="h1",
        label="Primary heading",
        selector="h1",
        method_code="0",
        recommendation_template=(
            "Add a single <h1> that states the main topic of the page."
            "|A primary heading is present."
        ),
    ),
    RubricItem(
        id="heading_structure",
        label="Heading structure",
        selector="h1, h2, h3",
        method_code="2",
        prompt_template=(
            "Assess whether the following headings form a clear, logical outline "
            "that an AI search engine could use to understand the page."
        ),
        recommendation_template=(
            "Rebuild the heading outline so each section has a descriptive heading."
            "|Rebuild the heading outline so each section has a descriptive heading."
            "|Make headings more descriptive and keep levels in order."
            "|Make headings more descriptive and keep levels in order."
            "|Minor heading refinements could help."
            "|Heading structure is clear."
        ),
    ),
    RubricItem(
        id="content_clarity",
        label="Content clarity",
        selector="main, article, body",
        method_code="1",
        prompt_template=(
            "Judge whether this page explains who runs it and what it offers "
            "clearly enough for an AI assistant to cite it. Page text: {content}"
        ),
        recommendation_template=(
            "State plainly who you are, what you offer and for whom, near the top."
            "|State plainly who you are, what you offer and for whom, near the top."
            "|Tighten the introduction and add concrete facts (names, figures, dates)."
            "|Tighten the introduction and add concrete facts (names, figures, dates)."
            "|Add a short summary paragraph for quick citation."
            "|Content is clear and citable."
        ),
    ),
)
