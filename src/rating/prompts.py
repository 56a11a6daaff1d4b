"""Prompt templates for the content evaluator."""

SYSTEM_PROMPT = (
    "You rate local news stories for a community newsletter. "
    "Respond with a single JSON object and nothing else."
)

EVALUATION_PROMPT = """\
You are evaluating a news article for inclusion in a local newsletter. Rate on
three dimensions using a 1-10 scale:

INTEREST LEVEL (1-10): How intriguing, surprising, or engaging is this story?
HIGH: unexpected developments, human interest, unique events, broad appeal.
LOW: routine announcements, administrative content, purely promotional or very short posts.

LOCAL RELEVANCE (1-10): How directly relevant is this to residents of the area?
HIGH: news in the city and surrounding communities, county government decisions,
local business changes, school district news, local infrastructure.
LOW: state or national news without a local angle, generic content.

COMMUNITY IMPACT (1-10): How much does this affect residents' daily lives?
HIGH: new services or amenities, policy changes, public safety, economic development.
LOW: individual achievements with limited effect, internal organizational matters.

Article Title: {title}
Article Content: {content}

Respond with ONLY this JSON:
{{
  "interest_level": <integer 1-10>,
  "local_relevance": <integer 1-10>,
  "community_impact": <integer 1-10>,
  "reasoning": "<short explanation of the scores>"
}}
"""

DEDUPE_SYSTEM_PROMPT = (
    "You identify duplicate stories for a local newsletter so readers never "
    "see two articles about the same news or the same kind of event. "
    "Respond with a single JSON object and nothing else."
)

DEDUPE_PROMPT = """\
Review these articles and group the ones that cover the same story, or the
same type of event happening in the same period (for example several fire
department open houses on one weekend). For each group keep the article with
the most specific details (names, dates, locations) as the primary.

Articles are numbered from 0:
{articles}

Respond with ONLY this JSON:
{{
  "groups": [
    {{
      "topic_signature": "<brief topic description>",
      "primary_article_index": <integer>,
      "duplicate_indices": [<integers>]
    }}
  ]
}}
Use an empty "groups" list when every article is unique.
"""
