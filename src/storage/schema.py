"""Database schema for the newsletter store.

Statements are idempotent (``IF NOT EXISTS``) so ``init_schema`` can run on
every deploy. Status CHECK constraints mirror the closed enumerations in
``src.campaigns.schemas`` and ``src.ads.schemas``.
"""

import logging

from src.storage.database import Database

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE EXTENSION IF NOT EXISTS "pgcrypto";

CREATE TABLE IF NOT EXISTS newsletter_campaigns (
    id            UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    date          DATE NOT NULL UNIQUE,
    status        TEXT NOT NULL DEFAULT 'draft'
                  CHECK (status IN ('draft', 'in_review', 'approved', 'sent', 'failed')),
    subject_line  TEXT,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS rss_posts (
    id            UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    feed_name     TEXT NOT NULL DEFAULT '',
    external_id   TEXT,
    title         TEXT NOT NULL,
    body          TEXT NOT NULL DEFAULT '',
    published_at  TIMESTAMPTZ,
    campaign_id   UUID REFERENCES newsletter_campaigns(id) ON DELETE SET NULL,
    created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS idx_rss_posts_created_at ON rss_posts(created_at);

CREATE TABLE IF NOT EXISTS post_ratings (
    id                UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    post_id           UUID NOT NULL UNIQUE REFERENCES rss_posts(id) ON DELETE CASCADE,
    interest_level    INTEGER NOT NULL CHECK (interest_level BETWEEN 1 AND 10),
    local_relevance   INTEGER NOT NULL CHECK (local_relevance BETWEEN 1 AND 10),
    community_impact  INTEGER NOT NULL CHECK (community_impact BETWEEN 1 AND 10),
    total_score       INTEGER,
    ai_reasoning      TEXT,
    created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS duplicate_groups (
    id               UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    campaign_id      UUID REFERENCES newsletter_campaigns(id) ON DELETE CASCADE,
    primary_post_id  UUID NOT NULL REFERENCES rss_posts(id) ON DELETE CASCADE,
    topic_signature  TEXT NOT NULL DEFAULT '',
    created_at       TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- A post belongs to at most one group; the snapshot skips every post listed here.
CREATE TABLE IF NOT EXISTS duplicate_posts (
    id                UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    group_id          UUID NOT NULL REFERENCES duplicate_groups(id) ON DELETE CASCADE,
    post_id           UUID NOT NULL UNIQUE REFERENCES rss_posts(id) ON DELETE CASCADE,
    similarity_score  REAL NOT NULL DEFAULT 0.8,
    created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS articles (
    id           UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    post_id      UUID NOT NULL REFERENCES rss_posts(id) ON DELETE CASCADE,
    campaign_id  UUID NOT NULL REFERENCES newsletter_campaigns(id) ON DELETE CASCADE,
    headline     TEXT NOT NULL,
    body         TEXT NOT NULL DEFAULT '',
    rank         INTEGER,
    is_active    BOOLEAN NOT NULL DEFAULT TRUE,
    created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (campaign_id, post_id)
);
CREATE INDEX IF NOT EXISTS idx_articles_campaign_active ON articles(campaign_id, is_active);

CREATE TABLE IF NOT EXISTS events (
    id          SERIAL PRIMARY KEY,
    title       TEXT NOT NULL,
    venue       TEXT,
    start_date  TIMESTAMP NOT NULL,
    end_date    TIMESTAMP,
    active      BOOLEAN NOT NULL DEFAULT TRUE,
    created_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS idx_events_start_active ON events(start_date) WHERE active = TRUE;

CREATE TABLE IF NOT EXISTS campaign_events (
    id             SERIAL PRIMARY KEY,
    campaign_id    UUID NOT NULL REFERENCES newsletter_campaigns(id) ON DELETE CASCADE,
    event_id       INTEGER NOT NULL REFERENCES events(id) ON DELETE CASCADE,
    event_date     DATE NOT NULL,
    is_selected    BOOLEAN NOT NULL DEFAULT FALSE,
    is_featured    BOOLEAN NOT NULL DEFAULT FALSE,
    display_order  INTEGER,
    created_at     TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (campaign_id, event_id, event_date)
);

CREATE TABLE IF NOT EXISTS advertisements (
    id                UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    title             TEXT NOT NULL,
    body              TEXT NOT NULL DEFAULT '',
    status            TEXT NOT NULL DEFAULT 'pending'
                      CHECK (status IN ('pending', 'approved', 'rejected', 'active', 'completed')),
    approved_by       TEXT,
    approved_at       TIMESTAMPTZ,
    rejection_reason  TEXT,
    created_at        TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at        TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS app_settings (
    key         TEXT PRIMARY KEY,
    value       TEXT,
    updated_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""


async def init_schema(database: Database) -> None:
    """Create all tables and indexes (idempotent)."""
    await database.execute(SCHEMA_SQL)
    logger.info("Newsletter schema ensured")
