"""
Tests de la analitica de mensajes.
"""
from datetime import datetime, timedelta, timezone

import pytest

from fitdash.application.services.messages_dashboard_builder import (
    build_messages_dashboard,
    clamp_range,
    normalize_channel,
)
from fitdash.domain.entities.dashboard_sources import MessageRecord, MessagesDashboardSource


NOW = datetime(2025, 3, 5, 10, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("raw, expected", [
    (14, 14),
    ("30", 30),
    ("45.7", 45),
    (3, 7),
    (500, 90),
    ("abc", 14),
    (None, 14),
    (float("inf"), 14),
    (float("nan"), 14),
])
def test_clamp_range(raw, expected):
    assert clamp_range(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    (None, "in-app"),
    ("  ", "in-app"),
    ("WhatsApp Business", "whatsapp"),
    ("email", "email"),
    ("cliente@fit.pt", "email"),
    ("SMS", "sms"),
    ("phone call", "call"),
    ("Instagram", "social"),
    ("app", "in-app"),
    ("pigeon", "unknown"),
])
def test_normalize_channel(raw, expected):
    assert normalize_channel(raw) == expected


def _msg(id, from_id, to_id, sent_at, channel="app", **kwargs):
    return MessageRecord(id=id, from_id=from_id, to_id=to_id, sent_at=sent_at, channel=channel, **kwargs)


def test_empty_and_populated_have_same_shape():
    empty = build_messages_dashboard(MessagesDashboardSource.empty(NOW, "pt-1")).model_dump()
    full = build_messages_dashboard(MessagesDashboardSource(
        now=NOW,
        viewer_id="pt-1",
        messages=[_msg("m-1", "c-1", "pt-1", NOW - timedelta(hours=1))],
    )).model_dump()

    assert set(empty.keys()) == set(full.keys())
    assert [item["key"] for item in empty["hero"]] == [item["key"] for item in full["hero"]]
    assert len(empty["timeline"]) == len(full["timeline"]) == 14


def test_empty_dashboard_defaults():
    dashboard = build_messages_dashboard(MessagesDashboardSource.empty(NOW, "pt-1", range_days=3))

    assert dashboard.range.days == 7
    assert dashboard.totals.inbound == 0
    assert dashboard.conversations == []
    assert dashboard.highlights == []
    assert len(dashboard.distribution) == 1
    assert dashboard.distribution[0].value == 0
    hero = {item.key: item for item in dashboard.hero}
    assert hero["messages-response-time"].value == "—"
    assert hero["messages-response-time"].hint == "Sin mensajes recibidos"


def test_replies_are_matched_fifo_within_conversation():
    source = MessagesDashboardSource(
        now=NOW,
        viewer_id="pt-1",
        messages=[
            _msg("m-1", "c-1", "pt-1", NOW - timedelta(hours=3), from_name="Ana"),
            _msg("m-2", "c-1", "pt-1", NOW - timedelta(hours=2), from_name="Ana"),
            _msg("m-3", "pt-1", "c-1", NOW - timedelta(hours=1), channel="whatsapp"),
            _msg("m-4", "x-1", "x-2", NOW - timedelta(minutes=30)),
        ],
    )

    dashboard = build_messages_dashboard(source)

    assert dashboard.totals.inbound == 2
    assert dashboard.totals.outbound == 1
    assert dashboard.totals.internal == 1
    assert dashboard.totals.replies == 1
    assert dashboard.totals.participants == 1
    assert dashboard.totals.pending_responses == 1

    hero = {item.key: item for item in dashboard.hero}
    # la respuesta se empareja con el mensaje mas antiguo (m-1): 120 minutos
    assert hero["messages-response-time"].value == "2h"
    assert hero["messages-total"].value == "4"

    ana = next(row for row in dashboard.conversations if row.counterpart_id == "c-1")
    assert ana.counterpart_name == "Ana"
    assert ana.total_messages == 3
    assert ana.pending_responses == 1
    assert ana.average_response_minutes == 120
    assert ana.main_channel == "in-app"
    assert ana.last_direction == "outbound"

    reply = next(row for row in dashboard.messages if row.id == "m-3")
    assert reply.response_minutes == 120
    assert reply.channel_label == "WhatsApp"
    assert [row.id for row in dashboard.messages][0] == "m-4"

    ids = [item.id for item in dashboard.highlights]
    assert "c-1-busiest" in ids
    assert "c-1-fast" in ids
    assert "c-1-pending" in ids


def test_reply_outside_window_does_not_count():
    source = MessagesDashboardSource(
        now=NOW,
        viewer_id="pt-1",
        range_days=30,
        messages=[
            _msg("m-1", "c-1", "pt-1", NOW - timedelta(days=20)),
            _msg("m-2", "pt-1", "c-1", NOW - timedelta(minutes=10)),
        ],
    )

    dashboard = build_messages_dashboard(source)

    assert dashboard.totals.replies == 0
    assert dashboard.totals.outbound == 1
    assert dashboard.totals.pending_responses == 0


def test_messages_outside_range_are_ignored_in_totals():
    source = MessagesDashboardSource(
        now=NOW,
        viewer_id="pt-1",
        messages=[
            _msg("m-1", "c-1", "pt-1", NOW - timedelta(days=20)),
            _msg("m-2", "c-1", "pt-1", None),
        ],
    )

    dashboard = build_messages_dashboard(source)

    assert dashboard.totals.inbound == 0
    assert dashboard.conversations == []
    hero = {item.key: item for item in dashboard.hero}
    assert hero["messages-total"].trend == "-100% respecto al periodo anterior"


def test_previous_period_trend():
    source = MessagesDashboardSource(
        now=NOW,
        viewer_id="pt-1",
        range_days=7,
        messages=[
            _msg("m-1", "c-1", "pt-1", NOW - timedelta(days=9)),
            _msg("m-2", "c-1", "pt-1", NOW - timedelta(days=1)),
            _msg("m-3", "c-1", "pt-1", NOW - timedelta(hours=5)),
        ],
    )

    hero = {item.key: item for item in build_messages_dashboard(source).hero}

    assert hero["messages-total"].value == "2"
    assert hero["messages-total"].trend == "+100% respecto al periodo anterior"
