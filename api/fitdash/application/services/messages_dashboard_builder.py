"""
Constructor del dashboard de mensajes.

Analitica de la bandeja de un usuario sobre una ventana de 7 a 90 dias:
volumen por direccion, canales, tiempo mediano de respuesta, respuestas
pendientes por conversacion y destacados. Las respuestas se emparejan en
orden FIFO con los mensajes recibidos de la misma conversacion, siempre
que lleguen dentro de los 14 dias siguientes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from statistics import median
from typing import Any, Dict, List, Optional

from fitdash.application.dto.common_dto import HeroMetricDTO, HighlightDTO, RangeDTO
from fitdash.application.dto.messages_dashboard_dto import (
    MessageConversationRowDTO,
    MessageDistributionSegmentDTO,
    MessageListRowDTO,
    MessagesDashboardDTO,
    MessageTimelinePointDTO,
    MessageTotalsDTO,
)
from fitdash.domain.entities.dashboard_sources import MessageRecord, MessagesDashboardSource
from fitdash.shared.utils.datetime_utils import DateTimeUtils
from fitdash.shared.utils.formatting import format_duration_minutes, format_number, format_percent


RANGE_MIN_DAYS = 7
RANGE_MAX_DAYS = 90
RANGE_DEFAULT_DAYS = 14
REPLY_WINDOW_MINUTES = 14 * 24 * 60

INBOUND = "inbound"
OUTBOUND = "outbound"
INTERNAL = "internal"

CHANNEL_LABEL = {
    "in-app": "App",
    "whatsapp": "WhatsApp",
    "email": "Email",
    "sms": "SMS",
    "call": "Llamada",
    "social": "Social",
    "unknown": "Otro",
}

CHANNEL_TONE = {
    "in-app": "info",
    "whatsapp": "positive",
    "email": "info",
    "sms": "warning",
    "call": "positive",
    "social": "info",
    "unknown": "neutral",
}


def clamp_range(value: Any) -> int:
    """Ventana en dias acotada a [7, 90]; valores no numericos -> 14."""
    try:
        days = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return RANGE_DEFAULT_DAYS
    return min(RANGE_MAX_DAYS, max(RANGE_MIN_DAYS, days))


def normalize_channel(value: Optional[str]) -> str:
    """Agrupa los canales libres en un conjunto cerrado de claves."""
    if not value:
        return "in-app"
    key = str(value).strip().lower()
    if not key:
        return "in-app"
    if "whats" in key:
        return "whatsapp"
    if "email" in key or "@" in key:
        return "email"
    if "sms" in key or "text" in key:
        return "sms"
    if "call" in key or "phone" in key:
        return "call"
    if "insta" in key or "facebook" in key or "social" in key:
        return "social"
    if "app" in key or "platform" in key:
        return "in-app"
    return "unknown"


def _direction(viewer_id: str, record: MessageRecord) -> str:
    if record.from_id == viewer_id:
        return OUTBOUND
    if record.to_id == viewer_id:
        return INBOUND
    return INTERNAL


def _trend(current: float, previous: float) -> Optional[str]:
    if previous <= 0:
        if current > 0 and previous == 0:
            return "+∞% respecto al periodo anterior"
        return None
    delta = (current - previous) / previous
    return f"{'+' if delta >= 0 else ''}{delta * 100:.0f}% respecto al periodo anterior"


@dataclass
class _Conversation:
    row: MessageConversationRowDTO
    channel_counts: Dict[str, int] = field(default_factory=dict)
    response_sum: float = 0.0
    response_count: int = 0

    @property
    def average_response(self) -> Optional[float]:
        return self.response_sum / self.response_count if self.response_count else None


def build_messages_dashboard(source: MessagesDashboardSource) -> MessagesDashboardDTO:
    """
    Construye la analitica de mensajes del usuario `source.viewer_id`.
    """
    viewer_id = source.viewer_id
    now = DateTimeUtils.ensure_aware(source.now)
    tz = source.tz
    range_days = clamp_range(source.range_days)
    end = now
    start = DateTimeUtils.start_of_day(end - timedelta(days=range_days - 1), tz)
    previous_end = start - timedelta(microseconds=1)
    previous_start = DateTimeUtils.start_of_day(previous_end - timedelta(days=range_days - 1), tz)

    timeline: Dict[str, MessageTimelinePointDTO] = {}
    for index in range(range_days):
        day = start + timedelta(days=index)
        key = DateTimeUtils.iso_day(day, tz)
        timeline[key] = MessageTimelinePointDTO(day=key, label=DateTimeUtils.day_label(day, tz))

    totals = {INBOUND: 0, OUTBOUND: 0, INTERNAL: 0, "replies": 0}
    participants = set()
    previous = {"total": 0, OUTBOUND: 0, INBOUND: 0, "replies": 0}
    distribution: Dict[str, int] = {}
    response_durations: List[float] = []
    pending_queue: Dict[str, List[datetime]] = {}
    pending_in_range: Dict[str, int] = {}
    conversations: Dict[str, _Conversation] = {}
    message_rows: List[MessageListRowDTO] = []

    def sent_key(record: MessageRecord) -> float:
        sent = DateTimeUtils.parse(record.sent_at)
        return sent.timestamp() if sent else 0.0

    for record in sorted(source.messages, key=sent_key):
        sent_at = DateTimeUtils.parse(record.sent_at)
        direction = _direction(viewer_id, record)
        channel = normalize_channel(record.channel)

        counterpart_id = record.to_id if direction == OUTBOUND else record.from_id if direction == INBOUND else None
        counterpart_id = counterpart_id.strip() if counterpart_id and counterpart_id.strip() else None
        raw_name = record.to_name if direction == OUTBOUND else record.from_name if direction == INBOUND else None
        if direction == INTERNAL:
            counterpart_name = "Equipo interno"
        else:
            counterpart_name = (raw_name or "").strip() or (
                f"Contacto {counterpart_id[:6]}" if counterpart_id else "Contacto desconocido"
            )
        thread_hint = (record.reply_to_id or "").strip() or record.id
        key = counterpart_id or (f"internal-{thread_hint}" if direction == INTERNAL else f"unknown-{thread_hint}")
        if direction != INTERNAL and counterpart_id:
            participants.add(counterpart_id)

        in_range = sent_at is not None and start <= sent_at <= end
        in_previous = sent_at is not None and previous_start <= sent_at <= previous_end
        responded = False
        reply_minutes: Optional[float] = None

        if in_previous:
            previous["total"] += 1
            if direction in (OUTBOUND, INBOUND):
                previous[direction] += 1

        conversation = conversations.get(key)
        if conversation is None:
            conversation = _Conversation(row=MessageConversationRowDTO(
                id=key,
                counterpart_id=counterpart_id,
                counterpart_name=counterpart_name,
                last_direction=direction,
                last_message_at=DateTimeUtils.to_iso_string(sent_at),
                main_channel=channel,
                main_channel_label=CHANNEL_LABEL[channel],
            ))
            conversations[key] = conversation

        last_at = DateTimeUtils.parse(conversation.row.last_message_at)
        if sent_at is not None and (last_at is None or sent_at >= last_at):
            conversation.row.last_message_at = DateTimeUtils.to_iso_string(sent_at)
            conversation.row.last_direction = direction

        if in_range:
            conversation.row.total_messages += 1
            if direction == INBOUND:
                conversation.row.inbound += 1
            elif direction == OUTBOUND:
                conversation.row.outbound += 1
            else:
                conversation.row.internal += 1
            conversation.channel_counts[channel] = conversation.channel_counts.get(channel, 0) + 1

        if direction == INBOUND:
            # Sin fecha se considera anterior a la ventana
            pending_queue.setdefault(key, []).append(sent_at or (start - timedelta(days=1)))
            if in_range:
                pending_in_range[key] = pending_in_range.get(key, 0) + 1
        elif direction == OUTBOUND and pending_queue.get(key):
            queue = pending_queue[key]
            received_at = queue.pop(0)
            if not queue:
                del pending_queue[key]
            if sent_at is not None:
                minutes = (sent_at - received_at).total_seconds() / 60
                if 0 <= minutes < REPLY_WINDOW_MINUTES:
                    responded = True
                    reply_minutes = minutes
                    if in_range:
                        response_durations.append(minutes)
                        totals["replies"] += 1
                        conversation.response_sum += minutes
                        conversation.response_count += 1
            if in_range and pending_in_range.get(key, 0) > 0:
                pending_in_range[key] -= 1

        if in_previous and responded:
            previous["replies"] += 1

        if not in_range:
            continue

        totals[direction] += 1
        bucket = timeline.get(DateTimeUtils.iso_day(sent_at, tz))
        if bucket is not None:
            if direction == INBOUND:
                bucket.inbound += 1
            elif direction == OUTBOUND:
                bucket.outbound += 1
            if responded:
                bucket.replies += 1

        distribution[channel] = distribution.get(channel, 0) + 1
        message_rows.append(MessageListRowDTO(
            id=record.id,
            body=record.body,
            sent_at=DateTimeUtils.to_iso_string(sent_at),
            relative=DateTimeUtils.relative_label(sent_at, now),
            from_id=record.from_id,
            to_id=record.to_id,
            from_name=record.from_name,
            to_name=record.to_name,
            direction=direction,
            channel=channel,
            channel_label=CHANNEL_LABEL[channel],
            response_minutes=reply_minutes if reply_minutes is not None else conversation.average_response,
        ))

    pending_total = sum(pending_in_range.values())
    total_messages = totals[INBOUND] + totals[OUTBOUND] + totals[INTERNAL]
    active = [item for item in conversations.values() if item.row.total_messages > 0]
    median_response = median(response_durations) if response_durations else None

    hero = [
        HeroMetricDTO(
            key="messages-total",
            label="Mensajes intercambiados",
            value=format_number(total_messages),
            hint=f"{format_number(total_messages / range_days)} por día",
            trend=_trend(total_messages, previous["total"]),
            tone="info",
        ),
        HeroMetricDTO(
            key="messages-outbound",
            label="Respuestas enviadas",
            value=format_number(totals[OUTBOUND]),
            hint=f"{format_percent(totals[OUTBOUND] / total_messages if total_messages else 0)} de los mensajes",
            trend=_trend(totals[OUTBOUND], previous[OUTBOUND]),
            tone="positive",
        ),
        HeroMetricDTO(
            key="messages-response-time",
            label="Tiempo mediano de respuesta",
            value=format_duration_minutes(median_response),
            hint=(
                f"{format_percent(totals['replies'] / totals[INBOUND])} de los mensajes tuvieron respuesta"
                if totals[INBOUND] else "Sin mensajes recibidos"
            ),
            trend=_trend(totals["replies"], previous["replies"]) if totals[INBOUND] else None,
            tone="positive" if median_response is not None and median_response <= 60 else "warning",
        ),
        HeroMetricDTO(
            key="messages-conversations",
            label="Conversaciones activas",
            value=format_number(len(active)),
            hint=f"{format_number(len(participants))} participantes únicos",
            tone="warning" if pending_total > 3 else "info",
        ),
    ]

    segments: List[MessageDistributionSegmentDTO] = []
    distribution_total = sum(distribution.values())
    if distribution_total == 0:
        segments.append(MessageDistributionSegmentDTO(key="in-app", label="App", value=0, percentage=0.0, tone="neutral"))
    else:
        for channel, count in distribution.items():
            segments.append(MessageDistributionSegmentDTO(
                key=channel,
                label=CHANNEL_LABEL[channel],
                value=count,
                percentage=count / distribution_total,
                tone=CHANNEL_TONE.get(channel, "neutral"),
            ))
        segments.sort(key=lambda segment: -segment.value)

    for key, item in conversations.items():
        item.row.pending_responses = pending_in_range.get(key, 0)
        if item.channel_counts:
            item.row.main_channel = max(item.channel_counts.items(), key=lambda pair: pair[1])[0]
            item.row.main_channel_label = CHANNEL_LABEL[item.row.main_channel]
        item.row.average_response_minutes = item.average_response
    active.sort(key=lambda item: item.row.last_message_at or "", reverse=True)

    highlights: List[HighlightDTO] = []
    if active:
        busiest = max(active, key=lambda item: item.row.total_messages)
        highlights.append(HighlightDTO(
            id=f"{busiest.row.id}-busiest",
            title="Conversación más activa",
            description=(
                f"{busiest.row.counterpart_name} intercambió "
                f"{format_number(busiest.row.total_messages)} mensajes en el periodo."
            ),
            value=f"{format_number(busiest.row.total_messages)} mensajes",
            tone="info",
            meta=(
                f"Último mensaje {DateTimeUtils.relative_label(busiest.row.last_message_at, now)}"
                if busiest.row.last_message_at else None
            ),
        ))

    answered = [item for item in active if item.response_count > 0]
    if answered:
        fastest = min(answered, key=lambda item: item.average_response)
        highlights.append(HighlightDTO(
            id=f"{fastest.row.id}-fast",
            title="Respuesta más rápida",
            description=(
                f"{fastest.row.counterpart_name} recibió respuesta en "
                f"{format_duration_minutes(fastest.average_response)} de media."
            ),
            value=format_duration_minutes(fastest.average_response),
            tone="positive",
            meta=f"{format_number(fastest.response_count)} respuestas analizadas",
        ))

    waiting = [item for item in active if item.row.pending_responses > 0]
    if waiting:
        most_pending = max(waiting, key=lambda item: item.row.pending_responses)
        highlights.append(HighlightDTO(
            id=f"{most_pending.row.id}-pending",
            title="Atención a pendientes",
            description=(
                f"{most_pending.row.counterpart_name} espera "
                f"{format_number(most_pending.row.pending_responses)} respuesta(s)."
            ),
            value=f"{format_number(most_pending.row.pending_responses)} pendientes",
            tone="warning",
            meta=(
                f"Último {DateTimeUtils.relative_label(most_pending.row.last_message_at, now)}"
                if most_pending.row.last_message_at else None
            ),
        ))

    message_rows.sort(key=lambda row: row.sent_at or "", reverse=True)

    return MessagesDashboardDTO(
        generated_at=now.isoformat(),
        viewer_id=viewer_id,
        range=RangeDTO(
            days=range_days,
            since=start.isoformat(),
            until=end.isoformat(),
            label=f"{DateTimeUtils.day_label(start, tz)} – {DateTimeUtils.day_label(end, tz)}",
        ),
        totals=MessageTotalsDTO(
            inbound=totals[INBOUND],
            outbound=totals[OUTBOUND],
            internal=totals[INTERNAL],
            replies=totals["replies"],
            participants=len(participants),
            pending_responses=pending_total,
        ),
        hero=hero,
        timeline=list(timeline.values()),
        distribution=segments,
        highlights=highlights,
        conversations=[item.row for item in active],
        messages=message_rows,
    )
