"""
Tests de los constructores de los dashboards del PT y de administracion.
"""
from datetime import date, datetime, timedelta, timezone

from fitdash.application.services.admin_dashboard_builder import (
    approval_state,
    build_admin_dashboard,
)
from fitdash.application.services.trainer_dashboard_builder import build_trainer_dashboard
from fitdash.domain.entities.dashboard_sources import (
    AccountApprovalRecord,
    AdminDashboardSource,
    PlanRecord,
    SessionRecord,
    TrainerApprovalRecord,
    TrainerClientRecord,
    TrainerDashboardSource,
)
from fitdash.shared.constants.status_constants import ApprovalStatus


NOW = datetime(2025, 3, 5, 10, 0, tzinfo=timezone.utc)


def _trainer_source() -> TrainerDashboardSource:
    return TrainerDashboardSource(
        now=NOW,
        trainer_id="pt-1",
        trainer_name="Rita",
        clients=[
            TrainerClientRecord(id="c-1", name="Ana", email="ana@fit.pt"),
            TrainerClientRecord(id="c-2", name="Bruno"),
        ],
        sessions=[
            SessionRecord(id="s-1", client_id="c-1", scheduled_at=datetime(2025, 3, 4, 9, 0, tzinfo=timezone.utc), status="completed"),
            SessionRecord(id="s-2", client_id="c-1", scheduled_at=datetime(2025, 3, 6, 9, 0, tzinfo=timezone.utc), status="scheduled"),
            SessionRecord(id="s-3", client_id="c-2", scheduled_at=datetime(2025, 2, 26, 9, 0, tzinfo=timezone.utc), status="cancelled"),
            SessionRecord(id="s-4", client_id="c-9", scheduled_at=datetime(2025, 3, 5, 15, 0, tzinfo=timezone.utc), status="pending"),
        ],
        plans=[
            PlanRecord(id="p-1", status="ACTIVE", start_date=date(2025, 2, 1)),
            PlanRecord(id="p-2", status="DRAFT"),
        ],
        approvals=[
            TrainerApprovalRecord(id="r-1", client_name="Ana", status="pending", requested_at=NOW - timedelta(hours=2)),
            TrainerApprovalRecord(id="r-2", client_name="Bruno", status="approved", requested_at=NOW - timedelta(days=2)),
        ],
    )


def test_trainer_empty_and_populated_have_same_shape():
    empty = build_trainer_dashboard(TrainerDashboardSource.empty(NOW, "pt-1")).model_dump()
    full = build_trainer_dashboard(_trainer_source()).model_dump()

    assert set(empty.keys()) == set(full.keys())
    assert [item["key"] for item in empty["hero"]] == [item["key"] for item in full["hero"]]
    assert len(empty["timeline"]) == len(full["timeline"]) == 14
    assert len(empty["agenda"]) == len(full["agenda"]) == 7


def test_trainer_empty_dashboard_is_all_good():
    dashboard = build_trainer_dashboard(TrainerDashboardSource.empty(NOW))

    assert [item.id for item in dashboard.highlights] == ["all-good"]
    assert dashboard.upcoming == []
    assert dashboard.approvals.pending == 0


def test_trainer_hero_metrics():
    hero = {item.key: item for item in build_trainer_dashboard(_trainer_source()).hero}

    assert hero["clients"].value == "2"
    assert hero["sessions-week"].value == "3"
    assert hero["sessions-week"].trend == "+2"
    assert hero["sessions-week"].tone == "neutral"
    assert hero["active-plans"].value == "1"
    assert hero["approvals"].value == "1"
    assert hero["approvals"].tone == "warning"
    assert hero["approvals"].href == "/dashboard/pt/reschedules"


def test_trainer_upcoming_and_agenda():
    dashboard = build_trainer_dashboard(_trainer_source())

    assert [row.id for row in dashboard.upcoming] == ["s-4", "s-2"]
    assert dashboard.upcoming[0].client_name == "Cliente"
    assert dashboard.upcoming[0].status == "Pendiente"
    assert dashboard.upcoming[1].status == "Confirmada"
    assert dashboard.agenda[0].total == 1
    assert dashboard.agenda[1].sessions[0].id == "s-2"


def test_trainer_client_snapshots_and_highlights():
    dashboard = build_trainer_dashboard(_trainer_source())

    assert [client.id for client in dashboard.clients] == ["c-1", "c-2"]
    ana, bruno = dashboard.clients
    assert (ana.upcoming, ana.completed, ana.tone) == (1, 1, "positive")
    assert (bruno.upcoming, bruno.completed, bruno.tone) == (0, 0, "warning")
    assert bruno.next_session_label == "Sin agendar"

    ids = [item.id for item in dashboard.highlights]
    assert ids == ["pending-approvals", "no-upcoming", "top-client"]
    assert dashboard.highlights[2].title == "Ana es el cliente más activo"
    assert [item.status for item in dashboard.approvals.recent] == ["Pendiente", "Aprobado"]


def _admin_source() -> AdminDashboardSource:
    return AdminDashboardSource(
        now=NOW,
        approvals=[
            AccountApprovalRecord(id="a-1", status="PENDING", name="Old", requested_at=NOW - timedelta(hours=72)),
            AccountApprovalRecord(id="a-2", status="PENDING", name="New", requested_at=NOW - timedelta(hours=2)),
            AccountApprovalRecord(
                id="a-3", status="ACTIVE", requested_at=NOW - timedelta(hours=30),
                decided_at=NOW - timedelta(hours=20), reviewer_id="r-1", reviewer_name="Marta",
            ),
            AccountApprovalRecord(
                id="a-4", status="SUSPENDED", requested_at=NOW - timedelta(days=5),
                decided_at=NOW - timedelta(days=3), reviewer_id="r-1", reviewer_name="Marta",
            ),
            AccountApprovalRecord(
                id="a-5", status="ACTIVE", requested_at=NOW - timedelta(days=10),
                decided_at=NOW - timedelta(days=8), reviewer_id="r-2",
            ),
        ],
        user_counts={"PT": {"ACTIVE": 2}, "CLIENT": {"PENDING": 2, "ACTIVE": 2}, "OWNER": {"ACTIVE": 1}},
    )


def test_approval_state_reads_account_statuses():
    assert approval_state("PENDING") is ApprovalStatus.PENDING
    assert approval_state("active") is ApprovalStatus.APPROVED
    assert approval_state("SUSPENDED") is ApprovalStatus.REJECTED
    assert approval_state("denied") is ApprovalStatus.REJECTED


def test_admin_empty_and_populated_have_same_shape():
    empty = build_admin_dashboard(AdminDashboardSource.empty(NOW)).model_dump()
    full = build_admin_dashboard(_admin_source()).model_dump()

    assert set(empty.keys()) == set(full.keys())
    assert [item["key"] for item in empty["hero"]] == [item["key"] for item in full["hero"]]
    assert len(empty["timeline"]) == len(full["timeline"]) == 14
    assert empty["user_counts"]["ADMIN"] == {"PENDING": 0, "ACTIVE": 0, "SUSPENDED": 0}


def test_admin_empty_dashboard_values():
    dashboard = build_admin_dashboard(AdminDashboardSource.empty(NOW))
    hero = {item.key: item for item in dashboard.hero}

    assert dashboard.sample_size == 0
    assert hero["approvals-pending"].value == "0"
    assert hero["approvals-rate"].value == "—"
    assert hero["approvals-sla"].tone == "danger"
    assert [item.id for item in dashboard.highlights] == ["backlog-ok", "no-approvals"]


def test_admin_dashboard_metrics():
    dashboard = build_admin_dashboard(_admin_source())
    hero = {item.key: item for item in dashboard.hero}

    assert dashboard.sample_size == 5
    assert hero["approvals-pending"].value == "2"
    assert hero["approvals-pending"].hint == "1 con más de 48h"
    assert hero["approvals-pending"].tone == "warning"
    assert hero["approvals-rate"].value == "66,7%"
    assert hero["approvals-sla"].value == "35,3h"
    assert hero["approvals-sla"].tone == "warning"
    assert hero["approvals-week"].value == "1"

    assert dashboard.sla.average_hours == 35.3
    assert dashboard.sla.percentile90_hours == 48.0
    assert (dashboard.sla.within_24h, dashboard.sla.breached) == (1, 2)

    assert [row.id for row in dashboard.backlog] == ["a-1", "a-2"]
    assert dashboard.backlog[0].waiting_label == "72h"

    assert dashboard.reviewers[0].name == "Marta"
    assert dashboard.reviewers[0].approvals == 1
    assert dashboard.reviewers[1].name == "Revisor r-2"

    assert dashboard.highlights[0].id == "backlog-alert"
    assert len(dashboard.highlights) <= 4


def test_admin_user_counts_keep_canonical_keys_only():
    counts = build_admin_dashboard(_admin_source()).user_counts

    assert set(counts.keys()) == {"ADMIN", "PT", "CLIENT"}
    assert counts["PT"]["ACTIVE"] == 2
    assert counts["CLIENT"] == {"PENDING": 2, "ACTIVE": 2, "SUSPENDED": 0}
