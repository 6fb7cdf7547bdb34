"""End-to-end scenarios through the gateway and workflow.

Includes the conflict-then-override round trip and concurrent submissions
racing for the same slot.
"""

import threading
from datetime import date

import pytest

from hearing_scheduler.control.gateway import Accepted, Rejected, SchedulingGateway
from hearing_scheduler.control.overrides import export_audit_trail, load_audit_trail
from hearing_scheduler.control.workflow import OverrideResolutionWorkflow, ResolutionState
from hearing_scheduler.core.conflict import ConflictType, Severity
from hearing_scheduler.core.detector import ConflictDetector
from hearing_scheduler.data.clients import InMemoryClientRegistry
from hearing_scheduler.data.file_store import FileHearingStore
from hearing_scheduler.data.schedule_io import load_schedule_csv
from hearing_scheduler.data.store import InMemoryHearingStore

REASON = "client-requested despite conflict"


class SlowDetector(ConflictDetector):
    """Detector that stalls inside the commit transaction to widen the race window."""

    def __init__(self, barrier: threading.Barrier):
        super().__init__()
        self.barrier = barrier

    def detect(self, candidate, existing):
        existing = list(existing)
        try:
            self.barrier.wait(timeout=0.5)
        except threading.BrokenBarrierError:
            pass
        return super().detect(candidate, existing)


@pytest.mark.integration
class TestOverrideRoundTrip:
    def test_conflict_then_override(self, make_hearing, form, fixed_now, tmp_path):
        store = InMemoryHearingStore([make_hearing("H-OLD", "10:00", case_number="OS-2025-001")])
        gateway = SchedulingGateway(store, clock=lambda: fixed_now)

        first = gateway.submit_payload(form, "advocate-7")

        assert isinstance(first, Rejected)
        assert len(first.conflicts) == 1
        assert store.get_hearing("H-NEW") is None

        form.update(override=True, override_reason=REASON)
        second = gateway.submit_payload(form, "advocate-7")

        assert isinstance(second, Accepted)
        record = store.get_override(second.override_record.override_id)
        assert record.reason == REASON
        assert record.conflicts == first.conflicts
        assert record.conflicting_hearing_ids == ["H-OLD"]

        path = export_audit_trail(store.override_records(), tmp_path / "audit.json")
        assert load_audit_trail(path) == [record]

    def test_workflow_session(self, make_hearing, form, fixed_now):
        store = InMemoryHearingStore([
            make_hearing("H-OLD", "10:00", client_name="Mehta Exports", hearing_date=date(2025, 4, 1)),
            make_hearing("H-OTHER", "11:00"),
        ])
        gateway = SchedulingGateway(
            store, client_registry=InMemoryClientRegistry(["Mehta Exports"]), clock=lambda: fixed_now
        )
        workflow = OverrideResolutionWorkflow(gateway, actor_id="advocate-7", form=form)

        assert workflow.submit() == ResolutionState.CONFLICT_PRESENTED
        assert {c.conflict_type for c in workflow.conflicts} == {
            ConflictType.TIME_OVERLAP,
            ConflictType.CLIENT_DOUBLE_BOOKING,
        }

        workflow.edit_time()
        workflow.set_time("15:30")
        assert workflow.resubmit() == ResolutionState.CONFLICT_PRESENTED
        assert [c.conflict_type for c in workflow.conflicts] == [ConflictType.CLIENT_DOUBLE_BOOKING]

        assert workflow.override(REASON) == ResolutionState.ACCEPTED
        assert store.get_hearing("H-NEW").hearing_time.hour == 15
        assert len(store.overrides_for("H-NEW")) == 1


@pytest.mark.integration
@pytest.mark.concurrency
class TestConcurrentSubmissions:
    def test_only_one_of_two_overlapping_hearings_commits(self, make_hearing, fixed_now):
        barrier = threading.Barrier(2)
        store = InMemoryHearingStore()
        gateway = SchedulingGateway(store, detector=SlowDetector(barrier), clock=lambda: fixed_now)
        requests = [
            gateway.parse_request({
                "hearing_id": hearing_id,
                "case_number": f"OS-{hearing_id}",
                "client_name": f"Client {hearing_id}",
                "court_name": "City Civil Court",
                "hearing_date": "2025-03-14",
                "hearing_time": at,
            })
            for hearing_id, at in (("P", "10:00"), ("Q", "10:20"))
        ]
        results = {}

        def worker(request):
            results[request.hearing.hearing_id] = gateway.submit(request, "advocate-7")

        threads = [threading.Thread(target=worker, args=(r,)) for r in requests]
        for t in threads:
            t.start()
        for t in threads:
            t.join(10)

        accepted = [r for r in results.values() if r.accepted]
        rejected = [r for r in results.values() if not r.accepted]
        assert len(accepted) == 1
        assert len(rejected) == 1
        assert rejected[0].conflicts[0].severity == Severity.HIGH
        assert len(store) == 1

    def test_disjoint_hearings_both_commit(self, fixed_now):
        store = InMemoryHearingStore()
        gateway = SchedulingGateway(store, clock=lambda: fixed_now)
        payloads = [
            {
                "hearing_id": f"H{i}",
                "case_number": f"OS-{i}",
                "client_name": f"Client {i}",
                "court_name": "City Civil Court",
                "hearing_date": f"2025-03-{10 + i:02d}",
            }
            for i in range(8)
        ]

        threads = [
            threading.Thread(target=gateway.submit_payload, args=(p, "advocate-7")) for p in payloads
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(10)

        assert len(store) == 8

    def test_same_client_on_different_dates_commits_once(self, fixed_now):
        barrier = threading.Barrier(2)
        store = InMemoryHearingStore()
        gateway = SchedulingGateway(store, detector=SlowDetector(barrier), clock=lambda: fixed_now)
        requests = [
            gateway.parse_request({
                "hearing_id": hearing_id,
                "case_number": f"OS-{hearing_id}",
                "client_name": "Sharma Textiles",
                "court_name": "City Civil Court",
                "hearing_date": on_date,
                "hearing_time": "10:00",
            })
            for hearing_id, on_date in (("P", "2025-03-14"), ("Q", "2025-04-02"))
        ]
        results = {}

        def worker(request):
            results[request.hearing.hearing_id] = gateway.submit(request, "advocate-7")

        threads = [threading.Thread(target=worker, args=(r,)) for r in requests]
        for t in threads:
            t.start()
        for t in threads:
            t.join(10)

        accepted = [r for r in results.values() if r.accepted]
        rejected = [r for r in results.values() if not r.accepted]
        assert len(accepted) == 1
        assert len(rejected) == 1
        assert [c.conflict_type for c in rejected[0].conflicts] == [ConflictType.CLIENT_DOUBLE_BOOKING]
        assert len(store) == 1

    def test_separate_file_stores_commit_once(self, tmp_path, fixed_now):
        schedule = tmp_path / "schedule.csv"
        audit = tmp_path / "override_audit.json"
        barrier = threading.Barrier(2)
        payloads = [
            {
                "hearing_id": hearing_id,
                "case_number": f"OS-{hearing_id}",
                "client_name": f"Client {hearing_id}",
                "court_name": "City Civil Court",
                "hearing_date": "2025-03-14",
                "hearing_time": at,
            }
            for hearing_id, at in (("P", "10:00"), ("Q", "10:20"))
        ]
        results = {}

        def worker(payload):
            gateway = SchedulingGateway(
                FileHearingStore(schedule, audit),
                detector=SlowDetector(barrier),
                clock=lambda: fixed_now,
            )
            results[payload["hearing_id"]] = gateway.submit_payload(payload, "advocate-7")

        threads = [threading.Thread(target=worker, args=(p,)) for p in payloads]
        for t in threads:
            t.start()
        for t in threads:
            t.join(10)

        assert sorted(r.accepted for r in results.values()) == [False, True]
        winner = next(r for r in results.values() if r.accepted)
        assert [h.hearing_id for h in load_schedule_csv(schedule)] == [winner.hearing.hearing_id]
