"""Tests for disposition_router.services.router: the disposition cascade."""
from datetime import timedelta
from unittest.mock import patch

import pytest

from disposition_router.database import utcnow
from disposition_router.models.call_log import CallLog
from disposition_router.models.disposition_metric import DispositionMetric
from disposition_router.models.dnc import DncEntry
from disposition_router.models.lead import Lead
from disposition_router.models.pipeline import LeadPipelinePosition, LeadPipelineMove
from disposition_router.models.reachability_event import ReachabilityEvent
from disposition_router.services.errors import InvalidRequestError, LeadNotFoundError
from disposition_router.services.router import (
    DispositionRequest, process_disposition,
    ACTION_ADDED_TO_DNC, ACTION_REMOVED_EVERYWHERE, ACTION_SENTIMENT_DNC,
)

USER_ID = 'user-test-001'


@pytest.fixture(autouse=True)
def _capture_effects(sent_effects):
    return sent_effects


def _request(lead, **kwargs):
    return DispositionRequest(lead_id=lead.id, user_id=USER_ID, **kwargs)


def _fresh(db_session, model, ident):
    db_session.expire_all()
    return db_session.get(model, ident)


# ---------------------------------------------------------------------------
# DispositionRequest.from_payload
# ---------------------------------------------------------------------------

class TestFromPayload:

    def test_maps_camel_case_keys(self):
        req = DispositionRequest.from_payload({
            'leadId': 'l1', 'userId': 'u1', 'dispositionId': 'd1',
            'dispositionName': 'Hot Lead', 'callOutcome': 'answered',
            'transcript': 'hi', 'callId': 'c1', 'aiConfidence': '0.82', 'setBy': 'ai',
        })
        assert req.lead_id == 'l1'
        assert req.disposition_name == 'Hot Lead'
        assert req.call_id == 'c1'
        assert req.ai_confidence == pytest.approx(0.82)
        assert req.set_by == 'ai'

    def test_requires_lead_and_user(self):
        with pytest.raises(InvalidRequestError):
            DispositionRequest.from_payload({'userId': 'u1'})
        with pytest.raises(InvalidRequestError):
            DispositionRequest.from_payload({'leadId': 'l1'})

    def test_rejects_unknown_set_by(self):
        with pytest.raises(InvalidRequestError):
            DispositionRequest.from_payload({'leadId': 'l1', 'userId': 'u1', 'setBy': 'robot'})

    def test_rejects_non_numeric_confidence(self):
        with pytest.raises(InvalidRequestError):
            DispositionRequest.from_payload({'leadId': 'l1', 'userId': 'u1', 'aiConfidence': 'high'})


# ---------------------------------------------------------------------------
# Keyword triggers
# ---------------------------------------------------------------------------

class TestDncDisposition:
    """A DNC-keyword disposition adds the lead's phone to the DNC list."""

    def test_adds_to_dnc(self, db_session, make_lead):
        lead = make_lead()
        outcome = process_disposition(_request(lead, disposition_name='Do Not Call'))

        assert outcome.actions == [ACTION_ADDED_TO_DNC]
        fresh = _fresh(db_session, Lead, lead.id)
        assert fresh.status == 'dnc'
        assert fresh.do_not_call is True
        entry = db_session.query(DncEntry).one()
        assert entry.reason == 'Disposition: Do Not Call'
        assert entry.phone_number == lead.phone_number

    def test_repeat_call_keeps_one_entry(self, db_session, make_lead):
        lead = make_lead()
        process_disposition(_request(lead, disposition_name='DNC'))
        outcome = process_disposition(_request(lead, disposition_name='DNC'))

        assert outcome.actions == [ACTION_ADDED_TO_DNC]
        assert db_session.query(DncEntry).count() == 1
        rows = db_session.query(DispositionMetric).all()
        assert len(rows) == 2
        assert all(row.actions_triggered == [ACTION_ADDED_TO_DNC] for row in rows)

    def test_lead_without_phone_gets_no_entry(self, db_session, make_lead):
        lead = make_lead(phone_number='')
        outcome = process_disposition(_request(lead, disposition_name='DNC'))
        assert ACTION_ADDED_TO_DNC not in outcome.actions
        assert db_session.query(DncEntry).count() == 0


class TestRemoveEverywhere:
    """A remove-everywhere disposition ends every enrollment and queue row."""

    def test_removes_workflows_and_queues(self, db_session, make_lead, make_enrollment, make_queue_entry):
        lead = make_lead()
        enrollment = make_enrollment(lead)
        pending = make_queue_entry(lead, status='pending')
        done = make_queue_entry(lead, status='completed')

        outcome = process_disposition(_request(lead, disposition_name='Not Interested'))

        assert ACTION_REMOVED_EVERYWHERE in outcome.actions
        assert ACTION_ADDED_TO_DNC not in outcome.actions
        db_session.expire_all()
        assert db_session.get(Lead, lead.id).status == 'not_interested'
        assert enrollment.status == 'removed'
        assert enrollment.removal_reason == 'Disposition: Not Interested'
        assert pending.status == 'removed'
        assert done.status == 'completed'

    def test_status_is_normalized_name(self, db_session, make_lead):
        lead = make_lead()
        process_disposition(_request(lead, disposition_name='Wrong Number'))
        assert _fresh(db_session, Lead, lead.id).status == 'wrong_number'


class TestTranscriptSentiment:
    """A hostile phrase in the transcript forces DNC whatever the disposition."""

    def test_hostile_transcript_adds_to_dnc(self, db_session, make_lead):
        lead = make_lead()
        outcome = process_disposition(_request(
            lead, disposition_name='Voicemail', transcript='Lead: please STOP CALLING me',
        ))
        assert outcome.actions == [ACTION_SENTIMENT_DNC]
        assert db_session.query(DncEntry).one().reason == 'Negative sentiment detected in transcript'
        assert _fresh(db_session, Lead, lead.id).status == 'dnc'

    def test_dnc_name_and_hostile_transcript_keep_one_entry(self, db_session, make_lead):
        lead = make_lead()
        outcome = process_disposition(_request(
            lead, disposition_name='DNC', transcript='I will call my lawyer',
        ))
        assert outcome.actions == [ACTION_ADDED_TO_DNC, ACTION_SENTIMENT_DNC]
        assert db_session.query(DncEntry).count() == 1

    def test_neutral_outcome_changes_nothing(self, db_session, make_lead):
        lead = make_lead(status='contacted')
        outcome = process_disposition(_request(lead, disposition_name='Voicemail', transcript='call me later'))
        assert outcome.actions == []
        assert _fresh(db_session, Lead, lead.id).status == 'contacted'


# ---------------------------------------------------------------------------
# Auto-action rules
# ---------------------------------------------------------------------------

class TestAutoActions:

    def test_rules_run_in_priority_order(self, db_session, make_lead, make_disposition, make_rule, make_enrollment):
        lead = make_lead()
        disp = make_disposition('Follow Up')
        make_rule('schedule_callback', disposition_id=disp.id, priority=2, action_config={'delay_hours': 2})
        make_rule('remove_all_campaigns', disposition_id=disp.id, priority=1)
        make_enrollment(lead)

        outcome = process_disposition(_request(lead, disposition_id=disp.id, disposition_name='Follow Up'))

        assert outcome.actions[:2] == ['Executed: remove_all_campaigns', 'Executed: schedule_callback']
        assert outcome.auto_actions_count == 2
        assert _fresh(db_session, Lead, lead.id).status == 'callback'

    def test_matches_by_name_case_insensitively(self, make_lead, make_rule):
        lead = make_lead()
        make_rule('add_to_dnc', disposition_name='Callback Requested')
        outcome = process_disposition(_request(lead, disposition_name='callback requested'))
        assert outcome.actions == ['Executed: add_to_dnc']

    def test_inactive_and_foreign_rules_ignored(self, make_lead, make_rule):
        lead = make_lead()
        make_rule('add_to_dnc', disposition_name='Callback', active=False)
        make_rule('add_to_dnc', disposition_name='Callback', user_id='someone-else')
        outcome = process_disposition(_request(lead, disposition_name='Callback'))
        assert outcome.actions == []
        assert outcome.auto_actions_count == 0

    def test_unknown_rule_type_is_reported(self, make_lead, make_rule):
        lead = make_lead()
        make_rule('teleport', disposition_name='Callback')
        outcome = process_disposition(_request(lead, disposition_name='Callback'))
        assert outcome.actions == ['Skipped: teleport (unknown action)']

    def test_side_effects_dispatched_after_commit(self, make_lead, make_rule, sent_effects):
        lead = make_lead()
        make_rule('start_workflow', disposition_name='Interested',
                  action_config={'target_workflow_id': 'wf-nurture'})

        process_disposition(_request(lead, disposition_name='Interested'))

        sent_effects.assert_called_once()
        (effects,), _ = sent_effects.call_args
        assert [e.function for e in effects] == ['workflow-executor']
        assert effects[0].body['workflowId'] == 'wf-nurture'

    def test_no_dispatch_without_effects(self, make_lead, sent_effects):
        lead = make_lead()
        process_disposition(_request(lead, disposition_name='Voicemail'))
        sent_effects.assert_not_called()


# ---------------------------------------------------------------------------
# Pipeline auto-move
# ---------------------------------------------------------------------------

class TestPipelineAutoMove:

    def test_moves_to_board_named_by_stage(self, db_session, make_lead, make_disposition, make_board):
        lead = make_lead()
        disp = make_disposition('Hot Lead', pipeline_stage='hot_leads')
        board = make_board('hot_leads')

        outcome = process_disposition(_request(lead, disposition_id=disp.id, disposition_name='Hot Lead'))

        assert outcome.actions == ['Moved to pipeline stage: hot_leads']
        pos = db_session.query(LeadPipelinePosition).one()
        assert pos.pipeline_board_id == board.id
        assert pos.moved_by_user is False
        move = db_session.query(LeadPipelineMove).one()
        assert move.notes == 'Auto-moved by disposition: Hot Lead'

    def test_repeat_moves_keep_one_pointer_and_full_history(self, db_session, make_lead, make_disposition, make_board):
        lead = make_lead()
        hot = make_disposition('Hot Lead', pipeline_stage='hot_leads')
        follow = make_disposition('Follow Up', pipeline_stage='follow_up')
        make_board('hot_leads')
        make_board('follow_up')

        process_disposition(_request(lead, disposition_id=hot.id, disposition_name='Hot Lead'))
        process_disposition(_request(lead, disposition_id=follow.id, disposition_name='Follow Up'))

        assert db_session.query(LeadPipelinePosition).count() == 1
        assert db_session.query(LeadPipelineMove).count() == 2

    def test_missing_board_skips_move(self, db_session, make_lead, make_disposition):
        lead = make_lead()
        disp = make_disposition('Hot Lead', pipeline_stage='hot_leads')
        outcome = process_disposition(_request(lead, disposition_id=disp.id, disposition_name='Hot Lead'))
        assert outcome.actions == []
        assert db_session.query(LeadPipelinePosition).count() == 0

    def test_name_only_request_does_not_move(self, db_session, make_lead, make_board):
        lead = make_lead()
        make_board('hot_leads')
        process_disposition(_request(lead, disposition_name='Hot Lead'))
        assert db_session.query(LeadPipelinePosition).count() == 0


# ---------------------------------------------------------------------------
# Events + metrics
# ---------------------------------------------------------------------------

class TestEventsAndMetrics:

    def test_reachability_event_logged(self, db_session, make_lead):
        lead = make_lead()
        process_disposition(_request(lead, disposition_id='d-1', disposition_name='Voicemail',
                                     call_outcome='no_answer'))
        event = db_session.query(ReachabilityEvent).one()
        assert event.event_type == 'disposition_set'
        assert event.event_outcome == 'Voicemail'
        assert event.metadata_ == {'dispositionId': 'd-1', 'callOutcome': 'no_answer'}

    def test_metrics_row_captures_before_and_after(self, db_session, make_lead, make_disposition,
                                                   make_board, make_enrollment):
        lead = make_lead(status='contacted')
        make_enrollment(lead, workflow_id='wf-7', campaign_id='camp-7')
        disp = make_disposition('Do Not Call', pipeline_stage='dead')
        make_board('dead')
        call = CallLog(id='call-1', user_id=USER_ID, lead_id=lead.id, campaign_id='camp-call',
                       ended_at=utcnow() - timedelta(minutes=2))
        db_session.add(call)
        db_session.commit()

        process_disposition(_request(lead, disposition_id=disp.id, disposition_name='Do Not Call',
                                     call_id='call-1', transcript='hello'))

        row = db_session.query(DispositionMetric).one()
        assert row.previous_status == 'contacted'
        assert row.new_status == 'dnc'
        assert row.previous_pipeline_stage is None
        assert row.new_pipeline_stage == 'dead'
        assert row.workflow_id == 'wf-7'
        assert row.campaign_id == 'camp-call'
        assert 115 <= row.time_to_disposition_seconds <= 180
        assert row.set_by == 'manual'
        assert row.set_by_user_id == USER_ID
        assert row.actions_triggered == [ACTION_ADDED_TO_DNC, 'Moved to pipeline stage: dead']
        assert row.metadata_['had_transcript'] is True

    def test_ai_disposition_has_no_setting_user(self, db_session, make_lead):
        lead = make_lead()
        process_disposition(_request(lead, disposition_name='Voicemail', set_by='ai', ai_confidence=0.9))
        row = db_session.query(DispositionMetric).one()
        assert row.set_by == 'ai'
        assert row.set_by_user_id is None
        assert row.ai_confidence_score == pytest.approx(0.9)

    def test_campaign_falls_back_to_active_enrollment(self, db_session, make_lead, make_enrollment):
        lead = make_lead()
        make_enrollment(lead, workflow_id='wf-1', campaign_id='camp-enrolled')
        outcome = process_disposition(_request(lead, disposition_name='Voicemail'))
        assert outcome.campaign_id == 'camp-enrolled'
        assert outcome.time_to_disposition_seconds is None

    def test_metrics_failure_does_not_fail_cascade(self, db_session, make_lead):
        lead = make_lead()
        with patch('disposition_router.services.metrics.DispositionMetric', side_effect=RuntimeError('db down')):
            outcome = process_disposition(_request(lead, disposition_name='DNC'))

        assert outcome.actions == [ACTION_ADDED_TO_DNC]
        assert _fresh(db_session, Lead, lead.id).status == 'dnc'
        assert db_session.query(DispositionMetric).count() == 0


# ---------------------------------------------------------------------------
# Atomicity
# ---------------------------------------------------------------------------

class TestAtomicity:

    def test_unknown_lead_raises(self, db_session):
        with pytest.raises(LeadNotFoundError):
            process_disposition(DispositionRequest(lead_id='missing', user_id=USER_ID,
                                                   disposition_name='DNC'))
        assert db_session.query(DispositionMetric).count() == 0

    def test_failure_rolls_back_every_step(self, db_session, make_lead, make_enrollment, make_rule, sent_effects):
        lead = make_lead(status='contacted')
        enrollment = make_enrollment(lead)
        make_rule('start_workflow', disposition_name='Do Not Call - Remove Wrong Number',
                  action_config={'target_workflow_id': 'wf-x'})

        with patch('disposition_router.services.router.ReachabilityEvent', side_effect=RuntimeError('boom')):
            with pytest.raises(RuntimeError):
                process_disposition(_request(lead, disposition_name='Do Not Call - Remove Wrong Number'))

        db_session.expire_all()
        fresh = db_session.get(Lead, lead.id)
        assert fresh.status == 'contacted'
        assert not fresh.do_not_call
        assert enrollment.status == 'active'
        assert db_session.query(DncEntry).count() == 0
        assert db_session.query(DispositionMetric).count() == 0
        sent_effects.assert_not_called()
