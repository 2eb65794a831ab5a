#!/usr/bin/env python3
"""
Seed demo data for exercising the disposition router locally.

Creates one demo user with:
  1. The standard disposition set (via the catalog service)
  2. One pipeline board per distinct pipeline_stage
  3. Leads enrolled in an active workflow + pending dialing-queue rows
  4. A finished call per lead, an active sending number, and one
     auto-action rule ("Follow Up" → schedule_callback in 48h)

Usage:
    python scripts/seed_test_data.py          # seed everything
    python scripts/seed_test_data.py --clear  # wipe seeded data first

Requires: DATABASE_URL set (or defaults to sqlite:///local.db).
"""
import sys
import os
import argparse
from datetime import timedelta

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from disposition_router.config import STANDARD_DISPOSITIONS
from disposition_router.database import get_session, engine, Base, import_models, utcnow
from disposition_router.services import catalog

import_models()

from disposition_router.models.call_log import CallLog
from disposition_router.models.disposition import Disposition, DispositionAutoAction
from disposition_router.models.dnc import DncEntry
from disposition_router.models.lead import Lead
from disposition_router.models.phone_number import PhoneNumber
from disposition_router.models.pipeline import PipelineBoard, LeadPipelinePosition, LeadPipelineMove
from disposition_router.models.reachability_event import ReachabilityEvent
from disposition_router.models.disposition_metric import DispositionMetric
from disposition_router.models.appointment import CalendarAppointment
from disposition_router.models.workflow import LeadWorkflowProgress, DialingQueueEntry


DEMO_USER = 'seed-user-0001'
DEMO_CAMPAIGN = 'seed-campaign-0001'
DEMO_WORKFLOW = 'seed-workflow-0001'

LEADS = [
    {'id': 'seed-lead-0001', 'first_name': 'Dana',   'last_name': 'Whitfield', 'phone': '+15550100001', 'email': 'dana@example.com'},
    {'id': 'seed-lead-0002', 'first_name': 'Marcus', 'last_name': 'Ortega',    'phone': '+15550100002', 'email': 'marcus@example.com'},
    {'id': 'seed-lead-0003', 'first_name': 'Priya',  'last_name': 'Raman',     'phone': '+15550100003', 'email': None},
    {'id': 'seed-lead-0004', 'first_name': 'Tom',    'last_name': 'Becker',    'phone': '+15550100004', 'email': 'tom@example.com'},
]

# Tables keyed by user_id, cleared child-first
USER_TABLES = [
    DispositionMetric, ReachabilityEvent, CalendarAppointment, LeadPipelineMove,
    LeadPipelinePosition, PipelineBoard, DispositionAutoAction, Disposition,
    DncEntry, LeadWorkflowProgress, CallLog, PhoneNumber,
]


def clear_seeded(session):
    """Delete everything the seed created."""
    lead_ids = [lead['id'] for lead in LEADS]
    session.query(DialingQueueEntry).filter(DialingQueueEntry.lead_id.in_(lead_ids)).delete(
        synchronize_session=False)
    for model in USER_TABLES:
        session.query(model).filter(model.user_id == DEMO_USER).delete(synchronize_session=False)
    session.query(Lead).filter(Lead.id.in_(lead_ids)).delete(synchronize_session=False)
    session.commit()
    print('  Cleared seeded data')


def seed_boards(session):
    stages = []
    for d in STANDARD_DISPOSITIONS:
        if d['pipeline_stage'] not in stages:
            stages.append(d['pipeline_stage'])
    for position, stage in enumerate(stages):
        session.add(PipelineBoard(user_id=DEMO_USER, name=stage, position=position))
    session.commit()
    print(f'  [2] Pipeline boards:  {len(stages)}')


def seed_leads(session):
    now = utcnow()
    for i, row in enumerate(LEADS):
        session.add(Lead(
            id=row['id'],
            user_id=DEMO_USER,
            phone_number=row['phone'],
            first_name=row['first_name'],
            last_name=row['last_name'],
            email=row['email'],
            status='contacted',
        ))
        session.add(LeadWorkflowProgress(
            user_id=DEMO_USER,
            lead_id=row['id'],
            workflow_id=DEMO_WORKFLOW,
            campaign_id=DEMO_CAMPAIGN,
            status='active',
        ))
        session.add(DialingQueueEntry(
            campaign_id=DEMO_CAMPAIGN,
            lead_id=row['id'],
            status='pending',
            scheduled_at=now + timedelta(hours=1),
        ))
        session.add(CallLog(
            id=f'seed-call-{i + 1:04d}',
            user_id=DEMO_USER,
            lead_id=row['id'],
            campaign_id=DEMO_CAMPAIGN,
            phone_number=row['phone'],
            outcome='answered',
            duration_seconds=95,
            started_at=now - timedelta(minutes=5),
            ended_at=now - timedelta(minutes=3),
        ))
    session.add(PhoneNumber(user_id=DEMO_USER, number='+15550199999', status='active'))
    session.commit()
    print(f'  [3] Leads:            {len(LEADS)} (with workflow, queue and call rows)')


def seed_rules(session):
    follow_up = session.query(Disposition).filter_by(user_id=DEMO_USER, name='Follow Up').first()
    catalog.create_auto_action(DEMO_USER, {
        'disposition_id': follow_up.id if follow_up else None,
        'disposition_name': 'Follow Up',
        'action_type': 'schedule_callback',
        'action_config': {'delay_hours': 48},
        'priority': 1,
    })
    print('  [4] Auto-action rule: Follow Up → schedule_callback (48h)')


def main():
    parser = argparse.ArgumentParser(description='Seed disposition-router demo data')
    parser.add_argument('--clear', action='store_true', help='Delete seeded data before seeding')
    args = parser.parse_args()

    Base.metadata.create_all(engine)
    session = get_session()
    try:
        if args.clear:
            clear_seeded(session)

        created = catalog.insert_default_dispositions(DEMO_USER)
        print(f'  [1] Dispositions:     {len(created)} created')
        seed_boards(session)
        seed_leads(session)
        seed_rules(session)
    finally:
        session.close()

    print(f'\nDone. Demo user: {DEMO_USER}')
    print('Try:')
    print('  curl -X POST localhost:8080/disposition-router -H "Content-Type: application/json" \\')
    print(f'    -d \'{{"action": "process_disposition", "leadId": "{LEADS[0]["id"]}", '
          f'"userId": "{DEMO_USER}", "dispositionName": "Not Interested", "callId": "seed-call-0001"}}\'')


if __name__ == '__main__':
    main()
