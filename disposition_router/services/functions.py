"""
Collaborator function client + deferred side effects.

The cascade never calls a collaborator directly. Auto-actions append a
SideEffect to the pending list; dispatch_side_effects() runs once the
database transaction has committed, so a rolled-back cascade never leaves
an SMS sent or a workflow started.

Dispatch is best-effort: each effect is attempted independently, failures are
logged and reported back, never raised.
"""
import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List

import requests

from disposition_router.config import (
    FUNCTIONS_BASE_URL, FUNCTIONS_API_KEY, FUNCTIONS_TIMEOUT, SIDE_EFFECT_MODE,
)
from disposition_router.database import as_utc
from disposition_router.services.circuit_breaker import get_breaker
from disposition_router.services.errors import FunctionInvocationError

logger = logging.getLogger('services.functions')

WORKFLOW_EXECUTOR = 'workflow-executor'
SMS_MESSAGING = 'sms-messaging'
CALENDAR_INTEGRATION = 'calendar-integration'


@dataclass
class SideEffect:
    """One pending collaborator call: function name + JSON body."""
    function: str
    body: Dict[str, Any] = field(default_factory=dict)
    lead_id: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def invoke_function(name: str, body: Dict[str, Any]) -> Dict[str, Any]:
    """POST a JSON body to a collaborator function through its circuit breaker."""
    url = f"{FUNCTIONS_BASE_URL.rstrip('/')}/{name}"
    headers = {'Content-Type': 'application/json'}
    if FUNCTIONS_API_KEY:
        headers['Authorization'] = f'Bearer {FUNCTIONS_API_KEY}'

    cb = get_breaker(name)
    try:
        response = cb.call(_post, name, url, body, headers)
    except requests.exceptions.RequestException as e:
        raise FunctionInvocationError(name, str(e)) from e

    try:
        return response.json()
    except ValueError:
        return {}


def _post(name, url, body, headers):
    response = requests.post(url, json=body, headers=headers, timeout=FUNCTIONS_TIMEOUT)
    if response.status_code >= 400:
        raise FunctionInvocationError(name, response.text[:200], status_code=response.status_code)
    return response


# ── Side-effect builders ─────────────────────────────────────────────────────

def start_workflow_effect(user_id, lead_id, workflow_id, campaign_id=None) -> SideEffect:
    return SideEffect(WORKFLOW_EXECUTOR, {
        'action': 'start_workflow',
        'userId': user_id,
        'leadId': lead_id,
        'workflowId': workflow_id,
        'campaignId': campaign_id,
    }, lead_id=lead_id)


def send_sms_effect(to, from_number, message, lead_id) -> SideEffect:
    return SideEffect(SMS_MESSAGING, {
        'action': 'send_sms',
        'to': to,
        'from': from_number,
        'body': message,
        'lead_id': lead_id,
    }, lead_id=lead_id)


def book_appointment_effect(start_time, duration_minutes, attendee_name,
                            attendee_email, title, lead_id) -> SideEffect:
    start_time = as_utc(start_time)
    return SideEffect(CALENDAR_INTEGRATION, {
        'action': 'book_appointment',
        'date': start_time.strftime('%Y-%m-%d'),
        'time': start_time.strftime('%H:%M'),
        'duration_minutes': duration_minutes,
        'attendee_name': attendee_name,
        'attendee_email': attendee_email,
        'title': title,
    }, lead_id=lead_id)


# ── Dispatch ─────────────────────────────────────────────────────────────────

_queue = None


def _get_queue():
    global _queue
    if _queue is None:
        from rq import Queue
        from disposition_router.extensions import queue_connection
        _queue = Queue('side_effects', connection=queue_connection)
    return _queue


def run_side_effect(effect: Dict[str, Any]) -> Dict[str, Any]:
    """RQ job entry point: also used for inline dispatch."""
    return invoke_function(effect['function'], effect.get('body') or {})


def dispatch_side_effects(effects: List[SideEffect], mode: str = None) -> Dict[str, int]:
    """
    Send every pending effect, either inline or as RQ jobs.

    Returns {'sent': n, 'failed': n}; in queue mode 'sent' counts enqueued jobs.
    """
    mode = mode or SIDE_EFFECT_MODE
    sent = failed = 0

    for effect in effects:
        try:
            if mode == 'queue':
                _get_queue().enqueue(run_side_effect, effect.to_dict())
            else:
                run_side_effect(effect.to_dict())
            sent += 1
            logger.info("Dispatched %s for lead %s", effect.function, effect.lead_id,
                        extra={'function': effect.function, 'lead_id': effect.lead_id})
        except Exception as e:
            failed += 1
            logger.error("Side effect %s failed for lead %s: %s", effect.function, effect.lead_id, e,
                         extra={'function': effect.function, 'lead_id': effect.lead_id})

    return {'sent': sent, 'failed': failed}
