"""
Centralized configuration: env vars and service constants.
"""
import os


# ── Logging ──────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = os.getenv('LOG_FORMAT', 'text')

# ── Redis ─────────────────────────────────────────────────────────────────────
REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

# ── PostgreSQL ────────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///local.db')

# ── Collaborator functions (workflow-executor, sms-messaging, ...) ───────────
FUNCTIONS_BASE_URL = os.getenv('FUNCTIONS_BASE_URL', 'http://localhost:54321/functions/v1')
FUNCTIONS_API_KEY = os.getenv('FUNCTIONS_API_KEY')
FUNCTIONS_TIMEOUT = float(os.getenv('FUNCTIONS_TIMEOUT', '15'))

# "inline" dispatches after commit inside the request, "queue" enqueues RQ jobs
SIDE_EFFECT_MODE = os.getenv('SIDE_EFFECT_MODE', 'inline')

# ── Auth ─────────────────────────────────────────────────────────────────────
ROUTER_API_KEY = os.getenv('ROUTER_API_KEY')

# ── Disposition triggers ─────────────────────────────────────────────────────
TRIGGER_CONFIG_PATH = os.getenv('TRIGGER_CONFIG_PATH')

# ── Auto-action defaults ─────────────────────────────────────────────────────
DEFAULT_CALLBACK_DELAY_HOURS = float(os.getenv('DEFAULT_CALLBACK_DELAY_HOURS', '24'))
DEFAULT_APPOINTMENT_MINUTES = int(os.getenv('DEFAULT_APPOINTMENT_MINUTES', '30'))
APPOINTMENT_TIMEZONE = os.getenv('APPOINTMENT_TIMEZONE', 'America/New_York')

# ── CORS ─────────────────────────────────────────────────────────────────────
CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
}

# ── Collaborator functions: name → breaker settings ─────────────────────────
FUNCTION_BREAKERS = {
    'workflow-executor':    {'failure_threshold': 5, 'reset_timeout': 60},
    'sms-messaging':        {'failure_threshold': 3, 'reset_timeout': 120},
    'calendar-integration': {'failure_threshold': 3, 'reset_timeout': 300},
}

# ── Status values ─────────────────────────────────────────────────────────────
WORKFLOW_ACTIVE = 'active'
WORKFLOW_REMOVED = 'removed'
QUEUE_OPEN_STATUSES = ['pending', 'scheduled']
QUEUE_REMOVED = 'removed'

SET_BY_VALUES = ['ai', 'manual', 'automation']

# ── Standard dispositions: seeded per user on request ───────────────────────
STANDARD_DISPOSITIONS = [
    {'name': 'Wrong Number',       'sentiment': 'negative', 'pipeline_stage': 'invalid_leads'},
    {'name': 'Not Interested',     'sentiment': 'negative', 'pipeline_stage': 'cold_leads'},
    {'name': 'Already Has Solar',  'sentiment': 'negative', 'pipeline_stage': 'not_qualified'},
    {'name': 'Potential Prospect', 'sentiment': 'neutral',  'pipeline_stage': 'prospects'},
    {'name': 'Hot Lead',           'sentiment': 'positive', 'pipeline_stage': 'hot_leads'},
    {'name': 'Follow Up',          'sentiment': 'neutral',  'pipeline_stage': 'follow_up'},
    {'name': 'Not Connected',      'sentiment': 'neutral',  'pipeline_stage': 'callbacks'},
    {'name': 'Voicemail',          'sentiment': 'neutral',  'pipeline_stage': 'follow_up'},
    {'name': 'Dropped Call',       'sentiment': 'neutral',  'pipeline_stage': 'callbacks'},
    {'name': 'Dial Tree Workflow', 'sentiment': 'neutral',  'pipeline_stage': 'in_progress'},
    {'name': 'Interested',         'sentiment': 'positive', 'pipeline_stage': 'hot_leads'},
    {'name': 'Appointment Booked', 'sentiment': 'positive', 'pipeline_stage': 'appointments'},
]

SENTIMENT_COLORS = {
    'positive': '#10B981',
    'negative': '#EF4444',
    'neutral':  '#F59E0B',
}
