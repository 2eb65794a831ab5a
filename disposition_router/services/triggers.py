"""
Keyword trigger table: which dispositions force DNC or removal everywhere,
and which transcript phrases count as hostile.

Loaded from YAML (TRIGGER_CONFIG_PATH, else the bundled trigger_config.yaml)
with an in-memory cache and a hardcoded fallback if the file is missing or
malformed.
"""
import logging
import os
import re
from enum import Enum
from typing import Dict, List, Optional, Set

import yaml

from disposition_router.config import TRIGGER_CONFIG_PATH

logger = logging.getLogger('services.triggers')


class TriggerKind(str, Enum):
    DNC = 'dnc'
    REMOVE_ALL = 'remove_all'
    NEGATIVE_SENTIMENT = 'negative_sentiment'


_trigger_config = None

_NON_ALNUM = re.compile(r'[^a-z0-9]')


def _default_config():
    """Hardcoded fallback if YAML is missing."""
    return {
        'version': 'default',
        'triggers': {
            'dnc': [
                'dnc', 'do_not_call', 'stop', 'remove',
                'threatening', 'rude', 'hostile', 'abusive',
            ],
            'remove_all': [
                'not_interested', 'wrong_number', 'already_has_solar', 'already_has_service',
                'deceased', 'business_closed', 'invalid_number', 'disconnected',
            ],
            'negative_sentiment': [
                'stop calling', "don't call again", 'leave me alone',
                'harassment', 'sue you', 'lawyer', 'block you',
                'f*** you', 'go to hell', 'threatening',
            ],
        },
    }


def load_trigger_config() -> dict:
    """Load the trigger table from YAML, with in-memory cache and hardcoded fallback."""
    global _trigger_config
    if _trigger_config is not None:
        return _trigger_config

    config_path = TRIGGER_CONFIG_PATH or os.path.join(os.path.dirname(__file__), 'trigger_config.yaml')
    try:
        with open(config_path, 'r') as f:
            loaded = yaml.safe_load(f)
        if not isinstance(loaded, dict) or not isinstance(loaded.get('triggers'), dict):
            raise ValueError('missing "triggers" mapping')
        _trigger_config = loaded
        logger.info("Trigger table loaded from YAML (version=%s)", loaded.get('version', '?'))
    except Exception as e:
        logger.warning("Trigger YAML unusable (%s), using defaults", e)
        _trigger_config = _default_config()

    return _trigger_config


def reset_cache():
    """Reset the in-memory cache (useful for testing)."""
    global _trigger_config
    _trigger_config = None


def get_keywords(kind: TriggerKind) -> List[str]:
    triggers = load_trigger_config().get('triggers', {})
    return [str(k).lower() for k in (triggers.get(kind.value) or [])]


def normalize_disposition(name: Optional[str]) -> str:
    """'Not Interested' → 'not_interested'. None/empty → ''."""
    if not name:
        return ''
    return _NON_ALNUM.sub('_', name.lower())


def classify_disposition(normalized: str) -> Set[TriggerKind]:
    """Return the name-based trigger kinds (DNC, REMOVE_ALL) a normalized name hits."""
    if not normalized:
        return set()
    hits = set()
    for kind in (TriggerKind.DNC, TriggerKind.REMOVE_ALL):
        if any(keyword in normalized for keyword in get_keywords(kind)):
            hits.add(kind)
    return hits


def find_negative_phrase(transcript: Optional[str]) -> Optional[str]:
    """First hostile phrase found in the transcript (case-insensitive), else None."""
    if not transcript:
        return None
    lowered = transcript.lower()
    for phrase in get_keywords(TriggerKind.NEGATIVE_SENTIMENT):
        if phrase in lowered:
            return phrase
    return None


def describe_triggers() -> Dict[str, List[str]]:
    """The active table, keyed by trigger kind."""
    return {kind.value: get_keywords(kind) for kind in TriggerKind}
